# accounting/services/document_totals.py

"""
DOCUMENT TOTALS + POSTING (SALE / PURCHASE)

recalculate_totals()
- runs the discount/tax calculator over a document's items and stores the
  rounded snapshots on items + header

confirm_document()      draft -> confirmed
- freezes totals and posts the document's journal entry:
    sale      Dr receivable (total) / Cr revenue (after discounts) / Cr output tax
    purchase  Dr inventory (after discounts) / Dr input tax / Cr payable (total)

cancel_document()       confirmed -> cancelled
- reverses that entry; refused while posted payments still settle the document

Works for any header exposing `items`, `tax_percent` and the
subtotal/discountN/total/tax columns (Sale and Purchase share that shape).
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction

from accounting.models.journal import JournalEntry
from accounting.services.account_resolver import (
    get_accounts_payable_account,
    get_accounts_receivable_account,
    get_input_tax_account,
    get_inventory_account,
    get_output_tax_account,
    get_sales_revenue_account,
)
from accounting.services.discount_tax import MAX_DISCOUNT_LEVELS, calculate_items
from accounting.services.exceptions import PreconditionError
from accounting.services.journal_builder import (
    PURCHASE,
    SALE,
    DocumentDescriptor,
    build_journal_postings,
)
from accounting.services.journal_entry_service import (
    create_journal_entry,
    reverse_journal_entry,
)
from purchases.models import Purchase
from sales.models import Sale

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

HEADER_FIELDS = [
    "subtotal_amount",
    *[f"discount{i}_amount" for i in range(1, MAX_DISCOUNT_LEVELS + 1)],
    "total_after_discounts",
    "tax_amount",
    "total_amount",
]


def _q2(v) -> Decimal:
    return Decimal(v).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _is_sale(document) -> bool:
    return isinstance(document, Sale)


def _number(document) -> str:
    return document.sale_number if _is_sale(document) else document.purchase_number


def _document_date(document) -> date:
    return document.sale_date if _is_sale(document) else document.purchase_date


def _descriptor_label(document) -> str:
    return f"{'Sale' if _is_sale(document) else 'Purchase'} {_number(document)}"


def _lock(document):
    model = Sale if _is_sale(document) else Purchase
    return model.objects.select_for_update().get(pk=document.pk)


@transaction.atomic
def recalculate_totals(document):
    if document is None:
        raise ValueError("Document is required")

    items = list(document.items.all())
    result = calculate_items(items, tax_percent=document.tax_percent)

    for item, line in zip(items, result.lines):
        item.gross_amount = _q2(line.gross_amount)
        item.net_amount = _q2(line.net_amount)
    if items:
        type(items[0]).objects.bulk_update(items, ["gross_amount", "net_amount"])

    document.subtotal_amount = _q2(result.subtotal)
    for i, amount in enumerate(result.discount_totals, start=1):
        setattr(document, f"discount{i}_amount", _q2(amount))
    document.total_after_discounts = _q2(result.total_after_discounts)
    document.tax_amount = _q2(result.tax_amount)
    # Sum of the rounded parts, so the posted entry balances to the cent
    document.total_amount = document.total_after_discounts + document.tax_amount
    document.save(update_fields=[*HEADER_FIELDS, "updated_at"])

    logger.info(
        "Document totals recalculated",
        extra={
            "document": str(document),
            "item_count": len(items),
            "total_amount": str(document.total_amount),
        },
    )
    return document


def _descriptor(document) -> DocumentDescriptor:
    taxed = document.tax_amount > ZERO

    if _is_sale(document):
        return DocumentDescriptor(
            direction=SALE,
            total_after_discounts=document.total_after_discounts,
            tax_amount=document.tax_amount,
            total_amount=document.total_amount,
            control_account=get_accounts_receivable_account(),
            main_account=get_sales_revenue_account(),
            tax_account=get_output_tax_account() if taxed else None,
            description=_descriptor_label(document),
        )

    return DocumentDescriptor(
        direction=PURCHASE,
        total_after_discounts=document.total_after_discounts,
        tax_amount=document.tax_amount,
        total_amount=document.total_amount,
        control_account=get_accounts_payable_account(),
        main_account=get_inventory_account(),
        tax_account=get_input_tax_account() if taxed else None,
        description=_descriptor_label(document),
    )


@transaction.atomic
def confirm_document(document, *, user=None):
    """draft -> confirmed, with totals frozen from the current items and posted."""
    locked = _lock(document)
    if locked.status != locked.Status.DRAFT:
        raise PreconditionError(
            f"Only draft documents can be confirmed ({_number(locked)} is {locked.status})",
            current_status=locked.status,
        )

    recalculate_totals(document)

    je = None
    if document.total_amount > ZERO:
        je = create_journal_entry(
            entry_date=_document_date(document),
            description=_descriptor_label(document),
            postings=build_journal_postings(_descriptor(document)),
            source_type=(
                JournalEntry.SourceType.SALE if _is_sale(document) else JournalEntry.SourceType.PURCHASE
            ),
            source_id=document.pk,
            created_by=user,
        )

    document.status = document.Status.CONFIRMED
    document.journal_entry = je
    document.save(update_fields=["status", "journal_entry", "updated_at"])

    logger.info(
        "Document confirmed",
        extra={
            "document": _number(document),
            "journal_entry_id": getattr(je, "id", None),
            "total_amount": str(document.total_amount),
        },
    )
    return document


@transaction.atomic
def cancel_document(document, *, user=None, reversal_date: date | None = None):
    """confirmed -> cancelled; the confirmation entry gets its mirror."""
    locked = _lock(document)
    if locked.status != locked.Status.CONFIRMED:
        raise PreconditionError(
            f"Only confirmed documents can be cancelled ({_number(locked)} is {locked.status})",
            current_status=locked.status,
        )

    if locked.payments.filter(status="posted").exists():
        raise PreconditionError(
            f"{_number(locked)} has posted payments; reverse them before cancelling",
            current_status=locked.status,
        )

    reversal = None
    if locked.journal_entry_id is not None:
        reversal = reverse_journal_entry(
            entry=locked.journal_entry,
            reversal_date=reversal_date,
            description=f"Cancellation of {_descriptor_label(locked)}",
            created_by=user,
        )

    locked.status = locked.Status.CANCELLED
    locked.journal_entry = None
    locked.save(update_fields=["status", "journal_entry", "updated_at"])

    logger.info(
        "Document cancelled",
        extra={
            "document": _number(locked),
            "reversal_entry_id": getattr(reversal, "id", None),
        },
    )
    return locked
