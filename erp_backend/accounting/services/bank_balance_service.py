# accounting/services/bank_balance_service.py

"""
BANK BALANCE SERVICE

- open_bank(): creates a bank and journals its opening balance
- set_opening_balance(): re-states the opening balance (old entry reversed,
  new one posted, stored_balance moved by the difference)
- apply_bank_movement(): keeps Bank.stored_balance in step with posted cash
  movements (F() update inside the caller's atomic block)
- get_bank_balances(): stored vs ledger-calculated balance per bank

RULES:
- Opening balances are journaled like any other movement:
    Dr bank / Cr opening equity (a negative opening swaps sides)
- calculated_balance = Σ(debit - credit) of posted journal lines on the
  bank's ledger account; the opening entry is part of that sum
- Divergence is SURFACED (is_divergent / difference), never corrected here
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction
from django.db.models import DecimalField, F, OuterRef, Subquery, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from accounting.models.bank import Bank
from accounting.models.journal import JournalEntry
from accounting.models.ledger import JournalLine
from accounting.services.account_resolver import get_opening_equity_account
from accounting.services.journal_builder import (
    OpeningBalanceDescriptor,
    build_journal_postings,
)
from accounting.services.journal_entry_service import (
    create_journal_entry,
    reverse_journal_entry,
)

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
MONEY = DecimalField(max_digits=16, decimal_places=2)


def _q2(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _live_opening_entry(bank: Bank) -> JournalEntry | None:
    return (
        JournalEntry.objects.select_for_update()
        .filter(
            source_type=JournalEntry.SourceType.BANK_OPENING,
            source_id=str(bank.pk),
            reversed_at__isnull=True,
            reversal_of__isnull=True,
        )
        .first()
    )


def _post_opening_entry(*, bank: Bank, amount: Decimal, opening_date: date, user=None):
    description = f"Opening balance {bank.name}"
    return create_journal_entry(
        entry_date=opening_date,
        description=description,
        postings=build_journal_postings(
            OpeningBalanceDescriptor(
                amount=amount,
                bank_account=bank.account,
                equity_account=get_opening_equity_account(),
                description=description,
            )
        ),
        source_type=JournalEntry.SourceType.BANK_OPENING,
        source_id=bank.pk,
        created_by=user,
    )


@transaction.atomic
def open_bank(
    *,
    name: str,
    account,
    initial_balance=ZERO,
    opening_date: date | None = None,
    user=None,
    **fields,
) -> Bank:
    """Bank creation; a non-zero initial_balance gets its opening entry."""
    amount = _q2(initial_balance)
    bank = Bank.objects.create(name=name, account=account, initial_balance=amount, **fields)

    je = None
    if amount != ZERO:
        je = _post_opening_entry(
            bank=bank,
            amount=amount,
            opening_date=opening_date or timezone.localdate(),
            user=user,
        )

    logger.info(
        "Bank opened",
        extra={
            "bank_id": bank.pk,
            "initial_balance": str(amount),
            "journal_entry_id": getattr(je, "id", None),
        },
    )
    return bank


@transaction.atomic
def set_opening_balance(
    *, bank_id, amount, opening_date: date | None = None, user=None
) -> Bank:
    bank = Bank.objects.select_for_update().select_related("account").get(pk=bank_id)
    new_amount = _q2(amount)
    old_amount = _q2(bank.initial_balance)
    if new_amount == old_amount:
        return bank

    previous = _live_opening_entry(bank)
    if previous is not None:
        reverse_journal_entry(
            entry=previous,
            reversal_date=opening_date,
            description=f"Opening balance restated {bank.name}",
            created_by=user,
        )

    if new_amount != ZERO:
        _post_opening_entry(
            bank=bank,
            amount=new_amount,
            opening_date=opening_date or timezone.localdate(),
            user=user,
        )

    apply_bank_movement(
        bank=bank, amount=new_amount - old_amount, reason="opening balance restated"
    )
    bank.initial_balance = new_amount
    bank.save(update_fields=["initial_balance", "updated_at"])

    logger.info(
        "Bank opening balance restated",
        extra={
            "bank_id": bank.pk,
            "old_amount": str(old_amount),
            "new_amount": str(new_amount),
        },
    )
    return bank


def apply_bank_movement(*, bank: Bank, amount, reason: str = "") -> None:
    """Signed movement: positive = cash in, negative = cash out."""
    delta = _q2(amount)
    if delta == 0:
        return

    Bank.objects.filter(pk=bank.pk).update(stored_balance=F("stored_balance") + delta)
    bank.refresh_from_db(fields=["stored_balance"])

    logger.info(
        "Bank stored balance adjusted",
        extra={
            "bank_id": bank.pk,
            "delta": str(delta),
            "stored_balance": str(bank.stored_balance),
            "reason": reason,
        },
    )


def get_bank_balances(*, include_inactive: bool = False) -> list[dict]:
    ledger_net = (
        JournalLine.objects.filter(
            account_id=OuterRef("account_id"),
            journal_entry__status=JournalEntry.Status.POSTED,
        )
        .order_by()
        .values("account_id")
        .annotate(net=Sum(F("debit") - F("credit"), output_field=MONEY))
        .values("net")
    )

    banks = (
        Bank.objects.select_related("account")
        .annotate(
            ledger_net=Coalesce(
                Subquery(ledger_net, output_field=MONEY),
                Value(ZERO, output_field=MONEY),
            )
        )
        .order_by("name")
    )
    if not include_inactive:
        banks = banks.filter(is_active=True)

    results = []
    for bank in banks:
        stored = _q2(bank.stored_balance)
        calculated = _q2(bank.ledger_net)
        difference = _q2(stored - calculated)

        if difference != 0:
            logger.warning(
                "Bank stored balance diverges from ledger",
                extra={
                    "bank_id": bank.pk,
                    "stored_balance": str(stored),
                    "calculated_balance": str(calculated),
                },
            )

        results.append(
            {
                "bank_id": bank.pk,
                "name": bank.name,
                "bank_type": bank.bank_type,
                "account_id": bank.account_id,
                "account_code": bank.account.code,
                "stored_balance": stored,
                "calculated_balance": calculated,
                "difference": difference,
                "is_divergent": difference != 0,
            }
        )

    return results
