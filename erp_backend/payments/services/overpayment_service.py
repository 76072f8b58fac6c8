# payments/services/overpayment_service.py

"""
======================================================
PATH: payments/services/overpayment_service.py
======================================================
OVERPAYMENT RESOLVER

A posted payment whose amount exceeded the outstanding balance carries
overpayment_status = pending. Exactly one terminal action is allowed:

resolve_overpayment_refund(payment_id, date, bank_id, notes)
    cash goes back through `bank`
    sale:     Dr overpayment clearing  / Cr bank
    purchase: Dr bank                  / Cr purchase advance
    -> refunded

resolve_overpayment_write_off(payment_id, date, notes)
    no cash movement
    sale:     Dr overpayment clearing  / Cr other income   -> converted_to_income
    purchase: Dr other expense         / Cr purchase advance -> written_off

Guards:
- input (bank) is validated before anything is locked or written
- payment row is locked, then overpayment_status must be pending
  (else OverpaymentAlreadyResolvedError carrying the current status)
- the full overpayment_amount is resolved at once (no partials)
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from accounting.models.bank import Bank
from accounting.models.journal import JournalEntry
from accounting.services.account_resolver import (
    get_other_expense_account,
    get_other_income_account,
    get_purchase_advance_account,
    get_sale_overpayment_account,
)
from accounting.services.bank_balance_service import apply_bank_movement
from accounting.services.exceptions import (
    InvalidBankError,
    InvariantViolationError,
    OverpaymentAlreadyResolvedError,
)
from accounting.services.journal_builder import (
    CONVERT_TO_INCOME,
    PURCHASE,
    REFUND,
    SALE,
    WRITE_OFF,
    OverpaymentDescriptor,
    build_journal_postings,
)
from accounting.services.journal_entry_service import create_journal_entry
from accounting.services.numbering import next_number
from payments.models import OverpaymentTransaction, Payment

logger = logging.getLogger("payments")

ZERO = Decimal("0.00")
NUMBER_PREFIX = "OVP"

TERMINAL_STATUS = {
    REFUND: Payment.OverpaymentStatus.REFUNDED,
    WRITE_OFF: Payment.OverpaymentStatus.WRITTEN_OFF,
    CONVERT_TO_INCOME: Payment.OverpaymentStatus.CONVERTED_TO_INCOME,
}


def _lock_pending(payment_id) -> Payment:
    payment = Payment.objects.select_for_update().get(pk=payment_id)

    if payment.overpayment_status != Payment.OverpaymentStatus.PENDING:
        logger.warning(
            "Overpayment resolution rejected",
            extra={
                "payment_id": payment.id,
                "overpayment_status": payment.overpayment_status,
            },
        )
        raise OverpaymentAlreadyResolvedError(
            f"Payment {payment.payment_number} has no pending overpayment "
            f"(status: {payment.overpayment_status})",
            current_status=payment.overpayment_status,
        )

    if payment.status != Payment.Status.POSTED or payment.overpayment_amount <= ZERO:
        raise InvariantViolationError(
            f"Payment {payment.payment_number} is pending without a posted overpayment"
        )

    return payment


def _resolve(
    *,
    payment: Payment,
    resolution: str,
    transaction_date: date,
    bank: Bank | None,
    notes: str,
    user,
) -> OverpaymentTransaction:
    direction = SALE if payment.is_sale_payment else PURCHASE
    amount = payment.overpayment_amount

    if direction == SALE:
        clearing_account = get_sale_overpayment_account()
        counter_account = bank.account if resolution == REFUND else get_other_income_account()
    else:
        clearing_account = get_purchase_advance_account()
        counter_account = bank.account if resolution == REFUND else get_other_expense_account()

    ovp = OverpaymentTransaction.objects.create(
        transaction_number=next_number(
            OverpaymentTransaction,
            field="transaction_number",
            prefix=NUMBER_PREFIX,
            on_date=transaction_date,
        ),
        payment=payment,
        transaction_type=resolution,
        amount=amount,
        transaction_date=transaction_date,
        bank=bank,
        notes=notes or "",
        created_by=user,
    )

    label = OverpaymentTransaction.Type(resolution).label
    je = create_journal_entry(
        entry_date=transaction_date,
        description=f"Overpayment {label.lower()} {ovp.transaction_number} ({payment.payment_number})",
        postings=build_journal_postings(
            OverpaymentDescriptor(
                direction=direction,
                resolution=resolution,
                amount=amount,
                clearing_account=clearing_account,
                counter_account=counter_account,
                description=f"{label} of overpayment {payment.payment_number}",
            )
        ),
        source_type=JournalEntry.SourceType.OVERPAYMENT,
        source_id=ovp.pk,
        created_by=user,
    )

    ovp.journal_entry = je
    ovp.save(update_fields=["journal_entry"])

    if resolution == REFUND:
        apply_bank_movement(
            bank=bank,
            amount=-amount if direction == SALE else amount,
            reason=f"overpayment refund {ovp.transaction_number}",
        )

    payment.overpayment_status = TERMINAL_STATUS[resolution]
    payment.updated_by = user or payment.updated_by
    payment.save(update_fields=["overpayment_status", "updated_by", "updated_at"])

    resolved_total = payment.overpayment_transactions.aggregate(
        total=Coalesce(Sum("amount"), ZERO)
    )["total"]
    if resolved_total != payment.overpayment_amount:
        logger.error(
            "Overpayment transactions do not add up to the overpayment",
            extra={
                "payment_id": payment.id,
                "resolved_total": str(resolved_total),
                "overpayment_amount": str(payment.overpayment_amount),
            },
        )
        raise InvariantViolationError(
            f"Overpayment transactions ({resolved_total}) != overpayment ({payment.overpayment_amount})"
        )

    logger.info(
        "Overpayment resolved",
        extra={
            "payment_id": payment.id,
            "overpayment_transaction_id": ovp.id,
            "resolution": resolution,
            "amount": str(amount),
            "journal_entry_id": je.id,
        },
    )
    return ovp


@transaction.atomic
def resolve_overpayment_refund(
    *,
    payment_id,
    transaction_date: date | None = None,
    bank_id=None,
    notes: str = "",
    user=None,
) -> OverpaymentTransaction:
    if not bank_id:
        raise InvalidBankError("A bank is required to refund an overpayment")

    bank = Bank.objects.select_related("account").filter(pk=bank_id, is_active=True).first()
    if bank is None:
        raise InvalidBankError("Bank not found or inactive")

    payment = _lock_pending(payment_id)
    return _resolve(
        payment=payment,
        resolution=REFUND,
        transaction_date=transaction_date or timezone.localdate(),
        bank=bank,
        notes=notes,
        user=user,
    )


@transaction.atomic
def resolve_overpayment_write_off(
    *,
    payment_id,
    transaction_date: date | None = None,
    notes: str = "",
    user=None,
) -> OverpaymentTransaction:
    """Sale side converts the excess to other income; purchase side writes it off to expense."""
    payment = _lock_pending(payment_id)
    resolution = CONVERT_TO_INCOME if payment.is_sale_payment else WRITE_OFF
    return _resolve(
        payment=payment,
        resolution=resolution,
        transaction_date=transaction_date or timezone.localdate(),
        bank=None,
        notes=notes,
        user=user,
    )
