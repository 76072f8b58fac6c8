# payments/services/payment_service.py

"""
======================================================
PATH: payments/services/payment_service.py
======================================================
SALE / PURCHASE PAYMENT POSTING (STATE MACHINE)

    draft --post--> posted --reverse--> draft

post_payment()
- lock payment + its document
- outstanding = document.remaining_amount (this payment excluded: still draft)
- split amount_paid into applied + overpayment, set overpayment_status
- journal (see journal_builder.build_payment_postings) + bank stored_balance

reverse_payment()
- only while overpayment_status is none / pending (a resolved overpayment
  has its own journal trail; reversing under it would orphan that trail)
- mirror entry, undo bank movement, clear the split, back to draft
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction
from django.utils import timezone

from accounting.models.bank import Bank
from accounting.models.journal import JournalEntry
from accounting.services.account_resolver import (
    get_accounts_payable_account,
    get_accounts_receivable_account,
    get_purchase_advance_account,
    get_sale_overpayment_account,
)
from accounting.services.bank_balance_service import apply_bank_movement
from accounting.services.exceptions import (
    AlreadyPostedError,
    InputValidationError,
    InvalidAmountError,
    InvalidBankError,
    NotPostedError,
    OverpaymentAlreadyResolvedError,
    PreconditionError,
)
from accounting.services.journal_builder import (
    PURCHASE,
    SALE,
    PaymentDescriptor,
    build_journal_postings,
)
from accounting.services.journal_entry_service import (
    create_journal_entry,
    reverse_journal_entry,
)
from accounting.services.numbering import next_number
from payments.models import Payment
from purchases.models import Purchase
from sales.models import Sale

logger = logging.getLogger("payments")

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

NUMBER_PREFIX = {
    Payment.ReferenceType.SALE: "SP",
    Payment.ReferenceType.PURCHASE: "PP",
}


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _direction(payment: Payment) -> str:
    return SALE if payment.is_sale_payment else PURCHASE


def _signed_cash(payment: Payment) -> Decimal:
    # Customer money comes in; supplier money goes out
    return payment.amount_paid if payment.is_sale_payment else -payment.amount_paid


def _lock_payment(payment_id) -> Payment:
    return (
        Payment.objects.select_for_update()
        .select_related("bank", "bank__account")
        .get(pk=payment_id)
    )


def _lock_document(payment: Payment):
    if payment.is_sale_payment:
        return Sale.objects.select_for_update().get(pk=payment.sale_id)
    return Purchase.objects.select_for_update().get(pk=payment.purchase_id)


@transaction.atomic
def create_payment(
    *,
    reference_type: str,
    document_id,
    amount_paid,
    bank_id,
    payment_date: date | None = None,
    payment_method: str = Payment.Method.TRANSFER,
    notes: str = "",
    user=None,
) -> Payment:
    """Draft creation; the overpayment split is decided at posting time."""
    if reference_type not in NUMBER_PREFIX:
        raise InputValidationError(f"Unknown reference_type: {reference_type!r}")

    amt = _money(amount_paid)
    if amt <= ZERO:
        raise InvalidAmountError("Amount must be > 0")

    bank = Bank.objects.filter(pk=bank_id, is_active=True).first()
    if bank is None:
        raise InvalidBankError("Bank not found or inactive")

    if payment_method not in Payment.Method.values:
        raise InputValidationError(f"Unknown payment_method: {payment_method!r}")

    doc_model = Sale if reference_type == Payment.ReferenceType.SALE else Purchase
    document = doc_model.objects.filter(pk=document_id).first()
    if document is None:
        raise InputValidationError(f"{doc_model.__name__} not found")

    pay_date = payment_date or timezone.localdate()

    payment = Payment.objects.create(
        payment_number=next_number(
            Payment,
            field="payment_number",
            prefix=NUMBER_PREFIX[reference_type],
            on_date=pay_date,
        ),
        reference_type=reference_type,
        sale=document if reference_type == Payment.ReferenceType.SALE else None,
        purchase=document if reference_type == Payment.ReferenceType.PURCHASE else None,
        payment_date=pay_date,
        amount_paid=amt,
        bank=bank,
        payment_method=payment_method,
        notes=notes or "",
        created_by=user,
        updated_by=user,
    )

    logger.info(
        "Payment drafted",
        extra={
            "payment_id": payment.id,
            "payment_number": payment.payment_number,
            "reference_type": reference_type,
            "amount": str(amt),
        },
    )
    return payment


@transaction.atomic
def post_payment(*, payment_id, user=None) -> Payment:
    payment = _lock_payment(payment_id)

    if payment.status != Payment.Status.DRAFT:
        logger.warning(
            "Payment post rejected",
            extra={"payment_id": payment.id, "status": payment.status},
        )
        raise AlreadyPostedError(
            f"Payment {payment.payment_number} is already posted",
            current_status=payment.status,
        )

    if not payment.bank.is_active:
        raise InvalidBankError(f"Bank {payment.bank} is inactive")

    document = _lock_document(payment)
    if document.status != document.Status.CONFIRMED:
        raise PreconditionError(
            f"{document} must be confirmed before payments are posted",
            current_status=document.status,
        )

    direction = _direction(payment)
    outstanding = max(_money(document.remaining_amount), ZERO)
    excess = max(payment.amount_paid - outstanding, ZERO)

    if direction == SALE:
        control_account = get_accounts_receivable_account()
        clearing_account = get_sale_overpayment_account() if excess > ZERO else None
        source_type = JournalEntry.SourceType.SALE_PAYMENT
    else:
        control_account = get_accounts_payable_account()
        clearing_account = get_purchase_advance_account() if excess > ZERO else None
        source_type = JournalEntry.SourceType.PURCHASE_PAYMENT

    descriptor = PaymentDescriptor(
        direction=direction,
        amount_paid=payment.amount_paid,
        outstanding=outstanding,
        bank_account=payment.bank.account,
        control_account=control_account,
        clearing_account=clearing_account,
        description=f"Payment {payment.payment_number} for {document}",
    )

    je = create_journal_entry(
        entry_date=payment.payment_date,
        description=f"Payment {payment.payment_number}",
        postings=build_journal_postings(descriptor),
        source_type=source_type,
        source_id=payment.pk,
        created_by=user,
    )

    apply_bank_movement(
        bank=payment.bank,
        amount=_signed_cash(payment),
        reason=f"post {payment.payment_number}",
    )

    payment.applied_amount = descriptor.applied_amount
    payment.overpayment_amount = descriptor.overpayment_amount
    payment.overpayment_status = (
        Payment.OverpaymentStatus.PENDING
        if payment.overpayment_amount > ZERO
        else Payment.OverpaymentStatus.NONE
    )
    payment.status = Payment.Status.POSTED
    payment.journal_entry = je
    payment.updated_by = user or payment.updated_by
    payment.save(
        update_fields=[
            "applied_amount",
            "overpayment_amount",
            "overpayment_status",
            "status",
            "journal_entry",
            "updated_by",
            "updated_at",
        ]
    )

    logger.info(
        "Payment posted",
        extra={
            "payment_id": payment.id,
            "journal_entry_id": je.id,
            "applied_amount": str(payment.applied_amount),
            "overpayment_amount": str(payment.overpayment_amount),
        },
    )
    return payment


@transaction.atomic
def reverse_payment(
    *, payment_id, user=None, reversal_date: date | None = None
) -> Payment:
    payment = _lock_payment(payment_id)

    if payment.status != Payment.Status.POSTED or payment.journal_entry_id is None:
        logger.warning(
            "Payment reverse rejected",
            extra={"payment_id": payment.id, "status": payment.status},
        )
        raise NotPostedError(
            f"Payment {payment.payment_number} is not posted",
            current_status=payment.status,
        )

    if payment.overpayment_status in Payment.RESOLVED_STATUSES:
        logger.warning(
            "Payment reverse rejected: overpayment already resolved",
            extra={"payment_id": payment.id, "overpayment_status": payment.overpayment_status},
        )
        raise OverpaymentAlreadyResolvedError(
            f"Payment {payment.payment_number} has a resolved overpayment "
            f"({payment.overpayment_status}) and cannot be reversed",
            current_status=payment.overpayment_status,
        )

    reversal = reverse_journal_entry(
        entry=payment.journal_entry,
        reversal_date=reversal_date,
        description=f"Reversal of payment {payment.payment_number}",
        created_by=user,
    )

    apply_bank_movement(
        bank=payment.bank,
        amount=-_signed_cash(payment),
        reason=f"reverse {payment.payment_number}",
    )

    payment.applied_amount = ZERO
    payment.overpayment_amount = ZERO
    payment.overpayment_status = Payment.OverpaymentStatus.NONE
    payment.status = Payment.Status.DRAFT
    payment.journal_entry = None
    payment.updated_by = user or payment.updated_by
    payment.save(
        update_fields=[
            "applied_amount",
            "overpayment_amount",
            "overpayment_status",
            "status",
            "journal_entry",
            "updated_by",
            "updated_at",
        ]
    )

    logger.info(
        "Payment reversed",
        extra={"payment_id": payment.id, "reversal_entry_id": reversal.id},
    )
    return payment
