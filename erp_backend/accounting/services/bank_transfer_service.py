# accounting/services/bank_transfer_service.py

"""
BANK TRANSFER POSTING

    draft --post--> posted --reverse--> draft

Moves money between two banks / cash registers:
    Dr destination bank / Cr source bank

Both stored balances move with the entry (source down, destination up) and
move back on reversal.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction
from django.utils import timezone

from accounting.models.bank import Bank
from accounting.models.bank_transfer import BankTransfer
from accounting.models.journal import JournalEntry
from accounting.services.bank_balance_service import apply_bank_movement
from accounting.services.exceptions import (
    AlreadyPostedError,
    InputValidationError,
    InvalidAmountError,
    InvalidBankError,
    NotPostedError,
)
from accounting.services.journal_builder import TransferDescriptor, build_journal_postings
from accounting.services.journal_entry_service import (
    create_journal_entry,
    reverse_journal_entry,
)
from accounting.services.numbering import next_number

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
NUMBER_PREFIX = "TRF"


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _active_bank(bank_id, label: str) -> Bank:
    bank = Bank.objects.filter(pk=bank_id, is_active=True).select_related("account").first()
    if bank is None:
        raise InvalidBankError(f"{label} bank not found or inactive")
    return bank


def _lock(transfer_id) -> BankTransfer:
    return (
        BankTransfer.objects.select_for_update()
        .select_related("from_bank", "from_bank__account", "to_bank", "to_bank__account")
        .get(pk=transfer_id)
    )


@transaction.atomic
def create_bank_transfer(
    *,
    from_bank_id,
    to_bank_id,
    amount,
    transfer_date: date | None = None,
    description: str = "",
    user=None,
) -> BankTransfer:
    amt = _money(amount)
    if amt <= Decimal("0.00"):
        raise InvalidAmountError("Amount must be > 0")

    if from_bank_id == to_bank_id:
        raise InputValidationError("Source and destination bank must differ")

    from_bank = _active_bank(from_bank_id, "Source")
    to_bank = _active_bank(to_bank_id, "Destination")
    tx_date = transfer_date or timezone.localdate()

    transfer = BankTransfer.objects.create(
        number=next_number(
            BankTransfer, field="number", prefix=NUMBER_PREFIX, on_date=tx_date
        ),
        transfer_date=tx_date,
        from_bank=from_bank,
        to_bank=to_bank,
        amount=amt,
        description=description or "",
        created_by=user,
        updated_by=user,
    )

    logger.info(
        "Bank transfer drafted",
        extra={"bank_transfer_id": transfer.id, "number": transfer.number},
    )
    return transfer


@transaction.atomic
def post_bank_transfer(*, transfer_id, user=None) -> BankTransfer:
    transfer = _lock(transfer_id)

    if transfer.status != BankTransfer.Status.DRAFT:
        logger.warning(
            "Bank transfer post rejected",
            extra={"bank_transfer_id": transfer.id, "status": transfer.status},
        )
        raise AlreadyPostedError(
            f"Bank transfer {transfer.number} is already posted",
            current_status=transfer.status,
        )

    for bank in (transfer.from_bank, transfer.to_bank):
        if not bank.is_active:
            raise InvalidBankError(f"Bank {bank} is inactive")

    label = f"Bank transfer {transfer.number}"
    je = create_journal_entry(
        entry_date=transfer.transfer_date,
        description=label,
        postings=build_journal_postings(
            TransferDescriptor(
                amount=transfer.amount,
                from_account=transfer.from_bank.account,
                to_account=transfer.to_bank.account,
                description=transfer.description or label,
            )
        ),
        source_type=JournalEntry.SourceType.BANK_TRANSFER,
        source_id=transfer.pk,
        created_by=user,
    )

    apply_bank_movement(
        bank=transfer.from_bank, amount=-transfer.amount, reason=f"post {transfer.number}"
    )
    apply_bank_movement(
        bank=transfer.to_bank, amount=transfer.amount, reason=f"post {transfer.number}"
    )

    transfer.status = BankTransfer.Status.POSTED
    transfer.journal_entry = je
    transfer.updated_by = user or transfer.updated_by
    transfer.save(update_fields=["status", "journal_entry", "updated_by", "updated_at"])

    logger.info(
        "Bank transfer posted",
        extra={
            "bank_transfer_id": transfer.id,
            "number": transfer.number,
            "journal_entry_id": je.id,
            "amount": str(transfer.amount),
        },
    )
    return transfer


@transaction.atomic
def reverse_bank_transfer(
    *, transfer_id, user=None, reversal_date: date | None = None
) -> BankTransfer:
    transfer = _lock(transfer_id)

    if transfer.status != BankTransfer.Status.POSTED or transfer.journal_entry_id is None:
        logger.warning(
            "Bank transfer reverse rejected",
            extra={"bank_transfer_id": transfer.id, "status": transfer.status},
        )
        raise NotPostedError(
            f"Bank transfer {transfer.number} is not posted",
            current_status=transfer.status,
        )

    reversal = reverse_journal_entry(
        entry=transfer.journal_entry,
        reversal_date=reversal_date,
        description=f"Reversal of bank transfer {transfer.number}",
        created_by=user,
    )

    apply_bank_movement(
        bank=transfer.from_bank, amount=transfer.amount, reason=f"reverse {transfer.number}"
    )
    apply_bank_movement(
        bank=transfer.to_bank, amount=-transfer.amount, reason=f"reverse {transfer.number}"
    )

    transfer.status = BankTransfer.Status.DRAFT
    transfer.journal_entry = None
    transfer.updated_by = user or transfer.updated_by
    transfer.save(update_fields=["status", "journal_entry", "updated_by", "updated_at"])

    logger.info(
        "Bank transfer reversed",
        extra={
            "bank_transfer_id": transfer.id,
            "number": transfer.number,
            "reversal_entry_id": reversal.id,
        },
    )
    return transfer
