# accounting/services/cash_posting_service.py

"""
======================================================
PATH: accounting/services/cash_posting_service.py
======================================================
CASH-IN / CASH-OUT POSTING (STATE MACHINE)

    draft --post--> posted --reverse--> draft

post_cash_transaction()
- lock row, require DRAFT (else AlreadyPostedError)
- build + persist journal, move bank stored_balance, flip to POSTED

reverse_cash_transaction()
- lock row, require POSTED (else NotPostedError)
- post the mirror entry, stamp the original reversed, undo the bank movement,
  flip back to DRAFT (editable again)

All of it runs in ONE atomic block; any error rolls everything back.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.bank import Bank
from accounting.models.cash_transaction import CashTransaction
from accounting.models.journal import JournalEntry
from accounting.services.bank_balance_service import apply_bank_movement
from accounting.services.exceptions import (
    AlreadyPostedError,
    InputValidationError,
    InvalidAmountError,
    InvalidBankError,
    NotPostedError,
)
from accounting.services.journal_builder import CashDescriptor, build_journal_postings
from accounting.services.journal_entry_service import (
    create_journal_entry,
    reverse_journal_entry,
)
from accounting.services.numbering import next_number

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

NUMBER_PREFIX = {
    CashTransaction.Kind.CASH_IN: "CI",
    CashTransaction.Kind.CASH_OUT: "CO",
}

SOURCE_TYPE = {
    CashTransaction.Kind.CASH_IN: JournalEntry.SourceType.CASH_IN,
    CashTransaction.Kind.CASH_OUT: JournalEntry.SourceType.CASH_OUT,
}

COUNTER_ACCOUNT_TYPE = {
    CashTransaction.Kind.CASH_IN: Account.AccountType.INCOME,
    CashTransaction.Kind.CASH_OUT: Account.AccountType.EXPENSE,
}


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _signed_movement(tx: CashTransaction) -> Decimal:
    if tx.kind == CashTransaction.Kind.CASH_IN:
        return tx.amount
    return -tx.amount


def _lock(transaction_id) -> CashTransaction:
    return (
        CashTransaction.objects.select_for_update()
        .select_related("bank", "bank__account", "account")
        .get(pk=transaction_id)
    )


@transaction.atomic
def create_cash_transaction(
    *,
    kind: str,
    bank_id,
    account_id,
    amount,
    transaction_date: date | None = None,
    description: str = "",
    user=None,
) -> CashTransaction:
    """Draft creation (numbering + basic input checks); no ledger effect."""
    if kind not in NUMBER_PREFIX:
        raise InputValidationError(f"Unknown cash transaction kind: {kind!r}")

    amt = _money(amount)
    if amt <= Decimal("0.00"):
        raise InvalidAmountError("Amount must be > 0")

    bank = Bank.objects.filter(pk=bank_id, is_active=True).select_related("account").first()
    if bank is None:
        raise InvalidBankError("Bank not found or inactive")

    account = Account.objects.filter(pk=account_id, is_active=True).first()
    if account is None:
        raise InputValidationError("Account not found or inactive")

    expected_type = COUNTER_ACCOUNT_TYPE[kind]
    if account.account_type != expected_type:
        raise InputValidationError(
            f"{CashTransaction.Kind(kind).label} requires an {expected_type} account "
            f"(got {account.code}: {account.account_type})"
        )

    tx_date = transaction_date or timezone.localdate()

    tx = CashTransaction.objects.create(
        number=next_number(
            CashTransaction,
            field="number",
            prefix=NUMBER_PREFIX[kind],
            on_date=tx_date,
            width=5,
        ),
        kind=kind,
        transaction_date=tx_date,
        bank=bank,
        account=account,
        amount=amt,
        description=description or "",
        created_by=user,
        updated_by=user,
    )

    logger.info(
        "Cash transaction drafted",
        extra={"cash_transaction_id": tx.id, "number": tx.number, "kind": kind},
    )
    return tx


@transaction.atomic
def post_cash_transaction(*, transaction_id, user=None) -> CashTransaction:
    tx = _lock(transaction_id)

    if tx.status != CashTransaction.Status.DRAFT:
        logger.warning(
            "Cash transaction post rejected",
            extra={"cash_transaction_id": tx.id, "status": tx.status},
        )
        raise AlreadyPostedError(
            f"Cash transaction {tx.number} is already posted",
            current_status=tx.status,
        )

    if not tx.bank.is_active:
        raise InvalidBankError(f"Bank {tx.bank} is inactive")

    description = tx.description or f"{tx.get_kind_display()} {tx.number}"
    postings = build_journal_postings(
        CashDescriptor(
            kind=tx.kind,
            amount=tx.amount,
            bank_account=tx.bank.account,
            counter_account=tx.account,
            description=description,
        )
    )

    je = create_journal_entry(
        entry_date=tx.transaction_date,
        description=f"{tx.get_kind_display()} {tx.number}",
        postings=postings,
        source_type=SOURCE_TYPE[tx.kind],
        source_id=tx.pk,
        created_by=user,
    )

    apply_bank_movement(bank=tx.bank, amount=_signed_movement(tx), reason=f"post {tx.number}")

    tx.status = CashTransaction.Status.POSTED
    tx.journal_entry = je
    tx.updated_by = user or tx.updated_by
    tx.save(update_fields=["status", "journal_entry", "updated_by", "updated_at"])

    logger.info(
        "Cash transaction posted",
        extra={
            "cash_transaction_id": tx.id,
            "number": tx.number,
            "journal_entry_id": je.id,
            "amount": str(tx.amount),
        },
    )
    return tx


@transaction.atomic
def reverse_cash_transaction(
    *, transaction_id, user=None, reversal_date: date | None = None
) -> CashTransaction:
    tx = _lock(transaction_id)

    if tx.status != CashTransaction.Status.POSTED or tx.journal_entry_id is None:
        logger.warning(
            "Cash transaction reverse rejected",
            extra={"cash_transaction_id": tx.id, "status": tx.status},
        )
        raise NotPostedError(
            f"Cash transaction {tx.number} is not posted",
            current_status=tx.status,
        )

    reversal = reverse_journal_entry(
        entry=tx.journal_entry,
        reversal_date=reversal_date,
        description=f"Reversal of {tx.get_kind_display()} {tx.number}",
        created_by=user,
    )

    apply_bank_movement(
        bank=tx.bank, amount=-_signed_movement(tx), reason=f"reverse {tx.number}"
    )

    tx.status = CashTransaction.Status.DRAFT
    tx.journal_entry = None
    tx.updated_by = user or tx.updated_by
    tx.save(update_fields=["status", "journal_entry", "updated_by", "updated_at"])

    logger.info(
        "Cash transaction reversed",
        extra={
            "cash_transaction_id": tx.id,
            "number": tx.number,
            "reversal_entry_id": reversal.id,
        },
    )
    return tx
