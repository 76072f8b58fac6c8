# accounting/services/journal_entry_service.py

"""
======================================================
PATH: accounting/services/journal_entry_service.py
======================================================
JOURNAL ENTRY SERVICE (ACCOUNTING ENGINE)

This module is the ONLY place allowed to:
- Create JournalEntry
- Create JournalLine
- Enforce debit == credit
- Stamp an entry as reversed
- Guarantee atomicity
- Enforce idempotency via source reference (one live entry per document)

Everything else (cash posting, payments, overpayments) must pass through here.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.models.journal import JournalEntry
from accounting.models.ledger import JournalLine
from accounting.services.exceptions import (
    IdempotencyError,
    InvariantViolationError,
    JournalEntryCreationError,
    UnbalancedEntryError,
)
from accounting.services.journal_builder import mirror_postings
from accounting.services.numbering import next_number

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
JOURNAL_PREFIX = "JRN"


def _money(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0.00")

    if isinstance(value, Decimal):
        amt = value
    else:
        try:
            amt = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise JournalEntryCreationError(f"Invalid money value: {value!r}") from exc

    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _normalize_postings(postings: list, *, allow_inactive: bool) -> list[dict]:
    normalized: list[dict] = []

    for line in postings:
        if not isinstance(line, dict):
            raise JournalEntryCreationError("Each posting must be an object/dict")

        account = line.get("account")
        if account is None:
            raise JournalEntryCreationError("Posting missing account")

        if not allow_inactive and not getattr(account, "is_active", True):
            raise JournalEntryCreationError(
                f"Account {getattr(account, 'code', 'UNKNOWN')} is inactive"
            )

        debit = _money(line.get("debit"))
        credit = _money(line.get("credit"))

        if debit < 0 or credit < 0:
            raise JournalEntryCreationError("Debit or credit cannot be negative")

        if debit > 0 and credit > 0:
            raise JournalEntryCreationError("A posting cannot have both debit and credit")

        if debit == 0 and credit == 0:
            raise JournalEntryCreationError("A posting must have either debit or credit")

        normalized.append(
            {
                "account": account,
                "debit": debit,
                "credit": credit,
                "description": (line.get("description") or "")[:255],
            }
        )

    return normalized


def _has_live_entry(source_type: str, source_id: str) -> bool:
    return JournalEntry.objects.filter(
        source_type=source_type,
        source_id=source_id,
        reversed_at__isnull=True,
        reversal_of__isnull=True,
    ).exists()


def _assert_balanced(postings: list[dict], *, source: str) -> None:
    total_debits = sum((p["debit"] for p in postings), Decimal("0.00"))
    total_credits = sum((p["credit"] for p in postings), Decimal("0.00"))

    if total_debits != total_credits:
        logger.error(
            "Refusing to persist unbalanced journal entry",
            extra={
                "source": source,
                "debits": str(total_debits),
                "credits": str(total_credits),
            },
        )
        raise UnbalancedEntryError(
            f"Journal entry not balanced: debits={total_debits} credits={total_credits}"
        )


@transaction.atomic
def create_journal_entry(
    *,
    entry_date: date,
    description: str,
    postings: list,
    source_type: str,
    source_id,
    reversal_of: JournalEntry | None = None,
    created_by=None,
) -> JournalEntry:
    if not postings:
        raise JournalEntryCreationError("Journal entry must contain at least one posting")

    description = (description or "").strip()
    if not description:
        raise JournalEntryCreationError("Journal entry description is required")

    if entry_date is None:
        raise JournalEntryCreationError("Journal entry date is required")

    source_id = str(source_id or "").strip()
    if not source_type or not source_id:
        raise JournalEntryCreationError("Invalid source_type/source_id")
    source = f"{source_type}:{source_id}"

    # Reversals must go through even if an account was deactivated since posting
    normalized = _normalize_postings(postings, allow_inactive=reversal_of is not None)
    _assert_balanced(normalized, source=source)

    if reversal_of is None and _has_live_entry(source_type, source_id):
        raise IdempotencyError(f"A live journal entry already exists for {source}")

    journal_number = next_number(
        JournalEntry,
        field="journal_number",
        prefix=JOURNAL_PREFIX,
        on_date=entry_date,
        separator="-",
    )

    try:
        with transaction.atomic():
            journal_entry = JournalEntry.objects.create(
                journal_number=journal_number,
                entry_date=entry_date,
                source_type=source_type,
                source_id=source_id,
                description=description,
                status=JournalEntry.Status.POSTED,
                reversal_of=reversal_of,
                created_by=created_by,
            )
    except (IntegrityError, ValidationError) as exc:
        # full_clean() reports committed duplicates as ValidationError, the DB
        # reports in-flight ones as IntegrityError; only a live entry for this
        # source means the document was already posted
        if reversal_of is None and _has_live_entry(source_type, source_id):
            raise IdempotencyError(f"A live journal entry already exists for {source}") from exc

        logger.error(
            "Journal entry insert failed",
            extra={"source": source, "journal_number": journal_number, "error": str(exc)},
        )
        raise InvariantViolationError(
            f"Journal entry {journal_number} could not be stored for {source}: {exc}"
        ) from exc

    JournalLine.objects.bulk_create(
        [
            JournalLine(
                journal_entry=journal_entry,
                account=p["account"],
                line_no=i,
                debit=p["debit"],
                credit=p["credit"],
                description=p["description"],
            )
            for i, p in enumerate(normalized, start=1)
        ]
    )

    logger.info(
        "Journal entry posted",
        extra={
            "journal_entry_id": journal_entry.id,
            "journal_number": journal_number,
            "source": source,
            "reversal_of": getattr(reversal_of, "id", None),
        },
    )
    return journal_entry


def postings_for(entry: JournalEntry) -> list[dict]:
    return [
        {
            "account": line.account,
            "debit": line.debit,
            "credit": line.credit,
            "description": line.description,
        }
        for line in entry.lines.select_related("account").order_by("line_no")
    ]


@transaction.atomic
def reverse_journal_entry(
    *,
    entry: JournalEntry,
    reversal_date: date | None = None,
    description: str | None = None,
    created_by=None,
) -> JournalEntry:
    """
    Soft reversal:
    - posts the exact debit/credit mirror of `entry`
    - stamps `entry.reversed_at`
    Nothing is deleted; both entries keep counting in balances and net to zero.
    """
    locked = JournalEntry.objects.select_for_update().get(pk=entry.pk)

    if locked.reversal_of_id is not None:
        raise JournalEntryCreationError(
            f"{locked.journal_number} is itself a reversal and cannot be reversed"
        )
    if locked.reversed_at is not None:
        raise IdempotencyError(f"{locked.journal_number} is already reversed")

    reversal = create_journal_entry(
        entry_date=reversal_date or timezone.localdate(),
        description=description or f"Reversal of {locked.journal_number}",
        postings=mirror_postings(postings_for(locked)),
        source_type=locked.source_type,
        source_id=locked.source_id,
        reversal_of=locked,
        created_by=created_by,
    )

    # Headers are immutable via save(); the reversal stamp is the single permitted update
    JournalEntry.objects.filter(pk=locked.pk).update(reversed_at=timezone.now())
    entry.reversed_at = JournalEntry.objects.values_list("reversed_at", flat=True).get(
        pk=locked.pk
    )

    return reversal
