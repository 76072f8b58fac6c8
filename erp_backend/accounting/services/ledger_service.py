# accounting/services/ledger_service.py

"""
LEDGER BALANCE SERVICE (READ-ONLY)

get_ledger(account, date_from, date_to)
- opening = net of posted lines dated strictly before date_from
- debit_total / credit_total = posted lines within [date_from, date_to]
- closing = opening + movement, where movement follows the account's
  natural side (asset/expense: debit - credit; others: credit - debit)
- lines carry a running balance in (entry_date, entry id, line_no) order

get_ledger(None, ...) returns a per-account summary instead of lines.

RULES:
- READ-ONLY: no writes, ever
- Each report is computed from ONE query, so a single call never mixes
  two database snapshots
- Reversed entries and their compensating entries both count (net zero)
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Q, Sum
from django.db.models.functions import Coalesce

from accounting.models.account import Account
from accounting.models.bank import Bank
from accounting.models.journal import JournalEntry
from accounting.models.ledger import JournalLine


class LedgerServiceError(ValueError):
    """Raised for invalid ledger queries."""


TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _q2(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _signed(account_type: str, debit, credit) -> Decimal:
    if account_type in Account.DEBIT_NORMAL_TYPES:
        return _q2(debit) - _q2(credit)
    return _q2(credit) - _q2(debit)


def _validate_range(date_from: date, date_to: date) -> None:
    if date_from is None or date_to is None:
        raise LedgerServiceError("date_from and date_to are required")
    if date_from > date_to:
        raise LedgerServiceError("date_from must be on or before date_to")


def descendant_ids(account_id: int) -> list[int]:
    """account_id plus every account below it (id -> parent arena, cycle-safe)."""
    children_by_parent: dict[int, list[int]] = {}
    for acc_id, parent_id in Account.objects.values_list("id", "parent_id"):
        if parent_id is not None:
            children_by_parent.setdefault(parent_id, []).append(acc_id)

    out: list[int] = []
    seen: set[int] = set()
    stack = [account_id]
    while stack:
        current = stack.pop()
        if current in seen:
            continue
        seen.add(current)
        out.append(current)
        stack.extend(children_by_parent.get(current, []))
    return out


def _posted_lines(account_ids: list[int], date_to: date):
    return JournalLine.objects.filter(
        account_id__in=account_ids,
        journal_entry__status=JournalEntry.Status.POSTED,
        journal_entry__entry_date__lte=date_to,
    )


def get_ledger(
    account: Account | None,
    date_from: date,
    date_to: date,
    *,
    include_descendants: bool = False,
) -> dict:
    _validate_range(date_from, date_to)

    if account is None:
        return get_ledger_summary(date_from, date_to)

    account_ids = descendant_ids(account.id) if include_descendants else [account.id]

    rows = (
        _posted_lines(account_ids, date_to)
        .select_related("journal_entry", "account")
        .order_by("journal_entry__entry_date", "journal_entry_id", "line_no", "id")
    )

    opening = ZERO
    debit_total = ZERO
    credit_total = ZERO
    lines: list[dict] = []

    in_range: list[JournalLine] = []
    for line in rows:
        if line.journal_entry.entry_date < date_from:
            opening += _signed(account.account_type, line.debit, line.credit)
        else:
            in_range.append(line)

    running = _q2(opening)
    for line in in_range:
        debit_total += line.debit
        credit_total += line.credit
        running = _q2(running + _signed(account.account_type, line.debit, line.credit))

        je = line.journal_entry
        lines.append(
            {
                "journal_entry_id": je.id,
                "journal_number": je.journal_number,
                "entry_date": je.entry_date,
                "source_type": je.source_type,
                "source_id": je.source_id,
                "description": line.description or je.description,
                "account_id": line.account_id,
                "account_code": line.account.code,
                "debit": _q2(line.debit),
                "credit": _q2(line.credit),
                "balance": running,
                "is_reversal": je.reversal_of_id is not None,
                "is_reversed": je.reversed_at is not None,
            }
        )

    opening = _q2(opening)
    closing = _q2(opening + _signed(account.account_type, debit_total, credit_total))

    return {
        "account_id": account.id,
        "account_code": account.code,
        "account_name": account.name,
        "account_type": account.account_type,
        "include_descendants": include_descendants,
        "date_from": date_from,
        "date_to": date_to,
        "opening_balance": opening,
        "debit_total": _q2(debit_total),
        "credit_total": _q2(credit_total),
        "closing_balance": closing,
        "lines": lines,
    }


def get_ledger_summary(date_from: date, date_to: date) -> dict:
    """Opening / debit / credit / closing for every active account with a balance or activity."""
    _validate_range(date_from, date_to)

    rows = (
        JournalLine.objects.filter(
            account__is_active=True,
            journal_entry__status=JournalEntry.Status.POSTED,
            journal_entry__entry_date__lte=date_to,
        )
        .values("account_id", "account__code", "account__name", "account__account_type")
        .annotate(
            opening_debit=Coalesce(
                Sum("debit", filter=Q(journal_entry__entry_date__lt=date_from)), ZERO
            ),
            opening_credit=Coalesce(
                Sum("credit", filter=Q(journal_entry__entry_date__lt=date_from)), ZERO
            ),
            period_debit=Coalesce(
                Sum("debit", filter=Q(journal_entry__entry_date__gte=date_from)), ZERO
            ),
            period_credit=Coalesce(
                Sum("credit", filter=Q(journal_entry__entry_date__gte=date_from)), ZERO
            ),
        )
        .order_by("account__code")
    )

    accounts = []
    total_debit = ZERO
    total_credit = ZERO

    for r in rows:
        account_type = r["account__account_type"]
        opening = _signed(account_type, r["opening_debit"], r["opening_credit"])
        debit = _q2(r["period_debit"])
        credit = _q2(r["period_credit"])
        closing = _q2(opening + _signed(account_type, debit, credit))

        if opening == 0 and debit == 0 and credit == 0 and closing == 0:
            continue

        total_debit += debit
        total_credit += credit
        accounts.append(
            {
                "account_id": r["account_id"],
                "account_code": r["account__code"],
                "account_name": r["account__name"],
                "account_type": account_type,
                "opening_balance": _q2(opening),
                "debit_total": debit,
                "credit_total": credit,
                "closing_balance": closing,
            }
        )

    return {
        "account_id": None,
        "date_from": date_from,
        "date_to": date_to,
        "debit_total": _q2(total_debit),
        "credit_total": _q2(total_credit),
        "accounts": accounts,
        "lines": [],
    }


def get_bank_ledger(bank: Bank, date_from: date, date_to: date) -> dict:
    if bank is None:
        raise LedgerServiceError("Bank is required")

    ledger = get_ledger(bank.account, date_from, date_to)
    ledger["bank_id"] = bank.id
    ledger["bank_name"] = bank.name
    return ledger
