# accounting/services/aging_service.py

"""
AGING SERVICE (RECEIVABLES / PAYABLES)

Buckets open documents (remaining_amount > 0) by days overdue as of a date.

Rules:
- due date = document.due_date, or the document date when empty
- days_overdue   = max(0, as_of - due_date)
- days_until_due = max(0, due_date - as_of)
- not yet due (due_date > as_of)  -> "current", reported apart from overdue
- otherwise exactly ONE bucket by days_overdue:
      0-30, 31-60, 61-90, over 90
  (no proportional splitting; a record's whole remaining amount lands in it)
- per-party summaries and grand totals are plain sums of record allocations

bucket_records() is pure; get_aging() loads Sale / Purchase rows and feeds it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import DecimalField, ExpressionWrapper, F, Q, Sum
from django.db.models.functions import Coalesce


class AgingServiceError(ValueError):
    """Raised for invalid aging queries."""


TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

RECEIVABLE = "receivable"
PAYABLE = "payable"
SCOPES = (RECEIVABLE, PAYABLE)

CURRENT = "current"
DAYS_0_30 = "days_0_30"
DAYS_31_60 = "days_31_60"
DAYS_61_90 = "days_61_90"
DAYS_OVER_90 = "days_over_90"

OVERDUE_BUCKETS = (DAYS_0_30, DAYS_31_60, DAYS_61_90, DAYS_OVER_90)
ALL_BUCKETS = (CURRENT, *OVERDUE_BUCKETS)


def _q2(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class AgingRecord:
    document_id: int
    document_number: str
    party_id: int
    party_name: str
    document_date: date
    due_date: date | None
    total_amount: Decimal
    remaining_amount: Decimal

    @property
    def effective_due_date(self) -> date:
        return self.due_date or self.document_date


def bucket_for(days_overdue: int) -> str:
    if days_overdue <= 30:
        return DAYS_0_30
    if days_overdue <= 60:
        return DAYS_31_60
    if days_overdue <= 90:
        return DAYS_61_90
    return DAYS_OVER_90


def _empty_buckets() -> dict:
    return {b: ZERO for b in ALL_BUCKETS}


def bucket_records(records, as_of: date) -> dict:
    if as_of is None:
        raise AgingServiceError("as_of date is required")

    rows: list[dict] = []
    parties: dict = {}
    totals = _empty_buckets()

    for rec in records:
        remaining = _q2(rec.remaining_amount)
        if remaining <= ZERO:
            continue

        due = rec.effective_due_date
        delta = (as_of - due).days

        if delta < 0:
            bucket = CURRENT
            days_overdue, days_until_due = 0, -delta
        else:
            bucket = bucket_for(delta)
            days_overdue, days_until_due = delta, 0

        allocation = _empty_buckets()
        allocation[bucket] = remaining

        rows.append(
            {
                "document_id": rec.document_id,
                "document_number": rec.document_number,
                "party_id": rec.party_id,
                "party_name": rec.party_name,
                "document_date": rec.document_date,
                "due_date": due,
                "days_overdue": days_overdue,
                "days_until_due": days_until_due,
                "bucket": bucket,
                "total_amount": _q2(rec.total_amount),
                "remaining_amount": remaining,
                **allocation,
            }
        )

        party = parties.setdefault(
            rec.party_id,
            {
                "party_id": rec.party_id,
                "party_name": rec.party_name,
                "document_count": 0,
                **_empty_buckets(),
                "total": ZERO,
            },
        )
        party["document_count"] += 1
        party[bucket] += remaining
        party["total"] += remaining
        totals[bucket] += remaining

    totals["overdue_total"] = sum((totals[b] for b in OVERDUE_BUCKETS), ZERO)
    totals["total"] = totals["overdue_total"] + totals[CURRENT]

    rows.sort(key=lambda r: (-r["days_overdue"], r["due_date"], r["document_number"]))
    per_party = sorted(parties.values(), key=lambda p: (-p["total"], p["party_name"]))

    return {
        "as_of": as_of,
        "records": rows,
        "per_party": per_party,
        "totals": totals,
        "grand_total": totals["total"],
    }


def _open_documents(scope: str, as_of: date, party_id=None):
    remaining_expr = ExpressionWrapper(
        F("total_amount") - F("paid"),
        output_field=DecimalField(max_digits=14, decimal_places=2),
    )
    paid_expr = Coalesce(
        Sum("payments__applied_amount", filter=Q(payments__status="posted")),
        ZERO,
        output_field=DecimalField(max_digits=14, decimal_places=2),
    )

    if scope == RECEIVABLE:
        from sales.models import Sale

        qs = Sale.objects.filter(status=Sale.Status.CONFIRMED, sale_date__lte=as_of)
        if party_id:
            qs = qs.filter(customer_id=party_id)
        qs = (
            qs.annotate(paid=paid_expr)
            .annotate(remaining=remaining_expr)
            .filter(remaining__gt=ZERO)
            .values(
                "id", "sale_number", "customer_id", "customer__name",
                "sale_date", "due_date", "total_amount", "remaining",
            )
        )
        return [
            AgingRecord(
                document_id=r["id"],
                document_number=r["sale_number"],
                party_id=r["customer_id"],
                party_name=r["customer__name"],
                document_date=r["sale_date"],
                due_date=r["due_date"],
                total_amount=r["total_amount"],
                remaining_amount=r["remaining"],
            )
            for r in qs
        ]

    from purchases.models import Purchase

    qs = Purchase.objects.filter(status=Purchase.Status.CONFIRMED, purchase_date__lte=as_of)
    if party_id:
        qs = qs.filter(supplier_id=party_id)
    qs = (
        qs.annotate(paid=paid_expr)
        .annotate(remaining=remaining_expr)
        .filter(remaining__gt=ZERO)
        .values(
            "id", "purchase_number", "supplier_id", "supplier__name",
            "purchase_date", "due_date", "total_amount", "remaining",
        )
    )
    return [
        AgingRecord(
            document_id=r["id"],
            document_number=r["purchase_number"],
            party_id=r["supplier_id"],
            party_name=r["supplier__name"],
            document_date=r["purchase_date"],
            due_date=r["due_date"],
            total_amount=r["total_amount"],
            remaining_amount=r["remaining"],
        )
        for r in qs
    ]


def get_aging(as_of: date, scope: str = RECEIVABLE, *, party_id=None) -> dict:
    if scope not in SCOPES:
        raise AgingServiceError(f"scope must be one of {', '.join(SCOPES)}")
    if as_of is None:
        raise AgingServiceError("as_of date is required")

    result = bucket_records(_open_documents(scope, as_of, party_id), as_of)
    result["scope"] = scope
    return result
