# accounting/services/numbering.py

"""
DOCUMENT NUMBERING

Daily sequences, e.g.:
- JRN-20250114-0001   journal entries
- CI2025011400001     cash-in
- OVP202501140001     overpayment transactions

Must be called inside transaction.atomic(). The counter lives in a
DocumentSequence row per (prefix, day), taken with select_for_update(), so the
lock exists even for the first document of the day.

A new counter row starts from the highest number already stored for that day,
compared as integers, so "…-10000" follows "…-9999" once a day outgrows the
padding width.
"""

from __future__ import annotations

from datetime import date

from django.db import transaction

from accounting.models.sequence import DocumentSequence


def _highest_existing(model, *, field: str, head: str) -> int:
    tails = (
        value[len(head):]
        for value in model.objects.filter(**{f"{field}__startswith": head}).values_list(
            field, flat=True
        )
    )
    # Hand-keyed numbers with a non-numeric tail are ignored
    return max((int(t) for t in tails if t.isdigit()), default=0)


def next_number(
    model,
    *,
    field: str,
    prefix: str,
    on_date: date,
    width: int = 4,
    separator: str = "",
) -> str:
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError("next_number() must run inside transaction.atomic()")

    head = f"{prefix}{separator}{on_date:%Y%m%d}{separator}"

    sequence = DocumentSequence.objects.select_for_update().filter(
        prefix=prefix, day=on_date
    ).first()
    if sequence is None:
        sequence, _ = DocumentSequence.objects.select_for_update().get_or_create(
            prefix=prefix,
            day=on_date,
            defaults={"last_value": _highest_existing(model, field=field, head=head)},
        )

    sequence.last_value += 1
    sequence.save(update_fields=["last_value"])

    return f"{head}{sequence.last_value:0{width}d}"
