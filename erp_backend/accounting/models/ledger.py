# accounting/models/ledger.py

"""
======================================================
PATH: accounting/models/ledger.py
======================================================
JOURNAL LINE MODEL

A single debit or credit posting to one account.

Guarantees:
- Immutable once created (no updates, no deletes)
- debit >= 0, credit >= 0, exactly one of them is nonzero
- Reporting uses journal_entry.entry_date as the accounting timeline
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from accounting.models.account import Account
from accounting.models.journal import JournalEntry

ZERO = Decimal("0.00")


class JournalLine(models.Model):
    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        related_name="lines",
    )

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )

    line_no = models.PositiveSmallIntegerField(default=1)

    debit = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    credit = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)

    description = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        verbose_name = "Journal Line"
        verbose_name_plural = "Journal Lines"
        ordering = ["journal_entry_id", "line_no"]
        indexes = [
            models.Index(fields=["account"], name="acc_jl_account_idx"),
            models.Index(fields=["journal_entry"], name="acc_jl_entry_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(debit__gte=0) & Q(credit__gte=0),
                name="chk_journal_line_non_negative",
            ),
            models.CheckConstraint(
                condition=(Q(debit__gt=0) & Q(credit=0)) | (Q(debit=0) & Q(credit__gt=0)),
                name="chk_journal_line_one_side",
            ),
        ]

    def __str__(self):
        side = f"Dr {self.debit}" if self.debit else f"Cr {self.credit}"
        return f"{side} → {self.account}"

    def clean(self):
        if self.debit is None or self.credit is None:
            raise ValidationError("Debit and credit are required")
        if self.debit < 0 or self.credit < 0:
            raise ValidationError("Debit or credit cannot be negative")
        if (self.debit > 0) == (self.credit > 0):
            raise ValidationError("Exactly one of debit or credit must be nonzero")

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("JournalLine records are immutable and cannot be modified")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("JournalLine records are immutable and cannot be deleted")
