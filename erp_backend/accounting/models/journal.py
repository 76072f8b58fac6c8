# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL ENTRY MODEL

Represents a single accounting transaction (journal header).

Guarantees:
- Immutable once created (no updates, no deletes)
- Reversal is soft: the original keeps its lines and gets reversed_at stamped
  (queryset update in journal_entry_service), and a compensating entry points
  back to it through reversal_of
- At most one live (not reversed, not a reversal) entry per source document
- entry_date is the accounting effective date (used for ledger ordering)
"""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class JournalEntry(models.Model):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        POSTED = "posted", "Posted"

    class SourceType(models.TextChoices):
        CASH_IN = "cash_in", "Cash in"
        CASH_OUT = "cash_out", "Cash out"
        SALE_PAYMENT = "sale_payment", "Sale payment"
        PURCHASE_PAYMENT = "purchase_payment", "Purchase payment"
        OVERPAYMENT = "overpayment", "Overpayment resolution"
        SALE = "sale", "Sale"
        PURCHASE = "purchase", "Purchase"
        BANK_OPENING = "bank_opening", "Bank opening balance"
        BANK_TRANSFER = "bank_transfer", "Bank transfer"

    journal_number = models.CharField(max_length=32, unique=True)

    entry_date = models.DateField(help_text="Accounting effective date")

    source_type = models.CharField(max_length=32, choices=SourceType.choices)
    source_id = models.CharField(max_length=64)

    description = models.TextField(help_text="Narrative description of the journal entry")

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.POSTED,
    )

    reversal_of = models.OneToOneField(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reversal",
        help_text="Original entry this entry compensates",
    )
    reversed_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="journal_entries_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-entry_date", "-id"]
        indexes = [
            models.Index(fields=["entry_date", "id"], name="acc_je_date_id_idx"),
            models.Index(fields=["source_type", "source_id"], name="acc_je_source_idx"),
            models.Index(fields=["status"], name="acc_je_status_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["source_type", "source_id"],
                condition=Q(reversed_at__isnull=True) & Q(reversal_of__isnull=True),
                name="uniq_journal_live_entry_per_source",
            )
        ]
        verbose_name = "Journal Entry"
        verbose_name_plural = "Journal Entries"

    def __str__(self):
        return f"{self.journal_number} – {self.entry_date}"

    @property
    def is_reversed(self) -> bool:
        return self.reversed_at is not None

    def clean(self):
        self.description = (self.description or "").strip()
        if not self.description:
            raise ValidationError("Journal entry description is required")

        self.source_id = str(self.source_id or "").strip()
        if not self.source_id:
            raise ValidationError("Journal entry source_id is required")

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("JournalEntry records are immutable once created")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("JournalEntry records are immutable and cannot be deleted")
