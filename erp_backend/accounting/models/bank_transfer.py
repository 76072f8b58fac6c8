# accounting/models/bank_transfer.py

"""
======================================================
PATH: accounting/models/bank_transfer.py
======================================================
BANK TRANSFER MODEL (BANK / CASH REGISTER -> BANK / CASH REGISTER)

Same lifecycle as CashTransaction: created DRAFT, posted and reversed by
accounting.services.bank_transfer_service.

Guarantees:
- amount > 0
- from_bank != to_bank (DB-enforced)
- Financial fields are read-only while POSTED (reverse first)
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from accounting.models.bank import Bank
from accounting.models.journal import JournalEntry

User = settings.AUTH_USER_MODEL

FINANCIAL_FIELDS = ("transfer_date", "from_bank_id", "to_bank_id", "amount")


class BankTransfer(models.Model):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        POSTED = "posted", "Posted"

    number = models.CharField(max_length=32, unique=True)
    transfer_date = models.DateField(default=timezone.localdate)

    from_bank = models.ForeignKey(
        Bank,
        on_delete=models.PROTECT,
        related_name="transfers_out",
    )
    to_bank = models.ForeignKey(
        Bank,
        on_delete=models.PROTECT,
        related_name="transfers_in",
    )

    amount = models.DecimalField(max_digits=14, decimal_places=2)

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.DRAFT,
    )

    description = models.TextField(blank=True, default="")

    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bank_transfers_created",
    )
    updated_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bank_transfers_updated",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-transfer_date", "-id"]
        indexes = [
            models.Index(fields=["status"], name="acc_transfer_status_idx"),
            models.Index(fields=["transfer_date"], name="acc_transfer_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=Decimal("0.00")),
                name="chk_bank_transfer_amount_positive",
            ),
            models.CheckConstraint(
                condition=~Q(from_bank=F("to_bank")),
                name="chk_bank_transfer_distinct_banks",
            ),
        ]

    def __str__(self):
        return f"{self.number} {self.amount}"

    def clean(self):
        if self.amount is None or self.amount <= Decimal("0.00"):
            raise ValidationError({"amount": "Amount must be > 0"})

        if self.from_bank_id and self.from_bank_id == self.to_bank_id:
            raise ValidationError({"to_bank": "Source and destination bank must differ"})

        if self.pk and self.status == self.Status.POSTED:
            previous = (
                BankTransfer.objects.filter(pk=self.pk)
                .values(*FINANCIAL_FIELDS, "status")
                .first()
            )
            if previous and previous["status"] == self.Status.POSTED:
                for field in FINANCIAL_FIELDS:
                    if previous[field] != getattr(self, field):
                        raise ValidationError(
                            "Posted transfers are read-only; reverse before editing"
                        )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
