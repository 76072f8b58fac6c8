# accounting/models/cash_transaction.py

"""
======================================================
PATH: accounting/models/cash_transaction.py
======================================================
CASH TRANSACTION MODEL (CASH-IN / CASH-OUT)

Created in DRAFT by the entry workflow; posting and reversal are owned by
accounting.services.cash_posting_service.

Guarantees:
- amount > 0
- Financial fields are read-only while POSTED (reverse first)
- journal_entry points at the live posting entry (None while draft)
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.bank import Bank
from accounting.models.journal import JournalEntry

User = settings.AUTH_USER_MODEL

FINANCIAL_FIELDS = ("kind", "transaction_date", "bank_id", "account_id", "amount")


class CashTransaction(models.Model):
    class Kind(models.TextChoices):
        CASH_IN = "cash_in", "Cash in"
        CASH_OUT = "cash_out", "Cash out"

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        POSTED = "posted", "Posted"

    number = models.CharField(max_length=32, unique=True)
    kind = models.CharField(max_length=10, choices=Kind.choices)

    transaction_date = models.DateField(default=timezone.localdate)

    bank = models.ForeignKey(
        Bank,
        on_delete=models.PROTECT,
        related_name="cash_transactions",
    )
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="cash_transactions",
        help_text="Income account (cash-in) or expense account (cash-out)",
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
        related_name="cash_transactions_created",
    )
    updated_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cash_transactions_updated",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-transaction_date", "-id"]
        indexes = [
            models.Index(fields=["kind", "transaction_date"], name="acc_cash_kind_date_idx"),
            models.Index(fields=["status"], name="acc_cash_status_idx"),
            models.Index(fields=["bank", "transaction_date"], name="acc_cash_bank_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=Decimal("0.00")),
                name="chk_cash_transaction_amount_positive",
            ),
        ]

    def __str__(self):
        return f"{self.number} ({self.get_kind_display()}) {self.amount}"

    @property
    def is_posted(self) -> bool:
        return self.status == self.Status.POSTED

    def clean(self):
        if self.amount is None or self.amount <= Decimal("0.00"):
            raise ValidationError({"amount": "Amount must be > 0"})

        if self.account_id:
            expected = (
                Account.AccountType.INCOME
                if self.kind == self.Kind.CASH_IN
                else Account.AccountType.EXPENSE
            )
            if self.account.account_type != expected:
                raise ValidationError(
                    {"account": f"{self.get_kind_display()} requires an {expected} account"}
                )

        if self.pk and self.is_posted:
            previous = (
                CashTransaction.objects.filter(pk=self.pk)
                .values(*FINANCIAL_FIELDS, "status")
                .first()
            )
            if previous and previous["status"] == self.Status.POSTED:
                for field in FINANCIAL_FIELDS:
                    if previous[field] != getattr(self, field):
                        raise ValidationError(
                            "Posted cash transactions are read-only; reverse before editing"
                        )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
