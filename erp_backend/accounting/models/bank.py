# accounting/models/bank.py

"""
======================================================
PATH: accounting/models/bank.py
======================================================
BANK / CASH REGISTER MODEL

A bank account or physical cash drawer, linked 1:1 to its ledger account.

Guarantees:
- stored_balance is the last known balance, maintained by posting services
  (F() updates only, never recomputed here)
- The ledger-derived balance lives in bank_balance_service and may diverge;
  divergence is reported, never auto-corrected
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from accounting.models.account import Account


class Bank(models.Model):
    class BankType(models.TextChoices):
        BANK = "bank", "Bank"
        CASH = "cash", "Cash"

    name = models.CharField(max_length=150)
    bank_type = models.CharField(
        max_length=10,
        choices=BankType.choices,
        default=BankType.BANK,
    )

    account = models.OneToOneField(
        Account,
        on_delete=models.PROTECT,
        related_name="bank",
        help_text="Ledger account whose postings represent this bank's cash",
    )

    account_number = models.CharField(max_length=64, blank=True, default="")
    account_holder = models.CharField(max_length=150, blank=True, default="")

    initial_balance = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    stored_balance = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["bank_type"], name="acc_bank_type_idx"),
            models.Index(fields=["is_active"], name="acc_bank_active_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_bank_type_display()})"

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError({"name": "Bank name is required"})

        if self.account_id and self.account.account_type != Account.AccountType.ASSET:
            raise ValidationError({"account": "Bank ledger account must be an asset account"})

    def save(self, *args, **kwargs):
        if not self.pk and self.stored_balance == Decimal("0.00"):
            self.stored_balance = self.initial_balance or Decimal("0.00")

        self.full_clean()
        return super().save(*args, **kwargs)
