# accounting/models/account.py

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Account(models.Model):
    """
    Represents a single account within the chart of accounts.

    Guarantees:
    - Account codes are unique and normalized (trimmed)
    - The parent/child tree never contains a cycle
    - code + account_type are frozen once a posted journal line references the account
      (name, description and is_active stay editable)
    """

    class AccountType(models.TextChoices):
        ASSET = "asset", "Asset"
        LIABILITY = "liability", "Liability"
        EQUITY = "equity", "Equity"
        INCOME = "income", "Income"
        EXPENSE = "expense", "Expense"

    # Debit-normal types: balance grows on debit
    DEBIT_NORMAL_TYPES = (AccountType.ASSET, AccountType.EXPENSE)

    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=150)

    account_type = models.CharField(
        max_length=20,
        choices=AccountType.choices,
    )

    parent = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="children",
    )

    description = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        verbose_name = "Account"
        verbose_name_plural = "Accounts"
        indexes = [
            models.Index(fields=["account_type"], name="acc_account_type_idx"),
            models.Index(fields=["is_active"], name="acc_account_active_idx"),
            models.Index(fields=["parent"], name="acc_account_parent_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(code=""),
                name="chk_account_code_not_blank",
            ),
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_account_name_not_blank",
            ),
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"

    def _validate_no_cycle(self):
        if not self.parent_id:
            return
        if self.pk and self.parent_id == self.pk:
            raise ValidationError({"parent": "An account cannot be its own parent"})

        parent_by_id = dict(Account.objects.values_list("id", "parent_id"))
        seen = set()
        current = self.parent_id
        while current is not None:
            if self.pk and current == self.pk:
                raise ValidationError(
                    {"parent": "An account cannot be its own ancestor"}
                )
            if current in seen:
                raise ValidationError({"parent": "Account tree already contains a cycle"})
            seen.add(current)
            current = parent_by_id.get(current)

    def _validate_frozen_fields(self):
        if not self.pk:
            return

        previous = (
            Account.objects.filter(pk=self.pk).values("code", "account_type").first()
        )
        if previous is None:
            return

        changed = previous["code"] != self.code or (
            previous["account_type"] != self.account_type
        )
        if not changed:
            return

        if self.journal_lines.filter(journal_entry__status="posted").exists():
            raise ValidationError(
                "Account code and type cannot change once posted journal lines reference the account"
            )

    def clean(self):
        self.code = (self.code or "").strip()
        self.name = (self.name or "").strip()

        if not self.code:
            raise ValidationError("Account code is required")
        if not self.name:
            raise ValidationError("Account name is required")

        self._validate_no_cycle()
        self._validate_frozen_fields()

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
