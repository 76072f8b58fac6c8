# payments/models/overpayment.py

"""
OVERPAYMENT TRANSACTION (APPEND-ONLY)

One row per resolution of a payment's overpayment (refund, write-off or
conversion to income). Never updated or deleted once the journal entry is
linked; Σ amount per payment == payment.overpayment_amount once resolved.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from accounting.models.bank import Bank
from accounting.models.journal import JournalEntry

from .payment import Payment


class OverpaymentTransaction(models.Model):
    class Type(models.TextChoices):
        REFUND = "refund", "Refund"
        WRITE_OFF = "write_off", "Write off"
        CONVERT_TO_INCOME = "convert_to_income", "Convert to income"

    transaction_number = models.CharField(max_length=32, unique=True)

    payment = models.ForeignKey(
        Payment,
        on_delete=models.PROTECT,
        related_name="overpayment_transactions",
    )

    transaction_type = models.CharField(max_length=24, choices=Type.choices)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    transaction_date = models.DateField()

    bank = models.ForeignKey(
        Bank,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="overpayment_transactions",
    )

    notes = models.TextField(blank=True, default="")

    journal_entry = models.OneToOneField(
        JournalEntry,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="overpayment_transaction",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="overpayment_transactions_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-transaction_date", "-id"]
        indexes = [
            models.Index(fields=["payment", "transaction_type"], name="pay_ovp_payment_type_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=Decimal("0.00")),
                name="chk_overpayment_tx_amount_positive",
            ),
            models.CheckConstraint(
                condition=~Q(transaction_type="refund") | Q(bank__isnull=False),
                name="chk_overpayment_refund_has_bank",
            ),
        ]

    def __str__(self):
        return f"{self.transaction_number} {self.get_transaction_type_display()} {self.amount}"

    def clean(self):
        if self.amount is None or self.amount <= Decimal("0.00"):
            raise ValidationError({"amount": "Amount must be > 0"})
        if self.transaction_type == self.Type.REFUND and not self.bank_id:
            raise ValidationError({"bank": "Refunds require a bank"})

    def save(self, *args, **kwargs):
        if self.pk:
            previous = (
                OverpaymentTransaction.objects.filter(pk=self.pk)
                .values_list("journal_entry_id", flat=True)
                .first()
            )
            if previous is not None:
                raise ValidationError("OverpaymentTransaction records are immutable once posted")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("OverpaymentTransaction records cannot be deleted")
