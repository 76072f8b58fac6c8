# payments/models/payment.py

"""
======================================================
PATH: payments/models/payment.py
======================================================
PAYMENT (SALE PAYMENT / PURCHASE PAYMENT)

reference_type discriminates the target document; exactly one of
sale / purchase is set and it must match reference_type (DB-enforced).

Overpayment fields are frozen at posting time by payment_service:
- applied_amount      = min(amount_paid, outstanding)
- overpayment_amount  = amount_paid - applied_amount
- overpayment_status  = pending if overpayment_amount > 0 else none

Resolution terminals by direction:
- sale:     refunded | converted_to_income
- purchase: refunded | written_off
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from accounting.models.bank import Bank
from accounting.models.journal import JournalEntry

User = settings.AUTH_USER_MODEL
ZERO = Decimal("0.00")

FINANCIAL_FIELDS = (
    "reference_type",
    "sale_id",
    "purchase_id",
    "payment_date",
    "amount_paid",
    "bank_id",
)


class Payment(models.Model):
    class ReferenceType(models.TextChoices):
        SALE = "sale", "Sale"
        PURCHASE = "purchase", "Purchase"

    class Method(models.TextChoices):
        CASH = "cash", "Cash"
        TRANSFER = "transfer", "Transfer"
        GIRO = "giro", "Giro"
        CHEQUE = "cek", "Cheque"
        OTHER = "other", "Other"
        REFUND = "refund", "Refund"

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        POSTED = "posted", "Posted"

    class OverpaymentStatus(models.TextChoices):
        NONE = "none", "None"
        PENDING = "pending", "Pending"
        REFUNDED = "refunded", "Refunded"
        WRITTEN_OFF = "written_off", "Written off"
        CONVERTED_TO_INCOME = "converted_to_income", "Converted to income"

    RESOLVED_STATUSES = (
        OverpaymentStatus.REFUNDED,
        OverpaymentStatus.WRITTEN_OFF,
        OverpaymentStatus.CONVERTED_TO_INCOME,
    )

    payment_number = models.CharField(max_length=32, unique=True)

    reference_type = models.CharField(max_length=10, choices=ReferenceType.choices)
    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )
    purchase = models.ForeignKey(
        "purchases.Purchase",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )

    payment_date = models.DateField()
    amount_paid = models.DecimalField(max_digits=14, decimal_places=2)
    applied_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)

    bank = models.ForeignKey(
        Bank,
        on_delete=models.PROTECT,
        related_name="payments",
    )
    payment_method = models.CharField(
        max_length=16,
        choices=Method.choices,
        default=Method.TRANSFER,
    )

    overpayment_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=ZERO
    )
    overpayment_status = models.CharField(
        max_length=24,
        choices=OverpaymentStatus.choices,
        default=OverpaymentStatus.NONE,
    )

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.DRAFT,
    )

    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )

    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments_created",
    )
    updated_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments_updated",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-payment_date", "-id"]
        indexes = [
            models.Index(fields=["reference_type", "status"], name="pay_payment_ref_status_idx"),
            models.Index(fields=["overpayment_status"], name="pay_payment_ovp_status_idx"),
            models.Index(fields=["payment_date"], name="pay_payment_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(reference_type="sale", sale__isnull=False, purchase__isnull=True)
                    | Q(reference_type="purchase", sale__isnull=True, purchase__isnull=False)
                ),
                name="chk_payment_single_reference",
            ),
            models.CheckConstraint(
                condition=Q(amount_paid__gt=ZERO),
                name="chk_payment_amount_positive",
            ),
            models.CheckConstraint(
                condition=Q(overpayment_amount__gte=ZERO) & Q(applied_amount__gte=ZERO),
                name="chk_payment_split_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.payment_number} ({self.get_reference_type_display()}) {self.amount_paid}"

    @property
    def is_sale_payment(self) -> bool:
        return self.reference_type == self.ReferenceType.SALE

    @property
    def write_off_status(self) -> str:
        """Terminal status of the no-cash resolution for this direction."""
        if self.is_sale_payment:
            return self.OverpaymentStatus.CONVERTED_TO_INCOME
        return self.OverpaymentStatus.WRITTEN_OFF

    def clean(self):
        if self.amount_paid is None or self.amount_paid <= ZERO:
            raise ValidationError({"amount_paid": "Amount must be > 0"})

        if self.reference_type == self.ReferenceType.SALE:
            if not self.sale_id or self.purchase_id:
                raise ValidationError("Sale payments must reference exactly one sale")
        elif self.reference_type == self.ReferenceType.PURCHASE:
            if not self.purchase_id or self.sale_id:
                raise ValidationError("Purchase payments must reference exactly one purchase")

        allowed = {
            self.OverpaymentStatus.NONE,
            self.OverpaymentStatus.PENDING,
            self.OverpaymentStatus.REFUNDED,
            self.write_off_status,
        }
        if self.overpayment_status not in allowed:
            raise ValidationError(
                {"overpayment_status": f"{self.overpayment_status} is not valid for {self.reference_type} payments"}
            )

        if self.pk:
            previous = (
                Payment.objects.filter(pk=self.pk).values(*FINANCIAL_FIELDS, "status").first()
            )
            if (
                previous
                and previous["status"] == self.Status.POSTED
                and self.status == self.Status.POSTED
            ):
                for f in FINANCIAL_FIELDS:
                    if previous[f] != getattr(self, f):
                        raise ValidationError(
                            "Posted payments are read-only; reverse before editing"
                        )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
