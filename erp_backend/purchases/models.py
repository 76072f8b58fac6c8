# purchases/models.py

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

ZERO = Decimal("0.00")
PERCENT_VALIDATORS = [MinValueValidator(ZERO), MaxValueValidator(Decimal("100"))]

User = settings.AUTH_USER_MODEL


class Supplier(models.Model):
    """
    Supplier master.
    """

    code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    payment_term_days = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="pur_supplier_name_idx"),
            models.Index(fields=["is_active"], name="pur_supplier_active_idx"),
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"


class Purchase(models.Model):
    """
    Supplier invoice header.

    - Header totals are written only by accounting.services.document_totals
    - Financially locked once CONFIRMED
    - remaining_amount = total_amount - applied amount of POSTED payments
    """

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        CONFIRMED = "confirmed", "Confirmed"
        CANCELLED = "cancelled", "Cancelled"

    purchase_number = models.CharField(max_length=32, unique=True)

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name="purchases",
    )

    supplier_invoice_number = models.CharField(max_length=64, blank=True, default="")

    purchase_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(null=True, blank=True)

    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.DRAFT,
    )

    tax_percent = models.DecimalField(max_digits=5, decimal_places=2, default=ZERO)

    subtotal_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    discount1_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    discount2_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    discount3_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    discount4_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    total_after_discounts = models.DecimalField(
        max_digits=14, decimal_places=2, default=ZERO
    )
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)

    # Confirmation entry; cleared again when the document is cancelled
    journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
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
        related_name="purchases_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-purchase_date", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(total_amount__gte=ZERO),
                name="purchase_total_nonnegative",
            ),
        ]
        indexes = [
            models.Index(fields=["supplier", "status"], name="pur_purchase_supp_status_idx"),
            models.Index(fields=["purchase_date"], name="pur_purchase_date_idx"),
            models.Index(fields=["due_date"], name="pur_purchase_due_idx"),
        ]

    _LOCKED_FIELDS = (
        "supplier_id",
        "purchase_date",
        "due_date",
        "tax_percent",
        "subtotal_amount",
        "total_amount",
    )

    def __str__(self):
        return f"{self.purchase_number} | {self.total_amount}"

    @property
    def effective_due_date(self):
        return self.due_date or self.purchase_date

    @property
    def paid_amount(self) -> Decimal:
        agg = self.payments.filter(status="posted").aggregate(
            total=Coalesce(Sum("applied_amount"), ZERO)
        )
        return agg["total"]

    @property
    def remaining_amount(self) -> Decimal:
        return (self.total_amount or ZERO) - self.paid_amount

    def clean(self):
        if not (self.purchase_number or "").strip():
            raise ValidationError({"purchase_number": "purchase_number is required"})

        if self.due_date and self.purchase_date and self.due_date < self.purchase_date:
            raise ValidationError({"due_date": "due_date cannot be before purchase_date"})

        if self.pk:
            previous = Purchase.objects.filter(pk=self.pk).first()
            if previous is not None and previous.status == self.Status.CONFIRMED:
                for f in self._LOCKED_FIELDS:
                    if getattr(previous, f) != getattr(self, f):
                        raise ValidationError(
                            f"Purchase is locked once confirmed; '{f}' cannot change"
                        )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class PurchaseItem(models.Model):
    purchase = models.ForeignKey(
        Purchase,
        on_delete=models.CASCADE,
        related_name="items",
    )

    description = models.CharField(max_length=255)

    quantity = models.DecimalField(
        max_digits=12, decimal_places=3, validators=[MinValueValidator(ZERO)]
    )
    unit_price = models.DecimalField(
        max_digits=14, decimal_places=2, validators=[MinValueValidator(ZERO)]
    )

    discount1_percent = models.DecimalField(
        max_digits=5, decimal_places=2, default=ZERO, validators=PERCENT_VALIDATORS
    )
    discount2_percent = models.DecimalField(
        max_digits=5, decimal_places=2, default=ZERO, validators=PERCENT_VALIDATORS
    )
    discount3_percent = models.DecimalField(
        max_digits=5, decimal_places=2, default=ZERO, validators=PERCENT_VALIDATORS
    )
    discount4_percent = models.DecimalField(
        max_digits=5, decimal_places=2, default=ZERO, validators=PERCENT_VALIDATORS
    )

    gross_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    net_amount = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.description} x {self.quantity}"
