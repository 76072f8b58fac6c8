# sales/models/sale.py

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from sales.models.customer import Customer

User = settings.AUTH_USER_MODEL

ZERO = Decimal("0.00")


class Sale(models.Model):
    """
    Sales invoice header (credit sale to a customer).

    GUARANTEES:
    - Header totals are written only by accounting.services.document_totals
    - Financially locked once CONFIRMED (totals, customer, dates)
    - remaining_amount = total_amount - applied amount of POSTED payments
    """

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        CONFIRMED = "confirmed", "Confirmed"
        CANCELLED = "cancelled", "Cancelled"

    sale_number = models.CharField(max_length=32, unique=True)

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="sales",
    )

    sale_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(
        null=True,
        blank=True,
        help_text="Falls back to sale_date for aging when empty",
    )

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
        related_name="sales_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-sale_date", "-id"]
        indexes = [
            models.Index(fields=["customer", "status"], name="sales_sale_cust_status_idx"),
            models.Index(fields=["sale_date"], name="sales_sale_date_idx"),
            models.Index(fields=["due_date"], name="sales_sale_due_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(total_amount__gte=ZERO),
                name="sale_total_nonnegative",
            ),
        ]

    _LOCKED_FIELDS = (
        "customer_id",
        "sale_date",
        "due_date",
        "tax_percent",
        "subtotal_amount",
        "total_amount",
    )

    def __str__(self):
        return f"{self.sale_number} | {self.total_amount}"

    @property
    def effective_due_date(self):
        return self.due_date or self.sale_date

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
        if not (self.sale_number or "").strip():
            raise ValidationError({"sale_number": "sale_number is required"})

        if self.due_date and self.sale_date and self.due_date < self.sale_date:
            raise ValidationError({"due_date": "due_date cannot be before sale_date"})

        if self.pk:
            previous = Sale.objects.filter(pk=self.pk).first()
            if previous is not None and previous.status == self.Status.CONFIRMED:
                for f in self._LOCKED_FIELDS:
                    if getattr(previous, f) != getattr(self, f):
                        raise ValidationError(
                            f"Sale is locked once confirmed; '{f}' cannot change"
                        )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
