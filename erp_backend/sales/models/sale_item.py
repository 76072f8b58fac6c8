# sales/models/sale_item.py

"""
SALE ITEM

One invoice line: quantity x unit price with up to four sequential discount
percentages. Amount columns are snapshots written by document_totals.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .sale import Sale

ZERO = Decimal("0.00")
PERCENT_VALIDATORS = [MinValueValidator(ZERO), MaxValueValidator(Decimal("100"))]


class SaleItem(models.Model):
    sale = models.ForeignKey(
        Sale,
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
