# sales/models/customer.py

from django.db import models


class Customer(models.Model):
    """
    Customer master (maintained by the CRUD layer).
    """

    code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    payment_term_days = models.PositiveIntegerField(
        default=0,
        help_text="Default days until due for credit sales",
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="sales_customer_name_idx"),
            models.Index(fields=["is_active"], name="sales_customer_active_idx"),
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"
