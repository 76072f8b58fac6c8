"""
======================================================
PATH: payments/migrations/0001_initial.py
======================================================
MIGRATION: PAYMENTS + OVERPAYMENT TRANSACTIONS
"""

from __future__ import annotations

from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("accounting", "0001_initial"),
        ("purchases", "0001_initial"),
        ("sales", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("payment_number", models.CharField(max_length=32, unique=True)),
                (
                    "reference_type",
                    models.CharField(
                        choices=[("sale", "Sale"), ("purchase", "Purchase")],
                        max_length=10,
                    ),
                ),
                ("payment_date", models.DateField()),
                ("amount_paid", models.DecimalField(decimal_places=2, max_digits=14)),
                ("applied_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("cash", "Cash"),
                            ("transfer", "Transfer"),
                            ("giro", "Giro"),
                            ("cek", "Cheque"),
                            ("other", "Other"),
                            ("refund", "Refund"),
                        ],
                        default="transfer",
                        max_length=16,
                    ),
                ),
                ("overpayment_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                (
                    "overpayment_status",
                    models.CharField(
                        choices=[
                            ("none", "None"),
                            ("pending", "Pending"),
                            ("refunded", "Refunded"),
                            ("written_off", "Written off"),
                            ("converted_to_income", "Converted to income"),
                        ],
                        default="none",
                        max_length=24,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("posted", "Posted")],
                        default="draft",
                        max_length=10,
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "bank",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="accounting.bank",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="payments_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "journal_entry",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="accounting.journalentry",
                    ),
                ),
                (
                    "purchase",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="purchases.purchase",
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="sales.sale",
                    ),
                ),
                (
                    "updated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="payments_updated",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-payment_date", "-id"],
                "indexes": [
                    models.Index(fields=["reference_type", "status"], name="pay_payment_ref_status_idx"),
                    models.Index(fields=["overpayment_status"], name="pay_payment_ovp_status_idx"),
                    models.Index(fields=["payment_date"], name="pay_payment_date_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("purchase__isnull", True), ("reference_type", "sale"), ("sale__isnull", False)),
                            models.Q(("purchase__isnull", False), ("reference_type", "purchase"), ("sale__isnull", True)),
                            _connector="OR",
                        ),
                        name="chk_payment_single_reference",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("amount_paid__gt", Decimal("0.00"))),
                        name="chk_payment_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("overpayment_amount__gte", Decimal("0.00")),
                            ("applied_amount__gte", Decimal("0.00")),
                        ),
                        name="chk_payment_split_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OverpaymentTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("transaction_number", models.CharField(max_length=32, unique=True)),
                (
                    "transaction_type",
                    models.CharField(
                        choices=[
                            ("refund", "Refund"),
                            ("write_off", "Write off"),
                            ("convert_to_income", "Convert to income"),
                        ],
                        max_length=24,
                    ),
                ),
                ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("transaction_date", models.DateField()),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "bank",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="overpayment_transactions",
                        to="accounting.bank",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="overpayment_transactions_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "journal_entry",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="overpayment_transaction",
                        to="accounting.journalentry",
                    ),
                ),
                (
                    "payment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="overpayment_transactions",
                        to="payments.payment",
                    ),
                ),
            ],
            options={
                "ordering": ["-transaction_date", "-id"],
                "indexes": [
                    models.Index(fields=["payment", "transaction_type"], name="pay_ovp_payment_type_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", Decimal("0.00"))),
                        name="chk_overpayment_tx_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("transaction_type", "refund"), _negated=True),
                            ("bank__isnull", False),
                            _connector="OR",
                        ),
                        name="chk_overpayment_refund_has_bank",
                    ),
                ],
            },
        ),
    ]
