"""
======================================================
PATH: accounting/migrations/0002_sequences_transfers.py
======================================================
MIGRATION: NUMBERING SEQUENCES + BANK TRANSFERS

Creates:
- DocumentSequence (locked per-prefix, per-day counter)
- BankTransfer (bank -> bank documents)

Alters:
- JournalEntry.source_type choices (sale, purchase, bank opening, bank transfer)
"""

from __future__ import annotations

from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("accounting", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.AlterField(
            model_name="journalentry",
            name="source_type",
            field=models.CharField(
                choices=[
                    ("cash_in", "Cash in"),
                    ("cash_out", "Cash out"),
                    ("sale_payment", "Sale payment"),
                    ("purchase_payment", "Purchase payment"),
                    ("overpayment", "Overpayment resolution"),
                    ("sale", "Sale"),
                    ("purchase", "Purchase"),
                    ("bank_opening", "Bank opening balance"),
                    ("bank_transfer", "Bank transfer"),
                ],
                max_length=32,
            ),
        ),
        migrations.CreateModel(
            name="DocumentSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("prefix", models.CharField(max_length=16)),
                ("day", models.DateField()),
                ("last_value", models.PositiveBigIntegerField(default=0)),
            ],
            options={
                "verbose_name": "Document Sequence",
                "verbose_name_plural": "Document Sequences",
                "ordering": ["prefix", "-day"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("prefix", "day"),
                        name="uniq_document_sequence_prefix_day",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BankTransfer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.CharField(max_length=32, unique=True)),
                ("transfer_date", models.DateField(default=django.utils.timezone.localdate)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("posted", "Posted")],
                        default="draft",
                        max_length=10,
                    ),
                ),
                ("description", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "from_bank",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transfers_out",
                        to="accounting.bank",
                    ),
                ),
                (
                    "to_bank",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transfers_in",
                        to="accounting.bank",
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
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="bank_transfers_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "updated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="bank_transfers_updated",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-transfer_date", "-id"],
                "indexes": [
                    models.Index(fields=["status"], name="acc_transfer_status_idx"),
                    models.Index(fields=["transfer_date"], name="acc_transfer_date_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", Decimal("0.00"))),
                        name="chk_bank_transfer_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("from_bank", models.F("to_bank")), _negated=True),
                        name="chk_bank_transfer_distinct_banks",
                    ),
                ],
            },
        ),
    ]
