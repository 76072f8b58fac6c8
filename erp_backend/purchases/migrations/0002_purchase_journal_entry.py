"""
======================================================
PATH: purchases/migrations/0002_purchase_journal_entry.py
======================================================
MIGRATION: LINK PURCHASES TO THEIR CONFIRMATION JOURNAL ENTRY
"""

from __future__ import annotations

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("accounting", "0002_sequences_transfers"),
        ("purchases", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="purchase",
            name="journal_entry",
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.PROTECT,
                related_name="+",
                to="accounting.journalentry",
            ),
        ),
    ]
