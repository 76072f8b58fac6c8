# accounting/models/sequence.py

from __future__ import annotations

from django.db import models


class DocumentSequence(models.Model):
    """
    Per-prefix, per-day counter behind accounting.services.numbering.

    The row is locked (select_for_update) while a number is handed out, so two
    writers numbering different documents on the same day queue on it instead
    of reading the same "last" number.
    """

    prefix = models.CharField(max_length=16)
    day = models.DateField()
    last_value = models.PositiveBigIntegerField(default=0)

    class Meta:
        ordering = ["prefix", "-day"]
        constraints = [
            models.UniqueConstraint(
                fields=["prefix", "day"],
                name="uniq_document_sequence_prefix_day",
            ),
        ]
        verbose_name = "Document Sequence"
        verbose_name_plural = "Document Sequences"

    def __str__(self):
        return f"{self.prefix} {self.day:%Y-%m-%d} #{self.last_value}"
