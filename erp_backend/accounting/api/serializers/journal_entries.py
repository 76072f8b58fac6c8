# accounting/api/serializers/journal_entries.py

from rest_framework import serializers

from accounting.models.journal import JournalEntry
from accounting.models.ledger import JournalLine


class JournalLineSerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = JournalLine
        fields = [
            "id",
            "line_no",
            "account",
            "account_code",
            "account_name",
            "debit",
            "credit",
            "description",
        ]
        read_only_fields = fields


class JournalEntrySerializer(serializers.ModelSerializer):
    """
    Output serializer (DB truth). Journal entries are never written via the API.
    """

    lines = JournalLineSerializer(many=True, read_only=True)
    reversal_id = serializers.SerializerMethodField()
    is_reversed = serializers.BooleanField(read_only=True)

    class Meta:
        model = JournalEntry
        fields = [
            "id",
            "journal_number",
            "entry_date",
            "source_type",
            "source_id",
            "description",
            "status",
            "reversal_of",
            "reversal_id",
            "reversed_at",
            "is_reversed",
            "created_at",
            "lines",
        ]
        read_only_fields = fields

    def get_reversal_id(self, obj) -> int | None:
        reversal = getattr(obj, "reversal", None)
        return reversal.id if reversal is not None else None
