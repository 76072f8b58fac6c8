# accounting/api/serializers/bank_transfers.py

from rest_framework import serializers

from accounting.models.bank_transfer import BankTransfer


class BankTransferSerializer(serializers.ModelSerializer):
    from_bank_name = serializers.CharField(source="from_bank.name", read_only=True)
    to_bank_name = serializers.CharField(source="to_bank.name", read_only=True)
    journal_number = serializers.CharField(
        source="journal_entry.journal_number", read_only=True, default=None
    )

    class Meta:
        model = BankTransfer
        fields = [
            "id",
            "number",
            "transfer_date",
            "from_bank",
            "from_bank_name",
            "to_bank",
            "to_bank_name",
            "amount",
            "status",
            "description",
            "journal_entry",
            "journal_number",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BankTransferCreateSerializer(serializers.Serializer):
    from_bank_id = serializers.IntegerField()
    to_bank_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    transfer_date = serializers.DateField(required=False)
    description = serializers.CharField(required=False, allow_blank=True, default="")
