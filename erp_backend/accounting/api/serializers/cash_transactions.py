# accounting/api/serializers/cash_transactions.py

from rest_framework import serializers

from accounting.models.cash_transaction import CashTransaction


class CashTransactionSerializer(serializers.ModelSerializer):
    bank_name = serializers.CharField(source="bank.name", read_only=True)
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)
    journal_number = serializers.CharField(
        source="journal_entry.journal_number", read_only=True, default=None
    )

    class Meta:
        model = CashTransaction
        fields = [
            "id",
            "number",
            "kind",
            "transaction_date",
            "bank",
            "bank_name",
            "account",
            "account_code",
            "account_name",
            "amount",
            "status",
            "description",
            "journal_entry",
            "journal_number",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CashTransactionCreateSerializer(serializers.Serializer):
    """
    Input serializer (Swagger-visible). Creates a DRAFT; posting is a separate action.
    """

    kind = serializers.ChoiceField(choices=CashTransaction.Kind.choices)
    bank_id = serializers.IntegerField()
    account_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    transaction_date = serializers.DateField(required=False)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class ReversalRequestSerializer(serializers.Serializer):
    reversal_date = serializers.DateField(required=False, allow_null=True)
