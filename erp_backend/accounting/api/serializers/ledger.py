# accounting/api/serializers/ledger.py

from rest_framework import serializers

MONEY = {"max_digits": 16, "decimal_places": 2}


class LedgerQuerySerializer(serializers.Serializer):
    account_id = serializers.IntegerField(required=False, allow_null=True)
    bank_id = serializers.IntegerField(required=False, allow_null=True)
    date_from = serializers.DateField()
    date_to = serializers.DateField()
    include_children = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if attrs["date_from"] > attrs["date_to"]:
            raise serializers.ValidationError(
                {"date_from": "date_from must be on or before date_to"}
            )
        if attrs.get("account_id") and attrs.get("bank_id"):
            raise serializers.ValidationError("Pass either account_id or bank_id, not both")
        return attrs


class LedgerLineSerializer(serializers.Serializer):
    journal_entry_id = serializers.IntegerField()
    journal_number = serializers.CharField()
    entry_date = serializers.DateField()
    source_type = serializers.CharField()
    source_id = serializers.CharField()
    description = serializers.CharField()
    account_id = serializers.IntegerField()
    account_code = serializers.CharField()
    debit = serializers.DecimalField(**MONEY)
    credit = serializers.DecimalField(**MONEY)
    balance = serializers.DecimalField(**MONEY)
    is_reversal = serializers.BooleanField()
    is_reversed = serializers.BooleanField()


class LedgerAccountSummarySerializer(serializers.Serializer):
    account_id = serializers.IntegerField()
    account_code = serializers.CharField()
    account_name = serializers.CharField()
    account_type = serializers.CharField()
    opening_balance = serializers.DecimalField(**MONEY)
    debit_total = serializers.DecimalField(**MONEY)
    credit_total = serializers.DecimalField(**MONEY)
    closing_balance = serializers.DecimalField(**MONEY)


class LedgerSerializer(serializers.Serializer):
    """
    Single-account ledger (account_id set) or all-account summary
    (account_id null, `accounts` populated, `lines` empty).
    """

    account_id = serializers.IntegerField(allow_null=True)
    account_code = serializers.CharField(required=False)
    account_name = serializers.CharField(required=False)
    account_type = serializers.CharField(required=False)
    include_descendants = serializers.BooleanField(required=False)
    bank_id = serializers.IntegerField(required=False)
    bank_name = serializers.CharField(required=False)
    date_from = serializers.DateField()
    date_to = serializers.DateField()
    opening_balance = serializers.DecimalField(required=False, **MONEY)
    debit_total = serializers.DecimalField(**MONEY)
    credit_total = serializers.DecimalField(**MONEY)
    closing_balance = serializers.DecimalField(required=False, **MONEY)
    accounts = LedgerAccountSummarySerializer(many=True, required=False)
    lines = LedgerLineSerializer(many=True)
