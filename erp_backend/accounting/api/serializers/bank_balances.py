# accounting/api/serializers/bank_balances.py

from rest_framework import serializers

MONEY = {"max_digits": 16, "decimal_places": 2}


class BankBalanceSerializer(serializers.Serializer):
    bank_id = serializers.IntegerField()
    name = serializers.CharField()
    bank_type = serializers.CharField()
    account_id = serializers.IntegerField()
    account_code = serializers.CharField()
    stored_balance = serializers.DecimalField(**MONEY)
    calculated_balance = serializers.DecimalField(**MONEY)
    difference = serializers.DecimalField(**MONEY)
    is_divergent = serializers.BooleanField()
