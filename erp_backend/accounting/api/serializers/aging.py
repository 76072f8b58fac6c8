# accounting/api/serializers/aging.py

from rest_framework import serializers

from accounting.services.aging_service import RECEIVABLE, SCOPES

MONEY = {"max_digits": 16, "decimal_places": 2}


class AgingQuerySerializer(serializers.Serializer):
    as_of = serializers.DateField(required=False)
    scope = serializers.ChoiceField(choices=SCOPES, required=False, default=RECEIVABLE)
    party_id = serializers.IntegerField(required=False, allow_null=True)


class AgingBucketsSerializer(serializers.Serializer):
    current = serializers.DecimalField(**MONEY)
    days_0_30 = serializers.DecimalField(**MONEY)
    days_31_60 = serializers.DecimalField(**MONEY)
    days_61_90 = serializers.DecimalField(**MONEY)
    days_over_90 = serializers.DecimalField(**MONEY)


class AgingRecordSerializer(AgingBucketsSerializer):
    document_id = serializers.IntegerField()
    document_number = serializers.CharField()
    party_id = serializers.IntegerField()
    party_name = serializers.CharField()
    document_date = serializers.DateField()
    due_date = serializers.DateField()
    days_overdue = serializers.IntegerField()
    days_until_due = serializers.IntegerField()
    bucket = serializers.CharField()
    total_amount = serializers.DecimalField(**MONEY)
    remaining_amount = serializers.DecimalField(**MONEY)


class AgingPartySerializer(AgingBucketsSerializer):
    party_id = serializers.IntegerField()
    party_name = serializers.CharField()
    document_count = serializers.IntegerField()
    total = serializers.DecimalField(**MONEY)


class AgingTotalsSerializer(AgingBucketsSerializer):
    overdue_total = serializers.DecimalField(**MONEY)
    total = serializers.DecimalField(**MONEY)


class AgingSerializer(serializers.Serializer):
    scope = serializers.CharField()
    as_of = serializers.DateField()
    records = AgingRecordSerializer(many=True)
    per_party = AgingPartySerializer(many=True)
    totals = AgingTotalsSerializer()
    grand_total = serializers.DecimalField(**MONEY)
