# payments/api/serializers.py

from rest_framework import serializers

from payments.models import OverpaymentTransaction, Payment


class OverpaymentTransactionSerializer(serializers.ModelSerializer):
    journal_number = serializers.CharField(
        source="journal_entry.journal_number", read_only=True, default=None
    )

    class Meta:
        model = OverpaymentTransaction
        fields = [
            "id",
            "transaction_number",
            "payment",
            "transaction_type",
            "amount",
            "transaction_date",
            "bank",
            "notes",
            "journal_entry",
            "journal_number",
            "created_at",
        ]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    """
    Output serializer (DB truth) - the overpayment split is set by posting only.
    """

    bank_name = serializers.CharField(source="bank.name", read_only=True)
    reference_number = serializers.SerializerMethodField()
    overpayment_transactions = OverpaymentTransactionSerializer(many=True, read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "payment_number",
            "reference_type",
            "sale",
            "purchase",
            "reference_number",
            "payment_date",
            "amount_paid",
            "applied_amount",
            "overpayment_amount",
            "overpayment_status",
            "bank",
            "bank_name",
            "payment_method",
            "status",
            "journal_entry",
            "notes",
            "overpayment_transactions",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_reference_number(self, obj) -> str | None:
        if obj.sale_id:
            return obj.sale.sale_number
        if obj.purchase_id:
            return obj.purchase.purchase_number
        return None


class PaymentCreateSerializer(serializers.Serializer):
    """
    Input serializer (Swagger-visible). Creates a DRAFT payment.
    """

    reference_type = serializers.ChoiceField(choices=Payment.ReferenceType.choices)
    document_id = serializers.IntegerField()
    amount_paid = serializers.DecimalField(max_digits=14, decimal_places=2)
    bank_id = serializers.IntegerField()
    payment_date = serializers.DateField(required=False)
    payment_method = serializers.ChoiceField(
        choices=Payment.Method.choices, required=False, default=Payment.Method.TRANSFER
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class PaymentReverseSerializer(serializers.Serializer):
    reversal_date = serializers.DateField(required=False, allow_null=True)


class OverpaymentRefundSerializer(serializers.Serializer):
    bank_id = serializers.IntegerField()
    transaction_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class OverpaymentWriteOffSerializer(serializers.Serializer):
    transaction_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
