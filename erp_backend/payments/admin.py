# payments/admin.py

from django.contrib import admin

from payments.models import OverpaymentTransaction, Payment


class OverpaymentTransactionInline(admin.TabularInline):
    model = OverpaymentTransaction
    extra = 0
    can_delete = False
    fields = ("transaction_number", "transaction_type", "amount", "transaction_date", "bank", "journal_entry")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        "payment_number",
        "reference_type",
        "payment_date",
        "amount_paid",
        "applied_amount",
        "overpayment_amount",
        "overpayment_status",
        "status",
    )
    list_filter = ("reference_type", "status", "overpayment_status", "payment_method")
    search_fields = ("payment_number", "sale__sale_number", "purchase__purchase_number")
    # Split + status are owned by payment_service / overpayment_service
    readonly_fields = (
        "payment_number",
        "applied_amount",
        "overpayment_amount",
        "overpayment_status",
        "status",
        "journal_entry",
        "created_by",
        "updated_by",
        "created_at",
        "updated_at",
    )
    inlines = [OverpaymentTransactionInline]

    def has_delete_permission(self, request, obj=None):
        return False
