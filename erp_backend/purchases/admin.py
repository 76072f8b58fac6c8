# purchases/admin.py

from django.contrib import admin, messages

from accounting.services.document_totals import cancel_document, confirm_document
from accounting.services.exceptions import AccountingServiceError
from purchases.models import Purchase, PurchaseItem, Supplier


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "phone", "payment_term_days", "is_active")
    search_fields = ("code", "name", "phone", "email")
    list_filter = ("is_active",)


class PurchaseItemInline(admin.TabularInline):
    model = PurchaseItem
    extra = 0
    readonly_fields = ("gross_amount", "net_amount")


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = (
        "purchase_number",
        "supplier",
        "supplier_invoice_number",
        "purchase_date",
        "due_date",
        "status",
        "total_amount",
    )
    readonly_fields = (
        "status",
        "journal_entry",
        "subtotal_amount",
        "discount1_amount",
        "discount2_amount",
        "discount3_amount",
        "discount4_amount",
        "total_after_discounts",
        "tax_amount",
        "total_amount",
        "created_at",
        "updated_at",
    )
    search_fields = ("purchase_number", "supplier_invoice_number", "supplier__name")
    list_filter = ("status", "purchase_date")
    inlines = [PurchaseItemInline]
    actions = ["confirm_selected", "cancel_selected"]

    def _run(self, request, queryset, service, verb):
        done = 0
        for document in queryset:
            try:
                service(document, user=request.user)
            except AccountingServiceError as exc:
                self.message_user(request, f"{document}: {exc}", level=messages.ERROR)
            else:
                done += 1
        if done:
            self.message_user(request, f"{done} purchase(s) {verb}")

    @admin.action(description="Confirm and post selected purchases")
    def confirm_selected(self, request, queryset):
        self._run(request, queryset, confirm_document, "confirmed")

    @admin.action(description="Cancel selected purchases (reverses their entries)")
    def cancel_selected(self, request, queryset):
        self._run(request, queryset, cancel_document, "cancelled")
