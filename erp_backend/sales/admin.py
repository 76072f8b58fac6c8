# sales/admin.py

from django.contrib import admin, messages

from accounting.services.document_totals import cancel_document, confirm_document
from accounting.services.exceptions import AccountingServiceError
from sales.models import Customer, Sale, SaleItem


# ======================================================
# CUSTOMER ADMIN
# ======================================================


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "phone", "payment_term_days", "is_active")
    search_fields = ("code", "name", "phone", "email")
    list_filter = ("is_active",)


# ======================================================
# SALE ADMIN
# ======================================================


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    readonly_fields = ("gross_amount", "net_amount")


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "sale_number",
        "customer",
        "sale_date",
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
    search_fields = ("sale_number", "customer__name")
    list_filter = ("status", "sale_date")
    inlines = [SaleItemInline]
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
            self.message_user(request, f"{done} sale(s) {verb}")

    @admin.action(description="Confirm and post selected sales")
    def confirm_selected(self, request, queryset):
        self._run(request, queryset, confirm_document, "confirmed")

    @admin.action(description="Cancel selected sales (reverses their entries)")
    def cancel_selected(self, request, queryset):
        self._run(request, queryset, cancel_document, "cancelled")
