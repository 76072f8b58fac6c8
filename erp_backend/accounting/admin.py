# accounting/admin.py

from django.contrib import admin

from accounting.models.account import Account
from accounting.models.bank import Bank
from accounting.models.bank_transfer import BankTransfer
from accounting.models.cash_transaction import CashTransaction
from accounting.models.journal import JournalEntry
from accounting.models.ledger import JournalLine
from accounting.models.sequence import DocumentSequence
from accounting.services.bank_balance_service import set_opening_balance

# ============================================================
# ACCOUNT
# ============================================================


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "account_type",
        "parent",
        "is_active",
    )
    list_filter = ("account_type", "is_active")
    search_fields = ("code", "name")
    ordering = ("code",)
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        (
            "Account Identity",
            {
                "fields": ("code", "name", "account_type", "parent", "description"),
            },
        ),
        (
            "Status",
            {
                "fields": ("is_active",),
            },
        ),
        (
            "System Fields",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )


# ============================================================
# BANK / CASH REGISTER
# ============================================================


@admin.register(Bank)
class BankAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "bank_type",
        "account",
        "initial_balance",
        "stored_balance",
        "is_active",
    )
    list_filter = ("bank_type", "is_active")
    search_fields = ("name", "account_number", "account__code")
    # stored_balance is maintained by posting services only
    readonly_fields = ("stored_balance", "created_at", "updated_at")

    def save_model(self, request, obj, form, change):
        # The opening balance is journaled; the bank row itself saves at the old value
        opening = obj.initial_balance
        if change:
            obj.initial_balance = Bank.objects.values_list("initial_balance", flat=True).get(pk=obj.pk)
        else:
            obj.initial_balance = 0
        super().save_model(request, obj, form, change)

        set_opening_balance(bank_id=obj.pk, amount=opening, user=request.user)
        obj.refresh_from_db()


# ============================================================
# CASH TRANSACTION + BANK TRANSFER (posting happens through the API/services)
# ============================================================


@admin.register(CashTransaction)
class CashTransactionAdmin(admin.ModelAdmin):
    list_display = (
        "number",
        "kind",
        "transaction_date",
        "bank",
        "account",
        "amount",
        "status",
    )
    list_filter = ("kind", "status", "transaction_date")
    search_fields = ("number", "description")
    readonly_fields = (
        "number",
        "status",
        "journal_entry",
        "created_by",
        "updated_by",
        "created_at",
        "updated_at",
    )

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(BankTransfer)
class BankTransferAdmin(admin.ModelAdmin):
    list_display = (
        "number",
        "transfer_date",
        "from_bank",
        "to_bank",
        "amount",
        "status",
    )
    list_filter = ("status", "transfer_date")
    search_fields = ("number", "description")
    readonly_fields = (
        "number",
        "status",
        "journal_entry",
        "created_by",
        "updated_by",
        "created_at",
        "updated_at",
    )

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# NUMBERING (read-only counters)
# ============================================================


@admin.register(DocumentSequence)
class DocumentSequenceAdmin(admin.ModelAdmin):
    list_display = ("prefix", "day", "last_value")
    list_filter = ("prefix",)
    readonly_fields = ("prefix", "day", "last_value")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# JOURNAL (STRICTLY IMMUTABLE)
# ============================================================


class JournalLineInline(admin.TabularInline):
    model = JournalLine
    extra = 0
    can_delete = False
    fields = ("line_no", "account", "debit", "credit", "description")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(JournalEntry)
class JournalEntryAdmin(admin.ModelAdmin):
    list_display = (
        "journal_number",
        "entry_date",
        "source_type",
        "source_id",
        "status",
        "reversal_of",
        "reversed_at",
    )
    list_filter = ("source_type", "status", "entry_date")
    search_fields = ("journal_number", "description", "source_id")
    ordering = ("-entry_date", "-id")
    inlines = [JournalLineInline]

    readonly_fields = (
        "journal_number",
        "entry_date",
        "source_type",
        "source_id",
        "description",
        "status",
        "reversal_of",
        "reversed_at",
        "created_by",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
