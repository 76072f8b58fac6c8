# accounting/management/commands/seed_chart_of_accounts.py

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from accounting.models.account import Account
from accounting.models.bank import Bank

ASSET = Account.AccountType.ASSET
LIABILITY = Account.AccountType.LIABILITY
EQUITY = Account.AccountType.EQUITY
INCOME = Account.AccountType.INCOME
EXPENSE = Account.AccountType.EXPENSE

# (code, name, type, parent code)
ACCOUNTS = [
    # ASSETS
    ("1000", "Assets", ASSET, None),
    ("1100", "Cash and Bank", ASSET, "1000"),
    ("1101", "Cash on Hand", ASSET, "1100"),
    ("1102", "Bank Account", ASSET, "1100"),
    ("1200", "Receivables", ASSET, "1000"),
    ("1201", "Accounts Receivable", ASSET, "1200"),
    ("1300", "Inventory", ASSET, "1000"),
    ("1301", "Merchandise Inventory", ASSET, "1300"),
    ("1400", "Advances", ASSET, "1000"),
    ("1401", "Purchase Advances", ASSET, "1400"),
    ("1402", "Prepaid Input Tax", ASSET, "1400"),
    # LIABILITIES
    ("2000", "Liabilities", LIABILITY, None),
    ("2100", "Current Liabilities", LIABILITY, "2000"),
    ("2101", "Accounts Payable", LIABILITY, "2100"),
    ("2102", "Tax Payable", LIABILITY, "2100"),
    ("2105", "Customer Overpayments", LIABILITY, "2100"),
    # EQUITY
    ("3000", "Equity", EQUITY, None),
    ("3100", "Opening Balance Equity", EQUITY, "3000"),
    ("3101", "Owner Capital", EQUITY, "3000"),
    # INCOME
    ("4000", "Income", INCOME, None),
    ("4101", "Sales Revenue", INCOME, "4000"),
    ("4103", "Other Income", INCOME, "4000"),
    # EXPENSES
    ("6000", "Operating Expenses", EXPENSE, None),
    ("6101", "General Expenses", EXPENSE, "6000"),
    ("7000", "Other Expenses", EXPENSE, None),
    ("7103", "Other Expense", EXPENSE, "7000"),
]

# (name, bank type, ledger account code)
BANKS = [
    ("Cash Register", Bank.BankType.CASH, "1101"),
    ("Main Bank", Bank.BankType.BANK, "1102"),
]


class Command(BaseCommand):
    help = "Seed the default chart of accounts, role accounts and a cash register + bank (idempotent)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--no-banks",
            action="store_true",
            help="Only seed accounts; do not create the default cash register / bank.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding chart of accounts...")

        created_count = 0
        updated_count = 0
        by_code = {}

        for code, name, account_type, parent_code in ACCOUNTS:
            parent = by_code.get(parent_code) if parent_code else None

            acc, acc_created = Account.objects.get_or_create(
                code=code,
                defaults={
                    "name": name,
                    "account_type": account_type,
                    "parent": parent,
                    "is_active": True,
                },
            )
            by_code[code] = acc

            if acc_created:
                created_count += 1
                continue

            # Never touch code/type of an existing account (may already carry postings)
            needs_update = False
            if acc.parent_id is None and parent is not None:
                acc.parent = parent
                needs_update = True
            if not acc.is_active:
                acc.is_active = True
                needs_update = True

            if needs_update:
                acc.save()
                updated_count += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"Accounts: {created_count} created, {updated_count} updated, "
                f"{len(ACCOUNTS) - created_count - updated_count} unchanged"
            )
        )

        if options.get("no_banks"):
            return

        for name, bank_type, code in BANKS:
            bank, bank_created = Bank.objects.get_or_create(
                account=by_code[code],
                defaults={
                    "name": name,
                    "bank_type": bank_type,
                    "initial_balance": Decimal("0.00"),
                },
            )
            verb = "Created" if bank_created else "Exists"
            self.stdout.write(f"{verb}: {bank}")

        self.stdout.write(self.style.SUCCESS("Chart of accounts ready."))
