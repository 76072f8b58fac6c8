# accounting/tests/test_seed_command.py

from __future__ import annotations

from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from accounting.models.account import Account
from accounting.models.bank import Bank
from accounting.services.account_resolver import (
    get_accounts_payable_account,
    get_accounts_receivable_account,
    get_other_expense_account,
    get_other_income_account,
    get_purchase_advance_account,
    get_sale_overpayment_account,
)


class SeedChartOfAccountsTests(TestCase):
    def _seed(self, *args):
        out = StringIO()
        call_command("seed_chart_of_accounts", *args, stdout=out)
        return out.getvalue()

    def test_seed_is_idempotent(self):
        self._seed()
        accounts = Account.objects.count()
        banks = Bank.objects.count()

        output = self._seed()

        self.assertEqual(Account.objects.count(), accounts)
        self.assertEqual(Bank.objects.count(), banks)
        self.assertIn("0 created", output)

    def test_seeded_chart_resolves_every_role(self):
        self._seed("--no-banks")

        self.assertEqual(Bank.objects.count(), 0)
        self.assertEqual(get_accounts_receivable_account().code, "1201")
        self.assertEqual(get_accounts_payable_account().code, "2101")
        self.assertEqual(get_sale_overpayment_account().code, "2105")
        self.assertEqual(get_purchase_advance_account().code, "1401")
        self.assertEqual(get_other_income_account().code, "4103")
        self.assertEqual(get_other_expense_account().code, "7103")

    def test_banks_link_to_asset_accounts(self):
        self._seed()

        self.assertEqual(
            sorted(Bank.objects.values_list("account__code", flat=True)), ["1101", "1102"]
        )

    def test_reseed_reactivates_without_touching_name(self):
        self._seed("--no-banks")
        Account.objects.filter(code="4103").update(is_active=False, name="Misc Income")

        self._seed("--no-banks")

        acc = Account.objects.get(code="4103")
        self.assertTrue(acc.is_active)
        self.assertEqual(acc.name, "Misc Income")
