# accounting/tests/test_ledger.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.journal import JournalEntry
from accounting.services.journal_entry_service import create_journal_entry
from accounting.services.ledger_service import (
    LedgerServiceError,
    descendant_ids,
    get_bank_ledger,
    get_ledger,
)
from accounting.tests.factories import ASSET, make_account, make_bank, seed_accounts


class LedgerTests(TestCase):
    def setUp(self):
        self.accounts = seed_accounts()
        self.bank_acc = self.accounts["1102"]
        self.income = self.accounts["4101"]
        self.expense = self.accounts["6101"]
        self._seq = 0

    def _post(self, entry_date, debit_acc, credit_acc, amount):
        self._seq += 1
        return create_journal_entry(
            entry_date=entry_date,
            description=f"Entry {self._seq}",
            postings=[
                {"account": debit_acc, "debit": amount, "credit": "0"},
                {"account": credit_acc, "debit": "0", "credit": amount},
            ],
            source_type=JournalEntry.SourceType.CASH_IN,
            source_id=self._seq,
        )

    def test_opening_movement_and_closing(self):
        self._post(date(2025, 1, 5), self.bank_acc, self.income, "300.00")
        self._post(date(2025, 2, 3), self.bank_acc, self.income, "200.00")
        self._post(date(2025, 2, 10), self.expense, self.bank_acc, "50.00")
        self._post(date(2025, 3, 1), self.bank_acc, self.income, "999.00")

        ledger = get_ledger(self.bank_acc, date(2025, 2, 1), date(2025, 2, 28))

        self.assertEqual(ledger["opening_balance"], Decimal("300.00"))
        self.assertEqual(ledger["debit_total"], Decimal("200.00"))
        self.assertEqual(ledger["credit_total"], Decimal("50.00"))
        self.assertEqual(ledger["closing_balance"], Decimal("450.00"))
        self.assertEqual([l["balance"] for l in ledger["lines"]], [Decimal("500.00"), Decimal("450.00")])

    def test_running_balance_follows_date_then_entry_order(self):
        later = self._post(date(2025, 1, 20), self.bank_acc, self.income, "10.00")
        earlier = self._post(date(2025, 1, 10), self.bank_acc, self.income, "5.00")
        same_day = self._post(date(2025, 1, 20), self.expense, self.bank_acc, "3.00")

        ledger = get_ledger(self.bank_acc, date(2025, 1, 1), date(2025, 1, 31))

        self.assertEqual(
            [l["journal_entry_id"] for l in ledger["lines"]],
            [earlier.id, later.id, same_day.id],
        )
        self.assertEqual(
            [l["balance"] for l in ledger["lines"]],
            [Decimal("5.00"), Decimal("15.00"), Decimal("12.00")],
        )

    def test_empty_range_keeps_opening_as_closing(self):
        self._post(date(2025, 1, 5), self.bank_acc, self.income, "300.00")

        ledger = get_ledger(self.bank_acc, date(2025, 6, 1), date(2025, 6, 30))

        self.assertEqual(ledger["lines"], [])
        self.assertEqual(ledger["opening_balance"], Decimal("300.00"))
        self.assertEqual(ledger["closing_balance"], Decimal("300.00"))

    def test_credit_normal_account_grows_on_credit(self):
        self._post(date(2025, 1, 5), self.bank_acc, self.income, "300.00")
        self._post(date(2025, 1, 6), self.income, self.bank_acc, "20.00")

        ledger = get_ledger(self.income, date(2025, 1, 1), date(2025, 1, 31))

        self.assertEqual(ledger["debit_total"], Decimal("20.00"))
        self.assertEqual(ledger["credit_total"], Decimal("300.00"))
        self.assertEqual(ledger["closing_balance"], Decimal("280.00"))

    def test_include_descendants_rolls_up_children(self):
        group = make_account("1100", "Cash and Banks", ASSET)
        child_a = make_account("1110", "Petty Cash", ASSET, parent=group)
        child_b = make_account("1120", "Savings", ASSET, parent=group)
        grandchild = make_account("1121", "Savings Sub", ASSET, parent=child_b)

        self._post(date(2025, 1, 5), child_a, self.income, "10.00")
        self._post(date(2025, 1, 6), grandchild, self.income, "15.00")

        own = get_ledger(group, date(2025, 1, 1), date(2025, 1, 31))
        rolled = get_ledger(group, date(2025, 1, 1), date(2025, 1, 31), include_descendants=True)

        self.assertEqual(own["closing_balance"], Decimal("0.00"))
        self.assertEqual(rolled["closing_balance"], Decimal("25.00"))
        self.assertEqual(len(rolled["lines"]), 2)
        self.assertCountEqual(
            descendant_ids(group.id), [group.id, child_a.id, child_b.id, grandchild.id]
        )

    def test_summary_when_no_account_given(self):
        self._post(date(2025, 1, 5), self.bank_acc, self.income, "300.00")
        self._post(date(2025, 2, 5), self.expense, self.bank_acc, "40.00")

        summary = get_ledger(None, date(2025, 2, 1), date(2025, 2, 28))

        rows = {r["account_code"]: r for r in summary["accounts"]}
        self.assertEqual(set(rows), {"1102", "4101", "6101"})
        self.assertEqual(rows["1102"]["opening_balance"], Decimal("300.00"))
        self.assertEqual(rows["1102"]["closing_balance"], Decimal("260.00"))
        self.assertEqual(rows["4101"]["closing_balance"], Decimal("300.00"))
        self.assertEqual(rows["6101"]["debit_total"], Decimal("40.00"))
        self.assertEqual(summary["debit_total"], summary["credit_total"])

    def test_bank_ledger_reads_the_bank_account(self):
        bank = make_bank(self.bank_acc)
        self._post(date(2025, 1, 5), self.bank_acc, self.income, "75.00")

        ledger = get_bank_ledger(bank, date(2025, 1, 1), date(2025, 1, 31))

        self.assertEqual(ledger["bank_id"], bank.id)
        self.assertEqual(ledger["closing_balance"], Decimal("75.00"))

    def test_invalid_range_is_rejected(self):
        with self.assertRaises(LedgerServiceError):
            get_ledger(self.bank_acc, date(2025, 2, 1), date(2025, 1, 1))
        with self.assertRaises(LedgerServiceError):
            get_ledger(self.bank_acc, None, date(2025, 1, 1))
