# accounting/tests/test_bank_balances.py

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.test import TestCase

from accounting.models.bank import Bank
from accounting.models.cash_transaction import CashTransaction
from accounting.models.journal import JournalEntry
from accounting.services.bank_balance_service import (
    apply_bank_movement,
    get_bank_balances,
    open_bank,
    set_opening_balance,
)
from accounting.services.cash_posting_service import (
    create_cash_transaction,
    post_cash_transaction,
)
from accounting.services.ledger_service import get_bank_ledger
from accounting.tests.factories import make_bank, seed_accounts


def _bank_closing(bank):
    return get_bank_ledger(bank, date(2000, 1, 1), date.today() + timedelta(days=1))[
        "closing_balance"
    ]


def _opening_entries(bank, **filters):
    return JournalEntry.objects.filter(
        source_type=JournalEntry.SourceType.BANK_OPENING, source_id=str(bank.pk), **filters
    )


class BankBalanceTests(TestCase):
    def setUp(self):
        self.accounts = seed_accounts()
        self.bank = make_bank(self.accounts["1102"], initial_balance="1000.00")

    def test_initial_balance_seeds_stored_balance(self):
        self.assertEqual(self.bank.stored_balance, Decimal("1000.00"))

    def test_posted_cash_keeps_stored_and_calculated_in_step(self):
        tx = create_cash_transaction(
            kind=CashTransaction.Kind.CASH_IN,
            bank_id=self.bank.id,
            account_id=self.accounts["4101"].id,
            amount="250.00",
        )
        post_cash_transaction(transaction_id=tx.id)

        [row] = get_bank_balances()

        self.assertEqual(row["stored_balance"], Decimal("1250.00"))
        self.assertEqual(row["calculated_balance"], Decimal("1250.00"))
        self.assertFalse(row["is_divergent"])

    def test_divergence_is_reported_not_corrected(self):
        apply_bank_movement(bank=self.bank, amount="-40.00", reason="manual drift")

        [row] = get_bank_balances()

        self.assertEqual(row["stored_balance"], Decimal("960.00"))
        self.assertEqual(row["calculated_balance"], Decimal("1000.00"))
        self.assertEqual(row["difference"], Decimal("-40.00"))
        self.assertTrue(row["is_divergent"])

        self.bank.refresh_from_db()
        self.assertEqual(self.bank.stored_balance, Decimal("960.00"))

    def test_inactive_banks_are_opt_in(self):
        cash = make_bank(self.accounts["1101"], name="Cash Register", bank_type=Bank.BankType.CASH)
        cash.is_active = False
        cash.save()

        self.assertEqual([r["bank_id"] for r in get_bank_balances()], [self.bank.id])
        self.assertCountEqual(
            [r["bank_id"] for r in get_bank_balances(include_inactive=True)],
            [self.bank.id, cash.id],
        )

    def test_opening_balance_is_journaled_against_equity(self):
        [entry] = _opening_entries(self.bank)

        lines = {l.account.code: (l.debit, l.credit) for l in entry.lines.select_related("account")}
        self.assertEqual(
            lines,
            {
                "1102": (Decimal("1000.00"), Decimal("0.00")),
                "3100": (Decimal("0.00"), Decimal("1000.00")),
            },
        )

        [row] = get_bank_balances()
        self.assertEqual(_bank_closing(self.bank), row["calculated_balance"])
        self.assertEqual(row["calculated_balance"], Decimal("1000.00"))
        self.assertFalse(row["is_divergent"])

    def test_zero_opening_balance_posts_nothing(self):
        cash = make_bank(self.accounts["1101"], name="Petty Cash")

        self.assertFalse(_opening_entries(cash).exists())

    def test_negative_opening_balance_credits_the_bank(self):
        overdrawn = open_bank(
            name="Overdraft", account=self.accounts["1101"], initial_balance="-200.00"
        )

        [entry] = _opening_entries(overdrawn)
        lines = {l.account.code: (l.debit, l.credit) for l in entry.lines.select_related("account")}
        self.assertEqual(lines["1101"], (Decimal("0.00"), Decimal("200.00")))
        self.assertEqual(lines["3100"], (Decimal("200.00"), Decimal("0.00")))
        self.assertEqual(overdrawn.stored_balance, Decimal("-200.00"))

    def test_restated_opening_balance_replaces_the_entry(self):
        original = _opening_entries(self.bank).get()

        bank = set_opening_balance(bank_id=self.bank.id, amount="1500.00")

        self.assertEqual(bank.initial_balance, Decimal("1500.00"))
        self.assertEqual(bank.stored_balance, Decimal("1500.00"))
        original.refresh_from_db()
        self.assertTrue(original.is_reversed)

        live = _opening_entries(bank, reversed_at__isnull=True, reversal_of__isnull=True)
        self.assertEqual(live.count(), 1)

        [row] = get_bank_balances()
        self.assertEqual(row["calculated_balance"], Decimal("1500.00"))
        self.assertEqual(_bank_closing(bank), Decimal("1500.00"))
        self.assertFalse(row["is_divergent"])

    def test_opening_balance_restated_to_zero(self):
        bank = set_opening_balance(bank_id=self.bank.id, amount="0")

        self.assertEqual(bank.stored_balance, Decimal("0.00"))
        self.assertFalse(
            _opening_entries(bank, reversed_at__isnull=True, reversal_of__isnull=True).exists()
        )
        [row] = get_bank_balances()
        self.assertEqual(row["calculated_balance"], Decimal("0.00"))

    def test_balances_are_read_in_one_query(self):
        make_bank(self.accounts["1101"], name="Cash Register", initial_balance="50.00")

        with self.assertNumQueries(1):
            rows = get_bank_balances()

        self.assertEqual(
            [(r["name"], r["calculated_balance"]) for r in rows],
            [("Cash Register", Decimal("50.00")), ("Main Bank", Decimal("1000.00"))],
        )
