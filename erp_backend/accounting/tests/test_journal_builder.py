# accounting/tests/test_journal_builder.py

from __future__ import annotations

from decimal import Decimal

from django.test import SimpleTestCase

from accounting.services.exceptions import JournalEntryCreationError, UnbalancedEntryError
from accounting.services.journal_builder import (
    CASH_IN,
    CASH_OUT,
    CONVERT_TO_INCOME,
    PURCHASE,
    REFUND,
    SALE,
    WRITE_OFF,
    CashDescriptor,
    DocumentDescriptor,
    OpeningBalanceDescriptor,
    OverpaymentDescriptor,
    PaymentDescriptor,
    TransferDescriptor,
    assert_balanced,
    build_journal_postings,
    mirror_postings,
)

# The builder never touches the database; any hashable stands in for an Account.
BANK = "bank"
INCOME = "income"
EXPENSE = "expense"
RECEIVABLE = "receivable"
PAYABLE = "payable"
CLEARING = "clearing"
ADVANCE = "advance"
OTHER_INCOME = "other_income"
OTHER_EXPENSE = "other_expense"
REVENUE = "revenue"
INVENTORY = "inventory"
TAX = "tax"
EQUITY = "equity"
CASH = "cash"


def _sides(postings):
    return [(p["account"], p["debit"], p["credit"]) for p in postings]


class CashPostingRuleTests(SimpleTestCase):
    def test_cash_in_debits_bank_credits_income(self):
        postings = build_journal_postings(
            CashDescriptor(kind=CASH_IN, amount="500", bank_account=BANK, counter_account=INCOME)
        )
        self.assertEqual(
            _sides(postings),
            [(BANK, Decimal("500.00"), Decimal("0.00")), (INCOME, Decimal("0.00"), Decimal("500.00"))],
        )

    def test_cash_out_debits_expense_credits_bank(self):
        postings = build_journal_postings(
            CashDescriptor(kind=CASH_OUT, amount="75.5", bank_account=BANK, counter_account=EXPENSE)
        )
        self.assertEqual(
            _sides(postings),
            [(EXPENSE, Decimal("75.50"), Decimal("0.00")), (BANK, Decimal("0.00"), Decimal("75.50"))],
        )

    def test_non_positive_amount_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            build_journal_postings(
                CashDescriptor(kind=CASH_IN, amount="0", bank_account=BANK, counter_account=INCOME)
            )

    def test_unknown_kind_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            build_journal_postings(
                CashDescriptor(kind="transfer", amount="10", bank_account=BANK, counter_account=INCOME)
            )


class PaymentPostingRuleTests(SimpleTestCase):
    def _sale(self, paid, outstanding):
        return PaymentDescriptor(
            direction=SALE,
            amount_paid=Decimal(paid),
            outstanding=Decimal(outstanding),
            bank_account=BANK,
            control_account=RECEIVABLE,
            clearing_account=CLEARING,
        )

    def test_sale_overpayment_splits_into_clearing(self):
        d = self._sale("1200", "1000")

        self.assertEqual(d.applied_amount, Decimal("1000.00"))
        self.assertEqual(d.overpayment_amount, Decimal("200.00"))
        self.assertEqual(
            _sides(build_journal_postings(d)),
            [
                (BANK, Decimal("1200.00"), Decimal("0.00")),
                (RECEIVABLE, Decimal("0.00"), Decimal("1000.00")),
                (CLEARING, Decimal("0.00"), Decimal("200.00")),
            ],
        )

    def test_exact_sale_payment_has_no_clearing_line(self):
        postings = build_journal_postings(self._sale("1000", "1000"))

        self.assertEqual(len(postings), 2)
        self.assertNotIn(CLEARING, [p["account"] for p in postings])

    def test_fully_paid_document_sends_everything_to_clearing(self):
        d = self._sale("300", "0")

        self.assertEqual(d.applied_amount, Decimal("0.00"))
        self.assertEqual(
            _sides(build_journal_postings(d)),
            [
                (BANK, Decimal("300.00"), Decimal("0.00")),
                (CLEARING, Decimal("0.00"), Decimal("300.00")),
            ],
        )

    def test_negative_outstanding_treated_as_zero(self):
        d = self._sale("100", "-50")

        self.assertEqual(d.applied_amount, Decimal("0.00"))
        self.assertEqual(d.overpayment_amount, Decimal("100.00"))

    def test_purchase_overpayment_debits_advance(self):
        d = PaymentDescriptor(
            direction=PURCHASE,
            amount_paid=Decimal("700"),
            outstanding=Decimal("500"),
            bank_account=BANK,
            control_account=PAYABLE,
            clearing_account=ADVANCE,
        )

        self.assertEqual(
            _sides(build_journal_postings(d)),
            [
                (PAYABLE, Decimal("500.00"), Decimal("0.00")),
                (ADVANCE, Decimal("200.00"), Decimal("0.00")),
                (BANK, Decimal("0.00"), Decimal("700.00")),
            ],
        )


class OverpaymentPostingRuleTests(SimpleTestCase):
    def _build(self, direction, resolution, counter):
        return _sides(
            build_journal_postings(
                OverpaymentDescriptor(
                    direction=direction,
                    resolution=resolution,
                    amount=Decimal("200"),
                    clearing_account=CLEARING if direction == SALE else ADVANCE,
                    counter_account=counter,
                )
            )
        )

    def test_sale_refund(self):
        self.assertEqual(
            self._build(SALE, REFUND, BANK),
            [(CLEARING, Decimal("200.00"), Decimal("0.00")), (BANK, Decimal("0.00"), Decimal("200.00"))],
        )

    def test_sale_convert_to_income(self):
        self.assertEqual(
            self._build(SALE, CONVERT_TO_INCOME, OTHER_INCOME),
            [
                (CLEARING, Decimal("200.00"), Decimal("0.00")),
                (OTHER_INCOME, Decimal("0.00"), Decimal("200.00")),
            ],
        )

    def test_purchase_refund(self):
        self.assertEqual(
            self._build(PURCHASE, REFUND, BANK),
            [(BANK, Decimal("200.00"), Decimal("0.00")), (ADVANCE, Decimal("0.00"), Decimal("200.00"))],
        )

    def test_purchase_write_off(self):
        self.assertEqual(
            self._build(PURCHASE, WRITE_OFF, OTHER_EXPENSE),
            [
                (OTHER_EXPENSE, Decimal("200.00"), Decimal("0.00")),
                (ADVANCE, Decimal("0.00"), Decimal("200.00")),
            ],
        )

    def test_write_off_is_not_a_sale_resolution(self):
        with self.assertRaises(JournalEntryCreationError):
            self._build(SALE, WRITE_OFF, OTHER_EXPENSE)


class DocumentPostingRuleTests(SimpleTestCase):
    def _document(self, direction, net="1000", tax="110", total="1110", tax_account=TAX):
        return DocumentDescriptor(
            direction=direction,
            total_after_discounts=Decimal(net),
            tax_amount=Decimal(tax),
            total_amount=Decimal(total),
            control_account=RECEIVABLE if direction == SALE else PAYABLE,
            main_account=REVENUE if direction == SALE else INVENTORY,
            tax_account=tax_account,
        )

    def test_sale_debits_receivable_credits_revenue_and_tax(self):
        self.assertEqual(
            _sides(build_journal_postings(self._document(SALE))),
            [
                (RECEIVABLE, Decimal("1110.00"), Decimal("0.00")),
                (REVENUE, Decimal("0.00"), Decimal("1000.00")),
                (TAX, Decimal("0.00"), Decimal("110.00")),
            ],
        )

    def test_purchase_debits_inventory_and_tax_credits_payable(self):
        self.assertEqual(
            _sides(build_journal_postings(self._document(PURCHASE))),
            [
                (INVENTORY, Decimal("1000.00"), Decimal("0.00")),
                (TAX, Decimal("110.00"), Decimal("0.00")),
                (PAYABLE, Decimal("0.00"), Decimal("1110.00")),
            ],
        )

    def test_untaxed_document_has_two_lines(self):
        postings = build_journal_postings(
            self._document(SALE, tax="0", total="1000", tax_account=None)
        )

        self.assertEqual([p["account"] for p in postings], [RECEIVABLE, REVENUE])

    def test_taxed_document_needs_tax_account(self):
        with self.assertRaises(JournalEntryCreationError):
            build_journal_postings(self._document(SALE, tax_account=None))

    def test_inconsistent_total_is_unbalanced(self):
        with self.assertRaises(UnbalancedEntryError):
            build_journal_postings(self._document(SALE, total="1200"))

    def test_zero_total_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            build_journal_postings(self._document(PURCHASE, net="0", tax="0", total="0"))


class BankPostingRuleTests(SimpleTestCase):
    def test_transfer_debits_destination_credits_source(self):
        postings = build_journal_postings(
            TransferDescriptor(amount="75", from_account=BANK, to_account=CASH)
        )

        self.assertEqual(
            _sides(postings),
            [(CASH, Decimal("75.00"), Decimal("0.00")), (BANK, Decimal("0.00"), Decimal("75.00"))],
        )

    def test_transfer_to_same_account_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            build_journal_postings(TransferDescriptor(amount="75", from_account=BANK, to_account=BANK))

    def test_positive_opening_debits_bank(self):
        postings = build_journal_postings(
            OpeningBalanceDescriptor(amount="500", bank_account=BANK, equity_account=EQUITY)
        )

        self.assertEqual(
            _sides(postings),
            [(BANK, Decimal("500.00"), Decimal("0.00")), (EQUITY, Decimal("0.00"), Decimal("500.00"))],
        )

    def test_negative_opening_credits_bank(self):
        postings = build_journal_postings(
            OpeningBalanceDescriptor(amount="-80", bank_account=BANK, equity_account=EQUITY)
        )

        self.assertEqual(
            _sides(postings),
            [(EQUITY, Decimal("80.00"), Decimal("0.00")), (BANK, Decimal("0.00"), Decimal("80.00"))],
        )

    def test_zero_opening_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            build_journal_postings(
                OpeningBalanceDescriptor(amount="0", bank_account=BANK, equity_account=EQUITY)
            )


class BalanceHelpersTests(SimpleTestCase):
    def test_assert_balanced_raises_on_mismatch(self):
        with self.assertRaises(UnbalancedEntryError):
            assert_balanced(
                [
                    {"account": BANK, "debit": Decimal("100.00"), "credit": Decimal("0.00")},
                    {"account": INCOME, "debit": Decimal("0.00"), "credit": Decimal("90.00")},
                ]
            )

    def test_mirror_swaps_sides(self):
        original = build_journal_postings(
            CashDescriptor(kind=CASH_IN, amount="40", bank_account=BANK, counter_account=INCOME)
        )

        self.assertEqual(
            _sides(mirror_postings(original)),
            [(BANK, Decimal("0.00"), Decimal("40.00")), (INCOME, Decimal("40.00"), Decimal("0.00"))],
        )

    def test_unknown_descriptor_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            build_journal_postings(object())
