# accounting/tests/test_discount_tax.py

from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from accounting.services.discount_tax import (
    LineInput,
    calculate_items,
    calculate_line,
    calculate_totals,
    to_decimal,
)


class DiscountTaxCalculatorTests(SimpleTestCase):
    def test_sequential_discounts_then_tax(self):
        result = calculate_totals(
            [LineInput(quantity=10, unit_price=1000, discount_percents=[10, 5])],
            tax_percent=11,
        )

        self.assertEqual(result.subtotal, Decimal("10000"))
        self.assertEqual(result.discount_totals[0], Decimal("1000"))
        self.assertEqual(result.discount_totals[1], Decimal("450"))
        self.assertEqual(result.discount_totals[2], Decimal("0"))
        self.assertEqual(result.total_after_discounts, Decimal("8550"))
        self.assertEqual(result.tax_amount, Decimal("940.5"))
        self.assertEqual(result.grand_total, Decimal("9490.5"))
        self.assertEqual(result.total_discount, Decimal("1450"))

    def test_unparsable_tax_counts_as_zero(self):
        result = calculate_totals(
            [LineInput(quantity=2, unit_price="50.00")], tax_percent="not-a-number"
        )

        self.assertEqual(result.tax_percent, Decimal("0"))
        self.assertEqual(result.tax_amount, Decimal("0"))
        self.assertEqual(result.grand_total, Decimal("100.00"))

    def test_blank_and_missing_discounts_are_zero(self):
        line = calculate_line(LineInput(quantity=1, unit_price=200, discount_percents=["", None]))

        self.assertEqual(line.gross_amount, Decimal("200"))
        self.assertEqual(line.discount_amounts, (Decimal("0"),) * 4)
        self.assertEqual(line.net_amount, Decimal("200"))

    def test_discounts_beyond_four_levels_are_ignored(self):
        line = calculate_line(
            LineInput(quantity=1, unit_price=100, discount_percents=[10, 10, 10, 10, 50])
        )

        self.assertEqual(len(line.discount_amounts), 4)
        # 100 * 0.9^4
        self.assertEqual(line.net_amount, Decimal("65.6100"))

    def test_totals_sum_across_lines(self):
        result = calculate_totals(
            [
                LineInput(quantity=1, unit_price=100, discount_percents=[10]),
                LineInput(quantity=3, unit_price=50, discount_percents=[0, 20]),
            ]
        )

        self.assertEqual(result.subtotal, Decimal("250"))
        self.assertEqual(result.discount_totals[0], Decimal("10"))
        self.assertEqual(result.discount_totals[1], Decimal("30"))
        self.assertEqual(result.total_after_discounts, Decimal("210"))
        self.assertEqual(result.grand_total, Decimal("210"))

    def test_empty_document(self):
        result = calculate_totals([], tax_percent=11)

        self.assertEqual(result.lines, [])
        self.assertEqual(result.subtotal, Decimal("0"))
        self.assertEqual(result.grand_total, Decimal("0"))

    def test_calculate_items_reads_model_like_rows(self):
        item = SimpleNamespace(
            quantity=Decimal("10"),
            unit_price=Decimal("1000"),
            discount1_percent=Decimal("10"),
            discount2_percent=Decimal("5"),
            discount3_percent=None,
            discount4_percent=Decimal("0"),
        )

        result = calculate_items([item], tax_percent=Decimal("11"))

        self.assertEqual(result.grand_total, Decimal("9490.5"))

    def test_to_decimal(self):
        self.assertEqual(to_decimal("12.5"), Decimal("12.5"))
        self.assertEqual(to_decimal(" 7 "), Decimal("7"))
        self.assertEqual(to_decimal(None), Decimal("0"))
        self.assertEqual(to_decimal("abc"), Decimal("0"))
        self.assertEqual(to_decimal(Decimal("NaN")), Decimal("0"))
        self.assertEqual(to_decimal(True), Decimal("0"))
