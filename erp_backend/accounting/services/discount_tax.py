# accounting/services/discount_tax.py

"""
DISCOUNT / TAX CALCULATOR (PURE, STATELESS)

Per line:
    gross = qty * price
    discount_n applies to what is left after discount_(n-1)   (n = 1..4)
    net   = gross - Σ discounts

Totals:
    subtotal              = Σ gross
    discount_totals[n]    = Σ line discount_n
    total_after_discounts = subtotal - Σ discount_totals
    tax_amount            = total_after_discounts * tax_percent / 100
    grand_total           = total_after_discounts + tax_amount

Results are exact Decimals; rounding happens where totals are stored.
A missing / blank / unparsable percent counts as 0, never an error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Callable, Iterable, Sequence

MAX_DISCOUNT_LEVELS = 4
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return ZERO
    return d if d.is_finite() else ZERO


@dataclass(frozen=True)
class LineInput:
    quantity: Decimal
    unit_price: Decimal
    discount_percents: Sequence = ()


@dataclass(frozen=True)
class LineResult:
    gross_amount: Decimal
    discount_amounts: tuple
    net_amount: Decimal


@dataclass(frozen=True)
class CalculationResult:
    lines: list = field(default_factory=list)
    subtotal: Decimal = ZERO
    discount_totals: tuple = (ZERO,) * MAX_DISCOUNT_LEVELS
    total_after_discounts: Decimal = ZERO
    tax_percent: Decimal = ZERO
    tax_amount: Decimal = ZERO
    grand_total: Decimal = ZERO

    @property
    def total_discount(self) -> Decimal:
        return sum(self.discount_totals, ZERO)


def calculate_line(line: LineInput) -> LineResult:
    percents = list(line.discount_percents or ())[:MAX_DISCOUNT_LEVELS]
    percents += [ZERO] * (MAX_DISCOUNT_LEVELS - len(percents))

    gross = to_decimal(line.quantity) * to_decimal(line.unit_price)

    remainder = gross
    amounts = []
    for pct in percents:
        discount = remainder * to_decimal(pct) / HUNDRED
        amounts.append(discount)
        remainder -= discount

    return LineResult(gross_amount=gross, discount_amounts=tuple(amounts), net_amount=remainder)


def calculate_totals(lines: Iterable[LineInput], tax_percent=None) -> CalculationResult:
    results = [calculate_line(line) for line in lines]

    subtotal = sum((r.gross_amount for r in results), ZERO)
    discount_totals = tuple(
        sum((r.discount_amounts[i] for r in results), ZERO)
        for i in range(MAX_DISCOUNT_LEVELS)
    )
    total_after_discounts = subtotal - sum(discount_totals, ZERO)

    pct = to_decimal(tax_percent)
    tax_amount = total_after_discounts * pct / HUNDRED

    return CalculationResult(
        lines=results,
        subtotal=subtotal,
        discount_totals=discount_totals,
        total_after_discounts=total_after_discounts,
        tax_percent=pct,
        tax_amount=tax_amount,
        grand_total=total_after_discounts + tax_amount,
    )


def calculate_items(
    items: Iterable,
    *,
    tax_percent=None,
    get_quantity: Callable = lambda item: getattr(item, "quantity", None),
    get_price: Callable = lambda item: getattr(item, "unit_price", None),
    get_discounts: Callable = lambda item: [
        getattr(item, f"discount{i}_percent", None) for i in range(1, MAX_DISCOUNT_LEVELS + 1)
    ],
) -> CalculationResult:
    """Accessor-based variant for model rows (SaleItem, PurchaseItem, dicts, ...)."""
    return calculate_totals(
        (
            LineInput(
                quantity=get_quantity(item),
                unit_price=get_price(item),
                discount_percents=get_discounts(item),
            )
            for item in items
        ),
        tax_percent=tax_percent,
    )
