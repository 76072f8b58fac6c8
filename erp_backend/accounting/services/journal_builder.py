# accounting/services/journal_builder.py

"""
JOURNAL ENTRY BUILDER (PURE)

Maps a transaction descriptor to a balanced list of postings:
    {"account": <Account>, "debit": Decimal, "credit": Decimal, "description": str}

Mapping rules (fixed per kind):
- cash-in          Dr bank                      / Cr income
- cash-out         Dr expense                   / Cr bank
- sale payment     Dr bank (amount_paid)        / Cr receivable (min(paid, outstanding))
                                                  Cr overpayment clearing (excess)
- purchase payment Dr payable (min(paid, outstanding))
                   Dr advance clearing (excess) / Cr bank (amount_paid)
- overpayment      see build_overpayment_postings
- sale             Dr receivable (total)        / Cr revenue (after discounts)
                                                  Cr output tax (tax)
- purchase         Dr inventory (after discounts)
                   Dr input tax (tax)           / Cr payable (total)
- bank transfer    Dr destination bank          / Cr source bank
- bank opening     Dr bank / Cr opening equity (a negative opening swaps sides)

THIS MODULE DOES NOT:
- Touch the database
- Resolve accounts (callers pass them in)

Every builder ends with assert_balanced(); an UnbalancedEntryError from here
is a bug in the mapping, never a user error.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from accounting.services.exceptions import JournalEntryCreationError, UnbalancedEntryError

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

CASH_IN = "cash_in"
CASH_OUT = "cash_out"

SALE = "sale"
PURCHASE = "purchase"

REFUND = "refund"
WRITE_OFF = "write_off"
CONVERT_TO_INCOME = "convert_to_income"


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class CashDescriptor:
    kind: str
    amount: Decimal
    bank_account: Any
    counter_account: Any
    description: str = ""


@dataclass(frozen=True)
class PaymentDescriptor:
    direction: str
    amount_paid: Decimal
    outstanding: Decimal
    bank_account: Any
    control_account: Any
    clearing_account: Any
    description: str = ""

    @property
    def applied_amount(self) -> Decimal:
        return min(_money(self.amount_paid), max(_money(self.outstanding), ZERO))

    @property
    def overpayment_amount(self) -> Decimal:
        return max(_money(self.amount_paid) - max(_money(self.outstanding), ZERO), ZERO)


@dataclass(frozen=True)
class OverpaymentDescriptor:
    direction: str
    resolution: str
    amount: Decimal
    clearing_account: Any
    counter_account: Any
    description: str = ""


@dataclass(frozen=True)
class DocumentDescriptor:
    """
    A confirmed sale or purchase.

    main_account is sales revenue (sale) or inventory (purchase); tax_account
    is output tax (sale) or input tax (purchase).
    """

    direction: str
    total_after_discounts: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    control_account: Any
    main_account: Any
    tax_account: Any = None
    description: str = ""


@dataclass(frozen=True)
class TransferDescriptor:
    amount: Decimal
    from_account: Any
    to_account: Any
    description: str = ""


@dataclass(frozen=True)
class OpeningBalanceDescriptor:
    amount: Decimal
    bank_account: Any
    equity_account: Any
    description: str = ""


def _debit(account, amount, description="") -> dict:
    return {"account": account, "debit": _money(amount), "credit": ZERO, "description": description}


def _credit(account, amount, description="") -> dict:
    return {"account": account, "debit": ZERO, "credit": _money(amount), "description": description}


def _require_positive(amount, label: str) -> Decimal:
    amt = _money(amount)
    if amt <= ZERO:
        raise JournalEntryCreationError(f"{label} must be > 0")
    return amt


def assert_balanced(postings: list[dict]) -> list[dict]:
    total_debits = sum((p["debit"] for p in postings), ZERO)
    total_credits = sum((p["credit"] for p in postings), ZERO)

    if total_debits != total_credits:
        raise UnbalancedEntryError(
            f"Journal entry not balanced: debits={total_debits} credits={total_credits}"
        )
    return postings


def mirror_postings(postings: list[dict]) -> list[dict]:
    """Debit/credit swap of every posting (compensating entry lines)."""
    return assert_balanced(
        [
            {
                "account": p["account"],
                "debit": p["credit"],
                "credit": p["debit"],
                "description": p.get("description", ""),
            }
            for p in postings
        ]
    )


def build_cash_postings(d: CashDescriptor) -> list[dict]:
    amount = _require_positive(d.amount, "Cash transaction amount")

    if d.kind == CASH_IN:
        postings = [
            _debit(d.bank_account, amount, d.description),
            _credit(d.counter_account, amount, d.description),
        ]
    elif d.kind == CASH_OUT:
        postings = [
            _debit(d.counter_account, amount, d.description),
            _credit(d.bank_account, amount, d.description),
        ]
    else:
        raise JournalEntryCreationError(f"Unknown cash transaction kind: {d.kind!r}")

    return assert_balanced(postings)


def build_payment_postings(d: PaymentDescriptor) -> list[dict]:
    amount_paid = _require_positive(d.amount_paid, "Payment amount")
    applied = d.applied_amount
    excess = d.overpayment_amount

    postings: list[dict] = []

    if d.direction == SALE:
        postings.append(_debit(d.bank_account, amount_paid, d.description))
        if applied > ZERO:
            postings.append(_credit(d.control_account, applied, d.description))
        if excess > ZERO:
            postings.append(_credit(d.clearing_account, excess, "Overpayment"))
    elif d.direction == PURCHASE:
        if applied > ZERO:
            postings.append(_debit(d.control_account, applied, d.description))
        if excess > ZERO:
            postings.append(_debit(d.clearing_account, excess, "Overpayment"))
        postings.append(_credit(d.bank_account, amount_paid, d.description))
    else:
        raise JournalEntryCreationError(f"Unknown payment direction: {d.direction!r}")

    return assert_balanced(postings)


def build_overpayment_postings(d: OverpaymentDescriptor) -> list[dict]:
    """
    Sale side (clearing is a liability):
    - refund             Dr clearing / Cr bank
    - convert_to_income  Dr clearing / Cr other income

    Purchase side (clearing is an advance asset):
    - refund             Dr bank          / Cr clearing
    - write_off          Dr other expense / Cr clearing
    """
    amount = _require_positive(d.amount, "Overpayment amount")
    key = (d.direction, d.resolution)

    if key in ((SALE, REFUND), (SALE, CONVERT_TO_INCOME)):
        postings = [
            _debit(d.clearing_account, amount, d.description),
            _credit(d.counter_account, amount, d.description),
        ]
    elif key in ((PURCHASE, REFUND), (PURCHASE, WRITE_OFF)):
        postings = [
            _debit(d.counter_account, amount, d.description),
            _credit(d.clearing_account, amount, d.description),
        ]
    else:
        raise JournalEntryCreationError(
            f"Resolution {d.resolution!r} is not valid for {d.direction!r} overpayments"
        )

    return assert_balanced(postings)


def _document_amounts(d: DocumentDescriptor) -> tuple[Decimal, Decimal, Decimal]:
    total = _require_positive(d.total_amount, "Document total")
    net = _money(d.total_after_discounts)
    tax = _money(d.tax_amount)

    if net < ZERO or tax < ZERO:
        raise JournalEntryCreationError("Document amounts cannot be negative")
    if tax > ZERO and d.tax_account is None:
        raise JournalEntryCreationError("A tax account is required for taxed documents")
    return total, net, tax


def build_sale_postings(d: DocumentDescriptor) -> list[dict]:
    total, net, tax = _document_amounts(d)

    postings = [_debit(d.control_account, total, d.description)]
    if net > ZERO:
        postings.append(_credit(d.main_account, net, d.description))
    if tax > ZERO:
        postings.append(_credit(d.tax_account, tax, "Output tax"))

    return assert_balanced(postings)


def build_purchase_postings(d: DocumentDescriptor) -> list[dict]:
    total, net, tax = _document_amounts(d)

    postings = []
    if net > ZERO:
        postings.append(_debit(d.main_account, net, d.description))
    if tax > ZERO:
        postings.append(_debit(d.tax_account, tax, "Input tax"))
    postings.append(_credit(d.control_account, total, d.description))

    return assert_balanced(postings)


def build_transfer_postings(d: TransferDescriptor) -> list[dict]:
    amount = _require_positive(d.amount, "Transfer amount")
    if d.from_account == d.to_account:
        raise JournalEntryCreationError("Transfer source and destination must differ")

    return assert_balanced(
        [
            _debit(d.to_account, amount, d.description),
            _credit(d.from_account, amount, d.description),
        ]
    )


def build_opening_balance_postings(d: OpeningBalanceDescriptor) -> list[dict]:
    amount = _money(d.amount)
    if amount == ZERO:
        raise JournalEntryCreationError("Opening balance must be non-zero")

    if amount > ZERO:
        postings = [
            _debit(d.bank_account, amount, d.description),
            _credit(d.equity_account, amount, d.description),
        ]
    else:
        postings = [
            _debit(d.equity_account, -amount, d.description),
            _credit(d.bank_account, -amount, d.description),
        ]
    return assert_balanced(postings)


def build_journal_postings(descriptor) -> list[dict]:
    if isinstance(descriptor, CashDescriptor):
        return build_cash_postings(descriptor)
    if isinstance(descriptor, PaymentDescriptor):
        return build_payment_postings(descriptor)
    if isinstance(descriptor, OverpaymentDescriptor):
        return build_overpayment_postings(descriptor)
    if isinstance(descriptor, DocumentDescriptor):
        if descriptor.direction == SALE:
            return build_sale_postings(descriptor)
        if descriptor.direction == PURCHASE:
            return build_purchase_postings(descriptor)
        raise JournalEntryCreationError(f"Unknown document direction: {descriptor.direction!r}")
    if isinstance(descriptor, TransferDescriptor):
        return build_transfer_postings(descriptor)
    if isinstance(descriptor, OpeningBalanceDescriptor):
        return build_opening_balance_postings(descriptor)
    raise JournalEntryCreationError(
        f"No posting rule for descriptor {type(descriptor).__name__}"
    )
