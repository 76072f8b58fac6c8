# PATH: accounting/services/account_resolver.py

"""
PATH: accounting/services/account_resolver.py

ACCOUNT RESOLVER (AUTHORITATIVE)

This module answers ONE question:
"Which account should be used for this purpose?"

Role -> code mapping comes from settings.ACCOUNTING_ACCOUNT_CODES
(env-overridable), falling back to DEFAULT_CODES.

Design goals:
- deterministic
- hard-fail on missing setup (so we don't post to wrong accounts)
- clearing / other-income / other-expense roles may fall back to the
  highest active account of the right type under a code prefix, so a chart
  seeded with a slightly different numbering still posts
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.exceptions import MultipleObjectsReturned, ObjectDoesNotExist

from accounting.models.account import Account
from accounting.services.exceptions import AccountResolutionError

logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# SEMANTIC ROLES
# ------------------------------------------------------------

RECEIVABLE = "RECEIVABLE"
PAYABLE = "PAYABLE"
SALE_OVERPAYMENT = "SALE_OVERPAYMENT"
PURCHASE_ADVANCE = "PURCHASE_ADVANCE"
OTHER_INCOME = "OTHER_INCOME"
OTHER_EXPENSE = "OTHER_EXPENSE"
SALES_REVENUE = "SALES_REVENUE"
OUTPUT_TAX = "OUTPUT_TAX"
INVENTORY = "INVENTORY"
INPUT_TAX = "INPUT_TAX"
OPENING_EQUITY = "OPENING_EQUITY"

DEFAULT_CODES = {
    RECEIVABLE: "1201",
    PAYABLE: "2101",
    SALE_OVERPAYMENT: "2105",
    PURCHASE_ADVANCE: "1401",
    OTHER_INCOME: "4103",
    OTHER_EXPENSE: "7103",
    SALES_REVENUE: "4101",
    OUTPUT_TAX: "2102",
    INVENTORY: "1301",
    INPUT_TAX: "1402",
    OPENING_EQUITY: "3100",
}

# role -> (account_type, code prefix) used when the mapped code is missing
FALLBACKS = {
    SALE_OVERPAYMENT: (Account.AccountType.LIABILITY, "2"),
    PURCHASE_ADVANCE: (Account.AccountType.ASSET, "14"),
    OTHER_INCOME: (Account.AccountType.INCOME, "4"),
    OTHER_EXPENSE: (Account.AccountType.EXPENSE, "7"),
    OPENING_EQUITY: (Account.AccountType.EQUITY, "3"),
}


def _configured_codes() -> dict:
    codes = dict(DEFAULT_CODES)
    codes.update(getattr(settings, "ACCOUNTING_ACCOUNT_CODES", None) or {})
    return codes


def _resolve_code(role: str) -> str:
    role = (role or "").strip().upper()
    if not role:
        raise AccountResolutionError("role is required")

    code = (_configured_codes().get(role) or "").strip()
    if not code:
        raise AccountResolutionError(
            f"Missing account code mapping for role '{role}'. "
            "Set ACCOUNTING_ACCOUNT_CODES (or the ACCOUNT_CODE_* env vars)."
        )
    return code


def get_account_by_code(code: str) -> Account:
    code = (code or "").strip()
    if not code:
        raise AccountResolutionError("Account code is required")

    try:
        return Account.objects.get(code=code, is_active=True)
    except ObjectDoesNotExist as exc:
        raise AccountResolutionError(
            f"Account with code={code} not found (or inactive). "
            "Run seed_chart_of_accounts (or add the account manually) and ensure is_active=True."
        ) from exc
    except MultipleObjectsReturned as exc:
        raise AccountResolutionError(
            f"Multiple active accounts found with code={code}."
        ) from exc


def _fallback_account(role: str) -> Account | None:
    fallback = FALLBACKS.get(role)
    if fallback is None:
        return None

    account_type, prefix = fallback
    return (
        Account.objects.filter(
            account_type=account_type,
            code__startswith=prefix,
            is_active=True,
        )
        .order_by("-code")
        .first()
    )


def get_role_account(role: str) -> Account:
    code = _resolve_code(role)
    try:
        return get_account_by_code(code)
    except AccountResolutionError:
        account = _fallback_account(role)
        if account is None:
            raise

        logger.warning(
            "Account role resolved by fallback",
            extra={"role": role, "expected_code": code, "account_code": account.code},
        )
        return account


# ------------------------------------------------------------
# PUBLIC RESOLVERS
# ------------------------------------------------------------


def get_accounts_receivable_account() -> Account:
    return get_role_account(RECEIVABLE)


def get_accounts_payable_account() -> Account:
    return get_role_account(PAYABLE)


def get_sale_overpayment_account() -> Account:
    return get_role_account(SALE_OVERPAYMENT)


def get_purchase_advance_account() -> Account:
    return get_role_account(PURCHASE_ADVANCE)


def get_other_income_account() -> Account:
    return get_role_account(OTHER_INCOME)


def get_other_expense_account() -> Account:
    return get_role_account(OTHER_EXPENSE)


def get_sales_revenue_account() -> Account:
    return get_role_account(SALES_REVENUE)


def get_output_tax_account() -> Account:
    return get_role_account(OUTPUT_TAX)


def get_inventory_account() -> Account:
    return get_role_account(INVENTORY)


def get_input_tax_account() -> Account:
    """Prepaid input tax; charts without one book input tax against output tax."""
    try:
        return get_role_account(INPUT_TAX)
    except AccountResolutionError:
        return get_role_account(OUTPUT_TAX)


def get_opening_equity_account() -> Account:
    return get_role_account(OPENING_EQUITY)
