# accounting/api/views/__init__.py

"""
accounting.api.views package

- ViewSets are defined in accounting.api.view (singular).
- Do NOT import accounting.api.urls from here to avoid circular imports.
"""

from accounting.api.view import JournalEntryViewSet
from accounting.api.views.aging import AgingView
from accounting.api.views.bank_balances import BankBalancesView
from accounting.api.views.bank_transfers import (
    BankTransferListCreateView,
    BankTransferPostView,
    BankTransferReverseView,
)
from accounting.api.views.cash_transactions import (
    CashTransactionListCreateView,
    CashTransactionPostView,
    CashTransactionReverseView,
)
from accounting.api.views.ledger import LedgerView

__all__ = [
    "JournalEntryViewSet",
    "AgingView",
    "BankBalancesView",
    "BankTransferListCreateView",
    "BankTransferPostView",
    "BankTransferReverseView",
    "CashTransactionListCreateView",
    "CashTransactionPostView",
    "CashTransactionReverseView",
    "LedgerView",
]
