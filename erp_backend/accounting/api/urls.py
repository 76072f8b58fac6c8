# accounting/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

# ViewSets live in accounting/api/view.py (singular); imported directly to
# avoid circular imports through views/__init__.py.
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

router = DefaultRouter()
router.register("journal-entries", JournalEntryViewSet, basename="journal-entry")

urlpatterns = [
    # Router endpoints
    path("", include(router.urls)),
    # Reports
    path("ledger/", LedgerView.as_view(), name="ledger"),
    path("aging/", AgingView.as_view(), name="aging"),
    path("bank-balances/", BankBalancesView.as_view(), name="bank-balances"),
    # Posting actions
    path(
        "cash-transactions/",
        CashTransactionListCreateView.as_view(),
        name="cash-transactions",
    ),
    path(
        "cash-transactions/<int:pk>/post/",
        CashTransactionPostView.as_view(),
        name="cash-transaction-post",
    ),
    path(
        "cash-transactions/<int:pk>/reverse/",
        CashTransactionReverseView.as_view(),
        name="cash-transaction-reverse",
    ),
    path(
        "bank-transfers/",
        BankTransferListCreateView.as_view(),
        name="bank-transfers",
    ),
    path(
        "bank-transfers/<int:pk>/post/",
        BankTransferPostView.as_view(),
        name="bank-transfer-post",
    ),
    path(
        "bank-transfers/<int:pk>/reverse/",
        BankTransferReverseView.as_view(),
        name="bank-transfer-reverse",
    ),
]
