# accounting/api/serializers/__init__.py

from accounting.api.serializers.aging import AgingQuerySerializer, AgingSerializer
from accounting.api.serializers.bank_balances import BankBalanceSerializer
from accounting.api.serializers.bank_transfers import (
    BankTransferCreateSerializer,
    BankTransferSerializer,
)
from accounting.api.serializers.cash_transactions import (
    CashTransactionCreateSerializer,
    CashTransactionSerializer,
    ReversalRequestSerializer,
)
from accounting.api.serializers.journal_entries import (
    JournalEntrySerializer,
    JournalLineSerializer,
)
from accounting.api.serializers.ledger import LedgerQuerySerializer, LedgerSerializer

__all__ = [
    "AgingQuerySerializer",
    "AgingSerializer",
    "BankBalanceSerializer",
    "BankTransferCreateSerializer",
    "BankTransferSerializer",
    "CashTransactionCreateSerializer",
    "CashTransactionSerializer",
    "ReversalRequestSerializer",
    "JournalEntrySerializer",
    "JournalLineSerializer",
    "LedgerQuerySerializer",
    "LedgerSerializer",
]
