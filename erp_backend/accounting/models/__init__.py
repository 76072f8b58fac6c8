# accounting/models/__init__.py

"""
ACCOUNTING MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
- Do NOT import services from models anywhere (models must stay pure).
"""

from accounting.models.account import Account
from accounting.models.bank import Bank
from accounting.models.bank_transfer import BankTransfer
from accounting.models.cash_transaction import CashTransaction
from accounting.models.journal import JournalEntry
from accounting.models.ledger import JournalLine
from accounting.models.sequence import DocumentSequence

__all__ = [
    "Account",
    "Bank",
    "BankTransfer",
    "CashTransaction",
    "DocumentSequence",
    "JournalEntry",
    "JournalLine",
]
