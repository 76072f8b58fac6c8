# payments/models/__init__.py

"""
PAYMENTS MODELS PACKAGE EXPORTS
"""

from .overpayment import OverpaymentTransaction
from .payment import Payment

__all__ = [
    "Payment",
    "OverpaymentTransaction",
]
