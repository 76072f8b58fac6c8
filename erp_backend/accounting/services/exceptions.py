# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for accounting, posting and overpayment services.

Taxonomy:
- PreconditionError: expected, user-facing; the document is in the wrong state
- InputValidationError: rejected before any persistence attempt
- InvariantViolationError: internal bug; fatal, logged, operation rolled back
"""


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""

    code = "accounting_error"


# ------------------------------------------------------------
# PRECONDITIONS
# ------------------------------------------------------------


class PreconditionError(AccountingServiceError):
    """Raised when a document is not in the state an operation requires."""

    code = "precondition_failed"

    def __init__(self, message: str, *, current_status: str | None = None):
        super().__init__(message)
        self.current_status = current_status


class AlreadyPostedError(PreconditionError):
    code = "already_posted"


class NotPostedError(PreconditionError):
    code = "not_posted"


class OverpaymentAlreadyResolvedError(PreconditionError):
    code = "overpayment_already_resolved"


# ------------------------------------------------------------
# INPUT VALIDATION
# ------------------------------------------------------------


class InputValidationError(AccountingServiceError):
    """Raised when caller input is rejected before persistence."""

    code = "invalid_input"


class InvalidBankError(InputValidationError):
    code = "invalid_bank"


class InvalidAmountError(InputValidationError):
    code = "invalid_amount"


# ------------------------------------------------------------
# INVARIANTS
# ------------------------------------------------------------


class InvariantViolationError(AccountingServiceError):
    """Raised when an internal accounting invariant does not hold."""

    code = "invariant_violation"


class UnbalancedEntryError(InvariantViolationError):
    code = "unbalanced_entry"


# ------------------------------------------------------------
# SETUP / ENGINE
# ------------------------------------------------------------


class AccountResolutionError(AccountingServiceError):
    """Raised when an expected account cannot be resolved."""

    code = "account_resolution"


class JournalEntryCreationError(AccountingServiceError):
    """Raised when a journal entry cannot be created."""

    code = "journal_entry_creation"


class IdempotencyError(AccountingServiceError):
    """Raised on duplicate or retried accounting events."""

    code = "duplicate_posting"
