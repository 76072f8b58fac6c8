# accounting/api/errors.py

"""
Service error -> HTTP response mapping shared by posting endpoints.

- precondition (already posted, not posted, overpayment resolved) -> 409
- input validation / setup problems                               -> 400
- invariant violations                                            -> 500 (logged)
"""

from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.response import Response

from accounting.services.exceptions import (
    AccountingServiceError,
    AccountResolutionError,
    IdempotencyError,
    InputValidationError,
    InvariantViolationError,
    JournalEntryCreationError,
    PreconditionError,
)

logger = logging.getLogger(__name__)


def service_error_response(exc: AccountingServiceError) -> Response:
    payload = {"detail": str(exc), "code": exc.code}

    if isinstance(exc, PreconditionError):
        if exc.current_status:
            payload["current_status"] = exc.current_status
        return Response(payload, status=status.HTTP_409_CONFLICT)

    if isinstance(exc, IdempotencyError):
        return Response(payload, status=status.HTTP_409_CONFLICT)

    if isinstance(exc, (InputValidationError, AccountResolutionError, JournalEntryCreationError)):
        return Response(payload, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, InvariantViolationError):
        logger.error("Accounting invariant violated: %s", exc)

    return Response(payload, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
