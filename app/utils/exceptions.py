"""
Exception handling utilities.

Defines the ledger error taxonomy and categorized exception types for
proper error handling.
"""

import aiohttp
from sqlalchemy.exc import OperationalError


class LedgerError(Exception):
    """Base class for errors surfaced by ledger services."""

    status_code = 500
    error_code = "ledger_error"

    def __init__(self, message: str, **details: object) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        """Serialize for JSON responses."""
        payload: dict = {"error": self.error_code, "message": self.message}
        if self.details:
            payload["details"] = {k: str(v) for k, v in self.details.items()}
        return payload


class ValidationError(LedgerError):
    """Missing or malformed input, or a rule violation the caller can fix."""

    status_code = 400
    error_code = "validation_error"


class NotFoundError(LedgerError):
    """Referenced code, partner, promo code or record does not exist."""

    status_code = 404
    error_code = "not_found"


class AtCapacityError(LedgerError):
    """Redemption attempted against a fully consumed code."""

    status_code = 409
    error_code = "at_capacity"


class PersistenceFailure(LedgerError):
    """Underlying datastore write failed."""

    status_code = 500
    error_code = "persistence_failure"


class CodeGenerationError(PersistenceFailure):
    """No unused code could be drawn within the retry bound."""

    error_code = "code_generation_failed"


class NotificationFailure(LedgerError):
    """Outbound email or partner notification failed. Never propagated."""

    error_code = "notification_failure"


# Exception categories based on handling strategy

# Safe to ignore - notification side effects that must not break the main flow
SAFE_TO_IGNORE = (
    NotificationFailure,
    aiohttp.ClientError,
    TimeoutError,
)

# Must log but can continue - non-critical failures
MUST_LOG = (
    OperationalError,
    PersistenceFailure,
)


def is_safe_to_ignore(exc: Exception) -> bool:
    """
    Check if exception can be safely ignored.

    Args:
        exc: Exception to check

    Returns:
        True if exception is safe to ignore
    """
    return isinstance(exc, SAFE_TO_IGNORE)


def must_log(exc: Exception) -> bool:
    """
    Check if exception must be logged.

    Args:
        exc: Exception to check

    Returns:
        True if exception must be logged
    """
    return isinstance(exc, MUST_LOG)

