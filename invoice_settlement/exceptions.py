"""
Settlement engine errors.

Every error the engine raises derives from SettlementError and
carries a stable error_code, the HTTP status the API answers with,
and whether the caller may safely retry the operation. Retrying is
safe for conflicts and storage failures because every attempt
re-reads the invoice and recomputes the settlement from scratch.
"""

from typing import Any


class SettlementError(Exception):
    """Base exception for all settlement engine failures."""

    error_code: str = "SETTLEMENT_ERROR"
    status_code: int = 500
    retryable: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
        }


class ValidationError(SettlementError):
    """Bad input, e.g. a payment amount that is missing or out of range."""

    error_code = "VALIDATION_ERROR"
    status_code = 422


class IllegalTransitionError(SettlementError):
    """The requested status change is not in the transition table."""

    error_code = "ILLEGAL_TRANSITION"
    status_code = 409


class UnbalancedBatchError(SettlementError):
    """A ledger batch whose debits and credits differ."""

    error_code = "UNBALANCED_BATCH"
    status_code = 500


class UnknownAccountError(SettlementError):
    """A ledger entry references an account that cannot be resolved."""

    error_code = "UNKNOWN_ACCOUNT"
    status_code = 500


class NotFoundError(SettlementError):
    """An invoice or a tenant's account settings do not exist."""

    error_code = "NOT_FOUND"
    status_code = 404


class ConcurrencyConflictError(SettlementError):
    """The invoice changed between read and write."""

    error_code = "CONCURRENCY_CONFLICT"
    status_code = 409
    retryable = True


class PersistenceError(SettlementError):
    """The database rejected or failed a read or write."""

    error_code = "PERSISTENCE_ERROR"
    status_code = 503
    retryable = True


class PostingError(PersistenceError):
    """A ledger batch could not be stored. No part of it persists."""

    error_code = "POSTING_ERROR"
