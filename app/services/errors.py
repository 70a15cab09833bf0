"""
Service-layer exceptions.

Routes translate these into HTTP responses (see app.main):
- NotFound -> 404
- InvalidArgument -> 400
- UnconfirmedWarnings -> 422
- ConsistencyViolation -> 409
"""

from typing import List, Optional


class LedgerError(Exception):
    """Base class for errors raised by the service layer."""


class NotFound(LedgerError, LookupError):
    """A referenced proposal, payment entry, partner or service type does not exist."""


class InvalidArgument(LedgerError, ValueError):
    """Input rejected before any mutation took place."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or [message]


class UnconfirmedWarnings(LedgerError):
    """Input is valid but raised warnings; resubmit with confirm_warnings to save."""

    def __init__(self, warnings: List[str]):
        super().__init__("; ".join(warnings))
        self.warnings = warnings


class ConsistencyViolation(LedgerError, RuntimeError):
    """Stored paid totals no longer match the ledger they are derived from."""
