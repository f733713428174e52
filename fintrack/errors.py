"""
Ledger error kinds.

Every failure the core can report is one of these. They are raised
synchronously to the immediate caller; the core never logs-and-continues
and never retries. Each also derives from the matching builtin so
callers that only know about ValueError/IndexError still catch them.
"""

from typing import Optional, Sequence


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class InvalidElementError(LedgerError, ValueError):
    """A required element (or batch) was missing or of the wrong kind."""

    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.position = position


class ValidationFailedError(LedgerError, ValueError):
    """
    A record failed validation.

    Attributes:
        issues: every ValidationIssue found (may be empty when the
                failure came from building the record itself)
        position: batch position of the offending element, if any
    """

    def __init__(
        self,
        message: str,
        issues: Optional[Sequence] = None,
        position: Optional[int] = None,
    ):
        super().__init__(message)
        self.issues = list(issues or [])
        self.position = position


class IndexOutOfRangeError(LedgerError, IndexError):
    """A position does not exist in the collection."""
    pass


class UnsupportedMutationError(LedgerError, TypeError):
    """Attempted to mutate a read-only view."""
    pass


class BudgetNotFoundError(LedgerError, KeyError):
    """No budget is configured for the requested category."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""
