"""
Exception hierarchy for the buyer lead core.

The API layer maps each class to an HTTP status; the core only raises.
"""
from typing import List, Optional, Sequence


class BuyerLeadsError(Exception):
    """Base exception for all buyer lead errors."""


class ValidationError(BuyerLeadsError):
    """Raised when a payload fails field or cross-field validation."""

    def __init__(self, issues: Sequence, message: str = "Validation failed"):
        super().__init__(message)
        self.issues: List = list(issues)


class NotFoundError(BuyerLeadsError):
    """Raised when a referenced buyer does not exist."""


class ForbiddenError(BuyerLeadsError):
    """Raised when the acting user is neither the owner nor an admin."""


class ConflictError(BuyerLeadsError):
    """Raised when a record changed after the caller last read it."""


class CodecError(BuyerLeadsError):
    """Raised when CSV input cannot be decoded."""

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.line = line


class RowLimitExceededError(BuyerLeadsError):
    """Raised when an import file holds more data rows than allowed."""

    def __init__(self, row_count: int, limit: int):
        super().__init__(f"CSV file cannot contain more than {limit} rows (found {row_count})")
        self.row_count = row_count
        self.limit = limit


class PersistenceError(BuyerLeadsError):
    """Raised when a store transaction fails and was rolled back."""
