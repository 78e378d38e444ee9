"""
Exception types raised by the version history engine.

Every failure is reported as one of these so callers (the CLI, an API layer)
can tell user-facing conditions apart from unexpected bugs.
"""

from __future__ import annotations

from typing import Optional


class DocHistoryError(Exception):
    """Base class for all doc-history errors."""


class InvalidInputError(DocHistoryError):
    """Raised when a snapshot or request argument is malformed."""


class SizeExceededError(DocHistoryError):
    """Raised when a document is too large to diff."""

    def __init__(self, limit: int, actual: int, unit: str = "lines"):
        self.limit = limit
        self.actual = actual
        self.unit = unit
        super().__init__(f"Document too large to diff: {actual} {unit} (limit {limit})")


class ConflictError(DocHistoryError):
    """Raised when a commit's expected parent is no longer the head."""

    def __init__(self, document_id: str, expected: Optional[int], actual: Optional[int]):
        self.document_id = document_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Conflict on document {document_id}: expected head {expected}, found {actual}"
        )


class NotFoundError(DocHistoryError):
    """Raised for an unknown document or version sequence."""


class ComparisonCancelled(DocHistoryError):
    """Raised when an in-flight comparison was superseded or cancelled."""
