"""Custom exceptions for LegacySearch.

All exceptions carry a human-readable message plus a context dict so the CLI
can render them either as a rich panel or as JSON.
"""

from __future__ import annotations

from typing import Any


class LegacySearchError(Exception):
    """Base exception for all LegacySearch errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Return error as JSON-serializable dict."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ConnectionError(LegacySearchError):
    """Failed to connect to the database."""

    pass


class TransactionError(LegacySearchError):
    """Transaction scope misuse (nested begin, commit without begin, ...)."""

    pass


class QueryError(LegacySearchError):
    """Query could not be built or executed."""

    pass


class UnknownAttributeError(QueryError):
    """Criterion targets an attribute path the record store does not know."""

    def __init__(self, path: str, available_paths: list[str]) -> None:
        message = (
            f"Unknown attribute path '{path}'. Available paths: {', '.join(available_paths)}"
        )
        super().__init__(message, {"path": path, "available_paths": available_paths})
        self.path = path
        self.available_paths = available_paths


class ValidationError(LegacySearchError):
    """Input validation failed."""

    def __init__(self, message: str, field_errors: dict[str, str] | None = None) -> None:
        super().__init__(message, {"field_errors": field_errors or {}})
        self.field_errors = field_errors or {}


class GenerationError(LegacySearchError):
    """Synthetic data generation failed."""

    pass


class SearchIndexError(LegacySearchError):
    """The search index rejected a write or could not be queried."""

    def __init__(self, operation: str, reference: str | None, reason: str) -> None:
        if reference is None:
            message = f"Search index {operation} failed: {reason}"
        else:
            message = f"Search index {operation} failed for reference '{reference}': {reason}"
        super().__init__(
            message, {"operation": operation, "reference": reference, "reason": reason}
        )
        self.operation = operation
        self.reference = reference
        self.reason = reason
