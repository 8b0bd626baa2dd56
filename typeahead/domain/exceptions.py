"""Domain exceptions for the type-ahead aggregator.

Expected failure modes (a source query failing, a malformed item) are
converted to typed outcomes inside the engine; the exceptions here either
travel between a source adapter and the aggregator, or signal programmer
errors. Presentation layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class TypeaheadException(Exception):
    """Base exception for all type-ahead errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, source).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses (error, message, details)."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(TypeaheadException):
    """Raised when input validation fails (e.g. blank search term)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class UnknownSourceKindException(TypeaheadException):
    """Raised when code asks for a source kind outside the closed set.

    This is a programmer error and is the only exception allowed to
    escape the normalizer.
    """

    def __init__(self, kind: object) -> None:
        super().__init__(
            f"Unknown source kind: {kind!r}",
            "UNKNOWN_SOURCE_KIND",
            {"kind": str(kind)},
        )


class SourceQueryException(TypeaheadException):
    """One collection query failed (transport error or non-success envelope).

    Raised by source adapters and caught by the fan-out aggregator, which
    records it as a failed branch. Never escapes a round.
    """

    def __init__(
        self,
        source: str,
        reason: str,
        error_code: str = "SOURCE_QUERY_FAILED",
    ) -> None:
        """Initialize with the failing source and a short reason.

        Args:
            source: Source kind value (e.g. 'report').
            reason: Why the query failed (status, envelope message, ...).
            error_code: Machine-readable code (e.g. 'NETWORK_ERROR').
        """
        self.source = source
        self.reason = reason
        super().__init__(
            f"{source} query failed: {reason}",
            error_code,
            {"source": source, "reason": reason},
        )


class SearchSessionClosedException(TypeaheadException):
    """Raised when a search session is driven after it was torn down."""

    def __init__(self, session_id: str | None = None) -> None:
        details = {"session_id": session_id} if session_id else {}
        super().__init__("Search session is closed", "SESSION_CLOSED", details)


class NormalizationDefect(TypeaheadException):
    """A single raw item is too malformed to become a result.

    The normalizer raises it for that item only; the rest of the branch is
    kept and the round continues.
    """

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(
            f"Cannot normalize {source} item: {reason}",
            "NORMALIZATION_DEFECT",
            {"source": source, "reason": reason},
        )
