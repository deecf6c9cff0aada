"""Domain exceptions for the LearnHub application.

Defines application-level exceptions independent of infrastructure
concerns. The presentation layer maps them to HTTP responses in
app.core.exception_handlers.
"""

from typing import Any


class LearnHubException(Exception):
    """Base exception for all LearnHub application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, key).
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
        """Return the JSON error body used by the exception handlers."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(LearnHubException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(LearnHubException):
    """Raised when authentication fails (e.g. missing or wrong admin token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class CacheError(LearnHubException):
    """Raised inside the cache layer when a stored entry cannot be used.

    Never escapes CacheService: every public cache operation absorbs it
    and degrades to a miss or no-op.
    """

    def __init__(self, message: str, key: str | None = None) -> None:
        """Initialize with message and the key involved, when known.

        Args:
            message: Description of the failure.
            key: Cache key being read or written.
        """
        details = {"key": key} if key else {}
        super().__init__(message, "CACHE_ERROR", details)
