"""
Custom Exceptions for Amy

Hierarchical exception classes shared by the domain, persistence and API layers.
"""

from typing import Optional, Dict, Any


class AmyError(Exception):
    """Base exception for all Amy errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ValidationError(AmyError):
    """Raised when input validation fails."""
    pass


class ParseError(ValidationError):
    """Raised when a stored or submitted calendar date is malformed."""

    def __init__(self, value: Any, original_error: Optional[Exception] = None):
        super().__init__(
            f"Invalid date: {value!r} (expected YYYY-MM-DD)",
            details={"value": str(value)},
            original_error=original_error,
        )


class DatabaseError(AmyError):
    """Raised when database operations fail."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table
        super().__init__(message, details, original_error)


class NotFoundError(DatabaseError):
    """Raised when a requested resource is not found."""
    pass


class AIServiceError(AmyError):
    """Raised when AI completion calls fail."""

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if model:
            details["model"] = model
        if operation:
            details["operation"] = operation
        super().__init__(message, details, original_error)


class RateLimitError(AmyError):
    """Raised when a caller has used up its AI request allowance."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[int] = None,
        limit: Optional[int] = None,
        remaining: int = 0,
        reset_at: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details: Dict[str, Any] = {}
        if retry_after is not None:
            details["retry_after_seconds"] = retry_after
        if reset_at:
            details["reset_at"] = reset_at
        super().__init__(message, details=details, original_error=original_error)
        self.retry_after = retry_after
        self.limit = limit
        self.remaining = remaining
        self.reset_at = reset_at

    def headers(self) -> Dict[str, str]:
        """Response headers advertising the limit state."""
        headers: Dict[str, str] = {"X-RateLimit-Remaining": str(self.remaining)}
        if self.limit is not None:
            headers["X-RateLimit-Limit"] = str(self.limit)
        if self.reset_at:
            headers["X-RateLimit-Reset"] = self.reset_at
        if self.retry_after is not None:
            headers["Retry-After"] = str(self.retry_after)
        return headers


class ConfigurationError(AmyError):
    """Raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(message, details, original_error)
