"""
Unit tests for the exception hierarchy.
"""

from amy.infrastructure.exceptions import (
    AmyError,
    NotFoundError,
    ParseError,
    RateLimitError,
    ValidationError,
)


def test_rate_limit_headers():
    error = RateLimitError(
        retry_after=120,
        limit=25,
        remaining=0,
        reset_at="2026-10-17T10:00:00+00:00",
    )
    assert error.headers() == {
        "X-RateLimit-Remaining": "0",
        "X-RateLimit-Limit": "25",
        "X-RateLimit-Reset": "2026-10-17T10:00:00+00:00",
        "Retry-After": "120",
    }
    assert error.to_dict()["details"]["retry_after_seconds"] == 120


def test_rate_limit_headers_without_limit():
    assert RateLimitError().headers() == {"X-RateLimit-Remaining": "0"}


def test_parse_error_is_a_validation_error():
    error = ParseError("2026-13-01")
    assert isinstance(error, ValidationError)
    assert "2026-13-01" in error.message
    assert error.details == {"value": "2026-13-01"}


def test_not_found_details():
    error = NotFoundError("Subscription not found", operation="get", table="subscriptions")
    assert isinstance(error, AmyError)
    assert error.to_dict() == {
        "error": "NotFoundError",
        "message": "Subscription not found",
        "details": {"operation": "get", "table": "subscriptions"},
    }
