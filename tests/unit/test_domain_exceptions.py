"""Tests for domain exceptions (error_code, message, details)."""

from app.domain.exceptions import (
    AuthenticationException,
    CacheError,
    LearnHubException,
    ValidationException,
)


def test_base_exception_default_error_code() -> None:
    """Base LearnHubException uses class name as error_code when not provided."""
    exc = LearnHubException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "LearnHubException"
    assert exc.details == {}


def test_base_exception_to_dict() -> None:
    exc = LearnHubException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception() -> None:
    exc = ValidationException("Invalid format", field="lesson_id")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "lesson_id"}


def test_validation_exception_without_field() -> None:
    assert ValidationException("Invalid").details == {}


def test_authentication_exception_default_message() -> None:
    exc = AuthenticationException()
    assert exc.message == "Authentication failed"
    assert exc.error_code == "AUTHENTICATION_ERROR"


def test_cache_error_carries_key() -> None:
    exc = CacheError("bad entry", key="course:c1:full")
    assert isinstance(exc, LearnHubException)
    assert exc.error_code == "CACHE_ERROR"
    assert exc.details == {"key": "course:c1:full"}
    assert CacheError("bad entry").details == {}
