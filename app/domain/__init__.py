"""Domain layer: exceptions shared across the application.

No dependencies on infrastructure or presentation.
"""

from app.domain.exceptions import (
    AuthenticationException,
    CacheError,
    LearnHubException,
    ValidationException,
)

__all__ = [
    "AuthenticationException",
    "CacheError",
    "LearnHubException",
    "ValidationException",
]
