"""Cache key builders. Single place for key format.

Keys follow domain:identifier:facet so that producers (read paths) and
invalidators (write paths) derive the exact same string. Identifier
components must not contain CACHE_KEY_SEP to avoid ambiguous or
colliding keys.
"""

from app.core.config import Settings
from app.core.constants import (
    CACHE_KEY_SEP,
    CACHE_PREFIX_ADMIN,
    CACHE_PREFIX_COURSE,
    CACHE_PREFIX_ENROLLMENT,
    CACHE_PREFIX_GRANDTEST,
    CACHE_PREFIX_LESSON,
)
from app.domain.exceptions import ValidationException

# Characters with meaning in Redis SCAN MATCH globs
_GLOB_SPECIAL = frozenset("*?[]\\")


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValidationException if value is empty or contains the separator.

    Args:
        value: String component used in a cache key.
        name: Name of the component (for error message).

    Raises:
        ValidationException: If value is empty or contains CACHE_KEY_SEP.
    """
    if not value:
        raise ValidationException(f"Cache key component {name!r} must not be empty", field=name)
    if CACHE_KEY_SEP in value:
        raise ValidationException(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}",
            field=name,
        )


def _join(*parts: str) -> str:
    return CACHE_KEY_SEP.join(parts)


def course_list_key(filters: str | None = None) -> str:
    """Cache key for the course catalogue, optionally per filter string."""
    if filters:
        _validate_key_component(filters, "filters")
    return _join(CACHE_PREFIX_COURSE, "list", filters or "all")


def course_detail_key(course_id: str) -> str:
    """Cache key for a course with its full module/lesson tree."""
    _validate_key_component(course_id, "course_id")
    return _join(CACHE_PREFIX_COURSE, course_id, "full")


def course_modules_key(course_id: str) -> str:
    """Cache key for the module list of a course."""
    _validate_key_component(course_id, "course_id")
    return _join(CACHE_PREFIX_COURSE, course_id, "modules")


def lesson_content_key(lesson_id: str) -> str:
    """Cache key for lesson content."""
    _validate_key_component(lesson_id, "lesson_id")
    return _join(CACHE_PREFIX_LESSON, lesson_id, "content")


def lesson_full_key(lesson_id: str) -> str:
    """Cache key for a lesson with content and flowcharts."""
    _validate_key_component(lesson_id, "lesson_id")
    return _join(CACHE_PREFIX_LESSON, lesson_id, "full")


def grandtest_questions_key(course_id: str) -> str:
    """Cache key for the grand test question bank of a course."""
    _validate_key_component(course_id, "course_id")
    return _join(CACHE_PREFIX_GRANDTEST, "questions", course_id)


def grandtest_attempt_key(attempt_id: str) -> str:
    """Cache key for a grand test attempt."""
    _validate_key_component(attempt_id, "attempt_id")
    return _join(CACHE_PREFIX_GRANDTEST, "attempt", attempt_id)


def enrollment_structure_key(enrollment_id: str) -> str:
    """Cache key for the module/lesson structure of an enrollment."""
    _validate_key_component(enrollment_id, "enrollment_id")
    return _join(CACHE_PREFIX_ENROLLMENT, enrollment_id, "structure")


def enrollment_progress_key(enrollment_id: str) -> str:
    """Cache key for enrollment progress."""
    _validate_key_component(enrollment_id, "enrollment_id")
    return _join(CACHE_PREFIX_ENROLLMENT, enrollment_id, "progress")


ADMIN_ENROLLMENTS_KEY = _join(CACHE_PREFIX_ADMIN, "enrollments", "list")
ADMIN_STATS_KEY = _join(CACHE_PREFIX_ADMIN, "stats", "summary")


def escape_pattern(text: str) -> str:
    """Escape glob metacharacters so text matches only itself in SCAN MATCH."""
    return "".join(f"\\{ch}" if ch in _GLOB_SPECIAL else ch for ch in text)


def tag_pattern(tag: str) -> str:
    """Pattern matching every key that has tag as a whole colon-delimited segment.

    Only inner segments match (*:tag:*); a tag in the first or last
    position of a key is not reached by this pattern.
    """
    return f"*{CACHE_KEY_SEP}{escape_pattern(tag)}{CACHE_KEY_SEP}*"


def ttl_for_key(key: str, settings: Settings) -> int:
    """TTL in seconds for a key built above, from the per-domain settings.

    Course and lesson keys share CACHE_TTL_COURSE; enrollment structure,
    the admin enrollment list and grand test question banks have their
    own. Anything else (progress, attempts, admin stats, ad hoc keys)
    gets CACHE_DEFAULT_TTL.
    """
    parts = key.split(CACHE_KEY_SEP)
    prefix = parts[0]
    if prefix in (CACHE_PREFIX_COURSE, CACHE_PREFIX_LESSON):
        return settings.cache_ttl_course
    if prefix == CACHE_PREFIX_ENROLLMENT and parts[-1] == "structure":
        return settings.cache_ttl_enrollment_structure
    if key == ADMIN_ENROLLMENTS_KEY:
        return settings.cache_ttl_admin_enrollments
    if prefix == CACHE_PREFIX_GRANDTEST and len(parts) > 1 and parts[1] == "questions":
        return settings.cache_ttl_grandtest_questions
    return settings.cache_default_ttl
