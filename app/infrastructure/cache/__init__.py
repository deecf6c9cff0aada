"""Cache: backend connector, Redis cache service and cache key utilities.

Request handlers read through CacheService (app.state.cache) and
invalidate on writes using the same builders from keys.py.
"""

from app.infrastructure.cache.cache_protocol import CacheProtocol
from app.infrastructure.cache.connector import BackendConnector
from app.infrastructure.cache.envelope import CacheEntry
from app.infrastructure.cache.keys import (
    ADMIN_ENROLLMENTS_KEY,
    ADMIN_STATS_KEY,
    course_detail_key,
    course_list_key,
    course_modules_key,
    enrollment_progress_key,
    enrollment_structure_key,
    escape_pattern,
    grandtest_attempt_key,
    grandtest_questions_key,
    lesson_content_key,
    lesson_full_key,
    tag_pattern,
    ttl_for_key,
)
from app.infrastructure.cache.redis_cache import MISS, CacheLookup, CacheService, cached
from app.infrastructure.cache.stats import CacheStats, CacheStatsSnapshot

__all__ = [
    "ADMIN_ENROLLMENTS_KEY",
    "ADMIN_STATS_KEY",
    "BackendConnector",
    "CacheEntry",
    "CacheLookup",
    "CacheProtocol",
    "CacheService",
    "CacheStats",
    "CacheStatsSnapshot",
    "MISS",
    "cached",
    "course_detail_key",
    "course_list_key",
    "course_modules_key",
    "enrollment_progress_key",
    "enrollment_structure_key",
    "escape_pattern",
    "grandtest_attempt_key",
    "grandtest_questions_key",
    "lesson_content_key",
    "lesson_full_key",
    "tag_pattern",
    "ttl_for_key",
]
