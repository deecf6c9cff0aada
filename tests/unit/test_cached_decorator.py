"""Tests for the @cached read-through decorator."""

from app.infrastructure.cache import CacheService, cached, enrollment_structure_key


class EnrollmentReader:
    """Stands in for a request handler helper that owns a cache attribute."""

    def __init__(self, cache: CacheService) -> None:
        self.cache = cache
        self.queries = 0

    @cached("enrollment", ttl=900, key_builder=lambda enrollment_id: enrollment_structure_key(enrollment_id))
    async def structure(self, enrollment_id: str) -> dict:
        self.queries += 1
        return {"enrollment_id": enrollment_id, "modules": []}


async def test_attribute_cache_used_and_key_from_builder(cache: CacheService, fake_redis) -> None:
    reader = EnrollmentReader(cache)
    first = await reader.structure("e1")
    second = await reader.structure("e1")

    assert first == second == {"enrollment_id": "e1", "modules": []}
    assert reader.queries == 1
    assert "enrollment:e1:structure" in fake_redis.store
    assert fake_redis.expirations["enrollment:e1:structure"] == 900


async def test_cache_keyword_and_default_key(cache: CacheService, fake_redis) -> None:
    calls = []

    @cached("admin", ttl=300)
    async def load_enrollments(page: int, cache: CacheService | None = None) -> list[int]:
        calls.append(page)
        return [page]

    assert await load_enrollments(2, cache=cache) == [2]
    assert await load_enrollments(2, cache=cache) == [2]
    assert calls == [2]
    assert "admin:2" in fake_redis.store


async def test_cached_none_result_not_recomputed(cache: CacheService) -> None:
    calls = 0

    @cached("lesson")
    async def find_lesson(svc: CacheService, lesson_id: str) -> None:
        nonlocal calls
        calls += 1
        return None

    assert await find_lesson(cache, "l1") is None
    assert await find_lesson(cache, "l1") is None
    assert calls == 1


async def test_without_cache_calls_through() -> None:
    calls = 0

    @cached("course")
    async def load(course_id: str) -> str:
        nonlocal calls
        calls += 1
        return course_id

    assert await load("c1") == "c1"
    assert await load("c1") == "c1"
    assert calls == 2
