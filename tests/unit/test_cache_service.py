"""
Unit tests for services/cache_service.py
"""

from datetime import datetime, timedelta, timezone

import pytest

from services.cache_service import CacheService
from tests.fakes import FakeCacheRepository


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repo():
    return FakeCacheRepository()


@pytest.fixture
def cache(repo, clock):
    return CacheService(repo, default_ttl=60, now=clock)


class TestCacheService:

    @pytest.mark.asyncio
    async def test_set_then_get(self, cache):
        assert await cache.set("k", [{"a": "صحيح"}]) is True
        assert await cache.get("k") == [{"a": "صحيح"}]

    @pytest.mark.asyncio
    async def test_missing_key_is_none(self, cache):
        assert await cache.get("absent") is None

    @pytest.mark.asyncio
    async def test_empty_list_is_a_hit_not_a_miss(self, cache):
        await cache.set("k", [])
        assert await cache.get("k") == []

    @pytest.mark.asyncio
    async def test_expired_get_misses_and_deletes(self, cache, repo, clock):
        await cache.set("k", {"v": 1}, ttl=10)
        clock.advance(11)

        assert await cache.get("k") is None
        assert "k" not in repo.rows

    @pytest.mark.asyncio
    async def test_set_overwrites(self, cache):
        await cache.set("k", 1)
        await cache.set("k", 2)
        assert await cache.get("k") == 2

    @pytest.mark.asyncio
    async def test_default_ttl_applies(self, cache, repo, clock):
        await cache.set("k", 1)
        _, expires_at = repo.rows["k"]
        assert expires_at == clock.now + timedelta(seconds=60)

    @pytest.mark.asyncio
    async def test_cleanup_removes_only_expired(self, cache, repo, clock):
        await cache.set("old", 1, ttl=10)
        await cache.set("new", 2, ttl=1000)
        clock.advance(20)

        assert await cache.cleanup_expired() == 1
        assert list(repo.rows) == ["new"]

    @pytest.mark.asyncio
    async def test_delete_and_clear(self, cache, repo):
        await cache.set("a", 1)
        await cache.set("b", 2)

        assert await cache.delete("a") is True
        assert await cache.delete("a") is False
        assert await cache.clear() == 1
        assert repo.rows == {}

    @pytest.mark.asyncio
    async def test_storage_failures_degrade(self, cache, repo):
        repo.fail = True
        assert await cache.set("k", 1) is False
        assert await cache.get("k") is None
