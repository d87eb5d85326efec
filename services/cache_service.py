"""
services/cache_service.py
--------------------------
Key/value cache with per-entry expiry, backed by the `cache` table.

Values are stored as JSON text. An entry whose expiry has passed reads
as a miss and is deleted on that read; the periodic sweep removes the
rest. Cache failures never break the caller: reads degrade to a miss,
writes to a no-op.
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from config import CACHE_TTL
from db.connection import run_in_db
from repositories.cache_repo import CacheRepository
from utils.logger import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheService:
    """
    Business logic on top of CacheRepository.

    Args:
        repo: The cache repository.
        default_ttl: Seconds an entry lives when `set` gets no ttl.
        now: Clock returning an aware UTC datetime (injected in tests).
    """

    def __init__(
        self,
        repo: Optional[CacheRepository] = None,
        default_ttl: int = CACHE_TTL,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.repo = repo or CacheRepository()
        self.default_ttl = default_ttl
        self._now = now

    async def get(self, key: str) -> Optional[Any]:
        """
        Read a cached value.

        Returns:
            The decoded value, or None on a miss, an expired entry or
            any storage/decoding failure.
        """
        try:
            row = await run_in_db(self.repo.get, key)
            if row is None:
                return None

            data, expires_at = row
            if expires_at <= self._now():
                await run_in_db(self.repo.delete, key)
                logger.debug(f"Cache expired: {key}")
                return None

            logger.debug(f"Cache hit: {key}")
            return json.loads(data)
        except Exception as e:
            logger.error(f"Cache get failed for {key}: {e!r}")
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Store a JSON-serializable value, overwriting any previous entry.

        Returns:
            True if the entry was written.
        """
        expires_at = self._now() + timedelta(seconds=ttl if ttl is not None else self.default_ttl)
        try:
            data = json.dumps(value, ensure_ascii=False)
            await run_in_db(self.repo.set, key, data, expires_at)
            logger.debug(f"Cache set: {key} (expires {expires_at.isoformat()})")
            return True
        except Exception as e:
            logger.error(f"Cache set failed for {key}: {e!r}")
            return False

    async def delete(self, key: str) -> bool:
        try:
            return await run_in_db(self.repo.delete, key)
        except Exception as e:
            logger.error(f"Cache delete failed for {key}: {e!r}")
            return False

    async def clear(self) -> int:
        """Drop every entry. Returns the number removed (0 on failure)."""
        try:
            removed = await run_in_db(self.repo.clear)
            logger.info(f"🧹 Cache cleared ({removed} entries).")
            return removed
        except Exception as e:
            logger.error(f"Cache clear failed: {e!r}")
            return 0

    async def cleanup_expired(self) -> int:
        """Delete every expired entry. Returns the number removed (0 on failure)."""
        try:
            removed = await run_in_db(self.repo.delete_expired, self._now())
        except Exception as e:
            logger.error(f"Cache cleanup failed: {e!r}")
            return 0
        if removed:
            logger.info(f"🧹 Removed {removed} expired cache entries.")
        return removed
