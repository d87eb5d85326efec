"""
services/hadith_service.py
---------------------------
Business logic for hadith search, random selection and direct lookup.
Orchestrates the Dorar API client, the normalizer, the cache and the
HadithRepository.

Search workflow:
    1. Validate and trim the query.
    2. Return the cached result list if present.
    3. Otherwise call the Dorar API.
    4. Normalize each element independently, skipping bad ones.
    5. Persist each record (upsert on the Dorar ID when present).
    6. Cache the list and return it.
"""

import hashlib
import json
import random
from typing import Optional

from api.dorar_client import DorarClient
from config import CACHE_TTL
from db.connection import run_in_db
from models.hadith import Hadith
from repositories.hadith_repo import HadithFilters, HadithRepository
from services.cache_service import CacheService
from services.normalizer import normalize_hadith
from utils.errors import InvalidInputError
from utils.logger import get_logger

logger = get_logger(__name__)

CACHE_PREFIX = "hadith_api"
MAX_CACHE_KEY_LENGTH = 250

# Seed topics searched when storage has nothing to pick from.
RANDOM_SEED_TOPICS = ("الصلاة", "الزكاة", "الصيام", "الحج", "البر", "الإيمان")


def make_cache_key(operation: str, *params) -> str:
    """
    Build a namespaced cache key: ``hadith_api:<operation>:<p1>:<p2>...``.

    Non-string params are JSON-encoded with sorted keys so equal option
    dicts give equal keys. Keys longer than 250 characters are replaced
    by the prefix plus a SHA-256 digest of the full key.
    """
    parts = [
        p if isinstance(p, str) else json.dumps(p, sort_keys=True, ensure_ascii=False)
        for p in params
    ]
    key = f"{CACHE_PREFIX}:{operation}:" + ":".join(parts)
    if len(key) > MAX_CACHE_KEY_LENGTH:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        key = f"{CACHE_PREFIX}:{operation}:{digest}"
    return key


class HadithService:
    """Handles all business logic related to hadith records."""

    def __init__(
        self,
        client: Optional[DorarClient] = None,
        repo: Optional[HadithRepository] = None,
        cache: Optional[CacheService] = None,
        cache_ttl: int = CACHE_TTL,
        rng: Optional[random.Random] = None,
    ):
        self.client = client or DorarClient()
        self.repo = repo or HadithRepository()
        self.cache = cache or CacheService()
        self.cache_ttl = cache_ttl
        self._rng = rng or random.Random()

    # ── SEARCH ────────────────────────────────────────────

    async def search(self, query: str, options: Optional[dict] = None) -> list[Hadith]:
        """
        Search hadiths by free text.

        Args:
            query: Search text; must be non-empty after trimming.
            options: Extra query-string parameters for the API.

        Returns:
            Normalized (and persisted) hadiths. Empty on any upstream
            failure; failed lookups are never cached.

        Raises:
            InvalidInputError: If the query is empty or not a string.
        """
        if not isinstance(query, str) or not query.strip():
            raise InvalidInputError("Search query is required and must be a non-empty string")

        trimmed = query.strip()
        options = options or {}
        key = make_cache_key("search", trimmed, options)

        cached = await self.cache.get(key)
        if cached is not None:
            logger.info(f"🔍 Search '{trimmed}' served from cache ({len(cached)} results)")
            return [Hadith.from_dict(item) for item in cached]

        try:
            payload = await self.client.search(trimmed, **options)
        except Exception as e:
            logger.error(f"❌ Hadith search failed for '{trimmed}' (options={options}): {e!r}")
            return []

        if not isinstance(payload, list):
            logger.warning(
                f"⚠️ Dorar API returned {type(payload).__name__} instead of a list for '{trimmed}'"
            )
            return []

        hadiths = await self.process_search_response(payload)
        await self.cache.set(key, [h.to_dict() for h in hadiths], self.cache_ttl)
        logger.info(f"🔍 Search '{trimmed}' completed: {len(hadiths)}/{len(payload)} results")
        return hadiths

    async def process_search_response(self, items: list) -> list[Hadith]:
        """
        Normalize and persist every element of an API result list.

        Elements that fail normalization are logged and skipped; the
        rest are returned in their original order.
        """
        hadiths: list[Hadith] = []
        for index, raw in enumerate(items):
            try:
                hadith = normalize_hadith(raw)
            except Exception as e:
                logger.warning(f"Skipping result #{index}: {e}")
                continue
            if hadith is None:
                logger.warning(f"Skipping result #{index}: no text")
                continue
            hadiths.append(await self.save(hadith))
        return hadiths

    async def save(self, hadith: Hadith) -> Hadith:
        """
        Persist a normalized hadith.

        Upserts on `dorar_id` when present, otherwise inserts. A storage
        failure is logged and the unsaved record is returned as-is.
        """
        try:
            if hadith.dorar_id:
                return await run_in_db(self.repo.upsert_by_dorar_id, hadith)
            return await run_in_db(self.repo.insert, hadith)
        except Exception as e:
            logger.error(f"Failed to save hadith (dorar_id={hadith.dorar_id}): {e!r}")
            return hadith

    # ── RANDOM ────────────────────────────────────────────

    async def get_random(self, filters: Optional[dict] = None) -> Optional[Hadith]:
        """
        Pick a random verified hadith.

        Draws a random offset among stored records matching the filters
        (`topic`, `narrator`, `source`, `grade`). When storage has
        none, or cannot be read, it searches a random seed topic and picks
        one result.

        Returns:
            A Hadith, or None if nothing was found or on failure.
        """
        hadith = await self._random_from_storage(filters)
        if hadith is not None:
            return hadith

        try:
            term = self._rng.choice(RANDOM_SEED_TOPICS)
            logger.info(f"🎲 No stored hadith matches {filters or {}}; searching '{term}'")
            results = await self.search(term)
            return self._rng.choice(results) if results else None
        except Exception as e:
            logger.error(f"❌ Random hadith failed (filters={filters}): {e!r}")
            return None

    async def _random_from_storage(self, filters: Optional[dict]) -> Optional[Hadith]:
        """Random stored match, or None when there is none or storage fails."""
        try:
            criteria = HadithFilters.from_dict(filters)
            total = await run_in_db(self.repo.count, criteria)
            if total == 0:
                return None
            return await run_in_db(self.repo.find_one, criteria, self._rng.randrange(total))
        except Exception as e:
            logger.error(f"❌ Random lookup in storage failed (filters={filters}): {e!r}")
            return None

    # ── LOOKUP ────────────────────────────────────────────

    async def get_by_id(self, hadith_id: str) -> Optional[Hadith]:
        """
        Fetch a stored hadith and bump its search counter.

        Returns:
            The Hadith, or None if it does not exist or the lookup failed.
        """
        try:
            hadith = await run_in_db(self.repo.get_by_id, hadith_id)
        except Exception as e:
            logger.error(f"❌ Lookup of hadith {hadith_id} failed: {e!r}")
            return None
        if hadith is None:
            return None

        try:
            await run_in_db(self.repo.increment_search_count, hadith_id)
            hadith.search_count += 1
        except Exception as e:
            logger.warning(f"Could not increment search count for {hadith_id}: {e!r}")
        return hadith
