"""
Chunk cache.

Holds the ordered chunk texts fetched once for a generation batch so the
sibling pipelines of that batch can skip the Chunk Store.

Dependencies: redis, hashlib, json, studyloop.configs
System role: Cache side of cache-first chunk retrieval
"""

import hashlib
import json
import logging

from redis import asyncio as redis_async

from studyloop.configs import get_settings
from studyloop.configs.cache import CacheSettings

logger = logging.getLogger(__name__)


def build_chunk_cache_key(course_id: str, week_id: str, material_ids: list[str]) -> str:
    """
    Deterministic cache key for a batch's chunk set.

    Material order is part of the key because it defines chunk order.
    """
    digest = hashlib.sha256(",".join(material_ids).encode("utf-8")).hexdigest()[:16]
    return f"{course_id}:{week_id}:{digest}"


class ChunkCache:
    """Redis-backed store of ordered chunk text lists."""

    def __init__(
        self,
        client: redis_async.Redis,
        settings: CacheSettings | None = None,
    ) -> None:
        self._client = client
        self._settings = settings or get_settings().cache

    def _key(self, cache_key: str) -> str:
        return f"{self._settings.chunk_prefix}{cache_key}"

    async def get(self, cache_key: str) -> list[str] | None:
        """
        Fetch a cached chunk list.

        Args:
            cache_key: Batch cache key

        Returns:
            Ordered chunk texts, or None on a miss or unreadable entry
        """
        raw = await self._client.get(self._key(cache_key))
        if raw is None:
            return None
        try:
            chunks = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning(
                f"{__name__}:get - Discarding unreadable chunk cache entry",
                extra={"cache_key": cache_key},
            )
            return None
        if not isinstance(chunks, list):
            return None
        return [str(chunk) for chunk in chunks]

    async def set(self, cache_key: str, chunks: list[str], ttl_seconds: int | None = None) -> None:
        """
        Store an ordered chunk list.

        Args:
            cache_key: Batch cache key
            chunks: Ordered chunk texts
            ttl_seconds: Entry lifetime (defaults to the configured chunk TTL)
        """
        await self._client.set(
            self._key(cache_key),
            json.dumps(chunks),
            ex=ttl_seconds or self._settings.chunk_ttl_seconds,
        )
