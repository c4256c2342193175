"""
Embedding cache.

Content-hash keyed store of embedding vectors shared by every ingestion
run. Keys are the SHA-256 of the whitespace-normalized chunk text, so the
same text always maps to the same entry.

Dependencies: redis, hashlib, json, studyloop.configs
System role: Avoids recomputing embeddings for already seen text
"""

import hashlib
import json
import logging

from redis import asyncio as redis_async

from studyloop.configs import get_settings
from studyloop.configs.cache import CacheSettings

logger = logging.getLogger(__name__)


def normalize_text(text: str) -> str:
    """Collapse whitespace runs to single spaces and strip the ends."""
    return " ".join(text.split())


def hash_text(text: str) -> str:
    """SHA-256 hex digest of the normalized text."""
    return hashlib.sha256(normalize_text(text).encode("utf-8")).hexdigest()


class EmbeddingCache:
    """
    Redis-backed embedding cache.

    Reads use one MGET per call; writes go through one pipeline per call
    so a batch of new vectors costs a single round trip.
    """

    def __init__(
        self,
        client: redis_async.Redis,
        settings: CacheSettings | None = None,
    ) -> None:
        """
        Initialize embedding cache.

        Args:
            client: asyncio Redis client (decode_responses=True)
            settings: Cache settings (uses global settings if None)
        """
        self._client = client
        self._settings = settings or get_settings().cache

    def _key(self, text_hash: str) -> str:
        return f"{self._settings.embedding_prefix}{text_hash}"

    async def get_many(self, text_hashes: list[str]) -> dict[str, list[float]]:
        """
        Look up cached vectors.

        Args:
            text_hashes: Content hashes (duplicates allowed)

        Returns:
            dict: hash -> vector for every hash found in the cache
        """
        unique_hashes = list(dict.fromkeys(text_hashes))
        if not unique_hashes:
            return {}

        values = await self._client.mget([self._key(h) for h in unique_hashes])

        found: dict[str, list[float]] = {}
        for text_hash, raw in zip(unique_hashes, values):
            if raw is None:
                continue
            try:
                found[text_hash] = json.loads(raw)
            except (json.JSONDecodeError, TypeError):
                logger.warning(
                    f"{__name__}:get_many - Discarding unreadable cache entry",
                    extra={"text_hash": text_hash},
                )
        return found

    async def set_many(self, vectors: dict[str, list[float]]) -> None:
        """
        Store vectors with the configured TTL.

        Args:
            vectors: hash -> vector
        """
        if not vectors:
            return

        pipe = self._client.pipeline(transaction=False)
        for text_hash, vector in vectors.items():
            pipe.set(self._key(text_hash), json.dumps(vector), ex=self._settings.embedding_ttl_seconds)
        await pipe.execute()

        logger.debug(
            f"{__name__}:set_many - Cached embeddings",
            extra={"count": len(vectors)},
        )
