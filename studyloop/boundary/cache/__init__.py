"""
Redis-backed caches.

Exports:
  - get_redis_client(): Shared asyncio Redis client
  - EmbeddingCache: Content-hash keyed embedding vectors
  - ChunkCache: Pre-fetched chunk sets keyed by batch cache key
"""

from studyloop.boundary.cache.chunk_cache import ChunkCache
from studyloop.boundary.cache.embedding_cache import EmbeddingCache, hash_text, normalize_text
from studyloop.boundary.cache.redis_client import get_redis_client

__all__ = [
    "ChunkCache",
    "EmbeddingCache",
    "hash_text",
    "normalize_text",
    "get_redis_client",
]
