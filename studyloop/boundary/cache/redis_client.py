"""
Redis client factory.

Dependencies: redis, studyloop.configs
System role: Shared connection pool for cache adapters
"""

from functools import lru_cache

from redis import asyncio as redis_async

from studyloop.configs import get_settings


@lru_cache
def get_redis_client() -> redis_async.Redis:
    """
    Get the process-wide asyncio Redis client.

    Responses are decoded to str; values are JSON documents.

    Returns:
        redis.asyncio.Redis: Client bound to the configured URL
    """
    return redis_async.from_url(get_settings().cache.url, decode_responses=True)
