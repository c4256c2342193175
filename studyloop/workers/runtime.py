"""
Event loop runner for Celery tasks.

Celery tasks are synchronous; each one drives its coroutine in a fresh
event loop. Pooled database and Redis connections are tied to the loop
that opened them, so they are released before the loop closes.

Dependencies: asyncio, studyloop.boundary
System role: Async bridge for worker tasks
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar

from studyloop.boundary.cache.redis_client import get_redis_client
from studyloop.boundary.db.connection import get_async_engine

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _release_connections() -> None:
    await get_async_engine().dispose()
    await get_redis_client().aclose()


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion, then release loop-bound connections."""

    async def _wrapped() -> T:
        try:
            return await coro
        finally:
            await _release_connections()

    return asyncio.run(_wrapped())


def run_tags(**values: Any) -> list[str]:
    """Tags identifying a run in worker logs (e.g. course:abc)."""
    return [f"{name}:{value}" for name, value in values.items() if value]
