"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory async database, in-memory Redis double, fast-retry
settings, chunk seeding helpers
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import json
from typing import Any
from unittest.mock import MagicMock

import pytest


class InMemoryRedis:
    """
    Minimal async Redis double covering the commands the caches use.

    Counts calls so tests can assert on round trips.
    """

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}
        self.get_calls = 0
        self.set_calls = 0
        self.mget_calls = 0
        self.pipeline_executions = 0

    async def get(self, key: str) -> str | None:
        self.get_calls += 1
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.set_calls += 1
        self.store[key] = value
        self.ttls[key] = ex
        return True

    async def mget(self, keys: list[str]) -> list[str | None]:
        self.mget_calls += 1
        return [self.store.get(key) for key in keys]

    def pipeline(self, transaction: bool = True) -> "_InMemoryPipeline":
        return _InMemoryPipeline(self)


class _InMemoryPipeline:
    def __init__(self, client: InMemoryRedis) -> None:
        self._client = client
        self._commands: list[tuple[str, str, int | None]] = []

    def set(self, key: str, value: str, ex: int | None = None) -> "_InMemoryPipeline":
        self._commands.append((key, value, ex))
        return self

    async def execute(self) -> list[bool]:
        self._client.pipeline_executions += 1
        for key, value, ex in self._commands:
            self._client.store[key] = value
            self._client.ttls[key] = ex
        executed = [True] * len(self._commands)
        self._commands = []
        return executed


@pytest.fixture
async def session_factory():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        async_sessionmaker: Session factory bound to a fresh schema
    """
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
    from sqlalchemy.pool import StaticPool

    import studyloop.boundary.db.models  # noqa: F401  (registers tables)
    from studyloop.boundary.db.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )

    yield factory

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def cache_settings():
    from studyloop.configs.cache import CacheSettings

    return CacheSettings()


@pytest.fixture
def generation_settings():
    """Generation settings with instant retries and a short timeout."""
    from studyloop.configs.generation import GenerationSettings

    return GenerationSettings(
        timeout_seconds=1.0,
        max_attempts=3,
        retry_initial_wait=0.0,
        retry_max_wait=0.0,
        retry_jitter=0.0,
        max_content_chars=15000,
        prefetch_chunks=True,
        quality_gate_enabled=False,
    )


@pytest.fixture
def embedding_settings():
    from studyloop.configs.embedding import EmbeddingSettings

    return EmbeddingSettings(
        batch_size=100,
        max_attempts=2,
        retry_initial_wait=0.0,
        retry_max_wait=0.0,
        retry_jitter=0.0,
    )


@pytest.fixture
def quality_settings():
    from studyloop.configs.quality import QualitySettings

    return QualitySettings(strict_mode=False, batch_size=3)


@pytest.fixture
def idempotency_settings():
    from studyloop.configs.idempotency import IdempotencySettings

    return IdempotencySettings()


@pytest.fixture
def seed_chunks(session_factory):
    """
    Insert chunk rows for a material.

    Usage:
        await seed_chunks("material-1", ["first", "second"])
    """
    from studyloop.boundary.db.CRUD.chunk_crud import chunk_crud

    async def _seed(material_id: str, texts: list[str], embeddings: list[list[float]] | None = None) -> None:
        rows = [
            {
                "content": text,
                "embedding": embeddings[index] if embeddings else None,
                "token_count": round(len(text) / 4),
            }
            for index, text in enumerate(texts)
        ]
        async with session_factory() as session, session.begin():
            await chunk_crud.replace_material_chunks(session, material_id, rows)

    return _seed


@pytest.fixture
def mock_usage_tracker():
    """UsageTracker double whose track call is awaitable."""
    from unittest.mock import AsyncMock

    tracker = MagicMock()
    tracker.track_content_generated = AsyncMock()
    return tracker


def json_payload(value: Any) -> str:
    return json.dumps(value)
