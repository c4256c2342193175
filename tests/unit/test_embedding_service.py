"""Tests for the content-hash embedding cache and cache-aware embedding service."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from studyloop.boundary.cache.embedding_cache import EmbeddingCache, hash_text, normalize_text
from studyloop.core.embeddings.embedding_service import EmbeddingService
from studyloop.core.exceptions import EmbeddingError


def make_embedder(side_effect=None) -> MagicMock:
    """Embedder double returning one [len(text), 1.0] vector per text."""
    embedder = MagicMock()
    if side_effect is None:
        embedder.aembed_documents = AsyncMock(
            side_effect=lambda texts: [[float(len(text)), 1.0] for text in texts]
        )
    else:
        embedder.aembed_documents = AsyncMock(side_effect=side_effect)
    return embedder


class TestTextHashing:
    """Test normalization and hashing."""

    def test_normalize_collapses_whitespace(self) -> None:
        """Should collapse runs of whitespace and strip ends."""
        assert normalize_text("  hello \n\t world  ") == "hello world"

    def test_whitespace_variants_share_hash(self) -> None:
        """Should map whitespace-only differences to the same key."""
        assert hash_text("a  b") == hash_text("a b\n")

    def test_hash_is_sha256_hex(self) -> None:
        """Should produce a 64 character hex digest."""
        digest = hash_text("text")

        assert len(digest) == 64
        int(digest, 16)


class TestEmbeddingCache:
    """Test Redis-backed embedding cache."""

    @pytest.mark.asyncio
    async def test_round_trip_with_ttl(self, fake_redis, cache_settings) -> None:
        """Should store vectors with the configured TTL and read them back."""
        cache = EmbeddingCache(fake_redis, cache_settings)

        await cache.set_many({"h1": [0.1, 0.2]})
        found = await cache.get_many(["h1", "h2"])

        assert found == {"h1": [0.1, 0.2]}
        assert fake_redis.ttls[f"{cache_settings.embedding_prefix}h1"] == cache_settings.embedding_ttl_seconds

    @pytest.mark.asyncio
    async def test_set_many_uses_one_pipeline(self, fake_redis, cache_settings) -> None:
        """Should write a batch in a single round trip."""
        cache = EmbeddingCache(fake_redis, cache_settings)

        await cache.set_many({f"h{i}": [float(i)] for i in range(10)})

        assert fake_redis.pipeline_executions == 1
        assert fake_redis.set_calls == 0

    @pytest.mark.asyncio
    async def test_get_many_dedupes_keys(self, fake_redis, cache_settings) -> None:
        """Should issue one MGET for distinct hashes."""
        cache = EmbeddingCache(fake_redis, cache_settings)

        await cache.get_many(["h1", "h1", "h2"])

        assert fake_redis.mget_calls == 1

    @pytest.mark.asyncio
    async def test_unreadable_entry_is_a_miss(self, fake_redis, cache_settings) -> None:
        """Should ignore corrupt cache entries."""
        fake_redis.store[f"{cache_settings.embedding_prefix}bad"] = "not-json"
        cache = EmbeddingCache(fake_redis, cache_settings)

        assert await cache.get_many(["bad"]) == {}


class TestEmbeddingService:
    """Test deduplicated, cached batch embedding."""

    @pytest.mark.asyncio
    async def test_identical_texts_embedded_once(self, fake_redis, cache_settings, embedding_settings) -> None:
        """Should call the backend once and write the cache once for 150 identical chunks."""
        # Arrange
        embedder = make_embedder()
        cache = EmbeddingCache(fake_redis, cache_settings)
        service = EmbeddingService(cache, [embedder], embedding_settings)
        texts = ["the same paragraph"] * 150

        # Act
        vectors = await service.embed_texts(texts)

        # Assert
        assert len(vectors) == 150
        assert all(vector == vectors[0] for vector in vectors)
        embedder.aembed_documents.assert_awaited_once_with(["the same paragraph"])
        assert fake_redis.pipeline_executions == 1

    @pytest.mark.asyncio
    async def test_cached_texts_not_recomputed(self, fake_redis, cache_settings, embedding_settings) -> None:
        """Should only embed texts missing from the cache."""
        # Arrange
        cache = EmbeddingCache(fake_redis, cache_settings)
        await cache.set_many({hash_text("known"): [9.0, 9.0]})
        embedder = make_embedder()
        service = EmbeddingService(cache, [embedder], embedding_settings)

        # Act
        vectors = await service.embed_texts(["known", "new text"])

        # Assert
        assert vectors[0] == [9.0, 9.0]
        assert vectors[1] == [8.0, 1.0]
        embedder.aembed_documents.assert_awaited_once_with(["new text"])

    @pytest.mark.asyncio
    async def test_fully_cached_input_skips_backend(self, fake_redis, cache_settings, embedding_settings) -> None:
        """Should not call the backend or write the cache when everything is cached."""
        cache = EmbeddingCache(fake_redis, cache_settings)
        await cache.set_many({hash_text("a"): [1.0], hash_text("b"): [2.0]})
        fake_redis.pipeline_executions = 0
        embedder = make_embedder()
        service = EmbeddingService(cache, [embedder], embedding_settings)

        vectors = await service.embed_texts(["b", "a", "b"])

        assert vectors == [[2.0], [1.0], [2.0]]
        embedder.aembed_documents.assert_not_awaited()
        assert fake_redis.pipeline_executions == 0

    @pytest.mark.asyncio
    async def test_results_follow_input_order(self, fake_redis, cache_settings, embedding_settings) -> None:
        """Should return vectors aligned with the input texts."""
        service = EmbeddingService(EmbeddingCache(fake_redis, cache_settings), [make_embedder()], embedding_settings)

        vectors = await service.embed_texts(["aaa", "a", "aa", "a"])

        assert [vector[0] for vector in vectors] == [3.0, 1.0, 2.0, 1.0]

    @pytest.mark.asyncio
    async def test_batches_by_configured_size(self, fake_redis, cache_settings, embedding_settings) -> None:
        """Should split distinct texts into backend batches."""
        settings = embedding_settings.model_copy(update={"batch_size": 2})
        embedder = make_embedder()
        service = EmbeddingService(EmbeddingCache(fake_redis, cache_settings), [embedder], settings)

        await service.embed_texts(["t1", "t2", "t3", "t4", "t5"])

        assert embedder.aembed_documents.await_count == 3
        assert fake_redis.pipeline_executions == 1

    @pytest.mark.asyncio
    async def test_falls_back_to_next_model(self, fake_redis, cache_settings, embedding_settings) -> None:
        """Should use the secondary model when the primary keeps failing."""
        # Arrange
        primary = make_embedder(side_effect=RuntimeError("503 unavailable"))
        secondary = make_embedder()
        service = EmbeddingService(EmbeddingCache(fake_redis, cache_settings), [primary, secondary], embedding_settings)

        # Act
        vectors = await service.embed_texts(["hello"])

        # Assert
        assert vectors == [[5.0, 1.0]]
        assert primary.aembed_documents.await_count == embedding_settings.max_attempts
        secondary.aembed_documents.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_permanent_error_not_retried(self, fake_redis, cache_settings, embedding_settings) -> None:
        """Should move to the next model immediately on a non-transient error."""
        primary = make_embedder(side_effect=ValueError("bad request"))
        secondary = make_embedder()
        service = EmbeddingService(EmbeddingCache(fake_redis, cache_settings), [primary, secondary], embedding_settings)

        await service.embed_texts(["hello"])

        assert primary.aembed_documents.await_count == 1

    @pytest.mark.asyncio
    async def test_all_models_failing_raises(self, fake_redis, cache_settings, embedding_settings) -> None:
        """Should raise EmbeddingError and cache nothing when every model fails."""
        failing = [make_embedder(side_effect=ValueError("nope")) for _ in range(2)]
        service = EmbeddingService(EmbeddingCache(fake_redis, cache_settings), failing, embedding_settings)

        with pytest.raises(EmbeddingError):
            await service.embed_texts(["hello"])

        assert fake_redis.store == {}

    @pytest.mark.asyncio
    async def test_wrong_vector_count_raises(self, fake_redis, cache_settings, embedding_settings) -> None:
        """Should reject a backend response that does not match the batch."""
        embedder = make_embedder(side_effect=lambda texts: [[1.0]])
        service = EmbeddingService(EmbeddingCache(fake_redis, cache_settings), [embedder], embedding_settings)

        with pytest.raises(EmbeddingError):
            await service.embed_texts(["one", "two"])

    @pytest.mark.asyncio
    async def test_empty_input(self, fake_redis, cache_settings, embedding_settings) -> None:
        """Should return an empty list without touching cache or backend."""
        embedder = make_embedder()
        service = EmbeddingService(EmbeddingCache(fake_redis, cache_settings), [embedder], embedding_settings)

        assert await service.embed_texts([]) == []
        assert fake_redis.mget_calls == 0

    def test_requires_a_backend(self, fake_redis, cache_settings, embedding_settings) -> None:
        """Should refuse an empty fallback chain."""
        with pytest.raises(ValueError):
            EmbeddingService(EmbeddingCache(fake_redis, cache_settings), [], embedding_settings)

    @pytest.mark.asyncio
    async def test_cache_written_as_json(self, fake_redis, cache_settings, embedding_settings) -> None:
        """Should store vectors under the normalized text hash."""
        service = EmbeddingService(EmbeddingCache(fake_redis, cache_settings), [make_embedder()], embedding_settings)

        await service.embed_texts(["  spaced   text "])

        stored = fake_redis.store[f"{cache_settings.embedding_prefix}{hash_text('spaced text')}"]
        assert json.loads(stored) == [16.0, 1.0]
