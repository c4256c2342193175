"""
Embedding service with content-hash caching.

Embeds chunk texts through a chain of embedding models, computing each
distinct text at most once per call and never recomputing texts already
present in the embedding cache.

Flow: hash -> cache lookup -> dedupe misses -> batched embed (retry, model
fallback) -> single cache write -> results in input order

Dependencies: langchain_core, tenacity, studyloop.boundary.cache
System role: Embedding stage of material ingestion
"""

import logging
from collections.abc import Sequence

from langchain_core.embeddings import Embeddings
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from studyloop.boundary.cache.embedding_cache import EmbeddingCache, hash_text
from studyloop.configs import get_settings
from studyloop.configs.embedding import EmbeddingSettings
from studyloop.core.embeddings.embeddings_wrapper import FixedDimensionEmbeddings
from studyloop.core.exceptions import EmbeddingError, is_transient_error

logger = logging.getLogger(__name__)


def build_default_embedders(settings: EmbeddingSettings | None = None) -> list[Embeddings]:
    """
    Create one embedder per configured model, primary first.

    Args:
        settings: Embedding settings (uses global settings if None)

    Returns:
        list[Embeddings]: Fallback chain of embedding backends
    """
    settings = settings or get_settings().embedding
    return [
        FixedDimensionEmbeddings(model=model, output_dimensionality=settings.output_dimensionality)
        for model in settings.models
    ]


class EmbeddingService:
    """
    Cache-aware batch embedder.

    Usage:
        service = EmbeddingService(cache=EmbeddingCache(get_redis_client()))
        vectors = await service.embed_texts(["chunk one", "chunk two"])
    """

    def __init__(
        self,
        cache: EmbeddingCache,
        embedders: Sequence[Embeddings] | None = None,
        settings: EmbeddingSettings | None = None,
    ) -> None:
        """
        Initialize embedding service.

        Args:
            cache: Embedding cache shared across runs
            embedders: Embedding backends in fallback order (built from
                settings if None)
            settings: Embedding settings (uses global settings if None)
        """
        self._settings = settings or get_settings().embedding
        self._cache = cache
        self._embedders = list(embedders) if embedders is not None else build_default_embedders(self._settings)
        if not self._embedders:
            raise ValueError("At least one embedding backend is required")

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """
        Embed texts, reusing cached vectors.

        Args:
            texts: Texts to embed (duplicates allowed)

        Returns:
            list[list[float]]: One vector per input text, in input order

        Raises:
            EmbeddingError: When every model in the chain fails for a batch
        """
        if not texts:
            return []

        text_hashes = [hash_text(text) for text in texts]
        cached = await self._cache.get_many(text_hashes)

        # First occurrence of each uncached hash, in input order
        pending: dict[str, str] = {}
        for text, text_hash in zip(texts, text_hashes):
            if text_hash not in cached and text_hash not in pending:
                pending[text_hash] = text

        logger.info(
            f"{__name__}:embed_texts - Cache lookup complete",
            extra={
                "texts": len(texts),
                "unique": len(set(text_hashes)),
                "cache_hits": len(cached),
                "to_embed": len(pending),
            },
        )

        new_vectors: dict[str, list[float]] = {}
        if pending:
            pending_hashes = list(pending.keys())
            batch_size = max(1, self._settings.batch_size)
            for start in range(0, len(pending_hashes), batch_size):
                batch_hashes = pending_hashes[start:start + batch_size]
                vectors = await self._embed_batch([pending[h] for h in batch_hashes])
                new_vectors.update(zip(batch_hashes, vectors))

            await self._cache.set_many(new_vectors)

        results: list[list[float]] = []
        for text_hash in text_hashes:
            vector = cached.get(text_hash) or new_vectors.get(text_hash)
            if vector is None:
                raise EmbeddingError(
                    "Embedding missing after generation",
                    details={"text_hash": text_hash},
                )
            results.append(vector)
        return results

    async def _embed_batch(self, batch: list[str]) -> list[list[float]]:
        """Embed one batch, falling back through the model chain."""
        last_error: Exception | None = None

        for position, embedder in enumerate(self._embedders):
            try:
                vectors = await self._embed_with_retry(embedder, batch)
            except Exception as e:
                last_error = e
                logger.warning(
                    f"{__name__}:_embed_batch - Embedding backend {position} failed, trying next",
                    extra={"error_type": type(e).__name__, "error_msg": str(e), "batch_size": len(batch)},
                )
                continue

            if len(vectors) != len(batch):
                raise EmbeddingError(
                    "Embedding backend returned wrong number of vectors",
                    details={"expected": len(batch), "received": len(vectors)},
                )
            return vectors

        raise EmbeddingError(
            f"All embedding backends failed: {last_error}",
            details={"batch_size": len(batch), "backends": len(self._embedders)},
        ) from last_error

    async def _embed_with_retry(self, embedder: Embeddings, batch: list[str]) -> list[list[float]]:
        """Call one backend, retrying transient failures with exponential backoff."""
        retrying = AsyncRetrying(
            retry=retry_if_exception(is_transient_error),
            stop=stop_after_attempt(self._settings.max_attempts),
            wait=wait_exponential_jitter(
                initial=self._settings.retry_initial_wait,
                max=self._settings.retry_max_wait,
                jitter=self._settings.retry_jitter,
            ),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:_embed_with_retry - Retry {retry_state.attempt_number}/"
                f"{self._settings.max_attempts} after transient failure"
            ),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await embedder.aembed_documents(batch)
        raise EmbeddingError("Embedding retries exhausted")
