"""Embedding generation with content-hash caching."""

from studyloop.core.embeddings.embedding_service import EmbeddingService

__all__ = ["EmbeddingService"]
