"""
Google Generative AI Embeddings wrapper with fixed output dimensionality.

Wraps GoogleGenerativeAIEmbeddings so every call, sync or async, uses the
configured vector size. Stored chunk vectors must all share one size for
similarity search to work.

Dependencies: langchain_google_genai
System role: Embedding dimension consistency for the Chunk Store
"""

import logging

from langchain_google_genai import GoogleGenerativeAIEmbeddings

logger = logging.getLogger(__name__)


class FixedDimensionEmbeddings(GoogleGenerativeAIEmbeddings):
    """GoogleGenerativeAIEmbeddings with a fixed output dimensionality."""

    _output_dimensionality: int = 768

    def __init__(
        self,
        model: str = "models/gemini-embedding-001",
        output_dimensionality: int = 768,
        **kwargs,
    ) -> None:
        """
        Initialize embeddings with fixed output dimensionality.

        Args:
            model: Google embedding model ID
            output_dimensionality: Vector size for all embed calls
            **kwargs: Additional arguments for GoogleGenerativeAIEmbeddings
        """
        super().__init__(model=model, **kwargs)
        self._output_dimensionality = output_dimensionality
        logger.info(
            f"{__name__}:__init__ - Initialized with model={model}, "
            f"output_dimensionality={output_dimensionality}"
        )

    def embed_documents(self, texts: list[str], **kwargs) -> list[list[float]]:
        kwargs.setdefault("output_dimensionality", self._output_dimensionality)
        return super().embed_documents(texts, **kwargs)

    async def aembed_documents(self, texts: list[str], **kwargs) -> list[list[float]]:
        kwargs.setdefault("output_dimensionality", self._output_dimensionality)
        return await super().aembed_documents(texts, **kwargs)

    def embed_query(self, text: str, **kwargs) -> list[float]:
        kwargs.setdefault("output_dimensionality", self._output_dimensionality)
        return super().embed_query(text, **kwargs)
