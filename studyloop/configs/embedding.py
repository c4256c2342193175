"""
Embedding configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Embedding backend and batching configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from studyloop.configs.base import BaseSettings

# Width of the Chunk Store vector column; changing it needs a schema migration.
EMBEDDING_DIMENSIONS = 768


class EmbeddingSettings(BaseSettings):
    """Embedding backend configuration with model fallback chain."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EMBEDDING_",
        case_sensitive=False,
        extra="ignore",
    )

    models: list[str] = Field(
        default=["models/gemini-embedding-001", "models/text-embedding-004"],
        description="Embedding models in fallback order (primary first)",
    )
    output_dimensionality: int = Field(default=EMBEDDING_DIMENSIONS, description="Fixed embedding vector size")
    batch_size: int = Field(default=100, description="Texts per embedding backend call")

    max_attempts: int = Field(default=3, description="Attempts per batch before falling back")
    retry_initial_wait: float = Field(default=1.0, description="First retry wait in seconds")
    retry_max_wait: float = Field(default=10.0, description="Maximum retry wait in seconds")
    retry_jitter: float = Field(default=1.0, description="Random jitter added to retry waits")
