"""
Cache configuration settings.

Redis connection and key layout for the embedding cache and the
pre-fetched chunk cache.

Dependencies: pydantic, pydantic_settings
System role: Cache configuration shared by ingestion and generation
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from studyloop.configs.base import BaseSettings


class CacheSettings(BaseSettings):
    """Redis cache configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="REDIS_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(default="redis://localhost:6379/1", description="Redis connection URL")

    embedding_prefix: str = Field(default="embeddings:", description="Key prefix for cached embeddings")
    embedding_ttl_seconds: int = Field(
        default=7 * 24 * 60 * 60,
        description="Embedding cache entry lifetime (7 days)",
    )

    chunk_prefix: str = Field(default="chunks:", description="Key prefix for pre-fetched chunk sets")
    chunk_ttl_seconds: int = Field(
        default=60 * 60,
        description="Chunk cache entry lifetime (1 hour)",
    )
