"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from studyloop.configs.base import BaseSettings
from studyloop.configs.cache import CacheSettings
from studyloop.configs.celery_config import CelerySettings
from studyloop.configs.database import DatabaseSettings
from studyloop.configs.document_pipeline import DocumentPipelineSettings
from studyloop.configs.embedding import EmbeddingSettings
from studyloop.configs.generation import GenerationSettings
from studyloop.configs.idempotency import IdempotencySettings
from studyloop.configs.observability import ObservabilitySettings
from studyloop.configs.quality import QualitySettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    quality: QualitySettings = Field(default_factory=QualitySettings)
    idempotency: IdempotencySettings = Field(default_factory=IdempotencySettings)
    document_pipeline: DocumentPipelineSettings = Field(default_factory=DocumentPipelineSettings)
    celery: CelerySettings = Field(default_factory=CelerySettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Environment variables are loaded once, on first call.

    Returns:
        Settings: Application settings instance

    Usage:
        from studyloop.configs import get_settings
        settings = get_settings()
    """
    return Settings()
