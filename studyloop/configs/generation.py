"""
Content generation configuration settings.

Model parameters, timeouts, retry bounds and the content budget used by
the generation pipeline.

Dependencies: pydantic, pydantic_settings
System role: Generation pipeline configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from studyloop.configs.base import BaseSettings


class GenerationSettings(BaseSettings):
    """Generation backend and pipeline configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GENERATION_",
        case_sensitive=False,
        extra="ignore",
    )

    model_name: str = Field(default="gemini-2.5-flash", description="Chat model for content generation")
    temperature: float = Field(default=0.7, description="Sampling temperature")
    max_output_tokens: int = Field(default=3500, description="Maximum tokens per generation call")
    timeout_seconds: float = Field(default=60.0, description="Hard timeout per generation call")

    max_attempts: int = Field(default=3, description="Attempts for transient backend failures")
    retry_initial_wait: float = Field(default=1.0, description="First retry wait in seconds")
    retry_max_wait: float = Field(default=30.0, description="Maximum retry wait in seconds")
    retry_jitter: float = Field(default=2.0, description="Random jitter added to retry waits")

    max_content_chars: int = Field(
        default=15000,
        description="Character budget for combined chunk content",
    )
    prefetch_chunks: bool = Field(
        default=True,
        description="Pre-fetch chunks once per batch and share them via the chunk cache",
    )
    quality_gate_enabled: bool = Field(
        default=False,
        description="Score generated items and drop rejected ones before persisting",
    )
