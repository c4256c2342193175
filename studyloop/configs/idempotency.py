"""
Idempotency configuration settings.

Record lifetimes, retry ceilings and backoff parameters for
at-least-once delivered operations.

Dependencies: pydantic, pydantic_settings
System role: Idempotency and retry policy configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from studyloop.configs.base import BaseSettings


class IdempotencySettings(BaseSettings):
    """Idempotency record and retry backoff configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="IDEMPOTENCY_",
        case_sensitive=False,
        extra="ignore",
    )

    default_ttl_hours: int = Field(default=24, description="Lifetime of an idempotency record")
    webhook_ttl_hours: int = Field(default=48, description="Lifetime for externally delivered events")
    default_max_retries: int = Field(default=3, description="Retry ceiling for internal operations")
    webhook_max_retries: int = Field(default=5, description="Retry ceiling for external events")

    base_delay_ms: int = Field(default=2000, description="Backoff base delay in milliseconds")
    backoff_multiplier: float = Field(default=2.0, description="Backoff growth factor")
    max_delay_ms: int = Field(default=300_000, description="Backoff cap in milliseconds")
    jitter_factor: float = Field(default=0.2, description="Relative jitter applied to each delay")
