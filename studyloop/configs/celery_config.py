"""
Celery configuration settings.

Manages Celery broker and result backend configuration for background jobs.
Includes retry policies and worker settings.

Dependencies: pydantic, pydantic_settings
System role: Task queue configuration for ingestion and content generation
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from studyloop.configs.base import BaseSettings


class CelerySettings(BaseSettings):
    """Celery broker and result backend configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CELERY_",
        case_sensitive=False,
        extra="ignore",
    )

    broker_url: str = Field(default="redis://localhost:6379/0", description="Broker URL")
    result_backend_url: str = Field(default="redis://localhost:6379/0", description="Result backend URL")

    task_serializer: str = Field(default="json", description="Task serialization format")
    result_serializer: str = Field(default="json", description="Result serialization format")
    accept_content: list[str] = Field(
        default=["json"],
        description="Accepted content types",
    )
    timezone: str = Field(default="UTC", description="Celery timezone")

    # Retry policy
    task_max_retries: int = Field(default=3, description="Maximum task retry attempts")
    task_retry_backoff: int = Field(default=60, description="Retry backoff base in seconds")
    task_retry_backoff_max: int = Field(
        default=600,
        description="Maximum retry backoff in seconds",
    )
    replay_interval_seconds: int = Field(
        default=300,
        description="How often pending idempotent events are replayed",
    )
