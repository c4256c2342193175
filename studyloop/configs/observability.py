"""
Observability configuration settings.

Langfuse credentials for usage events. Variables are read unprefixed
(LANGFUSE_PUBLIC_KEY, LANGFUSE_SECRET_KEY, LANGFUSE_HOST) so the same
.env serves the Langfuse SDK and StudyLoop.

Dependencies: pydantic_settings
System role: Usage tracking configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from studyloop.configs.base import BaseSettings


class ObservabilitySettings(BaseSettings):
    """Langfuse usage tracking configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    langfuse_public_key: str | None = Field(default=None, description="Langfuse public key")
    langfuse_secret_key: str | None = Field(default=None, description="Langfuse secret key")
    langfuse_host: str = Field(default="https://cloud.langfuse.com", description="Langfuse server URL")
    enable_tracing: bool = Field(
        default=True,
        description="Send content generation events; without keys tracking stays off",
    )
