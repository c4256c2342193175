"""
Quality validation configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Quality validator model and threshold configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from studyloop.configs.base import BaseSettings


class QualitySettings(BaseSettings):
    """LLM quality judge configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="QUALITY_",
        case_sensitive=False,
        extra="ignore",
    )

    model_name: str = Field(default="gemini-2.5-flash", description="Judge model")
    temperature: float = Field(default=0.1, description="Judge sampling temperature")
    max_output_tokens: int = Field(default=800, description="Maximum tokens per judge call")
    strict_mode: bool = Field(default=False, description="Use strict acceptance thresholds")
    batch_size: int = Field(default=3, description="Items scored concurrently per batch")
