"""
Configuration settings for the material ingestion pipeline.

Provides environment-based configuration for download, chunking and embedding.

Dependencies: pydantic, pydantic_settings
System role: Ingestion pipeline configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from studyloop.configs.base import BaseSettings


class DocumentPipelineSettings(BaseSettings):
    """Settings for course material ingestion."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DOC_PIPELINE_",
        case_sensitive=False,
        extra="ignore",
    )

    documents_bucket: str = Field(
        default="studyloop-dev-materials",
        description="S3 bucket holding uploaded course materials",
    )
    region: str = Field(
        default="eu-central-1",
        description="AWS region for the materials bucket",
    )

    # Chunking settings
    chunk_size: int = Field(
        default=800,
        description="Maximum chunk size in characters",
    )
    chunk_overlap: int = Field(
        default=150,
        description="Overlap between consecutive chunks",
    )
