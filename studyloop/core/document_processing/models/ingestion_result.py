"""
Ingestion result model.

Dependencies: pydantic
System role: Return type for MaterialIngestionPipeline.process()
"""

from pydantic import BaseModel, Field


class IngestionResult(BaseModel):
    """Result of ingesting one course material."""

    material_id: str = Field(description="Ingested material identifier")
    chunk_count: int = Field(description="Chunks written to the Chunk Store")
    text_length: int = Field(description="Characters of extracted text")
    processing_time_ms: float = Field(description="Total processing time in milliseconds")
