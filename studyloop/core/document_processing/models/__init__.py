"""Ingestion result models."""

from studyloop.core.document_processing.models.ingestion_result import IngestionResult
from studyloop.core.document_processing.models.text_chunk import TextChunk

__all__ = ["IngestionResult", "TextChunk"]
