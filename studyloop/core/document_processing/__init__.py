"""
Course material ingestion.

Download -> parse -> chunk -> embed -> replace the material's chunk set.
"""

from studyloop.core.document_processing.ingestion import MaterialIngestionPipeline
from studyloop.core.document_processing.models import IngestionResult

__all__ = ["MaterialIngestionPipeline", "IngestionResult"]
