"""
Material ingestion tasks.

Each task handles one stage: download, parse, chunk.
"""

from studyloop.core.document_processing.tasks.chunking_task import ChunkingTask
from studyloop.core.document_processing.tasks.parsing_task import ParsingTask
from studyloop.core.document_processing.tasks.s3_download_task import S3DownloadTask

__all__ = [
    "ChunkingTask",
    "ParsingTask",
    "S3DownloadTask",
]
