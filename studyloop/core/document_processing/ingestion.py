"""
Material ingestion pipeline.

Coordinates S3 download, PDF parsing, chunking, embedding and the atomic
replacement of a material's chunk set in the Chunk Store.

Dependencies: All task modules, studyloop.core.embeddings, studyloop.boundary.db
System role: Pipeline orchestration (coordinates only)
"""

import asyncio
import logging
import os
import shutil
import time

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studyloop.boundary.db.CRUD.chunk_crud import chunk_crud
from studyloop.configs import get_settings
from studyloop.configs.document_pipeline import DocumentPipelineSettings
from studyloop.core.document_processing.models import IngestionResult, TextChunk
from studyloop.core.document_processing.tasks import ChunkingTask, ParsingTask, S3DownloadTask
from studyloop.core.embeddings.embedding_service import EmbeddingService
from studyloop.core.exceptions import DocumentProcessingError

logger = logging.getLogger(__name__)


def estimate_tokens(text: str) -> int:
    """Rough token estimate: one token per four characters."""
    return round(len(text) / 4)


class MaterialIngestionPipeline:
    """Ingest one material: S3 download -> parse -> chunk -> embed -> store."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        embedding_service: EmbeddingService,
        settings: DocumentPipelineSettings | None = None,
        download_task: S3DownloadTask | None = None,
        parsing_task: ParsingTask | None = None,
        chunking_task: ChunkingTask | None = None,
    ) -> None:
        """
        Initialize pipeline with its collaborators.

        Args:
            session_factory: Async session factory for the Chunk Store
            embedding_service: Cache-aware embedder
            settings: Pipeline settings (uses global settings if None)
            download_task: S3 download stage (built from settings if None)
            parsing_task: PDF parsing stage
            chunking_task: Chunking stage (built from settings if None)
        """
        self._settings = settings or get_settings().document_pipeline
        self._session_factory = session_factory
        self._embedding_service = embedding_service
        self._download_task = download_task or S3DownloadTask(
            bucket=self._settings.documents_bucket,
            region=self._settings.region,
        )
        self._parsing_task = parsing_task or ParsingTask()
        self._chunking_task = chunking_task or ChunkingTask(
            chunk_size=self._settings.chunk_size,
            chunk_overlap=self._settings.chunk_overlap,
        )

    async def process(self, material_id: str, s3_key: str) -> IngestionResult:
        """
        Ingest a material end to end.

        Re-running for the same material replaces its chunks rather than
        appending to them.

        Args:
            material_id: Material identifier
            s3_key: Object key of the uploaded PDF

        Returns:
            IngestionResult: Chunk count, text length and timing

        Raises:
            StorageDownloadError: Download failed
            ParsingError: PDF could not be parsed
            DocumentProcessingError: Material produced no chunks
            EmbeddingError: Every embedding backend failed
        """
        start_time = time.perf_counter()
        logger.info(
            f"{__name__}:process - START",
            extra={"material_id": material_id, "s3_key": s3_key},
        )

        local_path = await asyncio.to_thread(self._download_task.download, s3_key, material_id)
        try:
            documents = await asyncio.to_thread(self._parsing_task.parse, local_path, material_id)
        finally:
            shutil.rmtree(os.path.dirname(local_path), ignore_errors=True)

        text_length = sum(len(doc.page_content) for doc in documents)
        chunks = self._chunking_task.split(documents)
        if not chunks:
            raise DocumentProcessingError("Material produced no chunks", material_id)

        chunk_count = await self.store_chunks(material_id, chunks)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"{__name__}:process - END",
            extra={
                "material_id": material_id,
                "chunk_count": chunk_count,
                "text_length": text_length,
                "processing_time_ms": round(elapsed_ms, 1),
            },
        )
        return IngestionResult(
            material_id=material_id,
            chunk_count=chunk_count,
            text_length=text_length,
            processing_time_ms=elapsed_ms,
        )

    async def store_chunks(self, material_id: str, chunks: list[TextChunk]) -> int:
        """
        Embed chunks and replace the material's chunk set.

        Embeddings cover the full chunk text, overlap included.

        Args:
            material_id: Material identifier
            chunks: Chunks in reading order

        Returns:
            int: Number of chunks written
        """
        embeddings = await self._embedding_service.embed_texts([chunk.content for chunk in chunks])

        rows = [
            {
                "content": chunk.content,
                "embedding": vector,
                "token_count": estimate_tokens(chunk.content),
                "start_index": chunk.start_index,
                "overlap_chars": chunk.overlap_chars,
            }
            for chunk, vector in zip(chunks, embeddings)
        ]

        async with self._session_factory() as session, session.begin():
            return await chunk_crud.replace_material_chunks(session, material_id, rows)
