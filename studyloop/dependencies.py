"""
Component factories.

Wires settings, storage, caches and services into the generation
pipeline, orchestrator and ingestion pipeline. Worker tasks build fresh
components per run because async clients are bound to the event loop
that created them.

Dependencies: studyloop.configs, studyloop.boundary, studyloop.core
System role: Composition root for workers and local runs
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studyloop.boundary.cache import ChunkCache, EmbeddingCache, get_redis_client
from studyloop.boundary.db.connection import get_async_session_factory
from studyloop.configs import get_settings
from studyloop.core.document_processing.ingestion import MaterialIngestionPipeline
from studyloop.core.embeddings.embedding_service import EmbeddingService
from studyloop.core.generation.chunk_retriever import ChunkRetriever
from studyloop.core.generation.generation_backend import GenerationBackend
from studyloop.core.generation.pipeline import GenerationPipeline
from studyloop.core.generation.strategies import build_default_registry
from studyloop.core.idempotency.processor import IdempotentEventProcessor
from studyloop.core.idempotency.service import IdempotencyService
from studyloop.core.orchestration.dispatchers import (
    CeleryGenerationDispatcher,
    GenerationDispatcher,
)
from studyloop.core.orchestration.orchestrator import JobOrchestrator
from studyloop.evaluation.quality_validator import QualityValidator
from studyloop.observability.usage_tracker import get_usage_tracker

SessionFactory = async_sessionmaker[AsyncSession]


def build_chunk_retriever(session_factory: SessionFactory | None = None) -> ChunkRetriever:
    settings = get_settings()
    return ChunkRetriever(
        session_factory or get_async_session_factory(),
        ChunkCache(get_redis_client(), settings.cache),
        settings.generation,
    )


def build_generation_pipeline(session_factory: SessionFactory | None = None) -> GenerationPipeline:
    """
    Build a pipeline with every built-in strategy registered.

    The quality validator is only created when the quality gate is enabled.
    """
    settings = get_settings()
    session_factory = session_factory or get_async_session_factory()
    quality_validator = (
        QualityValidator(settings.quality) if settings.generation.quality_gate_enabled else None
    )
    return GenerationPipeline(
        registry=build_default_registry(session_factory),
        retriever=build_chunk_retriever(session_factory),
        backend=GenerationBackend(settings.generation),
        usage_tracker=get_usage_tracker(),
        quality_validator=quality_validator,
        settings=settings.generation,
    )


def build_embedding_service() -> EmbeddingService:
    settings = get_settings()
    return EmbeddingService(
        cache=EmbeddingCache(get_redis_client(), settings.cache),
        settings=settings.embedding,
    )


def build_ingestion_pipeline(session_factory: SessionFactory | None = None) -> MaterialIngestionPipeline:
    return MaterialIngestionPipeline(
        session_factory or get_async_session_factory(),
        build_embedding_service(),
        get_settings().document_pipeline,
    )


def build_event_processor(session_factory: SessionFactory | None = None) -> IdempotentEventProcessor:
    service = IdempotencyService(
        session_factory or get_async_session_factory(),
        get_settings().idempotency,
    )
    return IdempotentEventProcessor(service)


def build_job_orchestrator(
    dispatcher: GenerationDispatcher | None = None,
    session_factory: SessionFactory | None = None,
) -> JobOrchestrator:
    """
    Build an orchestrator.

    Args:
        dispatcher: Fan-out primitive (Celery task queue if None)
        session_factory: Async session factory (global if None)
    """
    session_factory = session_factory or get_async_session_factory()
    return JobOrchestrator(
        session_factory,
        dispatcher or CeleryGenerationDispatcher(),
        retriever=build_chunk_retriever(session_factory),
        settings=get_settings().generation,
    )
