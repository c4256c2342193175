"""
Material ingestion Celery task.

Task: ingest_material(material_id, s3_key)
Flow: download -> parse -> chunk -> embed -> replace chunk set

Dependencies: celery, studyloop.core.document_processing, studyloop.workers
System role: Async material processing task
"""

import logging

from studyloop.core.exceptions import EmbeddingError, StorageDownloadError
from studyloop.dependencies import build_ingestion_pipeline
from studyloop.workers import celery_app, celery_config
from studyloop.workers.runtime import run_async

logger = logging.getLogger(__name__)


async def _ingest(material_id: str, s3_key: str) -> dict:
    result = await build_ingestion_pipeline().process(material_id, s3_key)
    return result.model_dump(mode="json")


@celery_app.task(
    bind=True,
    name="studyloop.ingest_material",
    max_retries=celery_config.task_max_retries,
    autoretry_for=(StorageDownloadError, EmbeddingError),
    retry_backoff=celery_config.task_retry_backoff,
    retry_backoff_max=celery_config.task_retry_backoff_max,
)
def ingest_material(self, material_id: str, s3_key: str):
    """
    Ingest a material asynchronously.

    Args:
        material_id: Material identifier
        s3_key: Object key of the uploaded PDF

    Returns:
        dict: Ingestion result with chunk count and timings
    """
    logger.info(
        f"{__name__}:ingest_material - Ingestion started",
        extra={"task_id": self.request.id, "material_id": material_id, "attempt": self.request.retries},
    )
    return run_async(_ingest(material_id, s3_key))
