"""
Content generation Celery task.

Task: generate_content(request_data, batch_id)
Flow: validate request -> mark processing -> pipeline -> completed | failed

Failures are not retried here: they are recorded against the feature
and the run can be re-triggered.

Dependencies: celery, studyloop.core.generation, studyloop.core.orchestration
System role: One content type for one material batch
"""

import logging

from celery import Task

from studyloop.boundary.db.connection import get_async_session_factory
from studyloop.core.models.generation import GenerationRequest, GenerationResult
from studyloop.core.orchestration.feature_tracker import FeatureRunTracker, run_feature
from studyloop.dependencies import build_generation_pipeline
from studyloop.workers import celery_app
from studyloop.workers.runtime import run_async, run_tags

logger = logging.getLogger(__name__)


def _tags_from_kwargs(kwargs: dict) -> list[str]:
    request_data = kwargs.get("request_data") or {}
    return run_tags(
        course=request_data.get("course_id"),
        week=request_data.get("week_id"),
        type=request_data.get("content_type"),
        batch=kwargs.get("batch_id"),
    )


class GenerationTask(Task):
    """Base task adding lifecycle logging with run tags."""

    def before_start(self, task_id, args, kwargs):
        logger.info(
            f"{__name__}:before_start - Generation task starting",
            extra={"task_id": task_id, "tags": _tags_from_kwargs(kwargs)},
        )

    def on_success(self, retval, task_id, args, kwargs):
        logger.info(
            f"{__name__}:on_success - Generation task succeeded",
            extra={
                "task_id": task_id,
                "tags": _tags_from_kwargs(kwargs),
                "generated_count": (retval or {}).get("generated_count"),
            },
        )

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        logger.error(
            f"{__name__}:on_failure - Generation task failed",
            extra={
                "task_id": task_id,
                "tags": _tags_from_kwargs(kwargs),
                "error_type": type(exc).__name__,
                "error_msg": str(exc),
            },
        )


async def _generate(request: GenerationRequest, batch_id: str | None) -> GenerationResult:
    pipeline = build_generation_pipeline()
    tracker = FeatureRunTracker(get_async_session_factory())
    try:
        return await run_feature(pipeline, tracker, request, batch_id)
    finally:
        await pipeline.wait_for_background_tasks()


@celery_app.task(bind=True, base=GenerationTask, name="studyloop.generate_content")
def generate_content(self, request_data: dict, batch_id: str | None = None):
    """
    Generate one content type for a material batch.

    Args:
        request_data: Serialized GenerationRequest
        batch_id: Batch id assigned by the orchestrator

    Returns:
        dict: Serialized GenerationResult
    """
    request = GenerationRequest.model_validate(request_data)
    result = run_async(_generate(request, batch_id or self.request.id))
    return result.model_dump(mode="json")
