"""
Per-feature run tracking.

Writes the course_week_features state of one content type as its
pipeline moves pending -> processing -> completed | failed. Completion is
written by the strategy together with the generated rows; this module
covers the other transitions.

Dependencies: sqlalchemy, studyloop.boundary.db
System role: Failure isolation between sibling features of a batch
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studyloop.boundary.db.CRUD.feature_status_crud import course_week_feature_crud
from studyloop.boundary.db.CRUD.generation_config_crud import generation_config_crud
from studyloop.boundary.db.models.feature_status_model import FeatureStatus
from studyloop.core.content_types import ContentType
from studyloop.core.models.generation import GenerationRequest, GenerationResult

logger = logging.getLogger(__name__)


def _config_uuid(config_id: str | None) -> uuid.UUID | None:
    if not config_id:
        return None
    try:
        return uuid.UUID(str(config_id))
    except ValueError:
        return None


class FeatureRunTracker:
    """Feature status writer used by orchestrator and generation workers."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def mark_pending(
        self,
        course_id: str,
        week_id: str,
        content_types_to_batches: dict[ContentType, str],
        config_id: uuid.UUID | None,
    ) -> None:
        """Record scheduled features with their batch ids, in one transaction."""
        async with self._session_factory() as session, session.begin():
            for content_type, batch_id in content_types_to_batches.items():
                await course_week_feature_crud.upsert(
                    session,
                    course_id,
                    week_id,
                    content_type,
                    status=FeatureStatus.PENDING,
                    batch_id=batch_id,
                    config_id=config_id,
                    error=None,
                )

    async def mark_processing(self, request: GenerationRequest, batch_id: str | None = None) -> None:
        fields: dict = {"status": FeatureStatus.PROCESSING, "error": None}
        if batch_id:
            fields["batch_id"] = batch_id
        config_uuid = _config_uuid(request.config_id)
        if config_uuid is not None:
            fields["config_id"] = config_uuid

        async with self._session_factory() as session, session.begin():
            await course_week_feature_crud.upsert(
                session,
                request.course_id,
                request.week_id,
                request.content_type,
                **fields,
            )

    async def mark_failed(self, request: GenerationRequest, error: str) -> None:
        """
        Record a feature failure without touching sibling features.

        Also appends the content type to the owning config's failed list.
        """
        config_uuid = _config_uuid(request.config_id)
        async with self._session_factory() as session, session.begin():
            await course_week_feature_crud.upsert(
                session,
                request.course_id,
                request.week_id,
                request.content_type,
                status=FeatureStatus.FAILED,
                error=error,
            )
            if config_uuid is not None:
                await generation_config_crud.add_failed_feature(
                    session,
                    config_uuid,
                    request.content_type.value,
                )

        logger.warning(
            f"{__name__}:mark_failed - Feature generation failed",
            extra={
                "content_type": request.content_type.value,
                "course_id": request.course_id,
                "week_id": request.week_id,
                "error_msg": error,
            },
        )


async def run_feature(
    pipeline,
    tracker: FeatureRunTracker,
    request: GenerationRequest,
    batch_id: str | None = None,
) -> GenerationResult:
    """
    Run one feature's pipeline with status tracking.

    Failures are recorded against this feature only, then re-raised.

    Args:
        pipeline: GenerationPipeline
        tracker: Feature status writer
        request: Generation request
        batch_id: Batch identifier assigned at dispatch

    Returns:
        GenerationResult: Result of a successful run
    """
    await tracker.mark_processing(request, batch_id)
    try:
        return await pipeline.execute(request)
    except Exception as e:
        await tracker.mark_failed(request, getattr(e, "message", None) or str(e))
        raise
