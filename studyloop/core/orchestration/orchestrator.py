"""
Job orchestrator.

Fans out one generation run per enabled content type of a course week's
configuration. Fan-out is fire-and-forget: the run is completed once
every feature is scheduled, and each feature then reports its own
terminal state. A feature failing later never touches its siblings.

Run states: pending -> processing -> completed | failed

Flow: load config -> processing -> build requests -> prefetch chunks
-> record pending features -> dispatch concurrently -> completed

Dependencies: sqlalchemy, studyloop.core.generation, studyloop.core.idempotency
System role: Batch fan-out and run status aggregation
"""

import asyncio
import logging
import uuid
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studyloop.boundary.db.base import utc_now
from studyloop.boundary.db.CRUD.feature_status_crud import course_week_feature_crud
from studyloop.boundary.db.CRUD.generation_config_crud import generation_config_crud
from studyloop.boundary.db.models.feature_status_model import FeatureStatus
from studyloop.boundary.db.models.generation_config_model import (
    GenerationConfigModel,
    OrchestrationStatus,
)
from studyloop.configs import get_settings
from studyloop.configs.generation import GenerationSettings
from studyloop.core.content_types import FEATURE_KEYS, ContentType
from studyloop.core.exceptions import (
    ConfigurationNotFoundError,
    OrchestrationError,
    StudyLoopException,
    ValidationError,
    is_transient_error,
)
from studyloop.core.generation.chunk_retriever import ChunkRetriever
from studyloop.core.idempotency.processor import (
    EventOutcome,
    IdempotentEventProcessor,
    ProcessingReport,
)
from studyloop.core.models.generation import CONFIG_TYPES, GenerationRequest
from studyloop.core.models.orchestration import (
    FeatureDispatch,
    OrchestrationPayload,
    OrchestrationResult,
    RunStatusSummary,
)
from studyloop.core.orchestration.dispatchers import GenerationDispatcher
from studyloop.core.orchestration.feature_tracker import FeatureRunTracker

logger = logging.getLogger(__name__)

ORCHESTRATION_EVENT = "generation.orchestrate"


def build_requests(config: GenerationConfigModel, payload: OrchestrationPayload) -> list[GenerationRequest]:
    """
    One request per enabled feature; disabled or absent features are omitted.

    Per-feature settings override the config's difficulty and focus.

    Raises:
        ValidationError: When a feature's settings are invalid
    """
    requests: list[GenerationRequest] = []
    features = config.features or {}

    for content_type in ContentType:
        feature = features.get(FEATURE_KEYS[content_type])
        if not isinstance(feature, dict) or not feature.get("enabled"):
            continue

        options = {name: value for name, value in feature.items() if name != "enabled"}
        try:
            type_config = CONFIG_TYPES[content_type].model_validate({
                "difficulty": config.difficulty,
                "focus": config.focus,
                **options,
                "content_type": content_type.value,
            })
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid settings for feature {FEATURE_KEYS[content_type]}",
                field=FEATURE_KEYS[content_type],
                details={"errors": e.error_count()},
            ) from e

        requests.append(
            GenerationRequest(
                content_type=content_type,
                course_id=payload.course_id,
                week_id=payload.week_id,
                material_ids=payload.material_ids,
                config=type_config,
                config_id=payload.config_id,
                user_id=payload.user_id,
            )
        )
    return requests


def aggregate_feature_statuses(statuses: list[FeatureStatus]) -> str:
    """Collapse feature states into one run state."""
    if not statuses:
        return "completed"
    if any(status in (FeatureStatus.PENDING, FeatureStatus.PROCESSING) for status in statuses):
        return "processing"
    if all(status == FeatureStatus.COMPLETED for status in statuses):
        return "completed"
    if all(status == FeatureStatus.FAILED for status in statuses):
        return "failed"
    return "partial_failure"


class JobOrchestrator:
    """
    Fan-out of generation runs for a material batch.

    Usage:
        orchestrator = JobOrchestrator(session_factory, dispatcher, retriever)
        result = await orchestrator.orchestrate(payload)
        summary = await orchestrator.get_run_status(result.config_id)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        dispatcher: GenerationDispatcher,
        retriever: ChunkRetriever | None = None,
        settings: GenerationSettings | None = None,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            session_factory: Async session factory
            dispatcher: Schedules each generation run
            retriever: Used to pre-fetch the batch's chunks (skipped if None)
            settings: Generation settings (uses global settings if None)
        """
        self._session_factory = session_factory
        self._dispatcher = dispatcher
        self._retriever = retriever
        self._settings = settings or get_settings().generation
        self._tracker = FeatureRunTracker(session_factory)

    async def orchestrate(self, payload: OrchestrationPayload) -> OrchestrationResult:
        """
        Schedule generation for every enabled feature of a config.

        Args:
            payload: Course, week, materials and config id

        Returns:
            OrchestrationResult: Completed run with one entry per scheduled feature

        Raises:
            ValidationError: Malformed config id or feature settings
            ConfigurationNotFoundError: Config missing or inactive
            OrchestrationError: Nothing enabled or scheduling failed
        """
        try:
            config_uuid = uuid.UUID(payload.config_id)
        except ValueError as e:
            raise ValidationError("config_id must be a UUID", field="config_id") from e

        async with self._session_factory() as session, session.begin():
            config = await generation_config_crud.get_active(session, config_uuid)
            if config is None:
                await generation_config_crud.update_status(
                    session,
                    config_uuid,
                    OrchestrationStatus.FAILED,
                    error="Configuration not found or inactive",
                    completed_at=utc_now(),
                )
            else:
                await generation_config_crud.update_status(
                    session,
                    config_uuid,
                    OrchestrationStatus.PROCESSING,
                    started_at=utc_now(),
                )

        if config is None:
            raise ConfigurationNotFoundError(payload.config_id)

        logger.info(
            f"{__name__}:orchestrate - Orchestration started",
            extra={"config_id": payload.config_id, "course_id": payload.course_id, "week_id": payload.week_id},
        )

        try:
            result = await self._fan_out(config, config_uuid, payload)
        except Exception as e:
            await self._mark_run_failed(config_uuid, getattr(e, "message", None) or str(e))
            raise

        async with self._session_factory() as session, session.begin():
            await generation_config_crud.update_status(
                session,
                config_uuid,
                OrchestrationStatus.COMPLETED,
                completed_at=utc_now(),
            )

        logger.info(
            f"{__name__}:orchestrate - Orchestration completed",
            extra={"config_id": payload.config_id, "features": len(result.results)},
        )
        return result

    async def get_run_status(self, config_id: str) -> RunStatusSummary:
        """
        Aggregate the state of a run's features.

        Raises:
            ConfigurationNotFoundError: Unknown config
        """
        try:
            config_uuid = uuid.UUID(config_id)
        except ValueError as e:
            raise ValidationError("config_id must be a UUID", field="config_id") from e

        async with self._session_factory() as session:
            config = await generation_config_crud.get_by_id(session, config_uuid)
            if config is None:
                raise ConfigurationNotFoundError(config_id)
            rows = await course_week_feature_crud.list_by_config(session, config_uuid)

        features = {row.content_type.value: row.status.value for row in rows}
        if config.status == OrchestrationStatus.FAILED:
            status = "failed"
        elif config.status in (OrchestrationStatus.PENDING, OrchestrationStatus.PROCESSING):
            status = "processing"
        else:
            status = aggregate_feature_statuses([row.status for row in rows])

        return RunStatusSummary(
            config_id=config_id,
            status=status,
            features=features,
            failed_features=list(config.failed_features or []),
        )

    async def handle_event(self, data: dict[str, Any]) -> EventOutcome:
        """Idempotent-event handler wrapping orchestrate()."""
        try:
            result = await self.orchestrate(OrchestrationPayload.model_validate(data))
        except PydanticValidationError as e:
            return EventOutcome(success=False, should_retry=False, error=f"Invalid payload: {e.error_count()} errors")
        except StudyLoopException as e:
            return EventOutcome(success=False, should_retry=is_transient_error(e), error=e.message)
        return EventOutcome(success=True, result=result.model_dump(mode="json"))

    async def orchestrate_once(
        self,
        payload: OrchestrationPayload,
        processor: IdempotentEventProcessor,
    ) -> ProcessingReport:
        """Run orchestrate() at most once per config id."""
        return await processor.process(
            ORCHESTRATION_EVENT,
            payload.config_id,
            payload.model_dump(mode="json"),
            self.handle_event,
            operation_type="generation",
        )

    async def _fan_out(
        self,
        config: GenerationConfigModel,
        config_uuid: uuid.UUID,
        payload: OrchestrationPayload,
    ) -> OrchestrationResult:
        requests = build_requests(config, payload)
        if not requests:
            raise OrchestrationError(
                "No features enabled for generation",
                {"config_id": payload.config_id},
            )

        cache_key = None
        if self._retriever is not None and self._settings.prefetch_chunks:
            cache_key = await self._retriever.prefetch(payload.course_id, payload.week_id, payload.material_ids)
        for request in requests:
            request.cache_key = cache_key

        batch_ids = {request.content_type: str(uuid.uuid4()) for request in requests}
        await self._tracker.mark_pending(payload.course_id, payload.week_id, batch_ids, config_uuid)

        outcomes = await asyncio.gather(
            *(self._dispatcher.dispatch(request, batch_ids[request.content_type]) for request in requests),
            return_exceptions=True,
        )

        results: list[FeatureDispatch] = []
        failures: list[ContentType] = []
        for request, outcome in zip(requests, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                error = getattr(outcome, "message", None) or str(outcome)
                await self._tracker.mark_failed(request, f"Dispatch failed: {error}")
                failures.append(request.content_type)
                results.append(FeatureDispatch(content_type=request.content_type, success=False, error=error))
            else:
                results.append(FeatureDispatch(content_type=request.content_type, success=True, batch_id=outcome))

        if failures:
            raise OrchestrationError(
                f"Failed to schedule {len(failures)} of {len(requests)} features",
                {"failed_features": [content_type.value for content_type in failures]},
            )

        return OrchestrationResult(
            config_id=payload.config_id,
            status=OrchestrationStatus.COMPLETED.value,
            cache_key=cache_key,
            results=results,
        )

    async def _mark_run_failed(self, config_uuid: uuid.UUID, error: str) -> None:
        async with self._session_factory() as session, session.begin():
            await generation_config_crud.update_status(
                session,
                config_uuid,
                OrchestrationStatus.FAILED,
                error=error,
                completed_at=utc_now(),
            )
        logger.error(
            f"{__name__}:_mark_run_failed - Orchestration failed",
            extra={"config_id": str(config_uuid), "error_msg": error},
        )
