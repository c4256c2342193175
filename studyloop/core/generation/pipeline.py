"""
Content generation pipeline.

Runs one content type for one batch of materials end to end:
validate request -> resolve strategy -> retrieve chunks -> build context
-> generate -> unwrap and validate items -> optional quality gate ->
persist -> fire-and-forget usage analytics.

Every step except analytics fails fast: errors propagate to the caller so
the orchestrator sees the true outcome per content type. execute_safely()
is the value-returning variant for callers that want a failed result
instead of an exception.

Dependencies: studyloop.core.generation, studyloop.evaluation, studyloop.observability
System role: Core generation orchestration per content type
"""

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

from studyloop.configs import get_settings
from studyloop.configs.generation import GenerationSettings
from studyloop.core.content_types import ANALYTICS_NAMES, ContentType
from studyloop.core.exceptions import (
    EmptyGenerationError,
    StudyLoopException,
    ValidationError,
)
from studyloop.core.generation.chunk_retriever import ChunkRetriever
from studyloop.core.generation.generation_backend import GenerationBackend
from studyloop.core.generation.strategy_registry import StrategyRegistry
from studyloop.core.models.content_items import ContentItem
from studyloop.core.models.generation import GenerationRequest, GenerationResult
from studyloop.observability.usage_tracker import UsageTracker

if TYPE_CHECKING:
    from studyloop.evaluation.quality_validator import QualityValidator

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict, tuple)):
        return len(value) == 0
    return False


def is_empty_item(raw_item: Any) -> bool:
    """True when an item has no populated field at all."""
    if isinstance(raw_item, dict):
        return all(_is_blank(value) for value in raw_item.values())
    return _is_blank(raw_item)


class GenerationPipeline:
    """
    Strategy-driven content generation.

    Usage:
        pipeline = GenerationPipeline(registry, retriever, GenerationBackend())
        result = await pipeline.execute(request)
    """

    def __init__(
        self,
        registry: StrategyRegistry,
        retriever: ChunkRetriever,
        backend: GenerationBackend,
        usage_tracker: UsageTracker | None = None,
        quality_validator: "QualityValidator | None" = None,
        settings: GenerationSettings | None = None,
    ) -> None:
        """
        Initialize pipeline.

        Args:
            registry: Content type -> strategy map
            retriever: Chunk retriever
            backend: Structured-output generation backend
            usage_tracker: Analytics sink (analytics skipped if None)
            quality_validator: Scorer used by the optional quality gate
            settings: Generation settings (uses global settings if None)
        """
        self._registry = registry
        self._retriever = retriever
        self._backend = backend
        self._usage_tracker = usage_tracker
        self._quality_validator = quality_validator
        self._settings = settings or get_settings().generation
        self._background_tasks: set[asyncio.Task] = set()

    async def execute(self, request: GenerationRequest) -> GenerationResult:
        """
        Generate and persist one content type for a batch.

        Args:
            request: Generation request

        Returns:
            GenerationResult: Successful result with the persisted item count

        Raises:
            ValidationError: Incomplete request
            StrategyNotFoundError: Unregistered content type
            NoContentFoundError: No chunks for the requested materials
            GenerationBackendError: Backend failure or retries exhausted
            EmptyGenerationError: No usable items in the model output
            Exception: Persistence failures propagate unchanged
        """
        started = time.perf_counter()
        self._validate_request(request)
        content_type = request.content_type

        logger.info(
            f"{__name__}:execute - Starting generation",
            extra={
                "content_type": content_type.value,
                "course_id": request.course_id,
                "week_id": request.week_id,
                "materials": len(request.material_ids),
                "cache_key": request.cache_key,
            },
        )

        strategy = self._registry.get(content_type)

        retrieval = await self._retriever.retrieve(
            request.material_ids,
            cache_key=request.cache_key,
            content_type=content_type.value,
        )

        context = strategy.build_context(retrieval.content, request.config)
        raw_output = await self._backend.generate(
            strategy.get_prompt(),
            context,
            strategy.get_schema(),
            content_type=content_type.value,
        )

        raw_items = strategy.extract_array_from_object(raw_output)
        if not raw_items:
            raise EmptyGenerationError(
                "Generation returned no items",
                content_type=content_type.value,
                details={"response_type": type(raw_output).__name__},
            )
        if is_empty_item(raw_items[0]):
            raise EmptyGenerationError(
                "Generation returned an empty first item",
                content_type=content_type.value,
                details={"response_type": type(raw_output).__name__},
            )

        items, dropped_count = strategy.validate_items(raw_items)
        if not items:
            raise EmptyGenerationError(
                "All generated items failed validation",
                content_type=content_type.value,
                details={"dropped_count": dropped_count},
            )

        items, rejected_count = await self._apply_quality_gate(items, content_type)
        if not items:
            raise EmptyGenerationError(
                "All generated items were rejected by the quality gate",
                content_type=content_type.value,
                details={"rejected_count": rejected_count},
            )

        await strategy.persist(items, request.course_id, request.week_id)

        processing_time_ms = round((time.perf_counter() - started) * 1000, 2)
        self._track_usage(request, len(items), processing_time_ms)

        logger.info(
            f"{__name__}:execute - Generation complete",
            extra={
                "content_type": content_type.value,
                "generated_count": len(items),
                "dropped_count": dropped_count,
                "rejected_count": rejected_count,
                "processing_time_ms": processing_time_ms,
            },
        )

        return GenerationResult(
            success=True,
            content_type=content_type,
            generated_count=len(items),
            metadata={
                "data_valid": dropped_count == 0,
                "response_type": type(raw_output).__name__,
                "cache_hit": retrieval.cache_hit,
                "chunk_count": retrieval.chunk_count,
                "source": retrieval.source,
                "dropped_count": dropped_count,
                "rejected_count": rejected_count,
                "processing_time_ms": processing_time_ms,
            },
        )

    async def execute_safely(self, request: GenerationRequest) -> GenerationResult:
        """
        Run execute(), converting domain errors into a failed result.

        Unexpected exceptions still propagate.

        Returns:
            GenerationResult: success=False with the error message on failure
        """
        try:
            return await self.execute(request)
        except StudyLoopException as e:
            logger.error(
                f"{__name__}:execute_safely - Generation failed",
                extra={
                    "content_type": request.content_type.value,
                    "error_type": type(e).__name__,
                    "error_msg": e.message,
                },
            )
            return GenerationResult.failure(
                request.content_type,
                e.message,
                error_type=type(e).__name__,
            )

    async def wait_for_background_tasks(self) -> None:
        """Wait for in-flight analytics tasks (used before an event loop shuts down)."""
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)

    def _validate_request(self, request: GenerationRequest) -> None:
        if not request.material_ids:
            raise ValidationError("At least one material id is required", field="material_ids")
        if not request.course_id.strip():
            raise ValidationError("course_id is required", field="course_id")
        if not request.week_id.strip():
            raise ValidationError("week_id is required", field="week_id")
        if request.config.content_type != request.content_type.value:
            raise ValidationError(
                "Config does not match the requested content type",
                field="config",
                details={
                    "content_type": request.content_type.value,
                    "config_type": request.config.content_type,
                },
            )

    async def _apply_quality_gate(
        self,
        items: list[ContentItem],
        content_type: ContentType,
    ) -> tuple[list[ContentItem], int]:
        """Drop items the quality validator rejects; no-op when the gate is off."""
        if self._quality_validator is None or not self._settings.quality_gate_enabled:
            return items, 0

        payloads = [item.model_dump(by_alias=True) for item in items]
        assessments = await self._quality_validator.assess_batch(payloads, content_type)

        kept: list[ContentItem] = []
        for item, metrics in zip(items, assessments):
            decision = self._quality_validator.is_quality_acceptable(metrics)
            if decision.acceptable:
                kept.append(item)
            else:
                logger.info(
                    f"{__name__}:_apply_quality_gate - Item rejected",
                    extra={
                        "content_type": content_type.value,
                        "overall_quality": metrics.overall_quality,
                        "reason": decision.reason,
                    },
                )
        return kept, len(items) - len(kept)

    def _track_usage(self, request: GenerationRequest, generated_count: int, processing_time_ms: float) -> None:
        """Schedule the analytics event without awaiting it."""
        if self._usage_tracker is None:
            return

        properties = {
            "course_id": request.course_id,
            "week_id": request.week_id,
            "user_id": request.user_id,
            "items_generated": generated_count,
            "material_count": len(request.material_ids),
            "difficulty": request.config.difficulty,
            "model": self._backend.model_name,
            "processing_time_ms": processing_time_ms,
        }
        task = asyncio.create_task(
            self._send_usage_event(ANALYTICS_NAMES[request.content_type], properties)
        )
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _send_usage_event(self, analytics_name: str, properties: dict[str, Any]) -> None:
        try:
            await self._usage_tracker.track_content_generated(analytics_name, properties)
        except Exception as e:
            # Analytics never fails a run
            logger.warning(
                f"{__name__}:_send_usage_event - Usage tracking failed",
                extra={"content_type": analytics_name, "error_type": type(e).__name__, "error_msg": str(e)},
            )
