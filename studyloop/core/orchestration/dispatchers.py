"""
Generation dispatchers.

Schedule one generation run per request without waiting for it. The
Celery dispatcher enqueues a worker task; the in-process dispatcher runs
the pipeline as an asyncio task for local runs and tests.

Dependencies: celery, asyncio, studyloop.core.orchestration
System role: Fan-out primitive for the job orchestrator
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

from studyloop.core.models.generation import GenerationRequest, GenerationResult
from studyloop.core.orchestration.feature_tracker import FeatureRunTracker, run_feature

logger = logging.getLogger(__name__)


class GenerationDispatcher(ABC):
    """Schedules a generation run and returns immediately."""

    @abstractmethod
    async def dispatch(self, request: GenerationRequest, batch_id: str) -> str:
        """
        Schedule one run.

        Args:
            request: Generation request
            batch_id: Identifier for the scheduled run

        Returns:
            str: Batch id the run is tracked under
        """


class CeleryGenerationDispatcher(GenerationDispatcher):
    """Enqueues generate_content tasks; the batch id is the Celery task id."""

    def __init__(self, task: Any = None) -> None:
        """
        Args:
            task: Celery task to enqueue (generate_content if None)
        """
        if task is None:
            from studyloop.workers.tasks.content_generation import generate_content

            task = generate_content
        self._task = task

    async def dispatch(self, request: GenerationRequest, batch_id: str) -> str:
        async_result = await asyncio.to_thread(
            self._task.apply_async,
            kwargs={"request_data": request.model_dump(mode="json"), "batch_id": batch_id},
            task_id=batch_id,
        )
        logger.info(
            f"{__name__}:dispatch - Enqueued generation task",
            extra={"content_type": request.content_type.value, "batch_id": async_result.id},
        )
        return async_result.id


class InProcessGenerationDispatcher(GenerationDispatcher):
    """
    Runs pipelines as asyncio tasks in the current event loop.

    Usage:
        dispatcher = InProcessGenerationDispatcher(pipeline, tracker)
        await orchestrator.orchestrate(payload)
        await dispatcher.wait_all()
    """

    def __init__(self, pipeline, tracker: FeatureRunTracker) -> None:
        self._pipeline = pipeline
        self._tracker = tracker
        self._tasks: dict[str, asyncio.Task] = {}

    async def dispatch(self, request: GenerationRequest, batch_id: str) -> str:
        task = asyncio.create_task(
            run_feature(self._pipeline, self._tracker, request, batch_id),
            name=f"generate:{request.content_type.value}:{batch_id}",
        )
        self._tasks[batch_id] = task
        task.add_done_callback(self._log_outcome)
        return batch_id

    async def wait_all(self) -> dict[str, GenerationResult | BaseException]:
        """Wait for every dispatched run; failures are returned, not raised."""
        if not self._tasks:
            return {}
        batch_ids = list(self._tasks.keys())
        outcomes = await asyncio.gather(*self._tasks.values(), return_exceptions=True)
        self._tasks.clear()
        return dict(zip(batch_ids, outcomes))

    @staticmethod
    def _log_outcome(task: asyncio.Task) -> None:
        if task.cancelled():
            logger.warning(f"{__name__}:_log_outcome - Generation task cancelled: {task.get_name()}")
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"{__name__}:_log_outcome - Generation task failed: {task.get_name()}",
                extra={"error_type": type(error).__name__, "error_msg": str(error)},
            )
