"""
Orchestration Celery tasks.

Tasks:
    orchestrate_generation(payload_data): fan out a config's features once
    replay_pending_events(): resume idempotent events awaiting retry

Dependencies: celery, studyloop.core.orchestration, studyloop.core.idempotency
System role: Entry points for batch fan-out
"""

import logging
from dataclasses import asdict

from studyloop.core.models.orchestration import OrchestrationPayload
from studyloop.core.orchestration.orchestrator import ORCHESTRATION_EVENT
from studyloop.dependencies import build_event_processor, build_job_orchestrator
from studyloop.workers import celery_app
from studyloop.workers.runtime import run_async, run_tags

logger = logging.getLogger(__name__)


async def _orchestrate(payload: OrchestrationPayload) -> dict:
    orchestrator = build_job_orchestrator()
    report = await orchestrator.orchestrate_once(payload, build_event_processor())
    return asdict(report)


async def _replay(limit: int) -> list[dict]:
    orchestrator = build_job_orchestrator()
    reports = await build_event_processor().replay_pending(
        {ORCHESTRATION_EVENT: orchestrator.handle_event},
        limit=limit,
    )
    return [asdict(report) for report in reports]


@celery_app.task(bind=True, name="studyloop.orchestrate_generation")
def orchestrate_generation(self, payload_data: dict):
    """
    Fan out generation for a course week's configuration.

    Args:
        payload_data: Serialized OrchestrationPayload

    Returns:
        dict: Processing report of the idempotent orchestration event
    """
    payload = OrchestrationPayload.model_validate(payload_data)
    logger.info(
        f"{__name__}:orchestrate_generation - Orchestration requested",
        extra={
            "task_id": self.request.id,
            "tags": run_tags(course=payload.course_id, week=payload.week_id, config=payload.config_id),
        },
    )
    return run_async(_orchestrate(payload))


@celery_app.task(bind=True, name="studyloop.replay_pending_events")
def replay_pending_events(self, limit: int = 50):
    """
    Replay idempotent events left pending after a failed attempt.

    Returns:
        list[dict]: One processing report per replayed event
    """
    reports = run_async(_replay(limit))
    logger.info(
        f"{__name__}:replay_pending_events - Replayed pending events",
        extra={"task_id": self.request.id, "replayed": len(reports)},
    )
    return reports
