"""
Celery workers module.

Background processing for material ingestion, generation fan-out,
per-feature content generation and idempotent event replay.

Dependencies: celery, studyloop.configs
System role: Background task processing
"""

from celery import Celery
from celery.signals import setup_logging

from studyloop.configs import get_settings
from studyloop.observability.logger import configure_logging

settings = get_settings()
celery_config = settings.celery

celery_app = Celery(
    "studyloop",
    broker=celery_config.broker_url,
    backend=celery_config.result_backend_url,
    include=[
        "studyloop.workers.tasks.content_generation",
        "studyloop.workers.tasks.orchestration",
        "studyloop.workers.tasks.material_ingestion",
    ],
)

celery_app.conf.update(
    task_serializer=celery_config.task_serializer,
    result_serializer=celery_config.result_serializer,
    accept_content=celery_config.accept_content,
    timezone=celery_config.timezone,
    task_max_retries=celery_config.task_max_retries,
    beat_schedule={
        "replay-pending-events": {
            "task": "studyloop.replay_pending_events",
            "schedule": float(celery_config.replay_interval_seconds),
        },
    },
)


@setup_logging.connect
def _configure_worker_logging(**kwargs) -> None:
    configure_logging()
