"""
Idempotency for at-least-once delivered operations.
"""

from studyloop.core.idempotency.processor import (
    EventHandler,
    EventOutcome,
    IdempotentEventProcessor,
    ProcessingReport,
)
from studyloop.core.idempotency.retry_policy import calculate_retry_delay
from studyloop.core.idempotency.service import (
    IdempotencyCheck,
    IdempotencyService,
    build_idempotency_key,
)

__all__ = [
    "EventHandler",
    "EventOutcome",
    "IdempotentEventProcessor",
    "ProcessingReport",
    "calculate_retry_delay",
    "IdempotencyCheck",
    "IdempotencyService",
    "build_idempotency_key",
]
