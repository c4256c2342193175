"""
Idempotent event processor.

Runs a handler for an at-least-once delivered event at most once to
completion. Completed or permanently failed events are skipped; retryable
failures back off and try again until the record's retry ceiling.

Flow: ensure record -> skip if terminal -> handler -> complete | retry | fail

Dependencies: studyloop.core.idempotency
System role: Retry and replay driver for externally triggered work
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from studyloop.boundary.db.models.idempotency_model import IdempotencyStatus
from studyloop.core.exceptions import is_transient_error
from studyloop.core.idempotency.retry_policy import calculate_retry_delay
from studyloop.core.idempotency.service import IdempotencyService, build_idempotency_key

logger = logging.getLogger(__name__)


@dataclass
class EventOutcome:
    """What a handler reports back for one attempt."""

    success: bool
    should_retry: bool = False
    error: str | None = None
    result: dict[str, Any] | None = None


@dataclass
class ProcessingReport:
    """Final state of one process() call."""

    key: str
    success: bool
    skipped: bool = False
    attempts: int = 0
    result: dict[str, Any] | None = None
    error: str | None = None


EventHandler = Callable[[dict[str, Any]], Awaitable[EventOutcome]]


class IdempotentEventProcessor:
    """
    At-most-once event execution with backoff retries.

    Usage:
        processor = IdempotentEventProcessor(IdempotencyService(session_factory))
        report = await processor.process("webhook.order", event_id, payload, handler)
    """

    def __init__(
        self,
        service: IdempotencyService,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Initialize processor.

        Args:
            service: Idempotency record service
            sleep: Coroutine used to wait between attempts (seconds)
        """
        self._service = service
        self._sleep = sleep

    async def process(
        self,
        event_type: str,
        event_id: str,
        payload: dict[str, Any],
        handler: EventHandler,
        operation_type: str | None = None,
        max_retries: int | None = None,
        ttl_hours: int | None = None,
    ) -> ProcessingReport:
        """
        Process one event delivery.

        Args:
            event_type: Event type (part of the key)
            event_id: Event identifier (part of the key)
            payload: Handler input, stored for replay
            handler: Coroutine returning an EventOutcome
            operation_type: Stored operation kind (defaults to event_type)
            max_retries: Retry ceiling for a new record
            ttl_hours: Lifetime of a new record

        Returns:
            ProcessingReport: Final outcome of this delivery
        """
        key = build_idempotency_key(event_type, event_id)
        check = await self._service.ensure(
            key,
            operation_type=operation_type or event_type,
            resource_id=event_id,
            payload={"event_type": event_type, "event_id": event_id, "data": payload},
            ttl_hours=ttl_hours,
            max_retries=max_retries,
        )
        record = check.record

        if not check.is_first_run and record.status == IdempotencyStatus.COMPLETED:
            logger.info(f"{__name__}:process - Event already completed", extra={"key": key})
            return ProcessingReport(key=key, success=True, skipped=True, result=check.existing_result)

        if not check.is_first_run and record.status == IdempotencyStatus.FAILED:
            logger.info(f"{__name__}:process - Event already failed permanently", extra={"key": key})
            return ProcessingReport(key=key, success=False, skipped=True, error=record.error_message)

        attempt = record.retry_count
        ceiling = record.max_retries
        attempts = 0

        while True:
            attempts += 1
            outcome = await self._run_handler(handler, payload, key)

            if outcome.success:
                await self._service.complete(key, outcome.result)
                return ProcessingReport(key=key, success=True, attempts=attempts, result=outcome.result)

            error = outcome.error or "Processing failed"
            if not outcome.should_retry or attempt >= ceiling:
                await self._service.fail(key, error, should_retry=False)
                logger.error(
                    f"{__name__}:process - Event failed permanently",
                    extra={"key": key, "attempts": attempts, "error_msg": error},
                )
                return ProcessingReport(key=key, success=False, attempts=attempts, error=error)

            attempt += 1
            await self._service.fail(key, error, should_retry=True)

            delay_ms = calculate_retry_delay(attempt - 1, self._service.settings)
            logger.info(
                f"{__name__}:process - Waiting before retry",
                extra={"key": key, "attempt": attempt, "delay_ms": round(delay_ms)},
            )
            await self._sleep(delay_ms / 1000)

    async def replay_pending(
        self,
        handlers: dict[str, EventHandler],
        limit: int = 50,
    ) -> list[ProcessingReport]:
        """
        Resume events left pending after a failed attempt.

        Args:
            handlers: Handler per event type
            limit: Maximum records to replay

        Returns:
            list[ProcessingReport]: One report per replayed event
        """
        reports: list[ProcessingReport] = []
        for record in await self._service.get_pending_retries(limit=limit):
            stored = record.payload or {}
            event_type = stored.get("event_type")
            handler = handlers.get(event_type) if event_type else None
            if handler is None:
                logger.warning(
                    f"{__name__}:replay_pending - No handler for pending event",
                    extra={"key": record.key, "event_type": event_type},
                )
                continue

            reports.append(
                await self.process(event_type, stored.get("event_id", ""), stored.get("data", {}), handler)
            )
        return reports

    async def _run_handler(self, handler: EventHandler, payload: dict[str, Any], key: str) -> EventOutcome:
        try:
            return await handler(payload)
        except Exception as e:
            logger.warning(
                f"{__name__}:_run_handler - Handler raised",
                extra={"key": key, "error_type": type(e).__name__, "error_msg": str(e)},
            )
            return EventOutcome(success=False, should_retry=is_transient_error(e), error=str(e))
