"""
Idempotency record service.

Creates, completes and fails idempotency records with at-most-once
semantics under concurrent delivery: creation is insert-if-absent and
every status change is a compare-and-swap on the current status.

Dependencies: sqlalchemy, studyloop.boundary.db
System role: Idempotency state management for retried events
"""

import hashlib
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studyloop.boundary.db.base import utc_now
from studyloop.boundary.db.CRUD.idempotency_crud import idempotency_crud
from studyloop.boundary.db.models.idempotency_model import (
    IdempotencyKeyModel,
    IdempotencyStatus,
)
from studyloop.configs import get_settings
from studyloop.configs.idempotency import IdempotencySettings
from studyloop.core.exceptions import IdempotencyError

logger = logging.getLogger(__name__)


def build_idempotency_key(event_type: str, event_id: str) -> str:
    """Deterministic key: {event_type}:{sha256(event_type:event_id)}."""
    digest = hashlib.sha256(f"{event_type}:{event_id}".encode("utf-8")).hexdigest()
    return f"{event_type}:{digest}"


@dataclass
class IdempotencyCheck:
    """Outcome of ensure(): whether this delivery created the record."""

    is_first_run: bool
    record: IdempotencyKeyModel
    existing_result: dict | None = None


class IdempotencyService:
    """
    Idempotency record lifecycle.

    Usage:
        service = IdempotencyService(get_async_session_factory())
        check = await service.ensure(key, "webhook", resource_id=event_id, payload=data)
        if check.is_first_run:
            ...
            await service.complete(key, {"ok": True})
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: IdempotencySettings | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or get_settings().idempotency

    @property
    def settings(self) -> IdempotencySettings:
        return self._settings

    async def ensure(
        self,
        key: str,
        operation_type: str,
        resource_id: str | None = None,
        payload: dict[str, Any] | None = None,
        ttl_hours: int | None = None,
        max_retries: int | None = None,
    ) -> IdempotencyCheck:
        """
        Create the record for a key, or load the one that already exists.

        Expired records are purged first, so an expired key starts over.

        Args:
            key: Idempotency key
            operation_type: Kind of operation
            resource_id: Affected resource
            payload: Data needed to replay the operation
            ttl_hours: Record lifetime (configured default if None)
            max_retries: Retry ceiling (configured default if None)

        Returns:
            IdempotencyCheck: is_first_run is True only for the creating call

        Raises:
            IdempotencyError: When the record can neither be created nor loaded
        """
        now = utc_now()
        ttl = ttl_hours if ttl_hours is not None else self._settings.default_ttl_hours

        async with self._session_factory() as session, session.begin():
            purged = await idempotency_crud.delete_expired(session, now)
            if purged:
                logger.info(f"{__name__}:ensure - Purged {purged} expired idempotency records")

            record = await idempotency_crud.insert_if_absent(
                session,
                key=key,
                operation_type=operation_type,
                resource_id=resource_id,
                status=IdempotencyStatus.PENDING,
                retry_count=0,
                max_retries=max_retries if max_retries is not None else self._settings.default_max_retries,
                payload=payload or {},
                expires_at=now + timedelta(hours=ttl),
            )
            if record is not None:
                logger.info(
                    f"{__name__}:ensure - Created idempotency record",
                    extra={"key": key, "operation_type": operation_type},
                )
                return IdempotencyCheck(is_first_run=True, record=record)

            existing = await idempotency_crud.get_by_key(session, key)

        if existing is None:
            raise IdempotencyError("Idempotency record could not be created or loaded", key=key)

        logger.info(
            f"{__name__}:ensure - Idempotency record already exists",
            extra={"key": key, "status": existing.status.value, "retry_count": existing.retry_count},
        )
        return IdempotencyCheck(is_first_run=False, record=existing, existing_result=existing.result)

    async def complete(self, key: str, result: dict[str, Any] | None = None) -> bool:
        """
        Mark a pending record completed.

        Returns:
            True if this call performed the transition
        """
        async with self._session_factory() as session, session.begin():
            changed = await idempotency_crud.compare_and_set_status(
                session,
                key,
                expected=IdempotencyStatus.PENDING,
                new_status=IdempotencyStatus.COMPLETED,
                result=result,
                error_message=None,
            )

        if changed:
            logger.info(f"{__name__}:complete - Idempotent operation completed", extra={"key": key})
        else:
            logger.warning(
                f"{__name__}:complete - Record missing or no longer pending",
                extra={"key": key},
            )
        return changed

    async def fail(self, key: str, error: str, should_retry: bool = False) -> bool:
        """
        Record a failed attempt.

        The record stays pending while should_retry holds and the retry
        count is within the ceiling; otherwise it becomes failed.

        Returns:
            True if the failure was recorded
        """
        async with self._session_factory() as session, session.begin():
            record = await idempotency_crud.increment_retry(session, key, error)
            if record is None:
                logger.warning(
                    f"{__name__}:fail - Record missing or no longer pending",
                    extra={"key": key},
                )
                return False

            can_retry = should_retry and record.retry_count <= record.max_retries
            if not can_retry:
                await idempotency_crud.compare_and_set_status(
                    session,
                    key,
                    expected=IdempotencyStatus.PENDING,
                    new_status=IdempotencyStatus.FAILED,
                )

        logger.info(
            f"{__name__}:fail - Idempotent operation failed",
            extra={
                "key": key,
                "retry_count": record.retry_count,
                "can_retry": can_retry,
                "error_msg": error,
            },
        )
        return True

    async def get(self, key: str) -> IdempotencyKeyModel | None:
        async with self._session_factory() as session:
            return await idempotency_crud.get_by_key(session, key)

    async def get_pending_retries(self, limit: int = 50) -> Sequence[IdempotencyKeyModel]:
        """Pending records that failed at least once and can still be retried."""
        async with self._session_factory() as session:
            return await idempotency_crud.list_pending_retries(session, limit=limit)
