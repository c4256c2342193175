"""
Idempotency key ORM model.

State table for at-least-once delivered operations; one row per
deterministic event key.

Dependencies: sqlalchemy, studyloop.boundary.db.base
System role: At-most-once effect tracking for retried events
"""

import enum
from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from studyloop.boundary.db.base import Base, TimestampMixin, UUIDMixin


class IdempotencyStatus(str, enum.Enum):
    """
    Idempotency record states.

    PENDING: Created or awaiting retry
    COMPLETED: Side effect applied; later deliveries are skipped
    FAILED: Retries exhausted or non-retryable; never reprocessed
    """

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class IdempotencyKeyModel(Base, UUIDMixin, TimestampMixin):
    """
    Idempotency record for one external or internal event.

    Attributes:
        key: Deterministic event key (UNIQUE)
        operation_type: Kind of operation (e.g. generation.orchestrate)
        resource_id: Identifier of the affected resource
        status: Record state
        retry_count: Failed attempts so far
        max_retries: Retry ceiling
        payload: Everything needed to replay the operation
        result: Output of the successful attempt
        error_message: Last failure reason
        last_retry_at: Time of the last failed attempt
        expires_at: Record is purged after this instant
    """

    __tablename__ = "idempotency_keys"

    key: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    operation_type: Mapped[str] = mapped_column(String(100), nullable=False)
    resource_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    status: Mapped[IdempotencyStatus] = mapped_column(
        Enum(IdempotencyStatus, native_enum=False),
        nullable=False,
        default=IdempotencyStatus.PENDING,
    )
    retry_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_retries: Mapped[int] = mapped_column(Integer, nullable=False, default=3)

    payload: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    result: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_retry_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
