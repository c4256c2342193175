"""
Generation configuration ORM model.

Per course week selection of which content types to generate, with the
status of the orchestration run that fans them out.

Dependencies: sqlalchemy, studyloop.boundary.db.base
System role: Orchestration run tracking
"""

import enum
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from studyloop.boundary.db.base import Base, TimestampMixin, UUIDMixin


class OrchestrationStatus(str, enum.Enum):
    """
    Orchestration run states.

    PENDING: Config saved, fan-out not started
    PROCESSING: Fan-out in progress
    COMPLETED: Every enabled feature was scheduled
    FAILED: Fan-out failed; see error
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class GenerationConfigModel(Base, UUIDMixin, TimestampMixin):
    """
    Feature selection and run status for one course week.

    Attributes:
        course_id: Owning course
        week_id: Owning week
        is_active: Inactive configs are never orchestrated
        difficulty: Default difficulty for every feature
        focus: Default focus for every feature
        features: Map of feature key to {enabled, count, ...}
        status: Orchestration run state
        error: Failure reason when status is FAILED
        failed_features: Content types whose pipeline later failed
        started_at: When fan-out began
        completed_at: When fan-out finished (either way)
    """

    __tablename__ = "generation_configs"

    course_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    week_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    difficulty: Mapped[str] = mapped_column(String(32), nullable=False, default="intermediate")
    focus: Mapped[str] = mapped_column(String(32), nullable=False, default="conceptual")
    features: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    status: Mapped[OrchestrationStatus] = mapped_column(
        Enum(OrchestrationStatus, native_enum=False),
        nullable=False,
        default=OrchestrationStatus.PENDING,
    )
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    failed_features: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
