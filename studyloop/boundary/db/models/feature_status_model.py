"""
Course week feature status ORM model.

Tracks each content type's generation state for a course week
independently of its siblings.

Dependencies: sqlalchemy, studyloop.boundary.db.base
System role: Per-feature completion tracking
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from studyloop.boundary.db.base import Base, TimestampMixin, UUIDMixin
from studyloop.core.content_types import ContentType


class FeatureStatus(str, enum.Enum):
    """
    Per-feature generation states.

    PENDING: Scheduled by the orchestrator, not picked up yet
    PROCESSING: Pipeline running
    COMPLETED: Items persisted
    FAILED: Pipeline failed; see error
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class CourseWeekFeatureModel(Base, UUIDMixin, TimestampMixin):
    """
    Generation state of one content type for one course week.

    Constraints:
        (course_id, week_id, content_type): UNIQUE
    """

    __tablename__ = "course_week_features"
    __table_args__ = (
        UniqueConstraint("course_id", "week_id", "content_type", name="uq_course_week_feature"),
    )

    course_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    week_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    content_type: Mapped[ContentType] = mapped_column(
        Enum(ContentType, native_enum=False),
        nullable=False,
    )
    config_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True, index=True)

    status: Mapped[FeatureStatus] = mapped_column(
        Enum(FeatureStatus, native_enum=False),
        nullable=False,
        default=FeatureStatus.PENDING,
    )
    batch_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    generated_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    generated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
