"""
Generated content ORM models.

One table per content type, each keyed by course and week.

Dependencies: sqlalchemy, studyloop.boundary.db.base
System role: Durable storage for generated study artifacts
"""

from sqlalchemy import JSON, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from studyloop.boundary.db.base import Base, TimestampMixin, UUIDMixin


class CourseWeekContentMixin:
    """Ownership columns shared by every generated content table."""

    course_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    week_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)


class GoldenNoteModel(Base, UUIDMixin, TimestampMixin, CourseWeekContentMixin):
    __tablename__ = "golden_notes"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    category: Mapped[str | None] = mapped_column(String(255), nullable=True)


class CuecardModel(Base, UUIDMixin, TimestampMixin, CourseWeekContentMixin):
    __tablename__ = "cuecards"

    question: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    difficulty: Mapped[str] = mapped_column(String(32), nullable=False)


class MultipleChoiceQuestionModel(Base, UUIDMixin, TimestampMixin, CourseWeekContentMixin):
    __tablename__ = "multiple_choice_questions"

    question: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    correct_answer: Mapped[int] = mapped_column(Integer, nullable=False)
    explanation: Mapped[str] = mapped_column(Text, nullable=False)
    difficulty: Mapped[str] = mapped_column(String(32), nullable=False)


class OpenQuestionModel(Base, UUIDMixin, TimestampMixin, CourseWeekContentMixin):
    __tablename__ = "open_questions"

    question: Mapped[str] = mapped_column(Text, nullable=False)
    sample_answer: Mapped[str] = mapped_column(Text, nullable=False)
    grading_rubric: Mapped[dict] = mapped_column(JSON, nullable=False)
    difficulty: Mapped[str] = mapped_column(String(32), nullable=False)


class SummaryModel(Base, UUIDMixin, TimestampMixin, CourseWeekContentMixin):
    __tablename__ = "summaries"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    word_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    summary_type: Mapped[str] = mapped_column(String(64), nullable=False, default="general")


class ConceptMapModel(Base, UUIDMixin, TimestampMixin, CourseWeekContentMixin):
    __tablename__ = "concept_maps"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[dict] = mapped_column(JSON, nullable=False)
    style: Mapped[str] = mapped_column(String(32), nullable=False, default="hierarchical")
