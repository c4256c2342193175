"""
Course week feature CRUD operations.

Dependencies: sqlalchemy, studyloop.boundary.db.models.feature_status_model
System role: Per-feature generation state persistence
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from studyloop.boundary.db.base import utc_now
from studyloop.boundary.db.CRUD.base_crud import BaseCRUD
from studyloop.boundary.db.models.feature_status_model import CourseWeekFeatureModel
from studyloop.core.content_types import ContentType


class CourseWeekFeatureCRUD(BaseCRUD[CourseWeekFeatureModel]):
    """
    CRUD operations for CourseWeekFeatureModel.

    Rows are unique per (course_id, week_id, content_type); writes go
    through an ON CONFLICT upsert on that key, so a status write never
    depends on the row having been created first.
    """

    def __init__(self) -> None:
        super().__init__(CourseWeekFeatureModel)

    async def get_feature(
        self,
        session: AsyncSession,
        course_id: str,
        week_id: str,
        content_type: ContentType,
    ) -> CourseWeekFeatureModel | None:
        stmt = select(CourseWeekFeatureModel).where(
            CourseWeekFeatureModel.course_id == course_id,
            CourseWeekFeatureModel.week_id == week_id,
            CourseWeekFeatureModel.content_type == content_type,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(
        self,
        session: AsyncSession,
        course_id: str,
        week_id: str,
        content_type: ContentType,
        **fields,
    ) -> CourseWeekFeatureModel:
        """
        Create or update the feature row for a course week.

        Single INSERT ... ON CONFLICT DO UPDATE on the
        (course_id, week_id, content_type) key; only the given columns are
        overwritten on conflict.

        Args:
            session: Async database session
            course_id: Owning course
            week_id: Owning week
            content_type: Feature content type
            **fields: Columns to set

        Returns:
            The created or updated row
        """
        dialect = session.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = postgresql_insert(CourseWeekFeatureModel)
        elif dialect == "sqlite":
            stmt = sqlite_insert(CourseWeekFeatureModel)
        else:
            raise NotImplementedError(f"upsert not supported on {dialect}")

        stmt = (
            stmt.values(course_id=course_id, week_id=week_id, content_type=content_type, **fields)
            .on_conflict_do_update(
                index_elements=[
                    CourseWeekFeatureModel.course_id,
                    CourseWeekFeatureModel.week_id,
                    CourseWeekFeatureModel.content_type,
                ],
                set_={**fields, "updated_at": utc_now()},
            )
            .returning(CourseWeekFeatureModel.id)
        )
        row_id = (await session.execute(stmt)).scalar_one()

        reload = (
            select(CourseWeekFeatureModel)
            .where(CourseWeekFeatureModel.id == row_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(reload)
        return result.scalar_one()

    async def list_by_config(
        self,
        session: AsyncSession,
        config_id: UUID,
    ) -> Sequence[CourseWeekFeatureModel]:
        """All feature rows scheduled by one orchestration run."""
        stmt = select(CourseWeekFeatureModel).where(CourseWeekFeatureModel.config_id == config_id)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_by_week(
        self,
        session: AsyncSession,
        course_id: str,
        week_id: str,
    ) -> Sequence[CourseWeekFeatureModel]:
        stmt = select(CourseWeekFeatureModel).where(
            CourseWeekFeatureModel.course_id == course_id,
            CourseWeekFeatureModel.week_id == week_id,
        )
        result = await session.execute(stmt)
        return result.scalars().all()


course_week_feature_crud = CourseWeekFeatureCRUD()
