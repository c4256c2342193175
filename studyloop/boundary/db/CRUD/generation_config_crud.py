"""
Generation config CRUD operations.

Dependencies: sqlalchemy, studyloop.boundary.db.models.generation_config_model
System role: Orchestration run persistence
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from studyloop.boundary.db.CRUD.base_crud import BaseCRUD
from studyloop.boundary.db.models.generation_config_model import (
    GenerationConfigModel,
    OrchestrationStatus,
)


class GenerationConfigCRUD(BaseCRUD[GenerationConfigModel]):
    """CRUD operations for GenerationConfigModel."""

    def __init__(self) -> None:
        super().__init__(GenerationConfigModel)

    async def get_active(self, session: AsyncSession, config_id: UUID) -> GenerationConfigModel | None:
        """
        Retrieve a config only if it is active.

        Args:
            session: Async database session
            config_id: Config UUID

        Returns:
            Active GenerationConfigModel, or None when missing or inactive
        """
        stmt = select(GenerationConfigModel).where(
            GenerationConfigModel.id == config_id,
            GenerationConfigModel.is_active.is_(True),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_status(
        self,
        session: AsyncSession,
        config_id: UUID,
        status: OrchestrationStatus,
        error: str | None = None,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
    ) -> GenerationConfigModel | None:
        """
        Update orchestration status with optional timestamps and error.

        Args:
            session: Async database session
            config_id: Config UUID
            status: New orchestration status
            error: Failure reason
            started_at: Fan-out start time
            completed_at: Fan-out end time

        Returns:
            Updated GenerationConfigModel if found, None otherwise
        """
        update_fields: dict = {"status": status}
        if error is not None:
            update_fields["error"] = error
        if started_at is not None:
            update_fields["started_at"] = started_at
        if completed_at is not None:
            update_fields["completed_at"] = completed_at
        return await self.update_by_id(session, config_id, **update_fields)

    async def add_failed_feature(
        self,
        session: AsyncSession,
        config_id: UUID,
        content_type: str,
    ) -> GenerationConfigModel | None:
        """
        Append a content type to the config's failed feature list.

        The config row is locked (SELECT ... FOR UPDATE) and re-read before
        the append; concurrent sibling failures serialize on that lock.

        Args:
            session: Async database session
            config_id: Config UUID
            content_type: Content type value that failed

        Returns:
            Updated GenerationConfigModel if found, None otherwise
        """
        stmt = (
            select(GenerationConfigModel)
            .where(GenerationConfigModel.id == config_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        config = result.scalar_one_or_none()
        if config is None:
            return None
        if content_type not in config.failed_features:
            config.failed_features = [*config.failed_features, content_type]
            await session.flush()
        return config


generation_config_crud = GenerationConfigCRUD()
