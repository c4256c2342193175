"""
Shared CRUD operations for StudyLoop tables.

Model-specific CRUD classes add their own queries on top of create,
bulk create, lookup by id and update by id. Callers own the transaction:
nothing here commits.

Dependencies: sqlalchemy
System role: Foundation for the boundary CRUD singletons
"""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from studyloop.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic CRUD bound to one model class.

    Usage:
        class ChunkCRUD(BaseCRUD[DocumentChunkModel]):
            def __init__(self) -> None:
                super().__init__(DocumentChunkModel)
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **fields: Any) -> ModelT:
        """
        Add one row and flush it so generated ids and timestamps are loaded.

        Args:
            session: Async database session
            **fields: Column values

        Returns:
            The persisted instance
        """
        instance = self.model(**fields)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def create_many(self, session: AsyncSession, rows: list[dict[str, Any]]) -> int:
        """
        Add rows in list order and flush them together.

        Returns:
            Number of rows added
        """
        if not rows:
            return 0
        session.add_all([self.model(**row) for row in rows])
        await session.flush()
        return len(rows)

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        result = await session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def update_by_id(self, session: AsyncSession, id: UUID, **fields: Any) -> ModelT | None:
        """
        Set columns on the row with the given id.

        Returns:
            The updated instance, or None when no row has that id
        """
        stmt = (
            update(self.model)
            .where(self.model.id == id)
            .values(**fields)
            .returning(self.model)
            .execution_options(synchronize_session="fetch")
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()
