"""
Idempotency key CRUD operations.

Insert-if-absent creation, compare-and-swap status transitions and
retry bookkeeping for idempotency records.

Dependencies: sqlalchemy, studyloop.boundary.db.models.idempotency_model
System role: Idempotency state table access
"""

from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from studyloop.boundary.db.base import utc_now
from studyloop.boundary.db.CRUD.base_crud import BaseCRUD
from studyloop.boundary.db.models.idempotency_model import (
    IdempotencyKeyModel,
    IdempotencyStatus,
)


class IdempotencyCRUD(BaseCRUD[IdempotencyKeyModel]):
    """CRUD operations for IdempotencyKeyModel."""

    def __init__(self) -> None:
        super().__init__(IdempotencyKeyModel)

    async def get_by_key(self, session: AsyncSession, key: str) -> IdempotencyKeyModel | None:
        stmt = select(IdempotencyKeyModel).where(IdempotencyKeyModel.key == key)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_expired(self, session: AsyncSession, now: datetime | None = None) -> int:
        """
        Purge records whose expiry has passed.

        Returns:
            Number of records deleted
        """
        stmt = delete(IdempotencyKeyModel).where(IdempotencyKeyModel.expires_at < (now or utc_now()))
        result = await session.execute(stmt)
        return result.rowcount or 0

    async def insert_if_absent(self, session: AsyncSession, **fields: Any) -> IdempotencyKeyModel | None:
        """
        Insert a record unless its key already exists (ON CONFLICT DO NOTHING).

        Returns:
            The new record, or None when the key was already present
        """
        dialect = session.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = postgresql_insert(IdempotencyKeyModel)
        elif dialect == "sqlite":
            stmt = sqlite_insert(IdempotencyKeyModel)
        else:
            raise NotImplementedError(f"insert_if_absent not supported on {dialect}")

        stmt = (
            stmt.values(**fields)
            .on_conflict_do_nothing(index_elements=[IdempotencyKeyModel.key])
            .returning(IdempotencyKeyModel.id)
        )
        result = await session.execute(stmt)
        if result.scalar_one_or_none() is None:
            return None
        return await self.get_by_key(session, fields["key"])

    async def compare_and_set_status(
        self,
        session: AsyncSession,
        key: str,
        expected: IdempotencyStatus,
        new_status: IdempotencyStatus,
        **fields: Any,
    ) -> bool:
        """
        Transition a record's status only if it still has the expected one.

        Args:
            session: Async database session
            key: Record key
            expected: Status the record must currently have
            new_status: Status to set
            **fields: Extra columns to set in the same statement

        Returns:
            True if this call performed the transition
        """
        stmt = (
            update(IdempotencyKeyModel)
            .where(
                IdempotencyKeyModel.key == key,
                IdempotencyKeyModel.status == expected,
            )
            .values(status=new_status, **fields)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return (result.rowcount or 0) == 1

    async def increment_retry(
        self,
        session: AsyncSession,
        key: str,
        error_message: str,
    ) -> IdempotencyKeyModel | None:
        """
        Atomically bump retry_count on a pending record.

        Returns:
            Updated record, or None if the record is missing or no longer pending
        """
        stmt = (
            update(IdempotencyKeyModel)
            .where(
                IdempotencyKeyModel.key == key,
                IdempotencyKeyModel.status == IdempotencyStatus.PENDING,
            )
            .values(
                retry_count=IdempotencyKeyModel.retry_count + 1,
                error_message=error_message,
                last_retry_at=utc_now(),
            )
            .returning(IdempotencyKeyModel)
            .execution_options(synchronize_session="fetch")
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_pending_retries(
        self,
        session: AsyncSession,
        limit: int = 100,
    ) -> Sequence[IdempotencyKeyModel]:
        """Pending records that failed at least once and still have retries left."""
        stmt = (
            select(IdempotencyKeyModel)
            .where(
                IdempotencyKeyModel.status == IdempotencyStatus.PENDING,
                IdempotencyKeyModel.retry_count > 0,
                IdempotencyKeyModel.retry_count < IdempotencyKeyModel.max_retries,
            )
            .order_by(IdempotencyKeyModel.last_retry_at)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


idempotency_crud = IdempotencyCRUD()
