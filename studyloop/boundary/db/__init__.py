"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(): Connection management

Dependencies: sqlalchemy, studyloop.configs
System role: Database adapter for chunks, generated content, run status
and idempotency records.
"""

from studyloop.boundary.db.base import Base, TimestampMixin, UUIDMixin, utc_now
from studyloop.boundary.db.connection import (
    get_async_engine,
    get_async_session_factory,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "utc_now",
    "get_async_engine",
    "get_async_session_factory",
]
