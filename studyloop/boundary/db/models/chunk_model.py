"""
Document chunk ORM model.

Ordered text slices of an uploaded course material with their
embedding vectors.

Dependencies: sqlalchemy, pgvector, studyloop.boundary.db.base
System role: Chunk Store persistence
"""

from pgvector.sqlalchemy import Vector
from sqlalchemy import JSON, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from studyloop.boundary.db.base import Base, TimestampMixin, UUIDMixin
from studyloop.configs.embedding import EMBEDDING_DIMENSIONS


class DocumentChunkModel(Base, UUIDMixin, TimestampMixin):
    """
    One chunk of extracted material text.

    Attributes:
        material_id: Source material identifier
        chunk_index: Zero-based position within the material (gap-free)
        content: Chunk text, including the overlap with the previous chunk
        embedding: pgvector column (JSON float list on SQLite)
        token_count: Rough token estimate (characters / 4)
        start_index: Offset of the chunk within its source page
        overlap_chars: Leading characters repeated from the previous chunk

    Constraints:
        (material_id, chunk_index): UNIQUE; re-ingestion replaces the full set
    """

    __tablename__ = "document_chunks"
    __table_args__ = (
        UniqueConstraint("material_id", "chunk_index", name="uq_document_chunks_material_index"),
    )

    material_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    embedding: Mapped[list[float] | None] = mapped_column(
        Vector(EMBEDDING_DIMENSIONS).with_variant(JSON(none_as_null=True), "sqlite"),
        nullable=True,
    )
    token_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    start_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    overlap_chars: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    @property
    def new_content(self) -> str:
        """Chunk text without the part already covered by the previous chunk."""
        return self.content[self.overlap_chars:]
