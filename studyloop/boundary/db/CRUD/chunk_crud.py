"""
Chunk Store CRUD operations.

Ordered chunk retrieval, idempotent per-material replacement and pgvector
cosine-distance search over stored embeddings.

Dependencies: sqlalchemy, pgvector, studyloop.boundary.db.models.chunk_model
System role: Chunk Store persistence operations
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from studyloop.boundary.db.CRUD.base_crud import BaseCRUD
from studyloop.boundary.db.models.chunk_model import DocumentChunkModel


@dataclass
class ChunkMatch:
    """A stored chunk with its similarity to a query vector."""

    chunk: DocumentChunkModel
    score: float


class ChunkCRUD(BaseCRUD[DocumentChunkModel]):
    """
    CRUD operations for DocumentChunkModel.

    Chunk sets are written per material as a whole: re-processing a
    material deletes its previous chunks and inserts the new set in the
    same transaction.
    """

    def __init__(self) -> None:
        """Initialize ChunkCRUD with DocumentChunkModel."""
        super().__init__(DocumentChunkModel)

    async def replace_material_chunks(
        self,
        session: AsyncSession,
        material_id: str,
        chunks: list[dict],
    ) -> int:
        """
        Replace every chunk of a material.

        Args:
            session: Async database session (caller owns the transaction)
            material_id: Material whose chunk set is replaced
            chunks: Dicts with content, embedding, token_count, start_index
                and overlap_chars; list order becomes chunk_index

        Returns:
            Number of chunks written
        """
        await session.execute(
            delete(DocumentChunkModel).where(DocumentChunkModel.material_id == material_id)
        )
        rows = [
            {
                "material_id": material_id,
                "chunk_index": index,
                "content": chunk["content"],
                "embedding": chunk.get("embedding"),
                "token_count": chunk.get("token_count", 0),
                "start_index": chunk.get("start_index", 0),
                "overlap_chars": chunk.get("overlap_chars", 0),
            }
            for index, chunk in enumerate(chunks)
        ]
        return await self.create_many(session, rows)

    async def get_by_material(
        self,
        session: AsyncSession,
        material_id: str,
    ) -> Sequence[DocumentChunkModel]:
        """
        Retrieve one material's chunks in chunk order.

        Args:
            session: Async database session
            material_id: Material identifier

        Returns:
            Chunks ordered by chunk_index
        """
        stmt = (
            select(DocumentChunkModel)
            .where(DocumentChunkModel.material_id == material_id)
            .order_by(DocumentChunkModel.chunk_index)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_by_materials(
        self,
        session: AsyncSession,
        material_ids: list[str],
    ) -> list[DocumentChunkModel]:
        """
        Retrieve chunks for several materials.

        Materials keep the order they were requested in; chunks within a
        material keep chunk_index order.

        Args:
            session: Async database session
            material_ids: Material identifiers in the desired order

        Returns:
            Ordered chunks across all requested materials
        """
        if not material_ids:
            return []

        stmt = (
            select(DocumentChunkModel)
            .where(DocumentChunkModel.material_id.in_(material_ids))
            .order_by(DocumentChunkModel.material_id, DocumentChunkModel.chunk_index)
        )
        result = await session.execute(stmt)

        by_material: dict[str, list[DocumentChunkModel]] = defaultdict(list)
        for chunk in result.scalars().all():
            by_material[chunk.material_id].append(chunk)

        ordered: list[DocumentChunkModel] = []
        for material_id in dict.fromkeys(material_ids):
            ordered.extend(by_material.get(material_id, []))
        return ordered

    async def count_by_material(self, session: AsyncSession, material_id: str) -> int:
        """Number of chunks stored for a material."""
        stmt = select(func.count()).select_from(DocumentChunkModel).where(
            DocumentChunkModel.material_id == material_id
        )
        result = await session.execute(stmt)
        return int(result.scalar_one())

    def build_similarity_query(
        self,
        query_embedding: list[float],
        material_ids: list[str] | None = None,
        k: int = 5,
    ) -> Select:
        """
        Nearest-neighbour query ranked by pgvector cosine distance.

        Ranking and the row limit both run in the database.
        """
        distance = DocumentChunkModel.embedding.cosine_distance(query_embedding).label("distance")
        stmt = select(DocumentChunkModel, distance).where(DocumentChunkModel.embedding.is_not(None))
        if material_ids:
            stmt = stmt.where(DocumentChunkModel.material_id.in_(material_ids))
        return stmt.order_by(distance).limit(k)

    async def similarity_search(
        self,
        session: AsyncSession,
        query_embedding: list[float],
        material_ids: list[str] | None = None,
        k: int = 5,
    ) -> list[ChunkMatch]:
        """
        Rank stored chunks by cosine similarity to a query vector.

        Args:
            session: Async database session (PostgreSQL with pgvector)
            query_embedding: Query vector (same dimensionality as stored chunks)
            material_ids: Restrict the search to these materials (None for all)
            k: Maximum number of matches

        Returns:
            Best matches, highest score first; score is 1 - cosine distance
        """
        result = await session.execute(self.build_similarity_query(query_embedding, material_ids, k))
        return [ChunkMatch(chunk=chunk, score=1.0 - float(distance)) for chunk, distance in result.all()]


chunk_crud = ChunkCRUD()
