"""
Cache-first chunk retrieval.

Returns the combined text a generation run works from. A batch's chunk
set is read from the chunk cache when the request carries a cache key and
the entry exists; otherwise it is loaded from the Chunk Store in material
and chunk order. Stored chunks contribute only the text past their overlap
with the previous chunk. Cached entries are trusted as-is.

Flow: cache lookup -> store fallback -> empty check -> budget-bounded combine

Dependencies: sqlalchemy, redis, studyloop.boundary
System role: Content acquisition step of the generation pipeline
"""

import logging

from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studyloop.boundary.cache.chunk_cache import ChunkCache, build_chunk_cache_key
from studyloop.boundary.db.CRUD.chunk_crud import chunk_crud
from studyloop.configs import get_settings
from studyloop.configs.generation import GenerationSettings
from studyloop.core.exceptions import NoContentFoundError
from studyloop.core.models.generation import ChunkRetrievalResult

logger = logging.getLogger(__name__)

CHUNK_SEPARATOR = "\n\n"


def combine_chunks(chunks: list[str], max_chars: int) -> str:
    """
    Join ordered chunks without exceeding a character budget.

    Chunks are appended whole until the next one (plus its separator)
    would overflow the budget; later chunks are dropped, never split.

    Args:
        chunks: Ordered chunk texts
        max_chars: Character budget for the combined text

    Returns:
        str: Combined text, at most max_chars long
    """
    parts: list[str] = []
    length = 0
    for chunk in chunks:
        text = chunk.strip()
        if not text:
            continue
        added = len(text) + (len(CHUNK_SEPARATOR) if parts else 0)
        if length + added > max_chars:
            break
        parts.append(text)
        length += added
    return CHUNK_SEPARATOR.join(parts)


class ChunkRetriever:
    """
    Chunk acquisition for generation runs.

    Usage:
        retriever = ChunkRetriever(get_async_session_factory(), ChunkCache(get_redis_client()))
        result = await retriever.retrieve(material_ids, cache_key=request.cache_key)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        chunk_cache: ChunkCache | None = None,
        settings: GenerationSettings | None = None,
    ) -> None:
        """
        Initialize retriever.

        Args:
            session_factory: Async session factory for the Chunk Store
            chunk_cache: Batch chunk cache (store-only retrieval if None)
            settings: Generation settings (uses global settings if None)
        """
        self._session_factory = session_factory
        self._chunk_cache = chunk_cache
        self._settings = settings or get_settings().generation

    async def retrieve(
        self,
        material_ids: list[str],
        cache_key: str | None = None,
        content_type: str = "",
    ) -> ChunkRetrievalResult:
        """
        Load and combine chunks for a set of materials.

        Args:
            material_ids: Source materials, in the order their chunks should appear
            cache_key: Key of a pre-fetched chunk set, if any
            content_type: Content type being generated (for errors and logs)

        Returns:
            ChunkRetrievalResult: Combined content with provenance

        Raises:
            NoContentFoundError: When no chunks exist for the materials
        """
        chunks = await self._read_cache(cache_key)
        cache_hit = chunks is not None

        if chunks is None:
            async with self._session_factory() as session:
                rows = await chunk_crud.get_by_materials(session, material_ids)
            chunks = [row.new_content for row in rows]

        if not chunks:
            raise NoContentFoundError(content_type, material_ids)

        content = combine_chunks(chunks, self._settings.max_content_chars)
        if not content:
            raise NoContentFoundError(
                content_type,
                material_ids,
                details={"reason": "first chunk exceeds the content budget or is blank"},
            )

        source = "cache" if cache_hit else "database"
        logger.info(
            f"{__name__}:retrieve - Retrieved chunks",
            extra={
                "content_type": content_type,
                "source": source,
                "chunk_count": len(chunks),
                "content_chars": len(content),
            },
        )
        return ChunkRetrievalResult(
            content=content,
            chunks=chunks,
            cache_hit=cache_hit,
            chunk_count=len(chunks),
            source=source,
        )

    async def prefetch(
        self,
        course_id: str,
        week_id: str,
        material_ids: list[str],
    ) -> str | None:
        """
        Load a batch's chunks once and store them in the chunk cache.

        Args:
            course_id: Owning course
            week_id: Owning week
            material_ids: Batch materials

        Returns:
            Cache key for the stored chunk set, or None when there is no
            cache or nothing to cache
        """
        if self._chunk_cache is None:
            return None

        async with self._session_factory() as session:
            rows = await chunk_crud.get_by_materials(session, material_ids)
        if not rows:
            logger.warning(
                f"{__name__}:prefetch - No chunks to cache",
                extra={"course_id": course_id, "week_id": week_id, "material_ids": material_ids},
            )
            return None

        cache_key = build_chunk_cache_key(course_id, week_id, material_ids)
        try:
            await self._chunk_cache.set(cache_key, [row.new_content for row in rows])
        except RedisError as e:
            logger.warning(
                f"{__name__}:prefetch - Chunk cache write failed, runs will read the store",
                extra={"cache_key": cache_key, "error_msg": str(e)},
            )
            return None

        logger.info(
            f"{__name__}:prefetch - Cached batch chunks",
            extra={"cache_key": cache_key, "chunk_count": len(rows)},
        )
        return cache_key

    async def _read_cache(self, cache_key: str | None) -> list[str] | None:
        if not cache_key or self._chunk_cache is None:
            return None
        try:
            return await self._chunk_cache.get(cache_key)
        except RedisError as e:
            logger.warning(
                f"{__name__}:_read_cache - Chunk cache unavailable, falling back to store",
                extra={"cache_key": cache_key, "error_msg": str(e)},
            )
            return None
