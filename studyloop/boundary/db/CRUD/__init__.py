"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from studyloop.boundary.db.CRUD import chunk_crud

    chunks = await chunk_crud.get_by_materials(db, material_ids)
"""

from studyloop.boundary.db.CRUD.base_crud import BaseCRUD
from studyloop.boundary.db.CRUD.chunk_crud import ChunkCRUD, ChunkMatch, chunk_crud
from studyloop.boundary.db.CRUD.content_crud import (
    GeneratedContentCRUD,
    concept_map_crud,
    cuecard_crud,
    golden_note_crud,
    multiple_choice_crud,
    open_question_crud,
    summary_crud,
)
from studyloop.boundary.db.CRUD.feature_status_crud import (
    CourseWeekFeatureCRUD,
    course_week_feature_crud,
)
from studyloop.boundary.db.CRUD.generation_config_crud import (
    GenerationConfigCRUD,
    generation_config_crud,
)
from studyloop.boundary.db.CRUD.idempotency_crud import IdempotencyCRUD, idempotency_crud

__all__ = [
    "BaseCRUD",
    "ChunkCRUD",
    "ChunkMatch",
    "chunk_crud",
    "GeneratedContentCRUD",
    "golden_note_crud",
    "cuecard_crud",
    "multiple_choice_crud",
    "open_question_crud",
    "summary_crud",
    "concept_map_crud",
    "CourseWeekFeatureCRUD",
    "course_week_feature_crud",
    "GenerationConfigCRUD",
    "generation_config_crud",
    "IdempotencyCRUD",
    "idempotency_crud",
]
