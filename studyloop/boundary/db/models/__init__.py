"""
Database models package.

Exports:
  - DocumentChunkModel: Chunk Store rows
  - GenerationConfigModel, OrchestrationStatus: Feature selection and run status
  - CourseWeekFeatureModel, FeatureStatus: Per-feature generation state
  - Generated content models, one per content type
  - IdempotencyKeyModel, IdempotencyStatus: Event idempotency records

Dependencies: sqlalchemy, studyloop.boundary.db.base
System role: Database model definitions for domain entities
"""

from studyloop.boundary.db.models.chunk_model import DocumentChunkModel
from studyloop.boundary.db.models.content_models import (
    ConceptMapModel,
    CuecardModel,
    GoldenNoteModel,
    MultipleChoiceQuestionModel,
    OpenQuestionModel,
    SummaryModel,
)
from studyloop.boundary.db.models.feature_status_model import (
    CourseWeekFeatureModel,
    FeatureStatus,
)
from studyloop.boundary.db.models.generation_config_model import (
    GenerationConfigModel,
    OrchestrationStatus,
)
from studyloop.boundary.db.models.idempotency_model import (
    IdempotencyKeyModel,
    IdempotencyStatus,
)

__all__ = [
    "DocumentChunkModel",
    "GenerationConfigModel",
    "OrchestrationStatus",
    "CourseWeekFeatureModel",
    "FeatureStatus",
    "GoldenNoteModel",
    "CuecardModel",
    "MultipleChoiceQuestionModel",
    "OpenQuestionModel",
    "SummaryModel",
    "ConceptMapModel",
    "IdempotencyKeyModel",
    "IdempotencyStatus",
]
