"""
Domain models for generation, content items and quality scoring.
"""

from studyloop.core.models.content_items import (
    ConceptMap,
    ContentItem,
    Cuecard,
    GoldenNote,
    MultipleChoiceQuestion,
    OpenQuestion,
    Summary,
)
from studyloop.core.models.generation import (
    CONFIG_TYPES,
    BaseContentConfig,
    ChunkRetrievalResult,
    ConceptMapsConfig,
    ContentConfig,
    CuecardsConfig,
    GenerationRequest,
    GenerationResult,
    GoldenNotesConfig,
    MultipleChoiceConfig,
    OpenQuestionsConfig,
    SummariesConfig,
)
from studyloop.core.models.quality import (
    NORMAL_THRESHOLDS,
    STRICT_THRESHOLDS,
    QualityDecision,
    QualityMetrics,
    QualityThresholds,
    QualityValidationOptions,
)

__all__ = [
    "ConceptMap",
    "ContentItem",
    "Cuecard",
    "GoldenNote",
    "MultipleChoiceQuestion",
    "OpenQuestion",
    "Summary",
    "CONFIG_TYPES",
    "BaseContentConfig",
    "ChunkRetrievalResult",
    "ConceptMapsConfig",
    "ContentConfig",
    "CuecardsConfig",
    "GenerationRequest",
    "GenerationResult",
    "GoldenNotesConfig",
    "MultipleChoiceConfig",
    "OpenQuestionsConfig",
    "SummariesConfig",
    "NORMAL_THRESHOLDS",
    "STRICT_THRESHOLDS",
    "QualityDecision",
    "QualityMetrics",
    "QualityThresholds",
    "QualityValidationOptions",
]
