"""
Generation request, configuration and result models.

Per content type configuration is a tagged union discriminated on
content_type, so each variant carries only the knobs its prompt uses.

Dependencies: pydantic
System role: Data contracts between orchestrator, pipeline and workers
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from studyloop.core.content_types import ContentType

Difficulty = Literal["beginner", "intermediate", "advanced"]
Focus = Literal["conceptual", "practical", "mixed"]


class BaseContentConfig(BaseModel):
    """Settings shared by every content type."""

    model_config = ConfigDict(extra="ignore")

    difficulty: Difficulty = Field(default="intermediate", description="Target difficulty")
    focus: Focus = Field(default="conceptual", description="Conceptual or practical emphasis")


class GoldenNotesConfig(BaseContentConfig):
    content_type: Literal["goldenNotes"] = "goldenNotes"
    count: int = Field(default=5, ge=1, le=50)


class CuecardsConfig(BaseContentConfig):
    content_type: Literal["cuecards"] = "cuecards"
    count: int = Field(default=10, ge=1, le=100)
    mode: Literal["definition", "application", "comprehensive"] = "comprehensive"


class MultipleChoiceConfig(BaseContentConfig):
    content_type: Literal["multipleChoice"] = "multipleChoice"
    count: int = Field(default=10, ge=1, le=100)


class OpenQuestionsConfig(BaseContentConfig):
    content_type: Literal["openQuestions"] = "openQuestions"
    count: int = Field(default=5, ge=1, le=50)


class SummariesConfig(BaseContentConfig):
    content_type: Literal["summaries"] = "summaries"
    count: int = Field(default=1, ge=1, le=10)
    length: Literal["short", "medium", "long"] = "medium"


class ConceptMapsConfig(BaseContentConfig):
    content_type: Literal["conceptMaps"] = "conceptMaps"
    style: Literal["hierarchical", "radial", "network"] = "hierarchical"


ContentConfig = Annotated[
    Union[
        GoldenNotesConfig,
        CuecardsConfig,
        MultipleChoiceConfig,
        OpenQuestionsConfig,
        SummariesConfig,
        ConceptMapsConfig,
    ],
    Field(discriminator="content_type"),
]

CONFIG_TYPES: dict[ContentType, type[BaseContentConfig]] = {
    ContentType.GOLDEN_NOTES: GoldenNotesConfig,
    ContentType.CUECARDS: CuecardsConfig,
    ContentType.MULTIPLE_CHOICE: MultipleChoiceConfig,
    ContentType.OPEN_QUESTIONS: OpenQuestionsConfig,
    ContentType.SUMMARIES: SummariesConfig,
    ContentType.CONCEPT_MAPS: ConceptMapsConfig,
}


class GenerationRequest(BaseModel):
    """
    One pipeline run: a content type for a course week's materials.

    Created by the orchestrator per content type per batch and consumed
    once by the pipeline; never persisted.
    """

    content_type: ContentType
    course_id: str = ""
    week_id: str = ""
    material_ids: list[str] = Field(default_factory=list)
    config: ContentConfig
    cache_key: str | None = Field(default=None, description="Key of pre-fetched chunks")
    config_id: str | None = Field(default=None, description="Orchestration run that created this request")
    user_id: str | None = None


class ChunkRetrievalResult(BaseModel):
    """Combined generation-ready content with provenance."""

    content: str
    chunks: list[str]
    cache_hit: bool
    chunk_count: int
    source: Literal["cache", "database"]


class GenerationResult(BaseModel):
    """Outcome of one pipeline run."""

    success: bool
    content_type: ContentType
    generated_count: int = 0
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def failure(cls, content_type: ContentType, error: str, **metadata: Any) -> "GenerationResult":
        return cls(
            success=False,
            content_type=content_type,
            generated_count=0,
            error=error,
            metadata=metadata,
        )
