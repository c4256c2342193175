"""
Generated content item schemas.

Pydantic models for each content type's items. Field aliases are the
camelCase names the generation model emits; every item must validate
before it can be persisted.

Dependencies: pydantic
System role: Output schema and structural validation for generated items
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel


NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ContentItem(BaseModel):
    """Base for generated items: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class GoldenNote(ContentItem):
    title: str = Field(min_length=1, description="Clear, descriptive title")
    content: str = Field(min_length=1, description="Explanation of the concept")
    priority: int = Field(ge=1, description="1 = most important")
    category: str | None = Field(default=None, description="Topic category")


class Cuecard(ContentItem):
    question: str = Field(min_length=1, description="Clear, specific question")
    answer: str = Field(min_length=1, description="Complete, accurate answer")
    difficulty: str = Field(min_length=1)


class MultipleChoiceQuestion(ContentItem):
    question: str = Field(min_length=1)
    options: list[NonBlankStr] = Field(min_length=4, max_length=4, description="Exactly four non-blank options")
    correct_answer: int = Field(ge=0, le=3, description="Index of the correct option")
    explanation: str = Field(min_length=1)
    difficulty: str = Field(min_length=1)


class GradingRubric(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    excellent: str = Field(min_length=1)
    good: str = Field(min_length=1)
    needs_improvement: str = Field(min_length=1)


class OpenQuestion(ContentItem):
    question: str = Field(min_length=1)
    sample_answer: str = Field(min_length=1)
    grading_rubric: GradingRubric
    difficulty: str = Field(min_length=1)


class Summary(ContentItem):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1, description="Markdown summary")
    word_count: int = Field(default=0, ge=0)
    summary_type: str = Field(default="general")


class ConceptNode(BaseModel):
    id: str = Field(min_length=1)
    label: str = Field(min_length=1)
    type: Literal["concept", "topic", "subtopic", "example"]
    level: int = Field(ge=0, le=5)
    x: float | None = None
    y: float | None = None


class ConceptEdge(BaseModel):
    source: str = Field(min_length=1)
    target: str = Field(min_length=1)
    label: str | None = None
    type: Literal["related", "causes", "leads_to", "part_of", "example_of"]
    strength: float = Field(default=0.5, ge=0, le=1)


class ConceptMapMetadata(BaseModel):
    central_concept: str = Field(min_length=1)
    complexity_level: str
    focus_area: str
    style: str


class ConceptMapContent(BaseModel):
    nodes: list[ConceptNode] = Field(min_length=1)
    edges: list[ConceptEdge] = Field(default_factory=list)
    metadata: ConceptMapMetadata


class ConceptMap(ContentItem):
    title: str = Field(min_length=1)
    content: ConceptMapContent
    style: Literal["hierarchical", "radial", "network"]
