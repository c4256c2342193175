"""
Orchestration payload, result and status models.

Dependencies: pydantic
System role: Data contracts for the job orchestrator
"""

from typing import Literal

from pydantic import BaseModel, Field

from studyloop.core.content_types import ContentType

RunStatus = Literal["processing", "completed", "partial_failure", "failed"]


class OrchestrationPayload(BaseModel):
    """One material batch to fan out."""

    course_id: str = Field(min_length=1)
    week_id: str = Field(min_length=1)
    material_ids: list[str] = Field(min_length=1)
    config_id: str = Field(min_length=1)
    user_id: str | None = None


class FeatureDispatch(BaseModel):
    """Scheduling outcome of one content type."""

    content_type: ContentType
    success: bool
    generated_count: int = 0
    batch_id: str | None = None
    error: str | None = None


class OrchestrationResult(BaseModel):
    config_id: str
    status: str
    cache_key: str | None = None
    results: list[FeatureDispatch] = Field(default_factory=list)


class RunStatusSummary(BaseModel):
    """Aggregate state of an orchestration run's features."""

    config_id: str
    status: RunStatus
    features: dict[str, str] = Field(default_factory=dict)
    failed_features: list[str] = Field(default_factory=list)
