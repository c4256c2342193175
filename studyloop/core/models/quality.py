"""
Quality assessment models.

Dependencies: pydantic
System role: Quality Validator contracts
"""

from typing import Literal

from pydantic import BaseModel, Field


class QualityThresholds(BaseModel):
    """Score cut-offs for accept, reject and regenerate decisions."""

    auto_approve: int
    auto_reject: int
    regenerate: int


NORMAL_THRESHOLDS = QualityThresholds(auto_approve=80, auto_reject=40, regenerate=50)
STRICT_THRESHOLDS = QualityThresholds(auto_approve=85, auto_reject=50, regenerate=60)


class QualityMetrics(BaseModel):
    """Dimension scores (0-100) and the derived overall score."""

    factual_accuracy: int = Field(ge=0, le=100)
    readability: int = Field(ge=0, le=100)
    educational_value: int = Field(ge=0, le=100)
    age_appropriateness: int = Field(ge=0, le=100)
    overall_quality: int = Field(ge=0, le=100)
    feedback: list[str] = Field(default_factory=list)
    should_regenerate: bool = False


class QualityDecision(BaseModel):
    """Accept/reject verdict for one item."""

    acceptable: bool
    reason: str | None = None


class QualityValidationOptions(BaseModel):
    """Per-call knobs for quality assessment."""

    subject: str | None = None
    grade_level: Literal["elementary", "middle", "high", "college"] = "college"
    strict: bool | None = Field(default=None, description="Overrides the configured strict mode")
