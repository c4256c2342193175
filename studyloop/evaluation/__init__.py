"""
Content quality evaluation.

LLM-as-judge scoring used as an optional, advisory gate on generated items.
"""

from studyloop.evaluation.quality_validator import (
    QualityValidator,
    calculate_overall_quality,
    clamp_score,
    fallback_metrics,
)

__all__ = [
    "QualityValidator",
    "calculate_overall_quality",
    "clamp_score",
    "fallback_metrics",
]
