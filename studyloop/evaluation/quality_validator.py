"""
LLM-as-judge quality validation for generated content.

Scores content on four dimensions (factual accuracy, readability,
educational value, age appropriateness), derives a weighted overall score
and turns it into accept/reject/regenerate signals.

Scoring is advisory: any failure while scoring yields a neutral fallback
instead of an exception.

Dependencies: langchain_google_genai, langchain_core, studyloop.configs
System role: Optional quality gate for the generation pipeline
"""

import asyncio
import json
import logging
import math
import re
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from studyloop.configs import get_settings
from studyloop.configs.quality import QualitySettings
from studyloop.core.content_types import ContentType
from studyloop.core.models.quality import (
    NORMAL_THRESHOLDS,
    STRICT_THRESHOLDS,
    QualityDecision,
    QualityMetrics,
    QualityThresholds,
    QualityValidationOptions,
)
from studyloop.evaluation.quality_prompts import build_assessment_prompt, get_judge_prompt

logger = logging.getLogger(__name__)

DIMENSION_WEIGHTS = {
    "factual_accuracy": 0.4,
    "educational_value": 0.3,
    "readability": 0.2,
    "age_appropriateness": 0.1,
}
DEFAULT_SCORE = 70
MAX_FEEDBACK = 5
FALLBACK_FEEDBACK = "Quality validation failed - manual review recommended"
MIN_FACTUAL_ACCURACY = 60
MIN_EDUCATIONAL_VALUE = 50


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(score: Any) -> int:
    """
    Coerce a model-reported score into an integer in [0, 100].

    Non-numeric values become the neutral default score.
    """
    try:
        value = float(score)
    except (TypeError, ValueError):
        return DEFAULT_SCORE
    if math.isnan(value):
        return DEFAULT_SCORE
    return _round_half_up(max(0.0, min(100.0, value)))


def calculate_overall_quality(
    factual_accuracy: int,
    educational_value: int,
    readability: int,
    age_appropriateness: int,
) -> int:
    """Weighted overall score, rounded."""
    weighted = (
        clamp_score(factual_accuracy) * DIMENSION_WEIGHTS["factual_accuracy"]
        + clamp_score(educational_value) * DIMENSION_WEIGHTS["educational_value"]
        + clamp_score(readability) * DIMENSION_WEIGHTS["readability"]
        + clamp_score(age_appropriateness) * DIMENSION_WEIGHTS["age_appropriateness"]
    )
    return _round_half_up(weighted)


def fallback_metrics() -> QualityMetrics:
    """Neutral scores used when assessment fails."""
    return QualityMetrics(
        factual_accuracy=DEFAULT_SCORE,
        readability=DEFAULT_SCORE,
        educational_value=DEFAULT_SCORE,
        age_appropriateness=DEFAULT_SCORE,
        overall_quality=DEFAULT_SCORE,
        feedback=[FALLBACK_FEEDBACK],
        should_regenerate=False,
    )


def parse_assessment(response_text: str) -> dict[str, Any]:
    """
    Extract the judge's JSON object.

    Handles markdown code fences and surrounding prose.

    Raises:
        ValueError: When no JSON object can be decoded
    """
    text = response_text
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0]
    elif "```" in text:
        text = text.split("```")[1].split("```")[0]

    try:
        data = json.loads(text.strip())
    except json.JSONDecodeError:
        match = re.search(r"\{[\s\S]*\}", response_text)
        if not match:
            raise ValueError("No JSON object in judge response") from None
        data = json.loads(match.group(0))

    if not isinstance(data, dict):
        raise ValueError("Judge response is not a JSON object")
    return data


def _response_text(content: Any) -> str:
    """Flatten chat model content (plain string or content blocks) to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)
    return str(content)


class QualityValidator:
    """
    LLM-as-judge quality scorer.

    Usage:
        validator = QualityValidator()
        metrics = await validator.assess(item, ContentType.CUECARDS)
        decision = validator.is_quality_acceptable(metrics)
    """

    def __init__(
        self,
        settings: QualitySettings | None = None,
        model: BaseChatModel | None = None,
    ) -> None:
        """
        Initialize quality validator.

        Args:
            settings: Quality settings (uses global settings if None)
            model: Judge chat model (Gemini built from settings if None)
        """
        self._settings = settings or get_settings().quality
        self._model = model or ChatGoogleGenerativeAI(
            model=self._settings.model_name,
            temperature=self._settings.temperature,
            max_output_tokens=self._settings.max_output_tokens,
        )
        logger.info(f"{__name__}:__init__ - Initialized quality judge with {self._settings.model_name}")

    def thresholds(self, strict: bool | None = None) -> QualityThresholds:
        use_strict = self._settings.strict_mode if strict is None else strict
        return STRICT_THRESHOLDS if use_strict else NORMAL_THRESHOLDS

    async def assess(
        self,
        content: str | dict[str, Any],
        content_type: ContentType | None,
        options: QualityValidationOptions | None = None,
    ) -> QualityMetrics:
        """
        Score one piece of content.

        Args:
            content: Item text or item payload
            content_type: Content type (generic judge prompt if None)
            options: Subject, grade level and strictness

        Returns:
            QualityMetrics: Scores, or the neutral fallback on any failure
        """
        options = options or QualityValidationOptions()
        try:
            text = content if isinstance(content, str) else json.dumps(content, indent=2, ensure_ascii=False)
            judge_prompt = get_judge_prompt(content_type)
            messages = [
                SystemMessage(content=judge_prompt.system),
                HumanMessage(
                    content=build_assessment_prompt(
                        judge_prompt,
                        text,
                        subject=options.subject,
                        grade_level=options.grade_level,
                    )
                ),
            ]
            response = await self._model.ainvoke(messages)
            data = parse_assessment(_response_text(response.content))
            metrics = self._build_metrics(data, self.thresholds(options.strict))

            logger.debug(
                f"{__name__}:assess - Scored content",
                extra={
                    "content_type": getattr(content_type, "value", content_type),
                    "overall_quality": metrics.overall_quality,
                    "should_regenerate": metrics.should_regenerate,
                },
            )
            return metrics

        except Exception as e:
            # Advisory gate: never propagate
            logger.error(
                f"{__name__}:assess - Quality validation failed: {type(e).__name__}: {e}",
                extra={"content_type": getattr(content_type, "value", content_type)},
            )
            return fallback_metrics()

    async def assess_batch(
        self,
        items: list[str | dict[str, Any]],
        content_type: ContentType | None,
        options: QualityValidationOptions | None = None,
    ) -> list[QualityMetrics]:
        """
        Score several items, a few at a time.

        Returns:
            list[QualityMetrics]: One entry per item, in input order
        """
        batch_size = max(1, self._settings.batch_size)
        results: list[QualityMetrics] = []
        for start in range(0, len(items), batch_size):
            batch = items[start:start + batch_size]
            results.extend(
                await asyncio.gather(*(self.assess(item, content_type, options) for item in batch))
            )
        return results

    def is_quality_acceptable(
        self,
        metrics: QualityMetrics,
        strict: bool | None = None,
    ) -> QualityDecision:
        """
        Accept or reject scored content.

        Scores at or above the approve threshold are accepted, at or below
        the reject threshold rejected; in between, weak factual accuracy or
        educational value rejects.
        """
        thresholds = self.thresholds(strict)

        if metrics.overall_quality >= thresholds.auto_approve:
            return QualityDecision(acceptable=True)

        if metrics.overall_quality <= thresholds.auto_reject:
            return QualityDecision(
                acceptable=False,
                reason=f"Quality score {metrics.overall_quality} below threshold {thresholds.auto_reject}",
            )

        if metrics.factual_accuracy < MIN_FACTUAL_ACCURACY:
            return QualityDecision(acceptable=False, reason="Factual accuracy too low")

        if metrics.educational_value < MIN_EDUCATIONAL_VALUE:
            return QualityDecision(acceptable=False, reason="Educational value insufficient")

        # Borderline: acceptable but could be improved
        return QualityDecision(acceptable=True)

    def _build_metrics(self, data: dict[str, Any], thresholds: QualityThresholds) -> QualityMetrics:
        factual_accuracy = clamp_score(data.get("factualAccuracy"))
        readability = clamp_score(data.get("readability"))
        educational_value = clamp_score(data.get("educationalValue"))
        age_appropriateness = clamp_score(data.get("ageAppropriateness"))

        overall = calculate_overall_quality(
            factual_accuracy,
            educational_value,
            readability,
            age_appropriateness,
        )

        raw_feedback = data.get("feedback")
        feedback = [str(entry) for entry in raw_feedback[:MAX_FEEDBACK]] if isinstance(raw_feedback, list) else []

        # Both signals are kept: computed score and the judge's own flag
        should_regenerate = overall < thresholds.regenerate or bool(data.get("shouldRegenerate"))

        return QualityMetrics(
            factual_accuracy=factual_accuracy,
            readability=readability,
            educational_value=educational_value,
            age_appropriateness=age_appropriateness,
            overall_quality=overall,
            feedback=feedback,
            should_regenerate=should_regenerate,
        )
