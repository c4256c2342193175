"""Tests for LLM-as-judge quality scoring and acceptance rules."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage

from studyloop.core.content_types import ContentType
from studyloop.core.models.quality import QualityMetrics, QualityValidationOptions
from studyloop.evaluation.quality_prompts import QUALITY_PROMPTS, build_assessment_prompt, get_judge_prompt
from studyloop.evaluation.quality_validator import (
    FALLBACK_FEEDBACK,
    QualityValidator,
    calculate_overall_quality,
    clamp_score,
    fallback_metrics,
    parse_assessment,
)


def judge_reply(**scores) -> str:
    payload = {
        "factualAccuracy": 80,
        "readability": 80,
        "educationalValue": 80,
        "ageAppropriateness": 80,
        "feedback": ["Clear"],
        "shouldRegenerate": False,
    }
    payload.update(scores)
    return json.dumps(payload)


def make_judge(*replies) -> MagicMock:
    model = MagicMock()
    model.ainvoke = AsyncMock(side_effect=[AIMessage(content=reply) for reply in replies])
    return model


def scored(overall: int, factual: int = 80, educational: int = 80) -> QualityMetrics:
    return QualityMetrics(
        factual_accuracy=factual,
        readability=80,
        educational_value=educational,
        age_appropriateness=80,
        overall_quality=overall,
    )


class TestScoring:
    """Test score arithmetic."""

    def test_uniform_scores(self) -> None:
        """Should score 80 across the board as 80."""
        assert calculate_overall_quality(80, 80, 80, 80) == 80

    def test_mixed_dimensions(self) -> None:
        """Should score 90/80/70/60 as 36 + 24 + 14 + 6."""
        assert calculate_overall_quality(90, 80, 70, 60) == 80

    def test_weights(self) -> None:
        """Should weight factual 0.4, educational 0.3, readability 0.2, age 0.1."""
        assert calculate_overall_quality(100, 0, 0, 0) == 40
        assert calculate_overall_quality(0, 100, 0, 0) == 30
        assert calculate_overall_quality(0, 0, 100, 0) == 20
        assert calculate_overall_quality(0, 0, 0, 100) == 10

    def test_rounds_half_up(self) -> None:
        """Should round x.5 upwards."""
        assert calculate_overall_quality(0, 0, 5, 5) == 2

    @pytest.mark.parametrize(
        "raw,expected",
        [(150, 100), (-5, 0), ("88", 88), (72.5, 73), ("abc", 70), (None, 70), (float("nan"), 70)],
    )
    def test_clamp_score(self, raw, expected) -> None:
        """Should clamp to 0..100 and default unusable values to 70."""
        assert clamp_score(raw) == expected

    def test_fallback_metrics(self) -> None:
        """Should be neutral and flag manual review."""
        metrics = fallback_metrics()

        assert metrics.overall_quality == 70
        assert metrics.should_regenerate is False
        assert metrics.feedback == [FALLBACK_FEEDBACK]


class TestParseAssessment:
    """Test judge response parsing."""

    def test_fenced_json(self) -> None:
        """Should strip a json code fence."""
        assert parse_assessment('```json\n{"readability": 90}\n```') == {"readability": 90}

    def test_json_in_prose(self) -> None:
        """Should find an object surrounded by prose."""
        assert parse_assessment('Here you go: {"readability": 90} hope it helps') == {"readability": 90}

    def test_garbage_raises(self) -> None:
        """Should raise ValueError when no object is present."""
        with pytest.raises(ValueError):
            parse_assessment("no json at all")


class TestAssess:
    """Test single and batch assessment."""

    @pytest.mark.asyncio
    async def test_uniform_80_is_accepted(self, quality_settings) -> None:
        """Should score 80/80/80/80 as 80 and accept it in normal mode."""
        # Arrange
        validator = QualityValidator(quality_settings, model=make_judge(judge_reply()))

        # Act
        metrics = await validator.assess({"question": "q", "answer": "a"}, ContentType.CUECARDS)
        decision = validator.is_quality_acceptable(metrics)

        # Assert
        assert metrics.overall_quality == 80
        assert metrics.should_regenerate is False
        assert decision.acceptable is True

    @pytest.mark.asyncio
    async def test_mixed_scores_auto_accepted(self, quality_settings) -> None:
        """Should weight uneven judge scores to 80 and accept without regeneration."""
        reply = judge_reply(factualAccuracy=90, educationalValue=80, readability=70, ageAppropriateness=60)
        validator = QualityValidator(quality_settings, model=make_judge(reply))

        metrics = await validator.assess("text", ContentType.MULTIPLE_CHOICE)

        assert metrics.overall_quality == 80
        assert metrics.should_regenerate is False
        assert validator.is_quality_acceptable(metrics).acceptable is True

    @pytest.mark.asyncio
    async def test_low_score_requests_regeneration(self, quality_settings) -> None:
        """Should flag scores under the regenerate threshold."""
        reply = judge_reply(factualAccuracy=40, readability=40, educationalValue=40, ageAppropriateness=40)
        validator = QualityValidator(quality_settings, model=make_judge(reply))

        metrics = await validator.assess("text", ContentType.SUMMARIES)

        assert metrics.overall_quality == 40
        assert metrics.should_regenerate is True

    @pytest.mark.asyncio
    async def test_judge_flag_requests_regeneration(self, quality_settings) -> None:
        """Should honour the judge's own regenerate flag."""
        validator = QualityValidator(quality_settings, model=make_judge(judge_reply(shouldRegenerate=True)))

        metrics = await validator.assess("text", ContentType.SUMMARIES)

        assert metrics.overall_quality == 80
        assert metrics.should_regenerate is True

    @pytest.mark.asyncio
    async def test_feedback_truncated(self, quality_settings) -> None:
        """Should keep at most five feedback entries."""
        reply = judge_reply(feedback=[f"note {i}" for i in range(8)])
        validator = QualityValidator(quality_settings, model=make_judge(reply))

        metrics = await validator.assess("text", None)

        assert metrics.feedback == [f"note {i}" for i in range(5)]

    @pytest.mark.asyncio
    async def test_out_of_range_scores_clamped(self, quality_settings) -> None:
        """Should clamp reported scores before weighting."""
        reply = judge_reply(factualAccuracy=140, readability=-3, educationalValue="n/a", ageAppropriateness=100)
        validator = QualityValidator(quality_settings, model=make_judge(reply))

        metrics = await validator.assess("text", ContentType.GOLDEN_NOTES)

        assert metrics.factual_accuracy == 100
        assert metrics.readability == 0
        assert metrics.educational_value == 70
        assert metrics.overall_quality == calculate_overall_quality(100, 70, 0, 100)

    @pytest.mark.asyncio
    async def test_model_failure_returns_fallback(self, quality_settings) -> None:
        """Should never raise when the judge call fails."""
        model = MagicMock()
        model.ainvoke = AsyncMock(side_effect=RuntimeError("quota"))
        validator = QualityValidator(quality_settings, model=model)

        metrics = await validator.assess("text", ContentType.CUECARDS)

        assert metrics == fallback_metrics()

    @pytest.mark.asyncio
    async def test_unparseable_reply_returns_fallback(self, quality_settings) -> None:
        """Should fall back when the judge reply has no JSON."""
        validator = QualityValidator(quality_settings, model=make_judge("I cannot score this."))

        metrics = await validator.assess("text", ContentType.CUECARDS)

        assert metrics.feedback == [FALLBACK_FEEDBACK]

    @pytest.mark.asyncio
    async def test_content_block_reply(self, quality_settings) -> None:
        """Should read judge replies delivered as content blocks."""
        model = MagicMock()
        model.ainvoke = AsyncMock(return_value=AIMessage(content=[{"type": "text", "text": judge_reply()}]))
        validator = QualityValidator(quality_settings, model=model)

        metrics = await validator.assess("text", ContentType.CUECARDS)

        assert metrics.overall_quality == 80
        assert metrics.feedback == ["Clear"]

    @pytest.mark.asyncio
    async def test_prompt_uses_type_specific_judge(self, quality_settings) -> None:
        """Should send the content type's judge persona and the grade level."""
        model = make_judge(judge_reply())
        validator = QualityValidator(quality_settings, model=model)

        await validator.assess(
            "text",
            ContentType.MULTIPLE_CHOICE,
            QualityValidationOptions(subject="Biology", grade_level="high"),
        )

        system_message, human_message = model.ainvoke.await_args.args[0]
        assert system_message.content == QUALITY_PROMPTS[ContentType.MULTIPLE_CHOICE].system
        assert "Biology" in human_message.content
        assert "high" in human_message.content

    @pytest.mark.asyncio
    async def test_batch_preserves_order(self, quality_settings) -> None:
        """Should score every item in batches and keep input order."""
        replies = [judge_reply(factualAccuracy=score) for score in (10, 20, 30, 40, 50, 60, 70)]
        model = make_judge(*replies)
        validator = QualityValidator(quality_settings, model=model)

        results = await validator.assess_batch([f"item {i}" for i in range(7)], ContentType.CUECARDS)

        assert len(results) == 7
        assert model.ainvoke.await_count == 7
        assert [m.factual_accuracy for m in results] == [10, 20, 30, 40, 50, 60, 70]


class TestAcceptance:
    """Test accept/reject decisions."""

    @pytest.fixture
    def validator(self, quality_settings) -> QualityValidator:
        return QualityValidator(quality_settings, model=MagicMock())

    def test_auto_approve_boundary(self, validator) -> None:
        """Should accept exactly at the approve threshold."""
        assert validator.is_quality_acceptable(scored(80)).acceptable is True

    def test_auto_reject_boundary(self, validator) -> None:
        """Should reject exactly at the reject threshold with the score in the reason."""
        decision = validator.is_quality_acceptable(scored(40))

        assert decision.acceptable is False
        assert decision.reason == "Quality score 40 below threshold 40"

    def test_borderline_low_factual_accuracy(self, validator) -> None:
        """Should reject borderline content with weak facts."""
        decision = validator.is_quality_acceptable(scored(60, factual=55))

        assert decision.acceptable is False
        assert decision.reason == "Factual accuracy too low"

    def test_borderline_low_educational_value(self, validator) -> None:
        """Should reject borderline content with little educational value."""
        decision = validator.is_quality_acceptable(scored(60, factual=70, educational=45))

        assert decision.acceptable is False
        assert decision.reason == "Educational value insufficient"

    def test_borderline_acceptable(self, validator) -> None:
        """Should accept borderline content with solid dimensions."""
        assert validator.is_quality_acceptable(scored(60)).acceptable is True

    def test_strict_thresholds(self, validator) -> None:
        """Should reject at 50 and not auto-approve 80 in strict mode."""
        assert validator.is_quality_acceptable(scored(50), strict=True).acceptable is False
        assert validator.is_quality_acceptable(scored(50), strict=False).acceptable is True
        assert validator.thresholds(strict=True).auto_approve == 85

    def test_strict_mode_from_settings(self, quality_settings) -> None:
        """Should default to the configured mode."""
        settings = quality_settings.model_copy(update={"strict_mode": True})
        validator = QualityValidator(settings, model=MagicMock())

        assert validator.is_quality_acceptable(scored(45)).acceptable is False
        assert validator.thresholds().regenerate == 60


class TestJudgePrompts:
    """Test judge prompt selection and rendering."""

    def test_every_content_type_has_a_judge(self) -> None:
        """Should define a judge persona per content type."""
        assert set(QUALITY_PROMPTS) == set(ContentType)

    def test_unknown_type_uses_generic_judge(self) -> None:
        """Should fall back to the generic judge."""
        assert get_judge_prompt(None).subject_noun == "study material"

    def test_prompt_requests_json_keys(self) -> None:
        """Should ask for every score key."""
        prompt = build_assessment_prompt(get_judge_prompt(ContentType.CUECARDS), "Q: A", None, "college")

        for key in ("factualAccuracy", "readability", "educationalValue", "ageAppropriateness", "shouldRegenerate"):
            assert key in prompt
