"""Tests for the strategy-driven generation pipeline."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from studyloop.core.content_types import ContentType
from studyloop.core.exceptions import (
    EmptyGenerationError,
    GenerationBackendError,
    NoContentFoundError,
    PersistenceError,
    StrategyNotFoundError,
    ValidationError,
)
from studyloop.core.generation.chunk_retriever import ChunkRetriever
from studyloop.core.generation.pipeline import GenerationPipeline, is_empty_item
from studyloop.core.generation.strategies import CuecardsStrategy, build_default_registry
from studyloop.core.generation.strategy_registry import StrategyRegistry
from studyloop.core.models.generation import (
    ChunkRetrievalResult,
    CuecardsConfig,
    GenerationRequest,
    SummariesConfig,
)
from studyloop.core.models.quality import QualityDecision, QualityMetrics


def make_request(**overrides) -> GenerationRequest:
    fields = {
        "content_type": ContentType.CUECARDS,
        "course_id": "course-1",
        "week_id": "week-1",
        "material_ids": ["m-1"],
        "config": CuecardsConfig(count=3),
        "user_id": "user-1",
    }
    fields.update(overrides)
    return GenerationRequest(**fields)


def card(question: str = "What is ATP?", answer: str = "Energy currency", difficulty: str = "beginner") -> dict:
    return {"question": question, "answer": answer, "difficulty": difficulty}


def metrics(overall: int, factual: int = 80, educational: int = 80) -> QualityMetrics:
    return QualityMetrics(
        factual_accuracy=factual,
        readability=80,
        educational_value=educational,
        age_appropriateness=80,
        overall_quality=overall,
        feedback=[],
        should_regenerate=False,
    )


@pytest.fixture
def retriever() -> AsyncMock:
    mock = AsyncMock(spec=ChunkRetriever)
    mock.retrieve.return_value = ChunkRetrievalResult(
        content="ATP stores energy.",
        chunks=["ATP stores energy."],
        cache_hit=False,
        chunk_count=1,
        source="database",
    )
    return mock


@pytest.fixture
def backend() -> MagicMock:
    mock = MagicMock()
    mock.model_name = "test-model"
    mock.generate = AsyncMock(return_value={"cuecards": [card(), card("What is DNA?", "Genetic code")]})
    return mock


@pytest.fixture
def persist_mock():
    with patch.object(CuecardsStrategy, "persist", new_callable=AsyncMock) as mock:
        yield mock


@pytest.fixture
def pipeline(retriever, backend, mock_usage_tracker, generation_settings) -> GenerationPipeline:
    return GenerationPipeline(
        build_default_registry(MagicMock()),
        retriever,
        backend,
        usage_tracker=mock_usage_tracker,
        settings=generation_settings,
    )


class TestIsEmptyItem:
    """Test empty item detection."""

    def test_blank_fields(self) -> None:
        """Should treat all-blank dicts as empty."""
        assert is_empty_item({"question": "  ", "answer": None, "tags": []}) is True

    def test_populated_field(self) -> None:
        """Should treat any populated field as content."""
        assert is_empty_item({"question": "", "answer": "x"}) is False

    def test_empty_dict_and_none(self) -> None:
        """Should treat empty containers and None as empty."""
        assert is_empty_item({}) is True
        assert is_empty_item(None) is True


class TestPipelineSuccess:
    """Test the successful path."""

    @pytest.mark.asyncio
    async def test_execute_persists_valid_items(self, pipeline, persist_mock, retriever, backend) -> None:
        """Should generate, validate and persist every valid item."""
        # Act
        result = await pipeline.execute(make_request())

        # Assert
        assert result.success is True
        assert result.content_type == ContentType.CUECARDS
        assert result.generated_count == 2
        assert result.error is None
        assert result.metadata["data_valid"] is True
        assert result.metadata["source"] == "database"
        assert result.metadata["chunk_count"] == 1

        persisted_items, course_id, week_id = persist_mock.await_args.args
        assert [item.question for item in persisted_items] == ["What is ATP?", "What is DNA?"]
        assert (course_id, week_id) == ("course-1", "week-1")

        retriever.retrieve.assert_awaited_once_with(["m-1"], cache_key=None, content_type="cuecards")
        context = backend.generate.await_args.args[1]
        assert context["content"] == "ATP stores energy."
        assert context["count"] == 3

    @pytest.mark.asyncio
    async def test_cache_key_forwarded(self, pipeline, persist_mock, retriever) -> None:
        """Should pass the batch cache key to the retriever."""
        await pipeline.execute(make_request(cache_key="c:w:abc"))

        assert retriever.retrieve.await_args.kwargs["cache_key"] == "c:w:abc"

    @pytest.mark.asyncio
    async def test_usage_event_sent(self, pipeline, persist_mock, mock_usage_tracker) -> None:
        """Should send one analytics event with the analytics name."""
        await pipeline.execute(make_request())
        await pipeline.wait_for_background_tasks()

        name, properties = mock_usage_tracker.track_content_generated.await_args.args
        assert name == "cuecard"
        assert properties["items_generated"] == 2
        assert properties["model"] == "test-model"
        assert properties["user_id"] == "user-1"

    @pytest.mark.asyncio
    async def test_usage_failure_does_not_fail_run(self, pipeline, persist_mock, mock_usage_tracker) -> None:
        """Should swallow analytics errors."""
        mock_usage_tracker.track_content_generated.side_effect = RuntimeError("analytics down")

        result = await pipeline.execute(make_request())
        await pipeline.wait_for_background_tasks()

        assert result.success is True
        mock_usage_tracker.track_content_generated.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_usage_not_awaited_before_return(self, pipeline, persist_mock, mock_usage_tracker) -> None:
        """Should return without waiting for a slow analytics sink."""
        release = asyncio.Event()

        async def slow_track(*_args):
            await release.wait()

        mock_usage_tracker.track_content_generated.side_effect = slow_track

        result = await asyncio.wait_for(pipeline.execute(make_request()), timeout=1)

        assert result.success is True
        release.set()
        await pipeline.wait_for_background_tasks()

    @pytest.mark.asyncio
    async def test_runs_without_usage_tracker(self, retriever, backend, persist_mock, generation_settings) -> None:
        """Should skip analytics when no tracker is configured."""
        pipeline = GenerationPipeline(
            build_default_registry(MagicMock()), retriever, backend, settings=generation_settings
        )

        result = await pipeline.execute(make_request())

        assert result.success is True


class TestPipelineValidation:
    """Test request validation."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides,field",
        [
            ({"material_ids": []}, "material_ids"),
            ({"course_id": ""}, "course_id"),
            ({"week_id": "  "}, "week_id"),
            ({"config": SummariesConfig()}, "config"),
        ],
    )
    async def test_invalid_request(self, pipeline, retriever, overrides, field) -> None:
        """Should reject incomplete requests before touching any dependency."""
        with pytest.raises(ValidationError) as exc_info:
            await pipeline.execute(make_request(**overrides))

        assert exc_info.value.details["field"] == field
        retriever.retrieve.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unregistered_strategy(self, retriever, backend, generation_settings) -> None:
        """Should fail when the registry lacks the content type."""
        pipeline = GenerationPipeline(StrategyRegistry(), retriever, backend, settings=generation_settings)

        with pytest.raises(StrategyNotFoundError):
            await pipeline.execute(make_request())


class TestPipelineFailures:
    """Test fail-fast error propagation."""

    @pytest.mark.asyncio
    async def test_no_content_safe_result(self, pipeline, retriever, backend) -> None:
        """Should return a failed result naming the content type."""
        # Arrange
        retriever.retrieve.side_effect = NoContentFoundError("cuecards", ["m-1"])

        # Act
        result = await pipeline.execute_safely(make_request())

        # Assert
        assert result.success is False
        assert result.content_type == ContentType.CUECARDS
        assert result.generated_count == 0
        assert result.error == "No content chunks found for cuecards"
        backend.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_content_raises_from_execute(self, pipeline, retriever) -> None:
        """Should propagate the error from execute()."""
        retriever.retrieve.side_effect = NoContentFoundError("cuecards", ["m-1"])

        with pytest.raises(NoContentFoundError):
            await pipeline.execute(make_request())

    @pytest.mark.asyncio
    async def test_backend_error_propagates(self, pipeline, backend, persist_mock) -> None:
        """Should not persist anything when generation fails."""
        backend.generate.side_effect = GenerationBackendError("boom", content_type="cuecards")

        with pytest.raises(GenerationBackendError):
            await pipeline.execute(make_request())

        persist_mock.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_items(self, pipeline, backend, persist_mock) -> None:
        """Should fail on an empty item list."""
        backend.generate.return_value = {"cuecards": []}

        with pytest.raises(EmptyGenerationError) as exc_info:
            await pipeline.execute(make_request())

        assert exc_info.value.message == "Generation returned no items"
        persist_mock.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_first_item(self, pipeline, backend, persist_mock) -> None:
        """Should fail when the first item has no content."""
        backend.generate.return_value = {"cuecards": [{"question": "", "answer": " "}, card()]}

        with pytest.raises(EmptyGenerationError) as exc_info:
            await pipeline.execute(make_request())

        assert exc_info.value.message == "Generation returned an empty first item"

    @pytest.mark.asyncio
    async def test_all_items_invalid(self, pipeline, backend, persist_mock) -> None:
        """Should persist nothing when every item fails validation."""
        backend.generate.return_value = {"cuecards": [{"question": "q"}, {"answer": "a"}]}

        with pytest.raises(EmptyGenerationError) as exc_info:
            await pipeline.execute(make_request())

        assert exc_info.value.message == "All generated items failed validation"
        assert exc_info.value.details["dropped_count"] == 2
        persist_mock.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_partial_invalid_items(self, pipeline, backend, persist_mock) -> None:
        """Should persist only valid items and report the drop."""
        backend.generate.return_value = {"cuecards": [card(), {"question": "orphan"}, card("Q2?")]}

        result = await pipeline.execute(make_request())

        assert result.generated_count == 2
        assert result.metadata["dropped_count"] == 1
        assert result.metadata["data_valid"] is False
        assert len(persist_mock.await_args.args[0]) == 2

    @pytest.mark.asyncio
    async def test_persistence_error_propagates(self, pipeline, persist_mock) -> None:
        """Should surface persistence failures from execute()."""
        persist_mock.side_effect = PersistenceError("write failed", table="cuecards")

        with pytest.raises(PersistenceError):
            await pipeline.execute(make_request())

    @pytest.mark.asyncio
    async def test_persistence_error_safe_result(self, pipeline, persist_mock) -> None:
        """Should report persistence failures from execute_safely()."""
        persist_mock.side_effect = PersistenceError("write failed", table="cuecards")

        result = await pipeline.execute_safely(make_request())

        assert result.success is False
        assert result.error == "write failed"
        assert result.metadata["error_type"] == "PersistenceError"

    @pytest.mark.asyncio
    async def test_failed_run_sends_no_usage(self, pipeline, backend, mock_usage_tracker) -> None:
        """Should only track successful runs."""
        backend.generate.return_value = {"cuecards": []}

        await pipeline.execute_safely(make_request())
        await pipeline.wait_for_background_tasks()

        mock_usage_tracker.track_content_generated.assert_not_awaited()


class TestQualityGate:
    """Test the optional quality gate."""

    def make_pipeline(self, retriever, backend, generation_settings, validator, enabled: bool = True):
        settings = generation_settings.model_copy(update={"quality_gate_enabled": enabled})
        return GenerationPipeline(
            build_default_registry(MagicMock()),
            retriever,
            backend,
            quality_validator=validator,
            settings=settings,
        )

    def make_validator(self, scores: list[int]) -> MagicMock:
        validator = MagicMock()
        validator.assess_batch = AsyncMock(return_value=[metrics(score) for score in scores])
        validator.is_quality_acceptable.side_effect = lambda m: QualityDecision(
            acceptable=m.overall_quality >= 50,
            reason=None if m.overall_quality >= 50 else "low",
        )
        return validator

    @pytest.mark.asyncio
    async def test_rejected_items_dropped(self, retriever, backend, persist_mock, generation_settings) -> None:
        """Should persist only accepted items."""
        validator = self.make_validator([90, 20])
        pipeline = self.make_pipeline(retriever, backend, generation_settings, validator)

        result = await pipeline.execute(make_request())

        assert result.generated_count == 1
        assert result.metadata["rejected_count"] == 1
        assert [item.question for item in persist_mock.await_args.args[0]] == ["What is ATP?"]
        payloads = validator.assess_batch.await_args.args[0]
        assert payloads[0]["question"] == "What is ATP?"

    @pytest.mark.asyncio
    async def test_all_rejected(self, retriever, backend, persist_mock, generation_settings) -> None:
        """Should fail the run when the gate rejects everything."""
        pipeline = self.make_pipeline(retriever, backend, generation_settings, self.make_validator([10, 10]))

        with pytest.raises(EmptyGenerationError) as exc_info:
            await pipeline.execute(make_request())

        assert exc_info.value.message == "All generated items were rejected by the quality gate"
        persist_mock.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_gate_disabled(self, retriever, backend, persist_mock, generation_settings) -> None:
        """Should skip scoring when the gate is off."""
        validator = self.make_validator([10, 10])
        pipeline = self.make_pipeline(retriever, backend, generation_settings, validator, enabled=False)

        result = await pipeline.execute(make_request())

        assert result.generated_count == 2
        validator.assess_batch.assert_not_awaited()
