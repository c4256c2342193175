"""Tests for content strategies and the strategy registry."""

from unittest.mock import MagicMock

import pytest

from studyloop.core.content_types import ContentType
from studyloop.core.exceptions import PersistenceError, StrategyNotFoundError
from studyloop.core.generation.strategies import (
    DEFAULT_STRATEGIES,
    ConceptMapsStrategy,
    CuecardsStrategy,
    GoldenNotesStrategy,
    MultipleChoiceStrategy,
    OpenQuestionsStrategy,
    SummariesStrategy,
    build_default_registry,
)
from studyloop.core.generation.strategy_registry import StrategyRegistry
from studyloop.core.models.generation import (
    CONFIG_TYPES,
    CuecardsConfig,
    MultipleChoiceConfig,
    SummariesConfig,
)


def valid_mcq(**overrides) -> dict:
    item = {
        "question": "What is 2 + 2?",
        "options": ["1", "2", "3", "4"],
        "correctAnswer": 3,
        "explanation": "Basic arithmetic.",
        "difficulty": "beginner",
    }
    item.update(overrides)
    return item


@pytest.fixture
def session_factory_stub() -> MagicMock:
    return MagicMock()


class TestStrategyRegistry:
    """Test content type dispatch."""

    def test_default_registry_covers_every_content_type(self, session_factory_stub) -> None:
        """Should register one strategy per content type."""
        registry = build_default_registry(session_factory_stub)

        assert set(registry.registered_content_types()) == set(ContentType)
        for content_type in ContentType:
            assert registry.get(content_type).content_type == content_type

    def test_get_accepts_string_value(self, session_factory_stub) -> None:
        """Should resolve wire names to strategies."""
        registry = build_default_registry(session_factory_stub)

        assert isinstance(registry.get("cuecards"), CuecardsStrategy)

    def test_unregistered_type_raises(self) -> None:
        """Should raise StrategyNotFoundError for a missing registration."""
        registry = StrategyRegistry()

        with pytest.raises(StrategyNotFoundError):
            registry.get(ContentType.SUMMARIES)

    def test_unknown_type_raises(self, session_factory_stub) -> None:
        """Should raise StrategyNotFoundError for an unknown name."""
        registry = build_default_registry(session_factory_stub)

        with pytest.raises(StrategyNotFoundError):
            registry.get("flashcards")
        assert registry.has("flashcards") is False

    def test_register_replaces(self, session_factory_stub) -> None:
        """Should let a later registration win."""
        registry = StrategyRegistry()
        replacement = MagicMock()
        registry.register(ContentType.CUECARDS, lambda: CuecardsStrategy(session_factory_stub))
        registry.register(ContentType.CUECARDS, lambda: replacement)

        assert registry.get(ContentType.CUECARDS) is replacement

    def test_factories_build_fresh_strategies(self, session_factory_stub) -> None:
        """Should not share strategy instances between runs."""
        registry = build_default_registry(session_factory_stub)

        assert registry.get(ContentType.CUECARDS) is not registry.get(ContentType.CUECARDS)


class TestPromptRendering:
    """Test that every strategy's context fills its templates."""

    @pytest.mark.parametrize("strategy_cls", DEFAULT_STRATEGIES)
    def test_prompt_renders_with_default_config(self, strategy_cls, session_factory_stub) -> None:
        """Should render system and user messages without missing variables."""
        # Arrange
        strategy = strategy_cls(session_factory_stub)
        config = CONFIG_TYPES[strategy.content_type]()

        # Act
        context = strategy.build_context("Photosynthesis converts light to energy.", config)
        messages = strategy.get_prompt().render(context)

        # Assert
        assert len(messages) == 2
        assert messages[0].type == "system"
        assert messages[1].type == "human"
        assert "Photosynthesis converts light to energy." in messages[1].content

    def test_summary_target_words_scale_with_count(self, session_factory_stub) -> None:
        """Should ask for 50 words per requested summary unit."""
        strategy = SummariesStrategy(session_factory_stub)

        context = strategy.build_context("text", SummariesConfig(count=4))

        assert context["target_words"] == 200
        assert "approximately 200 words" in strategy.get_prompt().render(context)[1].content

    def test_cuecards_context_carries_mode(self, session_factory_stub) -> None:
        """Should pass the card mode to the prompt."""
        strategy = CuecardsStrategy(session_factory_stub)

        context = strategy.build_context("text", CuecardsConfig(mode="definition", count=3))

        assert context["mode"] == "definition"
        assert context["count"] == 3


class TestOutputSchema:
    """Test structured output schemas."""

    @pytest.mark.parametrize("strategy_cls", DEFAULT_STRATEGIES)
    def test_schema_wraps_items_under_output_key(self, strategy_cls, session_factory_stub) -> None:
        """Should require a single array property named by the output key."""
        strategy = strategy_cls(session_factory_stub)

        schema = strategy.get_schema()

        assert list(schema["properties"].keys()) == [strategy.output_key]
        assert schema["properties"][strategy.output_key]["type"] == "array"
        assert schema["required"] == [strategy.output_key]

    def test_mcq_schema_uses_camel_case(self, session_factory_stub) -> None:
        """Should expose camelCase item fields to the model."""
        schema = MultipleChoiceStrategy(session_factory_stub).get_schema()

        item_schema = next(iter(schema["$defs"].values()))
        assert "correctAnswer" in item_schema["properties"]


class TestExtractArray:
    """Test unwrapping of the model's wrapper object."""

    def test_expected_key(self, session_factory_stub) -> None:
        """Should return the list under the output key."""
        strategy = MultipleChoiceStrategy(session_factory_stub)

        assert strategy.extract_array_from_object({"mcqs": [1, 2]}) == [1, 2]

    def test_bare_list(self, session_factory_stub) -> None:
        """Should accept a bare item list."""
        strategy = CuecardsStrategy(session_factory_stub)

        assert strategy.extract_array_from_object([{"question": "q"}]) == [{"question": "q"}]

    def test_single_unexpected_key(self, session_factory_stub) -> None:
        """Should accept a wrapper with one differently named list."""
        strategy = CuecardsStrategy(session_factory_stub)

        assert strategy.extract_array_from_object({"cards": ["a"], "note": "x"}) == ["a"]

    def test_ambiguous_wrapper_yields_empty(self, session_factory_stub) -> None:
        """Should give up when several unexpected lists are present."""
        strategy = CuecardsStrategy(session_factory_stub)

        assert strategy.extract_array_from_object({"a": [1], "b": [2]}) == []

    def test_unusable_output_yields_empty(self, session_factory_stub) -> None:
        """Should return an empty list for scalars and None."""
        strategy = SummariesStrategy(session_factory_stub)

        assert strategy.extract_array_from_object(None) == []
        assert strategy.extract_array_from_object("text") == []


class TestValidateItems:
    """Test per-item structural validation."""

    def test_mcq_requires_four_options(self, session_factory_stub) -> None:
        """Should drop questions with three options."""
        strategy = MultipleChoiceStrategy(session_factory_stub)

        valid, dropped = strategy.validate_items([valid_mcq(options=["a", "b", "c"]), valid_mcq()])

        assert len(valid) == 1
        assert dropped == 1

    def test_mcq_rejects_blank_options(self, session_factory_stub) -> None:
        """Should drop questions with empty or whitespace-only options."""
        strategy = MultipleChoiceStrategy(session_factory_stub)

        valid, dropped = strategy.validate_items([
            valid_mcq(options=["", " ", "", ""]),
            valid_mcq(options=["a", "b", "c", "   "]),
            valid_mcq(options=[" a ", "b", "c", "d"]),
        ])

        assert dropped == 2
        assert len(valid) == 1
        assert valid[0].options == ["a", "b", "c", "d"]

    def test_mcq_correct_answer_in_range(self, session_factory_stub) -> None:
        """Should drop questions whose answer index is outside 0..3."""
        strategy = MultipleChoiceStrategy(session_factory_stub)

        valid, dropped = strategy.validate_items([valid_mcq(correctAnswer=4), valid_mcq(correctAnswer=-1)])

        assert valid == []
        assert dropped == 2

    def test_golden_note_requires_title(self, session_factory_stub) -> None:
        """Should drop notes with blank titles."""
        strategy = GoldenNotesStrategy(session_factory_stub)

        valid, dropped = strategy.validate_items([
            {"title": "  ", "content": "c", "priority": 1},
            {"title": "Osmosis", "content": "Water movement", "priority": 1, "category": "Biology"},
        ])

        assert [note.title for note in valid] == ["Osmosis"]
        assert dropped == 1

    def test_open_question_requires_rubric(self, session_factory_stub) -> None:
        """Should drop open questions without a complete rubric."""
        strategy = OpenQuestionsStrategy(session_factory_stub)

        valid, dropped = strategy.validate_items([
            {
                "question": "Why?",
                "sampleAnswer": "Because.",
                "gradingRubric": {"excellent": "e", "good": "g"},
                "difficulty": "advanced",
            }
        ])

        assert valid == []
        assert dropped == 1

    def test_concept_map_edge_types(self, session_factory_stub) -> None:
        """Should reject unknown edge relationship types."""
        strategy = ConceptMapsStrategy(session_factory_stub)
        concept_map = {
            "title": "Cells",
            "style": "hierarchical",
            "content": {
                "nodes": [{"id": "n1", "label": "Cell", "type": "concept", "level": 0}],
                "edges": [{"source": "n1", "target": "n1", "type": "friends_with"}],
                "metadata": {
                    "central_concept": "Cell",
                    "complexity_level": "beginner",
                    "focus_area": "conceptual",
                    "style": "hierarchical",
                },
            },
        }

        _, dropped = strategy.validate_items([concept_map])

        assert dropped == 1


class TestToRow:
    """Test mapping validated items to table columns."""

    def test_summary_word_count_from_text(self, session_factory_stub) -> None:
        """Should count words in the summary text."""
        strategy = SummariesStrategy(session_factory_stub)
        valid, _ = strategy.validate_items([
            {"title": "Week 1", "content": "one two three four", "wordCount": 999}
        ])

        row = strategy.to_row(valid[0])

        assert row["word_count"] == 4
        assert row["summary_type"] == "general"

    def test_mcq_row(self, session_factory_stub) -> None:
        """Should map camelCase input onto snake_case columns."""
        strategy = MultipleChoiceStrategy(session_factory_stub)
        valid, _ = strategy.validate_items([valid_mcq()])

        row = strategy.to_row(valid[0])

        assert row["correct_answer"] == 3
        assert row["options"] == ["1", "2", "3", "4"]


class TestPersistGuard:
    """Test persistence preconditions."""

    @pytest.mark.asyncio
    async def test_empty_batch_refused(self, session_factory_stub) -> None:
        """Should never write an empty batch."""
        strategy = MultipleChoiceStrategy(session_factory_stub)

        with pytest.raises(PersistenceError):
            await strategy.persist([], "c1", "w1")

        session_factory_stub.assert_not_called()

    def test_config_types_cover_every_content_type(self) -> None:
        """Should map each content type to its own config variant."""
        assert set(CONFIG_TYPES) == set(ContentType)
        assert CONFIG_TYPES[ContentType.MULTIPLE_CHOICE] is MultipleChoiceConfig
