"""
Content generation strategies.

Exports one strategy per content type and build_default_registry(),
which registers all of them against a session factory.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studyloop.core.generation.strategies.base import ContentStrategy, PromptPair
from studyloop.core.generation.strategies.concept_maps import ConceptMapsStrategy
from studyloop.core.generation.strategies.cuecards import CuecardsStrategy
from studyloop.core.generation.strategies.golden_notes import GoldenNotesStrategy
from studyloop.core.generation.strategies.multiple_choice import MultipleChoiceStrategy
from studyloop.core.generation.strategies.open_questions import OpenQuestionsStrategy
from studyloop.core.generation.strategies.summaries import SummariesStrategy
from studyloop.core.generation.strategy_registry import StrategyRegistry

DEFAULT_STRATEGIES: tuple[type[ContentStrategy], ...] = (
    GoldenNotesStrategy,
    CuecardsStrategy,
    MultipleChoiceStrategy,
    OpenQuestionsStrategy,
    SummariesStrategy,
    ConceptMapsStrategy,
)


def build_default_registry(session_factory: async_sessionmaker[AsyncSession]) -> StrategyRegistry:
    """
    Register every built-in strategy.

    Args:
        session_factory: Session factory handed to each strategy for persistence

    Returns:
        StrategyRegistry: Registry covering all content types
    """
    registry = StrategyRegistry()
    for strategy_cls in DEFAULT_STRATEGIES:
        registry.register(
            strategy_cls.content_type,
            lambda cls=strategy_cls: cls(session_factory),
        )
    return registry


__all__ = [
    "ContentStrategy",
    "PromptPair",
    "GoldenNotesStrategy",
    "CuecardsStrategy",
    "MultipleChoiceStrategy",
    "OpenQuestionsStrategy",
    "SummariesStrategy",
    "ConceptMapsStrategy",
    "DEFAULT_STRATEGIES",
    "build_default_registry",
]
