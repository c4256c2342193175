"""
Content generation strategy registry.

Maps a content type to a factory producing its strategy. A registry is an
explicit object handed to the pipeline, not process-wide state; every
content type must be registered before a pipeline asks for it.

Dependencies: studyloop.core.content_types
System role: Content type dispatch for the generation pipeline
"""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from studyloop.core.content_types import ContentType
from studyloop.core.exceptions import StrategyNotFoundError

if TYPE_CHECKING:
    from studyloop.core.generation.strategies.base import ContentStrategy

logger = logging.getLogger(__name__)

StrategyFactory = Callable[[], "ContentStrategy"]


class StrategyRegistry:
    """
    Content type -> strategy factory map.

    Usage:
        registry = StrategyRegistry()
        registry.register(ContentType.CUECARDS, lambda: CuecardsStrategy(session_factory))
        strategy = registry.get(ContentType.CUECARDS)
    """

    def __init__(self) -> None:
        self._factories: dict[ContentType, StrategyFactory] = {}

    def register(self, content_type: ContentType, factory: StrategyFactory) -> None:
        """
        Register (or replace) the factory for a content type.

        Args:
            content_type: Content type handled by the factory's strategies
            factory: Zero-argument callable returning a strategy
        """
        if content_type in self._factories:
            logger.warning(
                f"{__name__}:register - Replacing strategy",
                extra={"content_type": content_type.value},
            )
        self._factories[content_type] = factory

    def get(self, content_type: ContentType | str) -> "ContentStrategy":
        """
        Build the strategy for a content type.

        Raises:
            StrategyNotFoundError: When nothing is registered for the type
        """
        try:
            factory = self._factories[ContentType(content_type)]
        except (KeyError, ValueError):
            raise StrategyNotFoundError(str(getattr(content_type, "value", content_type))) from None
        return factory()

    def has(self, content_type: ContentType | str) -> bool:
        try:
            return ContentType(content_type) in self._factories
        except ValueError:
            return False

    def registered_content_types(self) -> list[ContentType]:
        return list(self._factories.keys())
