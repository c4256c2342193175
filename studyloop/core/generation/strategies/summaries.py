"""Summaries strategy."""

from typing import Any

from studyloop.boundary.db.CRUD.content_crud import summary_crud
from studyloop.core.content_types import ContentType
from studyloop.core.generation.strategies.base import ContentStrategy
from studyloop.core.generation.strategies.prompts import (
    SUMMARIES_SYSTEM_PROMPT,
    SUMMARIES_USER_PROMPT,
)
from studyloop.core.models.content_items import Summary
from studyloop.core.models.generation import SummariesConfig

WORDS_PER_COUNT = 50


class SummariesStrategy(ContentStrategy):
    content_type = ContentType.SUMMARIES
    item_model = Summary
    crud = summary_crud
    system_prompt = SUMMARIES_SYSTEM_PROMPT
    user_prompt_template = SUMMARIES_USER_PROMPT

    def build_context(self, content: str, config: SummariesConfig) -> dict[str, Any]:
        return {
            "content": content,
            "difficulty": config.difficulty,
            "count": config.count,
            "length": config.length,
            "target_words": config.count * WORDS_PER_COUNT,
        }

    def to_row(self, item: Summary) -> dict[str, Any]:
        # Trust the text over the model's own count
        word_count = len(item.content.split())
        return {
            "title": item.title,
            "content": item.content,
            "word_count": word_count,
            "summary_type": item.summary_type,
        }
