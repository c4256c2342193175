"""Cuecards strategy."""

from typing import Any

from studyloop.boundary.db.CRUD.content_crud import cuecard_crud
from studyloop.core.content_types import ContentType
from studyloop.core.generation.strategies.base import ContentStrategy
from studyloop.core.generation.strategies.prompts import (
    CUECARDS_SYSTEM_PROMPT,
    CUECARDS_USER_PROMPT,
)
from studyloop.core.models.content_items import Cuecard
from studyloop.core.models.generation import CuecardsConfig


class CuecardsStrategy(ContentStrategy):
    content_type = ContentType.CUECARDS
    item_model = Cuecard
    crud = cuecard_crud
    system_prompt = CUECARDS_SYSTEM_PROMPT
    user_prompt_template = CUECARDS_USER_PROMPT

    def build_context(self, content: str, config: CuecardsConfig) -> dict[str, Any]:
        return {
            "content": content,
            "difficulty": config.difficulty,
            "focus": config.focus,
            "count": config.count,
            "mode": config.mode,
        }

    def to_row(self, item: Cuecard) -> dict[str, Any]:
        return {
            "question": item.question,
            "answer": item.answer,
            "difficulty": item.difficulty,
        }
