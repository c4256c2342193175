"""Golden notes strategy."""

from typing import Any

from studyloop.boundary.db.CRUD.content_crud import golden_note_crud
from studyloop.core.content_types import ContentType
from studyloop.core.generation.strategies.base import ContentStrategy
from studyloop.core.generation.strategies.prompts import (
    GOLDEN_NOTES_SYSTEM_PROMPT,
    GOLDEN_NOTES_USER_PROMPT,
)
from studyloop.core.models.content_items import GoldenNote
from studyloop.core.models.generation import GoldenNotesConfig


class GoldenNotesStrategy(ContentStrategy):
    content_type = ContentType.GOLDEN_NOTES
    item_model = GoldenNote
    crud = golden_note_crud
    system_prompt = GOLDEN_NOTES_SYSTEM_PROMPT
    user_prompt_template = GOLDEN_NOTES_USER_PROMPT

    def build_context(self, content: str, config: GoldenNotesConfig) -> dict[str, Any]:
        return {
            "content": content,
            "difficulty": config.difficulty,
            "focus": config.focus,
            "count": config.count,
        }

    def to_row(self, item: GoldenNote) -> dict[str, Any]:
        return {
            "title": item.title,
            "content": item.content,
            "priority": item.priority,
            "category": item.category,
        }
