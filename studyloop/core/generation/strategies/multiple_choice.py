"""Multiple choice questions strategy."""

from typing import Any

from studyloop.boundary.db.CRUD.content_crud import multiple_choice_crud
from studyloop.core.content_types import ContentType
from studyloop.core.generation.strategies.base import ContentStrategy
from studyloop.core.generation.strategies.prompts import MCQ_SYSTEM_PROMPT, MCQ_USER_PROMPT
from studyloop.core.models.content_items import MultipleChoiceQuestion
from studyloop.core.models.generation import MultipleChoiceConfig


class MultipleChoiceStrategy(ContentStrategy):
    content_type = ContentType.MULTIPLE_CHOICE
    item_model = MultipleChoiceQuestion
    crud = multiple_choice_crud
    system_prompt = MCQ_SYSTEM_PROMPT
    user_prompt_template = MCQ_USER_PROMPT

    def build_context(self, content: str, config: MultipleChoiceConfig) -> dict[str, Any]:
        return {
            "content": content,
            "difficulty": config.difficulty,
            "count": config.count,
        }

    def to_row(self, item: MultipleChoiceQuestion) -> dict[str, Any]:
        return {
            "question": item.question,
            "options": list(item.options),
            "correct_answer": item.correct_answer,
            "explanation": item.explanation,
            "difficulty": item.difficulty,
        }
