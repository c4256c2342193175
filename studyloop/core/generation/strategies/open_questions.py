"""Open questions strategy."""

from typing import Any

from studyloop.boundary.db.CRUD.content_crud import open_question_crud
from studyloop.core.content_types import ContentType
from studyloop.core.generation.strategies.base import ContentStrategy
from studyloop.core.generation.strategies.prompts import (
    OPEN_QUESTIONS_SYSTEM_PROMPT,
    OPEN_QUESTIONS_USER_PROMPT,
)
from studyloop.core.models.content_items import OpenQuestion
from studyloop.core.models.generation import OpenQuestionsConfig


class OpenQuestionsStrategy(ContentStrategy):
    content_type = ContentType.OPEN_QUESTIONS
    item_model = OpenQuestion
    crud = open_question_crud
    system_prompt = OPEN_QUESTIONS_SYSTEM_PROMPT
    user_prompt_template = OPEN_QUESTIONS_USER_PROMPT

    def build_context(self, content: str, config: OpenQuestionsConfig) -> dict[str, Any]:
        return {
            "content": content,
            "difficulty": config.difficulty,
            "count": config.count,
        }

    def to_row(self, item: OpenQuestion) -> dict[str, Any]:
        return {
            "question": item.question,
            "sample_answer": item.sample_answer,
            "grading_rubric": item.grading_rubric.model_dump(),
            "difficulty": item.difficulty,
        }
