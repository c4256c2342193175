"""Concept maps strategy."""

from typing import Any

from studyloop.boundary.db.CRUD.content_crud import concept_map_crud
from studyloop.core.content_types import ContentType
from studyloop.core.generation.strategies.base import ContentStrategy
from studyloop.core.generation.strategies.prompts import (
    CONCEPT_MAPS_SYSTEM_PROMPT,
    CONCEPT_MAPS_USER_PROMPT,
)
from studyloop.core.models.content_items import ConceptMap
from studyloop.core.models.generation import ConceptMapsConfig


class ConceptMapsStrategy(ContentStrategy):
    content_type = ContentType.CONCEPT_MAPS
    item_model = ConceptMap
    crud = concept_map_crud
    system_prompt = CONCEPT_MAPS_SYSTEM_PROMPT
    user_prompt_template = CONCEPT_MAPS_USER_PROMPT

    def build_context(self, content: str, config: ConceptMapsConfig) -> dict[str, Any]:
        return {
            "content": content,
            "difficulty": config.difficulty,
            "focus": config.focus,
            "style": config.style,
        }

    def to_row(self, item: ConceptMap) -> dict[str, Any]:
        return {
            "title": item.title,
            "content": item.content.model_dump(),
            "style": item.style,
        }
