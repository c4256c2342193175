"""
Content generation strategy base class.

A strategy bundles everything content-type specific: prompt templates,
prompt context, output schema, unwrapping of the model's response, item
validation and persistence. The pipeline only talks to this interface.

Dependencies: pydantic, langchain_core, sqlalchemy, studyloop.boundary.db
System role: Per content type behaviour behind the generic pipeline
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from langchain_core.messages import BaseMessage
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, ValidationError as PydanticValidationError, create_model
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studyloop.boundary.db.base import utc_now
from studyloop.boundary.db.CRUD.content_crud import GeneratedContentCRUD
from studyloop.boundary.db.CRUD.feature_status_crud import course_week_feature_crud
from studyloop.boundary.db.models.feature_status_model import FeatureStatus
from studyloop.core.content_types import OUTPUT_KEYS, ContentType
from studyloop.core.exceptions import PersistenceError
from studyloop.core.models.content_items import ContentItem
from studyloop.core.models.generation import BaseContentConfig

logger = logging.getLogger(__name__)


class PromptPair(BaseModel):
    """System prompt plus user prompt template for one content type."""

    system_prompt: str
    user_prompt_template: str

    def to_chat_template(self) -> ChatPromptTemplate:
        return ChatPromptTemplate.from_messages([
            ("system", self.system_prompt),
            ("human", self.user_prompt_template),
        ])

    def render(self, context: dict[str, Any]) -> list[BaseMessage]:
        """Fill the templates with a strategy's prompt context."""
        return self.to_chat_template().format_messages(**context)


class ContentStrategy(ABC):
    """
    Base class for content generation strategies.

    Subclasses set the class attributes and implement build_context()
    and to_row().
    """

    content_type: ContentType
    item_model: type[ContentItem]
    crud: GeneratedContentCRUD
    system_prompt: str
    user_prompt_template: str

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Initialize strategy.

        Args:
            session_factory: Async session factory used by persist()
        """
        self._session_factory = session_factory

    @property
    def output_key(self) -> str:
        """Key the model wraps its item list under."""
        return OUTPUT_KEYS[self.content_type]

    @abstractmethod
    def build_context(self, content: str, config: BaseContentConfig) -> dict[str, Any]:
        """
        Assemble prompt variables.

        Args:
            content: Combined chunk text
            config: Content type configuration

        Returns:
            dict: Values for every placeholder in the user prompt template
        """

    @abstractmethod
    def to_row(self, item: ContentItem) -> dict[str, Any]:
        """Map a validated item to its table's column values."""

    def get_prompt(self) -> PromptPair:
        return PromptPair(
            system_prompt=self.system_prompt,
            user_prompt_template=self.user_prompt_template,
        )

    def get_output_model(self) -> type[BaseModel]:
        """Wrapper model: {output_key: [item, ...]}."""
        return create_model(
            f"{self.item_model.__name__}Output",
            **{self.output_key: (list[self.item_model], ...)},
        )

    def get_schema(self) -> dict[str, Any]:
        """JSON schema of the expected model output (camelCase field names)."""
        return self.get_output_model().model_json_schema(by_alias=True)

    def extract_array_from_object(self, raw_output: Any) -> list[Any]:
        """
        Unwrap the model's wrapper object into its item list.

        Accepts the wrapper object, a bare list, or a wrapper whose single
        key differs from the expected one.

        Args:
            raw_output: Structured output returned by the generation backend

        Returns:
            list: Raw items (unvalidated); empty when nothing usable was found
        """
        if isinstance(raw_output, BaseModel):
            raw_output = raw_output.model_dump(by_alias=True)

        if isinstance(raw_output, list):
            return raw_output

        if isinstance(raw_output, dict):
            items = raw_output.get(self.output_key)
            if isinstance(items, list):
                return items

            list_values = [value for value in raw_output.values() if isinstance(value, list)]
            if len(list_values) == 1:
                logger.warning(
                    f"{__name__}:extract_array_from_object - Unexpected wrapper key",
                    extra={"content_type": self.content_type.value, "keys": list(raw_output.keys())},
                )
                return list_values[0]

        return []

    def validate_items(self, raw_items: list[Any]) -> tuple[list[ContentItem], int]:
        """
        Validate raw items against the item model.

        Args:
            raw_items: Items from extract_array_from_object()

        Returns:
            tuple: (valid items, number of dropped items)
        """
        valid: list[ContentItem] = []
        dropped = 0
        for position, raw_item in enumerate(raw_items):
            try:
                valid.append(self.item_model.model_validate(raw_item))
            except PydanticValidationError as e:
                dropped += 1
                logger.warning(
                    f"{__name__}:validate_items - Dropping invalid item",
                    extra={
                        "content_type": self.content_type.value,
                        "position": position,
                        "errors": e.error_count(),
                    },
                )
        return valid, dropped

    async def persist(self, items: list[ContentItem], course_id: str, week_id: str) -> None:
        """
        Write items and mark the feature generated, in one transaction.

        Args:
            items: Validated items
            course_id: Owning course
            week_id: Owning week

        Raises:
            PersistenceError: When asked to persist an empty batch
        """
        if not items:
            raise PersistenceError(
                "Refusing to persist an empty batch",
                table=self.crud.model.__tablename__,
            )

        rows = [{"course_id": course_id, "week_id": week_id, **self.to_row(item)} for item in items]

        async with self._session_factory() as session, session.begin():
            await self.crud.create_many(session, rows)
            await course_week_feature_crud.upsert(
                session,
                course_id,
                week_id,
                self.content_type,
                status=FeatureStatus.COMPLETED,
                generated_count=len(rows),
                generated_at=utc_now(),
                error=None,
            )

        logger.info(
            f"{__name__}:persist - Saved generated items",
            extra={
                "content_type": self.content_type.value,
                "course_id": course_id,
                "week_id": week_id,
                "count": len(rows),
            },
        )
