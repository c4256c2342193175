"""
Generated content CRUD operations.

One CRUD singleton per generated content table.

Dependencies: sqlalchemy, studyloop.boundary.db.models.content_models
System role: Generated artifact persistence
"""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from studyloop.boundary.db.CRUD.base_crud import BaseCRUD, ModelT
from studyloop.boundary.db.models.content_models import (
    ConceptMapModel,
    CuecardModel,
    GoldenNoteModel,
    MultipleChoiceQuestionModel,
    OpenQuestionModel,
    SummaryModel,
)


class GeneratedContentCRUD(BaseCRUD[ModelT]):
    """CRUD operations shared by every generated content table."""

    async def list_by_week(
        self,
        session: AsyncSession,
        course_id: str,
        week_id: str,
    ) -> Sequence[ModelT]:
        """
        Retrieve a course week's items in insertion order.

        Args:
            session: Async database session
            course_id: Owning course
            week_id: Owning week

        Returns:
            Items for the week
        """
        stmt = (
            select(self.model)
            .where(self.model.course_id == course_id, self.model.week_id == week_id)
            .order_by(self.model.created_at)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


golden_note_crud = GeneratedContentCRUD(GoldenNoteModel)
cuecard_crud = GeneratedContentCRUD(CuecardModel)
multiple_choice_crud = GeneratedContentCRUD(MultipleChoiceQuestionModel)
open_question_crud = GeneratedContentCRUD(OpenQuestionModel)
summary_crud = GeneratedContentCRUD(SummaryModel)
concept_map_crud = GeneratedContentCRUD(ConceptMapModel)
