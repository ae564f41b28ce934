"""
Module Repository - Data access layer for the modules of a course
"""
from typing import Sequence

from sqlalchemy import select, delete, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.model.course_models import Module, Lesson
from learnhub.repositories.base_repo import BaseRepository
from learnhub.repositories.lesson_repo import LessonRepository


class ModuleRepository(BaseRepository[Module]):
    """
    Repository for Module entity
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Module, session)
        self._lessons = LessonRepository(session)

    async def get_modules_with_lesson_count(self, course_id: str) -> Sequence[tuple[Module, int]]:
        """
        Get the modules of a course in order, each with its lesson count.

        SQL equivalent:
            SELECT m.*, COUNT(l.id) FROM modules m
            LEFT JOIN lessons l ON l.module_id = m.id
            WHERE m.course_id = :course_id
            GROUP BY m.id ORDER BY m.order_index
        """
        query = (
            select(Module, func.count(Lesson.id))
            .outerjoin(Lesson, Lesson.module_id == Module.id)
            .where(Module.course_id == course_id)
            .group_by(Module.id)
            .order_by(Module.order_index)
        )

        result = await self.execute(query)
        return [(module, count) for module, count in result.all()]

    async def get_order_indices(self, course_id: str) -> list[int]:
        query = select(Module.order_index).where(Module.course_id == course_id)
        result = await self.execute(query)
        return list(result.scalars().all())

    async def get_ids_in_order(self, course_id: str) -> list[str]:
        query = (
            select(Module.id)
            .where(Module.course_id == course_id)
            .order_by(Module.order_index, Module.created_date)
        )
        result = await self.execute(query)
        return list(result.scalars().all())

    async def apply_order(self, positions: list[tuple[str, int]], commit: bool = True) -> None:
        """Write new order_index values for a set of sibling modules."""
        for module_id, order_index in positions:
            await self.execute(
                update(Module).where(Module.id == module_id).values(order_index=order_index)
            )
        await self._finish(commit)

    async def delete_module_cascade(self, module_id: str, commit: bool = True) -> bool:
        """
        Delete a module with all of its lessons and their quizzes.

        Returns:
            True if the module existed
        """
        await self._lessons.delete_for_modules(
            select(Module.id).where(Module.id == module_id)
        )
        return await self.delete(module_id, commit=commit)

    async def delete_for_course(self, course_id: str, commit: bool = False) -> None:
        module_ids = select(Module.id).where(Module.course_id == course_id)
        await self._lessons.delete_for_modules(module_ids)
        await self.execute(delete(Module).where(Module.course_id == course_id))
        await self._finish(commit)
