"""
Lesson Repository - Data access layer for lessons within modules
"""
from typing import Optional, Sequence

from sqlalchemy import select, delete, update, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from learnhub.model.course_models import Module, Lesson
from learnhub.model.progress_models import LessonProgress
from learnhub.repositories.base_repo import BaseRepository
from learnhub.repositories.quiz_repo import QuizRepository


class LessonRepository(BaseRepository[Lesson]):
    """
    Repository for Lesson entity with module/course context queries
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Lesson, session)
        self._quizzes = QuizRepository(session)

    async def get_lessons_by_module_id(self, module_id: str) -> Sequence[Lesson]:
        """
        Get all lessons of a module ordered by order_index.
        """
        query = (
            select(Lesson)
            .where(Lesson.module_id == module_id)
            .order_by(Lesson.order_index)
        )

        result = await self.execute(query)
        return result.scalars().all()

    async def get_order_indices(self, module_id: str) -> list[int]:
        query = select(Lesson.order_index).where(Lesson.module_id == module_id)
        result = await self.execute(query)
        return list(result.scalars().all())

    async def get_ids_in_order(self, module_id: str) -> list[str]:
        query = (
            select(Lesson.id)
            .where(Lesson.module_id == module_id)
            .order_by(Lesson.order_index, Lesson.created_date)
        )
        result = await self.execute(query)
        return list(result.scalars().all())

    async def apply_order(self, positions: list[tuple[str, int]], commit: bool = True) -> None:
        """Write new order_index values for a set of sibling lessons."""
        for lesson_id, order_index in positions:
            await self.execute(
                update(Lesson).where(Lesson.id == lesson_id).values(order_index=order_index)
            )
        await self._finish(commit)

    async def get_course_id(self, lesson_id: str) -> Optional[str]:
        """Resolve the course a lesson belongs to via its module."""
        query = (
            select(Module.course_id)
            .join(Lesson, Lesson.module_id == Module.id)
            .where(Lesson.id == lesson_id)
        )
        result = await self.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    def lesson_ids_for_course(course_id: str) -> Select:
        """
        Select of every lesson id across all modules of a course.

        SQL equivalent:
            SELECT l.id FROM lessons l
            JOIN modules m ON l.module_id = m.id
            WHERE m.course_id = :course_id
        """
        return (
            select(Lesson.id)
            .join(Module, Lesson.module_id == Module.id)
            .where(Module.course_id == course_id)
        )

    async def count_for_course(self, course_id: str) -> int:
        query = select(func.count()).select_from(
            self.lesson_ids_for_course(course_id).subquery()
        )
        result = await self.execute(query)
        return result.scalar() or 0

    # ==================== CASCADES ====================

    async def delete_for_modules(self, module_ids: Select, commit: bool = False) -> None:
        """Delete the lessons of the selected modules and everything below them."""
        lesson_ids = select(Lesson.id).where(Lesson.module_id.in_(module_ids))

        await self._quizzes.delete_for_lessons(lesson_ids)
        await self.execute(delete(LessonProgress).where(LessonProgress.lesson_id.in_(lesson_ids)))
        await self.execute(delete(Lesson).where(Lesson.module_id.in_(module_ids)))
        await self._finish(commit)

    async def delete_lesson_cascade(self, lesson_id: str, commit: bool = True) -> bool:
        """
        Delete a lesson with its quiz (questions, answers, attempts) and
        learner completion rows.

        Returns:
            True if the lesson existed
        """
        lesson_ids = select(Lesson.id).where(Lesson.id == lesson_id)

        await self._quizzes.delete_for_lessons(lesson_ids)
        await self.execute(delete(LessonProgress).where(LessonProgress.lesson_id == lesson_id))
        return await self.delete(lesson_id, commit=commit)
