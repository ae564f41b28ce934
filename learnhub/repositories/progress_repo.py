"""
Progress Repositories - enrollments and lesson completion
"""
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.model.progress_models import Enrollment, LessonProgress
from learnhub.repositories.base_repo import BaseRepository
from learnhub.repositories.lesson_repo import LessonRepository


class EnrollmentRepository(BaseRepository[Enrollment]):

    def __init__(self, session: AsyncSession):
        super().__init__(Enrollment, session)

    async def get_enrollment(self, user_id: str, course_id: str) -> Optional[Enrollment]:
        query = (
            select(Enrollment)
            .where(Enrollment.user_id == user_id)
            .where(Enrollment.course_id == course_id)
        )
        result = await self.execute(query)
        return result.scalar_one_or_none()


class LessonProgressRepository(BaseRepository[LessonProgress]):

    def __init__(self, session: AsyncSession):
        super().__init__(LessonProgress, session)

    async def get_progress(self, user_id: str, lesson_id: str) -> Optional[LessonProgress]:
        query = (
            select(LessonProgress)
            .where(LessonProgress.user_id == user_id)
            .where(LessonProgress.lesson_id == lesson_id)
        )
        result = await self.execute(query)
        return result.scalar_one_or_none()

    async def count_completed_in_course(self, user_id: str, course_id: str) -> int:
        """
        Count the learner's completed lessons across every module of a course.
        """
        query = (
            select(func.count(LessonProgress.id))
            .where(LessonProgress.user_id == user_id)
            .where(LessonProgress.completed.is_(True))
            .where(LessonProgress.lesson_id.in_(LessonRepository.lesson_ids_for_course(course_id)))
        )
        result = await self.execute(query)
        return result.scalar() or 0
