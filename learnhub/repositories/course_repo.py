"""
Course Repository - Data access layer for courses
"""

from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from learnhub.model.course_models import Course, Module
from learnhub.repositories.base_repo import BaseRepository
from learnhub.repositories.discussion_repo import DiscussionRepository
from learnhub.repositories.module_repo import ModuleRepository
from learnhub.repositories.progress_repo import EnrollmentRepository
from learnhub.repositories.review_repo import ReviewRepository


class CourseRepository(BaseRepository[Course]):
    """
    Repository for Course entity
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Course, session)
        self._modules = ModuleRepository(session)
        self._enrollments = EnrollmentRepository(session)
        self._reviews = ReviewRepository(session)
        self._discussions = DiscussionRepository(session)

    async def get_by_slug(self, slug: str) -> Optional[Course]:
        return await self.get_by_field("slug", slug)

    async def slug_taken(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        query = select(Course.id).where(Course.slug == slug)
        if exclude_id:
            query = query.where(Course.id != exclude_id)
        result = await self.execute(query)
        return result.first() is not None

    async def get_published(self, skip: int = 0, limit: int = 100) -> Sequence[Course]:
        return await self.get_by_filters(
            {"is_published": True}, order_by="created_date", order_desc=True,
            skip=skip, limit=limit,
        )

    async def get_course_outline(self, course_id: str) -> Optional[Course]:
        """
        Get a course with modules and lessons eagerly loaded.
        """
        query = (
            select(Course)
            .options(
                selectinload(Course.modules).selectinload(Module.lessons)
            )
            .where(Course.id == course_id)
            .execution_options(populate_existing=True)
        )

        result = await self.execute(query)
        return result.scalar_one_or_none()

    async def delete_course_cascade(self, course_id: str, commit: bool = True) -> bool:
        """
        Delete a course with its modules, lessons, quizzes, enrollments,
        reviews and discussions.

        Returns:
            True if the course existed
        """
        await self._modules.delete_for_course(course_id)
        await self._enrollments.bulk_delete({"course_id": course_id}, commit=False)
        await self._reviews.delete_for_course(course_id)
        await self._discussions.delete_for_course(course_id)
        return await self.delete(course_id, commit=commit)
