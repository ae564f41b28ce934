"""
Course catalogue - create, edit, publish and delete courses.
"""

import logging
import re
from typing import Optional, Sequence

from learnhub.model.course_models import Course
from learnhub.repositories.course_repo import CourseRepository
from learnhub.schemas.course import CourseCreate, CourseUpdate
from learnhub.utils.exceptions import ResourceNotFoundException, ValidationException

logger = logging.getLogger(__name__)

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """'Intro to Python 3!' -> 'intro-to-python-3'"""
    return _NON_SLUG_CHARS.sub("-", text.lower()).strip("-")


class CourseService:

    def __init__(self, course_repository: CourseRepository):
        self._courses = course_repository

    async def create_course(self, instructor_id: str, request: CourseCreate) -> Course:
        if not request.title.strip():
            raise ValidationException("Course title is required")

        slug = await self._unique_slug(request.slug or request.title)
        data = request.model_dump(exclude={"slug"})
        data.update(slug=slug, instructor_id=instructor_id)

        course = await self._courses.create(data)
        logger.info(f"Instructor {instructor_id} created course {course.id} ({slug})")
        return course

    async def update_course(self, course_id: str, request: CourseUpdate) -> Course:
        course = await self.get_course(course_id)

        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        if "title" in changes and not changes["title"].strip():
            raise ValidationException("Course title is required")
        if "slug" in changes:
            changes["slug"] = await self._unique_slug(changes["slug"], exclude_id=course.id)

        if not changes:
            return course
        return await self._courses.update(course.id, changes)

    async def get_course(self, course_id: str) -> Course:
        course = await self._courses.get_by_id(course_id)
        if not course:
            raise ResourceNotFoundException(f"Course not found with ID: {course_id}")
        return course

    async def get_course_by_slug(self, slug: str) -> Course:
        course = await self._courses.get_by_slug(slug)
        if not course:
            raise ResourceNotFoundException(f"Course not found with slug: {slug}")
        return course

    async def list_published(self, skip: int = 0, limit: int = 100) -> Sequence[Course]:
        return await self._courses.get_published(skip=skip, limit=limit)

    async def delete_course(self, course_id: str) -> None:
        """Delete a course and everything under it."""
        if not await self._courses.delete_course_cascade(course_id):
            raise ResourceNotFoundException(f"Course not found with ID: {course_id}")
        logger.info(f"Deleted course {course_id}")

    async def _unique_slug(self, source: str, exclude_id: Optional[str] = None) -> str:
        slug = slugify(source)
        if not slug:
            raise ValidationException(f"Cannot build a slug from {source!r}")
        if await self._courses.slug_taken(slug, exclude_id=exclude_id):
            raise ValidationException(f"Slug already in use: {slug}")
        return slug
