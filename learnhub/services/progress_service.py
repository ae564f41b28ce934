"""
Progress Aggregator - lesson completion and course progress per learner.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from learnhub.model.progress_models import Enrollment, LessonProgress
from learnhub.repositories.course_repo import CourseRepository
from learnhub.repositories.lesson_repo import LessonRepository
from learnhub.repositories.progress_repo import EnrollmentRepository, LessonProgressRepository
from learnhub.utils.exceptions import ResourceNotFoundException
from learnhub.utils.numbers import rounded_percentage
from learnhub.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


class ProgressService:

    def __init__(
            self,
            course_repository: CourseRepository,
            lesson_repository: LessonRepository,
            enrollment_repository: EnrollmentRepository,
            lesson_progress_repository: LessonProgressRepository,
            clock: Callable[[], datetime] = utc_now,
    ):
        self._courses = course_repository
        self._lessons = lesson_repository
        self._enrollments = enrollment_repository
        self._lesson_progress = lesson_progress_repository
        self._clock = clock

    async def enroll(self, user_id: str, course_id: str) -> Enrollment:
        """Enroll a learner; enrolling twice returns the existing row."""
        if not await self._courses.exists(course_id):
            raise ResourceNotFoundException(f"Course not found with ID: {course_id}")

        enrollment = await self._enrollments.get_enrollment(user_id, course_id)
        if enrollment:
            return enrollment

        enrollment = await self._enrollments.create({
            "user_id": user_id,
            "course_id": course_id,
            "enrolled_at": self._clock(),
            "progress_percentage": 0,
        })
        logger.info(f"User {user_id} enrolled in course {course_id}")
        return enrollment

    async def get_enrollment(self, user_id: str, course_id: str) -> Enrollment:
        enrollment = await self._enrollments.get_enrollment(user_id, course_id)
        if not enrollment:
            raise ResourceNotFoundException(
                f"User {user_id} is not enrolled in course {course_id}"
            )
        return enrollment

    async def mark_lesson_complete(self, user_id: str, lesson_id: str) -> LessonProgress:
        """
        Record a lesson as completed. Repeating the call keeps the first
        completed_at.
        """
        if not await self._lessons.exists(lesson_id):
            raise ResourceNotFoundException(f"Lesson not found with ID: {lesson_id}")

        progress = await self._lesson_progress.get_progress(user_id, lesson_id)
        if progress is None:
            return await self._lesson_progress.create({
                "user_id": user_id,
                "lesson_id": lesson_id,
                "completed": True,
                "completed_at": self._clock(),
            })

        if progress.completed:
            return progress

        return await self._lesson_progress.update(progress.id, {
            "completed": True,
            "completed_at": progress.completed_at or self._clock(),
        })

    async def recompute_enrollment_progress(self, user_id: str, course_id: str) -> Enrollment:
        """
        progress = completed lessons / all lessons of the course, as a rounded
        percentage (0 for a course without lessons). The first time it
        reaches 100 the enrollment's completed_at is stamped; it never moves
        afterwards.
        """
        enrollment = await self.get_enrollment(user_id, course_id)

        total = await self._lessons.count_for_course(course_id)
        completed = await self._lesson_progress.count_completed_in_course(user_id, course_id)
        percentage = rounded_percentage(completed, total)

        changes = {"progress_percentage": percentage}
        if percentage >= 100 and enrollment.completed_at is None:
            changes["completed_at"] = self._clock()
            logger.info(f"User {user_id} completed course {course_id}")

        logger.debug(f"Progress of {user_id} in {course_id}: {completed}/{total} = {percentage}%")
        return await self._enrollments.update(enrollment.id, changes)

    async def complete_lesson(self, user_id: str, lesson_id: str) -> Optional[Enrollment]:
        """
        Mark a lesson complete and refresh the learner's course progress.

        Returns:
            The updated enrollment, or None when the learner is not enrolled
            (e.g. a preview lesson)
        """
        await self.mark_lesson_complete(user_id, lesson_id)

        course_id = await self._lessons.get_course_id(lesson_id)
        if not await self._enrollments.get_enrollment(user_id, course_id):
            return None
        return await self.recompute_enrollment_progress(user_id, course_id)
