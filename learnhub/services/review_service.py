"""
Course reviews - one star rating (and optional comment) per enrolled
learner, plus the course's rating summary.
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from learnhub.model.community_models import Review
from learnhub.repositories.course_repo import CourseRepository
from learnhub.repositories.progress_repo import EnrollmentRepository
from learnhub.repositories.review_repo import ReviewRepository
from learnhub.schemas.community import ReviewStats
from learnhub.utils.exceptions import (
    AccessDeniedException,
    ResourceNotFoundException,
    ValidationException,
)
from learnhub.utils.time_utils import utc_now

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class ReviewService:

    def __init__(
            self,
            course_repository: CourseRepository,
            enrollment_repository: EnrollmentRepository,
            review_repository: ReviewRepository,
            clock: Callable[[], datetime] = utc_now,
    ):
        self._courses = course_repository
        self._enrollments = enrollment_repository
        self._reviews = review_repository
        self._clock = clock

    async def submit_review(
            self,
            user_id: str,
            course_id: str,
            rating: int,
            comment: Optional[str] = None,
    ) -> Review:
        """
        Create the learner's review of a course, or replace it when one
        exists. A blank comment is stored as None.
        """
        if not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationException(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
        await self._require_course(course_id)
        if not await self._enrollments.get_enrollment(user_id, course_id):
            raise AccessDeniedException("Only enrolled learners can review a course")

        comment = comment.strip() if comment else None
        changes = {"rating": rating, "comment": comment or None, "is_moderated": True}

        existing = await self._reviews.get_user_review(user_id, course_id)
        if existing:
            logger.info(f"User {user_id} changed their review of course {course_id} to {rating}")
            return await self._reviews.update(existing.id, changes)

        review = await self._reviews.create({
            "user_id": user_id,
            "course_id": course_id,
            "posted_at": self._clock(),
            **changes,
        })
        logger.info(f"User {user_id} rated course {course_id} {rating}/5")
        return review

    async def get_user_review(self, user_id: str, course_id: str) -> Optional[Review]:
        return await self._reviews.get_user_review(user_id, course_id)

    async def list_reviews(self, course_id: str) -> Sequence[Review]:
        await self._require_course(course_id)
        return await self._reviews.get_published(course_id)

    async def get_stats(self, course_id: str) -> ReviewStats:
        """Average, count and per-star distribution of the published reviews."""
        await self._require_course(course_id)

        counts = await self._reviews.get_rating_counts(course_id)
        distribution = {star: counts.get(star, 0) for star in range(MAX_RATING, MIN_RATING - 1, -1)}
        total = sum(distribution.values())
        if total == 0:
            return ReviewStats(distribution=distribution)

        average = sum(star * count for star, count in distribution.items()) / total
        return ReviewStats(average_rating=average, total_reviews=total, distribution=distribution)

    async def delete_review(self, user_id: str, course_id: str) -> None:
        review = await self._reviews.get_user_review(user_id, course_id)
        if not review:
            raise ResourceNotFoundException(f"No review by {user_id} for course {course_id}")
        await self._reviews.delete(review.id)
        logger.info(f"User {user_id} deleted their review of course {course_id}")

    async def _require_course(self, course_id: str) -> None:
        if not await self._courses.exists(course_id):
            raise ResourceNotFoundException(f"Course not found with ID: {course_id}")
