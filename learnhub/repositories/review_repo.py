"""
Review Repository - course ratings left by learners
"""
from typing import Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.model.community_models import Review
from learnhub.repositories.base_repo import BaseRepository


class ReviewRepository(BaseRepository[Review]):

    def __init__(self, session: AsyncSession):
        super().__init__(Review, session)

    async def get_user_review(self, user_id: str, course_id: str) -> Optional[Review]:
        query = (
            select(Review)
            .where(Review.user_id == user_id)
            .where(Review.course_id == course_id)
        )
        result = await self.execute(query)
        return result.scalar_one_or_none()

    async def get_published(self, course_id: str) -> Sequence[Review]:
        """Moderated reviews of a course, newest first."""
        return await self.get_by_filters(
            {"course_id": course_id, "is_moderated": True},
            order_by="posted_at", order_desc=True,
        )

    async def get_rating_counts(self, course_id: str) -> dict[int, int]:
        """Number of moderated reviews per rating value."""
        query = (
            select(Review.rating, func.count(Review.id))
            .where(Review.course_id == course_id)
            .where(Review.is_moderated.is_(True))
            .group_by(Review.rating)
        )
        result = await self.execute(query)
        return {rating: count for rating, count in result.all()}

    async def delete_for_course(self, course_id: str, commit: bool = False) -> int:
        return await self.bulk_delete({"course_id": course_id}, commit=commit)
