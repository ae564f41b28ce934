"""
Discussion Repository - forum threads and their replies
"""
from typing import Sequence

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.model.community_models import Discussion
from learnhub.repositories.base_repo import BaseRepository


class DiscussionRepository(BaseRepository[Discussion]):

    def __init__(self, session: AsyncSession):
        super().__init__(Discussion, session)

    async def get_threads(self, course_id: str) -> Sequence[Discussion]:
        """Top-level posts of a course, newest first."""
        return await self.get_by_filters(
            {"course_id": course_id, "parent_id": None},
            order_by="posted_at", order_desc=True,
        )

    async def get_replies(self, thread_ids: list[str]) -> Sequence[Discussion]:
        """Replies to the given threads, oldest first."""
        if not thread_ids:
            return []
        query = (
            select(Discussion)
            .where(Discussion.parent_id.in_(thread_ids))
            .order_by(Discussion.posted_at, Discussion.id)
        )
        result = await self.execute(query)
        return result.scalars().all()

    async def delete_post_cascade(self, post_id: str, commit: bool = True) -> bool:
        """
        Delete a post together with its replies.

        Returns:
            True if the post existed
        """
        await self.bulk_delete({"parent_id": post_id}, commit=False)
        return await self.delete(post_id, commit=commit)

    async def delete_for_course(self, course_id: str, commit: bool = False) -> int:
        """Delete every post of a course, replies before their threads."""
        await self.execute(
            delete(Discussion)
            .where(Discussion.course_id == course_id)
            .where(Discussion.parent_id.is_not(None))
        )
        return await self.bulk_delete({"course_id": course_id}, commit=commit)
