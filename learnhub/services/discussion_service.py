"""
Course discussion forum - titled threads with flat, chronological replies.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Callable

from learnhub.model.community_models import Discussion
from learnhub.repositories.course_repo import CourseRepository
from learnhub.repositories.discussion_repo import DiscussionRepository
from learnhub.schemas.community import ThreadView
from learnhub.utils.exceptions import (
    AccessDeniedException,
    ResourceNotFoundException,
    ValidationException,
)
from learnhub.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


def _require_text(value: str, what: str) -> str:
    if value is None or not value.strip():
        raise ValidationException(f"{what} is required")
    return value.strip()


class DiscussionService:

    def __init__(
            self,
            course_repository: CourseRepository,
            discussion_repository: DiscussionRepository,
            clock: Callable[[], datetime] = utc_now,
    ):
        self._courses = course_repository
        self._discussions = discussion_repository
        self._clock = clock

    async def list_threads(self, course_id: str) -> list[ThreadView]:
        """Threads newest first, each with its replies oldest first."""
        await self._require_course(course_id)

        threads = await self._discussions.get_threads(course_id)
        replies = await self._discussions.get_replies([thread.id for thread in threads])

        by_thread = defaultdict(list)
        for reply in replies:
            by_thread[reply.parent_id].append(reply)
        return [ThreadView.from_model(thread, by_thread[thread.id]) for thread in threads]

    async def create_thread(self, user_id: str, course_id: str, title: str, content: str) -> Discussion:
        title = _require_text(title, "Title")
        content = _require_text(content, "Content")
        await self._require_course(course_id)

        thread = await self._discussions.create({
            "course_id": course_id,
            "user_id": user_id,
            "title": title,
            "content": content,
            "posted_at": self._clock(),
        })
        logger.info(f"User {user_id} opened thread {thread.id} in course {course_id}")
        return thread

    async def reply(self, user_id: str, thread_id: str, content: str) -> Discussion:
        """Replies attach to a thread; replying to a reply is rejected."""
        content = _require_text(content, "Content")

        thread = await self._get_post(thread_id)
        if thread.parent_id is not None:
            raise ValidationException("Replies can only be posted to a thread")

        reply = await self._discussions.create({
            "course_id": thread.course_id,
            "user_id": user_id,
            "parent_id": thread.id,
            "content": content,
            "posted_at": self._clock(),
        })
        logger.info(f"User {user_id} replied to thread {thread.id}")
        return reply

    async def delete_post(self, user_id: str, post_id: str) -> None:
        """Authors delete their own posts; a thread takes its replies with it."""
        post = await self._get_post(post_id)
        if post.user_id != user_id:
            raise AccessDeniedException("Post belongs to another user")

        await self._discussions.delete_post_cascade(post.id)
        logger.info(f"User {user_id} deleted post {post.id}")

    async def _get_post(self, post_id: str) -> Discussion:
        post = await self._discussions.get_by_id(post_id)
        if not post:
            raise ResourceNotFoundException(f"Post not found with ID: {post_id}")
        return post

    async def _require_course(self, course_id: str) -> None:
        if not await self._courses.exists(course_id):
            raise ResourceNotFoundException(f"Course not found with ID: {course_id}")
