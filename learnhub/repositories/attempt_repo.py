"""
Quiz Attempt Repository
"""
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.model.quiz_models import QuizAttempt
from learnhub.repositories.base_repo import BaseRepository


class QuizAttemptRepository(BaseRepository[QuizAttempt]):

    def __init__(self, session: AsyncSession):
        super().__init__(QuizAttempt, session)

    async def start_attempt(self, user_id: str, quiz_id: str, started_at: datetime) -> QuizAttempt:
        return await self.create(
            {"user_id": user_id, "quiz_id": quiz_id, "started_at": started_at}
        )

    async def finalize(
            self,
            attempt_id: str,
            score: int,
            passed: bool,
            completed_at: datetime,
    ) -> bool:
        """
        Record the outcome of an attempt.

        The update only matches an attempt that has no completed_at yet, so
        an attempt is finalized at most once even across sessions.

        Returns:
            True if this call finalized the attempt
        """
        stmt = (
            update(QuizAttempt)
            .where(QuizAttempt.id == attempt_id)
            .where(QuizAttempt.completed_at.is_(None))
            .values(score=score, passed=passed, completed_at=completed_at)
        )
        result = await self.execute(stmt)
        await self.commit()
        return result.rowcount > 0

    async def get_attempts(self, user_id: str, quiz_id: str) -> Sequence[QuizAttempt]:
        return await self.get_by_filters(
            {"user_id": user_id, "quiz_id": quiz_id},
            order_by="started_at",
        )

    async def get_best_attempt(self, user_id: str, quiz_id: str) -> Optional[QuizAttempt]:
        """Highest scoring completed attempt, earliest first on ties."""
        query = (
            select(QuizAttempt)
            .where(QuizAttempt.user_id == user_id)
            .where(QuizAttempt.quiz_id == quiz_id)
            .where(QuizAttempt.completed_at.is_not(None))
            .order_by(QuizAttempt.score.desc(), QuizAttempt.completed_at)
            .limit(1)
        )
        result = await self.execute(query)
        return result.scalar_one_or_none()
