"""
Quiz Repository - Data access layer for quizzes, questions and answers
"""
from typing import Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from learnhub.model.quiz_models import Quiz, Question, Answer, QuizAttempt
from learnhub.repositories.base_repo import BaseRepository


class QuizRepository(BaseRepository[Quiz]):
    """
    Repository for Quiz entities and the questions/answers they own.

    Cascades are explicit statements, children first, so they hold on
    stores that do not enforce foreign-key cascades.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Quiz, session)

    async def get_by_lesson_id(self, lesson_id: str) -> Optional[Quiz]:
        return await self.get_by_field("lesson_id", lesson_id)

    async def get_with_questions(self, quiz_id: str) -> Optional[Quiz]:
        """
        Get a quiz with questions and answers eagerly loaded, both ordered
        by order_index.
        """
        query = (
            select(Quiz)
            .options(
                selectinload(Quiz.questions).selectinload(Question.answers)
            )
            .where(Quiz.id == quiz_id)
            .execution_options(populate_existing=True)
        )

        result = await self.execute(query)
        return result.scalar_one_or_none()

    async def add_question(self, quiz_id: str, question_data: dict) -> Question:
        """
        Stage a question and its answers inside the open transaction.

        Args:
            quiz_id: Owning quiz
            question_data: {"question_text", "question_type", "points",
                "order_index", "answers": [{"answer_text", "is_correct",
                "order_index"}, ...]}
        """
        question = Question(
            quiz_id=quiz_id,
            question_text=question_data["question_text"],
            question_type=question_data["question_type"],
            points=question_data["points"],
            order_index=question_data["order_index"],
        )
        self.session.add(question)
        await self.flush()

        self.session.add_all([
            Answer(
                question_id=question.id,
                answer_text=ans["answer_text"],
                is_correct=ans["is_correct"],
                order_index=ans["order_index"],
            )
            for ans in question_data.get("answers", [])
        ])
        await self.flush()
        return question

    # ==================== CASCADES ====================

    async def delete_questions_for_quiz(self, quiz_id: str, commit: bool = False) -> int:
        """Delete every question of a quiz together with its answers."""
        question_ids = select(Question.id).where(Question.quiz_id == quiz_id)
        await self.execute(delete(Answer).where(Answer.question_id.in_(question_ids)))
        result = await self.execute(delete(Question).where(Question.quiz_id == quiz_id))
        await self._finish(commit)
        return result.rowcount

    async def delete_for_lessons(self, lesson_ids: Select, commit: bool = False) -> None:
        """Delete the quizzes (and everything they own) of the selected lessons."""
        quiz_ids = select(Quiz.id).where(Quiz.lesson_id.in_(lesson_ids))
        question_ids = select(Question.id).where(Question.quiz_id.in_(quiz_ids))

        await self.execute(delete(Answer).where(Answer.question_id.in_(question_ids)))
        await self.execute(delete(Question).where(Question.quiz_id.in_(quiz_ids)))
        await self.execute(delete(QuizAttempt).where(QuizAttempt.quiz_id.in_(quiz_ids)))
        await self.execute(delete(Quiz).where(Quiz.lesson_id.in_(lesson_ids)))
        await self._finish(commit)

    async def delete_quiz_cascade(self, quiz_id: str, commit: bool = True) -> bool:
        """
        Delete a quiz with its questions, answers and attempts.

        Returns:
            True if the quiz existed
        """
        await self.delete_questions_for_quiz(quiz_id)
        await self.execute(delete(QuizAttempt).where(QuizAttempt.quiz_id == quiz_id))
        return await self.delete(quiz_id, commit=commit)
