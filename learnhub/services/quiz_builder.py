"""
Quiz Authoring Model.

Editing a quiz happens on an immutable QuizDraft through the pure functions
below; QuizAuthoringService validates the draft and persists it in one
transaction. Question and answer positions always equal their list index.
"""

import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from learnhub.clients.redis_client import RedisClient
from learnhub.config import get_settings
from learnhub.model.quiz_models import Quiz
from learnhub.repositories.lesson_repo import LessonRepository
from learnhub.repositories.quiz_repo import QuizRepository
from learnhub.schemas.quiz import AnswerDraft, QuestionDraft, QuizDraft
from learnhub.utils.exceptions import ResourceNotFoundException, ValidationException

logger = logging.getLogger(__name__)


# =============================
#   Draft editing
# =============================
def _renumber_answers(answers) -> tuple[AnswerDraft, ...]:
    return tuple(a.model_copy(update={"order_index": i}) for i, a in enumerate(answers))


def _renumber_questions(questions) -> tuple[QuestionDraft, ...]:
    return tuple(q.model_copy(update={"order_index": i}) for i, q in enumerate(questions))


def _question_at(draft: QuizDraft, index: int) -> QuestionDraft:
    if not 0 <= index < len(draft.questions):
        raise ValidationException(f"No question at position {index}")
    return draft.questions[index]


def _replace_question(draft: QuizDraft, index: int, question: QuestionDraft) -> QuizDraft:
    questions = list(draft.questions)
    questions[index] = question
    return draft.model_copy(update={"questions": tuple(questions)})


def _revalidate(model, changes: dict):
    try:
        return model.model_validate({**model.model_dump(), **changes})
    except PydanticValidationError as e:
        raise ValidationException(str(e)) from e


def add_question(draft: QuizDraft) -> QuizDraft:
    """Append a blank question pre-seeded with two blank answers."""
    question = QuestionDraft(
        order_index=len(draft.questions),
        answers=(AnswerDraft(order_index=0), AnswerDraft(order_index=1)),
    )
    return draft.model_copy(update={"questions": draft.questions + (question,)})


def remove_question(draft: QuizDraft, index: int) -> QuizDraft:
    _question_at(draft, index)
    remaining = draft.questions[:index] + draft.questions[index + 1:]
    return draft.model_copy(update={"questions": _renumber_questions(remaining)})


def update_question(draft: QuizDraft, index: int, **changes) -> QuizDraft:
    """Change question_text, question_type or points of one question."""
    question = _question_at(draft, index)
    changes.pop("answers", None)
    changes.pop("order_index", None)
    return _replace_question(draft, index, _revalidate(question, changes))


def add_answer(draft: QuizDraft, question_index: int) -> QuizDraft:
    question = _question_at(draft, question_index)
    limit = get_settings().max_answers_per_question
    if len(question.answers) >= limit:
        raise ValidationException(f"A question can have at most {limit} answers")

    answers = question.answers + (AnswerDraft(order_index=len(question.answers)),)
    return _replace_question(draft, question_index, question.model_copy(update={"answers": answers}))


def remove_answer(draft: QuizDraft, question_index: int, answer_index: int) -> QuizDraft:
    question = _question_at(draft, question_index)
    floor = get_settings().min_answers_per_question
    if not 0 <= answer_index < len(question.answers):
        raise ValidationException(f"No answer at position {answer_index}")
    if len(question.answers) <= floor:
        raise ValidationException(f"A question must keep at least {floor} answers")

    remaining = question.answers[:answer_index] + question.answers[answer_index + 1:]
    return _replace_question(
        draft, question_index, question.model_copy(update={"answers": _renumber_answers(remaining)})
    )


def update_answer(draft: QuizDraft, question_index: int, answer_index: int, **changes) -> QuizDraft:
    """Change answer_text or is_correct of one answer."""
    question = _question_at(draft, question_index)
    if not 0 <= answer_index < len(question.answers):
        raise ValidationException(f"No answer at position {answer_index}")

    changes.pop("order_index", None)
    answers = list(question.answers)
    answers[answer_index] = _revalidate(answers[answer_index], changes)
    return _replace_question(
        draft, question_index, question.model_copy(update={"answers": tuple(answers)})
    )


def validate_draft(draft: QuizDraft) -> None:
    """
    Check a draft is complete enough to save.

    Raises:
        ValidationException: on the first problem found
    """
    settings = get_settings()

    if not draft.title.strip():
        raise ValidationException("Please enter a quiz title")
    if not draft.questions:
        raise ValidationException("Please add at least one question")

    for position, question in enumerate(draft.questions, start=1):
        if not question.question_text.strip():
            raise ValidationException("All questions must have text")
        if not settings.min_answers_per_question <= len(question.answers) <= settings.max_answers_per_question:
            raise ValidationException(
                f"Question {position} must have between {settings.min_answers_per_question} "
                f"and {settings.max_answers_per_question} answers"
            )
        if not any(answer.is_correct for answer in question.answers):
            raise ValidationException("Each question must have at least one correct answer")


# =============================
#   Persistence
# =============================
class QuizAuthoringService:
    """
    Loads and saves complete quiz definitions.

    A save replaces the quiz's whole question set: existing questions (and
    their answers) are deleted and the draft's are inserted, all inside one
    transaction and under a per-lesson lock so a concurrent reader never
    sees a half-written quiz.
    """

    def __init__(
            self,
            quiz_repository: QuizRepository,
            lesson_repository: LessonRepository,
            lock_client: RedisClient,
    ):
        self._quizzes = quiz_repository
        self._lessons = lesson_repository
        self._locks = lock_client

    async def load_draft(self, lesson_id: str) -> QuizDraft:
        """Draft of the lesson's quiz, or a fresh draft when it has none."""
        if not await self._lessons.exists(lesson_id):
            raise ResourceNotFoundException(f"Lesson not found with ID: {lesson_id}")

        quiz = await self._quizzes.get_by_lesson_id(lesson_id)
        if not quiz:
            return QuizDraft(
                lesson_id=lesson_id,
                passing_score=get_settings().default_passing_score,
            )

        quiz = await self._quizzes.get_with_questions(quiz.id)
        return QuizDraft.from_model(quiz)

    async def save(self, draft: QuizDraft) -> QuizDraft:
        """
        Validate and persist a draft.

        Returns:
            The saved quiz reloaded as a draft (with store ids)

        Raises:
            ValidationException: before any write
            ResourceNotFoundException: lesson or edited quiz missing
            PersistenceException: the store rejected the save; nothing was
                written and the caller's draft is unchanged
        """
        validate_draft(draft)

        if not await self._lessons.exists(draft.lesson_id):
            raise ResourceNotFoundException(f"Lesson not found with ID: {draft.lesson_id}")

        async with self._locks.acquire_lock(RedisClient.quiz_lock_key(draft.lesson_id)):
            try:
                quiz_id = await self._write(draft)
                await self._quizzes.commit()
            except Exception:
                await self._quizzes.rollback()
                raise

        logger.info(f"Saved quiz {quiz_id} with {len(draft.questions)} questions")
        return await self.load_draft(draft.lesson_id)

    async def _write(self, draft: QuizDraft) -> str:
        fields = {
            "title": draft.title.strip(),
            "description": draft.description,
            "passing_score": draft.passing_score,
            "time_limit_minutes": draft.time_limit_minutes,
        }

        quiz = await self._existing_quiz(draft)
        if quiz:
            await self._quizzes.update(quiz.id, fields, commit=False)
            removed = await self._quizzes.delete_questions_for_quiz(quiz.id)
            logger.debug(f"Replacing {removed} questions of quiz {quiz.id}")
        else:
            quiz = await self._quizzes.create({"lesson_id": draft.lesson_id, **fields}, commit=False)

        for question in draft.questions:
            await self._quizzes.add_question(quiz.id, {
                "question_text": question.question_text.strip(),
                "question_type": question.question_type.value,
                "points": question.points,
                "order_index": question.order_index,
                "answers": [
                    {
                        "answer_text": answer.answer_text,
                        "is_correct": answer.is_correct,
                        "order_index": answer.order_index,
                    }
                    for answer in question.answers
                ],
            })
        return quiz.id

    async def _existing_quiz(self, draft: QuizDraft) -> Optional[Quiz]:
        if draft.quiz_id:
            quiz = await self._quizzes.get_by_id(draft.quiz_id)
            if not quiz or quiz.lesson_id != draft.lesson_id:
                raise ResourceNotFoundException(f"Quiz not found with ID: {draft.quiz_id}")
            return quiz
        # A lesson owns at most one quiz: saving a new draft replaces it
        return await self._quizzes.get_by_lesson_id(draft.lesson_id)
