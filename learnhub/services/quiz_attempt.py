"""
Quiz Attempt Engine - drives one learner's pass through a quiz.

    loading -> in_progress -> submitted

An attempt is an immutable AttemptState. ``start`` creates the attempt row,
``select_answer`` and ``tick`` produce new states, ``submit`` scores the
selections and finalizes the row exactly once. CountdownTimer feeds ``tick``
once per second for timed quizzes.
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Mapping, Optional, Sequence

from learnhub.clients.redis_client import RedisClient
from learnhub.model.enums import AttemptStatus
from learnhub.repositories.attempt_repo import QuizAttemptRepository
from learnhub.repositories.quiz_repo import QuizRepository
from learnhub.schemas.quiz import AttemptState, AttemptView, QuestionSnapshot, QuizSnapshot
from learnhub.utils.exceptions import (
    AccessDeniedException,
    AttemptPersistenceException,
    PersistenceException,
    ResourceNotFoundException,
    ValidationException,
)
from learnhub.utils.numbers import rounded_percentage
from learnhub.utils.time_utils import as_utc, utc_now

logger = logging.getLogger(__name__)


# =============================
#   Scoring
# =============================
def is_question_correct(question: QuestionSnapshot, selected_ids: Sequence[str]) -> bool:
    """All-or-nothing: the selection must equal the set of correct answers."""
    correct_ids = {answer.id for answer in question.answers if answer.is_correct}
    return set(selected_ids) == correct_ids and len(selected_ids) == len(correct_ids)


def score_selections(
        quiz: QuizSnapshot, selections: Mapping[str, Sequence[str]]
) -> tuple[int, bool]:
    """
    Score a set of selections against a quiz.

    Returns:
        (score 0-100, passed). A quiz worth no points scores 0 and fails.
    """
    total_points = sum(question.points for question in quiz.questions)
    if total_points <= 0:
        return 0, False

    earned_points = sum(
        question.points
        for question in quiz.questions
        if is_question_correct(question, selections.get(question.id, ()))
    )
    score = rounded_percentage(earned_points, total_points)
    return score, score >= quiz.passing_score


# =============================
#   Engine
# =============================
class QuizAttemptEngine:
    """
    Attempt lifecycle operations. Holds no per-attempt state itself; the
    only shared piece is the lock client that serializes submissions.
    """

    def __init__(
            self,
            quiz_repository: QuizRepository,
            attempt_repository: QuizAttemptRepository,
            lock_client: RedisClient,
            clock: Callable[[], datetime] = utc_now,
    ):
        self._quizzes = quiz_repository
        self._attempts = attempt_repository
        self._locks = lock_client
        self._clock = clock

    async def load_quiz(self, quiz_id: str) -> QuizSnapshot:
        quiz = await self._quizzes.get_with_questions(quiz_id)
        if not quiz:
            raise ResourceNotFoundException(f"Quiz not found with ID: {quiz_id}")
        return QuizSnapshot.from_model(quiz)

    async def start(self, user_id: str, quiz_id: str) -> AttemptState:
        """
        Load the quiz and open a new attempt row. Failures propagate to the
        caller; nothing is retried.
        """
        quiz = await self.load_quiz(quiz_id)

        started_at = self._clock()
        attempt = await self._attempts.start_attempt(user_id, quiz_id, started_at)
        logger.info(f"User {user_id} started attempt {attempt.id} on quiz {quiz_id}")

        return AttemptState(
            attempt_id=attempt.id,
            user_id=user_id,
            quiz=quiz,
            status=AttemptStatus.IN_PROGRESS,
            time_remaining=quiz.time_limit_minutes * 60 if quiz.time_limit_minutes else None,
            started_at=started_at,
        )

    async def resume(self, user_id: str, attempt_id: str) -> AttemptState:
        """
        Rebuild the state of a stored attempt, with the countdown reduced by
        the time elapsed since it started. Selections are not stored and
        start empty, so an attempt whose time ran out is submitted as it
        stands.
        """
        attempt = await self._attempts.get_by_id(attempt_id)
        if not attempt:
            raise ResourceNotFoundException(f"Attempt not found with ID: {attempt_id}")
        if attempt.user_id != user_id:
            raise AccessDeniedException("Attempt belongs to another user")

        quiz = await self.load_quiz(attempt.quiz_id)

        if attempt.completed_at is not None:
            return AttemptState(
                attempt_id=attempt.id,
                user_id=user_id,
                quiz=quiz,
                status=AttemptStatus.SUBMITTED,
                started_at=attempt.started_at,
                completed_at=attempt.completed_at,
                score=attempt.score,
                passed=attempt.passed,
                persisted=True,
            )

        time_remaining = None
        if quiz.time_limit_minutes:
            elapsed = (self._clock() - as_utc(attempt.started_at)).total_seconds()
            time_remaining = max(0, quiz.time_limit_minutes * 60 - int(elapsed))

        state = AttemptState(
            attempt_id=attempt.id,
            user_id=user_id,
            quiz=quiz,
            status=AttemptStatus.IN_PROGRESS,
            time_remaining=time_remaining,
            started_at=attempt.started_at,
        )
        if time_remaining == 0:
            # Time ran out while away
            logger.info(f"Attempt {attempt.id} expired before resume, submitting")
            return await self.submit(state)
        return state

    @staticmethod
    def select_answer(state: AttemptState, question_id: str, answer_id: str) -> AttemptState:
        """
        Single-select: choosing an answer replaces any earlier choice for
        that question. Ignored once the attempt is submitted or out of time.
        """
        if state.status != AttemptStatus.IN_PROGRESS or state.time_remaining == 0:
            return state

        question = next((q for q in state.quiz.questions if q.id == question_id), None)
        if question is None:
            raise ValidationException(f"Question {question_id} is not part of this quiz")
        if not any(answer.id == answer_id for answer in question.answers):
            raise ValidationException(f"Answer {answer_id} does not belong to question {question_id}")

        selections = dict(state.selections)
        selections[question_id] = (answer_id,)
        return state.model_copy(update={"selections": selections})

    async def tick(self, state: AttemptState) -> AttemptState:
        """
        Advance the countdown by one second. Reaching zero submits the
        attempt with whatever is selected.
        """
        if state.status != AttemptStatus.IN_PROGRESS or state.time_remaining is None:
            return state

        remaining = max(0, state.time_remaining - 1)
        state = state.model_copy(update={"time_remaining": remaining})
        if remaining == 0:
            logger.info(f"Attempt {state.attempt_id} ran out of time, submitting")
            return await self.submit(state)
        return state

    async def elapse(self, state: AttemptState, seconds: int) -> AttemptState:
        for _ in range(seconds):
            if state.status != AttemptStatus.IN_PROGRESS:
                break
            state = await self.tick(state)
        return state

    async def submit(self, state: AttemptState) -> AttemptState:
        """
        Score and finalize the attempt.

        Submitting an already persisted attempt is a no-op. A submitted state
        whose write failed earlier retries that write.

        Raises:
            AttemptPersistenceException: the write failed; ``exc.state``
                holds the locally scored attempt
        """
        if state.status == AttemptStatus.LOADING or not state.attempt_id:
            raise ValidationException("Attempt has not started")
        if state.is_submitted and state.persisted:
            return state

        if not state.is_submitted:
            score, passed = score_selections(state.quiz, state.selections)
            state = state.model_copy(update={
                "status": AttemptStatus.SUBMITTED,
                "score": score,
                "passed": passed,
                "completed_at": self._clock(),
                "timed_out": state.time_remaining == 0,
            })
            logger.info(
                f"Attempt {state.attempt_id} scored {score}% "
                f"({'passed' if passed else 'failed'}, pass mark {state.quiz.passing_score}%)"
            )

        try:
            async with self._locks.acquire_lock(RedisClient.attempt_lock_key(state.attempt_id)):
                return await self._persist(state)
        except PersistenceException as e:
            logger.error(f"Failed to record attempt {state.attempt_id}: {e.message}")
            raise AttemptPersistenceException(
                f"Score computed but not saved for attempt {state.attempt_id}", state
            ) from e

    async def _persist(self, state: AttemptState) -> AttemptState:
        written = await self._attempts.finalize(
            state.attempt_id, state.score, state.passed, state.completed_at
        )
        if written:
            return state.model_copy(update={"persisted": True})

        # Another submission got there first; report what was stored
        stored = await self._attempts.get_by_id(state.attempt_id)
        if stored is None:
            raise ResourceNotFoundException(f"Attempt not found with ID: {state.attempt_id}")
        logger.debug(f"Attempt {state.attempt_id} was already finalized")
        return state.model_copy(update={
            "score": stored.score,
            "passed": stored.passed,
            "completed_at": stored.completed_at,
            "persisted": True,
        })

    # =============================
    #   History
    # =============================
    async def list_attempts(self, user_id: str, quiz_id: str) -> list[AttemptView]:
        attempts = await self._attempts.get_attempts(user_id, quiz_id)
        return [AttemptView.from_model(attempt) for attempt in attempts]

    async def best_attempt(self, user_id: str, quiz_id: str) -> Optional[AttemptView]:
        attempt = await self._attempts.get_best_attempt(user_id, quiz_id)
        return AttemptView.from_model(attempt) if attempt else None


# =============================
#   Countdown
# =============================
class CountdownTimer:
    """
    Ticks an attempt once per second on an asyncio task until it is
    submitted or the timer is cancelled.

    Usage:
        timer = CountdownTimer(engine, state)
        timer.start()
        ...
        state = await timer.stop()
    """

    def __init__(
            self,
            engine: QuizAttemptEngine,
            state: AttemptState,
            on_change: Optional[Callable[[AttemptState], Awaitable[None]]] = None,
            sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._engine = engine
        self._state = state
        self._on_change = on_change
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self.ticks = 0

    @property
    def state(self) -> AttemptState:
        return self._state

    def update(self, state: AttemptState) -> None:
        """Hand the timer a state changed elsewhere (e.g. a new selection)."""
        self._state = state.model_copy(update={"time_remaining": self._state.time_remaining})

    def start(self) -> asyncio.Task:
        if self._state.time_remaining is None:
            raise ValidationException("Quiz has no time limit")
        self._task = asyncio.create_task(self._run())
        return self._task

    async def _run(self) -> AttemptState:
        while self._state.status == AttemptStatus.IN_PROGRESS:
            await self._sleep(1)
            if self._state.status != AttemptStatus.IN_PROGRESS:
                break
            self.ticks += 1
            try:
                self._state = await self._engine.tick(self._state)
            except AttemptPersistenceException as e:
                # Keep the locally scored state visible, then stop ticking
                self._state = e.state
                raise
            finally:
                if self._on_change:
                    await self._on_change(self._state)
        return self._state

    async def stop(self) -> AttemptState:
        """
        Cancel the countdown; no tick happens afterwards.

        Raises:
            AttemptPersistenceException: the countdown already ended in a
                failed write; ``exc.state`` holds the scored attempt
        """
        if self._task is None:
            return self._state
        if not self._task.done():
            self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        return self._state

    async def submit(self) -> AttemptState:
        """Manual submit: stop the countdown first, then submit."""
        await self.stop()
        self._state = await self._engine.submit(self._state)
        return self._state
