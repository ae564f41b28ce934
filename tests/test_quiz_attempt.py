"""
Tests for attempt scoring, the attempt lifecycle and the countdown timer.
"""
import asyncio
import unittest
from unittest.mock import AsyncMock

from learnhub.model.enums import AttemptStatus, QuestionType
from learnhub.schemas.quiz import AnswerOption, QuestionSnapshot, QuizSnapshot
from learnhub.services.quiz_attempt import CountdownTimer, is_question_correct, score_selections
from learnhub.utils.exceptions import (
    AccessDeniedException,
    AttemptPersistenceException,
    PersistenceException,
    ResourceNotFoundException,
    ValidationException,
)
from tests.base import LEARNER_ID, DatabaseTestCase


def _question(qid: str, points: int, correct: set) -> QuestionSnapshot:
    return QuestionSnapshot(
        id=qid,
        question_text=qid,
        question_type=QuestionType.MULTIPLE_CHOICE,
        points=points,
        order_index=0,
        answers=tuple(
            AnswerOption(id=aid, answer_text=aid, is_correct=aid in correct, order_index=i)
            for i, aid in enumerate(("A", "B", "C"))
        ),
    )


class TestScoring(unittest.TestCase):

    def test_exact_set_match(self):
        question = _question("q1", 2, {"A"})
        self.assertTrue(is_question_correct(question, ("A",)))
        self.assertFalse(is_question_correct(question, ("A", "B")))
        self.assertFalse(is_question_correct(question, ()))

    def test_half_correct_fails(self):
        quiz = QuizSnapshot(
            id="quiz", title="T", passing_score=70,
            questions=(_question("q1", 1, {"A"}), _question("q2", 1, {"B"})),
        )
        self.assertEqual(score_selections(quiz, {"q1": ("A",), "q2": ("C",)}), (50, False))
        self.assertEqual(score_selections(quiz, {"q1": ("A",), "q2": ("B",)}), (100, True))

    def test_weighted_points_rounding(self):
        quiz = QuizSnapshot(
            id="quiz", title="T", passing_score=60,
            questions=(_question("q1", 2, {"A"}), _question("q2", 1, {"A"})),
        )
        self.assertEqual(score_selections(quiz, {"q1": ("A",)}), (67, True))
        self.assertEqual(score_selections(quiz, {"q2": ("A",)}), (33, False))

    def test_quiz_without_points(self):
        quiz = QuizSnapshot(id="quiz", title="Empty", passing_score=0)
        self.assertEqual(score_selections(quiz, {}), (0, False))


class AttemptTestCase(DatabaseTestCase):

    time_limit_minutes = None

    async def asyncSetUp(self):
        await super().asyncSetUp()
        course = await self.create_course()
        [[lesson_id]] = await self.create_lessons(course.id, (1,))
        draft = await self.save_quiz(lesson_id, time_limit_minutes=self.time_limit_minutes)
        self.quiz_id = draft.quiz_id
        self.engine = self.attempt_engine()

    def pick(self, state, question_index: int, right: bool):
        question = state.quiz.questions[question_index]
        answer = question.answers[0 if right else 1]
        return self.engine.select_answer(state, question.id, answer.id)


class TestAttemptLifecycle(AttemptTestCase):

    async def test_start_unknown_quiz(self):
        with self.assertRaises(ResourceNotFoundException):
            await self.engine.start(LEARNER_ID, "missing")

    async def test_start_opens_attempt(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)

        self.assertEqual(state.status, AttemptStatus.IN_PROGRESS)
        self.assertIsNotNone(state.attempt_id)
        self.assertIsNone(state.time_remaining)
        self.assertEqual(len(state.quiz.questions), 2)
        self.assertEqual([a.answer_text for a in state.quiz.questions[0].answers], ["right", "wrong"])

    async def test_select_answer_replaces_previous_choice(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)
        question = state.quiz.questions[0]

        state = self.pick(state, 0, right=False)
        state = self.pick(state, 0, right=True)

        self.assertEqual(state.selections[question.id], (question.answers[0].id,))

    async def test_select_unknown_ids(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)
        question = state.quiz.questions[0]
        other = state.quiz.questions[1]

        with self.assertRaises(ValidationException):
            self.engine.select_answer(state, "missing", question.answers[0].id)
        with self.assertRaises(ValidationException):
            self.engine.select_answer(state, question.id, other.answers[0].id)

    async def test_submit_scores_and_persists(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)
        state = self.pick(state, 0, right=True)
        state = self.pick(state, 1, right=False)

        state = await self.engine.submit(state)

        self.assertEqual(state.status, AttemptStatus.SUBMITTED)
        self.assertEqual(state.score, 50)
        self.assertFalse(state.passed)
        self.assertTrue(state.persisted)
        self.assertFalse(state.timed_out)

        [stored] = await self.engine.list_attempts(LEARNER_ID, self.quiz_id)
        self.assertEqual(stored.score, 50)
        self.assertFalse(stored.passed)
        self.assertIsNotNone(stored.completed_at)

    async def test_selection_ignored_after_submit(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)
        state = await self.engine.submit(state)

        self.assertIs(self.pick(state, 0, right=True), state)

    async def test_submit_before_start(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)
        loading = state.model_copy(update={"status": AttemptStatus.LOADING})
        with self.assertRaises(ValidationException):
            await self.engine.submit(loading)

    async def test_double_submit_writes_once(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)
        state = self.pick(state, 0, right=True)
        state = self.pick(state, 1, right=True)

        finalize = AsyncMock(wraps=self.engine._attempts.finalize)
        self.engine._attempts.finalize = finalize

        submitted = await self.engine.submit(state)
        again = await self.engine.submit(submitted)

        self.assertIs(again, submitted)
        self.assertEqual(finalize.await_count, 1)

    async def test_concurrent_submits_keep_first_result(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)
        good = self.pick(self.pick(state, 0, right=True), 1, right=True)

        first = await self.engine.submit(good)
        # A stale copy of the in-progress state submitted again scores 0 locally
        second = await self.engine.submit(state)

        self.assertEqual(first.score, 100)
        self.assertEqual(second.score, 100)
        self.assertTrue(second.persisted)
        [stored] = await self.engine.list_attempts(LEARNER_ID, self.quiz_id)
        self.assertEqual(stored.score, 100)

    async def test_failed_write_keeps_scored_state(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)
        state = self.pick(self.pick(state, 0, right=True), 1, right=True)

        original = self.engine._attempts.finalize
        self.engine._attempts.finalize = AsyncMock(side_effect=PersistenceException("down"))

        with self.assertRaises(AttemptPersistenceException) as ctx:
            await self.engine.submit(state)

        failed = ctx.exception.state
        self.assertEqual(failed.status, AttemptStatus.SUBMITTED)
        self.assertEqual(failed.score, 100)
        self.assertFalse(failed.persisted)

        # Manual retry
        self.engine._attempts.finalize = original
        retried = await self.engine.submit(failed)
        self.assertTrue(retried.persisted)
        self.assertEqual(retried.completed_at, failed.completed_at)
        best = await self.engine.best_attempt(LEARNER_ID, self.quiz_id)
        self.assertEqual(best.score, 100)

    async def test_resume(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)

        resumed = await self.engine.resume(LEARNER_ID, state.attempt_id)
        self.assertEqual(resumed.status, AttemptStatus.IN_PROGRESS)
        self.assertEqual(resumed.selections, {})

        with self.assertRaises(AccessDeniedException):
            await self.engine.resume("someone-else", state.attempt_id)

        await self.engine.submit(self.pick(state, 0, right=True))
        finished = await self.engine.resume(LEARNER_ID, state.attempt_id)
        self.assertEqual(finished.status, AttemptStatus.SUBMITTED)
        self.assertEqual(finished.score, 50)
        self.assertTrue(finished.persisted)

    async def test_best_attempt(self):
        self.assertIsNone(await self.engine.best_attempt(LEARNER_ID, self.quiz_id))

        for right in (False, True):
            state = await self.engine.start(LEARNER_ID, self.quiz_id)
            await self.engine.submit(self.pick(state, 0, right=right))
            self.clock.advance(60)
        # An unfinished attempt is never the best
        await self.engine.start(LEARNER_ID, self.quiz_id)

        best = await self.engine.best_attempt(LEARNER_ID, self.quiz_id)
        self.assertEqual(best.score, 50)
        self.assertEqual(len(await self.engine.list_attempts(LEARNER_ID, self.quiz_id)), 3)

    async def test_timer_needs_time_limit(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)
        with self.assertRaises(ValidationException):
            CountdownTimer(self.engine, state).start()


class TestTimedAttempt(AttemptTestCase):

    time_limit_minutes = 1

    async def test_tick_counts_down(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)
        self.assertEqual(state.time_remaining, 60)

        state = await self.engine.tick(state)
        self.assertEqual(state.time_remaining, 59)
        self.assertEqual(state.status, AttemptStatus.IN_PROGRESS)

    async def test_expiry_auto_submits(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)

        state = await self.engine.elapse(state, 60)

        self.assertEqual(state.status, AttemptStatus.SUBMITTED)
        self.assertTrue(state.timed_out)
        self.assertEqual(state.time_remaining, 0)
        self.assertEqual(state.score, 0)
        self.assertFalse(state.passed)
        self.assertTrue(state.persisted)

        # No further ticks
        self.assertIs(await self.engine.tick(state), state)

    async def test_resume_subtracts_elapsed_time(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)
        self.clock.advance(25)

        resumed = await self.engine.resume(LEARNER_ID, state.attempt_id)
        self.assertEqual(resumed.time_remaining, 35)

        self.clock.advance(120)
        expired = await self.engine.resume(LEARNER_ID, state.attempt_id)
        self.assertEqual(expired.status, AttemptStatus.SUBMITTED)
        self.assertEqual(expired.time_remaining, 0)
        self.assertTrue(expired.timed_out)
        self.assertTrue(expired.persisted)

    async def test_late_selections_after_expiry_score_nothing(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)
        self.clock.advance(600)

        resumed = await self.engine.resume(LEARNER_ID, state.attempt_id)
        resumed = self.pick(self.pick(resumed, 0, right=True), 1, right=True)
        submitted = await self.engine.submit(resumed)

        self.assertEqual(submitted.selections, {})
        self.assertEqual(submitted.score, 0)
        self.assertFalse(submitted.passed)
        self.assertTrue(submitted.timed_out)
        [stored] = await self.engine.list_attempts(LEARNER_ID, self.quiz_id)
        self.assertEqual(stored.score, 0)

    async def test_select_ignored_when_out_of_time(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)
        expired = state.model_copy(update={"time_remaining": 0})

        self.assertIs(self.pick(expired, 0, right=True), expired)

    async def test_countdown_timer_runs_to_submission(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)
        changes = []

        async def on_change(s):
            changes.append(s.time_remaining)

        async def fast_sleep(_):
            await asyncio.sleep(0)

        timer = CountdownTimer(self.engine, state, on_change=on_change, sleep=fast_sleep)
        final = await timer.start()

        self.assertEqual(timer.ticks, 60)
        self.assertEqual(changes[0], 59)
        self.assertEqual(changes[-1], 0)
        self.assertEqual(final.status, AttemptStatus.SUBMITTED)
        self.assertTrue(final.timed_out)
        self.assertEqual(timer.state, final)

    async def test_countdown_timer_stop(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)

        async def fast_sleep(_):
            await asyncio.sleep(0)

        timer = CountdownTimer(self.engine, state, sleep=fast_sleep)
        timer.start()
        for _ in range(5):
            await asyncio.sleep(0)

        stopped = await timer.stop()
        ticks = timer.ticks
        for _ in range(5):
            await asyncio.sleep(0)

        self.assertEqual(timer.ticks, ticks)
        self.assertEqual(stopped.status, AttemptStatus.IN_PROGRESS)
        self.assertEqual(stopped.time_remaining, 60 - ticks)

    async def test_countdown_timer_manual_submit(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)

        async def fast_sleep(_):
            await asyncio.sleep(0)

        timer = CountdownTimer(self.engine, state, sleep=fast_sleep)
        timer.start()
        await asyncio.sleep(0)
        timer.update(self.pick(timer.state, 0, right=True))

        submitted = await timer.submit()
        ticks = timer.ticks
        await asyncio.sleep(0)

        self.assertEqual(timer.ticks, ticks)
        self.assertEqual(submitted.score, 50)
        self.assertFalse(submitted.timed_out)
        self.assertTrue(submitted.persisted)

    async def test_countdown_timer_stop_reports_failed_write(self):
        state = await self.engine.start(LEARNER_ID, self.quiz_id)
        self.engine._attempts.finalize = AsyncMock(side_effect=PersistenceException("down"))

        async def fast_sleep(_):
            await asyncio.sleep(0)

        timer = CountdownTimer(self.engine, state, sleep=fast_sleep)
        task = timer.start()
        while not task.done():
            await asyncio.sleep(0)

        with self.assertRaises(AttemptPersistenceException) as ctx:
            await timer.stop()

        self.assertTrue(ctx.exception.state.timed_out)
        self.assertFalse(ctx.exception.state.persisted)
        self.assertEqual(timer.state, ctx.exception.state)


if __name__ == '__main__':
    unittest.main()
