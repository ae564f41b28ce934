"""
Tests for lesson completion and course progress.
"""
import unittest

from learnhub.utils.exceptions import ResourceNotFoundException
from tests.base import LEARNER_ID, DatabaseTestCase


class TestProgressService(DatabaseTestCase):

    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.course = await self.create_course()
        self.service = self.progress_service()

    async def test_enroll_is_idempotent(self):
        first = await self.service.enroll(LEARNER_ID, self.course.id)
        second = await self.service.enroll(LEARNER_ID, self.course.id)

        self.assertEqual(first.id, second.id)
        self.assertEqual(first.progress_percentage, 0)
        self.assertIsNone(first.completed_at)

    async def test_enroll_unknown_course(self):
        with self.assertRaises(ResourceNotFoundException):
            await self.service.enroll(LEARNER_ID, "missing")

    async def test_mark_complete_is_idempotent(self):
        [[lesson_id]] = await self.create_lessons(self.course.id, (1,))

        first = await self.service.mark_lesson_complete(LEARNER_ID, lesson_id)
        first_completed_at = first.completed_at
        self.clock.advance(3600)
        second = await self.service.mark_lesson_complete(LEARNER_ID, lesson_id)

        self.assertEqual(first.id, second.id)
        self.assertTrue(second.completed)
        self.assertEqual(second.completed_at, first_completed_at)

    async def test_mark_complete_unknown_lesson(self):
        with self.assertRaises(ResourceNotFoundException):
            await self.service.mark_lesson_complete(LEARNER_ID, "missing")

    async def test_course_without_lessons(self):
        await self.service.enroll(LEARNER_ID, self.course.id)

        enrollment = await self.service.recompute_enrollment_progress(LEARNER_ID, self.course.id)

        self.assertEqual(enrollment.progress_percentage, 0)
        self.assertIsNone(enrollment.completed_at)

    async def test_recompute_without_enrollment(self):
        with self.assertRaises(ResourceNotFoundException):
            await self.service.recompute_enrollment_progress(LEARNER_ID, self.course.id)

    async def test_progress_counts_all_modules(self):
        [first, second] = await self.create_lessons(self.course.id, (2, 1))
        await self.service.enroll(LEARNER_ID, self.course.id)

        enrollment = await self.service.complete_lesson(LEARNER_ID, first[0])
        self.assertEqual(enrollment.progress_percentage, 33)

        enrollment = await self.service.complete_lesson(LEARNER_ID, second[0])
        self.assertEqual(enrollment.progress_percentage, 67)
        self.assertIsNone(enrollment.completed_at)

    async def test_completed_at_set_once(self):
        [[a, b]] = await self.create_lessons(self.course.id, (2,))
        await self.service.enroll(LEARNER_ID, self.course.id)
        await self.service.complete_lesson(LEARNER_ID, a)

        enrollment = await self.service.complete_lesson(LEARNER_ID, b)
        self.assertEqual(enrollment.progress_percentage, 100)
        self.assertIsNotNone(enrollment.completed_at)
        completed_at = enrollment.completed_at

        self.clock.advance(86400)
        enrollment = await self.service.recompute_enrollment_progress(LEARNER_ID, self.course.id)
        self.assertEqual(enrollment.completed_at, completed_at)

    async def test_other_learners_do_not_count(self):
        [[a, b]] = await self.create_lessons(self.course.id, (2,))
        await self.service.enroll(LEARNER_ID, self.course.id)
        await self.service.mark_lesson_complete("someone-else", a)

        enrollment = await self.service.complete_lesson(LEARNER_ID, b)
        self.assertEqual(enrollment.progress_percentage, 50)

    async def test_complete_lesson_without_enrollment(self):
        [[lesson_id]] = await self.create_lessons(self.course.id, (1,))

        self.assertIsNone(await self.service.complete_lesson(LEARNER_ID, lesson_id))
        progress = await self.service.mark_lesson_complete(LEARNER_ID, lesson_id)
        self.assertTrue(progress.completed)


if __name__ == '__main__':
    unittest.main()
