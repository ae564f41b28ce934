"""
Shared fixtures: an in-memory SQLite database per test and small seeding
helpers.
"""
import unittest
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from learnhub.clients.redis_client import RedisClient
from learnhub.config import get_settings
from learnhub.model import Base
from learnhub.repositories import (
    CourseRepository,
    DiscussionRepository,
    EnrollmentRepository,
    LessonProgressRepository,
    LessonRepository,
    ModuleRepository,
    QuizAttemptRepository,
    QuizRepository,
    ReviewRepository,
)
from learnhub.schemas.course import CourseCreate
from learnhub.schemas.quiz import AnswerDraft, QuestionDraft, QuizDraft
from learnhub.services.content_tree import CourseContentTree
from learnhub.services.course_service import CourseService
from learnhub.services.discussion_service import DiscussionService
from learnhub.services.progress_service import ProgressService
from learnhub.services.quiz_attempt import QuizAttemptEngine
from learnhub.services.quiz_builder import QuizAuthoringService
from learnhub.services.review_service import ReviewService

INSTRUCTOR_ID = "instructor-1"
LEARNER_ID = "learner-1"


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    """Base class: fresh schema and session for every test."""

    async def asyncSetUp(self):
        self.db_engine = create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        async with self.db_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self.session_factory = async_sessionmaker(
            bind=self.db_engine, class_=AsyncSession, expire_on_commit=False
        )
        self.session = self.session_factory()
        self.clock = FakeClock()
        self.lock_client = RedisClient(get_settings())

    async def asyncTearDown(self):
        await self.session.close()
        await self.db_engine.dispose()

    # ==================== SERVICES ====================

    def course_service(self) -> CourseService:
        return CourseService(CourseRepository(self.session))

    def content_tree(self) -> CourseContentTree:
        return CourseContentTree(
            CourseRepository(self.session),
            ModuleRepository(self.session),
            LessonRepository(self.session),
        )

    def authoring_service(self) -> QuizAuthoringService:
        return QuizAuthoringService(
            QuizRepository(self.session), LessonRepository(self.session), self.lock_client
        )

    def attempt_engine(self) -> QuizAttemptEngine:
        return QuizAttemptEngine(
            QuizRepository(self.session),
            QuizAttemptRepository(self.session),
            self.lock_client,
            clock=self.clock,
        )

    def progress_service(self) -> ProgressService:
        return ProgressService(
            CourseRepository(self.session),
            LessonRepository(self.session),
            EnrollmentRepository(self.session),
            LessonProgressRepository(self.session),
            clock=self.clock,
        )

    def review_service(self) -> ReviewService:
        return ReviewService(
            CourseRepository(self.session),
            EnrollmentRepository(self.session),
            ReviewRepository(self.session),
            clock=self.clock,
        )

    def discussion_service(self) -> DiscussionService:
        return DiscussionService(
            CourseRepository(self.session), DiscussionRepository(self.session), clock=self.clock
        )

    # ==================== SEEDING ====================

    async def create_course(self, title: str = "Python Basics"):
        return await self.course_service().create_course(
            INSTRUCTOR_ID, CourseCreate(title=title, is_published=True)
        )

    async def create_lessons(self, course_id: str, per_module: tuple[int, ...]):
        """Create one module per entry with that many text lessons; returns lesson ids per module."""
        tree = self.content_tree()
        state = await tree.load_modules(course_id)
        lesson_ids = []
        for m, count in enumerate(per_module):
            state, module = await tree.create_module(state, f"Module {m + 1}")
            ids = []
            for n in range(count):
                state, lesson = await tree.create_lesson(
                    state, module.id, f"Lesson {m + 1}.{n + 1}",
                    {"content_type": "text", "body": "..."},
                )
                ids.append(lesson.id)
            lesson_ids.append(ids)
        return lesson_ids

    async def save_quiz(self, lesson_id: str, points=(1, 1), passing_score: int = 70,
                        time_limit_minutes=None) -> QuizDraft:
        """Save a quiz whose questions each have answers 'right' (correct) and 'wrong'."""
        draft = QuizDraft(
            lesson_id=lesson_id,
            title="Checkpoint",
            passing_score=passing_score,
            time_limit_minutes=time_limit_minutes,
            questions=tuple(
                QuestionDraft(
                    question_text=f"Question {i + 1}",
                    points=p,
                    order_index=i,
                    answers=(
                        AnswerDraft(answer_text="right", is_correct=True, order_index=0),
                        AnswerDraft(answer_text="wrong", is_correct=False, order_index=1),
                    ),
                )
                for i, p in enumerate(points)
            ),
        )
        return await self.authoring_service().save(draft)
