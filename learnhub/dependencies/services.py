import logging

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.clients.redis_client import RedisClient
from learnhub.config import get_settings
from learnhub.dependencies.db import get_database
from learnhub.repositories.attempt_repo import QuizAttemptRepository
from learnhub.repositories.course_repo import CourseRepository
from learnhub.repositories.discussion_repo import DiscussionRepository
from learnhub.repositories.lesson_repo import LessonRepository
from learnhub.repositories.module_repo import ModuleRepository
from learnhub.repositories.progress_repo import EnrollmentRepository, LessonProgressRepository
from learnhub.repositories.quiz_repo import QuizRepository
from learnhub.repositories.review_repo import ReviewRepository
from learnhub.services.content_tree import CourseContentTree
from learnhub.services.course_service import CourseService
from learnhub.services.discussion_service import DiscussionService
from learnhub.services.progress_service import ProgressService
from learnhub.services.quiz_attempt import QuizAttemptEngine
from learnhub.services.quiz_builder import QuizAuthoringService
from learnhub.services.review_service import ReviewService

logger = logging.getLogger(__name__)

# =============================
#   Redis Client (Singleton)
# =============================
_redis_client_instance = None


async def get_redis_client() -> RedisClient:
    """
    Get singleton RedisClient instance.
    Connection is established on first call and reused.
    """
    global _redis_client_instance

    if _redis_client_instance is None:
        settings = get_settings()
        _redis_client_instance = RedisClient(settings)
        await _redis_client_instance.connect()
        logger.info("RedisClient singleton created")

    return _redis_client_instance


# =============================
#   Repository Dependencies
# =============================
async def get_course_repository(
        session: AsyncSession = Depends(get_database),
) -> CourseRepository:
    return CourseRepository(session)


async def get_module_repository(
        session: AsyncSession = Depends(get_database),
) -> ModuleRepository:
    return ModuleRepository(session)


async def get_lesson_repository(
        session: AsyncSession = Depends(get_database),
) -> LessonRepository:
    return LessonRepository(session)


async def get_quiz_repository(
        session: AsyncSession = Depends(get_database),
) -> QuizRepository:
    return QuizRepository(session)


async def get_attempt_repository(
        session: AsyncSession = Depends(get_database),
) -> QuizAttemptRepository:
    return QuizAttemptRepository(session)


async def get_enrollment_repository(
        session: AsyncSession = Depends(get_database),
) -> EnrollmentRepository:
    return EnrollmentRepository(session)


async def get_lesson_progress_repository(
        session: AsyncSession = Depends(get_database),
) -> LessonProgressRepository:
    return LessonProgressRepository(session)


async def get_review_repository(
        session: AsyncSession = Depends(get_database),
) -> ReviewRepository:
    return ReviewRepository(session)


async def get_discussion_repository(
        session: AsyncSession = Depends(get_database),
) -> DiscussionRepository:
    return DiscussionRepository(session)


# =============================
#   Services (Per-Request)
# =============================
# FastAPI caches a dependency per request, so every repository below shares
# the request's single session.
async def get_course_service(
        course_repository: CourseRepository = Depends(get_course_repository),
) -> CourseService:
    return CourseService(course_repository)


async def get_content_tree(
        course_repository: CourseRepository = Depends(get_course_repository),
        module_repository: ModuleRepository = Depends(get_module_repository),
        lesson_repository: LessonRepository = Depends(get_lesson_repository),
) -> CourseContentTree:
    return CourseContentTree(course_repository, module_repository, lesson_repository)


async def get_quiz_authoring_service(
        quiz_repository: QuizRepository = Depends(get_quiz_repository),
        lesson_repository: LessonRepository = Depends(get_lesson_repository),
        redis_client: RedisClient = Depends(get_redis_client),
) -> QuizAuthoringService:
    """
    Not a singleton: the repositories hold the per-request session. The
    lock client is shared so saves of the same quiz are serialized.
    """
    return QuizAuthoringService(quiz_repository, lesson_repository, redis_client)


async def get_attempt_engine(
        quiz_repository: QuizRepository = Depends(get_quiz_repository),
        attempt_repository: QuizAttemptRepository = Depends(get_attempt_repository),
        redis_client: RedisClient = Depends(get_redis_client),
) -> QuizAttemptEngine:
    return QuizAttemptEngine(quiz_repository, attempt_repository, redis_client)


async def get_progress_service(
        course_repository: CourseRepository = Depends(get_course_repository),
        lesson_repository: LessonRepository = Depends(get_lesson_repository),
        enrollment_repository: EnrollmentRepository = Depends(get_enrollment_repository),
        lesson_progress_repository: LessonProgressRepository = Depends(get_lesson_progress_repository),
) -> ProgressService:
    return ProgressService(
        course_repository,
        lesson_repository,
        enrollment_repository,
        lesson_progress_repository,
    )


async def get_review_service(
        course_repository: CourseRepository = Depends(get_course_repository),
        enrollment_repository: EnrollmentRepository = Depends(get_enrollment_repository),
        review_repository: ReviewRepository = Depends(get_review_repository),
) -> ReviewService:
    return ReviewService(course_repository, enrollment_repository, review_repository)


async def get_discussion_service(
        course_repository: CourseRepository = Depends(get_course_repository),
        discussion_repository: DiscussionRepository = Depends(get_discussion_repository),
) -> DiscussionService:
    return DiscussionService(course_repository, discussion_repository)
