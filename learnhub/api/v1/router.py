from fastapi import APIRouter

from learnhub.api.v1.endpoints import (
    attempt_controller,
    content_controller,
    course_controller,
    discussion_controller,
    progress_controller,
    quiz_controller,
    review_controller,
)

api_router = APIRouter()

api_router.include_router(course_controller.router)
api_router.include_router(content_controller.module_router)
api_router.include_router(content_controller.lesson_router)
api_router.include_router(quiz_controller.router)
api_router.include_router(attempt_controller.router)
api_router.include_router(progress_controller.router)
api_router.include_router(review_controller.router)
api_router.include_router(discussion_controller.router)
