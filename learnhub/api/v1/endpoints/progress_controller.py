import logging
from typing import Optional

from fastapi import APIRouter, Depends

from learnhub.dependencies.services import get_progress_service
from learnhub.schemas.generic import ApiResponse
from learnhub.schemas.progress import EnrollmentView
from learnhub.services.auth_service import AuthService
from learnhub.services.progress_service import ProgressService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/progress", tags=["Progress"])


@router.post(
    "/courses/{course_id}/enroll",
    response_model=ApiResponse[EnrollmentView],
    summary="Enroll",
    description="Enroll the caller in a course. Enrolling twice returns the existing enrollment.",
)
async def enroll(
        course_id: str,
        progress_service: ProgressService = Depends(get_progress_service),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[EnrollmentView]:
    enrollment = await progress_service.enroll(user_id, course_id)
    return ApiResponse[EnrollmentView].success(data=EnrollmentView.model_validate(enrollment))


@router.get(
    "/courses/{course_id}",
    response_model=ApiResponse[EnrollmentView],
    summary="Get Course Progress",
)
async def get_course_progress(
        course_id: str,
        progress_service: ProgressService = Depends(get_progress_service),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[EnrollmentView]:
    enrollment = await progress_service.get_enrollment(user_id, course_id)
    return ApiResponse[EnrollmentView].success(data=EnrollmentView.model_validate(enrollment))


@router.post(
    "/courses/{course_id}/recompute",
    response_model=ApiResponse[EnrollmentView],
    summary="Recompute Course Progress",
)
async def recompute_course_progress(
        course_id: str,
        progress_service: ProgressService = Depends(get_progress_service),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[EnrollmentView]:
    enrollment = await progress_service.recompute_enrollment_progress(user_id, course_id)
    return ApiResponse[EnrollmentView].success(data=EnrollmentView.model_validate(enrollment))


@router.post(
    "/lessons/{lesson_id}/complete",
    response_model=ApiResponse[Optional[EnrollmentView]],
    summary="Complete Lesson",
    description="Mark a lesson completed and return the refreshed enrollment (null when not enrolled).",
)
async def complete_lesson(
        lesson_id: str,
        progress_service: ProgressService = Depends(get_progress_service),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[Optional[EnrollmentView]]:
    enrollment = await progress_service.complete_lesson(user_id, lesson_id)
    data = EnrollmentView.model_validate(enrollment) if enrollment else None
    return ApiResponse[Optional[EnrollmentView]].success(data=data)
