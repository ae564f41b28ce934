import logging

from fastapi import APIRouter, Depends

from learnhub.dependencies.services import get_quiz_authoring_service
from learnhub.schemas.generic import ApiResponse
from learnhub.schemas.quiz import QuizDraft
from learnhub.services.auth_service import AuthService
from learnhub.services.quiz_builder import QuizAuthoringService
from learnhub.utils.exceptions import ValidationException

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quizzes", tags=["Quiz"])


@router.get(
    "/lesson/{lesson_id}",
    response_model=ApiResponse[QuizDraft],
    summary="Get Quiz Draft",
    description="Load the lesson's quiz for editing, or an empty draft when it has none.",
)
async def get_quiz_draft(
        lesson_id: str,
        authoring_service: QuizAuthoringService = Depends(get_quiz_authoring_service),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[QuizDraft]:
    draft = await authoring_service.load_draft(lesson_id)
    return ApiResponse[QuizDraft].success(data=draft)


@router.put(
    "/lesson/{lesson_id}",
    response_model=ApiResponse[QuizDraft],
    summary="Save Quiz",
    description="Save the complete quiz definition of a lesson, replacing its previous questions.",
)
async def save_quiz(
        lesson_id: str,
        draft: QuizDraft,
        authoring_service: QuizAuthoringService = Depends(get_quiz_authoring_service),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[QuizDraft]:
    """
    - **title**: required
    - **questions**: at least one; each needs text, 2-6 answers and one correct answer

    Raises:
        - 400 Bad Request: invalid draft (nothing is written)
        - 404 Not Found: lesson or edited quiz missing
        - 503 Service Unavailable: the save failed and was rolled back
    """
    if draft.lesson_id != lesson_id:
        raise ValidationException("Draft belongs to a different lesson")

    logger.info(f"User {user_id} saving quiz for lesson {lesson_id} ({len(draft.questions)} questions)")
    saved = await authoring_service.save(draft)
    return ApiResponse[QuizDraft].success(data=saved, message="Quiz saved successfully")
