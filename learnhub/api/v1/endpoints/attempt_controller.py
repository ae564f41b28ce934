import logging
from typing import List, Optional

from fastapi import APIRouter, Depends

from learnhub.dependencies.services import get_attempt_engine
from learnhub.schemas.generic import ApiResponse
from learnhub.schemas.quiz import AttemptView, StartAttemptRequest, SubmitAttemptRequest, learner_view
from learnhub.services.auth_service import AuthService
from learnhub.services.quiz_attempt import QuizAttemptEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attempts", tags=["Attempts"])


@router.post(
    "",
    response_model=ApiResponse[dict],
    summary="Start Attempt",
    description="Open a new attempt on a quiz. Correct answers are hidden until submission.",
)
async def start_attempt(
        request: StartAttemptRequest,
        engine: QuizAttemptEngine = Depends(get_attempt_engine),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[dict]:
    state = await engine.start(user_id, request.quiz_id)
    return ApiResponse[dict].success(data=learner_view(state), message="Attempt started")


@router.get(
    "/{attempt_id}",
    response_model=ApiResponse[dict],
    summary="Resume Attempt",
    description="Current state of an attempt, with the remaining time for timed quizzes.",
)
async def resume_attempt(
        attempt_id: str,
        engine: QuizAttemptEngine = Depends(get_attempt_engine),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[dict]:
    state = await engine.resume(user_id, attempt_id)
    return ApiResponse[dict].success(data=learner_view(state))


@router.post(
    "/{attempt_id}/submit",
    response_model=ApiResponse[dict],
    summary="Submit Attempt",
)
async def submit_attempt(
        attempt_id: str,
        request: SubmitAttemptRequest,
        engine: QuizAttemptEngine = Depends(get_attempt_engine),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[dict]:
    """
    Apply the learner's selections and score the attempt. An attempt that
    was already submitted returns its stored result unchanged.

    Raises:
        - 400 Bad Request: a selection does not belong to the quiz
        - 403 Forbidden: attempt of another user
        - 503 Service Unavailable: scored but not saved; the body carries the score
    """
    state = await engine.resume(user_id, attempt_id)
    for selection in request.selections:
        state = engine.select_answer(state, selection.question_id, selection.answer_id)

    state = await engine.submit(state)
    return ApiResponse[dict].success(data=learner_view(state), message="Attempt submitted")


@router.get(
    "/quiz/{quiz_id}",
    response_model=ApiResponse[List[AttemptView]],
    summary="List My Attempts",
)
async def list_attempts(
        quiz_id: str,
        engine: QuizAttemptEngine = Depends(get_attempt_engine),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[List[AttemptView]]:
    attempts = await engine.list_attempts(user_id, quiz_id)
    return ApiResponse[List[AttemptView]].success(data=attempts)


@router.get(
    "/quiz/{quiz_id}/best",
    response_model=ApiResponse[Optional[AttemptView]],
    summary="Best Attempt",
    description="The caller's highest scoring completed attempt, or null.",
)
async def best_attempt(
        quiz_id: str,
        engine: QuizAttemptEngine = Depends(get_attempt_engine),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[Optional[AttemptView]]:
    attempt = await engine.best_attempt(user_id, quiz_id)
    return ApiResponse[Optional[AttemptView]].success(data=attempt)
