import logging
from typing import List, Optional

from fastapi import APIRouter, Depends

from learnhub.dependencies.services import get_review_service
from learnhub.schemas.community import ReviewRequest, ReviewStats, ReviewView
from learnhub.schemas.generic import ApiResponse
from learnhub.services.auth_service import AuthService
from learnhub.services.review_service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses/{course_id}/reviews", tags=["Reviews"])


@router.get(
    "",
    response_model=ApiResponse[List[ReviewView]],
    summary="List Reviews",
    description="Published reviews of a course, newest first.",
)
async def list_reviews(
        course_id: str,
        review_service: ReviewService = Depends(get_review_service),
) -> ApiResponse[List[ReviewView]]:
    reviews = await review_service.list_reviews(course_id)
    return ApiResponse[List[ReviewView]].success(
        data=[ReviewView.model_validate(review) for review in reviews]
    )


@router.get(
    "/stats",
    response_model=ApiResponse[ReviewStats],
    summary="Rating Summary",
    description="Average rating, review count and the number of reviews per star.",
)
async def get_review_stats(
        course_id: str,
        review_service: ReviewService = Depends(get_review_service),
) -> ApiResponse[ReviewStats]:
    stats = await review_service.get_stats(course_id)
    return ApiResponse[ReviewStats].success(data=stats)


@router.get(
    "/me",
    response_model=ApiResponse[Optional[ReviewView]],
    summary="My Review",
)
async def get_my_review(
        course_id: str,
        review_service: ReviewService = Depends(get_review_service),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[Optional[ReviewView]]:
    review = await review_service.get_user_review(user_id, course_id)
    data = ReviewView.model_validate(review) if review else None
    return ApiResponse[Optional[ReviewView]].success(data=data)


@router.put(
    "",
    response_model=ApiResponse[ReviewView],
    summary="Submit Review",
    description="Create the caller's review of the course, or replace their earlier one. Enrollment required.",
)
async def submit_review(
        course_id: str,
        request: ReviewRequest,
        review_service: ReviewService = Depends(get_review_service),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[ReviewView]:
    review = await review_service.submit_review(user_id, course_id, request.rating, request.comment)
    return ApiResponse[ReviewView].success(data=ReviewView.model_validate(review))


@router.delete(
    "/me",
    response_model=ApiResponse[None],
    summary="Delete My Review",
)
async def delete_my_review(
        course_id: str,
        review_service: ReviewService = Depends(get_review_service),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[None]:
    await review_service.delete_review(user_id, course_id)
    return ApiResponse[None].success(message="Review deleted successfully")
