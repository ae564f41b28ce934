import logging
from typing import List

from fastapi import APIRouter, Depends

from learnhub.dependencies.services import get_discussion_service
from learnhub.schemas.community import DiscussionView, ReplyCreate, ThreadCreate, ThreadView
from learnhub.schemas.generic import ApiResponse
from learnhub.services.auth_service import AuthService
from learnhub.services.discussion_service import DiscussionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Discussions"])


@router.get(
    "/courses/{course_id}/discussions",
    response_model=ApiResponse[List[ThreadView]],
    summary="List Threads",
    description="Threads of a course, newest first, each with its replies oldest first.",
)
async def list_threads(
        course_id: str,
        discussion_service: DiscussionService = Depends(get_discussion_service),
) -> ApiResponse[List[ThreadView]]:
    threads = await discussion_service.list_threads(course_id)
    return ApiResponse[List[ThreadView]].success(data=threads)


@router.post(
    "/courses/{course_id}/discussions",
    response_model=ApiResponse[DiscussionView],
    summary="Start Thread",
)
async def create_thread(
        course_id: str,
        request: ThreadCreate,
        discussion_service: DiscussionService = Depends(get_discussion_service),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[DiscussionView]:
    thread = await discussion_service.create_thread(user_id, course_id, request.title, request.content)
    return ApiResponse[DiscussionView].success(data=DiscussionView.model_validate(thread))


@router.post(
    "/discussions/{thread_id}/replies",
    response_model=ApiResponse[DiscussionView],
    summary="Reply To Thread",
)
async def reply_to_thread(
        thread_id: str,
        request: ReplyCreate,
        discussion_service: DiscussionService = Depends(get_discussion_service),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[DiscussionView]:
    reply = await discussion_service.reply(user_id, thread_id, request.content)
    return ApiResponse[DiscussionView].success(data=DiscussionView.model_validate(reply))


@router.delete(
    "/discussions/{post_id}",
    response_model=ApiResponse[None],
    summary="Delete Post",
    description="Delete one of the caller's own posts. Deleting a thread removes its replies.",
)
async def delete_post(
        post_id: str,
        discussion_service: DiscussionService = Depends(get_discussion_service),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[None]:
    await discussion_service.delete_post(user_id, post_id)
    return ApiResponse[None].success(message="Post deleted successfully")
