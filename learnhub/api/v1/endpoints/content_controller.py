"""
Module and lesson authoring endpoints. Each request opens the course's
content tree at the affected module and returns the refreshed siblings.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends

from learnhub.dependencies.services import get_content_tree
from learnhub.schemas.course import (
    LessonCreate,
    LessonUpdate,
    LessonView,
    ModuleUpdate,
    ModuleView,
    ReorderRequest,
)
from learnhub.schemas.generic import ApiResponse
from learnhub.services.auth_service import AuthService
from learnhub.services.content_tree import CourseContentTree

logger = logging.getLogger(__name__)

module_router = APIRouter(prefix="/modules", tags=["Modules"])
lesson_router = APIRouter(prefix="/lessons", tags=["Lessons"])


# =============================
#   Modules
# =============================
@module_router.get(
    "/{module_id}/lessons",
    response_model=ApiResponse[List[LessonView]],
    summary="List Lessons",
)
async def list_lessons(
        module_id: str,
        tree: CourseContentTree = Depends(get_content_tree),
) -> ApiResponse[List[LessonView]]:
    state = await tree.open_module(module_id)
    return ApiResponse[List[LessonView]].success(data=list(state.lessons_for(module_id)))


@module_router.patch(
    "/{module_id}",
    response_model=ApiResponse[ModuleView],
    summary="Update Module",
)
async def update_module(
        module_id: str,
        request: ModuleUpdate,
        tree: CourseContentTree = Depends(get_content_tree),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[ModuleView]:
    state = await tree.open_module(module_id)
    state = await tree.update_module(state, module_id, **request.model_dump(exclude_unset=True))
    return ApiResponse[ModuleView].success(data=state.module(module_id))


@module_router.delete(
    "/{module_id}",
    response_model=ApiResponse[List[ModuleView]],
    summary="Delete Module",
    description="Irreversibly delete a module with its lessons and their quizzes. Returns the remaining modules.",
)
async def delete_module(
        module_id: str,
        tree: CourseContentTree = Depends(get_content_tree),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[List[ModuleView]]:
    state = await tree.open_module(module_id)
    state = await tree.delete_module(state, module_id)
    logger.info(f"User {user_id} deleted module {module_id}")
    return ApiResponse[List[ModuleView]].success(
        data=list(state.modules), message="Module deleted successfully"
    )


@module_router.post(
    "/{module_id}/reorder",
    response_model=ApiResponse[List[ModuleView]],
    summary="Reorder Module",
)
async def reorder_module(
        module_id: str,
        request: ReorderRequest,
        tree: CourseContentTree = Depends(get_content_tree),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[List[ModuleView]]:
    state = await tree.open_module(module_id)
    state = await tree.reorder_module(state, module_id, request.new_index)
    return ApiResponse[List[ModuleView]].success(data=list(state.modules))


@module_router.post(
    "/{module_id}/lessons",
    response_model=ApiResponse[LessonView],
    summary="Create Lesson",
    description="Append a lesson at the end of the module.",
)
async def create_lesson(
        module_id: str,
        request: LessonCreate,
        tree: CourseContentTree = Depends(get_content_tree),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[LessonView]:
    state = await tree.open_module(module_id)
    _, lesson = await tree.create_lesson(
        state,
        module_id,
        title=request.title,
        content=request.content,
        duration_minutes=request.duration_minutes,
        is_preview=request.is_preview,
    )
    return ApiResponse[LessonView].success(data=lesson, message="Lesson created successfully")


# =============================
#   Lessons
# =============================
@lesson_router.patch(
    "/{lesson_id}",
    response_model=ApiResponse[List[LessonView]],
    summary="Update Lesson",
    description="Partial update. Returns the lessons of the lesson's module.",
)
async def update_lesson(
        lesson_id: str,
        request: LessonUpdate,
        tree: CourseContentTree = Depends(get_content_tree),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[List[LessonView]]:
    state = await tree.open_lesson(lesson_id)
    module_id = state.module_id_of(lesson_id)
    state = await tree.update_lesson(
        state,
        lesson_id,
        title=request.title,
        content=request.content,
        duration_minutes=request.duration_minutes,
        is_preview=request.is_preview,
    )
    return ApiResponse[List[LessonView]].success(data=list(state.lessons_for(module_id)))


@lesson_router.delete(
    "/{lesson_id}",
    response_model=ApiResponse[List[LessonView]],
    summary="Delete Lesson",
    description="Irreversibly delete a lesson and its quiz. Returns the remaining lessons of the module.",
)
async def delete_lesson(
        lesson_id: str,
        tree: CourseContentTree = Depends(get_content_tree),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[List[LessonView]]:
    state = await tree.open_lesson(lesson_id)
    module_id = state.module_id_of(lesson_id)
    state = await tree.delete_lesson(state, lesson_id)
    logger.info(f"User {user_id} deleted lesson {lesson_id}")
    return ApiResponse[List[LessonView]].success(
        data=list(state.lessons_for(module_id)), message="Lesson deleted successfully"
    )


@lesson_router.post(
    "/{lesson_id}/reorder",
    response_model=ApiResponse[List[LessonView]],
    summary="Reorder Lesson",
)
async def reorder_lesson(
        lesson_id: str,
        request: ReorderRequest,
        tree: CourseContentTree = Depends(get_content_tree),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[List[LessonView]]:
    state = await tree.open_lesson(lesson_id)
    module_id = state.module_id_of(lesson_id)
    state = await tree.reorder_lesson(state, lesson_id, request.new_index)
    return ApiResponse[List[LessonView]].success(data=list(state.lessons_for(module_id)))
