import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from learnhub.dependencies.services import get_content_tree, get_course_service
from learnhub.schemas.course import CourseCreate, CourseUpdate, CourseView, ModuleCreate, ModuleView
from learnhub.schemas.generic import ApiResponse
from learnhub.services.auth_service import AuthService
from learnhub.services.content_tree import CourseContentTree
from learnhub.services.course_service import CourseService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses", tags=["Courses"])


@router.post(
    "",
    response_model=ApiResponse[CourseView],
    summary="Create Course",
    description="Create a course owned by the calling instructor. The slug defaults to one built from the title.",
)
async def create_course(
        request: CourseCreate,
        course_service: CourseService = Depends(get_course_service),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[CourseView]:
    course = await course_service.create_course(user_id, request)
    return ApiResponse[CourseView].success(
        data=CourseView.from_model(course), message="Course created successfully"
    )


@router.get(
    "",
    response_model=ApiResponse[List[CourseView]],
    summary="List Published Courses",
)
async def list_published_courses(
        skip: int = Query(0, ge=0),
        limit: int = Query(100, ge=1, le=500),
        course_service: CourseService = Depends(get_course_service),
) -> ApiResponse[List[CourseView]]:
    courses = await course_service.list_published(skip=skip, limit=limit)
    return ApiResponse[List[CourseView]].success(
        data=[CourseView.from_model(course) for course in courses]
    )


@router.get(
    "/slug/{slug}",
    response_model=ApiResponse[CourseView],
    summary="Get Course By Slug",
)
async def get_course_by_slug(
        slug: str,
        course_service: CourseService = Depends(get_course_service),
) -> ApiResponse[CourseView]:
    course = await course_service.get_course_by_slug(slug)
    return ApiResponse[CourseView].success(data=CourseView.from_model(course))


@router.get(
    "/{course_id}",
    response_model=ApiResponse[CourseView],
    summary="Get Course",
)
async def get_course(
        course_id: str,
        course_service: CourseService = Depends(get_course_service),
) -> ApiResponse[CourseView]:
    course = await course_service.get_course(course_id)
    return ApiResponse[CourseView].success(data=CourseView.from_model(course))


@router.patch(
    "/{course_id}",
    response_model=ApiResponse[CourseView],
    summary="Update Course",
)
async def update_course(
        course_id: str,
        request: CourseUpdate,
        course_service: CourseService = Depends(get_course_service),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[CourseView]:
    course = await course_service.update_course(course_id, request)
    logger.info(f"User {user_id} updated course {course_id}")
    return ApiResponse[CourseView].success(
        data=CourseView.from_model(course), message="Course updated successfully"
    )


@router.delete(
    "/{course_id}",
    response_model=ApiResponse[None],
    summary="Delete Course",
    description="Irreversibly delete a course with its modules, lessons, quizzes, enrollments, reviews and discussions.",
)
async def delete_course(
        course_id: str,
        course_service: CourseService = Depends(get_course_service),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[None]:
    await course_service.delete_course(course_id)
    logger.info(f"User {user_id} deleted course {course_id}")
    return ApiResponse[None].success(message="Course deleted successfully")


# =============================
#   Modules of a course
# =============================
@router.get(
    "/{course_id}/modules",
    response_model=ApiResponse[List[ModuleView]],
    summary="List Modules",
    description="Modules of a course in display order, each with its lesson count.",
)
async def list_modules(
        course_id: str,
        tree: CourseContentTree = Depends(get_content_tree),
) -> ApiResponse[List[ModuleView]]:
    state = await tree.load_modules(course_id)
    return ApiResponse[List[ModuleView]].success(data=list(state.modules))


@router.post(
    "/{course_id}/modules",
    response_model=ApiResponse[ModuleView],
    summary="Create Module",
    description="Append a module at the end of the course.",
)
async def create_module(
        course_id: str,
        request: ModuleCreate,
        tree: CourseContentTree = Depends(get_content_tree),
        user_id: str = Depends(AuthService.get_current_user),
) -> ApiResponse[ModuleView]:
    state = await tree.load_modules(course_id)
    _, module = await tree.create_module(state, request.title, request.description)
    return ApiResponse[ModuleView].success(data=module, message="Module created successfully")
