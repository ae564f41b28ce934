"""
Course Content Tree - authoring view of one course's Module -> Lesson hierarchy.

The tree's UI state (loaded modules, expanded modules, cached lesson lists)
is an immutable TreeState value: every operation takes a state and returns
the next one, so nothing here holds per-user mutable state.
"""

import logging
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from learnhub.repositories.course_repo import CourseRepository
from learnhub.repositories.lesson_repo import LessonRepository
from learnhub.repositories.module_repo import ModuleRepository
from learnhub.schemas.course import (
    LessonContent,
    LessonView,
    ModuleView,
    content_to_columns,
    parse_content,
)
from learnhub.services.ordering import next_order_index, reorder
from learnhub.utils.exceptions import ResourceNotFoundException, ValidationException

logger = logging.getLogger(__name__)

# Marks an argument the caller left out, so None can still be written
_UNSET: Any = object()


class TreeState(BaseModel):
    model_config = ConfigDict(frozen=True)

    course_id: str
    modules: tuple[ModuleView, ...] = ()
    expanded: frozenset[str] = frozenset()
    lessons: dict[str, tuple[LessonView, ...]] = Field(default_factory=dict)

    def module(self, module_id: str) -> ModuleView:
        for module in self.modules:
            if module.id == module_id:
                return module
        raise ResourceNotFoundException(f"Module not found: {module_id}")

    def is_expanded(self, module_id: str) -> bool:
        return module_id in self.expanded

    def lessons_for(self, module_id: str) -> Optional[tuple[LessonView, ...]]:
        """Cached lessons of a module, or None when not loaded."""
        return self.lessons.get(module_id)

    def module_id_of(self, lesson_id: str) -> str:
        """Module holding a cached lesson."""
        for module_id, lessons in self.lessons.items():
            if any(lesson.id == lesson_id for lesson in lessons):
                return module_id
        raise ResourceNotFoundException(f"Lesson not loaded: {lesson_id}")


def _require_title(title: Optional[str], what: str) -> str:
    if title is None or not title.strip():
        raise ValidationException(f"{what} title is required")
    return title.strip()


def _as_content(content: Union[LessonContent, dict]) -> LessonContent:
    return parse_content(content) if isinstance(content, dict) else content


class CourseContentTree:
    """
    Module/lesson authoring operations for a single course.
    """

    def __init__(
            self,
            course_repository: CourseRepository,
            module_repository: ModuleRepository,
            lesson_repository: LessonRepository,
    ):
        self._courses = course_repository
        self._modules = module_repository
        self._lessons = lesson_repository

    # =============================
    #   Loading / view state
    # =============================
    async def load_modules(self, course_id: str) -> TreeState:
        if not await self._courses.exists(course_id):
            raise ResourceNotFoundException(f"Course not found with ID: {course_id}")

        state = TreeState(course_id=course_id)
        return await self._refresh_modules(state)

    async def expand(self, state: TreeState, module_id: str) -> TreeState:
        """Expand a module, fetching its lessons only if not already cached."""
        state.module(module_id)

        if state.lessons_for(module_id) is None:
            state = await self._load_lessons(state, module_id)

        return state.model_copy(update={"expanded": state.expanded | {module_id}})

    async def open_module(self, module_id: str) -> TreeState:
        """Load the tree of the module's course with that module expanded."""
        module = await self._modules.get_by_id(module_id)
        if not module:
            raise ResourceNotFoundException(f"Module not found with ID: {module_id}")
        state = await self.load_modules(module.course_id)
        return await self.expand(state, module_id)

    async def open_lesson(self, lesson_id: str) -> TreeState:
        """Load the tree of the lesson's course with its module expanded."""
        lesson = await self._lessons.get_by_id(lesson_id)
        if not lesson:
            raise ResourceNotFoundException(f"Lesson not found with ID: {lesson_id}")
        return await self.open_module(lesson.module_id)

    @staticmethod
    def collapse(state: TreeState, module_id: str) -> TreeState:
        return state.model_copy(update={"expanded": state.expanded - {module_id}})

    # =============================
    #   Modules
    # =============================
    async def create_module(
            self,
            state: TreeState,
            title: str,
            description: Optional[str] = None,
    ) -> tuple[TreeState, ModuleView]:
        title = _require_title(title, "Module")

        indices = await self._modules.get_order_indices(state.course_id)
        module = await self._modules.create({
            "course_id": state.course_id,
            "title": title,
            "description": description,
            "order_index": next_order_index(indices),
        })
        logger.info(f"Created module {module.id} in course {state.course_id} at {module.order_index}")

        state = await self._refresh_modules(state)
        return state, state.module(module.id)

    async def update_module(
            self,
            state: TreeState,
            module_id: str,
            title: Optional[str] = None,
            description: Optional[str] = _UNSET,
    ) -> TreeState:
        """
        Partial update; order_index is never touched here. Passing
        ``description=None`` clears the description.
        """
        state.module(module_id)

        changes = {}
        if title is not None:
            changes["title"] = _require_title(title, "Module")
        if description is not _UNSET:
            changes["description"] = description

        if changes:
            await self._modules.update(module_id, changes)
        return await self._refresh_modules(state)

    async def delete_module(self, state: TreeState, module_id: str) -> TreeState:
        """Irreversible: removes the module's lessons and their quizzes too."""
        state.module(module_id)

        await self._modules.delete_module_cascade(module_id)
        logger.info(f"Deleted module {module_id} with its lessons")

        lessons = {k: v for k, v in state.lessons.items() if k != module_id}
        state = state.model_copy(
            update={"expanded": state.expanded - {module_id}, "lessons": lessons}
        )
        return await self._refresh_modules(state)

    async def reorder_module(self, state: TreeState, module_id: str, new_index: int) -> TreeState:
        ids = await self._modules.get_ids_in_order(state.course_id)
        await self._modules.apply_order(reorder(ids, module_id, new_index))
        return await self._refresh_modules(state)

    # =============================
    #   Lessons
    # =============================
    async def create_lesson(
            self,
            state: TreeState,
            module_id: str,
            title: str,
            content: Union[LessonContent, dict],
            duration_minutes: Optional[int] = None,
            is_preview: bool = False,
    ) -> tuple[TreeState, LessonView]:
        state.module(module_id)
        title = _require_title(title, "Lesson")
        content = _as_content(content)

        indices = await self._lessons.get_order_indices(module_id)
        lesson = await self._lessons.create({
            "module_id": module_id,
            "title": title,
            "duration_minutes": duration_minutes or None,
            "is_preview": is_preview,
            "order_index": next_order_index(indices),
            **content_to_columns(content),
        })
        logger.info(f"Created {lesson.content_type} lesson {lesson.id} in module {module_id}")

        state = await self._invalidate(state, module_id, counts_changed=True)
        return state, LessonView.from_model(lesson)

    async def update_lesson(
            self,
            state: TreeState,
            lesson_id: str,
            title: Optional[str] = None,
            content: Optional[Union[LessonContent, dict]] = None,
            duration_minutes: Optional[int] = None,
            is_preview: Optional[bool] = None,
    ) -> TreeState:
        lesson = await self._get_lesson(state, lesson_id)

        changes = {}
        if title is not None:
            changes["title"] = _require_title(title, "Lesson")
        if content is not None:
            changes.update(content_to_columns(_as_content(content)))
        if duration_minutes is not None:
            changes["duration_minutes"] = duration_minutes or None
        if is_preview is not None:
            changes["is_preview"] = is_preview

        if changes:
            await self._lessons.update(lesson_id, changes)
        return await self._invalidate(state, lesson.module_id)

    async def delete_lesson(self, state: TreeState, lesson_id: str) -> TreeState:
        """Irreversible: an attached quiz goes with the lesson."""
        lesson = await self._get_lesson(state, lesson_id)

        await self._lessons.delete_lesson_cascade(lesson_id)
        logger.info(f"Deleted lesson {lesson_id} from module {lesson.module_id}")

        return await self._invalidate(state, lesson.module_id, counts_changed=True)

    async def reorder_lesson(self, state: TreeState, lesson_id: str, new_index: int) -> TreeState:
        lesson = await self._get_lesson(state, lesson_id)

        ids = await self._lessons.get_ids_in_order(lesson.module_id)
        await self._lessons.apply_order(reorder(ids, lesson_id, new_index))
        return await self._invalidate(state, lesson.module_id)

    # =============================
    #   Internals
    # =============================
    async def _get_lesson(self, state: TreeState, lesson_id: str):
        lesson = await self._lessons.get_by_id(lesson_id)
        if not lesson:
            raise ResourceNotFoundException(f"Lesson not found with ID: {lesson_id}")
        # Must belong to this course
        state.module(lesson.module_id)
        return lesson

    async def _refresh_modules(self, state: TreeState) -> TreeState:
        rows = await self._modules.get_modules_with_lesson_count(state.course_id)
        modules = tuple(ModuleView.from_model(module, count) for module, count in rows)
        return state.model_copy(update={"modules": modules})

    async def _load_lessons(self, state: TreeState, module_id: str) -> TreeState:
        lessons = await self._lessons.get_lessons_by_module_id(module_id)
        logger.debug(f"Loaded {len(lessons)} lessons for module {module_id}")
        cache = dict(state.lessons)
        cache[module_id] = tuple(LessonView.from_model(lesson) for lesson in lessons)
        return state.model_copy(update={"lessons": cache})

    async def _invalidate(
            self, state: TreeState, module_id: str, counts_changed: bool = False
    ) -> TreeState:
        """
        Drop the cached lessons of one module. An expanded module is
        reloaded right away; other modules keep their caches.
        """
        cache = {k: v for k, v in state.lessons.items() if k != module_id}
        state = state.model_copy(update={"lessons": cache})

        if state.is_expanded(module_id):
            state = await self._load_lessons(state, module_id)
        if counts_changed:
            state = await self._refresh_modules(state)
        return state
