from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from learnhub.model.course_models import Course, Lesson, Module
from learnhub.model.enums import ContentType, CourseLevel
from learnhub.utils.exceptions import ValidationException


# =============================
#   Lesson content variants
# =============================
class VideoContent(BaseModel):
    content_type: Literal["video"] = "video"
    url: Optional[str] = Field(None, description="Video URL")


class TextContent(BaseModel):
    content_type: Literal["text"] = "text"
    body: Optional[str] = Field(None, description="Article text")


class QuizContent(BaseModel):
    """The quiz itself lives in its own table."""
    content_type: Literal["quiz"] = "quiz"


class AssignmentContent(BaseModel):
    content_type: Literal["assignment"] = "assignment"
    instructions: Optional[str] = Field(None, description="Assignment instructions")


class ResourceContent(BaseModel):
    content_type: Literal["resource"] = "resource"
    url: Optional[str] = Field(None, description="Download URL")


LessonContent = Annotated[
    Union[VideoContent, TextContent, QuizContent, AssignmentContent, ResourceContent],
    Field(discriminator="content_type"),
]

_content_adapter = TypeAdapter(LessonContent)

# Which attribute of each variant is stored in the lesson's content column
_CONTENT_FIELD = {
    ContentType.VIDEO: "url",
    ContentType.TEXT: "body",
    ContentType.QUIZ: None,
    ContentType.ASSIGNMENT: "instructions",
    ContentType.RESOURCE: "url",
}


def content_to_columns(content: LessonContent) -> dict:
    """Flatten a content variant into lesson column values."""
    content_type = ContentType(content.content_type)
    field = _CONTENT_FIELD[content_type]
    value = getattr(content, field) if field else None
    return {"content_type": content_type.value, "content": value or None}


def parse_content(data: dict) -> LessonContent:
    """Validate raw content input such as {"content_type": "video", "url": ...}."""
    try:
        return _content_adapter.validate_python(data)
    except PydanticValidationError as e:
        raise ValidationException(
            f"Invalid lesson content (type: {data.get('content_type')!r})"
        ) from e


def content_from_columns(content_type: str, content: Optional[str]) -> LessonContent:
    """Rebuild the content variant from lesson column values."""
    try:
        field = _CONTENT_FIELD[ContentType(content_type)]
        data = {"content_type": content_type}
        if field:
            data[field] = content
        return _content_adapter.validate_python(data)
    except (ValueError, PydanticValidationError) as e:
        raise ValidationException(f"Unknown lesson content type: {content_type}") from e


# =============================
#   Course
# =============================
class CourseCreate(BaseModel):
    title: str = Field(..., description="Course title")
    description: str = ""
    level: CourseLevel = CourseLevel.BEGINNER
    price: Decimal = Field(default=Decimal("0"), ge=0)
    is_published: bool = False
    thumbnail_url: Optional[str] = None
    slug: Optional[str] = Field(None, description="Generated from the title when omitted")


class CourseUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    level: Optional[CourseLevel] = None
    price: Optional[Decimal] = Field(None, ge=0)
    is_published: Optional[bool] = None
    thumbnail_url: Optional[str] = None
    slug: Optional[str] = None


class CourseView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    slug: str
    description: str
    level: CourseLevel
    price: Decimal
    is_published: bool
    thumbnail_url: Optional[str] = None
    instructor_id: str
    created_date: Optional[datetime] = None

    @classmethod
    def from_model(cls, course: Course) -> "CourseView":
        return cls.model_validate(course)


# =============================
#   Module / Lesson
# =============================
class ModuleCreate(BaseModel):
    title: str
    description: Optional[str] = None


class ModuleUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None


class ModuleView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    course_id: str
    title: str
    description: Optional[str] = None
    order_index: int
    lesson_count: int = 0

    @classmethod
    def from_model(cls, module: Module, lesson_count: int = 0) -> "ModuleView":
        return cls(
            id=module.id,
            course_id=module.course_id,
            title=module.title,
            description=module.description,
            order_index=module.order_index,
            lesson_count=lesson_count,
        )


class LessonCreate(BaseModel):
    title: str
    content: LessonContent = Field(default_factory=TextContent)
    duration_minutes: Optional[int] = Field(None, ge=0)
    is_preview: bool = False


class LessonUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[LessonContent] = None
    duration_minutes: Optional[int] = Field(None, ge=0)
    is_preview: Optional[bool] = None


class LessonView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    module_id: str
    title: str
    content: LessonContent
    duration_minutes: Optional[int] = None
    is_preview: bool = False
    order_index: int

    @classmethod
    def from_model(cls, lesson: Lesson) -> "LessonView":
        return cls(
            id=lesson.id,
            module_id=lesson.module_id,
            title=lesson.title,
            content=content_from_columns(lesson.content_type, lesson.content),
            duration_minutes=lesson.duration_minutes,
            is_preview=lesson.is_preview,
            order_index=lesson.order_index,
        )


class ReorderRequest(BaseModel):
    new_index: int = Field(..., ge=0, description="Target position among siblings")
