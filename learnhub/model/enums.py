"""
Enums shared by models, schemas and services
"""
from enum import Enum


class CourseLevel(str, Enum):
    """Course difficulty level"""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ContentType(str, Enum):
    """Type of lesson content"""
    VIDEO = "video"
    TEXT = "text"
    QUIZ = "quiz"
    ASSIGNMENT = "assignment"
    RESOURCE = "resource"


class QuestionType(str, Enum):
    """Type of quiz question"""
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"


class AttemptStatus(str, Enum):
    """Lifecycle of a single quiz attempt"""
    LOADING = "loading"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
