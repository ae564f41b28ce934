"""
Model package - Database models and enums
"""
from learnhub.model.base import Base, BaseMixin, TimestampMixin, new_id
from learnhub.model.enums import CourseLevel, ContentType, QuestionType, AttemptStatus
from learnhub.model.course_models import Course, Module, Lesson
from learnhub.model.quiz_models import Quiz, Question, Answer, QuizAttempt
from learnhub.model.progress_models import Enrollment, LessonProgress
from learnhub.model.community_models import Review, Discussion

__all__ = [
    # Base classes
    'Base',
    'BaseMixin',
    'TimestampMixin',
    'new_id',
    # Enums
    'CourseLevel',
    'ContentType',
    'QuestionType',
    'AttemptStatus',
    # Course models
    'Course',
    'Module',
    'Lesson',
    # Quiz models
    'Quiz',
    'Question',
    'Answer',
    'QuizAttempt',
    # Progress models
    'Enrollment',
    'LessonProgress',
    # Community models
    'Review',
    'Discussion',
]
