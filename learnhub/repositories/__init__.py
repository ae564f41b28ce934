"""
Repository package - Data access layer
"""

from learnhub.repositories.base_repo import BaseRepository
from learnhub.repositories.quiz_repo import QuizRepository
from learnhub.repositories.lesson_repo import LessonRepository
from learnhub.repositories.module_repo import ModuleRepository
from learnhub.repositories.course_repo import CourseRepository
from learnhub.repositories.attempt_repo import QuizAttemptRepository
from learnhub.repositories.progress_repo import EnrollmentRepository, LessonProgressRepository
from learnhub.repositories.review_repo import ReviewRepository
from learnhub.repositories.discussion_repo import DiscussionRepository

__all__ = [
    "BaseRepository",
    "QuizRepository",
    "LessonRepository",
    "ModuleRepository",
    "CourseRepository",
    "QuizAttemptRepository",
    "EnrollmentRepository",
    "LessonProgressRepository",
    "ReviewRepository",
    "DiscussionRepository",
]
