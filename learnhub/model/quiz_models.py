"""
Quiz-related models (Quiz, Question, Answer, QuizAttempt)
"""

from sqlalchemy import (
    Column, Text, Integer, Boolean, ForeignKey, String, DateTime
)
from sqlalchemy.orm import relationship

from learnhub.model.base import Base, BaseMixin
from learnhub.model.enums import QuestionType


class Quiz(Base, BaseMixin):
    """
    Quiz attached 1:1 to a lesson.
    """
    __tablename__ = 'quizzes'

    lesson_id = Column(
        String(36),
        ForeignKey('lessons.id', ondelete='CASCADE'),
        nullable=False,
        unique=True,
    )
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    passing_score = Column(Integer, default=70, nullable=False)
    time_limit_minutes = Column(Integer, nullable=True)  # None means no limit

    # Relationships
    questions = relationship(
        "Question",
        back_populates="quiz",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Question.order_index",
    )

    def __repr__(self):
        return f"<Quiz(id={self.id}, lesson_id={self.lesson_id})>"


class Question(Base, BaseMixin):
    __tablename__ = 'questions'

    quiz_id = Column(
        String(36),
        ForeignKey('quizzes.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )

    question_text = Column(Text, nullable=False)
    question_type = Column(
        String(31),
        default=QuestionType.MULTIPLE_CHOICE.value,
        nullable=False
    )
    points = Column(Integer, default=1, nullable=False)
    order_index = Column(Integer, default=0, nullable=False)

    # Relationships
    quiz = relationship("Quiz", back_populates="questions")
    answers = relationship(
        "Answer",
        back_populates="question",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Answer.order_index",
    )

    def __repr__(self):
        return f"<Question(id={self.id}, type={self.question_type})>"


class Answer(Base, BaseMixin):
    __tablename__ = 'answers'

    question_id = Column(
        String(36),
        ForeignKey('questions.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )

    answer_text = Column(Text, nullable=False)
    is_correct = Column(Boolean, default=False, nullable=False)
    order_index = Column(Integer, default=0, nullable=False)

    # Relationships
    question = relationship("Question", back_populates="answers")

    def __repr__(self):
        return f"<Answer(id={self.id}, is_correct={self.is_correct})>"


class QuizAttempt(Base, BaseMixin):
    """
    One learner's pass at a quiz. Never deleted, finalized exactly once.
    """
    __tablename__ = 'quiz_attempts'

    user_id = Column(String(36), nullable=False, index=True)
    quiz_id = Column(
        String(36),
        ForeignKey('quizzes.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    started_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    score = Column(Integer, nullable=True)
    passed = Column(Boolean, nullable=True)

    def __repr__(self):
        return f"<QuizAttempt(id={self.id}, score={self.score})>"
