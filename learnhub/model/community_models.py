"""
Course community models: learner reviews and the discussion forum
"""

from sqlalchemy import (
    Column, Integer, Boolean, ForeignKey, String, Text, DateTime, UniqueConstraint
)

from learnhub.model.base import Base, BaseMixin


class Review(Base, BaseMixin):
    """
    A learner's rating of a course; at most one per learner and course.
    """

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_review_user_course"),
    )

    user_id = Column(String(36), nullable=False, index=True)
    course_id = Column(
        String(36),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    is_moderated = Column(Boolean, default=True, nullable=False)
    posted_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<Review(user_id={self.user_id}, course_id={self.course_id}, rating={self.rating})>"


class Discussion(Base, BaseMixin):
    """
    Forum post of a course. Threads have a title and no parent; replies
    point at their thread through parent_id.
    """

    __tablename__ = "discussions"

    course_id = Column(
        String(36),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(String(36), nullable=False, index=True)
    parent_id = Column(
        String(36),
        ForeignKey("discussions.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    title = Column(String(255), nullable=True)
    content = Column(Text, nullable=False)
    posted_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<Discussion(id={self.id}, course_id={self.course_id}, parent_id={self.parent_id})>"
