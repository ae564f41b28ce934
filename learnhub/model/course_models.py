"""
Course content models: Course -> Module -> Lesson
"""

from decimal import Decimal

from sqlalchemy import (
    Column,
    String,
    Text,
    Numeric,
    Enum as SQLEnum,
    Integer,
    Boolean,
    ForeignKey,
)
from sqlalchemy.orm import relationship

from learnhub.model.base import Base, BaseMixin
from learnhub.model.enums import CourseLevel, ContentType


class Course(Base, BaseMixin):
    """
    Course owned by an instructor. Owns its modules.
    """

    __tablename__ = "courses"

    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    thumbnail_url = Column(String(512), nullable=True)
    level = Column(
        SQLEnum(CourseLevel, name="course_level", values_callable=lambda e: [m.value for m in e]),
        default=CourseLevel.BEGINNER,
        nullable=False,
    )
    price = Column(Numeric(precision=10, scale=2), default=Decimal("0.00"), nullable=False)
    is_published = Column(Boolean, default=False, nullable=False)
    instructor_id = Column(String(36), nullable=False, index=True)

    # Relationships
    modules = relationship(
        "Module",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Module.order_index",
    )

    def __repr__(self):
        return f"<Course(id={self.id}, slug={self.slug})>"


class Module(Base, BaseMixin):
    """
    Ordered group of lessons inside a course
    """

    __tablename__ = "modules"

    course_id = Column(
        String(36),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    order_index = Column(Integer, default=0, nullable=False)

    # Relationships
    course = relationship("Course", back_populates="modules")
    lessons = relationship(
        "Lesson",
        back_populates="module",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Lesson.order_index",
    )

    def __repr__(self):
        return f"<Module(id={self.id}, title={self.title})>"


class Lesson(Base, BaseMixin):
    """
    Single unit of content. ``content`` holds the one string relevant to
    ``content_type`` (URL for video/resource, text for text/assignment,
    nothing for quiz).
    """

    __tablename__ = "lessons"

    module_id = Column(
        String(36),
        ForeignKey("modules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(255), nullable=False)
    content_type = Column(String(31), default=ContentType.TEXT.value, nullable=False)
    content = Column(Text, nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    is_preview = Column(Boolean, default=False, nullable=False)
    order_index = Column(Integer, default=0, nullable=False)

    # Relationships
    module = relationship("Module", back_populates="lessons")

    def __repr__(self):
        return f"<Lesson(id={self.id}, title={self.title}, type={self.content_type})>"
