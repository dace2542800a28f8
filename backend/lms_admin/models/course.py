"""
Course content models for the LMS admin backend.

Defines Course, CourseModule, Lecture, LectureAttachment, LectureSection
and Enrollment. Ownership of all content flows from Course.instructor_id.
"""

from datetime import datetime
from typing import Optional
from enum import Enum
from sqlalchemy import (
    Boolean, Integer, String, DateTime, Text, Float,
    ForeignKey, UniqueConstraint, Index, CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from lms_admin.core.database import Base


class DifficultyLevel(str, Enum):
    """Difficulty levels for courses."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ContentStatus(str, Enum):
    """Status of a course."""
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class LectureContentType(str, Enum):
    TEXT = "text"
    VIDEO = "video"
    MIXED = "mixed"


class SectionType(str, Enum):
    """Kinds of blocks a lecture page is built from."""
    TEXT = "text"
    FILE = "file"
    AI_GENERATED = "ai-generated"
    CHATBOT = "chatbot"


class EnrollmentStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DROPPED = "dropped"


class Course(Base):
    """
    Course model; the owning instructor controls all nested content.
    """
    __tablename__ = "courses"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Basic information
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    difficulty: Mapped[str] = mapped_column(
        String(20),
        default=DifficultyLevel.BEGINNER.value,
        nullable=False
    )

    # Publishing and visibility
    status: Mapped[str] = mapped_column(
        String(20),
        default=ContentStatus.DRAFT.value,
        nullable=False
    )
    is_public: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Owner
    instructor_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    # Relationships
    instructor = relationship("User", back_populates="taught_courses")
    modules = relationship(
        "CourseModule",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="CourseModule.order_index"
    )
    enrollments = relationship("Enrollment", back_populates="course", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_course_status_instructor", "status", "instructor_id"),
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title='{self.title}', slug='{self.slug}')>"

    def is_owned_by(self, user_id: int) -> bool:
        return self.instructor_id == user_id


class CourseModule(Base):
    """
    A week/unit inside a course that groups lectures.
    """
    __tablename__ = "course_modules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    label: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)  # e.g. "Week 1 - Foundations"
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    course = relationship("Course", back_populates="modules")
    lectures = relationship(
        "Lecture",
        back_populates="module",
        cascade="all, delete-orphan",
        order_by="Lecture.order_index"
    )

    __table_args__ = (
        Index("idx_module_course_order", "course_id", "order_index"),
    )

    def __repr__(self) -> str:
        return f"<CourseModule(id={self.id}, course_id={self.course_id}, title='{self.title}')>"


class Lecture(Base):
    """
    A single lecture page inside a module.
    """
    __tablename__ = "lectures"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    module_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("course_modules.id", ondelete="CASCADE"), nullable=False
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content_type: Mapped[str] = mapped_column(
        String(20), default=LectureContentType.TEXT.value, nullable=False
    )
    video_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # minutes
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_free: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    module = relationship("CourseModule", back_populates="lectures")
    attachments = relationship(
        "LectureAttachment", back_populates="lecture", cascade="all, delete-orphan"
    )
    sections = relationship(
        "LectureSection",
        back_populates="lecture",
        cascade="all, delete-orphan",
        order_by="LectureSection.order"
    )

    __table_args__ = (
        CheckConstraint("duration IS NULL OR duration >= 0", name="check_lecture_duration"),
        Index("idx_lecture_module_order", "module_id", "order_index"),
    )

    def __repr__(self) -> str:
        return f"<Lecture(id={self.id}, module_id={self.module_id}, title='{self.title}')>"


class LectureAttachment(Base):
    """
    File attached to a lecture (slides, handouts).
    """
    __tablename__ = "lecture_attachments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    lecture_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lectures.id", ondelete="CASCADE"), nullable=False
    )
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_url: Mapped[str] = mapped_column(Text, nullable=False)
    file_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    lecture = relationship("Lecture", back_populates="attachments")


class LectureSection(Base):
    """
    Ordered content block of a lecture.
    """
    __tablename__ = "lecture_sections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    lecture_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lectures.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(20), default=SectionType.TEXT.value, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # File sections
    file_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    file_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    file_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Chatbot sections
    chatbot_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    chatbot_intro: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    chatbot_image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    chatbot_system_prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    chatbot_welcome: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    lecture = relationship("Lecture", back_populates="sections")


class Enrollment(Base):
    """
    Student enrollment in a course.
    """
    __tablename__ = "enrollments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), default=EnrollmentStatus.ACTIVE.value, nullable=False
    )
    progress: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="enrollments")
    course = relationship("Course", back_populates="enrollments")

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollment_user_course"),
        CheckConstraint("progress >= 0 AND progress <= 100", name="check_enrollment_progress"),
    )

    def __repr__(self) -> str:
        return f"<Enrollment(user_id={self.user_id}, course_id={self.course_id}, status='{self.status}')>"
