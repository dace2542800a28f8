"""
User models for the LMS admin backend.

Defines the User table with authentication fields and role flags, and the
per-user key/value UserSetting table.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import (
    Boolean, Integer, String, DateTime, Text, ForeignKey,
    UniqueConstraint, Index
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from lms_admin.core.database import Base


class User(Base):
    """
    User model for authentication and role management.
    """
    __tablename__ = "users"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Authentication fields
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False
    )
    fullname: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Roles and status
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_instructor: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_confirmed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Bumped on password change to invalidate issued tokens
    token_version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

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
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    settings = relationship("UserSetting", back_populates="user", cascade="all, delete-orphan")
    enrollments = relationship("Enrollment", back_populates="user", cascade="all, delete-orphan")
    taught_courses = relationship("Course", back_populates="instructor")
    admin_logs = relationship("AdminLog", back_populates="user")

    __table_args__ = (
        Index("idx_user_email_active", "email", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"

    @property
    def role(self) -> str:
        if self.is_admin:
            return "admin"
        if self.is_instructor:
            return "instructor"
        return "student"

    def to_dict(self) -> dict:
        """Convert user to its public dictionary representation."""
        return {
            "id": self.id,
            "fullname": self.fullname,
            "email": self.email,
            "isAdmin": self.is_admin,
            "isInstructor": self.is_instructor,
            "isActive": self.is_active,
            "isConfirmed": self.is_confirmed,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "lastLogin": self.last_login.isoformat() if self.last_login else None,
        }


class UserSetting(Base):
    """
    Free-form per-user preference (language, theme, ...).
    """
    __tablename__ = "user_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    setting_key: Mapped[str] = mapped_column(String(100), nullable=False)
    setting_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    user = relationship("User", back_populates="settings")

    __table_args__ = (
        UniqueConstraint("user_id", "setting_key", name="uq_user_setting_key"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "settingKey": self.setting_key,
            "settingValue": self.setting_value,
        }
