"""
Database models for the LMS admin backend.

This module contains all SQLAlchemy models for the application:
- User models for authentication, roles and preferences
- Course content models (modules, lectures, attachments, sections)
- Survey models (questions, responses, answers)
- Admin models for settings, API credentials and auditing
"""

from lms_admin.core.database import Base

# Import all models to ensure they're registered with SQLAlchemy
from .user import User, UserSetting
from .course import (
    Course, CourseModule, Lecture, LectureAttachment, LectureSection, Enrollment
)
from .survey import Survey, SurveyQuestion, SurveyResponse, SurveyAnswer
from .admin import AdminLog, AdminAction, SystemSetting, ApiConfiguration

# Export all models
__all__ = [
    "Base",
    "User",
    "UserSetting",
    "Course",
    "CourseModule",
    "Lecture",
    "LectureAttachment",
    "LectureSection",
    "Enrollment",
    "Survey",
    "SurveyQuestion",
    "SurveyResponse",
    "SurveyAnswer",
    "AdminLog",
    "AdminAction",
    "SystemSetting",
    "ApiConfiguration"
]
