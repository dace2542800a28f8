"""
Service layer for the LMS admin backend.

Each service wraps a SQLAlchemy session and raises ``AppError`` for
failures the API should report to the client.
"""

from .content import LectureService, ModuleService, SectionService
from .dashboard import DashboardService
from .mcq_settings import McqSettingsService
from .settings import SettingsService
from .surveys import SurveyService
from .users import UserService

__all__ = [
    "DashboardService",
    "LectureService",
    "McqSettingsService",
    "ModuleService",
    "SectionService",
    "SettingsService",
    "SurveyService",
    "UserService",
]
