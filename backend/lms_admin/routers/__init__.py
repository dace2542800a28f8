"""
API routers for the LMS admin backend.

This module contains all API endpoint routers:
- auth: Login and the authentication dependencies
- settings: System settings, API configurations, MCQ generation settings
- surveys: Surveys, questions and responses
- content: Course modules, lectures, attachments and sections
- users: User management
- admin: Dashboard and audit log
"""

from fastapi import APIRouter

# Import individual routers
from .auth import router as auth_router
from .settings import router as settings_router
from .surveys import router as surveys_router
from .content import router as content_router
from .users import router as users_router

# Import admin sub-routers
from .admin import admin_router

# Create main API router
api_router = APIRouter()

# Include all routers with their prefixes
api_router.include_router(
    auth_router,
    prefix="/auth",
    tags=["authentication"]
)

api_router.include_router(
    settings_router,
    prefix="/settings",
    tags=["settings"]
)

api_router.include_router(
    surveys_router,
    prefix="/surveys",
    tags=["surveys"]
)

api_router.include_router(
    content_router,
    prefix="/courses",
    tags=["course-content"]
)

api_router.include_router(
    users_router,
    prefix="/users",
    tags=["users"]
)

api_router.include_router(
    admin_router,
    prefix="/admin",
    tags=["admin"]
)

# Export all routers
__all__ = [
    "api_router",
    "auth_router",
    "settings_router",
    "surveys_router",
    "content_router",
    "users_router",
    "admin_router"
]
