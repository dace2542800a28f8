"""
Core module for the LMS admin backend.

This module contains core functionality including:
- Configuration management
- Database connections
- Security utilities (JWT, password hashing, secret masking)
- Application errors and logging setup
"""

from .config import settings
from .database import get_db, engine, SessionLocal
from .errors import AppError
from .security import (
    create_access_token,
    create_user_token,
    verify_password,
    get_password_hash,
    verify_token,
    mask_secret,
    MASKED_VALUE
)

__all__ = [
    "settings",
    "get_db",
    "engine",
    "SessionLocal",
    "AppError",
    "create_access_token",
    "create_user_token",
    "verify_password",
    "get_password_hash",
    "verify_token",
    "mask_secret",
    "MASKED_VALUE"
]
