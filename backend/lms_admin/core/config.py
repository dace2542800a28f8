"""
Configuration settings for the LAILA LMS admin backend.

Uses Pydantic settings management for environment variables and configuration.
"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
import secrets


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """

    # API Settings
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "LAILA LMS Admin"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Administration API for users, course content, surveys and settings"
    ENVIRONMENT: str = "development"

    # Security
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # Database
    DATABASE_URL: str = "sqlite:///./laila.db"

    # CORS, comma separated
    BACKEND_CORS_ORIGINS: str = ""

    # Admin settings
    FIRST_ADMIN_EMAIL: str = "admin@laila-lms.com"
    FIRST_ADMIN_PASSWORD: str = "admin123"
    FIRST_ADMIN_FULLNAME: str = "Administrator"

    # Pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # External AI providers (connection tests only)
    OPENAI_API_BASE: str = "https://api.openai.com/v1"
    GEMINI_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta"
    API_TEST_TIMEOUT_SECONDS: float = 10.0

    # Development settings
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False
    TESTING: bool = False

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return str(v).upper()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @property
    def is_production(self) -> bool:
        """Check if the app runs in production mode."""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def cors_origins(self) -> List[str]:
        return [i.strip() for i in self.BACKEND_CORS_ORIGINS.split(",") if i.strip()]


# Create global settings instance
settings = Settings()
