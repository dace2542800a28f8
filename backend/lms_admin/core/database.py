"""
Database configuration and session management for the LMS admin backend.

Sets up SQLAlchemy engine, session factory, and base model.
"""

from typing import Generator
from sqlalchemy import create_engine, MetaData
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
import logging

from .config import settings


# Configure logging
logger = logging.getLogger(__name__)


# SQLAlchemy metadata conventions for better constraint naming
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=convention)


# Create engine based on environment
if settings.TESTING:
    # Use in-memory SQLite for testing
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
elif settings.DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False},
        echo=settings.DEBUG,
    )
else:
    # PostgreSQL / MySQL for production
    engine = create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=10,        # Number of connections to maintain
        max_overflow=20,     # Maximum overflow connections
        echo=settings.DEBUG, # Log SQL statements if in debug mode
    )


# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# Base class for models
Base = declarative_base(metadata=metadata)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(db: Session) -> None:
    """
    Initialize database with required data.

    Creates the first admin account when no admin exists yet and seeds
    the default system settings and API configurations.

    Args:
        db: Database session
    """
    from lms_admin.models.user import User
    from lms_admin.core.security import get_password_hash
    from lms_admin.services.settings import SettingsService

    # An LMS without any admin cannot be administered
    admin_exists = db.query(User).filter(User.is_admin.is_(True)).first()

    if not admin_exists:
        admin_user = User(
            email=settings.FIRST_ADMIN_EMAIL,
            fullname=settings.FIRST_ADMIN_FULLNAME,
            password_hash=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
            is_active=True,
            is_admin=True,
            is_confirmed=True
        )
        db.add(admin_user)
        db.commit()
        logger.info(f"Admin user created: {settings.FIRST_ADMIN_EMAIL}")

    SettingsService(db).seed_default_settings()


class DatabaseManager:
    """
    Database manager for handling database operations.
    """

    @staticmethod
    def create_all_tables():
        """Create all database tables."""
        import lms_admin.models  # noqa: F401  registers mappers
        Base.metadata.create_all(bind=engine)
        logger.info("All database tables created successfully")
