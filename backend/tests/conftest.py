import os

# Must be set before the application modules read their settings
os.environ["TESTING"] = "true"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
from fastapi.testclient import TestClient

from lms_admin.core.database import Base, SessionLocal, engine, get_db
from lms_admin.core.security import create_user_token, get_password_hash
from lms_admin.main import app
from lms_admin.models import Course, Enrollment, User

PASSWORD = "password123"
PASSWORD_HASH = get_password_hash(PASSWORD)


def override_get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture()
def db():
    """Fresh schema for every test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    return TestClient(app)


@pytest.fixture()
def make_user(db):
    def _make_user(email, fullname="Test User", is_admin=False, is_instructor=False, is_active=True):
        user = User(
            email=email,
            fullname=fullname,
            password_hash=PASSWORD_HASH,
            is_admin=is_admin,
            is_instructor=is_instructor,
            is_active=is_active,
            is_confirmed=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


def auth_headers(user):
    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest.fixture()
def admin(make_user):
    return make_user("admin@example.com", fullname="Admin", is_admin=True)


@pytest.fixture()
def instructor(make_user):
    return make_user("teacher@example.com", fullname="Teacher", is_instructor=True)


@pytest.fixture()
def other_instructor(make_user):
    return make_user("other.teacher@example.com", fullname="Other Teacher", is_instructor=True)


@pytest.fixture()
def student(make_user):
    return make_user("student@example.com", fullname="Student")


@pytest.fixture()
def course(db, instructor):
    course = Course(title="Intro to AI", slug="intro-to-ai", instructor_id=instructor.id)
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


@pytest.fixture()
def enroll(db):
    def _enroll(user, course, status="active"):
        enrollment = Enrollment(user_id=user.id, course_id=course.id, status=status)
        db.add(enrollment)
        db.commit()
        return enrollment
    return _enroll
