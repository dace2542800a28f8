import asyncio
import json

from fastapi.testclient import TestClient
from starlette.requests import Request

from conftest import PASSWORD, auth_headers
from lms_admin.core.config import settings
from lms_admin.core.errors import AppError, unhandled_exception_handler
from lms_admin.main import app
from lms_admin.models import SystemSetting, User


def make_request(path="/boom"):
    return Request({
        "type": "http",
        "method": "GET",
        "path": path,
        "headers": [],
        "query_string": b"",
        "client": ("127.0.0.1", 50000),
    })


def test_health(client):
    r = client.get("/health")
    assert r.json() == {"status": "ok", "version": settings.VERSION}


def test_unknown_route_uses_error_envelope(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert r.json() == {"success": False, "error": "Route not found - /api/nope"}


def test_validation_errors_list_fields(client):
    r = client.post("/api/auth/login", json={"email": "not-an-email"})
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Validation error"
    assert {d["field"] for d in body["details"]} == {"email", "password"}


def test_request_id_is_echoed(client):
    r = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert r.headers["X-Request-ID"] == "abc123"

    r = client.get("/health")
    assert len(r.headers["X-Request-ID"]) == 32


def test_login(client, db, student):
    r = client.post("/api/auth/login", json={"email": "Student@Example.com", "password": PASSWORD})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["tokenType"] == "bearer"
    assert data["user"]["email"] == "student@example.com"

    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert r.json()["data"]["lastLogin"] is not None


def test_login_failures(client, make_user):
    make_user("gone@example.com", is_active=False)

    r = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": PASSWORD})
    assert r.status_code == 401
    assert r.json() == {"success": False, "error": "Invalid email or password"}

    r = client.post("/api/auth/login", json={"email": "gone@example.com", "password": PASSWORD})
    assert r.status_code == 403
    assert r.json()["error"] == "Account is deactivated"


def test_me_requires_valid_token(client, make_user):
    r = client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json()["error"] == "Not authenticated"

    r = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401
    assert r.json()["error"] == "Could not validate credentials"

    inactive = make_user("inactive@example.com", is_active=False)
    r = client.get("/api/auth/me", headers=auth_headers(inactive))
    assert r.status_code == 403
    assert r.json()["error"] == "User account is deactivated"


def test_app_error_repr():
    err = AppError("Survey not found", 404)
    assert err.status_code == 404
    assert repr(err) == "<AppError(status_code=404, message='Survey not found')>"


def test_unhandled_error_hides_details_in_production(monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    response = asyncio.run(unhandled_exception_handler(make_request(), RuntimeError("db exploded")))
    assert response.status_code == 500
    assert json.loads(response.body) == {"success": False, "error": "Internal server error"}


def test_unhandled_error_shows_message_outside_production(monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "development")
    response = asyncio.run(unhandled_exception_handler(make_request(), RuntimeError("db exploded")))
    assert json.loads(response.body)["error"] == "db exploded"


def test_startup_creates_admin_and_defaults(db):
    with TestClient(app):
        pass

    admin = db.query(User).filter(User.email == settings.FIRST_ADMIN_EMAIL).one()
    assert admin.is_admin is True
    assert db.query(SystemSetting).count() == 5

    # A second startup does not duplicate anything
    with TestClient(app):
        pass
    assert db.query(User).count() == 1
    assert db.query(SystemSetting).count() == 5
