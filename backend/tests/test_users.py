from conftest import PASSWORD, auth_headers
from lms_admin.models import AdminLog, Course, User


def login(client, email, password=PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def test_list_users_requires_admin(client, student):
    r = client.get("/api/users", headers=auth_headers(student))
    assert r.status_code == 403


def test_list_users_paginates_and_searches(client, admin, make_user):
    for n in range(3):
        make_user(f"learner{n}@example.com", fullname=f"Learner {n}")

    r = client.get("/api/users", params={"limit": 2}, headers=auth_headers(admin))
    body = r.json()
    assert len(body["data"]) == 2
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 4, "totalPages": 2}

    r = client.get("/api/users", params={"search": "learner1"}, headers=auth_headers(admin))
    users = r.json()["data"]
    assert [u["email"] for u in users] == ["learner1@example.com"]
    assert users[0]["counts"] == {"enrollments": 0, "taughtCourses": 0}
    assert "passwordHash" not in users[0]


def test_users_read_only_their_own_profile(client, student, instructor, admin):
    r = client.get(f"/api/users/{instructor.id}", headers=auth_headers(student))
    assert r.status_code == 403

    r = client.get(f"/api/users/{student.id}", headers=auth_headers(student))
    assert r.json()["data"]["email"] == "student@example.com"

    r = client.get(f"/api/users/{student.id}", headers=auth_headers(admin))
    assert r.status_code == 200

    r = client.get("/api/users/999", headers=auth_headers(admin))
    assert r.status_code == 404


def test_student_cannot_change_own_roles(client, db, student):
    r = client.put(
        f"/api/users/{student.id}",
        json={"fullname": "Renamed Student", "isAdmin": True, "isInstructor": True},
        headers=auth_headers(student),
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["fullname"] == "Renamed Student"
    assert data["isAdmin"] is False
    assert data["isInstructor"] is False


def test_admin_changes_roles_with_audit(client, db, admin, student):
    r = client.put(
        f"/api/users/{student.id}",
        json={"isInstructor": True},
        headers=auth_headers(admin),
    )
    assert r.json()["data"]["isInstructor"] is True

    log = db.query(AdminLog).one()
    assert log.action == "user_management"
    assert log.details == {"is_instructor": True}


def test_last_admin_is_protected(client, admin):
    headers = auth_headers(admin)
    r = client.put(f"/api/users/{admin.id}", json={"isAdmin": False}, headers=headers)
    assert r.status_code == 400
    assert r.json()["error"] == "Cannot remove admin rights from the last admin user"

    r = client.delete(f"/api/users/{admin.id}", headers=headers)
    assert r.status_code == 400
    assert r.json()["error"] == "Cannot delete the last admin user"


def test_admin_deleted_when_another_remains(client, db, admin, make_user):
    second = make_user("second.admin@example.com", fullname="Second Admin", is_admin=True)

    r = client.delete(f"/api/users/{second.id}", headers=auth_headers(admin))
    assert r.status_code == 200
    assert r.json()["message"] == "User deleted successfully"

    db.expire_all()
    assert db.get(User, second.id) is None
    log = db.query(AdminLog).filter(AdminLog.action == "delete").one()
    assert log.details == {"email": "second.admin@example.com"}


def test_password_change_revokes_old_tokens(client, student):
    old_headers = auth_headers(student)
    r = client.put(
        f"/api/users/{student.id}",
        json={"password": "a-new-password"},
        headers=old_headers,
    )
    assert r.status_code == 200

    r = client.get("/api/auth/me", headers=old_headers)
    assert r.status_code == 403
    assert r.json() == {"success": False, "error": "Token has been revoked"}

    assert login(client, "student@example.com").status_code == 401
    r = login(client, "student@example.com", "a-new-password")
    token = r.json()["data"]["token"]
    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.json()["data"]["id"] == student.id


def test_duplicate_email_conflicts(client, student, instructor):
    r = client.put(
        f"/api/users/{student.id}",
        json={"email": "teacher@example.com"},
        headers=auth_headers(student),
    )
    assert r.status_code == 409
    assert r.json()["success"] is False


def test_user_settings(client, student, instructor):
    headers = auth_headers(student)
    r = client.put(f"/api/users/{student.id}/settings/language", json={"value": "de"}, headers=headers)
    assert r.json()["data"]["settingValue"] == "de"
    client.put(f"/api/users/{student.id}/settings/language", json={"value": "fr"}, headers=headers)
    client.put(f"/api/users/{student.id}/settings/theme", json={"value": "dark"}, headers=headers)

    r = client.get(f"/api/users/{student.id}/settings", headers=headers)
    assert r.json()["data"] == {"language": "fr", "theme": "dark"}

    r = client.get(f"/api/users/{student.id}/settings", headers=auth_headers(instructor))
    assert r.status_code == 403


def test_user_stats(client, student, course, enroll, db, instructor):
    second = Course(title="Robotics", slug="robotics", instructor_id=instructor.id)
    db.add(second)
    db.commit()
    enroll(student, course)
    enroll(student, second, status="completed")

    r = client.get(f"/api/users/{student.id}/stats", headers=auth_headers(student))
    assert r.json()["data"] == {"enrolledCourses": 2, "completedCourses": 1}


def test_instructor_stats(client, instructor, student, course, enroll):
    enroll(student, course)
    headers = auth_headers(instructor)
    r = client.post(
        "/api/surveys",
        json={"title": "Course feedback", "courseId": course.id},
        headers=headers,
    )
    assert r.status_code == 201

    r = client.get(f"/api/users/{instructor.id}/instructor-stats", headers=headers)
    assert r.json()["data"] == {
        "totalCourses": 1,
        "totalStudents": 1,
        "totalSurveys": 1,
        "totalResponses": 0,
    }


def test_owner_of_courses_or_surveys_cannot_be_deleted(client, db, admin, instructor, other_instructor, course):
    r = client.post("/api/surveys", json={"title": "Standalone feedback"}, headers=auth_headers(other_instructor))
    survey_id = r.json()["data"]["id"]

    for owner in (instructor, other_instructor):
        r = client.delete(f"/api/users/{owner.id}", headers=auth_headers(admin))
        assert r.status_code == 400
        assert r.json()["error"] == "Cannot delete a user who owns courses or surveys"

    r = client.get(f"/api/surveys/{survey_id}", headers=auth_headers(admin))
    assert r.status_code == 200
    assert r.json()["data"]["createdBy"]["id"] == other_instructor.id

    db.expire_all()
    assert db.get(User, instructor.id) is not None
