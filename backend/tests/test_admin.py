import pytest
from markupsafe import Markup
from pydantic import ValidationError

from conftest import auth_headers
from lms_admin.components import ActionButton, FeatureCard, StatCard, StatItem, render_page
from lms_admin.routers.admin import build_dashboard_cards


def test_stat_card_escapes_text():
    html = str(StatCard(value=12, label="<script>alert(1)</script>").render())
    assert "&lt;script&gt;" in html
    assert "<script>" not in html
    assert 'class="stat-value text-2xl font-bold' in html
    assert "background-color: #f3f4f6" in html


def test_stat_card_sizes_and_icon():
    icon = Markup('<svg id="users"></svg>')
    html = str(StatCard(value="1.2k", label="Users", icon=icon, size="lg", icon_bg_color="#dbeafe").render())
    assert '<svg id="users"></svg>' in html
    assert "p-5" in html
    assert "text-3xl" in html
    assert "background-color: #dbeafe" in html

    html = str(StatCard(value=1, label="Users", icon='<svg id="plain"></svg>', size="sm").render())
    assert "&lt;svg" in html
    assert "text-xl" in html


def test_stat_card_rejects_unknown_size():
    with pytest.raises(ValidationError):
        StatCard(value=1, label="Users", size="xl")


def test_feature_card():
    card = FeatureCard(
        title="Surveys",
        description="Collect feedback",
        stats=[StatItem(value=3, label="Surveys")],
        actions=[
            ActionButton(label="Open", href="/api/surveys", variant="primary"),
            ActionButton(label="Export", href="/api/surveys/1/export"),
        ],
    )
    html = str(card.render())
    assert "feature-stats" in html
    assert 'href="/api/surveys"' in html
    assert "btn-primary" in html
    assert "btn-secondary" in html
    assert "from-blue-500 to-blue-600" in html

    html = str(FeatureCard(title="Empty", description="Nothing yet").render())
    assert "feature-stats" not in html
    assert "feature-actions" not in html


def test_cards_render_inside_pages():
    stats = {
        "totalUsers": 7, "activeUsers": 6, "admins": 1, "instructors": 2,
        "totalCourses": 3, "totalEnrollments": 9, "totalSurveys": 2, "totalResponses": 11,
    }
    cards = build_dashboard_cards(stats)
    assert len(cards["stat_cards"]) == 4
    assert len(cards["feature_cards"]) == 3

    html = render_page("dashboard.html", title="A & B", **cards)
    assert "<title>A &amp; B</title>" in html
    assert html.count('class="stat-card') == 4
    assert html.count('class="feature-card') == 3
    assert "Survey responses" in html


def test_dashboard_counters(client, admin, instructor, student, course, enroll):
    enroll(student, course)
    r = client.get("/api/admin/dashboard", headers=auth_headers(admin))
    assert r.status_code == 200
    assert r.json()["data"] == {
        "totalUsers": 3,
        "activeUsers": 3,
        "admins": 1,
        "instructors": 1,
        "totalCourses": 1,
        "totalEnrollments": 1,
        "totalSurveys": 0,
        "totalResponses": 0,
    }

    r = client.get("/api/admin/dashboard", headers=auth_headers(instructor))
    assert r.status_code == 403


def test_dashboard_view(client, admin):
    r = client.get("/api/admin/dashboard/view", headers=auth_headers(admin))
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "LAILA LMS Admin Dashboard" in r.text
    assert "User Management" in r.text


def test_admin_logs_filter(client, admin):
    headers = auth_headers(admin)
    client.put("/api/settings/site_name", json={"value": "LAILA"}, headers=headers)
    client.delete("/api/settings/site_name", headers=headers)

    r = client.get("/api/admin/logs", headers=headers)
    body = r.json()
    assert body["pagination"]["total"] == 2
    assert [log["action"] for log in body["data"]] == ["delete", "settings_change"]

    r = client.get("/api/admin/logs", params={"action": "delete"}, headers=headers)
    logs = r.json()["data"]
    assert len(logs) == 1
    assert logs[0]["entityType"] == "system_setting"
    assert logs[0]["userId"] == admin.id

    r = client.get("/api/admin/logs", params={"entity_type": "user"}, headers=headers)
    assert r.json()["data"] == []
