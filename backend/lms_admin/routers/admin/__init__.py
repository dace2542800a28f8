"""
Admin routers for the LMS admin API.

Dashboard counters (JSON and a server-rendered HTML view) and the audit log.
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from markupsafe import Markup
from sqlalchemy.orm import Session

from lms_admin.components import ActionButton, FeatureCard, StatCard, StatItem, render_page
from lms_admin.core.config import settings
from lms_admin.core.database import get_db
from lms_admin.models.user import User
from lms_admin.routers.auth import require_admin
from lms_admin.schemas.common import ok
from lms_admin.services.dashboard import DashboardService


# Create admin router
admin_router = APIRouter()

# Small inline icons for the dashboard cards
ICONS = {
    "users": Markup('<svg class="w-6 h-6" viewBox="0 0 24 24" fill="none" stroke="currentColor"><circle cx="9" cy="7" r="4"/><path d="M3 21v-2a4 4 0 0 1 4-4h4a4 4 0 0 1 4 4v2"/></svg>'),
    "courses": Markup('<svg class="w-6 h-6" viewBox="0 0 24 24" fill="none" stroke="currentColor"><path d="M4 19.5A2.5 2.5 0 0 1 6.5 17H20V3H6.5A2.5 2.5 0 0 0 4 5.5z"/></svg>'),
    "surveys": Markup('<svg class="w-6 h-6" viewBox="0 0 24 24" fill="none" stroke="currentColor"><path d="M9 11l3 3 8-8"/><path d="M20 12v7a2 2 0 0 1-2 2H6a2 2 0 0 1-2-2V5a2 2 0 0 1 2-2h9"/></svg>'),
    "settings": Markup('<svg class="w-6 h-6" viewBox="0 0 24 24" fill="none" stroke="currentColor"><circle cx="12" cy="12" r="3"/></svg>'),
}


def build_dashboard_cards(stats: Dict[str, int]) -> Dict[str, list]:
    """Compose the stat and feature cards shown on the dashboard view."""
    api = settings.API_V1_STR
    stat_cards = [
        StatCard(value=stats["totalUsers"], label="Users", icon=ICONS["users"], icon_bg_color="#dbeafe"),
        StatCard(value=stats["totalCourses"], label="Courses", icon=ICONS["courses"], icon_bg_color="#dcfce7"),
        StatCard(value=stats["totalEnrollments"], label="Enrollments", icon=ICONS["courses"]),
        StatCard(value=stats["totalResponses"], label="Survey responses", icon=ICONS["surveys"], icon_bg_color="#fef3c7"),
    ]
    feature_cards = [
        FeatureCard(
            title="User Management",
            description="Manage accounts, roles and access.",
            icon=ICONS["users"],
            stats=[
                StatItem(value=stats["activeUsers"], label="Active"),
                StatItem(value=stats["instructors"], label="Instructors"),
                StatItem(value=stats["admins"], label="Admins"),
            ],
            actions=[ActionButton(label="Manage users", href=f"{api}/users", variant="primary")],
        ),
        FeatureCard(
            title="Surveys",
            description="Collect feedback from learners and export the results.",
            icon=ICONS["surveys"],
            icon_gradient="from-amber-500 to-amber-600",
            border_gradient="from-amber-500 to-amber-600",
            stats=[
                StatItem(value=stats["totalSurveys"], label="Surveys"),
                StatItem(value=stats["totalResponses"], label="Responses"),
            ],
            actions=[ActionButton(label="View surveys", href=f"{api}/surveys")],
        ),
        FeatureCard(
            title="System Settings",
            description="Platform settings and AI provider credentials.",
            icon=ICONS["settings"],
            icon_gradient="from-gray-600 to-gray-700",
            border_gradient="from-gray-600 to-gray-700",
            actions=[
                ActionButton(label="Settings", href=f"{api}/settings", variant="primary"),
                ActionButton(label="API configurations", href=f"{api}/settings/api/configs"),
            ],
        ),
    ]
    return {"stat_cards": stat_cards, "feature_cards": feature_cards}


# Admin dashboard endpoint
@admin_router.get("/dashboard")
async def get_admin_dashboard(
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get admin dashboard overview with statistics.
    """
    return ok(DashboardService(db).get_stats())


@admin_router.get("/dashboard/view", response_class=HTMLResponse)
async def view_admin_dashboard(
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> HTMLResponse:
    """
    Server-rendered dashboard built from stat and feature cards.
    """
    stats = DashboardService(db).get_stats()
    html = render_page(
        "dashboard.html",
        title=f"{settings.PROJECT_NAME} Dashboard",
        **build_dashboard_cards(stats)
    )
    return HTMLResponse(content=html)


# Admin logs endpoint
@admin_router.get("/logs")
async def get_admin_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    action: Optional[str] = None,
    entity_type: Optional[str] = None,
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get admin action logs with filtering.
    """
    result = DashboardService(db).get_logs(page=page, limit=limit, action=action, entity_type=entity_type)
    return ok(result["logs"], pagination=result["pagination"])


__all__ = ["admin_router", "build_dashboard_cards"]
