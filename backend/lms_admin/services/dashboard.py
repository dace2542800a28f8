"""Admin dashboard counters and audit log queries."""

from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from lms_admin.models.admin import AdminLog
from lms_admin.models.course import Course, Enrollment
from lms_admin.models.survey import Survey, SurveyResponse
from lms_admin.models.user import User
from lms_admin.schemas.common import pagination


class DashboardService:
    def __init__(self, db: Session):
        self.db = db

    def _count(self, column, *criteria) -> int:
        return self.db.query(func.count(column)).filter(*criteria).scalar() or 0

    def get_stats(self) -> Dict[str, int]:
        return {
            "totalUsers": self._count(User.id),
            "activeUsers": self._count(User.id, User.is_active.is_(True)),
            "admins": self._count(User.id, User.is_admin.is_(True)),
            "instructors": self._count(User.id, User.is_instructor.is_(True)),
            "totalCourses": self._count(Course.id),
            "totalEnrollments": self._count(Enrollment.id),
            "totalSurveys": self._count(Survey.id),
            "totalResponses": self._count(SurveyResponse.id),
        }

    def get_logs(
        self,
        page: int = 1,
        limit: int = 20,
        action: Optional[str] = None,
        entity_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        query = self.db.query(AdminLog)
        if action:
            query = query.filter(AdminLog.action == action)
        if entity_type:
            query = query.filter(AdminLog.entity_type == entity_type)

        total = query.count()
        logs = query.order_by(AdminLog.created_at.desc(), AdminLog.id.desc()).offset(
            (page - 1) * limit
        ).limit(limit).all()

        return {
            "logs": [log.to_dict() for log in logs],
            "pagination": pagination(page, limit, total),
        }
