"""
User management: accounts, role flags, per-user settings and statistics.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from lms_admin.core.errors import AppError
from lms_admin.core.security import get_password_hash, verify_password
from lms_admin.models.admin import AdminAction, AdminLog
from lms_admin.models.course import Course, Enrollment, EnrollmentStatus
from lms_admin.models.survey import Survey, SurveyResponse
from lms_admin.models.user import User, UserSetting
from lms_admin.schemas.common import pagination
from lms_admin.schemas.user import UserUpdate


logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def _get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if not user:
            raise AppError("User not found", 404)
        return user

    def _admin_count(self) -> int:
        return self.db.query(func.count(User.id)).filter(User.is_admin.is_(True)).scalar() or 0

    def _counts(self, user: User) -> Dict[str, int]:
        enrollments = self.db.query(func.count(Enrollment.id)).filter(
            Enrollment.user_id == user.id
        ).scalar()
        taught = self.db.query(func.count(Course.id)).filter(Course.instructor_id == user.id).scalar()
        return {"enrollments": enrollments or 0, "taughtCourses": taught or 0}

    @staticmethod
    def ensure_self_or_admin(user_id: int, actor: User) -> None:
        if actor.id != user_id and not actor.is_admin:
            raise AppError("Not authorized", 403)

    def authenticate(self, email: str, password: str) -> User:
        user = self.db.query(User).filter(User.email == email.lower()).first()
        if not user or not verify_password(password, user.password_hash):
            logger.info("Failed login attempt for %s", email)
            raise AppError("Invalid email or password", 401)
        if not user.is_active:
            raise AppError("Account is deactivated", 403)

        user.last_login = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(user)
        return user

    def get_users(self, page: int = 1, limit: int = 20, search: Optional[str] = None) -> Dict[str, Any]:
        query = self.db.query(User)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(User.fullname.ilike(pattern), User.email.ilike(pattern)))

        total = query.count()
        users = query.order_by(User.created_at.desc(), User.id.desc()).offset(
            (page - 1) * limit
        ).limit(limit).all()

        return {
            "users": [{**u.to_dict(), "counts": self._counts(u)} for u in users],
            "pagination": pagination(page, limit, total),
        }

    def get_user(self, user_id: int) -> Dict[str, Any]:
        user = self._get_user(user_id)
        data = user.to_dict()
        data["settings"] = [s.to_dict() for s in user.settings]
        data["counts"] = self._counts(user)
        return data

    def update_user(self, user_id: int, data: UserUpdate, actor: User) -> Dict[str, Any]:
        """Apply profile changes; role and status flags are applied only for admins."""
        user = self._get_user(user_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "fullname" in changes:
            user.fullname = changes["fullname"]
        if "email" in changes:
            user.email = changes["email"].lower()
        if "password" in changes:
            user.password_hash = get_password_hash(changes["password"])
            user.token_version += 1

        role_changes = {}
        if actor.is_admin:
            if changes.get("is_admin") is False and user.is_admin and self._admin_count() <= 1:
                raise AppError("Cannot remove admin rights from the last admin user", 400)
            for flag in ("is_active", "is_instructor", "is_admin"):
                if flag in changes:
                    role_changes[flag] = changes[flag]
                    setattr(user, flag, changes[flag])

        if role_changes:
            self.db.add(AdminLog.log_action(
                user_id=actor.id,
                action=AdminAction.USER_MANAGEMENT,
                entity_type="user",
                entity_id=user.id,
                details=role_changes,
            ))
        self.db.commit()
        self.db.refresh(user)
        logger.info("User %s updated by user %s", user.id, actor.id)
        return user.to_dict()

    def delete_user(self, user_id: int, actor: Optional[User] = None) -> Dict[str, str]:
        user = self._get_user(user_id)
        if user.is_admin and self._admin_count() <= 1:
            raise AppError("Cannot delete the last admin user", 400)

        # Courses and surveys keep a required reference to their owner
        owned_courses = self.db.query(func.count(Course.id)).filter(Course.instructor_id == user.id).scalar()
        owned_surveys = self.db.query(func.count(Survey.id)).filter(Survey.created_by_id == user.id).scalar()
        if owned_courses or owned_surveys:
            raise AppError("Cannot delete a user who owns courses or surveys", 400)

        self.db.delete(user)
        self.db.add(AdminLog.log_action(
            user_id=actor.id if actor else None,
            action=AdminAction.DELETE,
            entity_type="user",
            entity_id=user_id,
            details={"email": user.email},
        ))
        self.db.commit()
        logger.info("User %s deleted", user_id)
        return {"message": "User deleted successfully"}

    # Per-user settings

    def get_user_settings(self, user_id: int) -> Dict[str, Optional[str]]:
        self._get_user(user_id)
        rows = self.db.query(UserSetting).filter(UserSetting.user_id == user_id).all()
        return {s.setting_key: s.setting_value for s in rows}

    def update_user_setting(self, user_id: int, key: str, value: Optional[str]) -> Dict[str, Any]:
        self._get_user(user_id)
        setting = self.db.query(UserSetting).filter(
            UserSetting.user_id == user_id,
            UserSetting.setting_key == key,
        ).first()
        if setting:
            setting.setting_value = value
        else:
            setting = UserSetting(user_id=user_id, setting_key=key, setting_value=value)
            self.db.add(setting)
        self.db.commit()
        self.db.refresh(setting)
        return setting.to_dict()

    # Statistics

    def get_user_stats(self, user_id: int) -> Dict[str, int]:
        self._get_user(user_id)
        enrolled = self.db.query(func.count(Enrollment.id)).filter(
            Enrollment.user_id == user_id
        ).scalar()
        completed = self.db.query(func.count(Enrollment.id)).filter(
            Enrollment.user_id == user_id,
            Enrollment.status == EnrollmentStatus.COMPLETED.value,
        ).scalar()
        return {"enrolledCourses": enrolled or 0, "completedCourses": completed or 0}

    def get_instructor_stats(self, user_id: int) -> Dict[str, int]:
        self._get_user(user_id)
        courses = self.db.query(func.count(Course.id)).filter(Course.instructor_id == user_id).scalar()
        students = self.db.query(func.count(func.distinct(Enrollment.user_id))).join(
            Course, Enrollment.course_id == Course.id
        ).filter(Course.instructor_id == user_id).scalar()
        surveys = self.db.query(func.count(Survey.id)).filter(Survey.created_by_id == user_id).scalar()
        responses = self.db.query(func.count(SurveyResponse.id)).join(
            Survey, SurveyResponse.survey_id == Survey.id
        ).filter(Survey.created_by_id == user_id).scalar()

        return {
            "totalCourses": courses or 0,
            "totalStudents": students or 0,
            "totalSurveys": surveys or 0,
            "totalResponses": responses or 0,
        }
