"""
User management router.

Admins manage every account; other users may read and edit only their
own profile, settings and statistics.
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from lms_admin.core.config import settings
from lms_admin.core.database import get_db
from lms_admin.models.user import User
from lms_admin.routers.auth import get_current_user, require_admin
from lms_admin.schemas.common import ok
from lms_admin.schemas.user import UserSettingUpdate, UserUpdate
from lms_admin.services.users import UserService


router = APIRouter()


@router.get("")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = Query(None),
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    result = UserService(db).get_users(page=page, limit=limit, search=search)
    return ok(result["users"], pagination=result["pagination"])


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    UserService.ensure_self_or_admin(user_id, current_user)
    return ok(UserService(db).get_user(user_id))


@router.put("/{user_id}")
async def update_user(
    user_id: int,
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Update a profile. Role and status flags are ignored unless the caller is an admin.
    """
    UserService.ensure_self_or_admin(user_id, current_user)
    return ok(UserService(db).update_user(user_id, payload, current_user))


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    result = UserService(db).delete_user(user_id, actor=admin_user)
    return ok(message=result["message"])


@router.get("/{user_id}/settings")
async def get_user_settings(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    UserService.ensure_self_or_admin(user_id, current_user)
    return ok(UserService(db).get_user_settings(user_id))


@router.put("/{user_id}/settings/{key}")
async def update_user_setting(
    user_id: int,
    key: str,
    payload: UserSettingUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    UserService.ensure_self_or_admin(user_id, current_user)
    return ok(UserService(db).update_user_setting(user_id, key, payload.value))


@router.get("/{user_id}/stats")
async def get_user_stats(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    UserService.ensure_self_or_admin(user_id, current_user)
    return ok(UserService(db).get_user_stats(user_id))


@router.get("/{user_id}/instructor-stats")
async def get_instructor_stats(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    UserService.ensure_self_or_admin(user_id, current_user)
    return ok(UserService(db).get_instructor_stats(user_id))
