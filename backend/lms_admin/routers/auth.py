"""
Authentication router for the LMS admin API.

Provides the bearer-token dependencies used by every other router
(current user, optional user, admin and instructor guards) together
with the login and profile endpoints.
"""

from typing import Optional, Dict, Any
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from lms_admin.core.config import settings
from lms_admin.core.database import get_db
from lms_admin.core.security import create_user_token, verify_token
from lms_admin.models.user import User
from lms_admin.schemas.common import ok
from lms_admin.schemas.user import LoginRequest
from lms_admin.services.users import UserService


router = APIRouter()

# OAuth2 scheme for token authentication; missing tokens are handled below
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)


def _user_from_token(token: Optional[str], db: Session) -> Optional[User]:
    if not token:
        return None
    payload = verify_token(token)
    if payload is None or payload.get("sub") is None:
        return None
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        return None

    user = db.get(User, user_id)
    if user is None:
        return None
    # Tokens issued before a password change carry an older version
    if payload.get("token_version", 0) != user.token_version:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Token has been revoked"
        )
    return user


# Dependencies
def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from JWT token.
    """
    user = _user_from_token(token, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated" if not token else "Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated"
        )

    return user


def get_optional_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Current user when a valid token is sent, otherwise None.
    """
    try:
        user = _user_from_token(token, db)
    except HTTPException:
        return None
    if user is None or not user.is_active:
        return None
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user


def require_instructor(current_user: User = Depends(get_current_user)) -> User:
    """Instructors and admins."""
    if not (current_user.is_instructor or current_user.is_admin):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Instructor access required"
        )
    return current_user


# Endpoints
@router.post("/login")
async def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Exchange email and password for a bearer token.
    """
    user = UserService(db).authenticate(credentials.email, credentials.password)
    return ok({
        "token": create_user_token(user),
        "tokenType": "bearer",
        "user": user.to_dict()
    })


@router.get("/me")
async def get_me(current_user: User = Depends(get_current_user)) -> Dict[str, Any]:
    """
    Get the authenticated user's profile.
    """
    return ok(current_user.to_dict())
