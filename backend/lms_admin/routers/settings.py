"""
System settings router (admin only).

Covers key/value system settings, AI provider API configurations and
the MCQ-generation prompt settings.
"""

from typing import Any, Dict, Optional

import httpx
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lms_admin.core.database import get_db
from lms_admin.models.user import User
from lms_admin.routers.auth import require_admin
from lms_admin.schemas.common import ok
from lms_admin.schemas.settings import ApiConfigUpdate, McqSettingsUpdate, SettingUpdate
from lms_admin.services.mcq_settings import McqSettingsService
from lms_admin.services.settings import SettingsService


router = APIRouter()


def get_provider_client() -> Optional[httpx.AsyncClient]:
    """HTTP client used for provider connection tests; None means one per call."""
    return None


@router.get("")
async def list_settings(
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(SettingsService(db).get_system_settings())


# API configurations
@router.get("/api/configs")
async def list_api_configurations(
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(SettingsService(db).get_api_configurations())


@router.get("/api/configs/{service}")
async def get_api_configuration(
    service: str,
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(SettingsService(db).get_api_configuration(service))


@router.put("/api/configs/{service}")
async def update_api_configuration(
    service: str,
    payload: ApiConfigUpdate,
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Create or update a provider configuration. The stored key is never echoed back.
    """
    data = payload.model_dump(exclude_unset=True)
    return ok(SettingsService(db).update_api_configuration(service, data, actor=admin_user))


@router.post("/api/configs/{service}/test")
async def test_api_configuration(
    service: str,
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
    http_client: Optional[httpx.AsyncClient] = Depends(get_provider_client)
) -> Dict[str, Any]:
    result = await SettingsService(db, http_client=http_client).test_api_configuration(service)
    return ok(result)


@router.post("/seed")
async def seed_settings(
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    result = SettingsService(db).seed_default_settings()
    return ok(message=result["message"])


# MCQ generation (declared before /{key} so it is not treated as a key)
@router.get("/mcq-generation")
async def get_mcq_generation_settings(
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(McqSettingsService(db).get_generation_settings())


@router.put("/mcq-generation")
async def update_mcq_generation_settings(
    payload: McqSettingsUpdate,
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    defaults = payload.defaults.model_dump(by_alias=True, exclude_none=True) if payload.defaults else None
    result = McqSettingsService(db).update_generation_settings(
        system_prompt=payload.system_prompt,
        format_instructions=payload.format_instructions,
        defaults=defaults,
        actor=admin_user,
    )
    return ok(result)


# Individual system settings
@router.get("/{key}")
async def get_setting(
    key: str,
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(SettingsService(db).get_system_setting(key))


@router.put("/{key}")
async def update_setting(
    key: str,
    payload: SettingUpdate,
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Upsert a setting. Only the fields present in the body are changed.
    """
    data = payload.model_dump(exclude_unset=True)
    return ok(SettingsService(db).update_system_setting(key, data, actor=admin_user))


@router.delete("/{key}")
async def delete_setting(
    key: str,
    admin_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    result = SettingsService(db).delete_system_setting(key, actor=admin_user)
    return ok(message=result["message"])
