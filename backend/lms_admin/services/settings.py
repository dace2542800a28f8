"""
System settings and API configuration management.

Secret values never leave this service unmasked: encrypted system settings
and stored API keys are always replaced by ``********`` in returned data.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy.orm import Session

from lms_admin.core.config import settings as app_settings
from lms_admin.core.errors import AppError
from lms_admin.models.admin import AdminAction, AdminLog, ApiConfiguration, SystemSetting
from lms_admin.models.user import User


logger = logging.getLogger(__name__)


DEFAULT_SYSTEM_SETTINGS: List[Dict[str, Any]] = [
    {
        "setting_key": "site_name",
        "setting_value": "LAILA LMS",
        "setting_type": "string",
        "description": "The name of the platform",
    },
    {
        "setting_key": "default_ai_provider",
        "setting_value": "openai",
        "setting_type": "string",
        "description": "Default AI provider (openai or gemini)",
    },
    {
        "setting_key": "allow_registration",
        "setting_value": "true",
        "setting_type": "boolean",
        "description": "Allow new user registrations",
    },
    {
        "setting_key": "require_email_confirmation",
        "setting_value": "false",
        "setting_type": "boolean",
        "description": "Require email confirmation for new accounts",
    },
    {
        "setting_key": "max_file_upload_size",
        "setting_value": "10",
        "setting_type": "number",
        "description": "Maximum file upload size in MB",
    },
]

DEFAULT_API_CONFIGURATIONS: List[Dict[str, Any]] = [
    {"service_name": "openai", "default_model": "gpt-4o-mini", "is_active": True},
    {"service_name": "gemini", "default_model": "gemini-pro", "is_active": False},
]


class SettingsService:
    """Admin operations over ``SystemSetting`` and ``ApiConfiguration``."""

    def __init__(self, db: Session, http_client: Optional[httpx.AsyncClient] = None):
        self.db = db
        self.http_client = http_client

    # System settings

    def get_system_settings(self) -> Dict[str, Dict[str, Any]]:
        rows = self.db.query(SystemSetting).order_by(SystemSetting.setting_key.asc()).all()
        return {
            s.setting_key: {
                "value": s.display_value,
                "type": s.setting_type,
                "description": s.description,
                "isEncrypted": s.is_encrypted,
            }
            for s in rows
        }

    def _find_setting(self, key: str) -> Optional[SystemSetting]:
        return self.db.query(SystemSetting).filter(SystemSetting.setting_key == key).first()

    def get_system_setting(self, key: str) -> Dict[str, Any]:
        setting = self._find_setting(key)
        if not setting:
            raise AppError("Setting not found", 404)
        return setting.to_dict()

    def update_system_setting(
        self,
        key: str,
        data: Dict[str, Any],
        actor: Optional[User] = None,
    ) -> Dict[str, Any]:
        """
        Create or update a setting from the fields present in ``data``
        (``value``, ``type``, ``description``, ``is_encrypted``).

        Fields missing from ``data`` keep their stored value.
        """
        setting = self._find_setting(key)
        created = setting is None
        if created:
            setting = SystemSetting(
                setting_key=key,
                setting_value=data.get("value"),
                setting_type=data.get("type") or "string",
                description=data.get("description"),
                is_encrypted=bool(data.get("is_encrypted")),
            )
            self.db.add(setting)
        else:
            if "value" in data:
                setting.setting_value = data["value"]
            if data.get("type"):
                setting.setting_type = data["type"]
            if "description" in data:
                setting.description = data["description"]
            if data.get("is_encrypted") is not None:
                setting.is_encrypted = data["is_encrypted"]

        self._audit(
            actor,
            AdminAction.SETTINGS_CHANGE,
            "system_setting",
            key,
            {"created": created, "isEncrypted": setting.is_encrypted},
        )
        self.db.commit()
        self.db.refresh(setting)
        logger.info("System setting %s %s", key, "created" if created else "updated")
        return setting.to_dict()

    def delete_system_setting(self, key: str, actor: Optional[User] = None) -> Dict[str, str]:
        setting = self._find_setting(key)
        if not setting:
            raise AppError("Setting not found", 404)

        self.db.delete(setting)
        self._audit(actor, AdminAction.DELETE, "system_setting", key)
        self.db.commit()
        logger.info("System setting %s deleted", key)
        return {"message": "Setting deleted successfully"}

    def get_setting_value(self, key: str) -> Optional[str]:
        """Raw (unmasked) value for server-side consumers."""
        setting = self._find_setting(key)
        return setting.setting_value if setting else None

    # API configurations

    def _find_api_configuration(self, service_name: str) -> Optional[ApiConfiguration]:
        return self.db.query(ApiConfiguration).filter(
            ApiConfiguration.service_name == service_name
        ).first()

    def get_api_configurations(self) -> List[Dict[str, Any]]:
        configs = self.db.query(ApiConfiguration).order_by(ApiConfiguration.service_name.asc()).all()
        return [c.to_dict() for c in configs]

    def get_api_configuration(self, service_name: str) -> Dict[str, Any]:
        config = self._find_api_configuration(service_name)
        if not config:
            raise AppError("API configuration not found", 404)
        return config.to_dict()

    def update_api_configuration(
        self,
        service_name: str,
        data: Dict[str, Any],
        actor: Optional[User] = None,
    ) -> Dict[str, Any]:
        config = self._find_api_configuration(service_name)
        created = config is None
        if created:
            config = ApiConfiguration(service_name=service_name)
            self.db.add(config)

        for field, value in data.items():
            setattr(config, field, value)

        # Record which fields changed, never the key itself
        self._audit(
            actor,
            AdminAction.SETTINGS_CHANGE,
            "api_configuration",
            service_name,
            {"created": created, "fields": sorted(data.keys())},
        )
        self.db.commit()
        self.db.refresh(config)
        logger.info("API configuration %s %s", service_name, "created" if created else "updated")
        return config.to_dict()

    async def test_api_configuration(self, service_name: str) -> Dict[str, Any]:
        """Call the provider with the stored key. Provider failures are reported, not raised."""
        config = self._find_api_configuration(service_name)
        if not config or not config.api_key:
            raise AppError("API configuration not found or no API key set", 400)

        if service_name == "openai":
            url = f"{app_settings.OPENAI_API_BASE}/models"
            request_kwargs = {"headers": {"Authorization": f"Bearer {config.api_key}"}}
            label = "OpenAI"
        elif service_name == "gemini":
            url = f"{app_settings.GEMINI_API_BASE}/models"
            request_kwargs = {"params": {"key": config.api_key}}
            label = "Gemini"
        else:
            return {"success": False, "message": "Unknown service"}

        if self.http_client is not None:
            return await self._check_provider(self.http_client, service_name, label, url, request_kwargs)
        async with httpx.AsyncClient(timeout=app_settings.API_TEST_TIMEOUT_SECONDS) as client:
            return await self._check_provider(client, service_name, label, url, request_kwargs)

    async def _check_provider(
        self,
        client: httpx.AsyncClient,
        service_name: str,
        label: str,
        url: str,
        request_kwargs: Dict[str, Any],
    ) -> Dict[str, Any]:
        try:
            response = await client.get(url, **request_kwargs)
            response.raise_for_status()
        except httpx.TimeoutException:
            logger.warning("API connection test for %s timed out", service_name)
            return {"success": False, "message": "Connection timeout"}
        except httpx.HTTPStatusError as exc:
            logger.warning("API connection test for %s failed: %s", service_name, exc.response.status_code)
            return {
                "success": False,
                "message": f"{label} returned HTTP {exc.response.status_code}",
            }
        except httpx.HTTPError as exc:
            logger.warning("API connection test for %s failed: %s", service_name, exc)
            return {"success": False, "message": str(exc)}

        return {"success": True, "message": f"{label} connection successful"}

    # Defaults

    def seed_default_settings(self) -> Dict[str, str]:
        """Insert default settings and API configurations that do not exist yet."""
        for default in DEFAULT_SYSTEM_SETTINGS:
            if not self._find_setting(default["setting_key"]):
                self.db.add(SystemSetting(**default))

        for default in DEFAULT_API_CONFIGURATIONS:
            if not self._find_api_configuration(default["service_name"]):
                self.db.add(ApiConfiguration(**default))

        self.db.commit()
        return {"message": "Default settings seeded successfully"}

    def _audit(
        self,
        actor: Optional[User],
        action: AdminAction,
        entity_type: str,
        entity_id: Any,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.db.add(AdminLog.log_action(
            user_id=actor.id if actor else None,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
        ))
