"""
Admin-specific models for the LMS admin backend.

Defines AdminLog, SystemSetting, and ApiConfiguration models
for auditing and platform configuration.
"""

import json
from datetime import datetime
from typing import Optional, Dict, Any
from enum import Enum
from sqlalchemy import (
    Boolean, Integer, String, DateTime, Text, ForeignKey, Index, JSON
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from lms_admin.core.database import Base
from lms_admin.core.security import MASKED_VALUE, mask_secret


class AdminAction(str, Enum):
    """Types of admin actions to log."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    SETTINGS_CHANGE = "settings_change"
    USER_MANAGEMENT = "user_management"


class AdminLog(Base):
    """
    Audit log for admin actions.
    """
    __tablename__ = "admin_logs"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # User who performed the action
    user_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Action details
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)  # system_setting, api_configuration, user
    entity_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Action metadata
    details: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)  # Supports IPv6

    # Timestamp
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    # Relationships
    user = relationship("User", back_populates="admin_logs")

    # Table constraints
    __table_args__ = (
        Index("idx_admin_log_user_action", "user_id", "action"),
        Index("idx_admin_log_entity", "entity_type", "entity_id"),
        Index("idx_admin_log_created", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<AdminLog(id={self.id}, user_id={self.user_id}, action='{self.action}', entity='{self.entity_type}')>"

    @classmethod
    def log_action(
        cls,
        user_id: Optional[int],
        action: str,
        entity_type: str,
        entity_id: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None
    ) -> "AdminLog":
        """Factory method to create admin log entries."""
        return cls(
            user_id=user_id,
            action=action.value if isinstance(action, AdminAction) else action,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            details=details or {},
            ip_address=ip_address
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "action": self.action,
            "entityType": self.entity_type,
            "entityId": self.entity_id,
            "details": self.details,
            "ipAddress": self.ip_address,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class SystemSetting(Base):
    """
    System-wide key/value setting.
    """
    __tablename__ = "system_settings"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Setting identification
    setting_key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    setting_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    setting_type: Mapped[str] = mapped_column(String(20), default="string", nullable=False)  # string, number, boolean, json, text
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_encrypted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Audit
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<SystemSetting(key='{self.setting_key}', type='{self.setting_type}')>"

    @property
    def display_value(self) -> Optional[str]:
        """Stored value, or the mask when the setting is secret."""
        return MASKED_VALUE if self.is_encrypted else self.setting_value

    def get_typed_value(self) -> Any:
        """Get the value converted to its proper type."""
        if self.setting_value is None:
            return None
        if self.setting_type == "number":
            return float(self.setting_value) if "." in self.setting_value else int(self.setting_value)
        elif self.setting_type == "boolean":
            return self.setting_value.lower() in ("true", "1", "yes", "on")
        elif self.setting_type == "json":
            return json.loads(self.setting_value)
        return self.setting_value

    def to_dict(self) -> dict:
        """Masked representation safe to return to clients."""
        return {
            "id": self.id,
            "settingKey": self.setting_key,
            "settingValue": self.display_value,
            "settingType": self.setting_type,
            "description": self.description,
            "isEncrypted": self.is_encrypted,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class ApiConfiguration(Base):
    """
    Credentials and defaults for an external AI provider.
    """
    __tablename__ = "api_configurations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    service_name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    api_key: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    default_model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    rate_limit: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # requests per minute
    configuration_data: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<ApiConfiguration(service='{self.service_name}', active={self.is_active})>"

    def to_dict(self) -> dict:
        """Masked representation; the API key itself never leaves the server."""
        return {
            "id": self.id,
            "serviceName": self.service_name,
            "apiKey": mask_secret(self.api_key),
            "defaultModel": self.default_model,
            "isActive": self.is_active,
            "rateLimit": self.rate_limit,
            "configurationData": self.configuration_data,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
