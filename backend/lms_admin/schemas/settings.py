"""Request schemas for system settings, API configurations and MCQ generation settings."""

from typing import Optional

from pydantic import Field

from .common import CamelModel


class SettingUpdate(CamelModel):
    value: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    is_encrypted: Optional[bool] = None


class ApiConfigUpdate(CamelModel):
    api_key: Optional[str] = None
    default_model: Optional[str] = None
    is_active: Optional[bool] = None
    rate_limit: Optional[int] = Field(None, ge=0)
    configuration_data: Optional[str] = None


class McqDefaults(CamelModel):
    option_count: int = Field(4, ge=2, le=6)
    max_questions: int = Field(10, ge=1, le=50)
    default_difficulty: str = Field("medium", pattern="^(easy|medium|hard)$")
    include_explanations: bool = True
    temperature: float = Field(0.4, ge=0, le=2)


class McqSettingsUpdate(CamelModel):
    system_prompt: Optional[str] = None
    format_instructions: Optional[str] = None
    defaults: Optional[McqDefaults] = None
