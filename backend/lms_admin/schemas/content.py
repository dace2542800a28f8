"""Request schemas for course modules, lectures, attachments and sections."""

from typing import List, Optional

from pydantic import Field, HttpUrl, field_validator

from lms_admin.models.course import LectureContentType, SectionType
from .common import CamelModel, optional_str


class ModuleCreate(CamelModel):
    title: str = Field(..., min_length=2)
    description: Optional[str] = None
    label: Optional[str] = None
    order_index: Optional[int] = Field(None, ge=0)
    is_published: Optional[bool] = None


class ModuleUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = None
    label: Optional[str] = None
    order_index: Optional[int] = Field(None, ge=0)
    is_published: Optional[bool] = None


class ModuleReorder(CamelModel):
    module_ids: List[int]


class LectureCreate(CamelModel):
    title: str = Field(..., min_length=2)
    content: Optional[str] = None
    content_type: Optional[LectureContentType] = None
    video_url: Optional[HttpUrl] = None
    duration: Optional[int] = Field(None, ge=0)
    order_index: Optional[int] = Field(None, ge=0)
    is_published: Optional[bool] = None
    is_free: Optional[bool] = None

    @field_validator("video_url", mode="before")
    @classmethod
    def blank_video_url(cls, v):
        return optional_str(v)


class LectureUpdate(LectureCreate):
    title: Optional[str] = Field(None, min_length=2)


class LectureReorder(CamelModel):
    lecture_ids: List[int]


class AttachmentCreate(CamelModel):
    file_name: str = Field(..., min_length=1)
    file_url: str = Field(..., min_length=1)
    file_type: str = Field(..., min_length=1)
    file_size: Optional[int] = Field(None, ge=0)


class SectionFields(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None
    file_name: Optional[str] = None
    file_url: Optional[str] = None  # URL or base64 data URL
    file_type: Optional[str] = None
    file_size: Optional[int] = Field(None, ge=0)
    order: Optional[int] = Field(None, ge=0)
    chatbot_title: Optional[str] = None
    chatbot_intro: Optional[str] = None
    chatbot_image_url: Optional[HttpUrl] = None
    chatbot_system_prompt: Optional[str] = None
    chatbot_welcome: Optional[str] = None


class SectionCreate(SectionFields):
    type: SectionType


class SectionUpdate(SectionFields):
    # Clients sometimes send orderIndex instead of order
    order_index: Optional[int] = Field(None, ge=0)


class SectionReorder(CamelModel):
    section_ids: List[int]
