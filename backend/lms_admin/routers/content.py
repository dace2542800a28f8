"""
Course content router: modules, lectures, attachments and lecture sections.

Reads require a signed-in user except lecture listings and single lectures.
Every change requires the instructor role and ownership of the course
(admins bypass ownership).
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lms_admin.core.database import get_db
from lms_admin.models.user import User
from lms_admin.routers.auth import get_current_user, get_optional_user, require_instructor
from lms_admin.schemas.common import ok
from lms_admin.schemas.content import (
    AttachmentCreate,
    LectureCreate,
    LectureReorder,
    LectureUpdate,
    ModuleCreate,
    ModuleReorder,
    ModuleUpdate,
    SectionCreate,
    SectionReorder,
    SectionUpdate,
)
from lms_admin.services.content import LectureService, ModuleService, SectionService


router = APIRouter()


# Modules
@router.get("/{course_id}/modules", tags=["modules"])
async def list_modules(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(ModuleService(db).get_modules(course_id, current_user))


@router.post("/{course_id}/modules", status_code=status.HTTP_201_CREATED, tags=["modules"])
async def create_module(
    course_id: int,
    payload: ModuleCreate,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(ModuleService(db).create_module(course_id, current_user, payload))


@router.put("/{course_id}/modules/reorder", tags=["modules"])
async def reorder_modules(
    course_id: int,
    payload: ModuleReorder,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    result = ModuleService(db).reorder_modules(course_id, current_user, payload.module_ids)
    return ok(message=result["message"])


@router.put("/modules/{module_id}", tags=["modules"])
async def update_module(
    module_id: int,
    payload: ModuleUpdate,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(ModuleService(db).update_module(module_id, current_user, payload))


@router.delete("/modules/{module_id}", tags=["modules"])
async def delete_module(
    module_id: int,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    result = ModuleService(db).delete_module(module_id, current_user)
    return ok(message=result["message"])


# Lectures
@router.get("/modules/{module_id}/lectures", tags=["lectures"])
async def list_lectures(
    module_id: int,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(LectureService(db).get_lectures(module_id))


@router.post("/modules/{module_id}/lectures", status_code=status.HTTP_201_CREATED, tags=["lectures"])
async def create_lecture(
    module_id: int,
    payload: LectureCreate,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(LectureService(db).create_lecture(module_id, current_user, payload))


@router.put("/modules/{module_id}/lectures/reorder", tags=["lectures"])
async def reorder_lectures(
    module_id: int,
    payload: LectureReorder,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    result = LectureService(db).reorder_lectures(module_id, current_user, payload.lecture_ids)
    return ok(message=result["message"])


@router.get("/lectures/{lecture_id}", tags=["lectures"])
async def get_lecture(
    lecture_id: int,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(LectureService(db).get_lecture(lecture_id, current_user))


@router.put("/lectures/{lecture_id}", tags=["lectures"])
async def update_lecture(
    lecture_id: int,
    payload: LectureUpdate,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(LectureService(db).update_lecture(lecture_id, current_user, payload))


@router.delete("/lectures/{lecture_id}", tags=["lectures"])
async def delete_lecture(
    lecture_id: int,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    result = LectureService(db).delete_lecture(lecture_id, current_user)
    return ok(message=result["message"])


# Attachments
@router.post("/lectures/{lecture_id}/attachments", status_code=status.HTTP_201_CREATED, tags=["lectures"])
async def add_attachment(
    lecture_id: int,
    payload: AttachmentCreate,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(LectureService(db).add_attachment(lecture_id, current_user, payload))


@router.delete("/attachments/{attachment_id}", tags=["lectures"])
async def delete_attachment(
    attachment_id: int,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    result = LectureService(db).delete_attachment(attachment_id, current_user)
    return ok(message=result["message"])


# Sections
@router.get("/lectures/{lecture_id}/sections", tags=["sections"])
async def list_sections(
    lecture_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(SectionService(db).get_sections(lecture_id))


@router.post("/lectures/{lecture_id}/sections", status_code=status.HTTP_201_CREATED, tags=["sections"])
async def create_section(
    lecture_id: int,
    payload: SectionCreate,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(SectionService(db).create_section(lecture_id, current_user, payload))


@router.put("/lectures/{lecture_id}/sections/reorder", tags=["sections"])
async def reorder_sections(
    lecture_id: int,
    payload: SectionReorder,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    result = SectionService(db).reorder_sections(lecture_id, current_user, payload.section_ids)
    return ok(message=result["message"])


@router.put("/sections/{section_id}", tags=["sections"])
async def update_section(
    section_id: int,
    payload: SectionUpdate,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(SectionService(db).update_section(section_id, current_user, payload))


@router.delete("/sections/{section_id}", tags=["sections"])
async def delete_section(
    section_id: int,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    result = SectionService(db).delete_section(section_id, current_user)
    return ok(message=result["message"])
