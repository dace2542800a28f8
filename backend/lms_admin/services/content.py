"""
Course content services: modules, lectures, attachments and lecture sections.

Every mutation loads the record together with its owning course and checks
``course.instructor_id`` against the caller. Admins may change any course.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from lms_admin.core.errors import AppError
from lms_admin.models.course import (
    Course, CourseModule, Enrollment, Lecture, LectureAttachment, LectureSection
)
from lms_admin.models.user import User
from lms_admin.schemas.content import (
    AttachmentCreate, LectureCreate, LectureUpdate, ModuleCreate, ModuleUpdate,
    SectionCreate, SectionUpdate
)


logger = logging.getLogger(__name__)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def serialize_attachment(attachment: LectureAttachment) -> Dict[str, Any]:
    return {
        "id": attachment.id,
        "lectureId": attachment.lecture_id,
        "fileName": attachment.file_name,
        "fileUrl": attachment.file_url,
        "fileType": attachment.file_type,
        "fileSize": attachment.file_size,
        "createdAt": _iso(attachment.created_at),
    }


def serialize_section(section: LectureSection) -> Dict[str, Any]:
    return {
        "id": section.id,
        "lectureId": section.lecture_id,
        "type": section.type,
        "title": section.title,
        "content": section.content,
        "fileName": section.file_name,
        "fileUrl": section.file_url,
        "fileType": section.file_type,
        "fileSize": section.file_size,
        "chatbotTitle": section.chatbot_title,
        "chatbotIntro": section.chatbot_intro,
        "chatbotImageUrl": section.chatbot_image_url,
        "chatbotSystemPrompt": section.chatbot_system_prompt,
        "chatbotWelcome": section.chatbot_welcome,
        "order": section.order,
        "createdAt": _iso(section.created_at),
        "updatedAt": _iso(section.updated_at),
    }


def serialize_lecture(lecture: Lecture, summary: bool = False) -> Dict[str, Any]:
    data = {
        "id": lecture.id,
        "moduleId": lecture.module_id,
        "title": lecture.title,
        "contentType": lecture.content_type,
        "duration": lecture.duration,
        "orderIndex": lecture.order_index,
        "isPublished": lecture.is_published,
        "isFree": lecture.is_free,
    }
    if summary:
        return data

    data.update({
        "content": lecture.content,
        "videoUrl": lecture.video_url,
        "createdAt": _iso(lecture.created_at),
        "updatedAt": _iso(lecture.updated_at),
        "attachments": [serialize_attachment(a) for a in lecture.attachments],
        "sections": [serialize_section(s) for s in lecture.sections],
    })
    return data


def serialize_module(module: CourseModule, lectures: Optional[Sequence[Lecture]] = None) -> Dict[str, Any]:
    if lectures is None:
        lectures = module.lectures
    return {
        "id": module.id,
        "courseId": module.course_id,
        "title": module.title,
        "description": module.description,
        "label": module.label,
        "orderIndex": module.order_index,
        "isPublished": module.is_published,
        "createdAt": _iso(module.created_at),
        "updatedAt": _iso(module.updated_at),
        "lectures": [serialize_lecture(lecture, summary=True) for lecture in lectures],
        "lectureCount": len(module.lectures),
    }


def check_course_owner(course: Course, actor: User) -> None:
    if not course.is_owned_by(actor.id) and not actor.is_admin:
        logger.warning("User %s is not allowed to edit course %s", actor.id, course.id)
        raise AppError("Not authorized", 403)


def apply_reorder(items: Sequence[Any], ids: List[int], attr: str, label: str, parent: str) -> None:
    """Set ``attr`` to each id's position in ``ids``; every id must be in ``items`` exactly once."""
    by_id = {item.id: item for item in items}
    seen = set()
    for item_id in ids:
        if item_id not in by_id:
            raise AppError(f"{label} {item_id} does not belong to this {parent}", 400)
        if item_id in seen:
            raise AppError(f"{label} {item_id} appears more than once", 400)
        seen.add(item_id)
    for index, item_id in enumerate(ids):
        setattr(by_id[item_id], attr, index)


class ModuleService:
    def __init__(self, db: Session):
        self.db = db

    def _get_course(self, course_id: int, actor: User) -> Course:
        course = self.db.get(Course, course_id)
        if not course:
            raise AppError("Course not found", 404)
        check_course_owner(course, actor)
        return course

    def _get_module(self, module_id: int, actor: User) -> CourseModule:
        module = self.db.get(CourseModule, module_id)
        if not module:
            raise AppError("Module not found", 404)
        check_course_owner(module.course, actor)
        return module

    def get_modules(self, course_id: int, actor: Optional[User] = None) -> List[Dict[str, Any]]:
        course = self.db.get(Course, course_id)
        if not course:
            raise AppError("Course not found", 404)

        can_manage = bool(actor and (actor.is_instructor or actor.is_admin))
        if actor and not can_manage:
            enrolled = self.db.query(Enrollment.id).filter(
                Enrollment.user_id == actor.id,
                Enrollment.course_id == course_id,
            ).first()
            if not enrolled:
                raise AppError("You must be enrolled in this course to view modules", 403)

        result = []
        for module in course.modules:
            if not can_manage and not module.is_published:
                continue
            lectures = module.lectures if can_manage else [l for l in module.lectures if l.is_published]
            result.append(serialize_module(module, lectures))
        return result

    def create_module(self, course_id: int, actor: User, data: ModuleCreate) -> Dict[str, Any]:
        course = self._get_course(course_id, actor)

        order_index = data.order_index
        if order_index is None:
            max_order = self.db.query(func.max(CourseModule.order_index)).filter(
                CourseModule.course_id == course.id
            ).scalar()
            order_index = (max_order if max_order is not None else -1) + 1

        module = CourseModule(
            course_id=course.id,
            title=data.title,
            description=data.description,
            label=data.label,
            order_index=order_index,
            is_published=bool(data.is_published),
        )
        self.db.add(module)
        self.db.commit()
        self.db.refresh(module)
        logger.info("Module %s created in course %s", module.id, course.id)
        return serialize_module(module)

    def update_module(self, module_id: int, actor: User, data: ModuleUpdate) -> Dict[str, Any]:
        module = self._get_module(module_id, actor)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(module, field, value)
        self.db.commit()
        self.db.refresh(module)
        return serialize_module(module)

    def delete_module(self, module_id: int, actor: User) -> Dict[str, str]:
        module = self._get_module(module_id, actor)
        self.db.delete(module)
        self.db.commit()
        logger.info("Module %s deleted by user %s", module_id, actor.id)
        return {"message": "Module deleted successfully"}

    def reorder_modules(self, course_id: int, actor: User, module_ids: List[int]) -> Dict[str, str]:
        course = self._get_course(course_id, actor)
        apply_reorder(course.modules, module_ids, "order_index", "Module", "course")
        self.db.commit()
        return {"message": "Modules reordered successfully"}


class LectureService:
    def __init__(self, db: Session):
        self.db = db

    def _get_module(self, module_id: int, actor: User) -> CourseModule:
        module = self.db.get(CourseModule, module_id)
        if not module:
            raise AppError("Module not found", 404)
        check_course_owner(module.course, actor)
        return module

    def _get_lecture(self, lecture_id: int, actor: User) -> Lecture:
        lecture = self.db.get(Lecture, lecture_id)
        if not lecture:
            raise AppError("Lecture not found", 404)
        check_course_owner(lecture.module.course, actor)
        return lecture

    def get_lectures(self, module_id: int) -> List[Dict[str, Any]]:
        module = self.db.get(CourseModule, module_id)
        if not module:
            raise AppError("Module not found", 404)
        return [serialize_lecture(lecture) for lecture in module.lectures]

    def get_lecture(self, lecture_id: int, actor: Optional[User] = None) -> Dict[str, Any]:
        lecture = self.db.get(Lecture, lecture_id)
        if not lecture:
            raise AppError("Lecture not found", 404)

        course = lecture.module.course
        if actor and not lecture.is_free and not actor.is_admin and not course.is_owned_by(actor.id):
            enrolled = self.db.query(Enrollment.id).filter(
                Enrollment.user_id == actor.id,
                Enrollment.course_id == course.id,
            ).first()
            if not enrolled:
                raise AppError("You must be enrolled to access this lecture", 403)

        data = serialize_lecture(lecture)
        data["module"] = {
            "id": lecture.module.id,
            "title": lecture.module.title,
            "course": {"id": course.id, "title": course.title, "instructorId": course.instructor_id},
        }
        return data

    def create_lecture(self, module_id: int, actor: User, data: LectureCreate) -> Dict[str, Any]:
        module = self._get_module(module_id, actor)
        values = data.model_dump(exclude_unset=True, exclude_none=True, mode="json")

        if values.get("order_index") is None:
            max_order = self.db.query(func.max(Lecture.order_index)).filter(
                Lecture.module_id == module.id
            ).scalar()
            values["order_index"] = (max_order if max_order is not None else -1) + 1

        lecture = Lecture(module_id=module.id, **values)
        self.db.add(lecture)
        self.db.commit()
        self.db.refresh(lecture)
        logger.info("Lecture %s created in module %s", lecture.id, module.id)
        return serialize_lecture(lecture)

    def update_lecture(self, lecture_id: int, actor: User, data: LectureUpdate) -> Dict[str, Any]:
        lecture = self._get_lecture(lecture_id, actor)
        for field, value in data.model_dump(exclude_unset=True, mode="json").items():
            if field == "title" and value is None:
                continue
            setattr(lecture, field, value)
        self.db.commit()
        self.db.refresh(lecture)
        return serialize_lecture(lecture)

    def delete_lecture(self, lecture_id: int, actor: User) -> Dict[str, str]:
        lecture = self._get_lecture(lecture_id, actor)
        self.db.delete(lecture)
        self.db.commit()
        logger.info("Lecture %s deleted by user %s", lecture_id, actor.id)
        return {"message": "Lecture deleted successfully"}

    def reorder_lectures(self, module_id: int, actor: User, lecture_ids: List[int]) -> Dict[str, str]:
        module = self._get_module(module_id, actor)
        apply_reorder(module.lectures, lecture_ids, "order_index", "Lecture", "module")
        self.db.commit()
        return {"message": "Lectures reordered successfully"}

    def add_attachment(self, lecture_id: int, actor: User, data: AttachmentCreate) -> Dict[str, Any]:
        lecture = self._get_lecture(lecture_id, actor)
        attachment = LectureAttachment(lecture_id=lecture.id, **data.model_dump())
        self.db.add(attachment)
        self.db.commit()
        self.db.refresh(attachment)
        return serialize_attachment(attachment)

    def delete_attachment(self, attachment_id: int, actor: User) -> Dict[str, str]:
        attachment = self.db.get(LectureAttachment, attachment_id)
        if not attachment:
            raise AppError("Attachment not found", 404)
        check_course_owner(attachment.lecture.module.course, actor)

        self.db.delete(attachment)
        self.db.commit()
        return {"message": "Attachment deleted successfully"}


class SectionService:
    def __init__(self, db: Session):
        self.db = db

    def _get_lecture(self, lecture_id: int, actor: User) -> Lecture:
        lecture = self.db.get(Lecture, lecture_id)
        if not lecture:
            raise AppError("Lecture not found", 404)
        check_course_owner(lecture.module.course, actor)
        return lecture

    def _get_section(self, section_id: int, actor: User) -> LectureSection:
        section = self.db.get(LectureSection, section_id)
        if not section:
            raise AppError("Section not found", 404)
        check_course_owner(section.lecture.module.course, actor)
        return section

    def get_sections(self, lecture_id: int) -> List[Dict[str, Any]]:
        lecture = self.db.get(Lecture, lecture_id)
        if not lecture:
            raise AppError("Lecture not found", 404)
        return [serialize_section(s) for s in lecture.sections]

    def create_section(self, lecture_id: int, actor: User, data: SectionCreate) -> Dict[str, Any]:
        lecture = self._get_lecture(lecture_id, actor)
        values = data.model_dump(exclude_none=True, mode="json")

        if values.get("order") is None:
            max_order = self.db.query(func.max(LectureSection.order)).filter(
                LectureSection.lecture_id == lecture.id
            ).scalar()
            values["order"] = (max_order if max_order is not None else -1) + 1

        section = LectureSection(lecture_id=lecture.id, **values)
        self.db.add(section)
        self.db.commit()
        self.db.refresh(section)
        return serialize_section(section)

    def update_section(self, section_id: int, actor: User, data: SectionUpdate) -> Dict[str, Any]:
        section = self._get_section(section_id, actor)
        values = data.model_dump(exclude_unset=True, mode="json")

        order_index = values.pop("order_index", None)
        if values.get("order") is None and order_index is not None:
            values["order"] = order_index
        if values.get("order") is None:
            values.pop("order", None)

        for field, value in values.items():
            setattr(section, field, value)
        self.db.commit()
        self.db.refresh(section)
        return serialize_section(section)

    def delete_section(self, section_id: int, actor: User) -> Dict[str, str]:
        section = self._get_section(section_id, actor)
        self.db.delete(section)
        self.db.commit()
        return {"message": "Section deleted successfully"}

    def reorder_sections(self, lecture_id: int, actor: User, section_ids: List[int]) -> Dict[str, str]:
        lecture = self._get_lecture(lecture_id, actor)
        apply_reorder(lecture.sections, section_ids, "order", "Section", "lecture")
        self.db.commit()
        logger.info("Lecture %s sections reordered: %s", lecture_id, section_ids)
        return {"message": "Sections reordered successfully"}
