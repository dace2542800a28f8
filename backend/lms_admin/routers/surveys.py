"""
Surveys router.

Instructors and admins build surveys and read their results; any
visitor may answer a published survey.
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from lms_admin.core.database import get_db
from lms_admin.models.user import User
from lms_admin.routers.auth import get_current_user, get_optional_user, require_instructor
from lms_admin.schemas.common import ok
from lms_admin.schemas.survey import (
    QuestionCreate, QuestionReorder, QuestionUpdate, ResponseSubmit, SurveyCreate, SurveyUpdate
)
from lms_admin.services.surveys import SurveyService


router = APIRouter()


@router.get("")
async def list_surveys(
    course_id: Optional[int] = Query(None, alias="courseId"),
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(SurveyService(db).get_surveys(current_user, course_id=course_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_survey(
    payload: SurveyCreate,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(SurveyService(db).create_survey(current_user, payload))


@router.get("/{survey_id}")
async def get_survey(
    survey_id: int,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(SurveyService(db).get_survey(survey_id, current_user))


@router.put("/{survey_id}")
async def update_survey(
    survey_id: int,
    payload: SurveyUpdate,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(SurveyService(db).update_survey(survey_id, current_user, payload))


@router.delete("/{survey_id}")
async def delete_survey(
    survey_id: int,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    result = SurveyService(db).delete_survey(survey_id, current_user)
    return ok(message=result["message"])


@router.post("/{survey_id}/publish")
async def publish_survey(
    survey_id: int,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(SurveyService(db).publish_survey(survey_id, current_user))


# Questions
@router.post("/{survey_id}/questions", status_code=status.HTTP_201_CREATED)
async def add_question(
    survey_id: int,
    payload: QuestionCreate,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(SurveyService(db).add_question(survey_id, current_user, payload))


@router.post("/{survey_id}/questions/reorder")
async def reorder_questions(
    survey_id: int,
    payload: QuestionReorder,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    result = SurveyService(db).reorder_questions(survey_id, current_user, payload.question_ids)
    return ok(message=result["message"])


@router.put("/{survey_id}/questions/{question_id}")
async def update_question(
    survey_id: int,
    question_id: int,
    payload: QuestionUpdate,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(SurveyService(db).update_question(survey_id, question_id, current_user, payload))


@router.delete("/{survey_id}/questions/{question_id}")
async def delete_question(
    survey_id: int,
    question_id: int,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    result = SurveyService(db).delete_question(survey_id, question_id, current_user)
    return ok(message=result["message"])


# Responses
@router.post("/{survey_id}/submit", status_code=status.HTTP_201_CREATED)
async def submit_response(
    survey_id: int,
    payload: ResponseSubmit,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(SurveyService(db).submit_response(survey_id, current_user, payload))


@router.get("/{survey_id}/my-response")
async def get_my_response(
    survey_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    service = SurveyService(db)
    body = ok(**service.check_if_completed(survey_id, current_user))
    body["data"] = service.get_my_response(survey_id, current_user)
    return body


@router.get("/{survey_id}/responses")
async def get_responses(
    survey_id: int,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return ok(SurveyService(db).get_responses(survey_id, current_user))


@router.get("/{survey_id}/export")
async def export_responses(
    survey_id: int,
    current_user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
) -> Response:
    export = SurveyService(db).export_responses(survey_id, current_user)
    return Response(
        content=export["content"],
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export["filename"]}"'},
    )
