"""Request schemas for surveys, questions and responses."""

from typing import List, Optional, Union

from pydantic import Field, PositiveInt

from lms_admin.models.survey import QuestionType, ResponseContext
from .common import CamelModel


class SurveyCreate(CamelModel):
    title: str = Field(..., min_length=3)
    description: Optional[str] = None
    course_id: Optional[PositiveInt] = None
    is_published: Optional[bool] = None
    is_anonymous: Optional[bool] = None


class SurveyUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=3)
    description: Optional[str] = None
    course_id: Optional[PositiveInt] = None
    is_published: Optional[bool] = None
    is_anonymous: Optional[bool] = None


class QuestionCreate(CamelModel):
    question_text: str = Field(..., min_length=3)
    question_type: QuestionType
    options: Optional[List[str]] = None
    is_required: Optional[bool] = None
    order_index: Optional[int] = Field(None, ge=0)


class QuestionUpdate(CamelModel):
    question_text: Optional[str] = Field(None, min_length=3)
    question_type: Optional[QuestionType] = None
    options: Optional[List[str]] = None
    is_required: Optional[bool] = None
    order_index: Optional[int] = Field(None, ge=0)


class QuestionReorder(CamelModel):
    question_ids: List[int]


class AnswerIn(CamelModel):
    question_id: PositiveInt
    # string for single choice / free text, list for multiple choice
    answer_value: Union[str, List[str]]


class ResponseSubmit(CamelModel):
    context: Optional[ResponseContext] = None
    context_id: Optional[PositiveInt] = None
    answers: List[AnswerIn]
