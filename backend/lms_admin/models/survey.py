"""
Survey models: Survey, SurveyQuestion, SurveyResponse and SurveyAnswer.
"""

import json
from datetime import datetime
from typing import Optional, List, Any
from enum import Enum
from sqlalchemy import (
    Boolean, Integer, String, DateTime, Text, ForeignKey, Index
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from lms_admin.core.database import Base


class QuestionType(str, Enum):
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"
    FREE_TEXT = "free_text"


class ResponseContext(str, Enum):
    """Where a survey was answered from."""
    STANDALONE = "standalone"
    LECTURE = "lecture"
    POST_ASSIGNMENT = "post_assignment"


class Survey(Base):
    __tablename__ = "surveys"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    course_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True
    )
    created_by_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    is_published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

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

    course = relationship("Course")
    created_by = relationship("User")
    questions = relationship(
        "SurveyQuestion",
        back_populates="survey",
        cascade="all, delete-orphan",
        order_by="SurveyQuestion.order_index"
    )
    responses = relationship("SurveyResponse", back_populates="survey", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_survey_course", "course_id"),
        Index("idx_survey_creator", "created_by_id"),
    )

    def __repr__(self) -> str:
        return f"<Survey(id={self.id}, title='{self.title}')>"

    def is_managed_by(self, user_id: int, is_admin: bool = False) -> bool:
        return is_admin or self.created_by_id == user_id


class SurveyQuestion(Base):
    __tablename__ = "survey_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    survey_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False
    )
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    question_type: Mapped[str] = mapped_column(String(30), nullable=False)
    # JSON-encoded list of option labels for choice questions
    options: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_required: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    survey = relationship("Survey", back_populates="questions")
    answers = relationship("SurveyAnswer", back_populates="question", cascade="all, delete-orphan")

    @property
    def option_list(self) -> Optional[List[str]]:
        return json.loads(self.options) if self.options else None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "surveyId": self.survey_id,
            "questionText": self.question_text,
            "questionType": self.question_type,
            "options": self.option_list,
            "isRequired": self.is_required,
            "orderIndex": self.order_index,
        }


class SurveyResponse(Base):
    __tablename__ = "survey_responses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    survey_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False
    )
    # Null for anonymous surveys and guests
    user_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    context: Mapped[str] = mapped_column(
        String(30), default=ResponseContext.STANDALONE.value, nullable=False
    )
    context_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    survey = relationship("Survey", back_populates="responses")
    user = relationship("User")
    answers = relationship("SurveyAnswer", back_populates="response", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_survey_response_user", "survey_id", "user_id"),
    )


class SurveyAnswer(Base):
    __tablename__ = "survey_answers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    response_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("survey_responses.id", ondelete="CASCADE"), nullable=False
    )
    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("survey_questions.id", ondelete="CASCADE"), nullable=False
    )
    # JSON array for multiple choice, plain text otherwise
    answer_value: Mapped[str] = mapped_column(Text, nullable=False)

    response = relationship("SurveyResponse", back_populates="answers")
    question = relationship("SurveyQuestion", back_populates="answers")

    def decoded_value(self) -> Any:
        if self.question is not None and self.question.question_type == QuestionType.MULTIPLE_CHOICE.value:
            return json.loads(self.answer_value)
        return self.answer_value

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "responseId": self.response_id,
            "questionId": self.question_id,
            "answerValue": self.decoded_value(),
        }
