"""
Survey management: surveys, questions, response collection and analytics.

Only the survey's creator or an admin may change a survey, its questions,
or read its responses. Anonymous surveys never store who answered.
"""

import csv
import io
import json
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from lms_admin.core.errors import AppError
from lms_admin.models.course import Course
from lms_admin.models.survey import (
    QuestionType, ResponseContext, Survey, SurveyAnswer, SurveyQuestion, SurveyResponse
)
from lms_admin.models.user import User
from lms_admin.services.content import apply_reorder
from lms_admin.schemas.survey import (
    QuestionCreate, QuestionUpdate, ResponseSubmit, SurveyCreate, SurveyUpdate
)


logger = logging.getLogger(__name__)

CHOICE_TYPES = {QuestionType.SINGLE_CHOICE.value, QuestionType.MULTIPLE_CHOICE.value}


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


class SurveyService:
    def __init__(self, db: Session):
        self.db = db

    # Serialization

    def _counts(self, survey: Survey) -> Dict[str, int]:
        return {
            "questions": len(survey.questions),
            "responses": self.db.query(func.count(SurveyResponse.id)).filter(
                SurveyResponse.survey_id == survey.id
            ).scalar() or 0,
        }

    def _survey_summary(self, survey: Survey) -> Dict[str, Any]:
        return {
            "id": survey.id,
            "title": survey.title,
            "description": survey.description,
            "courseId": survey.course_id,
            "createdById": survey.created_by_id,
            "isPublished": survey.is_published,
            "isAnonymous": survey.is_anonymous,
            "createdAt": _iso(survey.created_at),
            "updatedAt": _iso(survey.updated_at),
            "course": {"id": survey.course.id, "title": survey.course.title} if survey.course else None,
            "counts": self._counts(survey),
        }

    # Lookups and permission checks

    def _get_survey(self, survey_id: int) -> Survey:
        survey = self.db.get(Survey, survey_id)
        if not survey:
            raise AppError("Survey not found", 404)
        return survey

    def _get_managed_survey(self, survey_id: int, actor: User) -> Survey:
        survey = self._get_survey(survey_id)
        if not survey.is_managed_by(actor.id, actor.is_admin):
            logger.warning("User %s denied access to survey %s", actor.id, survey_id)
            raise AppError("Not authorized", 403)
        return survey

    def _get_question(self, survey: Survey, question_id: int) -> SurveyQuestion:
        question = self.db.get(SurveyQuestion, question_id)
        if not question or question.survey_id != survey.id:
            raise AppError("Question not found", 404)
        return question

    def _check_course_access(self, course_id: int, actor: User) -> None:
        course = self.db.get(Course, course_id)
        if not course:
            raise AppError("Course not found", 404)
        if not course.is_owned_by(actor.id) and not actor.is_admin:
            raise AppError("Not authorized to create survey for this course", 403)

    # Survey CRUD

    def get_surveys(self, actor: Optional[User], course_id: Optional[int] = None) -> List[Dict[str, Any]]:
        query = self.db.query(Survey).options(selectinload(Survey.questions))
        if course_id:
            query = query.filter(Survey.course_id == course_id)

        is_admin = bool(actor and actor.is_admin)
        is_instructor = bool(actor and actor.is_instructor)
        if not is_admin and not is_instructor:
            query = query.filter(Survey.is_published.is_(True))
        elif not is_admin:
            # Instructors only see their own surveys
            query = query.filter(Survey.created_by_id == actor.id)

        surveys = query.order_by(Survey.created_at.desc(), Survey.id.desc()).all()
        return [self._survey_summary(s) for s in surveys]

    def get_survey(self, survey_id: int, actor: Optional[User] = None) -> Dict[str, Any]:
        survey = self._get_survey(survey_id)
        can_manage = bool(actor and (actor.is_instructor or actor.is_admin))
        if not can_manage and not survey.is_published:
            raise AppError("Survey not available", 403)

        data = self._survey_summary(survey)
        data["questions"] = [q.to_dict() for q in survey.questions]
        data["course"] = (
            {
                "id": survey.course.id,
                "title": survey.course.title,
                "instructorId": survey.course.instructor_id,
            }
            if survey.course else None
        )
        data["createdBy"] = {"id": survey.created_by.id, "fullname": survey.created_by.fullname}
        return data

    def create_survey(self, actor: User, data: SurveyCreate) -> Dict[str, Any]:
        if data.course_id:
            self._check_course_access(data.course_id, actor)

        survey = Survey(
            title=data.title,
            description=data.description,
            course_id=data.course_id,
            created_by_id=actor.id,
            is_published=bool(data.is_published),
            is_anonymous=bool(data.is_anonymous),
        )
        self.db.add(survey)
        self.db.commit()
        self.db.refresh(survey)
        logger.info("Survey %s created by user %s", survey.id, actor.id)
        return self._survey_summary(survey)

    def update_survey(self, survey_id: int, actor: User, data: SurveyUpdate) -> Dict[str, Any]:
        survey = self._get_managed_survey(survey_id, actor)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("course_id"):
            self._check_course_access(changes["course_id"], actor)

        for field, value in changes.items():
            setattr(survey, field, value)
        self.db.commit()
        self.db.refresh(survey)
        return self._survey_summary(survey)

    def delete_survey(self, survey_id: int, actor: User) -> Dict[str, str]:
        survey = self._get_managed_survey(survey_id, actor)
        self.db.delete(survey)
        self.db.commit()
        logger.info("Survey %s deleted by user %s", survey_id, actor.id)
        return {"message": "Survey deleted successfully"}

    def publish_survey(self, survey_id: int, actor: User) -> Dict[str, Any]:
        survey = self._get_managed_survey(survey_id, actor)
        if not survey.questions:
            raise AppError("Cannot publish survey with no questions", 400)

        survey.is_published = True
        self.db.commit()
        self.db.refresh(survey)
        return self._survey_summary(survey)

    # Questions

    @staticmethod
    def _validate_options(question_type: str, options: Optional[List[str]]) -> None:
        if question_type in CHOICE_TYPES and not options:
            raise AppError("Choice questions need at least one option", 400)

    def add_question(self, survey_id: int, actor: User, data: QuestionCreate) -> Dict[str, Any]:
        survey = self._get_managed_survey(survey_id, actor)
        question_type = data.question_type.value
        self._validate_options(question_type, data.options)

        order_index = data.order_index
        if order_index is None:
            max_order = self.db.query(func.max(SurveyQuestion.order_index)).filter(
                SurveyQuestion.survey_id == survey.id
            ).scalar()
            order_index = (max_order if max_order is not None else -1) + 1

        question = SurveyQuestion(
            survey_id=survey.id,
            question_text=data.question_text,
            question_type=question_type,
            options=json.dumps(data.options) if data.options else None,
            is_required=True if data.is_required is None else data.is_required,
            order_index=order_index,
        )
        self.db.add(question)
        self.db.commit()
        self.db.refresh(question)
        return question.to_dict()

    def update_question(
        self, survey_id: int, question_id: int, actor: User, data: QuestionUpdate
    ) -> Dict[str, Any]:
        survey = self._get_managed_survey(survey_id, actor)
        question = self._get_question(survey, question_id)
        changes = data.model_dump(exclude_unset=True, mode="json")

        options = changes.pop("options", None)
        if options:
            question.options = json.dumps(options)
        for field, value in changes.items():
            if value is not None:
                setattr(question, field, value)
        self._validate_options(question.question_type, question.option_list)

        self.db.commit()
        self.db.refresh(question)
        return question.to_dict()

    def delete_question(self, survey_id: int, question_id: int, actor: User) -> Dict[str, str]:
        survey = self._get_managed_survey(survey_id, actor)
        question = self._get_question(survey, question_id)
        self.db.delete(question)
        self.db.commit()
        return {"message": "Question deleted successfully"}

    def reorder_questions(self, survey_id: int, actor: User, question_ids: List[int]) -> Dict[str, str]:
        survey = self._get_managed_survey(survey_id, actor)
        apply_reorder(survey.questions, question_ids, "order_index", "Question", "survey")
        self.db.commit()
        logger.info("Survey %s questions reordered: %s", survey_id, question_ids)
        return {"message": "Questions reordered successfully"}

    # Responses

    def submit_response(
        self, survey_id: int, actor: Optional[User], data: ResponseSubmit
    ) -> Dict[str, Any]:
        survey = self._get_survey(survey_id)
        if not survey.is_published:
            raise AppError("Survey is not available", 400)

        if actor and not survey.is_anonymous:
            existing = self.db.query(SurveyResponse).filter(
                SurveyResponse.survey_id == survey.id,
                SurveyResponse.user_id == actor.id,
            ).first()
            if existing:
                raise AppError("You have already completed this survey", 400)

        questions = {q.id: q for q in survey.questions}
        answered = {a.question_id for a in data.answers}
        unknown = answered - questions.keys()
        if unknown:
            raise AppError(f"Question {min(unknown)} does not belong to this survey", 400)

        missing_required = [q.id for q in survey.questions if q.is_required and q.id not in answered]
        if missing_required:
            raise AppError("Please answer all required questions", 400)

        response = SurveyResponse(
            survey_id=survey.id,
            user_id=None if survey.is_anonymous or actor is None else actor.id,
            context=(data.context or ResponseContext.STANDALONE).value,
            context_id=data.context_id,
        )
        for answer in data.answers:
            question = questions[answer.question_id]
            response.answers.append(SurveyAnswer(
                question_id=question.id,
                answer_value=self._encode_answer(question, answer.answer_value),
            ))

        self.db.add(response)
        self.db.commit()
        self.db.refresh(response)
        return self._response_dict(response, include_user=False)

    @staticmethod
    def _encode_answer(question: SurveyQuestion, value) -> str:
        if question.question_type == QuestionType.MULTIPLE_CHOICE.value:
            return json.dumps(value if isinstance(value, list) else [value])
        if isinstance(value, list):
            raise AppError(f"Question {question.id} expects a single answer", 400)
        return value

    def get_my_response(self, survey_id: int, actor: User) -> Optional[Dict[str, Any]]:
        response = self.db.query(SurveyResponse).filter(
            SurveyResponse.survey_id == survey_id,
            SurveyResponse.user_id == actor.id,
        ).first()
        return self._response_dict(response, include_user=False) if response else None

    def check_if_completed(self, survey_id: int, actor: User) -> Dict[str, bool]:
        exists = self.db.query(SurveyResponse.id).filter(
            SurveyResponse.survey_id == survey_id,
            SurveyResponse.user_id == actor.id,
        ).first() is not None
        return {"completed": exists}

    def _response_dict(self, response: SurveyResponse, include_user: bool) -> Dict[str, Any]:
        data = {
            "id": response.id,
            "surveyId": response.survey_id,
            "userId": response.user_id,
            "context": response.context,
            "contextId": response.context_id,
            "completedAt": _iso(response.completed_at),
            "answers": [
                {
                    **a.to_dict(),
                    "question": {
                        "id": a.question.id,
                        "questionText": a.question.question_text,
                        "questionType": a.question.question_type,
                    },
                }
                for a in response.answers
            ],
        }
        if include_user:
            data["user"] = (
                {"id": response.user.id, "fullname": response.user.fullname, "email": response.user.email}
                if response.user else None
            )
        return data

    @staticmethod
    def _question_stats(question: SurveyQuestion, answers: List[SurveyAnswer]) -> Dict[str, Any]:
        stats: Dict[str, Any] = {
            "questionId": question.id,
            "questionText": question.question_text,
            "questionType": question.question_type,
            "totalResponses": len(answers),
        }
        if question.question_type == QuestionType.FREE_TEXT.value:
            stats["responses"] = [a.answer_value for a in answers]
            return stats

        option_counts = {option: 0 for option in (question.option_list or [])}
        for answer in answers:
            selected = answer.decoded_value()
            for choice in (selected if isinstance(selected, list) else [selected]):
                if choice in option_counts:
                    option_counts[choice] += 1
        stats["optionCounts"] = option_counts
        return stats

    def get_responses(self, survey_id: int, actor: User) -> Dict[str, Any]:
        survey = self._get_managed_survey(survey_id, actor)
        responses = self.db.query(SurveyResponse).options(
            selectinload(SurveyResponse.answers).selectinload(SurveyAnswer.question),
            selectinload(SurveyResponse.user),
        ).filter(
            SurveyResponse.survey_id == survey.id
        ).order_by(SurveyResponse.completed_at.desc(), SurveyResponse.id.desc()).all()

        answers_by_question: Dict[int, List[SurveyAnswer]] = {q.id: [] for q in survey.questions}
        for response in responses:
            for answer in response.answers:
                answers_by_question.setdefault(answer.question_id, []).append(answer)

        return {
            "survey": {
                "id": survey.id,
                "title": survey.title,
                "isAnonymous": survey.is_anonymous,
            },
            "totalResponses": len(responses),
            "questionStats": [
                self._question_stats(q, answers_by_question[q.id]) for q in survey.questions
            ],
            "responses": [
                self._response_dict(r, include_user=not survey.is_anonymous) for r in responses
            ],
        }

    def export_responses(self, survey_id: int, actor: User) -> Dict[str, str]:
        """Render all responses as CSV; every cell is quoted."""
        data = self.get_responses(survey_id, actor)
        anonymous = data["survey"]["isAnonymous"]

        headers = ["Response ID", "Completed At"]
        if not anonymous:
            headers += ["User ID", "Name", "Email"]
        headers += [q["questionText"] for q in data["questionStats"]]

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(headers)

        for response in data["responses"]:
            row = [str(response["id"]), response["completedAt"] or ""]
            if not anonymous:
                user = response.get("user")
                row += [str(user["id"]), user["fullname"], user["email"]] if user else ["", "", ""]

            answers = {a["questionId"]: a["answerValue"] for a in response["answers"]}
            for question in data["questionStats"]:
                value = answers.get(question["questionId"], "")
                row.append("; ".join(value) if isinstance(value, list) else value)
            writer.writerow(row)

        return {
            "filename": f"survey-{survey_id}-responses-{date.today().isoformat()}.csv",
            "content": buffer.getvalue().rstrip("\n"),
        }
