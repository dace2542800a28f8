from datetime import date

import pytest

from conftest import auth_headers
from lms_admin.models import SurveyAnswer, SurveyResponse


def create_survey(client, user, **extra):
    body = {"title": "Course feedback", "description": "Tell us what you think"}
    body.update(extra)
    r = client.post("/api/surveys", json=body, headers=auth_headers(user))
    assert r.status_code == 201, r.text
    return r.json()["data"]


def add_question(client, user, survey_id, text, qtype, options=None, required=True):
    body = {"questionText": text, "questionType": qtype, "isRequired": required}
    if options is not None:
        body["options"] = options
    r = client.post(f"/api/surveys/{survey_id}/questions", json=body, headers=auth_headers(user))
    assert r.status_code == 201, r.text
    return r.json()["data"]


@pytest.fixture()
def published_survey(client, instructor):
    survey = create_survey(client, instructor)
    q1 = add_question(client, instructor, survey["id"], "How was the pace?", "single_choice", ["Slow", "Good", "Fast"])
    q2 = add_question(client, instructor, survey["id"], "Which topics helped?", "multiple_choice", ["Search", "Logic", "Learning"])
    q3 = add_question(client, instructor, survey["id"], "Any other comments?", "free_text", required=False)
    r = client.post(f"/api/surveys/{survey['id']}/publish", headers=auth_headers(instructor))
    assert r.status_code == 200
    return {"survey": r.json()["data"], "questions": [q1, q2, q3]}


def test_create_survey_for_course_checks_ownership(client, instructor, other_instructor, admin, course):
    survey = create_survey(client, instructor, courseId=course.id)
    assert survey["course"] == {"id": course.id, "title": "Intro to AI"}
    assert survey["counts"] == {"questions": 0, "responses": 0}

    r = client.post(
        "/api/surveys",
        json={"title": "Hijack", "courseId": course.id},
        headers=auth_headers(other_instructor),
    )
    assert r.status_code == 403

    r = client.post("/api/surveys", json={"title": "Ghost", "courseId": 999}, headers=auth_headers(instructor))
    assert r.status_code == 404
    assert r.json()["error"] == "Course not found"

    create_survey(client, admin, courseId=course.id)


def test_students_cannot_manage_surveys(client, student):
    r = client.post("/api/surveys", json={"title": "Nope"}, headers=auth_headers(student))
    assert r.status_code == 403
    assert r.json()["error"] == "Instructor access required"


def test_list_surveys_by_role(client, instructor, other_instructor, admin):
    create_survey(client, instructor, title="Mine")
    create_survey(client, other_instructor, title="Theirs")

    r = client.get("/api/surveys", headers=auth_headers(instructor))
    assert [s["title"] for s in r.json()["data"]] == ["Mine"]

    r = client.get("/api/surveys", headers=auth_headers(admin))
    assert sorted(s["title"] for s in r.json()["data"]) == ["Mine", "Theirs"]


def test_publish_requires_questions(client, instructor):
    survey = create_survey(client, instructor)
    r = client.post(f"/api/surveys/{survey['id']}/publish", headers=auth_headers(instructor))
    assert r.status_code == 400
    assert r.json()["error"] == "Cannot publish survey with no questions"


def test_only_creator_or_admin_can_edit(client, instructor, other_instructor, admin):
    survey = create_survey(client, instructor)
    r = client.put(f"/api/surveys/{survey['id']}", json={"title": "Changed"}, headers=auth_headers(other_instructor))
    assert r.status_code == 403
    assert r.json()["error"] == "Not authorized"

    r = client.put(f"/api/surveys/{survey['id']}", json={"title": "Changed"}, headers=auth_headers(admin))
    assert r.status_code == 200
    assert r.json()["data"]["title"] == "Changed"

    r = client.delete(f"/api/surveys/{survey['id']}", headers=auth_headers(other_instructor))
    assert r.status_code == 403
    r = client.delete(f"/api/surveys/{survey['id']}", headers=auth_headers(instructor))
    assert r.status_code == 200


def test_questions_append_and_reorder(client, instructor):
    survey = create_survey(client, instructor)
    ids = [
        add_question(client, instructor, survey["id"], f"Question {n}?", "free_text")["id"]
        for n in range(3)
    ]

    r = client.get(f"/api/surveys/{survey['id']}", headers=auth_headers(instructor))
    assert [q["orderIndex"] for q in r.json()["data"]["questions"]] == [0, 1, 2]

    new_order = [ids[2], ids[0], ids[1]]
    r = client.post(
        f"/api/surveys/{survey['id']}/questions/reorder",
        json={"questionIds": new_order},
        headers=auth_headers(instructor),
    )
    assert r.status_code == 200

    r = client.get(f"/api/surveys/{survey['id']}", headers=auth_headers(instructor))
    questions = r.json()["data"]["questions"]
    assert [q["id"] for q in questions] == new_order
    assert [q["orderIndex"] for q in questions] == [0, 1, 2]


def test_reorder_rejects_foreign_question(client, instructor):
    first = create_survey(client, instructor)
    second = create_survey(client, instructor)
    own = add_question(client, instructor, first["id"], "Mine?", "free_text")
    foreign = add_question(client, instructor, second["id"], "Other?", "free_text")

    r = client.post(
        f"/api/surveys/{first['id']}/questions/reorder",
        json={"questionIds": [foreign["id"], own["id"]]},
        headers=auth_headers(instructor),
    )
    assert r.status_code == 400


def test_reorder_rejects_repeated_question(client, instructor):
    survey = create_survey(client, instructor)
    a = add_question(client, instructor, survey["id"], "First?", "free_text")
    b = add_question(client, instructor, survey["id"], "Second?", "free_text")

    r = client.post(
        f"/api/surveys/{survey['id']}/questions/reorder",
        json={"questionIds": [a["id"], a["id"], b["id"]]},
        headers=auth_headers(instructor),
    )
    assert r.status_code == 400
    assert r.json()["error"] == f"Question {a['id']} appears more than once"

    r = client.get(f"/api/surveys/{survey['id']}", headers=auth_headers(instructor))
    assert [q["id"] for q in r.json()["data"]["questions"]] == [a["id"], b["id"]]


def test_update_and_delete_question(client, instructor):
    survey = create_survey(client, instructor)
    other = create_survey(client, instructor)
    question = add_question(client, instructor, survey["id"], "Pick one?", "single_choice", ["A", "B"])

    r = client.put(
        f"/api/surveys/{survey['id']}/questions/{question['id']}",
        json={"options": ["A", "B", "C"], "isRequired": False},
        headers=auth_headers(instructor),
    )
    assert r.json()["data"]["options"] == ["A", "B", "C"]
    assert r.json()["data"]["isRequired"] is False

    r = client.delete(f"/api/surveys/{other['id']}/questions/{question['id']}", headers=auth_headers(instructor))
    assert r.status_code == 404

    r = client.delete(f"/api/surveys/{survey['id']}/questions/{question['id']}", headers=auth_headers(instructor))
    assert r.status_code == 200


def test_unpublished_survey_hidden_from_students(client, instructor, student):
    survey = create_survey(client, instructor)
    r = client.get(f"/api/surveys/{survey['id']}", headers=auth_headers(student))
    assert r.status_code == 403
    assert r.json()["error"] == "Survey not available"

    r = client.get(f"/api/surveys/{survey['id']}")
    assert r.status_code == 403

    r = client.get("/api/surveys/999")
    assert r.status_code == 404


def test_submit_requires_required_answers(client, student, published_survey):
    survey_id = published_survey["survey"]["id"]
    q1 = published_survey["questions"][0]
    r = client.post(
        f"/api/surveys/{survey_id}/submit",
        json={"answers": [{"questionId": q1["id"], "answerValue": "Good"}]},
        headers=auth_headers(student),
    )
    assert r.status_code == 400
    assert r.json()["error"] == "Please answer all required questions"


def test_submit_and_read_back(client, db, student, published_survey):
    survey_id = published_survey["survey"]["id"]
    q1, q2, _ = published_survey["questions"]
    answers = [
        {"questionId": q1["id"], "answerValue": "Good"},
        {"questionId": q2["id"], "answerValue": ["Search", "Logic"]},
    ]
    headers = auth_headers(student)

    r = client.post(f"/api/surveys/{survey_id}/submit", json={"answers": answers}, headers=headers)
    assert r.status_code == 201, r.text
    assert r.json()["data"]["userId"] == student.id

    stored = db.query(SurveyAnswer).filter(SurveyAnswer.question_id == q2["id"]).one()
    assert stored.answer_value == '["Search", "Logic"]'

    r = client.get(f"/api/surveys/{survey_id}/my-response", headers=headers)
    body = r.json()
    assert body["completed"] is True
    values = {a["questionId"]: a["answerValue"] for a in body["data"]["answers"]}
    assert values[q2["id"]] == ["Search", "Logic"]

    r = client.post(f"/api/surveys/{survey_id}/submit", json={"answers": answers}, headers=headers)
    assert r.status_code == 400
    assert r.json()["error"] == "You have already completed this survey"


def test_my_response_when_not_completed(client, student, published_survey):
    survey_id = published_survey["survey"]["id"]
    r = client.get(f"/api/surveys/{survey_id}/my-response", headers=auth_headers(student))
    assert r.json() == {"success": True, "completed": False, "data": None}


def test_submit_to_unpublished_survey(client, instructor, student):
    survey = create_survey(client, instructor)
    q = add_question(client, instructor, survey["id"], "Anything?", "free_text")
    r = client.post(
        f"/api/surveys/{survey['id']}/submit",
        json={"answers": [{"questionId": q["id"], "answerValue": "hi"}]},
        headers=auth_headers(student),
    )
    assert r.status_code == 400


def test_anonymous_survey_never_stores_user(client, db, instructor, student):
    survey = create_survey(client, instructor, isAnonymous=True)
    q = add_question(client, instructor, survey["id"], "Be honest?", "free_text")
    client.post(f"/api/surveys/{survey['id']}/publish", headers=auth_headers(instructor))

    for _ in range(2):
        r = client.post(
            f"/api/surveys/{survey['id']}/submit",
            json={"answers": [{"questionId": q["id"], "answerValue": "ok"}]},
            headers=auth_headers(student),
        )
        assert r.status_code == 201

    responses = db.query(SurveyResponse).filter(SurveyResponse.survey_id == survey["id"]).all()
    assert len(responses) == 2
    assert all(resp.user_id is None for resp in responses)

    r = client.get(f"/api/surveys/{survey['id']}/responses", headers=auth_headers(instructor))
    assert all("user" not in resp for resp in r.json()["data"]["responses"])


def test_guest_can_submit(client, published_survey):
    survey_id = published_survey["survey"]["id"]
    q1, q2, _ = published_survey["questions"]
    r = client.post(
        f"/api/surveys/{survey_id}/submit",
        json={
            "context": "lecture",
            "contextId": 12,
            "answers": [
                {"questionId": q1["id"], "answerValue": "Fast"},
                {"questionId": q2["id"], "answerValue": "Logic"},
            ],
        },
    )
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["userId"] is None
    assert data["context"] == "lecture"
    assert data["contextId"] == 12


def test_responses_include_stats(client, make_user, instructor, other_instructor, published_survey):
    survey_id = published_survey["survey"]["id"]
    q1, q2, q3 = published_survey["questions"]
    picks = [("Good", ["Search"], "Great"), ("Good", ["Search", "Logic"], None), ("Fast", ["Logic"], None)]
    for n, (pace, topics, comment) in enumerate(picks):
        learner = make_user(f"learner{n}@example.com")
        answers = [
            {"questionId": q1["id"], "answerValue": pace},
            {"questionId": q2["id"], "answerValue": topics},
        ]
        if comment:
            answers.append({"questionId": q3["id"], "answerValue": comment})
        r = client.post(f"/api/surveys/{survey_id}/submit", json={"answers": answers}, headers=auth_headers(learner))
        assert r.status_code == 201

    r = client.get(f"/api/surveys/{survey_id}/responses", headers=auth_headers(other_instructor))
    assert r.status_code == 403

    r = client.get(f"/api/surveys/{survey_id}/responses", headers=auth_headers(instructor))
    data = r.json()["data"]
    assert data["totalResponses"] == 3
    stats = {s["questionId"]: s for s in data["questionStats"]}
    assert stats[q1["id"]]["optionCounts"] == {"Slow": 0, "Good": 2, "Fast": 1}
    assert stats[q2["id"]]["optionCounts"] == {"Search": 2, "Logic": 2, "Learning": 0}
    assert stats[q3["id"]]["responses"] == ["Great"]
    assert data["responses"][0]["user"]["email"].endswith("@example.com")


def test_export_csv(client, student, instructor, published_survey):
    survey_id = published_survey["survey"]["id"]
    q1, q2, q3 = published_survey["questions"]
    client.post(
        f"/api/surveys/{survey_id}/submit",
        json={"answers": [
            {"questionId": q1["id"], "answerValue": "Slow"},
            {"questionId": q2["id"], "answerValue": ["Search", "Learning"]},
            {"questionId": q3["id"], "answerValue": 'Said "more demos", please'},
        ]},
        headers=auth_headers(student),
    )

    r = client.get(f"/api/surveys/{survey_id}/export", headers=auth_headers(instructor))
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    expected_name = f"survey-{survey_id}-responses-{date.today().isoformat()}.csv"
    assert r.headers["content-disposition"] == f'attachment; filename="{expected_name}"'

    lines = r.text.split("\n")
    assert lines[0] == (
        '"Response ID","Completed At","User ID","Name","Email",'
        '"How was the pace?","Which topics helped?","Any other comments?"'
    )
    assert len(lines) == 2
    row = lines[1]
    assert f'"{student.id}","Student","student@example.com"' in row
    assert row.endswith('"Slow","Search; Learning","Said ""more demos"", please"')


def test_export_forbidden_for_other_instructor(client, other_instructor, published_survey):
    survey_id = published_survey["survey"]["id"]
    r = client.get(f"/api/surveys/{survey_id}/export", headers=auth_headers(other_instructor))
    assert r.status_code == 403
