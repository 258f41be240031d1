import pytest
from sqlalchemy.exc import OperationalError

from scavenger_hunt.infrastructure.db.models import AnswerModel, ProgressModel
from scavenger_hunt.infrastructure.repositories.answer_repository import AnswerRepository

from conftest import make_question

CORRECT = "Score: 9\n\nExplanation: Spot on."
WRONG = "Score: 2\n\nExplanation: Not it."


@pytest.fixture
def participant(client, hunt):
    """Registers a fresh participant for the hunt; the client now carries their cookie."""
    response = client.post("/register", json={"name": "Grace", "eventId": hunt.event.id})
    assert response.status_code == 200
    return response.json()


# ---------------------------
# Registration & progress
# ---------------------------

def test_register_sets_cookie_and_shuffles_questions(client, hunt, db, participant):
    assert client.cookies.get("user_id") == participant["userId"]
    assert participant["eventId"] == hunt.event.id

    progress = db.get(ProgressModel, participant["progressId"])
    assert sorted(progress.question_order) == sorted([hunt.q1.id, hunt.q2.id, hunt.q3.id])
    assert progress.completed is False


def test_register_requires_an_event(client):
    response = client.post("/register", json={"name": "Grace"})
    assert response.status_code == 404
    assert response.json()["detail"] == "No events found"


def test_register_rejects_blank_name(client, hunt):
    response = client.post("/register", json={"name": "   ", "eventId": hunt.event.id})
    assert response.status_code == 400


def test_progress_lists_questions_with_status(client, hunt, fake_llm, participant):
    fake_llm.queue(CORRECT, WRONG)
    client.post("/answers", json={"questionId": hunt.q1.id, "submission": "oak"})
    client.post("/answers", json={"questionId": hunt.q2.id, "submission": "pine"})

    body = client.get("/progress", params={"eventId": hunt.event.id}).json()

    assert body["progress"] == {"completed": False}
    assert body["stats"] == {"completedCount": 1, "totalCount": 3}
    statuses = {q["id"]: q["computedStatus"] for q in body["questions"]}
    assert statuses == {hunt.q1.id: "accepted", hunt.q2.id: "rejected", hunt.q3.id: "pending"}
    assert all("expected_answer" not in q for q in body["questions"])


def test_reregistering_restarts_the_hunt(client, hunt, fake_llm, participant):
    fake_llm.queue(CORRECT, CORRECT, CORRECT)
    for question in (hunt.q1, hunt.q2, hunt.q3):
        client.post("/answers", json={"questionId": question.id, "submission": "oak"})
    assert client.get("/progress").json()["progress"]["completed"] is True

    again = client.post("/register", json={"name": "Grace", "eventId": hunt.event.id}).json()

    assert again["userId"] == participant["userId"]
    assert again["progressId"] == participant["progressId"]
    assert client.get("/progress").json()["progress"]["completed"] is False


def test_start_progress_by_slug(client, hunt, participant):
    response = client.post("/progress", json={"eventSlug": "spring-hunt"})
    assert response.status_code == 200
    assert len(response.json()["questionOrder"]) == 3

    assert client.post("/progress", json={"eventSlug": "nope"}).status_code == 404


# ---------------------------
# Answers
# ---------------------------

def test_answer_flow_reaches_completion(client, hunt, fake_llm, participant):
    fake_llm.queue(CORRECT, CORRECT, CORRECT)

    first = client.post("/answers", json={"questionId": hunt.q1.id, "submission": "oak"}).json()
    assert first == {
        "status": "correct",
        "aiScore": 9,
        "explanation": "Spot on.",
        "completed": False,
        "stats": {"correctCount": 1, "totalQuestions": 3},
        "applied": True,
    }

    client.post("/answers", json={"questionId": hunt.q2.id, "answer": "oak"})
    last = client.post("/answers", json={"questionId": hunt.q3.id, "submission": "oak"}).json()

    assert last["completed"] is True
    assert last["stats"] == {"correctCount": 3, "totalQuestions": 3}


def test_answer_requires_cookie(client, hunt):
    client.cookies.clear()
    response = client.post("/answers", json={"questionId": hunt.q1.id, "submission": "oak"})
    assert response.status_code == 401
    assert response.json()["detail"] == "User ID is required"


def test_answer_without_submission_is_bad_request(client, hunt, fake_llm, participant):
    response = client.post("/answers", json={"questionId": hunt.q1.id})
    assert response.status_code == 400
    assert fake_llm.calls == []


def test_oracle_failure_is_opaque_500(client, hunt, db, fake_llm, participant):
    fake_llm.error = ConnectionError("openrouter.ai refused the connection")

    response = client.post("/answers", json={"questionId": hunt.q1.id, "submission": "oak"})

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    db.expire_all()
    assert db.query(AnswerModel).count() == 0


def test_storage_failure_is_opaque_500(client, hunt, db, fake_llm, participant, monkeypatch):
    def locked(self, *args, **kwargs):
        raise OperationalError("INSERT INTO answers", {}, Exception("database is locked"))

    monkeypatch.setattr(AnswerRepository, "upsert_answer", locked)
    fake_llm.queue(CORRECT)

    response = client.post("/answers", json={"questionId": hunt.q1.id, "submission": "oak"})

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    db.expire_all()
    assert db.query(AnswerModel).count() == 0
    assert db.get(ProgressModel, participant["progressId"]).completed is False


def test_downgrade_reports_live_completion(client, hunt, fake_llm, participant):
    fake_llm.queue(CORRECT, CORRECT, CORRECT, WRONG)
    for question in (hunt.q1, hunt.q2, hunt.q3):
        client.post("/answers", json={"questionId": question.id, "submission": "oak"})

    downgraded = client.post("/answers", json={"questionId": hunt.q1.id, "submission": "birch"}).json()

    assert downgraded["completed"] is False
    assert downgraded["stats"] == {"correctCount": 2, "totalQuestions": 3}
    progress = client.get("/progress", params={"eventId": hunt.event.id}).json()
    assert progress["progress"] == {"completed": True}


def test_get_answer_returns_stored_answer(client, hunt, fake_llm, participant):
    assert client.get("/answers", params={"questionId": hunt.q1.id}).json() == {"answer": None}

    fake_llm.queue(CORRECT)
    client.post("/answers", json={"questionId": hunt.q1.id, "submission": "oak"})

    answer = client.get("/answers", params={"questionId": hunt.q1.id}).json()["answer"]
    assert answer["submission"] == "oak"
    assert answer["aiScore"] == 9
    assert answer["status"] == "correct"
    assert answer["computedStatus"] == "accepted"
    assert answer["progressId"] == participant["progressId"]


def test_multiple_choice_rejects_unknown_option(client, hunt, db, fake_llm, participant):
    mc = make_question(
        db, hunt.event, "mc", type="multiple_choice", options={"a": "Oak", "b": "Maple"}, expected_answer="a"
    )
    response = client.post("/answers", json={"questionId": mc.id, "submission": "z"})
    assert response.status_code == 400
    assert fake_llm.calls == []


# ---------------------------
# Hints
# ---------------------------

def test_hints_are_capped_per_question(client, hunt, fake_llm, participant):
    fake_llm.queue("Think acorns.", "Near the fountain.")

    first = client.post("/hints", json={"questionId": hunt.q1.id})
    second = client.post("/hints", json={"questionId": hunt.q1.id})
    third = client.post("/hints", json={"questionId": hunt.q1.id})

    assert first.json() == {"hint": "Think acorns.", "hintCount": 1, "maxHints": 2}
    assert second.json()["hintCount"] == 2
    assert third.status_code == 429
    assert third.json()["detail"] == "Maximum hints reached for this question"
    assert len(fake_llm.calls) == 2


def test_hints_disabled_is_forbidden(client, hunt, db, fake_llm, participant):
    hunt.q1.hint_enabled = False
    db.commit()

    response = client.post("/hints", json={"questionId": hunt.q1.id})
    assert response.status_code == 403
    assert fake_llm.calls == []


# ---------------------------
# Image answers
# ---------------------------

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def photo_question(db, hunt):
    return make_question(
        db,
        hunt.event,
        "red-door",
        type="image",
        expected_answer=None,
        image_description="a red door",
        allowed_formats=["png"],
        max_file_size=1024,
    )


def _uploaded_files(settings):
    from pathlib import Path
    return [p for p in (Path(settings.UPLOAD_ROOT) / "uploads").rglob("*") if p.is_file()]


def test_image_answer_is_graded(client, settings, fake_llm, participant, photo_question):
    fake_llm.queue("Score: 8\n\nExplanation: A red door indeed.")

    response = client.post(
        "/answers/image",
        data={"questionId": photo_question.id},
        files={"file": ("door.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "correct"
    assert fake_llm.calls[0]["image_url"].startswith("data:image/png;base64,")
    assert len(_uploaded_files(settings)) == 1


def test_image_answer_rejects_disallowed_format(client, settings, fake_llm, participant, photo_question):
    response = client.post(
        "/answers/image",
        data={"questionId": photo_question.id},
        files={"file": ("door.jpg", b"\xff\xd8\xff", "image/jpeg")},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid file format. Allowed: png"
    assert _uploaded_files(settings) == []
    assert fake_llm.calls == []


def test_image_answer_rejects_oversized_file(client, settings, participant, photo_question):
    response = client.post(
        "/answers/image",
        data={"questionId": photo_question.id},
        files={"file": ("door.png", b"\x89PNG" + b"\x00" * 2048, "image/png")},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "File too large"


def test_image_removed_when_grading_fails(client, settings, fake_llm, participant, photo_question):
    fake_llm.error = ConnectionError("down")

    response = client.post(
        "/answers/image",
        data={"questionId": photo_question.id},
        files={"file": ("door.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 500
    assert _uploaded_files(settings) == []


def test_upload_then_submit_url(client, hunt, fake_llm, participant, photo_question):
    upload = client.post(
        "/upload/image",
        data={"questionId": photo_question.id},
        files={"file": ("door.png", PNG_BYTES, "image/png")},
    )
    assert upload.status_code == 201
    url = upload.json()["url"]
    assert url.startswith(f"/uploads/spring-hunt/{photo_question.id}/")
    assert fake_llm.calls == []

    fake_llm.queue("Score: 7\n\nExplanation: Close enough.")
    graded = client.post("/answers", json={"questionId": photo_question.id, "submission": {"url": url}})

    assert graded.status_code == 200
    assert graded.json()["status"] == "correct"


# ---------------------------
# Public reads
# ---------------------------

def test_public_event_and_question_reads(client, hunt):
    events = client.get("/events").json()
    assert [e["slug"] for e in events] == ["spring-hunt"]

    assert client.get("/events/spring-hunt").json()["title"] == "Spring Hunt"
    assert client.get("/events/missing").status_code == 404

    body = client.get("/questions/q1").json()
    assert body["event"]["slug"] == "spring-hunt"
    assert "expected_answer" not in body["question"]
