import random

import pytest

from scavenger_hunt.application.registration_service import RegistrationService, computed_status
from scavenger_hunt.core.exceptions import NotFoundError, ValidationError
from scavenger_hunt.infrastructure.repositories.answer_repository import AnswerRepository
from scavenger_hunt.infrastructure.repositories.event_repository import EventRepository
from scavenger_hunt.infrastructure.repositories.progress_repository import ProgressRepository
from scavenger_hunt.infrastructure.repositories.question_repository import QuestionRepository
from scavenger_hunt.infrastructure.repositories.user_repository import UserRepository

from conftest import make_event, make_question


@pytest.fixture
def service(db):
    return RegistrationService(
        user_repo=UserRepository(db),
        event_repo=EventRepository(db),
        question_repo=QuestionRepository(db),
        progress_repo=ProgressRepository(db),
        answer_repo=AnswerRepository(db),
        rng=random.Random(7),
    )


@pytest.mark.parametrize(
    "status, expected",
    [("correct", "accepted"), ("incorrect", "rejected"), ("pending", "pending"), (None, "pending")],
)
def test_computed_status(status, expected):
    assert computed_status(status) == expected


def test_register_creates_one_progress_per_event(db, service, hunt):
    first = service.register("Ada", hunt.event.id)
    second = service.register("Ada", hunt.event.id)

    assert first.user_id == hunt.user.id
    assert first.progress_id == second.progress_id == hunt.progress.id
    assert sorted(second.question_order) == sorted([hunt.q1.id, hunt.q2.id, hunt.q3.id])


def test_register_resets_completed(db, service, hunt):
    hunt.progress.completed = True
    db.commit()

    service.register("Ada", hunt.event.id)

    db.expire_all()
    assert hunt.progress.completed is False


def test_register_for_event_without_questions(db, service):
    empty = make_event(db, slug="empty", title="Empty")
    with pytest.raises(NotFoundError, match="No questions found for this event"):
        service.register("Ada", empty.id)


def test_register_unknown_event(service, hunt):
    with pytest.raises(NotFoundError, match="Event not found"):
        service.register("Ada", "missing")


def test_register_requires_name(service, hunt):
    with pytest.raises(ValidationError):
        service.register("  ", hunt.event.id)


def test_overview_follows_stored_order(db, service, hunt):
    hunt.progress.question_order = [hunt.q3.id, hunt.q1.id, hunt.q2.id]
    db.commit()
    late = make_question(db, hunt.event, "late")
    AnswerRepository(db).upsert_answer(hunt.progress.id, hunt.q1.id, submission="oak", status="correct", ai_score=8)
    db.commit()

    overview = service.progress_overview(hunt.user.id, hunt.event.id)

    assert [item["question"].id for item in overview["questions"]] == [hunt.q3.id, hunt.q1.id, hunt.q2.id, late.id]
    answered = {item["question"].id: item["computed_status"] for item in overview["questions"]}
    assert answered[hunt.q1.id] == "accepted"
    assert answered[hunt.q2.id] == "pending"
    assert (overview["completed_count"], overview["total_count"]) == (1, 3)
    assert overview["completed"] is False


def test_overview_without_progress(service, hunt):
    with pytest.raises(NotFoundError):
        service.progress_overview("nobody")
