import os
import tempfile
from types import SimpleNamespace

# The app module reads these at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_ROOT", tempfile.mkdtemp(prefix="hunt-uploads-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from scavenger_hunt.application.scoring_oracle import ScoringOracle
from scavenger_hunt.core.config import Settings
from scavenger_hunt.infrastructure.db.base import Base
from scavenger_hunt.infrastructure.db.models import (
    EventModel,
    ProgressModel,
    QuestionModel,
    UserModel,
)
from scavenger_hunt.presentation.dependencies import get_app_settings, get_db, get_scoring_oracle


class FakeLLM:
    """Scripted stand-in for a chat client; records every call."""

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def generate(self, *, system_prompt, user_prompt, image_url=None):
        self.calls.append(
            {"system_prompt": system_prompt, "user_prompt": user_prompt, "image_url": image_url}
        )
        if self.error:
            raise self.error
        if not self.responses:
            return "Score: 0\n\nExplanation: nothing scripted"
        return self.responses.pop(0)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL="sqlite://",
        UPLOAD_ROOT=str(tmp_path),
        OPENROUTER_API_KEY=None,
        ADMIN_USERNAME="admin",
        ADMIN_PASSWORD="secret",
        JWT_SECRET="test-secret",
    )


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def oracle(fake_llm):
    return ScoringOracle(fake_llm, timeout=5)


@pytest.fixture
def client(session_factory, settings, oracle):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_app_settings] = lambda: settings
    app.dependency_overrides[get_scoring_oracle] = lambda: oracle
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ---------------------------
# Seed helpers
# ---------------------------

def make_event(db, slug="spring-hunt", title="Spring Hunt"):
    event = EventModel(title=title, slug=slug)
    db.add(event)
    db.commit()
    return event


def make_question(db, event, slug, **overrides):
    fields = dict(
        event_id=event.id,
        slug=slug,
        title=slug.replace("-", " ").title(),
        type="text",
        content=f"What is the answer to {slug}?",
        expected_answer="oak tree",
        ai_threshold=5,
        hint_enabled=True,
    )
    fields.update(overrides)
    question = QuestionModel(**fields)
    db.add(question)
    db.commit()
    return question


@pytest.fixture
def hunt(db):
    """An event with three text questions and one registered participant."""
    event = make_event(db)
    q1 = make_question(db, event, "q1")
    q2 = make_question(db, event, "q2")
    q3 = make_question(db, event, "q3")
    user = UserModel(name="Ada")
    db.add(user)
    db.commit()
    progress = ProgressModel(
        user_id=user.id,
        event_id=event.id,
        question_order=[q1.id, q2.id, q3.id],
        completed=False,
    )
    db.add(progress)
    db.commit()
    return SimpleNamespace(event=event, q1=q1, q2=q2, q3=q3, user=user, progress=progress)
