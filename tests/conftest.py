"""
Shared pytest fixtures.

Uses a file-backed SQLite database so no Postgres is required for tests.
Every test works under its own random user id, so no other test's rows can
bleed into its assertions. The LLM is replaced by an AsyncMock-backed fake.
"""
import json
import uuid
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.db.base import Base, get_db
from app.main import app
from app.services.llm import get_completion_client

SQLITE_URL = "sqlite:///./test_status.db"

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def make_payload(**overrides) -> dict:
    """A well-formed completion payload; keyword arguments replace fields."""
    payload = {
        "overall_status": "Deep in the API refactor",
        "mood_emoji": "🧑‍💻",
        "visual_theme": "work",
        "accent_color": "#4287f5",
        "metrics": [
            {"name": "Energy", "value": "Low", "value_rating": 2, "trend": "new", "icon": "⚡"},
            {"name": "Project Progress", "value": "60%", "value_rating": 3, "trend": "new", "icon": "📊"},
        ],
        "highlights": [
            {"type": "activity", "description": "Refactoring the auth module",
             "timeframe": "ongoing", "is_new": True},
        ],
        "persistent_context": [],
        "personal_states": [
            {"name": "Hunger", "emoji": "🍽️", "level": 4, "time_since_last": "4h ago", "trend": "new"},
        ],
        "narrative_summary": "Working through the auth refactor, running low on energy.",
        "errors": [],
    }
    payload.update(overrides)
    return payload


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def user_id() -> str:
    return f"u_{uuid.uuid4().hex[:12]}"


@pytest.fixture()
def completion():
    """Completion client fake; `completion.complete` is an AsyncMock."""
    fake = Mock()
    fake.complete = AsyncMock(return_value=json.dumps(make_payload()))
    return fake


@pytest.fixture()
def client(db, completion):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_completion_client] = lambda: completion
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def payload():
    """Factory for completion payloads: payload(metrics=[...]) → dict."""
    return make_payload
