"""
Test fixtures for reprover-api.

Provides mock fixtures for external services (LLM provider, document store,
identity provider) to enable fast, deterministic, offline testing.
"""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch
from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Make src/ importable so tests can do `import reprover_api...` without an install
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from reprover_api.main import app
from reprover_api.auth import get_current_user, get_optional_user
from reprover_api.config import settings
from reprover_api.services.workout_store import InMemoryWorkoutStore, get_workout_store


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Pin LLM settings so tests never depend on the caller's environment."""
    monkeypatch.setattr(settings, "LLM_PROVIDER", "openai")
    monkeypatch.setattr(settings, "LLM_MODEL", None)
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "test-api-key")
    monkeypatch.setattr(settings, "ANTHROPIC_API_KEY", "test-anthropic-key")
    monkeypatch.setattr(settings, "HELICONE_ENABLED", False)
    monkeypatch.setattr(settings, "HELICONE_API_KEY", None)
    monkeypatch.setattr(settings, "ENVIRONMENT", "development")
    return settings


# ---------------------------------------------------------------------------
# Auth + store overrides
# ---------------------------------------------------------------------------


TEST_USER_ID = "test-user-123"


@pytest.fixture
def memory_store() -> InMemoryWorkoutStore:
    """Fresh in-memory document store per test."""
    return InMemoryWorkoutStore()


@pytest.fixture
def client_for(memory_store):
    """Build a TestClient authenticated as the given user, sharing one store."""
    def _make(user_id: str = TEST_USER_ID) -> TestClient:
        async def _user() -> str:
            return user_id

        test_app_overrides = {
            get_current_user: _user,
            get_optional_user: _user,
            get_workout_store: lambda: memory_store,
        }
        app.dependency_overrides.update(test_app_overrides)
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(client_for) -> TestClient:
    """Per-test client authenticated as TEST_USER_ID."""
    return client_for(TEST_USER_ID)


@pytest.fixture
def anonymous_client(memory_store) -> TestClient:
    """Client with real auth dependencies and no credentials."""
    app.dependency_overrides[get_workout_store] = lambda: memory_store
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# LLM mocks
# ---------------------------------------------------------------------------


def chat_response(content: str) -> MagicMock:
    """Mock OpenAI chat completion response carrying `content`."""
    mock_response = MagicMock()
    mock_response.choices = [
        MagicMock(message=MagicMock(role="assistant", content=content))
    ]
    return mock_response


@pytest.fixture
def mock_openai_client():
    """Mock the OpenAI client class; returns the instance the code will use."""
    with patch("openai.OpenAI") as mock_class:
        mock_instance = MagicMock()
        mock_class.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def llm_reply(mock_openai_client):
    """Set the text the mocked model answers with."""
    def _reply(content: str) -> MagicMock:
        mock_openai_client.chat.completions.create.return_value = chat_response(content)
        return mock_openai_client
    return _reply


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------


def exercise(name: str, **fields: Any) -> Dict[str, Any]:
    """Fully-populated exercise dict with nulls for unspecified fields."""
    base = {
        "name": name,
        "reps": None,
        "weight": None,
        "weight_range": None,
        "weight_unit": None,
        "duration": None,
        "distance": None,
        "distance_unit": None,
        "note": None,
    }
    base.update(fields)
    return base


@pytest.fixture
def canonical_plan() -> List[Dict[str, Any]]:
    """Plan for "3 rounds: 10 push-ups, 15 squats at 135lbs"."""
    return [
        {
            "rounds": 3,
            "exercises": [
                exercise("Push-ups", reps=10),
                exercise("Squats", reps=15, weight=135, weight_unit="lbs"),
            ],
        }
    ]


@pytest.fixture
def canonical_plan_json(canonical_plan) -> str:
    return json.dumps(canonical_plan)


@pytest.fixture
def mixed_plan() -> List[Dict[str, Any]]:
    """Plan touching every exercise field."""
    return [
        {
            "rounds": 1,
            "exercises": [
                exercise("Row", distance=1000, distance_unit="meters"),
                exercise("Burpees", reps=20),
            ],
        },
        {
            "rounds": 2,
            "exercises": [
                exercise("Dumbbell Press", reps=12, weight=24, weight_range="24-32kg", weight_unit="kg"),
                exercise("Plank", duration="30 seconds", note="each side"),
            ],
        },
    ]


@pytest.fixture
def sample_log(canonical_plan) -> Dict[str, Any]:
    """A completed session of the canonical plan."""
    return {
        "timestamp": "2024-05-01T10:00:00.000Z",
        "plan": canonical_plan,
        "actuals": [
            {"name": "Push-ups", "round": 1, "reps": 10, "weight": None},
            {"name": "Squats", "round": 1, "reps": 15, "weight": 135},
            {"name": "Push-ups", "round": 2, "reps": 9, "weight": None},
            {"name": "Squats", "round": 2, "reps": 12, "weight": 135},
        ],
        "duration": 1_260_000,
        "workoutName": "Leg Day",
    }


@pytest.fixture
def make_exercise():
    """Factory for exercise dicts (see `exercise`)."""
    return exercise
