"""Shared test fixtures and utilities."""

import json
import os
from typing import Any, Optional

# Settings are read at import time by the API modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["OPENAI_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient

from pitch_core.completion import CompletionClient
from pitch_core.config import CompletionConfig
from pitch_core.models import RubricDraft


class FakeLM:
    """Stands in for ``dspy.LM``: returns one canned output and records each call."""

    def __init__(self, text: Optional[str] = None, error: Optional[Exception] = None, outputs: Any = None):
        self.text = text
        self.error = error
        self.outputs = outputs
        self.calls: list[dict[str, Any]] = []

    async def acall(self, prompt=None, messages=None, **kwargs):
        self.calls.append({"messages": messages, **kwargs})
        if self.error is not None:
            raise self.error
        if self.outputs is not None:
            return self.outputs
        return [self.text]


def create_completion_client(
    text: Optional[str] = None,
    error: Optional[Exception] = None,
    api_key: Optional[str] = "test-openai-key",
) -> CompletionClient:
    """Factory for a CompletionClient backed by a FakeLM."""
    config = CompletionConfig(model="openai/gpt-4o", api_key=api_key)
    return CompletionClient(config, lm=FakeLM(text=text, error=error))


def criteria_payload(count: int = 3, **extra: Any) -> list[dict[str, Any]]:
    """``count`` valid criteria named A, B, C..."""
    return [
        {"name": chr(ord("A") + i), "description": f"criterion {chr(ord('a') + i)}", **extra}
        for i in range(count)
    ]


def draft_payload(
    title: str = "Seed pitch",
    criteria_count: int = 3,
    **fields: Any,
) -> dict[str, Any]:
    """Factory for a draft-like dict that passes validation by default."""
    payload = {"title": title, "criteria": criteria_payload(criteria_count)}
    payload.update(fields)
    return payload


def copilot_payload(criteria_count: int = 3, **fields: Any) -> dict[str, Any]:
    """Factory for a model response in the copilot shape."""
    payload = {
        "name": "Investor pitch - seed round",
        "context_summary": "Seed-stage pitch to angel investors",
        "guiding_questions": ["What problem are you solving?", "Why now?"],
        "criteria": criteria_payload(criteria_count, scoring_guide="0-10: how well it lands"),
    }
    payload.update(fields)
    return payload


def analysis_payload(labels: Optional[list[str]] = None, score: float = 7) -> dict[str, Any]:
    """Factory for a model response in the analysis shape."""
    labels = labels or ["Hook", "Problem", "Solution"]
    return {
        "summary": {
            "overall_score": score,
            "overall_notes": "Clear problem, weak close.",
            "top_strengths": ["Opened with a number"],
            "top_improvements": ["End with a concrete ask"],
        },
        "rubric_scores": [
            {"criterion_label": label, "score": score, "notes": f"Notes on {label}"}
            for label in labels
        ],
        "line_by_line": [
            {"quote": "we lose 40% of users", "type": "praise", "comment": "Concrete", "priority": "low"},
        ],
    }


@pytest.fixture
def valid_draft() -> RubricDraft:
    """A validated three-criterion draft."""
    return RubricDraft.model_validate(draft_payload(description="For seed rounds", target_duration_seconds=120))


# ===================
# API fixtures
# ===================
@pytest.fixture
def app():
    """The FastAPI app with a fresh in-memory database."""
    from pitch_api.db.database import Base, engine
    from pitch_api.main import app as fastapi_app

    Base.metadata.drop_all(bind=engine)
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    """Test client; entering it runs startup (tables and templates)."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def use_completion(app):
    """Route every LLM call in the app through a FakeLM-backed client."""
    from pitch_api.dependencies import get_completion_client

    def install(text: Optional[str] = None, error: Optional[Exception] = None, api_key: Optional[str] = "test-openai-key"):
        completion = create_completion_client(text=text, error=error, api_key=api_key)
        app.dependency_overrides[get_completion_client] = lambda: completion
        return completion._lm

    return install


def register_and_login(client: TestClient, email: str = "coach@example.com", password: str = "password123") -> dict[str, str]:
    """Create an account and return an Authorization header for it."""
    response = client.post("/api/v1/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    response = client.post("/api/v1/auth/login", data={"username": email, "password": password})
    assert response.status_code == 200, response.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client) -> dict[str, str]:
    """Authorization header for a freshly registered user."""
    return register_and_login(client)


def as_model_output(value: Any) -> str:
    """Serialise a payload the way the model would return it."""
    return json.dumps(value)
