"""
Pytest configuration and shared fixtures
"""

import os
import random
from types import SimpleNamespace
from typing import Generator

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

# Set test environment
os.environ["ENVIRONMENT"] = "testing"
os.environ["CORS_ORIGINS"] = "http://localhost:3000,http://localhost:8000"
os.environ["RATE_LIMIT_REQUESTS"] = "1000"
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("SLACK_WEBHOOK_URL", None)

from config import get_settings  # noqa: E402
from api import create_app  # noqa: E402
from planner import (  # noqa: E402
    CompletionClient,
    CompletionConfig,
    FallbackPlanner,
    MealPlanner,
    RecipeCatalog,
)


WEEK = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


class FakeCompletions:
    """Stands in for client.chat.completions; plays back scripted outcomes"""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=outcome))]
        )


class FakeOpenAI:
    def __init__(self, *outcomes):
        self.completions = FakeCompletions(outcomes)
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def calls(self):
        return self.completions.calls


class RecordingSleep:
    """Async sleep replacement that records requested delays"""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def openai_error(cls, status_code: int, code=None, message="provider error"):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(status_code, request=request)
    body = {"code": code, "message": message} if code else None
    return cls(message, response=response, body=body)


@pytest.fixture(scope="session")
def test_settings():
    """Test settings configuration"""
    return get_settings()


@pytest.fixture(scope="session")
def app():
    """Create test FastAPI application"""
    return create_app()


@pytest.fixture(scope="session")
def client(app) -> Generator[TestClient, None, None]:
    """Test client with the application lifespan running"""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="session")
def catalog() -> RecipeCatalog:
    return RecipeCatalog.load()


@pytest.fixture
def fallback_planner(catalog) -> FallbackPlanner:
    return FallbackPlanner(catalog, rng=random.Random(7))


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_planner(fallback_planner, recording_sleep):
    """Build a MealPlanner whose provider plays back the given outcomes"""

    def _make(*outcomes):
        fake = FakeOpenAI(*outcomes)
        completion_client = CompletionClient(
            CompletionConfig(api_key="sk-test"),
            client=fake,
            sleep=recording_sleep,
        )
        return MealPlanner(completion_client, fallback_planner), fake

    return _make


@pytest.fixture
def sample_preferences():
    """Sample meal plan request"""
    return {
        "familySize": 4,
        "dietaryRestrictions": ["Vegetarian"],
        "cookingTime": "30 minutes",
        "cuisinePreferences": ["Italian", "Mexican"],
        "dislikedIngredients": "mushrooms",
        "additionalNotes": "Kids prefer mild food",
    }


@pytest.fixture
def ai_meals():
    """Seven meals in the shape the system prompt asks for"""
    return [
        {
            "day": day,
            "title": f"{day} Pasta",
            "description": "Tomato, basil and garlic tossed with penne.",
            "cookingTime": "25 minutes",
            "cuisine": "Italian",
        }
        for day in WEEK
    ]
