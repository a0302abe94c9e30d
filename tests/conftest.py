"""Shared test fixtures."""

import json

import pytest
from fastapi.testclient import TestClient
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from agent.agent import LocationResponseGenerator
from agent.core.memory import ChatStore
from agent.core.personas import PersonaTable
from app.main import create_app
from config.settings import Settings


SAMPLE_RESPONSE = {
    "description": "X",
    "points_of_interest": [
        {"name": "A", "description": "d", "coordinates": {"lat": 1, "lng": 2}},
    ],
    "fun_fact": "F",
}

NYC = {"lat": 40.7128, "lng": -74.006, "address": "New York, NY"}


class FailingLLM:
    """Stands in for a chat model whose provider call fails."""

    def __init__(self, error: Exception) -> None:
        self.error = error
        self.calls = 0

    def invoke(self, messages):
        self.calls += 1
        raise self.error


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.setenv("APP_ENV", "test")
    return Settings()


@pytest.fixture
def personas(settings: Settings) -> PersonaTable:
    return PersonaTable.from_file(settings.personas_path)


@pytest.fixture
def store() -> ChatStore:
    return ChatStore()


@pytest.fixture
def sample_response() -> dict:
    return json.loads(json.dumps(SAMPLE_RESPONSE))


@pytest.fixture
def nyc() -> dict:
    return dict(NYC)


@pytest.fixture
def make_generator():
    """Generator backed by a fake chat model that replies with ``responses`` in turn."""

    def _make(*responses: str, **kwargs) -> LocationResponseGenerator:
        return LocationResponseGenerator(FakeListChatModel(responses=list(responses)), **kwargs)

    return _make


@pytest.fixture
def generator(make_generator) -> LocationResponseGenerator:
    return make_generator(json.dumps(SAMPLE_RESPONSE))


@pytest.fixture
def client(store, generator, personas, settings):
    app = create_app(store=store, generator=generator, personas=personas, settings=settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def failing_llm() -> FailingLLM:
    return FailingLLM(RuntimeError("provider unavailable"))
