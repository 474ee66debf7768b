"""
Test configuration and fixtures
"""

import string

import pytest
from fastapi.testclient import TestClient

from mailmind.analysis.prompts import CLASSIFICATION_SYSTEM_PROMPT
from mailmind.api.app import create_app
from mailmind.api.dependencies import get_llm
from mailmind.config.settings import get_settings
from mailmind.exceptions import LLMUnavailableError
from mailmind.ingestion.base import ParsedEmail
from mailmind.storage.database import init_db
from mailmind.storage.repository import EmailStore


def letter_embedding(text: str) -> list[float]:
    """Deterministic 26-dimensional letter-frequency vector."""
    lower = text.lower()
    return [float(lower.count(ch)) for ch in string.ascii_lowercase]


class FakeLLM:
    """Stand-in for the Ollama client with canned replies."""

    base_url = "http://ollama.test:11434"
    model = "fake-model"

    def __init__(self):
        self.connected = True
        self.classification_reply = '{"classification": "meeting", "confidence": "high"}'
        self.events_reply = "[]"
        self.answer = "Here is what I found."
        self.chat_error: Exception | None = None
        self.calls: list[list[dict]] = []
        self.embedded: list[str] = []

    def chat(self, messages, model=None):
        self.calls.append(messages)
        if self.chat_error is not None:
            raise self.chat_error
        if not self.connected:
            raise LLMUnavailableError("offline")

        system = messages[0]["content"]
        if system == CLASSIFICATION_SYSTEM_PROMPT:
            return self.classification_reply
        if "extracts schedule and event information" in system:
            return self.events_reply
        return self.answer

    def check_connection(self):
        return self.connected

    def list_models(self):
        return [self.model] if self.connected else []

    def embed(self, text):
        if not self.connected:
            return None
        self.embedded.append(text)
        return letter_embedding(text)

    def close(self):
        pass


@pytest.fixture(scope="function")
def settings(tmp_path, monkeypatch):
    """Local storage in a temporary data directory."""
    monkeypatch.setenv("STORAGE_MODE", "local")
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("LLM_PROVIDER", "ollama")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture(scope="function")
def db(settings):
    """Fresh in-memory SQLite database for each test"""
    return init_db("sqlite://")


@pytest.fixture
def store(db):
    return EmailStore(db)


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture(scope="function")
def client(db, llm):
    """Create a test client with the LLM dependency overridden"""
    app = create_app()
    app.dependency_overrides[get_llm] = lambda: llm
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_emails():
    """Small set of parsed emails for repository and search tests"""
    return [
        ParsedEmail(
            subject="Budget review meeting",
            sender="Min Lee <lee@example.com>",
            date="2025-01-04 11:15:00",
            body="Please join the budget review on Friday. Bring the budget numbers.",
        ),
        ParsedEmail(
            subject="Server maintenance notice",
            sender="Admin <admin@example.com>",
            date="2025-01-07 08:00:00",
            body="The mail server will be down on Saturday night for maintenance.",
        ),
        ParsedEmail(
            subject="Contract approval",
            sender="Legal Team <legal@example.com>",
            date="2025-01-02 10:30:00",
            body="Please approve the attached contract before the budget deadline.",
            label="Inbox",
        ),
    ]
