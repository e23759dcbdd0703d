from typing import List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from assistant.core.models import ProviderMessage
from config.settings import Settings


class FakeResponse:
    def __init__(self, text: str = "", block_reason: Optional[str] = None, error: Optional[Exception] = None):
        self._text = text
        self.block_reason = block_reason
        self._error = error

    def text(self) -> str:
        if self._error:
            raise self._error
        return self._text


class FakeBackend:
    """Records which dispatch path ran and returns a canned response."""

    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None):
        self.response = response or FakeResponse("Buddy looks happy today! 🐾")
        self.error = error
        self.generate_calls: List[str] = []
        self.chat_calls: List[Tuple[List[ProviderMessage], str]] = []

    async def generate(self, prompt: str) -> FakeResponse:
        self.generate_calls.append(prompt)
        if self.error:
            raise self.error
        return self.response

    async def chat(self, history: List[ProviderMessage], message: str) -> FakeResponse:
        self.chat_calls.append((history, message))
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.delenv("REQUEST_TIMEOUT", raising=False)
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    monkeypatch.delenv("CORS_ORIGIN_REGEX", raising=False)
    monkeypatch.delenv("SERVICE_NAME", raising=False)
    return Settings()


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def client(settings, fake_backend):
    app = create_app(settings=settings, backend=fake_backend)
    with TestClient(app) as test_client:
        yield test_client
