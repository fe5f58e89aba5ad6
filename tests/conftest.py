"""Shared pytest fixtures for the cover letter test suite."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

# Ensure test environment variables are set BEFORE importing app modules
os.environ.setdefault("LLM_PROVIDER", "gemini")
os.environ.setdefault("GOOGLE_API_KEY", "test-key-not-real")
os.environ.setdefault("OPENAI_API_KEY", "test-key-not-real")
os.environ.setdefault("CACHE_TTL_SECONDS", "600")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("LOG_DIR", str(Path(tempfile.gettempdir()) / "cover-letter-test-logs"))

from app.agents.letter_generator import LetterGenerator  # noqa: E402
from app.models.cache_store import CacheStore, get_cache_store  # noqa: E402
from app.models.request_models import GenerationRequest  # noqa: E402


SAMPLE_CV_TEXT = (
    "Jane Smith — Backend Engineer. Six years building Python services with "
    "FastAPI and PostgreSQL. Led the migration of a monolith to 14 services, "
    "cutting deploy time from 2 hours to 10 minutes."
)

STRUCTURED_PROFILE = {
    "id": "d2",
    "name": "Jane Smith",
    "email": "jane@example.com",
    "title": "Backend Engineer",
    "contactInfo": {"phone": "+44 20 7946 0000", "linkedin": None},
    "skills": [
        {"name": "Go", "category": "language", "level": "intermediate"},
        {"name": "Python", "category": "language", "level": "expert"},
        {"name": "FastAPI", "category": "framework", "level": "advanced"},
    ],
    "achievements": [
        {"title": "Latency", "description": "Cut p95 latency by 45%"},
    ],
}

LETTER_SENTENCE = "I bring deep Python experience to this backend engineering position."


def _make_payload(**overrides) -> dict:
    """Build a minimal valid request body (camelCase, as sent by the frontend)."""
    payload = {
        "developerProfile": {"id": "d1", "mvpContent": SAMPLE_CV_TEXT},
        "roleInfo": {"title": "Backend Engineer"},
        "companyInfo": {"name": "Acme"},
        "requestType": "coverLetter",
    }
    payload.update(overrides)
    return payload


def _make_request(**overrides) -> GenerationRequest:
    return GenerationRequest.model_validate(_make_payload(**overrides))


def _make_letter(
    sentences: int = 20,
    greeting: str = "Dear Hiring Team,",
    closing: str = "Sincerely,\nJane Smith",
) -> str:
    """Build a plain-text letter; every body sentence is exactly 10 words.

    Word count = 10 * sentences + 3 (greeting) + 3 (closing).
    """
    paragraphs = []
    for start in range(0, sentences, 5):
        paragraphs.append(" ".join([LETTER_SENTENCE] * min(5, sentences - start)))
    parts = ([greeting] if greeting else []) + paragraphs + ([closing] if closing else [])
    return "\n\n".join(parts)


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def letter_cache(clock: FakeClock) -> CacheStore:
    """Fresh cache per test, driven by the fake clock."""
    return CacheStore(clock=clock)


@pytest.fixture
def fake_generator() -> MagicMock:
    """LetterGenerator double returning a valid ~200-word letter."""
    generator = MagicMock(spec=LetterGenerator)
    generator.provider = "gemini"
    generator.generate = AsyncMock(return_value=_make_letter())
    return generator


@pytest.fixture
def generator_factory(fake_generator: MagicMock) -> MagicMock:
    return MagicMock(return_value=fake_generator)


@pytest.fixture
def client(letter_cache: CacheStore, generator_factory: MagicMock):
    """FastAPI test client with the cache and LLM swapped for test doubles."""
    from app.main import app
    from app.routers.letter_router import get_generator_factory

    app.dependency_overrides[get_cache_store] = lambda: letter_cache
    app.dependency_overrides[get_generator_factory] = lambda: generator_factory
    yield TestClient(app)
    app.dependency_overrides.clear()
