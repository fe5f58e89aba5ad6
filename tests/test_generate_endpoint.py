"""API tests for POST /generate-cover-letter, /health and /logs."""

from __future__ import annotations

from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from app.config import Settings
from app.errors import PROVIDER_ERROR, CoverLetterGenerationError
from app.models.request_models import RequestType
from app.models.response_models import LogEntry
from tests.conftest import _make_letter, _make_payload


@pytest.fixture
def tmp_settings(tmp_path, monkeypatch) -> Settings:
    settings = Settings(log_dir=str(tmp_path / "logs"))
    monkeypatch.setattr("app.agents.letter_pipeline.get_settings", lambda: settings)
    monkeypatch.setattr("app.routers.letter_router.get_settings", lambda: settings)
    return settings


class TestGenerateCoverLetter:
    def test_miss_then_hit(self, client, fake_generator, tmp_settings):
        first = client.post("/generate-cover-letter", json=_make_payload())
        second = client.post("/generate-cover-letter", json=_make_payload())

        assert first.status_code == 200
        assert first.json() == {"letter": _make_letter(), "provider": "gemini", "cached": False}
        assert second.status_code == 200
        assert second.json() == {"letter": _make_letter(), "provider": "gemini", "cached": True}
        fake_generator.generate.assert_awaited_once()

    def test_legacy_outreach_type(self, client, generator_factory, fake_generator, tmp_settings):
        fake_generator.generate = AsyncMock(return_value=_make_letter(sentences=12))

        resp = client.post("/generate-cover-letter", json=_make_payload(requestType="outreach"))

        assert resp.status_code == 200
        generator_factory.assert_called_once_with(RequestType.OUTREACH_MESSAGE)

    def test_null_optionals_use_defaults(self, client, tmp_settings):
        payload = _make_payload(tone=None, requestType=None, regenerationCount=None, hiringManager=None)
        assert client.post("/generate-cover-letter", json=payload).status_code == 200

    def test_unknown_fields_ignored(self, client, tmp_settings):
        payload = _make_payload(somethingElse={"nested": True})
        assert client.post("/generate-cover-letter", json=payload).status_code == 200


class TestRequestValidation:
    @pytest.mark.parametrize(
        "payload",
        [
            {"roleInfo": {"title": "x"}, "companyInfo": {"name": "Acme"}},
            _make_payload(companyInfo=None),
            _make_payload(roleInfo={"title": ""}),
            _make_payload(developerProfile={"id": ""}),
            _make_payload(requestType="poem"),
            _make_payload(tone="sarcastic"),
            _make_payload(regenerationCount=-1),
        ],
        ids=["no-profile", "no-company", "empty-title", "empty-id", "bad-type", "bad-tone", "negative-regen"],
    )
    def test_bad_input_is_400(self, client, generator_factory, payload):
        resp = client.post("/generate-cover-letter", json=payload)

        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["error"] == "Invalid request data"
        assert body["details"]
        generator_factory.assert_not_called()

    def test_non_json_body_is_400(self, client):
        resp = client.post(
            "/generate-cover-letter",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_ERROR"


class TestGenerationFailures:
    def test_letter_validation_error(self, client, fake_generator, letter_cache, tmp_settings):
        fake_generator.generate = AsyncMock(return_value=_make_letter(sentences=40))

        resp = client.post("/generate-cover-letter", json=_make_payload())

        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == "LETTER_VALIDATION_ERROR"
        assert body["meta"]["wordCount"] == 406
        assert body["meta"]["errors"]
        assert "warnings" in body["meta"]
        assert len(letter_cache) == 0

    def test_generation_error(self, client, fake_generator, tmp_settings):
        fake_generator.generate = AsyncMock(
            side_effect=CoverLetterGenerationError("gemini API error: boom", reason=PROVIDER_ERROR, provider="gemini")
        )

        resp = client.post("/generate-cover-letter", json=_make_payload())

        assert resp.status_code == 500
        body = resp.json()
        assert body["code"] == "GENERATION_ERROR"
        assert body["meta"] == {"provider": "gemini", "reason": "PROVIDER_ERROR"}

    def test_unexpected_failure_is_internal_error(self, client, generator_factory, tmp_settings):
        generator_factory.side_effect = RuntimeError("no credentials")

        resp = client.post("/generate-cover-letter", json=_make_payload())

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to generate cover letter", "code": "INTERNAL_ERROR"}
        (entry,) = client.get("/logs").json()
        assert entry["status"] == "failed"
        assert entry["code"] == "INTERNAL_ERROR"


class TestHealthAndLogs:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": "1.0.0"}

    def test_logs_empty(self, client, tmp_settings):
        assert client.get("/logs").json() == []

    def test_logs_newest_first(self, client, tmp_settings):
        client.post("/generate-cover-letter", json=_make_payload())
        client.post("/generate-cover-letter", json=_make_payload())

        entries = client.get("/logs", params={"limit": 10}).json()

        assert [e["status"] for e in entries] == ["cached", "generated"]

    def test_logs_skip_malformed_lines(self, client, tmp_settings):
        client.post("/generate-cover-letter", json=_make_payload())
        with open(f"{tmp_settings.log_dir}/events.jsonl", "a", encoding="utf-8") as f:
            f.write("{not json\n")

        entries = client.get("/logs").json()

        assert len(entries) == 1
        assert entries[0]["developer_id"] == "d1"

    def test_log_entry_default_timestamp_is_utc(self):
        stamp = datetime.fromisoformat(LogEntry().timestamp)
        assert stamp.utcoffset() == timedelta(0)
