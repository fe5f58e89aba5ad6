"""Letter router — cover letter / outreach generation endpoints."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.agents.letter_generator import LetterGenerator
from app.agents.letter_pipeline import GeneratorFactory, LetterErr, process_letter_request
from app.errors import INTERNAL_ERROR
from app.models.cache_store import CacheStore, get_cache_store
from app.models.request_models import GenerationRequest
from app.models.response_models import (
    ErrorResponse,
    HealthResponse,
    LetterResponse,
    LogEntry,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["cover-letter"])


def get_generator_factory() -> GeneratorFactory:
    """Dependency returning the LetterGenerator builder (overridden in tests)."""
    return LetterGenerator.from_settings


def error_response(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


# ── Endpoints ─────────────────────────────────────────────────────────────────


@router.post(
    "/generate-cover-letter",
    response_model=LetterResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_cover_letter(
    req: GenerationRequest,
    cache: CacheStore = Depends(get_cache_store),
    generator_factory: GeneratorFactory = Depends(get_generator_factory),
):
    """Generate (or serve from cache) a cover letter or outreach message."""
    logger.info(
        "Cover letter request: developer=%s role=%s company=%s type=%s",
        req.developer_profile.id,
        req.role_info.title,
        req.company_info.name,
        req.request_type.value,
    )
    try:
        outcome = await process_letter_request(
            req,
            cache=cache,
            generator_factory=generator_factory,
        )
    except Exception:
        logger.exception("Cover letter pipeline failed")
        return error_response(
            500,
            ErrorResponse(error="Failed to generate cover letter", code=INTERNAL_ERROR),
        )

    if isinstance(outcome, LetterErr):
        return error_response(
            outcome.status_code,
            ErrorResponse(error=outcome.message, code=outcome.code, meta=outcome.meta),
        )

    return LetterResponse(letter=outcome.letter, provider=outcome.provider, cached=outcome.cached)


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Simple liveness probe."""
    return HealthResponse()


@router.get("/logs", response_model=list[LogEntry])
async def get_logs(limit: int = 20) -> list[LogEntry]:
    """Return the most recent generation events (newest first)."""
    settings = get_settings()
    log_file = Path(settings.log_dir) / "events.jsonl"

    if not log_file.exists():
        return []

    entries: list[LogEntry] = []
    with open(log_file, "r", encoding="utf-8") as f:
        lines = f.readlines()

    for line in reversed(lines[-limit:]):
        try:
            entries.append(LogEntry(**json.loads(line.strip())))
        except ValueError:
            logger.debug("Skipping malformed log line")
            continue

    return entries
