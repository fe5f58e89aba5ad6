"""Letter Pipeline — orchestrates cover letter / outreach generation.

Flow:
1. Derive the cache key from the request
2. Cache lookup
   → hit  → return the cached letter (no generation, no validation)
3. Derive profile facts and render the prompt (rich-source or fallback)
4. Letter Generator makes exactly one LLM call
   → setup failure → logged as INTERNAL_ERROR, then re-raised
   → failure → GENERATION_ERROR (500)
5. Letter Validator checks the output
   → hard error → LETTER_VALIDATION_ERROR (400), nothing cached
6. Cache the letter (write failures are logged and ignored)
7. Log every terminal event

The pipeline never raises for expected failures: it returns a ``LetterOk`` or
``LetterErr`` and leaves the HTTP mapping to the router.  Two concurrent
requests with the same key may both miss and both generate; the last write
wins.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional, Union

from app.agents.letter_generator import LetterGenerator
from app.config import get_settings
from app.errors import INTERNAL_ERROR, CoverLetterGenerationError, CoverLetterValidationError
from app.models.cache_store import CacheEntry, CacheStore, derive_cache_key, get_cache_store
from app.models.request_models import GenerationRequest, RequestType
from app.models.response_models import LogEntry, ValidationResult
from app.prompts.cover_letter_prompt import RenderedPrompt, render_prompt
from app.tools.letter_validator import LetterValidatorTool, normalize_letter
from app.tools.profile_facts import build_profile_facts

logger = logging.getLogger(__name__)

GeneratorFactory = Callable[[RequestType], LetterGenerator]


@dataclass(frozen=True)
class LetterOk:
    letter: str
    provider: str
    cached: bool


@dataclass(frozen=True)
class LetterErr:
    code: str
    message: str
    status_code: int
    meta: dict[str, Any] = field(default_factory=dict)


LetterOutcome = Union[LetterOk, LetterErr]


async def process_letter_request(
    request: GenerationRequest,
    *,
    cache: Optional[CacheStore] = None,
    generator_factory: Optional[GeneratorFactory] = None,
    ttl_seconds: Optional[int] = None,
) -> LetterOutcome:
    """End-to-end pipeline: validated request → cached or freshly generated letter.

    Parameters
    ----------
    request           : validated generation request
    cache             : letter cache (defaults to the process-wide store)
    generator_factory : builds a LetterGenerator for a request type
    ttl_seconds       : cache TTL (defaults to settings.cache_ttl_seconds)
    """
    settings = get_settings()
    cache = cache if cache is not None else get_cache_store()
    generator_factory = generator_factory or LetterGenerator.from_settings
    ttl = ttl_seconds if ttl_seconds is not None else settings.cache_ttl_seconds
    started = time.perf_counter()

    # ── 1. Key ────────────────────────────────────────────────────────────
    cache_key = derive_cache_key(request)
    logger.info("[Cache] Checking cache for key: %s", cache_key)

    # ── 2. Cache lookup ───────────────────────────────────────────────────
    hit = _cache_get(cache, cache_key)
    if hit is not None:
        logger.info("[Cache] Cache HIT for key: %s", cache_key)
        outcome = LetterOk(letter=hit.letter, provider=hit.provider, cached=True)
        _log_event(request, cache_key, outcome, started=started)
        return outcome

    logger.info("[Cache] Cache MISS for key: %s. Proceeding with generation.", cache_key)

    # ── 3. Prompt ─────────────────────────────────────────────────────────
    facts = build_profile_facts(
        request.developer_profile,
        request.role_info,
        request.achievements,
    )
    rendered = render_prompt(request, facts)
    logger.debug("Rendered %s prompt (%d chars)", rendered.variant.value, len(rendered.prompt))

    # ── 4. Generation ─────────────────────────────────────────────────────
    try:
        generator = generator_factory(request.request_type)
    except Exception as exc:
        logger.exception("Could not build a generator for %s", request.request_type.value)
        failure = LetterErr(
            code=INTERNAL_ERROR,
            message=f"Generator setup failed: {exc}",
            status_code=500,
        )
        _log_event(request, cache_key, failure, rendered=rendered, started=started)
        raise

    try:
        raw_text = await generator.generate(rendered.prompt)
    except CoverLetterGenerationError as exc:
        outcome = LetterErr(
            code=exc.code,
            message=exc.message,
            status_code=exc.status_code,
            meta=exc.meta,
        )
        _log_event(request, cache_key, outcome, rendered=rendered, started=started)
        return outcome

    # ── 5. Validation ─────────────────────────────────────────────────────
    letter = normalize_letter(raw_text)
    validator = LetterValidatorTool()
    validation = ValidationResult.model_validate(await validator._arun(letter, request.request_type))
    if not validation.is_valid:
        error = CoverLetterValidationError(
            f"Generated letter failed validation: {', '.join(validation.errors)}",
            meta={
                "errors": validation.errors,
                "warnings": validation.warnings,
                "wordCount": validation.word_count,
            },
        )
        outcome = LetterErr(
            code=error.code,
            message=error.message,
            status_code=error.status_code,
            meta=error.meta,
        )
        _log_event(request, cache_key, outcome, rendered=rendered, validation=validation, started=started)
        return outcome

    # ── 6. Cache write ────────────────────────────────────────────────────
    entry = CacheEntry(letter=letter, provider=generator.provider)
    _cache_set(cache, cache_key, entry, ttl)

    outcome = LetterOk(letter=letter, provider=generator.provider, cached=False)
    _log_event(request, cache_key, outcome, rendered=rendered, validation=validation, started=started)
    return outcome


# ── Cache helpers ─────────────────────────────────────────────────────────────


def _cache_get(cache: CacheStore, key: str) -> Optional[CacheEntry]:
    """Read-through that downgrades any store failure to a miss."""
    try:
        value = cache.get(key)
    except Exception as exc:
        logger.warning("[Cache] Failed to read key %s, treating as miss: %s", key, exc)
        return None
    if value is None:
        return None
    if isinstance(value, CacheEntry):
        return value
    try:
        return CacheEntry.model_validate(value)
    except ValueError:
        logger.warning("[Cache] Ignoring malformed entry under key %s", key)
        return None


def _cache_set(cache: CacheStore, key: str, entry: CacheEntry, ttl: int) -> None:
    """Write that never fails the request."""
    try:
        cache.set(key, entry, ttl)
        logger.info("[Cache] Successfully cached result for key: %s", key)
    except Exception:
        logger.exception("[Cache] Failed to cache result for key: %s", key)


# ── Event log ─────────────────────────────────────────────────────────────────


def _log_event(
    request: GenerationRequest,
    cache_key: str,
    outcome: LetterOutcome,
    *,
    started: float,
    rendered: Optional[RenderedPrompt] = None,
    validation: Optional[ValidationResult] = None,
) -> None:
    """Append a JSON line describing the outcome under logs/."""
    settings = get_settings()

    if isinstance(outcome, LetterOk):
        status = "cached" if outcome.cached else "generated"
        code = None
        provider = outcome.provider
    else:
        status = "failed"
        code = outcome.code
        provider = str(outcome.meta.get("provider", ""))

    entry = LogEntry(
        timestamp=datetime.now(timezone.utc).isoformat(),
        cache_key=cache_key,
        developer_id=request.developer_profile.id,
        request_type=request.request_type.value,
        template_variant=rendered.variant.value if rendered else "",
        status=status,
        code=code,
        cached=isinstance(outcome, LetterOk) and outcome.cached,
        provider=provider,
        word_count=validation.word_count if validation else 0,
        warnings=validation.warnings if validation else [],
        errors=validation.errors if validation else [],
        prompt_length=len(rendered.prompt) if rendered else 0,
        raw_template_length=len(rendered.raw_template) if rendered else 0,
        latency_s=round(time.perf_counter() - started, 3),
    )

    try:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(exist_ok=True)
        with open(log_dir / "events.jsonl", "a", encoding="utf-8") as f:
            f.write(json.dumps(entry.model_dump(), ensure_ascii=False) + "\n")
    except OSError as exc:
        logger.warning("Could not write event log: %s", exc)
        return

    logger.info("Event logged: key=%s status=%s code=%s", cache_key, status, code)
