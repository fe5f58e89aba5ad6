"""Response models for the cover letter API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class LetterResponse(BaseModel):
    """Success body returned by POST /generate-cover-letter."""

    letter: str = Field(..., description="The generated letter text")
    provider: str = Field(..., description="Generation provider tag", examples=["gemini", "openai"])
    cached: bool = Field(default=False, description="Whether the letter was served from cache")


class ErrorResponse(BaseModel):
    """Error envelope shared by every failure path."""

    error: str
    code: str = Field(
        ...,
        examples=["VALIDATION_ERROR", "LETTER_VALIDATION_ERROR", "GENERATION_ERROR", "INTERNAL_ERROR"],
    )
    details: Optional[list[dict[str, Any]]] = None
    meta: Optional[dict[str, Any]] = None


class LetterMetrics(BaseModel):
    """Quality metrics computed from a generated letter."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    word_count: int = 0
    paragraph_count: int = 0
    sentence_count: int = 0
    avg_words_per_sentence: float = 0.0
    has_greeting: bool = False
    has_closing: bool = False
    has_markdown: bool = False


class ValidationResult(BaseModel):
    """Outcome of checking a generated letter.

    ``is_valid`` is False only when ``errors`` is non-empty; warnings are advisory.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    word_count: int = 0
    metrics: LetterMetrics = Field(default_factory=LetterMetrics)


class HealthResponse(BaseModel):
    """Health-check response."""

    status: str = "ok"
    version: str = "1.0.0"


class LogEntry(BaseModel):
    """Single event entry for the /logs endpoint."""

    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    cache_key: str = ""
    developer_id: str = ""
    request_type: str = ""
    template_variant: str = ""
    status: str = ""
    code: Optional[str] = None
    cached: bool = False
    provider: str = ""
    word_count: int = 0
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    prompt_length: int = 0
    raw_template_length: int = 0
    latency_s: float = 0.0
