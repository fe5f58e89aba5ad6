"""Letter Validation Tool.

Checks generated cover letters / outreach messages against structural and
length rules before they are returned or cached.  Only an empty letter or
a word count above the configured maximum is a hard error; every other
finding is reported as a warning.
"""

from __future__ import annotations

import logging
import re
from typing import Any, NamedTuple, Type

from langchain_core.tools import BaseTool
from pydantic import BaseModel, Field

from app.models.request_models import RequestType
from app.models.response_models import LetterMetrics, ValidationResult

logger = logging.getLogger(__name__)


class WordBounds(NamedTuple):
    min: int
    max: int


WORD_BOUNDS: dict[RequestType, WordBounds] = {
    RequestType.COVER_LETTER: WordBounds(min=170, max=350),
    RequestType.OUTREACH_MESSAGE: WordBounds(min=120, max=220),
}

# ── Patterns ──────────────────────────────────────────────────────────────────

GREETING_RE = re.compile(r"\bdear\s+\S", re.IGNORECASE)
CLOSING_RE = re.compile(r"\b(sincerely|best regards|kind regards|regards|thank you)\b", re.IGNORECASE)
MARKDOWN_RE = re.compile(r"\*|###|^\s*(?:[-•]\s|#{1,6}\s|\d+\.\s)", re.MULTILINE)
PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
EXTRA_BLANK_LINES_RE = re.compile(r"\n\s*\n(\s*\n)+")
ROLE_REFERENCE_RE = re.compile(r"\b(position|role|opportunity)\b", re.IGNORECASE)

PLACEHOLDER_PATTERNS: list[tuple[str, str]] = [
    (r"\[company\]", "[company]"),
    (r"\[role\]", "[role]"),
    (r"\[name\]", "[name]"),
    (r"\[hiring manager\]", "[hiring manager]"),
    (r"\bxyz\b", "xyz"),
]

INFORMAL_WORDS: list[str] = ["awesome", "cool", "amazing", "super excited"]


# ── Pure helpers ──────────────────────────────────────────────────────────────


def count_words(text: str) -> int:
    return len(text.split())


def compute_letter_metrics(text: str) -> LetterMetrics:
    """Compute structural metrics for a letter."""
    stripped = (text or "").strip()
    if not stripped:
        return LetterMetrics()

    word_count = count_words(stripped)
    paragraphs = [p for p in PARAGRAPH_SPLIT_RE.split(stripped) if p.strip()]
    sentences = [s for s in SENTENCE_SPLIT_RE.split(stripped) if s.strip()]
    avg = round(word_count / len(sentences), 1) if sentences else float(word_count)

    return LetterMetrics(
        word_count=word_count,
        paragraph_count=len(paragraphs),
        sentence_count=len(sentences),
        avg_words_per_sentence=avg,
        has_greeting=bool(GREETING_RE.search(stripped)),
        has_closing=bool(CLOSING_RE.search(stripped)),
        has_markdown=bool(MARKDOWN_RE.search(stripped)),
    )


def validate_letter_output(
    text: str | None,
    request_type: RequestType = RequestType.COVER_LETTER,
) -> ValidationResult:
    """Validate a generated letter and return errors, warnings and metrics."""
    if not text or not text.strip():
        return ValidationResult(is_valid=False, errors=["Letter content is empty"], word_count=0)

    stripped = text.strip()
    metrics = compute_letter_metrics(stripped)
    bounds = WORD_BOUNDS[request_type]
    lower = stripped.lower()
    errors: list[str] = []
    warnings: list[str] = []

    # 1. Word count — exceeding the maximum is the only hard rule
    if metrics.word_count > bounds.max:
        errors.append(f"Letter is too long ({metrics.word_count} words, maximum {bounds.max})")
    elif metrics.word_count < bounds.min:
        warnings.append(f"Letter is short ({metrics.word_count} words, target minimum {bounds.min})")

    # 2. Structure
    if not metrics.has_greeting:
        warnings.append("Letter should include a proper greeting (Dear ...)")
    if not metrics.has_closing:
        warnings.append("Letter should include a professional closing")

    # 3. Formatting
    if metrics.has_markdown:
        warnings.append("Letter contains markdown formatting that should be removed")

    for pattern, label in PLACEHOLDER_PATTERNS:
        if re.search(pattern, lower):
            warnings.append(f"Letter contains placeholder text: {label}")

    # 4. Style
    if metrics.sentence_count < 3:
        warnings.append("Letter may be too simple (less than 3 sentences)")

    for word in INFORMAL_WORDS:
        if re.search(rf"\b{re.escape(word)}\b", lower):
            warnings.append(f'Consider replacing informal word: "{word}"')

    if not ROLE_REFERENCE_RE.search(stripped):
        warnings.append("Letter should reference the specific position or role")

    return ValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        word_count=metrics.word_count,
        metrics=metrics,
    )


def normalize_letter(text: str) -> str:
    """Strip control characters and surrounding whitespace; cap blank-line runs."""
    if not text:
        return ""
    cleaned = CONTROL_CHARS_RE.sub("", text).replace("\r\n", "\n")
    cleaned = EXTRA_BLANK_LINES_RE.sub("\n\n", cleaned)
    return cleaned.strip()


def enforce_word_count(text: str, max_words: int) -> str:
    """Trim *text* to at most *max_words* words, preferring a sentence boundary.

    If a sentence end falls within the last 30% of the kept words the text is
    cut there; otherwise an ellipsis marks the truncation.
    """
    if not text:
        return ""
    words = text.split()
    if len(words) <= max_words:
        return text

    truncated = " ".join(words[:max_words])
    last_end = max(truncated.rfind("."), truncated.rfind("!"), truncated.rfind("?"))
    if last_end > len(truncated) * 0.7:
        return truncated[: last_end + 1]
    return truncated + "..."


# ── LangChain tool ────────────────────────────────────────────────────────────


class LetterValidatorInput(BaseModel):
    """Input schema for the Letter Validation tool."""

    text: str = Field(..., description="The generated letter text")
    request_type: RequestType = Field(
        default=RequestType.COVER_LETTER,
        description="coverLetter | outreachMessage",
    )


class LetterValidatorTool(BaseTool):
    """Validates generated letters against word-count and structure rules."""

    name: str = "letter_validator"
    description: str = (
        "Checks a generated cover letter or outreach message for length, greeting, "
        "closing, markdown and placeholder issues. Returns "
        "{is_valid, errors, warnings, word_count, metrics}."
    )
    args_schema: Type[BaseModel] = LetterValidatorInput

    def check_letter(self, text: str, request_type: RequestType = RequestType.COVER_LETTER) -> ValidationResult:
        result = validate_letter_output(text, request_type)
        if not result.is_valid:
            logger.warning("Letter failed validation: %s", "; ".join(result.errors))
        elif result.warnings:
            logger.info("Letter passed with %d warning(s): %s", len(result.warnings), "; ".join(result.warnings))
        return result

    def _run(self, text: str, request_type: RequestType = RequestType.COVER_LETTER) -> dict[str, Any]:
        """Synchronous validation."""
        return self.check_letter(text, RequestType(request_type)).model_dump()

    async def _arun(self, text: str, request_type: RequestType = RequestType.COVER_LETTER) -> dict[str, Any]:
        """Async wrapper — validation is CPU-only so just delegates."""
        return self.check_letter(text, RequestType(request_type)).model_dump()
