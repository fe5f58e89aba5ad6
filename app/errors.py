"""Error taxonomy for the cover letter pipeline.

Every error carries a stable machine-readable ``code``:

- VALIDATION_ERROR         — malformed client input (never reaches generation)
- GENERATION_ERROR         — provider call failed or returned nothing
- LETTER_VALIDATION_ERROR  — generated text violates a hard constraint
- INTERNAL_ERROR           — anything unanticipated
"""

from __future__ import annotations

from typing import Any

VALIDATION_ERROR = "VALIDATION_ERROR"
GENERATION_ERROR = "GENERATION_ERROR"
LETTER_VALIDATION_ERROR = "LETTER_VALIDATION_ERROR"
INTERNAL_ERROR = "INTERNAL_ERROR"

# Generation failure reasons (carried in meta["reason"])
EMPTY_RESPONSE = "EMPTY_RESPONSE"
PROVIDER_ERROR = "PROVIDER_ERROR"


class CoverLetterError(Exception):
    """Base class for pipeline errors.

    Attributes:
        code: Machine-readable error code.
        message: Human-readable error message.
        status_code: HTTP status the error maps to.
        meta: Structured diagnostics returned to the client.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = INTERNAL_ERROR,
        meta: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.meta = meta or {}
        super().__init__(message)


class CoverLetterValidationError(CoverLetterError):
    """Generated letter failed a hard validation rule (400)."""

    status_code = 400

    def __init__(self, message: str, meta: dict[str, Any] | None = None) -> None:
        super().__init__(message, code=LETTER_VALIDATION_ERROR, meta=meta)


class CoverLetterGenerationError(CoverLetterError):
    """Provider call failed or produced no text (500)."""

    status_code = 500

    def __init__(
        self,
        message: str,
        reason: str = PROVIDER_ERROR,
        provider: str = "",
    ) -> None:
        super().__init__(
            message,
            code=GENERATION_ERROR,
            meta={"provider": provider, "reason": reason},
        )
        self.reason = reason
        self.provider = provider
