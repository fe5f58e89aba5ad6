"""Letter Generator — single-shot LLM call that writes the letter.

Wraps one LangChain chat model (Gemini by default, OpenAI optionally) with
fixed sampling parameters per request type.  Exactly one attempt is made per
call; retries are not performed here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

from app.config import Settings, get_settings
from app.errors import EMPTY_RESPONSE, PROVIDER_ERROR, CoverLetterGenerationError
from app.models.request_models import RequestType

logger = logging.getLogger(__name__)

PROVIDER_GEMINI = "gemini"
PROVIDER_OPENAI = "openai"


@dataclass(frozen=True)
class SamplingConfig:
    temperature: float
    top_p: float
    top_k: int
    max_output_tokens: int


SAMPLING_CONFIG: dict[RequestType, SamplingConfig] = {
    RequestType.COVER_LETTER: SamplingConfig(temperature=0.5, top_p=0.8, top_k=40, max_output_tokens=512),
    RequestType.OUTREACH_MESSAGE: SamplingConfig(temperature=0.5, top_p=0.8, top_k=40, max_output_tokens=384),
}


def build_chat_model(
    request_type: RequestType,
    settings: Optional[Settings] = None,
) -> tuple[BaseChatModel, str]:
    """Instantiate the configured chat model; return (model, provider tag)."""
    settings = settings or get_settings()
    sampling = SAMPLING_CONFIG[request_type]
    provider = settings.llm_provider.lower()

    if provider == PROVIDER_OPENAI:
        # OpenAI has no top-k sampling
        llm = ChatOpenAI(
            model=settings.openai_model,
            api_key=settings.openai_api_key,
            temperature=sampling.temperature,
            top_p=sampling.top_p,
            max_tokens=sampling.max_output_tokens,
        )
        return llm, PROVIDER_OPENAI

    if provider != PROVIDER_GEMINI:
        raise ValueError(f"Unsupported LLM_PROVIDER '{settings.llm_provider}'")

    llm = ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        google_api_key=settings.google_api_key,
        temperature=sampling.temperature,
        top_p=sampling.top_p,
        top_k=sampling.top_k,
        max_output_tokens=sampling.max_output_tokens,
    )
    return llm, PROVIDER_GEMINI


class LetterGenerator:
    """Stateless adapter producing one letter per call."""

    def __init__(self, llm: BaseChatModel, provider: str) -> None:
        self._llm = llm
        self.provider = provider

    @classmethod
    def from_settings(
        cls,
        request_type: RequestType = RequestType.COVER_LETTER,
        settings: Optional[Settings] = None,
    ) -> "LetterGenerator":
        llm, provider = build_chat_model(request_type, settings)
        return cls(llm, provider)

    # ── Public API ────────────────────────────────────────────────────────

    async def generate(self, prompt: str) -> str:
        """Send *prompt* to the model and return the raw letter text.

        Raises
        ------
        CoverLetterGenerationError
            reason=EMPTY_RESPONSE when the model returns no text,
            reason=PROVIDER_ERROR for any transport/provider failure.
        """
        try:
            raw = await self._llm.ainvoke([HumanMessage(content=prompt)])
        except Exception as exc:
            logger.exception("%s generation call failed", self.provider)
            raise CoverLetterGenerationError(
                f"{self.provider} API error: {exc}",
                reason=PROVIDER_ERROR,
                provider=self.provider,
            ) from exc

        text = self._extract_text(raw)
        if not text.strip():
            logger.error("%s returned an empty response", self.provider)
            raise CoverLetterGenerationError(
                f"{self.provider} response did not contain letter content",
                reason=EMPTY_RESPONSE,
                provider=self.provider,
            )
        return text

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _extract_text(raw: Any) -> str:
        """Pull plain text out of a chat model response."""
        content = getattr(raw, "content", raw)
        if content is None:
            return ""
        if isinstance(content, str):
            return content
        # Gemini may return a list of content parts
        if isinstance(content, list):
            parts = []
            for part in content:
                if isinstance(part, str):
                    parts.append(part)
                elif isinstance(part, dict) and part.get("type") == "text":
                    parts.append(part.get("text", ""))
            return "".join(parts)
        return str(content)
