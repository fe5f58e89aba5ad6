"""FastAPI application entry point for the Cover Letter Generation service."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings, setup_logging
from app.errors import INTERNAL_ERROR, VALIDATION_ERROR
from app.models.response_models import ErrorResponse
from app.routers.letter_router import router as letter_router

# Initialise logging early
setup_logging()
logger = logging.getLogger(__name__)


def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request body → 400 VALIDATION_ERROR with field-level details."""
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error="Invalid request data",
            code=VALIDATION_ERROR,
            details=[
                {"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]}
                for e in exc.errors()
            ],
        ).model_dump(exclude_none=True),
    )


def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all → 500 INTERNAL_ERROR without leaking internals."""
    logger.exception("Unhandled exception on %s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="An unexpected error occurred",
            code=INTERNAL_ERROR,
        ).model_dump(exclude_none=True),
    )


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()

    application = FastAPI(
        title="Cover Letter Generation Service",
        description=(
            "Generates tailored cover letters and outreach messages with an LLM, "
            "validates the output, and caches results for a short TTL."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS — allow all origins during development
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(RequestValidationError, validation_error_handler)
    application.add_exception_handler(Exception, internal_error_handler)

    # Include routers
    application.include_router(letter_router)

    @application.on_event("startup")
    async def _startup() -> None:
        model = settings.gemini_model if settings.llm_provider == "gemini" else settings.openai_model
        logger.info(
            "Cover letter service starting — provider=%s model=%s cache_ttl=%ds",
            settings.llm_provider,
            model,
            settings.cache_ttl_seconds,
        )

    return application


app = create_app()

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=True,
    )
