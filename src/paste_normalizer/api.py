# -*- coding: utf-8 -*-
"""
FastAPI API for the normalization service.
"""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from . import __version__
from .config import settings
from .errors import NormalizerError, ParserUnavailableError
from .logging_config import setup_logging
from .middleware import RequestIDMiddleware
from .models import (
    CheckResultResponse,
    HealthResponse,
    ModeInfo,
    ModesResponse,
    NormalizeRequest,
    NormalizeResponse,
    ValidateRequest,
    ValidationResponse,
)
from .modes import MODE_ALIASES, MODE_DEFAULTS, TRANSFORM_ORDER
from .pipeline import normalization_pipeline
from .tree import parser_available
from .validator import validate

# Setup structured logging
setup_logging()
logger = logging.getLogger(__name__)


# noinspection PyUnusedLocal
@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application lifecycle management."""
    logger.info("Starting Paste Normalizer service", extra={"version": __version__})
    if not parser_available():
        logger.error("beautifulsoup4 is not installed, every request will fall back")

    yield

    logger.info("Shutting down Paste Normalizer service")


app = FastAPI(
    title="Paste Normalizer Service",
    description="Normalizes pasted rich-text markup into clean, mode-specific HTML",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.DOCS_ENABLED else None,
    redoc_url="/redoc" if settings.DOCS_ENABLED else None,
    openapi_url="/openapi.json" if settings.DOCS_ENABLED else None,
)

# Middleware stack (order matters: last added = first executed)
app.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MIN_SIZE)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Service health endpoint."""
    return HealthResponse(
        status="healthy" if parser_available() else "degraded",
        version=__version__,
        parser_ready=parser_available(),
        default_mode=settings.DEFAULT_MODE,
    )


@app.get("/modes", response_model=ModesResponse)
async def list_modes() -> ModesResponse:
    """List mode profiles and the transforms each enables by default."""
    modes = [
        ModeInfo(
            name=name,
            transforms=[t.value for t in TRANSFORM_ORDER if t in enabled],
            aliases=sorted(alias for alias, target in MODE_ALIASES.items() if target == name),
        )
        for name, enabled in MODE_DEFAULTS.items()
    ]
    return ModesResponse(
        default_mode=settings.DEFAULT_MODE,
        modes=modes,
        transforms=[t.value for t in TRANSFORM_ORDER],
    )


@app.post("/normalize", response_model=NormalizeResponse)
def normalize(request: NormalizeRequest) -> NormalizeResponse:
    """
    Normalize pasted markup.

    - **html**: Pasted markup or plain text
    - **mode**: plain, editorial, commerce or custom (legacy names accepted)
    - **overrides**: Transform name to on/off, applied over the mode defaults
    - **plain_text**: Wrap each input line in a paragraph instead of parsing markup
    """
    logger.info(
        "Normalize request received",
        extra={"mode": request.mode, "input_length": len(request.html)},
    )

    start = time.perf_counter()
    try:
        result = normalization_pipeline.process(
            request.html, request.mode, request.overrides, request.plain_text
        )
    except NormalizerError as e:
        raise HTTPException(status_code=422, detail=str(e))
    duration_ms = int((time.perf_counter() - start) * 1000)

    logger.info(
        "Normalize completed",
        extra={
            "mode": result.mode,
            "fallback": result.fallback,
            "duration_ms": duration_ms,
        },
    )

    return NormalizeResponse(
        html=result.html,
        mode=result.mode,
        success=not result.fallback,
        fallback=result.fallback,
        steps_applied=result.steps_applied,
        content_length=len(result.html),
        duration_ms=duration_ms,
    )


@app.post("/validate", response_model=ValidationResponse)
def validate_output(request: ValidateRequest) -> ValidationResponse:
    """Check normalized markup against the features of its mode."""
    try:
        report = validate(request.html, request.mode, request.overrides)
    except ParserUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except NormalizerError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return ValidationResponse(
        mode=report.mode,
        ok=report.ok,
        total=report.total,
        passed=report.passed,
        failed=report.failed,
        success_rate=report.success_rate,
        results=[
            CheckResultResponse(
                feature=r.feature,
                passed=r.passed,
                message=r.message,
                details=r.details,
            )
            for r in report.results
        ],
    )
