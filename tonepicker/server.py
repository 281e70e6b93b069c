"""
HTTP surface for the transformation pipeline.

Endpoints:
- POST /api/tone -> rewrite text, ``{transformed, cached}`` or ``{error}``
- GET  /health   -> service status and cache statistics

Usage:
    python -m tonepicker
"""
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from . import __version__
from .config.defaults import Settings, get_default_config
from .errors import ValidationError
from .pipeline import TransformationPipeline, TransformOutcome, build_pipeline
from .ratelimit.limiter import client_identifier

logger = structlog.get_logger(__name__)


class ToneResponse(BaseModel):
    transformed: str
    cached: bool


class ErrorDetail(BaseModel):
    code: str
    message: str
    retryAfterMs: Optional[int] = None


class ErrorResponse(BaseModel):
    error: ErrorDetail


def _render(outcome: TransformOutcome) -> JSONResponse:
    if outcome.ok:
        body = ToneResponse(transformed=outcome.transformed, cached=outcome.cached)
    else:
        body = ErrorResponse(error=ErrorDetail(**outcome.error.to_payload()))
    return JSONResponse(body.model_dump(exclude_none=True), status_code=outcome.status_code)


def create_app(
    settings: Optional[Settings] = None,
    pipeline: Optional[TransformationPipeline] = None,
) -> FastAPI:
    """Build the application around an explicitly owned pipeline."""
    if settings is None:
        settings = get_default_config()
    if pipeline is None:
        pipeline = build_pipeline(settings)

    app = FastAPI(
        title="Tone Picker API",
        version=__version__,
        description="Rewrite text along a formality/voice grid",
    )
    app.state.pipeline = pipeline

    @app.post("/api/tone")
    async def transform_tone(request: Request) -> JSONResponse:
        client_id = client_identifier(request.headers)

        try:
            body = await request.json()
        except ValueError:
            logger.info("Rejected request with unparseable body", client_id=client_id)
            return _render(TransformOutcome.failure(ValidationError()))

        outcome = await run_in_threadpool(pipeline.handle, body, client_id)
        return _render(outcome)

    @app.get("/health")
    async def health_check() -> dict:
        """System status."""
        return {
            "status": "online",
            "promptVersion": pipeline.prompt_version,
            "cache": pipeline.cache.stats(),
            "backend": pipeline.backend.get_stats(),
        }

    return app
