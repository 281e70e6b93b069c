"""
Transformation pipeline.

Turns a ``{text, coords, promptVersion}`` request into a rewritten text:

    Validate → Version check → Admission → Cache lookup → Backend → Cache write

Stages run strictly in order and stop at the first failure. Every call to
``handle`` returns exactly one ``TransformOutcome`` holding either the
result or a typed error; exceptions never escape.
"""

from dataclasses import dataclass
from typing import Any, Optional

import structlog

from .backend.base import TransformBackend
from .backend.mistral import MistralBackend
from .cache.keys import cache_key
from .cache.response_cache import ResponseCache
from .config.defaults import Settings
from .errors import (
    EmptyResponseError,
    InternalError,
    RateLimitedError,
    ToneError,
    ValidationError,
    VersionMismatchError,
)
from .logging.config import get_pipeline_logger, log_stage_decision
from .prompt.mapper import PROMPT_VERSION, Coordinate, build_prompts
from .ratelimit.limiter import SlidingWindowRateLimiter
from .utils.time import elapsed_ms, monotonic_clock

logger = structlog.get_logger(__name__)
pipeline_logger = get_pipeline_logger(__name__)


@dataclass(frozen=True)
class TransformRequest:
    """A validated transformation request."""
    text: str
    coord: Coordinate
    prompt_version: str

    @classmethod
    def from_payload(cls, payload: Any) -> "TransformRequest":
        """
        Validate a raw request body.

        Raises:
            ValidationError: if the body does not match the request contract
        """
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be an object")

        text = payload.get("text")
        if not isinstance(text, str):
            raise ValidationError("Text must be a string", field="text")
        if not text.strip():
            raise ValidationError("Text cannot be empty", field="text")

        coord = Coordinate.from_payload(payload.get("coords"))

        prompt_version = payload.get("promptVersion")
        if not isinstance(prompt_version, str):
            raise ValidationError("promptVersion must be a string", field="promptVersion")

        return cls(text=text, coord=coord, prompt_version=prompt_version)


@dataclass(frozen=True)
class TransformOutcome:
    """Either a transformed text or an error, never both."""
    transformed: Optional[str] = None
    cached: bool = False
    error: Optional[ToneError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status_code(self) -> int:
        return 200 if self.error is None else self.error.http_status

    def to_payload(self) -> dict[str, Any]:
        if self.error is not None:
            return {"error": self.error.to_payload()}
        return {"transformed": self.transformed, "cached": self.cached}

    @classmethod
    def success(cls, transformed: str, cached: bool) -> "TransformOutcome":
        return cls(transformed=transformed, cached=cached)

    @classmethod
    def failure(cls, error: ToneError) -> "TransformOutcome":
        return cls(error=error)


class TransformationPipeline:
    """
    Coordinates validation, admission, caching and the backend call.

    The cache and rate limiter are shared mutable state; construct them once
    per process and inject them here. Fresh instances give isolated tests.
    """

    def __init__(
        self,
        backend: TransformBackend,
        cache: Optional[ResponseCache] = None,
        limiter: Optional[SlidingWindowRateLimiter] = None,
        prompt_version: str = PROMPT_VERSION,
    ) -> None:
        self.backend = backend
        self.cache = cache if cache is not None else ResponseCache()
        self.limiter = limiter if limiter is not None else SlidingWindowRateLimiter()
        self.prompt_version = prompt_version
        self.logger = logger
        self.pipeline_logger = pipeline_logger

    def handle(self, payload: Any, client_id: str) -> TransformOutcome:
        """Run one request through every stage and report the outcome."""
        try:
            return self._run(payload, client_id)

        except ToneError as e:
            self.logger.info(
                "Transformation request rejected",
                client_id=client_id,
                code=e.code,
                error=e.message,
                context=e.context
            )
            return TransformOutcome.failure(e)

        except Exception as e:
            self.logger.error(
                "Unexpected error during transformation",
                client_id=client_id,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True
            )
            return TransformOutcome.failure(InternalError(context={"detail": str(e)}))

    def _run(self, payload: Any, client_id: str) -> TransformOutcome:
        request = TransformRequest.from_payload(payload)
        log_stage_decision(self.pipeline_logger, "validate", True, client_id, "request well formed")

        if request.prompt_version != self.prompt_version:
            log_stage_decision(
                self.pipeline_logger, "version", False, client_id, "prompt version mismatch",
                {"expected": self.prompt_version, "received": request.prompt_version}
            )
            raise VersionMismatchError(expected=self.prompt_version, received=request.prompt_version)

        decision = self.limiter.check(client_id)
        if not decision.admitted:
            log_stage_decision(
                self.pipeline_logger, "admission", False, client_id, "client over request budget",
                {"retry_after_ms": decision.retry_after_ms}
            )
            raise RateLimitedError(retry_after_ms=decision.retry_after_ms)

        key = cache_key(request.text, request.coord, request.prompt_version)
        entry = self.cache.get(key)
        if entry is not None:
            log_stage_decision(self.pipeline_logger, "cache", True, client_id, "cache hit", {"cache_key": key})
            return TransformOutcome.success(entry.transformed_text, cached=True)

        system, user = build_prompts(request.text, request.coord)
        started = monotonic_clock()
        transformed = self.backend.transform(system, user)

        if not transformed or not transformed.strip():
            raise EmptyResponseError(context={"backend": self.backend.name})

        self.cache.put(key, transformed)
        self.logger.info(
            "Transformation completed",
            client_id=client_id,
            backend=self.backend.name,
            coords=request.coord.to_payload(),
            latency_ms=elapsed_ms(started),
            cache_key=key
        )
        return TransformOutcome.success(transformed, cached=False)


def build_pipeline(settings: Settings, backend: Optional[TransformBackend] = None) -> TransformationPipeline:
    """Construct the pipeline and its collaborators from settings."""
    if backend is None:
        backend = MistralBackend.from_params(settings.backend)

    return TransformationPipeline(
        backend=backend,
        cache=ResponseCache(
            max_entries=settings.cache.max_entries,
            ttl_seconds=settings.cache.ttl_seconds,
        ),
        limiter=SlidingWindowRateLimiter(
            window_seconds=settings.ratelimit.window_seconds,
            max_requests=settings.ratelimit.max_requests,
        ),
    )
