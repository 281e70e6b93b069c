"""End-to-end tests for the transformation pipeline."""

import json

import pytest

from tonepicker.cache.keys import cache_key
from tonepicker.config.defaults import get_default_config
from tonepicker.errors import (
    AuthError,
    InternalError,
    UpstreamRateLimitedError,
    UpstreamUnavailableError,
)
from tonepicker.pipeline import TransformOutcome, TransformRequest, build_pipeline
from tonepicker.prompt.mapper import Coordinate


class TestHappyPath:
    """Reference scenario: miss, then hit."""

    def test_first_call_transforms(self, pipeline, backend, valid_payload):
        outcome = pipeline.handle(valid_payload, "client-a")

        assert outcome.ok
        assert outcome.to_payload() == {"transformed": "Transformed text...", "cached": False}
        assert outcome.status_code == 200
        assert len(backend.calls) == 1

    def test_second_identical_call_is_cached(self, pipeline, backend, valid_payload):
        pipeline.handle(valid_payload, "client-a")
        outcome = pipeline.handle(valid_payload, "client-a")

        assert outcome.to_payload() == {"transformed": "Transformed text...", "cached": True}
        assert len(backend.calls) == 1

    def test_cache_shared_across_clients(self, pipeline, backend, valid_payload):
        pipeline.handle(valid_payload, "client-a")
        assert pipeline.handle(valid_payload, "client-b").cached is True
        assert len(backend.calls) == 1

    def test_different_coordinate_misses(self, pipeline, backend, valid_payload):
        pipeline.handle(valid_payload, "client-a")
        other = dict(valid_payload, coords={"x": 1, "y": 1})

        assert pipeline.handle(other, "client-a").cached is False
        assert len(backend.calls) == 2

    def test_backend_receives_mapped_prompts(self, pipeline, backend, valid_payload):
        pipeline.handle(valid_payload, "client-a")
        _, user = backend.calls[0]
        assert "Hello world" in user
        assert "- Formality: Casual" in user
        assert "- Voice: Friendly" in user

    def test_result_stored_under_request_key(self, pipeline, cache, valid_payload):
        pipeline.handle(valid_payload, "client-a")
        key = cache_key("Hello world", Coordinate(-1, -1), pipeline.prompt_version)
        assert cache.get(key).transformed_text == "Transformed text..."

    def test_integral_float_coordinates_share_cache_entry(self, pipeline, backend, valid_payload):
        pipeline.handle(valid_payload, "client-a")
        as_floats = dict(valid_payload, coords={"x": -1.0, "y": -1.0})

        assert pipeline.handle(as_floats, "client-a").cached is True
        assert len(backend.calls) == 1

    def test_text_with_lone_surrogate_is_transformed(self, pipeline, backend):
        payload = json.loads('{"text": "hi \\ud83d", "coords": {"x": 0, "y": 0}, "promptVersion": "1.0.0"}')

        outcome = pipeline.handle(payload, "client-a")

        assert outcome.ok
        assert len(backend.calls) == 1
        assert pipeline.handle(payload, "client-a").cached is True


class TestClientErrors:
    """Validation and version checks short-circuit before side effects."""

    @pytest.mark.parametrize("payload", [
        {"text": "", "coords": {"x": -1, "y": -1}, "promptVersion": "1.0.0"},
        {"text": "   \n", "coords": {"x": -1, "y": -1}, "promptVersion": "1.0.0"},
        {"text": "Hello world", "coords": {"x": 2, "y": 1}, "promptVersion": "1.0.0"},
        {"text": "Hello world", "coords": {"x": 0.5, "y": 0}, "promptVersion": "1.0.0"},
        {"text": "Hello world", "coords": {"x": 0}, "promptVersion": "1.0.0"},
        {"text": "Hello world", "coords": {"x": 0, "y": 0}},
        {"text": 42, "coords": {"x": 0, "y": 0}, "promptVersion": "1.0.0"},
        "not an object",
        None,
    ])
    def test_validation_errors(self, pipeline, backend, limiter, payload):
        outcome = pipeline.handle(payload, "client-a")

        assert outcome.error.code == "VALIDATION_ERROR"
        assert outcome.status_code == 400
        assert backend.calls == []
        assert limiter.tracked_clients() == 0

    def test_stale_prompt_version(self, pipeline, backend, limiter, valid_payload):
        outcome = pipeline.handle(dict(valid_payload, promptVersion="0.9.0"), "client-a")

        assert outcome.error.code == "VERSION_MISMATCH"
        assert outcome.status_code == 400
        assert backend.calls == []
        assert limiter.tracked_clients() == 0


class TestAdmission:
    """Local rate limiting."""

    def test_sixth_request_in_window_denied(self, pipeline, backend, valid_payload):
        for _ in range(5):
            assert pipeline.handle(valid_payload, "client-a").ok

        outcome = pipeline.handle(valid_payload, "client-a")

        assert outcome.error.code == "RATE_LIMITED"
        assert outcome.status_code == 429
        assert outcome.to_payload()["error"]["retryAfterMs"] > 0
        assert len(backend.calls) == 1

    def test_admitted_again_after_window(self, pipeline, clock, valid_payload):
        for _ in range(5):
            pipeline.handle(valid_payload, "client-a")
        clock.advance(10)

        assert pipeline.handle(valid_payload, "client-a").ok

    def test_cache_hits_still_count_against_budget(self, pipeline, valid_payload):
        pipeline.handle(valid_payload, "client-a")
        for _ in range(4):
            assert pipeline.handle(valid_payload, "client-a").cached
        assert pipeline.handle(valid_payload, "client-a").error.code == "RATE_LIMITED"


class TestBackendFailures:
    """Backend failures surface as typed errors and are never cached."""

    @pytest.mark.parametrize("error,code,status", [
        (AuthError(), "AUTH_ERROR", 401),
        (UpstreamRateLimitedError(retry_after_ms=60000), "RATE_LIMITED", 429),
        (UpstreamUnavailableError(status_code=503), "UPSTREAM_ERROR", 502),
        (InternalError(context={"detail": "Network error"}), "INTERNAL_ERROR", 500),
    ])
    def test_typed_backend_errors(self, pipeline, backend, cache, valid_payload, error, code, status):
        backend.error = error

        outcome = pipeline.handle(valid_payload, "client-a")

        assert outcome.error.code == code
        assert outcome.status_code == status
        assert outcome.transformed is None
        assert len(cache) == 0

    def test_upstream_retry_hint_forwarded(self, pipeline, backend, valid_payload):
        backend.error = UpstreamRateLimitedError(retry_after_ms=60000)
        payload = pipeline.handle(valid_payload, "client-a").to_payload()
        assert payload["error"]["retryAfterMs"] == 60000
        assert "rate limit" in payload["error"]["message"]

    @pytest.mark.parametrize("reply", ["", "   "])
    def test_empty_response(self, pipeline, backend, cache, valid_payload, reply):
        backend.reply = reply

        outcome = pipeline.handle(valid_payload, "client-a")

        assert outcome.error.code == "EMPTY_RESPONSE"
        assert outcome.status_code == 500
        assert len(cache) == 0

    def test_unexpected_exception_collapses_to_internal(self, pipeline, backend, valid_payload):
        backend.error = RuntimeError("secret stack detail")

        outcome = pipeline.handle(valid_payload, "client-a")

        assert outcome.error.code == "INTERNAL_ERROR"
        assert "secret" not in outcome.error.message

    def test_failure_then_success_is_not_served_from_cache(self, pipeline, backend, valid_payload):
        backend.error = UpstreamUnavailableError()
        pipeline.handle(valid_payload, "client-a")
        backend.error = None

        outcome = pipeline.handle(valid_payload, "client-a")

        assert outcome.ok and outcome.cached is False


class TestOutcome:
    """TransformOutcome invariants."""

    def test_success_payload(self):
        outcome = TransformOutcome.success("x", cached=True)
        assert outcome.ok
        assert outcome.error is None

    def test_failure_payload(self):
        outcome = TransformOutcome.failure(AuthError())
        assert not outcome.ok
        assert outcome.transformed is None
        assert set(outcome.to_payload()) == {"error"}

    def test_request_parsing(self, valid_payload):
        request = TransformRequest.from_payload(valid_payload)
        assert request.coord == Coordinate(-1, -1)
        assert request.text == "Hello world"


class TestBuildPipeline:
    """Pipeline construction from settings."""

    def test_build_uses_settings(self, backend):
        pipeline = build_pipeline(get_default_config(), backend=backend)
        assert pipeline.cache.max_entries == 200
        assert pipeline.limiter.max_requests == 5
        assert pipeline.backend is backend

    def test_build_creates_isolated_state(self, backend):
        first = build_pipeline(get_default_config(), backend=backend)
        second = build_pipeline(get_default_config(), backend=backend)
        assert first.cache is not second.cache
        assert first.limiter is not second.limiter

    def test_default_backend_is_mistral(self, monkeypatch):
        monkeypatch.delenv("MISTRAL_API_KEY", raising=False)
        pipeline = build_pipeline(get_default_config())
        assert pipeline.backend.name == "mistral"
