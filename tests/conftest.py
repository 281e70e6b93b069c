"""Pytest configuration and shared fixtures."""

from typing import Any, Callable, Optional

import pytest

from tonepicker.backend.base import GenerationConfig, TransformBackend
from tonepicker.cache.response_cache import ResponseCache
from tonepicker.pipeline import TransformationPipeline
from tonepicker.prompt.mapper import PROMPT_VERSION
from tonepicker.ratelimit.limiter import SlidingWindowRateLimiter


class FakeClock:
    """Manually advanced clock in seconds."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeBackend(TransformBackend):
    """Backend that returns a canned reply and records every call."""

    def __init__(self, reply: str = "Transformed text...",
                 error: Optional[Exception] = None,
                 hook: Optional[Callable[[], None]] = None):
        super().__init__("fake", GenerationConfig())
        self.reply = reply
        self.error = error
        self.hook = hook
        self.calls: list[tuple[str, str]] = []

    def transform(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        self._call_count += 1
        if self.hook is not None:
            self.hook()
        if self.error is not None:
            self._error_count += 1
            raise self.error
        return self.reply


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def cache(clock) -> ResponseCache:
    return ResponseCache(max_entries=200, ttl_seconds=600, clock=clock)


@pytest.fixture
def limiter(clock) -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(window_seconds=10, max_requests=5, clock=clock)


@pytest.fixture
def pipeline(backend, cache, limiter) -> TransformationPipeline:
    return TransformationPipeline(backend=backend, cache=cache, limiter=limiter)


@pytest.fixture
def valid_payload() -> dict[str, Any]:
    """Request body from the reference scenario."""
    return {
        "text": "Hello world",
        "coords": {"x": -1, "y": -1},
        "promptVersion": PROMPT_VERSION,
    }
