"""Sliding-window rate limiting keyed by an opaque client identifier."""

import threading
from collections import deque
from dataclasses import dataclass
from typing import Mapping, Optional

import structlog

from ..utils.time import Clock, monotonic_clock, seconds_to_ms

logger = structlog.get_logger(__name__)

UNKNOWN_CLIENT = "unknown"


@dataclass(frozen=True)
class AdmissionDecision:
    """Outcome of an admission check."""
    admitted: bool
    retry_after_ms: Optional[int] = None


class SlidingWindowRateLimiter:
    """
    Admit at most ``max_requests`` per client in any ``window_seconds`` span.

    Timestamps older than the window are pruned lazily on every check, and
    clients with no timestamps left are dropped at most once per window.
    Denied requests do not consume a slot.
    """

    def __init__(self, window_seconds: float = 10.0, max_requests: int = 5,
                 clock: Clock = monotonic_clock):
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")

        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._clock = clock
        self._requests: dict[str, deque[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def _prune(self, timestamps: deque, now: float) -> None:
        cutoff = now - self.window_seconds
        while timestamps and timestamps[0] <= cutoff:
            timestamps.popleft()

    def _sweep(self, now: float) -> int:
        # Caller holds the lock.
        stale = []
        for client_id, timestamps in self._requests.items():
            self._prune(timestamps, now)
            if not timestamps:
                stale.append(client_id)
        for client_id in stale:
            del self._requests[client_id]
        self._last_sweep = now
        return len(stale)

    def check(self, client_id: str) -> AdmissionDecision:
        """Decide whether ``client_id`` may issue a request now."""
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.window_seconds:
                removed = self._sweep(now)
                if removed:
                    logger.debug("Removed idle clients", removed=removed,
                                 tracked=len(self._requests))

            timestamps = self._requests.setdefault(client_id, deque())
            self._prune(timestamps, now)

            if len(timestamps) < self.max_requests:
                timestamps.append(now)
                return AdmissionDecision(admitted=True)

            retry_after = self.window_seconds - (now - timestamps[0])
            retry_after_ms = max(seconds_to_ms(retry_after), 1)

        logger.info(
            "Client rate limited",
            client_id=client_id,
            retry_after_ms=retry_after_ms,
            window_seconds=self.window_seconds,
            max_requests=self.max_requests
        )
        return AdmissionDecision(admitted=False, retry_after_ms=retry_after_ms)

    def cleanup_expired(self) -> int:
        """Remove clients whose timestamps have all aged out; returns the count removed."""
        with self._lock:
            return self._sweep(self._clock())

    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._requests)

    def clear(self) -> None:
        with self._lock:
            self._requests.clear()


def client_identifier(headers: Mapping[str, str]) -> str:
    """
    Derive a client id from proxy headers.

    Checks ``x-forwarded-for`` (first hop), ``x-real-ip`` and
    ``cf-connecting-ip`` in that order. Header lookup is case-insensitive.
    """
    lowered = {k.lower(): v for k, v in headers.items()}

    forwarded_for = lowered.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    for header in ("x-real-ip", "cf-connecting-ip"):
        value = lowered.get(header)
        if value:
            return value.strip()

    return UNKNOWN_CLIENT
