"""Per-client request admission."""

from .limiter import AdmissionDecision, SlidingWindowRateLimiter, client_identifier

__all__ = ["AdmissionDecision", "SlidingWindowRateLimiter", "client_identifier"]
