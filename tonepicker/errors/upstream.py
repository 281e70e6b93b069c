"""
Throttling, upstream and internal failures.

Throttling errors carry a retry hint the caller may honour. Auth and server
faults are fatal for the current request and are surfaced as-is.
"""

from typing import Optional

from .base import ToneError


class ThrottlingError(ToneError):
    """Request refused because of a rate limit."""

    code = "RATE_LIMITED"
    http_status = 429

    def __init__(self, message: Optional[str] = None, retry_after_ms: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after_ms = retry_after_ms
        self.recoverable = True


class RateLimitedError(ThrottlingError):
    """Local admission controller denied the request."""

    default_message = "Too many requests. Please slow down."


class UpstreamRateLimitedError(ThrottlingError):
    """The language-model backend reported its own rate limiting."""

    default_message = "Mistral API rate limit exceeded. Please try again later."


class AuthError(ToneError):
    """Backend rejected the configured credentials."""

    code = "AUTH_ERROR"
    http_status = 401
    default_message = "API key is invalid or expired. Please check your configuration."


class UpstreamUnavailableError(ToneError):
    """Backend reported a server-side fault (5xx)."""

    code = "UPSTREAM_ERROR"
    http_status = 502
    default_message = "Mistral AI service is temporarily unavailable. Please try again later."

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class EmptyResponseError(ToneError):
    """Backend answered but produced no text."""

    code = "EMPTY_RESPONSE"
    http_status = 500
    default_message = "No transformation was generated. Please try again."


class InternalError(ToneError):
    """Transport failure or anything unexpected; details stay in the logs."""

    code = "INTERNAL_ERROR"
    http_status = 500
