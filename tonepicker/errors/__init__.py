"""
Error classification for the tone transformation pipeline.

Every failure the pipeline can report maps to exactly one of these classes,
each carrying a stable wire ``code`` and an HTTP status for HTTP-facing
deployments.
"""

from .base import ToneError
from .client_input import (
    ClientInputError,
    ValidationError,
    VersionMismatchError,
)
from .upstream import (
    ThrottlingError,
    RateLimitedError,
    UpstreamRateLimitedError,
    AuthError,
    UpstreamUnavailableError,
    EmptyResponseError,
    InternalError,
)

__all__ = [
    "ToneError",
    # Client input errors
    "ClientInputError",
    "ValidationError",
    "VersionMismatchError",
    # Throttling
    "ThrottlingError",
    "RateLimitedError",
    "UpstreamRateLimitedError",
    # Upstream and internal failures
    "AuthError",
    "UpstreamUnavailableError",
    "EmptyResponseError",
    "InternalError",
]
