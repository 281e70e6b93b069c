"""
Client input errors.

These are raised before any side effect happens and are never retried
automatically: the caller has to change the request.
"""

from typing import Optional

from .base import ToneError


class ClientInputError(ToneError):
    """Base class for errors caused by the request itself."""

    http_status = 400


class ValidationError(ClientInputError):
    """Request body does not match the expected shape or bounds."""

    code = "VALIDATION_ERROR"
    default_message = "Invalid request format"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field


class VersionMismatchError(ClientInputError):
    """Caller built its request against a retired prompt template."""

    code = "VERSION_MISMATCH"
    default_message = "Prompt version mismatch. Please refresh the page."

    def __init__(self, message: Optional[str] = None, expected: Optional[str] = None,
                 received: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.expected = expected
        self.received = received
