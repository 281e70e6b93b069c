"""Base class shared by every pipeline error."""

from typing import Any, Optional


class ToneError(Exception):
    """Base class for errors reported by the transformation pipeline."""

    code: str = "INTERNAL_ERROR"
    http_status: int = 500
    default_message: str = "An unexpected error occurred. Please try again."

    def __init__(self, message: Optional[str] = None,
                 context: Optional[dict[str, Any]] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.context = context or {}
        self.recoverable = False
        self.retry_after_ms: Optional[int] = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the ``{code, message, retryAfterMs?}`` wire shape."""
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.retry_after_ms is not None:
            payload["retryAfterMs"] = self.retry_after_ms
        return payload
