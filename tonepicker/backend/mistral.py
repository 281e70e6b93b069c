"""Mistral chat-completions backend over HTTP."""

import json
import os
import socket
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from ..config.defaults import BackendParams
from ..errors import (
    AuthError,
    InternalError,
    UpstreamRateLimitedError,
    UpstreamUnavailableError,
)
from ..utils.time import seconds_to_ms
from .base import GenerationConfig, TransformBackend


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Convert a ``Retry-After`` header in seconds to milliseconds."""
    if not value:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        return None
    if seconds < 0:
        return None
    return seconds_to_ms(seconds)


def extract_content(body: dict[str, Any]) -> str:
    """Pull the first choice's message text out of a completion body."""
    choices = body.get("choices") or []
    if not choices:
        return ""
    message = choices[0].get("message") or {}
    content = message.get("content")

    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        # Content chunks: [{"type": "text", "text": "..."}]
        return "".join(
            chunk.get("text", "") for chunk in content
            if isinstance(chunk, dict) and chunk.get("type", "text") == "text"
        )
    return str(content)


class MistralBackend(TransformBackend):
    """Calls the Mistral chat-completions endpoint with urllib."""

    def __init__(self, api_key: Optional[str], api_url: str,
                 generation: GenerationConfig, timeout_seconds: float = 30.0):
        super().__init__("mistral", generation)
        self.api_key = api_key
        self.api_url = api_url
        self.timeout_seconds = timeout_seconds

        parsed = urlparse(api_url)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Invalid URL: {api_url}")

    @classmethod
    def from_params(cls, params: BackendParams) -> "MistralBackend":
        """Build a backend, reading the API key from the configured env var."""
        return cls(
            api_key=os.environ.get(params.api_key_env),
            api_url=params.api_url,
            generation=GenerationConfig.from_params(params),
            timeout_seconds=params.timeout_seconds,
        )

    def _build_request(self, system_prompt: str, user_prompt: str) -> Request:
        payload = {
            "model": self.generation.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.generation.temperature,
            "max_tokens": self.generation.max_tokens,
            "top_p": self.generation.top_p,
            "frequency_penalty": self.generation.frequency_penalty,
            "presence_penalty": self.generation.presence_penalty,
        }
        data = json.dumps(payload).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "User-Agent": "tonepicker/0.1",
        }
        return Request(self.api_url, data=data, headers=headers, method="POST")

    def transform(self, system_prompt: str, user_prompt: str) -> str:
        if not self.api_key:
            self._error_count += 1
            raise InternalError(context={"detail": "MISTRAL_API_KEY environment variable is not set"})

        req = self._build_request(system_prompt, user_prompt)
        self._call_count += 1

        try:
            with urlopen(req, timeout=self.timeout_seconds) as response:
                raw = response.read().decode("utf-8")

        except HTTPError as e:
            self._error_count += 1
            self.logger.warning(
                "Backend HTTP error",
                backend=self.name,
                error_code=e.code,
                error_reason=str(e.reason)
            )

            if e.code == 401:
                raise AuthError(context={"status": e.code}) from e
            if e.code == 429:
                retry_after = e.headers.get("retry-after") if e.headers is not None else None
                raise UpstreamRateLimitedError(
                    retry_after_ms=parse_retry_after(retry_after),
                    context={"status": e.code}
                ) from e
            if e.code >= 500:
                raise UpstreamUnavailableError(status_code=e.code, context={"status": e.code}) from e
            raise InternalError(context={"status": e.code, "detail": str(e.reason)}) from e

        except (OSError, URLError, socket.timeout) as e:
            self._error_count += 1
            self.logger.warning(
                "Backend network error",
                backend=self.name,
                error=str(e)
            )
            raise InternalError(context={"detail": f"Network error: {e}"}) from e

        try:
            body = json.loads(raw)
        except json.JSONDecodeError as e:
            self._error_count += 1
            self.logger.error(
                "Backend returned invalid JSON",
                backend=self.name,
                error=str(e)
            )
            raise InternalError(context={"detail": "Invalid JSON from backend"}) from e

        if not isinstance(body, dict):
            self._error_count += 1
            raise InternalError(context={"detail": "Unexpected completion body"})

        return extract_content(body)
