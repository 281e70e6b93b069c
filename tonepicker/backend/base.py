"""Base classes for language-model backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import structlog

from ..config.defaults import BackendParams


@dataclass(frozen=True)
class GenerationConfig:
    """Fixed generation settings sent with every backend call."""
    model: str = "mistral-small-latest"
    temperature: float = 0.4
    max_tokens: int = 1200
    top_p: float = 1.0
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0

    @classmethod
    def from_params(cls, params: BackendParams) -> "GenerationConfig":
        return cls(
            model=params.model,
            temperature=params.temperature,
            max_tokens=params.max_tokens,
            top_p=params.top_p,
            frequency_penalty=params.frequency_penalty,
            presence_penalty=params.presence_penalty,
        )


class TransformBackend(ABC):
    """
    A backend that rewrites text given a system and a user prompt.

    Implementations return the generated text (possibly empty) and raise
    ``AuthError``, ``UpstreamRateLimitedError``, ``UpstreamUnavailableError``
    or ``InternalError`` for failures.
    """

    def __init__(self, name: str, generation: GenerationConfig):
        self.name = name
        self.generation = generation
        self.logger = structlog.get_logger(f"tonepicker.backend.{name}")
        self._call_count = 0
        self._error_count = 0

    @abstractmethod
    def transform(self, system_prompt: str, user_prompt: str) -> str:
        """
        Run one completion.

        Args:
            system_prompt: Instructions for the model
            user_prompt: Prompt embedding the text to rewrite

        Returns:
            The generated text, or an empty string if the model produced none
        """

    def get_stats(self) -> dict[str, Any]:
        """Get backend call statistics."""
        return {
            "name": self.name,
            "call_count": self._call_count,
            "error_count": self._error_count,
        }

    def reset_stats(self) -> None:
        self._call_count = 0
        self._error_count = 0
