"""Language-model backends."""

from .base import GenerationConfig, TransformBackend
from .mistral import MistralBackend

__all__ = ["GenerationConfig", "TransformBackend", "MistralBackend"]
