"""Coordinate to prompt mapping."""

from .mapper import (
    PROMPT_VERSION,
    Coordinate,
    ToneDescription,
    build_prompts,
    describe,
    system_prompt,
    tone_label,
    tone_tooltip,
    user_prompt,
)

__all__ = [
    "PROMPT_VERSION",
    "Coordinate",
    "ToneDescription",
    "build_prompts",
    "describe",
    "system_prompt",
    "tone_label",
    "tone_tooltip",
    "user_prompt",
]
