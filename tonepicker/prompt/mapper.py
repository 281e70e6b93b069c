"""
Mapping from tone grid coordinates to prompt text.

The grid is 3x3: ``x`` selects formality and ``y`` selects voice, each in
-1..1. Prompts are a pure function of the text and the coordinate;
``PROMPT_VERSION`` must be bumped whenever the templates change so cached
results and stale clients built against an older template are rejected.
"""

from dataclasses import dataclass
from typing import Any

from ..errors import ValidationError

PROMPT_VERSION = "1.0.0"

COORD_MIN = -1
COORD_MAX = 1

FORMALITY_LEVELS = ("Casual", "Neutral", "Formal")
VOICE_LEVELS = ("Friendly", "Neutral", "Direct")

_FORMALITY_DESCRIPTIONS = {
    "Casual": "Relaxed, informal language",
    "Neutral": "Standard, balanced tone",
    "Formal": "Professional, structured language",
}

_VOICE_DESCRIPTIONS = {
    "Friendly": "Warm, approachable tone",
    "Neutral": "Balanced, objective tone",
    "Direct": "Clear, concise communication",
}

SYSTEM_PROMPT = """You rewrite text **preserving meaning** and factual content while adjusting:
- Formality level: Casual ↔ Neutral ↔ Formal
- Voice: Friendly ↔ Neutral ↔ Direct
Rules:
- Keep language **natural** and **clear**.
- Do **not** add new facts.
- Keep approximate length (±15%).
- Maintain lists/formatting and code fences.
- If input is empty or whitespace, return an empty string."""


def _check_component(name: str, value: Any) -> int:
    # bool is an int subclass but never a valid grid index
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Coordinate {name} must be an integer", field=f"coords.{name}")
    if value < COORD_MIN or value > COORD_MAX:
        raise ValidationError(
            f"Coordinate {name} must be between {COORD_MIN} and {COORD_MAX}",
            field=f"coords.{name}",
        )
    return value


def _integral(value: Any) -> Any:
    # JSON numbers like 1.0 name the same cell as 1
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


@dataclass(frozen=True)
class Coordinate:
    """A cell in the tone grid."""
    x: int
    y: int

    def __post_init__(self) -> None:
        _check_component("x", self.x)
        _check_component("y", self.y)

    @classmethod
    def from_payload(cls, payload: Any) -> "Coordinate":
        """Build a coordinate from a ``{"x": .., "y": ..}`` mapping."""
        if not isinstance(payload, dict):
            raise ValidationError("Coordinates must be an object", field="coords")
        if "x" not in payload or "y" not in payload:
            raise ValidationError("Coordinates require x and y", field="coords")
        return cls(x=_integral(payload["x"]), y=_integral(payload["y"]))

    def to_payload(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class ToneDescription:
    """Semantic labels for a coordinate."""
    formality: str
    voice: str


def describe(coord: Coordinate) -> ToneDescription:
    """Map a coordinate to its formality and voice labels."""
    return ToneDescription(
        formality=FORMALITY_LEVELS[coord.x + 1],
        voice=VOICE_LEVELS[coord.y + 1],
    )


def system_prompt() -> str:
    """System prompt shared by every request of this prompt version."""
    return SYSTEM_PROMPT


def user_prompt(text: str, coord: Coordinate) -> str:
    """Build the user prompt embedding ``text`` verbatim."""
    tone = describe(coord)
    return (
        "Given this text:\n"
        '"""\n'
        f"{text}\n"
        '"""\n'
        "Adjust tone using these controls:\n"
        f"- Formality: {tone.formality}\n"
        f"- Voice: {tone.voice}\n"
        "Return only the rewritten text."
    )


def build_prompts(text: str, coord: Coordinate) -> tuple[str, str]:
    """Return the ``(system_prompt, user_prompt)`` pair for a request."""
    return system_prompt(), user_prompt(text, coord)


def tone_label(coord: Coordinate) -> str:
    """Short label for a grid cell, e.g. ``"Casual + Friendly"``."""
    tone = describe(coord)
    return f"{tone.formality} + {tone.voice}"


def tone_tooltip(coord: Coordinate) -> str:
    """Longer description of a grid cell."""
    tone = describe(coord)
    return f"{_FORMALITY_DESCRIPTIONS[tone.formality]}. {_VOICE_DESCRIPTIONS[tone.voice]}."
