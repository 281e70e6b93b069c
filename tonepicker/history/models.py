"""
Immutable history values.

A ``HistoryState`` is never modified in place: every operation returns a
new value, so a consumer holding a reference always sees a consistent
``past``/``present``/``future`` triple.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class HistoryState:
    """Linear edit history: ``past`` oldest first, ``future`` nearest first."""

    present: str = ""
    past: tuple[str, ...] = field(default_factory=tuple)
    future: tuple[str, ...] = field(default_factory=tuple)

    @property
    def can_undo(self) -> bool:
        return bool(self.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.future)

    def timeline(self) -> tuple[str, ...]:
        """``past + (present,) + future``."""
        return self.past + (self.present,) + self.future

    def with_edit(self, text: str) -> Optional['HistoryState']:
        """Commit ``text`` as a new state, discarding redo history; None if unchanged."""
        if text == self.present:
            return None
        return HistoryState(present=text, past=self.past + (self.present,), future=())

    def with_present(self, text: str) -> 'HistoryState':
        """Replace ``present`` without touching either stack."""
        return HistoryState(present=text, past=self.past, future=self.future)

    def with_undo(self) -> Optional['HistoryState']:
        """Step back one state; None if there is nothing to undo."""
        if not self.past:
            return None
        return HistoryState(
            present=self.past[-1],
            past=self.past[:-1],
            future=(self.present,) + self.future,
        )

    def with_redo(self) -> Optional['HistoryState']:
        """Step forward one state; None if there is nothing to redo."""
        if not self.future:
            return None
        return HistoryState(
            present=self.future[0],
            past=self.past + (self.present,),
            future=self.future[1:],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "past": list(self.past),
            "present": self.present,
            "future": list(self.future),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'HistoryState':
        """
        Rebuild a history from its stored shape.

        Raises:
            ValueError: if a stack is not a list of strings
        """
        present = data.get("present", "")
        if not isinstance(present, str):
            raise ValueError("History present must be a string")
        return cls(
            present=present,
            past=_text_stack(data.get("past", []), "past"),
            future=_text_stack(data.get("future", []), "future"),
        )


def _text_stack(value: Any, name: str) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(t, str) for t in value):
        raise ValueError(f"History {name} must be a list of strings")
    return tuple(value)
