"""Linear undo/redo history over text states."""

from .engine import HistoryEngine
from .models import HistoryState

__all__ = ["HistoryEngine", "HistoryState"]
