"""
History engine for the edited text.

All mutations go through one non-reentrant lock so two callbacks can never
interleave. After every committed mutation the optional ``on_commit`` sink
is called synchronously with the new state; no-op operations do not call
it.
"""

import threading
from typing import Callable, Optional

import structlog

from ..logging.config import get_history_logger, log_history_mutation
from .models import HistoryState

logger = structlog.get_logger(__name__)
history_logger = get_history_logger(__name__)

CommitSink = Callable[[HistoryState], None]


class HistoryEngine:
    """Linear undo/redo log with branch-discard on new edits."""

    def __init__(self, on_commit: Optional[CommitSink] = None):
        self._state = HistoryState()
        self._baseline = ""
        self._has_baseline = False
        self._on_commit = on_commit
        self._lock = threading.Lock()

    @property
    def state(self) -> HistoryState:
        return self._state

    @property
    def present(self) -> str:
        return self._state.present

    @property
    def baseline(self) -> str:
        return self._baseline

    @property
    def can_undo(self) -> bool:
        return self._state.can_undo

    @property
    def can_redo(self) -> bool:
        return self._state.can_redo

    def _commit(self, operation: str, new_state: Optional[HistoryState], **context) -> bool:
        # Caller holds the lock.
        if new_state is None:
            log_history_mutation(
                history_logger, operation, False,
                len(self._state.past), len(self._state.future), context or None
            )
            return False

        self._state = new_state
        log_history_mutation(
            history_logger, operation, True,
            len(new_state.past), len(new_state.future), context or None
        )
        if self._on_commit is not None:
            self._on_commit(new_state)
        return True

    def set_text(self, text: str, skip_history: bool = False) -> bool:
        """
        Change the current text.

        With ``skip_history`` the text replaces ``present`` directly (initial
        load) and becomes the reset baseline if none was captured yet.
        Otherwise a differing text is pushed as a new edit and redo history
        is discarded.

        Returns:
            True if the state changed
        """
        with self._lock:
            if skip_history:
                if not self._has_baseline:
                    self._baseline = text
                    self._has_baseline = True
                if text == self._state.present:
                    return False
                return self._commit("set_text", self._state.with_present(text), skip_history=True)

            return self._commit("set_text", self._state.with_edit(text))

    def apply_transform(self, text: str, cached: bool = False) -> bool:
        """
        Commit a pipeline result as a new edit.

        Same mechanics as ``set_text``; ``cached`` is recorded only in the
        log. An identical result leaves history, including ``future``,
        untouched.
        """
        with self._lock:
            return self._commit("apply_transform", self._state.with_edit(text), cached=cached)

    def undo(self) -> bool:
        with self._lock:
            return self._commit("undo", self._state.with_undo())

    def redo(self) -> bool:
        with self._lock:
            return self._commit("redo", self._state.with_redo())

    def reset(self) -> None:
        """Restore the baseline and drop both stacks. Not undoable."""
        with self._lock:
            self._state = HistoryState(present=self._baseline)
            log_history_mutation(history_logger, "reset", True, 0, 0)
            if self._on_commit is not None:
                self._on_commit(self._state)

    def hydrate(self, state: HistoryState) -> bool:
        """
        Restore a persisted history.

        Only a non-empty ``present`` is restored; it also becomes the reset
        baseline. Hydration does not call the commit sink.
        """
        with self._lock:
            if not state.present:
                return False
            self._state = state
            self._baseline = state.present
            self._has_baseline = True

        logger.info(
            "History hydrated",
            past_depth=len(state.past),
            future_depth=len(state.future)
        )
        return True
