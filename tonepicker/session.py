"""
Editor session: history, UI bookkeeping and persistence wired together.

A session belongs to one user. It forwards transform requests to the
shared pipeline, applies results to its history, and writes a snapshot to
the store after each committed history change.
"""

import threading
from dataclasses import dataclass
from typing import Any, Optional

import structlog

from .config.defaults import Settings
from .errors import ValidationError
from .history.engine import HistoryEngine
from .history.models import HistoryState
from .persistence.snapshot_store import JsonFileSnapshotStore, Snapshot, SnapshotStore
from .pipeline import TransformationPipeline, TransformOutcome, build_pipeline
from .prompt.mapper import PROMPT_VERSION, Coordinate
from .utils.time import wall_clock_ms

logger = structlog.get_logger(__name__)

STATUS_CACHED = "Used cached result"
STATUS_APPLIED = "Transformation applied"
STATUS_RESET = "Reset to original text"
STATUS_CLEARED = "Storage cleared"


@dataclass
class UIState:
    """Presentation bookkeeping derived from pipeline outcomes."""
    selected: Optional[Coordinate] = None
    is_transforming: bool = False
    last_error: Optional[dict[str, Any]] = None
    last_status: Optional[str] = None

    def set_error(self, error: Optional[dict[str, Any]]) -> None:
        self.last_error = error
        if error:
            self.last_status = f"Error: {error['message']}"


class EditorSession:
    """Single-user editing session."""

    def __init__(
        self,
        pipeline: TransformationPipeline,
        store: Optional[SnapshotStore] = None,
        client_id: str = "local",
        prompt_version: str = PROMPT_VERSION,
    ):
        self.pipeline = pipeline
        self.store = store
        self.client_id = client_id
        self.prompt_version = prompt_version
        self.ui = UIState()
        self.history = HistoryEngine(on_commit=self._persist)

        self._generation = 0
        self._request_lock = threading.Lock()

    @property
    def text(self) -> str:
        return self.history.present

    @property
    def generation(self) -> int:
        return self._generation

    def _persist(self, state: HistoryState) -> None:
        if self.store is None or not state.present:
            return
        self.store.save_snapshot(Snapshot(
            history=state,
            selected=self.ui.selected,
            timestamp=wall_clock_ms(),
        ))

    def hydrate(self) -> None:
        """Load the stored snapshot into this session."""
        if self.store is None:
            return
        snapshot = self.store.load_snapshot()
        self.history.hydrate(snapshot.history)
        if snapshot.selected is not None:
            self.ui.selected = snapshot.selected

    def set_text(self, text: str, skip_history: bool = False) -> bool:
        return self.history.set_text(text, skip_history=skip_history)

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    def reset(self) -> None:
        self.ui.selected = None
        self.ui.last_error = None
        self.ui.last_status = STATUS_RESET
        self.history.reset()

    def clear_storage(self) -> None:
        """Drop the stored snapshot and return to the baseline text."""
        if self.store is not None:
            self.store.clear()
        self.ui.selected = None
        self.ui.last_error = None
        self.ui.last_status = STATUS_CLEARED
        self.history.reset()

    def select_cell(self, coord: Optional[Coordinate]) -> None:
        if coord == self.ui.selected:
            return
        self.ui.selected = coord
        self._persist(self.history.state)

    def cancel(self) -> None:
        """Abandon the in-flight request; its result will not be applied."""
        with self._request_lock:
            self._generation += 1
            self.ui.is_transforming = False

    def request_transform(self, coord: Coordinate) -> TransformOutcome:
        """
        Rewrite the current text towards ``coord``.

        A request started later supersedes this one: if another request (or
        ``cancel``) happened while the pipeline was running, the outcome is
        returned but not applied to history.
        """
        text = self.history.present.strip()
        if not text:
            error = ValidationError("Please type some text first!", field="text")
            self.ui.set_error(error.to_payload())
            return TransformOutcome.failure(error)

        with self._request_lock:
            self._generation += 1
            generation = self._generation
            self.ui.selected = coord
            self.ui.is_transforming = True
            self.ui.last_error = None

        outcome = self.pipeline.handle(
            {
                "text": text,
                "coords": coord.to_payload(),
                "promptVersion": self.prompt_version,
            },
            self.client_id,
        )

        self._finish(generation, outcome)
        return outcome

    def _finish(self, generation: int, outcome: TransformOutcome) -> bool:
        with self._request_lock:
            if generation != self._generation:
                logger.info(
                    "Discarding superseded transformation result",
                    client_id=self.client_id,
                    generation=generation,
                    current_generation=self._generation
                )
                return False

            self.ui.is_transforming = False

            if not outcome.ok:
                self.ui.set_error(outcome.error.to_payload())
                return False

            self.history.apply_transform(outcome.transformed, cached=outcome.cached)
            self.ui.last_error = None
            self.ui.last_status = STATUS_CACHED if outcome.cached else STATUS_APPLIED
            return True


def open_session(
    settings: Settings,
    pipeline: Optional[TransformationPipeline] = None,
    client_id: str = "local",
) -> EditorSession:
    """Build a session on the configured snapshot file and restore it."""
    if pipeline is None:
        pipeline = build_pipeline(settings)

    store = JsonFileSnapshotStore(settings.storage.snapshot_path)
    session = EditorSession(pipeline, store=store, client_id=client_id)
    session.hydrate()

    logger.info(
        "Session opened",
        client_id=client_id,
        snapshot_path=settings.storage.snapshot_path,
        restored=bool(session.text)
    )
    return session
