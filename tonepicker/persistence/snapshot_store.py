"""Snapshot persistence for history and UI selection."""

import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import structlog

from ..errors import ValidationError
from ..history.models import HistoryState
from ..prompt.mapper import Coordinate
from ..utils.time import format_epoch_ms, wall_clock_ms

logger = structlog.get_logger(__name__)

# Bump when the stored shape changes; mismatching snapshots are discarded.
SCHEMA_VERSION = "1.0.0"


@dataclass(frozen=True)
class Snapshot:
    """Persisted session: history, selected cell and save time."""
    history: HistoryState = field(default_factory=HistoryState)
    selected: Optional[Coordinate] = None
    timestamp: int = 0
    schema_version: str = SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "schemaVersion": self.schema_version,
            "history": self.history.to_dict(),
            "ui": {
                "selected": self.selected.to_payload() if self.selected else None,
            },
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Snapshot":
        """
        Rebuild a snapshot from its stored shape.

        Raises:
            ValueError: if the data is not a snapshot
        """
        if not isinstance(data, dict):
            raise ValueError("Snapshot must be an object")

        history_data = data.get("history")
        if not isinstance(history_data, dict):
            raise ValueError("Snapshot history must be an object")

        selected = None
        ui_data = data.get("ui") or {}
        if not isinstance(ui_data, dict):
            raise ValueError("Snapshot ui must be an object")
        selected_data = ui_data.get("selected")
        if selected_data is not None:
            try:
                selected = Coordinate.from_payload(selected_data)
            except ValidationError as e:
                raise ValueError(f"Invalid selected cell: {e.message}") from e

        timestamp = data.get("timestamp") or 0
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ValueError("Snapshot timestamp must be a number")
        try:
            timestamp = int(timestamp)
        except OverflowError as e:
            raise ValueError("Snapshot timestamp out of range") from e

        return cls(
            history=HistoryState.from_dict(history_data),
            selected=selected,
            timestamp=timestamp,
            schema_version=str(data.get("schemaVersion")),
        )


def default_snapshot() -> Snapshot:
    return Snapshot(timestamp=wall_clock_ms())


class SnapshotStore(ABC):
    """Storage collaborator for session snapshots."""

    @abstractmethod
    def load_snapshot(self) -> Snapshot:
        """Return the stored snapshot, or an empty default."""

    @abstractmethod
    def save_snapshot(self, snapshot: Snapshot) -> None:
        """Replace the stored snapshot as a whole."""

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored snapshot."""


class InMemorySnapshotStore(SnapshotStore):
    """Keeps the serialized snapshot in memory."""

    def __init__(self) -> None:
        self._data: Optional[dict[str, Any]] = None
        self.save_count = 0

    def load_snapshot(self) -> Snapshot:
        if self._data is None:
            return default_snapshot()
        if self._data.get("schemaVersion") != SCHEMA_VERSION:
            logger.warning("Snapshot schema version mismatch, clearing data")
            self.clear()
            return default_snapshot()
        return Snapshot.from_dict(self._data)

    def save_snapshot(self, snapshot: Snapshot) -> None:
        self._data = snapshot.to_dict()
        self.save_count += 1

    def clear(self) -> None:
        self._data = None


class JsonFileSnapshotStore(SnapshotStore):
    """
    Stores the snapshot as one JSON document.

    Writes go to a temporary file in the same directory which is then
    renamed over the target, so a reader never sees a partial snapshot.
    """

    def __init__(self, path: str, create_dirs: bool = True):
        self.path = Path(path)
        self._lock = threading.Lock()

        if create_dirs:
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def load_snapshot(self) -> Snapshot:
        with self._lock:
            if not self.path.exists():
                return default_snapshot()

            try:
                with open(self.path, encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning(
                    "Failed to load snapshot",
                    path=str(self.path),
                    error=str(e)
                )
                return default_snapshot()

            if not isinstance(data, dict) or data.get("schemaVersion") != SCHEMA_VERSION:
                logger.warning(
                    "Snapshot schema version mismatch, clearing data",
                    path=str(self.path),
                    stored_version=data.get("schemaVersion") if isinstance(data, dict) else None,
                    expected_version=SCHEMA_VERSION
                )
                self._remove()
                return default_snapshot()

            try:
                return Snapshot.from_dict(data)
            except ValueError as e:
                logger.warning(
                    "Stored snapshot is malformed",
                    path=str(self.path),
                    error=str(e)
                )
                return default_snapshot()

    def save_snapshot(self, snapshot: Snapshot) -> None:
        data = json.dumps(snapshot.to_dict(), ensure_ascii=False)

        with self._lock:
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(data)
                os.replace(tmp_path, self.path)
            except OSError:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise

        logger.debug(
            "Snapshot saved",
            path=str(self.path),
            saved_at=format_epoch_ms(snapshot.timestamp)
        )

    def clear(self) -> None:
        with self._lock:
            self._remove()

    def _remove(self) -> None:
        self.path.unlink(missing_ok=True)
