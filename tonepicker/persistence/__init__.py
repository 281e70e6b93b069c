"""Snapshot persistence for editor sessions."""

from .snapshot_store import (
    SCHEMA_VERSION,
    InMemorySnapshotStore,
    JsonFileSnapshotStore,
    Snapshot,
    SnapshotStore,
)

__all__ = [
    "SCHEMA_VERSION",
    "InMemorySnapshotStore",
    "JsonFileSnapshotStore",
    "Snapshot",
    "SnapshotStore",
]
