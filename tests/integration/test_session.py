"""Tests for the editor session wiring history, pipeline and storage."""

from dataclasses import replace

import pytest

from tonepicker.config.defaults import StorageParams, get_default_config
from tonepicker.errors import AuthError
from tonepicker.history.models import HistoryState
from tonepicker.persistence.snapshot_store import InMemorySnapshotStore, Snapshot
from tonepicker.prompt.mapper import Coordinate
from tonepicker.session import (
    STATUS_APPLIED,
    STATUS_CACHED,
    STATUS_CLEARED,
    STATUS_RESET,
    EditorSession,
    open_session,
)

CASUAL_FRIENDLY = Coordinate(-1, -1)
FORMAL_DIRECT = Coordinate(1, 1)


@pytest.fixture
def store():
    return InMemorySnapshotStore()


@pytest.fixture
def session(pipeline, store):
    s = EditorSession(pipeline, store=store, client_id="tester")
    s.set_text("Hello world", skip_history=True)
    return s


class TestRequestTransform:
    """Applying pipeline outcomes to the session."""

    def test_success_applies_to_history(self, session):
        outcome = session.request_transform(CASUAL_FRIENDLY)

        assert outcome.ok
        assert session.text == "Transformed text..."
        assert session.history.state.past == ("Hello world",)
        assert session.ui.last_status == STATUS_APPLIED
        assert session.ui.selected == CASUAL_FRIENDLY
        assert session.ui.is_transforming is False

    def test_cached_result_reports_cached_status(self, session, backend):
        session.request_transform(CASUAL_FRIENDLY)
        session.undo()

        outcome = session.request_transform(CASUAL_FRIENDLY)

        assert outcome.cached is True
        assert session.ui.last_status == STATUS_CACHED
        assert session.text == "Transformed text..."
        assert session.history.state.future == ()
        assert len(backend.calls) == 1

    def test_error_leaves_history_untouched(self, session, backend):
        backend.error = AuthError()

        outcome = session.request_transform(CASUAL_FRIENDLY)

        assert outcome.error.code == "AUTH_ERROR"
        assert session.text == "Hello world"
        assert session.ui.last_error["code"] == "AUTH_ERROR"
        assert session.ui.last_status.startswith("Error: ")
        assert session.ui.is_transforming is False

    def test_success_clears_previous_error(self, session, backend):
        backend.error = AuthError()
        session.request_transform(CASUAL_FRIENDLY)
        backend.error = None

        session.request_transform(CASUAL_FRIENDLY)

        assert session.ui.last_error is None

    def test_empty_text_is_rejected_locally(self, pipeline, backend):
        session = EditorSession(pipeline)

        outcome = session.request_transform(CASUAL_FRIENDLY)

        assert outcome.error.code == "VALIDATION_ERROR"
        assert outcome.error.message == "Please type some text first!"
        assert backend.calls == []
        assert session.ui.last_error["code"] == "VALIDATION_ERROR"

    def test_text_is_stripped_before_sending(self, session, backend):
        session.set_text("  padded  ")
        session.request_transform(CASUAL_FRIENDLY)
        _, user = backend.calls[0]
        assert '"""\npadded\n"""' in user

    def test_identical_result_keeps_redo(self, session, backend):
        session.set_text("second")
        session.undo()
        backend.reply = "Hello world"

        session.request_transform(CASUAL_FRIENDLY)

        assert session.history.can_redo
        assert session.ui.last_status == STATUS_APPLIED


class TestSupersede:
    """Only the most recent request may change history."""

    def test_cancel_during_flight_discards_result(self, session, backend):
        backend.hook = session.cancel

        outcome = session.request_transform(CASUAL_FRIENDLY)

        assert outcome.ok
        assert session.text == "Hello world"
        assert session.ui.is_transforming is False
        assert session.ui.last_status is None

    def test_newer_request_wins(self, session, backend):
        def start_newer_request():
            backend.hook = None
            backend.reply = "newer"
            session.request_transform(FORMAL_DIRECT)
            backend.reply = "older"

        backend.hook = start_newer_request

        outer = session.request_transform(CASUAL_FRIENDLY)

        assert outer.transformed == "older"
        assert session.text == "newer"
        assert session.history.state.past == ("Hello world",)
        assert session.ui.selected == FORMAL_DIRECT

    def test_generation_increases_per_request(self, session):
        before = session.generation
        session.request_transform(CASUAL_FRIENDLY)
        session.cancel()
        assert session.generation == before + 2


class TestPersistence:
    """Snapshots written after committed history changes."""

    def test_transform_is_persisted(self, session, store):
        session.request_transform(CASUAL_FRIENDLY)

        snapshot = store.load_snapshot()
        assert snapshot.history.present == "Transformed text..."
        assert snapshot.history.past == ("Hello world",)
        assert snapshot.selected == CASUAL_FRIENDLY

    def test_empty_present_is_not_persisted(self, pipeline, store):
        session = EditorSession(pipeline, store=store)
        session.set_text("a")
        saves = store.save_count

        session.set_text("")

        assert store.save_count == saves
        assert store.load_snapshot().history.present == "a"

    def test_hydrate_restores_previous_session(self, pipeline, store, session):
        session.request_transform(CASUAL_FRIENDLY)

        restored = EditorSession(pipeline, store=store)
        restored.hydrate()

        assert restored.text == "Transformed text..."
        assert restored.history.can_undo
        assert restored.ui.selected == CASUAL_FRIENDLY
        assert restored.history.baseline == "Transformed text..."

    def test_selection_change_is_persisted(self, session, store):
        saves = store.save_count

        session.select_cell(FORMAL_DIRECT)
        session.select_cell(FORMAL_DIRECT)

        assert store.save_count == saves + 1
        assert store.load_snapshot().selected == FORMAL_DIRECT
        assert store.load_snapshot().history.present == "Hello world"

    def test_selection_without_text_is_not_persisted(self, pipeline, store):
        session = EditorSession(pipeline, store=store)
        session.select_cell(FORMAL_DIRECT)
        assert store.save_count == 0

    def test_hydrate_from_empty_store_is_noop(self, pipeline, store):
        session = EditorSession(pipeline, store=store)
        session.hydrate()
        assert session.text == ""
        assert store.save_count == 0

    def test_hydrate_skips_empty_present(self, pipeline, store):
        store.save_snapshot(Snapshot(history=HistoryState(present="", past=("x",))))
        session = EditorSession(pipeline, store=store)
        session.set_text("kept", skip_history=True)

        session.hydrate()

        assert session.text == "kept"


class TestResetAndClear:
    """Reset and storage clearing."""

    def test_reset_returns_to_baseline(self, session):
        session.request_transform(CASUAL_FRIENDLY)
        session.set_text("edited")

        session.reset()

        assert session.history.state == HistoryState(present="Hello world")
        assert session.ui.selected is None
        assert session.ui.last_status == STATUS_RESET

    def test_reset_persists_baseline(self, session, store):
        session.request_transform(CASUAL_FRIENDLY)
        session.reset()
        assert store.load_snapshot().history == HistoryState(present="Hello world")

    def test_clear_storage_drops_history(self, session, store):
        session.request_transform(CASUAL_FRIENDLY)

        session.clear_storage()

        assert session.history.state == HistoryState(present="Hello world")
        assert session.ui.last_status == STATUS_CLEARED
        assert session.ui.last_error is None
        stored = store.load_snapshot()
        assert stored.history.past == ()
        assert stored.selected is None

    def test_clear_storage_without_baseline_leaves_store_empty(self, pipeline, store):
        session = EditorSession(pipeline, store=store)
        session.set_text("typed")

        session.clear_storage()

        assert session.text == ""
        assert store.load_snapshot().history.present == ""


class TestOpenSession:
    """Sessions built from settings use the configured snapshot file."""

    def test_round_trip_through_snapshot_file(self, tmp_path, pipeline):
        path = tmp_path / "tone-picker.json"
        settings = replace(get_default_config(), storage=StorageParams(snapshot_path=str(path)))

        first = open_session(settings, pipeline=pipeline)
        first.set_text("Hello world", skip_history=True)
        first.request_transform(CASUAL_FRIENDLY)

        second = open_session(settings, pipeline=pipeline)

        assert path.exists()
        assert second.text == "Transformed text..."
        assert second.history.state.past == ("Hello world",)
        assert second.ui.selected == CASUAL_FRIENDLY

    def test_missing_file_starts_empty(self, tmp_path, pipeline):
        settings = replace(
            get_default_config(),
            storage=StorageParams(snapshot_path=str(tmp_path / "none.json")),
        )
        assert open_session(settings, pipeline=pipeline).text == ""

    def test_corrupt_snapshot_file_starts_empty(self, tmp_path, pipeline):
        path = tmp_path / "tone-picker.json"
        path.write_text(
            '{"schemaVersion": "1.0.0", "history": {"past": null, "present": "x"}, "ui": "x"}',
            encoding="utf-8",
        )
        settings = replace(get_default_config(), storage=StorageParams(snapshot_path=str(path)))

        session = open_session(settings, pipeline=pipeline)

        assert session.text == ""
        assert session.ui.selected is None
