"""State container and persistence ports."""

import tempfile
from pathlib import Path

from steadfast.store import JsonFilePersistence, MemoryPersistence, PersistenceError, StateContainer

from tests.helpers import ago


class FlakyPersistence(MemoryPersistence):
    def __init__(self):
        super().__init__()
        self.fail = True

    def save(self, state):
        if self.fail:
            raise OSError("disk full")
        super().save(state)


def test_commit_only_when_dirty():
    port = MemoryPersistence()
    store = StateContainer(port)
    assert store.commit() is False

    store.record_check_in({"date": ago(0), "mood": 4})
    assert store.dirty
    assert port.saves == 0

    assert store.commit() is True
    assert not store.dirty
    assert port.saves == 1
    assert store.commit() is False
    assert port.saves == 1


def test_failed_commit_stays_dirty_and_retries():
    port = FlakyPersistence()
    store = StateContainer(port)
    store.record_craving({"date": ago(0), "intensity": 6, "trigger": "stress", "overcame": True})
    try:
        store.commit()
        raise AssertionError("Should have raised PersistenceError")
    except PersistenceError:
        pass
    assert store.dirty

    port.fail = False
    assert store.commit() is True
    assert not store.dirty
    assert len(port.state["cravings"]) == 1


def test_malformed_record_rejected():
    store = StateContainer(MemoryPersistence())
    try:
        store.record_meeting({"type": "AA"})
        raise AssertionError("Should have raised ValueError")
    except ValueError:
        pass
    assert not store.dirty
    assert store.events.meetings == ()


def test_recording_never_mutates_previous_views():
    store = StateContainer(MemoryPersistence())
    before = store.events
    store.record_meditation({"date": ago(0), "duration": 15})
    assert before.meditations == ()
    assert len(store.events.meditations) == 1


def test_json_file_round_trip():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "state" / "events.json"
        store = StateContainer(JsonFilePersistence(path))
        assert store.load().is_empty

        store.record_check_in({"date": ago(1), "mood": 3, "halt": {"hungry": 2, "angry": 2, "lonely": 6, "tired": 4}})
        store.record_meeting({"date": ago(1), "type": "NA", "location": "Online"})
        store.commit()
        assert path.exists()

        reloaded = StateContainer(JsonFilePersistence(path))
        assert reloaded.load() == store.events


def test_unreadable_state_raises():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "events.json"
        path.write_text("{broken")
        try:
            StateContainer(JsonFilePersistence(path)).load()
            raise AssertionError("Should have raised PersistenceError")
        except PersistenceError:
            pass
