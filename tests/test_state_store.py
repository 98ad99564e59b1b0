"""State store: envelope format, per-read expiry, best-effort failure."""

import json
import os

import pytest

from codenv.lib.state_store import FileStateStore, NullStateStore, validate_key


def test_write_then_read_within_ttl(store, clock) -> None:
    assert store.write("pending_question", {"type": "SPEC_FOLDER"})
    clock.advance(299)
    assert store.exists_unexpired("pending_question", 300)
    assert store.read("pending_question", 300) == {"type": "SPEC_FOLDER"}


def test_expired_state_is_absent_but_file_remains(store, clock) -> None:
    """Expiry is a read-time decision; nothing deletes the file."""
    store.write("pending_question", {"type": "SPEC_FOLDER"})
    clock.advance(301)
    assert not store.exists_unexpired("pending_question", 300)
    assert store.read("pending_question", 300) is None
    assert store.path_for("pending_question").exists()


def test_ttl_is_chosen_per_read(store, clock) -> None:
    store.write("initial_scope", {"files_count": 3})
    clock.advance(1000)
    assert not store.exists_unexpired("initial_scope", 300)
    assert store.exists_unexpired("initial_scope", 7200)


def test_file_is_written_as_envelope(store, clock) -> None:
    store.write("pending_question", {"question": "Which folder?"})
    data = json.loads(store.path_for("pending_question").read_text())
    assert data == {
        "key": "pending_question",
        "written_at": clock.now,
        "payload": {"question": "Which folder?"},
    }


def test_overwrite_replaces_payload_and_timestamp(store, clock) -> None:
    store.write("pending_question", {"question": "old"})
    clock.advance(250)
    store.write("pending_question", {"question": "new"})
    clock.advance(100)
    assert store.read("pending_question", 300) == {"question": "new"}


def test_bare_payload_uses_file_mtime(store, clock) -> None:
    """Files written by other tools have no envelope; age comes from mtime."""
    store.state_dir.mkdir(parents=True)
    path = store.path_for("pending_question")
    path.write_text(json.dumps({"type": "LEGACY"}))
    os.utime(path, (clock.now - 10, clock.now - 10))

    assert store.read("pending_question", 300) == {"type": "LEGACY"}
    assert store.age("pending_question") == pytest.approx(10)

    os.utime(path, (clock.now - 400, clock.now - 400))
    assert store.read("pending_question", 300) is None


def test_corrupt_file_reads_as_absent(store) -> None:
    store.state_dir.mkdir(parents=True)
    store.path_for("pending_question").write_text("{not json")
    assert store.read("pending_question", 300) is None
    assert not store.exists_unexpired("pending_question", 300)

    store.path_for("pending_question").write_bytes(b"\xff\xfe\x00garbage")
    assert store.read("pending_question", 300) is None
    assert not store.exists_unexpired("pending_question", 300)
    assert store.age("pending_question") is None


def test_non_object_json_reads_as_absent(store) -> None:
    store.state_dir.mkdir(parents=True)
    store.path_for("pending_question").write_text("[1, 2]")
    assert store.read("pending_question", 300) is None


def test_clear_is_idempotent(store) -> None:
    store.write("pending_question", {})
    assert store.clear("pending_question")
    assert store.clear("pending_question")
    assert not store.path_for("pending_question").exists()


def test_keys_lists_stored_state(store) -> None:
    store.write("pending_question", {})
    store.write("initial_scope", {})
    assert store.keys() == ["initial_scope", "pending_question"]


def test_unwritable_directory_reports_failure(tmp_path, clock) -> None:
    """A state dir that cannot be created makes writes fail, not raise."""
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    store = FileStateStore(blocker / "state", clock=clock)
    assert store.write("pending_question", {"type": "X"}) is False
    assert store.read("pending_question", 300) is None


@pytest.mark.parametrize("key", ["", "..", "../etc/passwd", "a/b", "with space"])
def test_invalid_keys_rejected(key) -> None:
    with pytest.raises(ValueError):
        validate_key(key)


def test_null_store_never_has_state() -> None:
    store = NullStateStore()
    assert store.write("pending_question", {"type": "X"}) is False
    assert not store.exists_unexpired("pending_question", 300)
    assert store.read("pending_question", 300) is None
    assert store.clear("pending_question")
    assert store.keys() == []
