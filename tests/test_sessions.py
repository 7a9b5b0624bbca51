from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from luna.sessions import (
    FileSessionStore,
    MemorySessionStore,
    PendingToolCall,
    SessionError,
    SessionMetadata,
    SessionState,
)
from luna.toolkit import ExecutionPolicy


def _state() -> SessionState:
    return SessionState(
        policy=ExecutionPolicy(),
        pending={},
        metadata=SessionMetadata(),
    )


def test_memory_session_store():
    store = MemorySessionStore()
    state = _state()
    store.insert("test-session", state)
    assert store.contains("test-session")
    retrieved = store.get("test-session")
    assert retrieved is not None
    assert retrieved.policy.allow_edit_file == state.policy.allow_edit_file


def test_memory_store_unknown_and_delete():
    store = MemorySessionStore()
    assert store.get("missing") is None
    assert store.contains("missing") is False
    store.insert("a", _state())
    store.insert("b", _state())
    assert sorted(store.list()) == ["a", "b"]
    store.delete("a")
    assert store.list() == ["b"]
    store.delete("never-there")
    assert store.list() == ["b"]


def test_memory_store_update_replaces():
    store = MemorySessionStore()
    store.insert("s", _state())
    changed = _state()
    changed.policy.allow_run_terminal = True
    store.update("s", changed)
    assert store.get("s").policy.allow_run_terminal is True


def test_memory_store_returns_copies():
    store = MemorySessionStore()
    store.insert("s", _state())
    fetched = store.get("s")
    fetched.policy.allow_edit_file = False
    assert store.get("s").policy.allow_edit_file is True


def test_file_session_store(tmp_path):
    store = FileSessionStore(tmp_path)
    store.insert("test-session", _state())
    assert store.contains("test-session")
    assert store.get("test-session") is not None
    assert (tmp_path / "test-session.jsonl").exists()


def test_session_metadata():
    metadata = SessionMetadata()
    assert metadata.title is None
    assert metadata.created_at <= metadata.last_activity_at


def test_file_store_persists_across_instances(tmp_path):
    state = _state()
    state.pending["c1"] = PendingToolCall(
        name="edit_file", repo_root=Path("/repo"), arguments={"path": "a.rs"}
    )
    state.metadata.title = "work"
    FileSessionStore(tmp_path).insert("s1", state)

    reopened = FileSessionStore(tmp_path)
    assert reopened.contains("s1")
    loaded = reopened.get("s1")
    assert loaded.metadata.title == "work"
    assert loaded.pending["c1"].name == "edit_file"
    assert loaded.pending["c1"].repo_root == Path("/repo")
    assert loaded.pending["c1"].arguments == {"path": "a.rs"}


def test_file_store_creates_base_dir(tmp_path):
    base = tmp_path / "nested" / "sessions"
    FileSessionStore(base)
    assert base.is_dir()


def test_file_store_list_and_delete(tmp_path):
    store = FileSessionStore(tmp_path)
    store.insert("one", _state())
    store.insert("two", _state())
    (tmp_path / "notes.txt").write_text("x")
    assert store.list() == ["one", "two"]
    store.delete("one")
    assert store.list() == ["two"]
    assert store.contains("one") is False
    assert store.get("one") is None


def test_file_store_corrupt_file_raises(tmp_path):
    (tmp_path / "bad.jsonl").write_text("{not json")
    store = FileSessionStore(tmp_path)
    with pytest.raises(SessionError) as info:
        store.get("bad")
    assert info.value.kind == "serialization"
    assert str(info.value).startswith("Serialization error: Failed to deserialize session")


def test_file_store_writes_json_document(tmp_path):
    store = FileSessionStore(tmp_path)
    store.insert("s", _state())
    data = json.loads((tmp_path / "s.jsonl").read_text())
    assert data["policy"] == {
        "allow_edit_file": True,
        "require_confirm_edit_file": False,
        "allow_run_terminal": False,
        "require_confirm_run_terminal": True,
    }
    assert data["pending"] == {}
    assert data["metadata"]["title"] is None
    assert data["metadata"]["created_at"].endswith("Z")


def test_state_round_trip():
    state = SessionState(
        metadata=SessionMetadata(
            created_at=datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc),
            title="t",
        )
    )
    state.pending["x"] = PendingToolCall(name="run_terminal", repo_root=".", arguments=None)
    restored = SessionState.from_dict(state.to_dict())
    assert restored == state


def test_state_parses_nanosecond_timestamps():
    data = _state().to_dict()
    data["metadata"]["created_at"] = "2024-05-06T07:08:09.123456789Z"
    data["metadata"]["last_activity_at"] = "2024-05-06T07:08:09Z"
    restored = SessionState.from_dict(data)
    assert restored.metadata.created_at == datetime(
        2024, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc
    )
    assert restored.metadata.last_activity_at == datetime(
        2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc
    )


def test_state_from_dict_missing_policy():
    data = _state().to_dict()
    del data["policy"]
    with pytest.raises(ValueError):
        SessionState.from_dict(data)


def test_session_error_message():
    err = SessionError("not_found", "abc")
    assert str(err) == "Session not found: abc"
    with pytest.raises(ValueError):
        SessionError("bogus", "x")