"""Session state and pluggable session stores (in memory and on disk)."""

from __future__ import annotations

import copy
import json
import os
import re
import threading
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from luna.toolkit import ExecutionPolicy

__all__ = [
    "PendingToolCall",
    "SessionMetadata",
    "SessionState",
    "SessionError",
    "SessionStore",
    "MemorySessionStore",
    "FileSessionStore",
]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

_ERROR_PREFIXES = {
    "not_found": "Session not found",
    "io": "IO error",
    "serialization": "Serialization error",
    "storage": "Storage error",
}


class SessionError(Exception):
    """A session store failure.

    ``kind`` is one of ``not_found``, ``io``, ``serialization`` or ``storage``.
    """

    def __init__(self, kind: str, detail: object) -> None:
        if kind not in _ERROR_PREFIXES:
            raise ValueError(f"unknown session error kind: {kind!r}")
        self.kind = kind
        self.detail = str(detail)
        super().__init__(f"{_ERROR_PREFIXES[kind]}: {self.detail}")


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------

_TIMESTAMP_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|z|[+-]\d{2}:\d{2})?$"
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _format_timestamp(moment: datetime) -> str:
    moment = moment.astimezone(timezone.utc)
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += f".{moment.microsecond:06d}"
    return text + "Z"


def _parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, str):
        raise ValueError(f"expected an RFC 3339 timestamp, got {value!r}")
    match = _TIMESTAMP_RE.match(value.strip())
    if match is None:
        raise ValueError(f"invalid timestamp: {value!r}")
    base, fraction, offset = match.groups()
    micros = (fraction or "")[:6].ljust(6, "0")
    if offset is None or offset in ("Z", "z"):
        offset = "+00:00"
    parsed = datetime.fromisoformat(f"{base.replace(' ', 'T')}.{micros}{offset}")
    return parsed.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Session types
# ---------------------------------------------------------------------------


def _require(data: Mapping[str, Any], key: str) -> Any:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    return data[key]


def _require_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{what} must be an object, got {value!r}")
    return value


@dataclass
class PendingToolCall:
    """A tool call waiting for confirmation."""

    name: str
    repo_root: Path
    arguments: Any = None

    def __post_init__(self) -> None:
        self.repo_root = Path(self.repo_root)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "repo_root": os.fspath(self.repo_root),
            "arguments": self.arguments,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PendingToolCall:
        data = _require_mapping(data, "pending tool call")
        name = _require(data, "name")
        repo_root = _require(data, "repo_root")
        if not isinstance(name, str):
            raise ValueError(f"field `name` must be a string, got {name!r}")
        if not isinstance(repo_root, str):
            raise ValueError(f"field `repo_root` must be a string, got {repo_root!r}")
        return cls(name=name, repo_root=Path(repo_root), arguments=_require(data, "arguments"))


@dataclass
class SessionMetadata:
    """Timestamps and an optional title of a session."""

    created_at: datetime = field(default_factory=_now)
    last_activity_at: datetime | None = None
    title: str | None = None

    def __post_init__(self) -> None:
        if self.last_activity_at is None:
            self.last_activity_at = self.created_at

    def to_dict(self) -> dict[str, Any]:
        return {
            "created_at": _format_timestamp(self.created_at),
            "last_activity_at": _format_timestamp(self.last_activity_at),
            "title": self.title,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SessionMetadata:
        data = _require_mapping(data, "session metadata")
        title = data.get("title")
        if title is not None and not isinstance(title, str):
            raise ValueError(f"field `title` must be a string or null, got {title!r}")
        return cls(
            created_at=_parse_timestamp(_require(data, "created_at")),
            last_activity_at=_parse_timestamp(_require(data, "last_activity_at")),
            title=title,
        )


@dataclass
class SessionState:
    """Policy, pending confirmations and metadata of one session."""

    policy: ExecutionPolicy = field(default_factory=ExecutionPolicy)
    pending: dict[str, PendingToolCall] = field(default_factory=dict)
    metadata: SessionMetadata = field(default_factory=SessionMetadata)

    def to_dict(self) -> dict[str, Any]:
        return {
            "policy": self.policy.to_dict(),
            "pending": {cid: call.to_dict() for cid, call in self.pending.items()},
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SessionState:
        """Build a state from its JSON form; raise ValueError when malformed."""
        data = _require_mapping(data, "session state")
        policy = ExecutionPolicy.from_dict(_require_mapping(_require(data, "policy"), "policy"))
        pending_raw = _require_mapping(_require(data, "pending"), "pending")
        pending = {
            str(cid): PendingToolCall.from_dict(call) for cid, call in pending_raw.items()
        }
        metadata = SessionMetadata.from_dict(_require(data, "metadata"))
        return cls(policy=policy, pending=pending, metadata=metadata)


# ---------------------------------------------------------------------------
# Store interface
# ---------------------------------------------------------------------------


class SessionStore(ABC):
    """Storage backend for session states."""

    @abstractmethod
    def get(self, session_id: str) -> SessionState | None:
        """Return the session, or None when unknown."""

    @abstractmethod
    def insert(self, session_id: str, state: SessionState) -> None:
        """Store a new session."""

    @abstractmethod
    def update(self, session_id: str, state: SessionState) -> None:
        """Replace an existing session."""

    @abstractmethod
    def delete(self, session_id: str) -> None:
        """Remove a session; unknown ids are ignored."""

    @abstractmethod
    def list(self) -> list[str]:
        """Return all session ids."""

    @abstractmethod
    def contains(self, session_id: str) -> bool:
        """Tell whether a session exists."""


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class MemorySessionStore(SessionStore):
    """Thread-safe in-memory session store."""

    def __init__(self) -> None:
        self._sessions: dict[str, SessionState] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> SessionState | None:
        with self._lock:
            state = self._sessions.get(session_id)
            return copy.deepcopy(state) if state is not None else None

    def insert(self, session_id: str, state: SessionState) -> None:
        with self._lock:
            self._sessions[session_id] = copy.deepcopy(state)

    def update(self, session_id: str, state: SessionState) -> None:
        with self._lock:
            self._sessions[session_id] = copy.deepcopy(state)

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def list(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    def contains(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions


# ---------------------------------------------------------------------------
# File-backed store
# ---------------------------------------------------------------------------


class FileSessionStore(SessionStore):
    """Session store that keeps one JSON file per session, with an in-memory cache."""

    def __init__(self, base_dir: os.PathLike | str) -> None:
        self.base_dir = Path(base_dir)
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SessionError("io", exc) from exc
        self._memory = MemorySessionStore()

    def _session_path(self, session_id: str) -> Path:
        return self.base_dir / f"{session_id}.jsonl"

    def _load(self, session_id: str) -> SessionState | None:
        path = self._session_path(session_id)
        if not path.exists():
            return None
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SessionError("io", exc) from exc
        try:
            return SessionState.from_dict(json.loads(content))
        except (ValueError, TypeError) as exc:
            raise SessionError(
                "serialization", f"Failed to deserialize session: {exc}"
            ) from exc

    def _save(self, session_id: str, state: SessionState) -> None:
        try:
            content = json.dumps(state.to_dict(), indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise SessionError("serialization", f"Failed to serialize session: {exc}") from exc
        try:
            self._session_path(session_id).write_text(content, encoding="utf-8")
        except OSError as exc:
            raise SessionError("io", exc) from exc

    def get(self, session_id: str) -> SessionState | None:
        cached = self._memory.get(session_id)
        if cached is not None:
            return cached
        return self._load(session_id)

    def insert(self, session_id: str, state: SessionState) -> None:
        self._save(session_id, state)
        self._memory.insert(session_id, state)

    def update(self, session_id: str, state: SessionState) -> None:
        self._save(session_id, state)
        self._memory.update(session_id, state)

    def delete(self, session_id: str) -> None:
        path = self._session_path(session_id)
        if path.exists():
            try:
                path.unlink()
            except OSError as exc:
                raise SessionError("io", exc) from exc
        self._memory.delete(session_id)

    def list(self) -> list[str]:
        try:
            entries = sorted(self.base_dir.iterdir())
        except OSError as exc:
            raise SessionError("io", exc) from exc
        return [
            entry.stem
            for entry in entries
            if entry.suffix and entry.suffix[1:].startswith("jsonl")
        ]

    def contains(self, session_id: str) -> bool:
        if self._memory.contains(session_id):
            return True
        return self._session_path(session_id).exists()