"""File-system operations used by agent tools: reading, listing and editing files."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union

__all__ = [
    "DirEntry",
    "ReplaceAll",
    "ReplaceLines",
    "UnifiedDiff",
    "EditOp",
    "EditResult",
    "SymbolVisibility",
    "SymbolSortOrder",
    "read_file",
    "read_file_by_lines",
    "list_dir",
    "edit_file",
    "detect_visibility",
]


def _lines(text: str) -> list[str]:
    """Split text into lines on '\\n', dropping a trailing '\\r' and the final empty line."""
    if not text:
        return []
    parts = text.split("\n")
    if text.endswith("\n"):
        parts.pop()
    return [p[:-1] if p.endswith("\r") else p for p in parts]


def _read_text(path: os.PathLike | str) -> str:
    return Path(path).read_bytes().decode("utf-8")


def _write_text(path: os.PathLike | str, content: str) -> None:
    Path(path).write_bytes(content.encode("utf-8"))


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def read_file(path: os.PathLike | str, line_range: tuple[int, int] | None = None) -> str:
    """Read a file, optionally only the 0-based inclusive line range given."""
    text = _read_text(path)
    if line_range is None:
        return text
    start, end = line_range
    if start > end:
        return ""
    return "".join(f"{line}\n" for line in _lines(text)[start : end + 1])


def read_file_by_lines(
    repo_root: os.PathLike | str, rel_path: str, start_line: int, end_line: int
) -> str:
    """Read lines ``start_line..=end_line`` (0-based) of a file below ``repo_root``."""
    return read_file(Path(repo_root) / rel_path, (start_line, end_line))


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


@dataclass
class DirEntry:
    """One entry of a directory listing."""

    name: str
    path: str
    is_dir: bool
    is_file: bool
    size: int | None = None


def list_dir(path: os.PathLike | str) -> list[DirEntry]:
    """List a directory: directories first, then by name."""
    base = os.fspath(path)
    entries = []
    with os.scandir(base) as it:
        for entry in it:
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = entry.is_file(follow_symlinks=False)
            size = None
            if is_file:
                try:
                    size = entry.stat(follow_symlinks=False).st_size
                except OSError:
                    size = None
            entries.append(
                DirEntry(
                    name=entry.name,
                    path=os.path.join(base, entry.name),
                    is_dir=is_dir,
                    is_file=is_file,
                    size=size,
                )
            )
    entries.sort(key=lambda e: (not e.is_dir, e.name))
    return entries


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReplaceAll:
    """Replace the whole file content."""

    new_content: str


@dataclass(frozen=True)
class ReplaceLines:
    """Replace a 0-based inclusive line range."""

    start_line: int
    end_line: int
    new_content: str


@dataclass(frozen=True)
class UnifiedDiff:
    """Apply a unified diff (not supported; always reports failure)."""

    diff: str


EditOp = Union[ReplaceAll, ReplaceLines, UnifiedDiff]


@dataclass
class EditResult:
    """Outcome of an edit."""

    path: str
    success: bool
    lines_changed: int | None = None
    error: str | None = None
    backup_path: str | None = None


def edit_file(path: os.PathLike | str, op: EditOp, create_backup: bool = False) -> EditResult:
    """Apply an edit operation to a file, optionally writing ``<path>.backup`` first."""
    path_str = os.fspath(path)
    original = _read_text(path_str)

    backup_path = None
    if create_backup:
        backup_path = f"{path_str}.backup"
        _write_text(backup_path, original)

    if isinstance(op, ReplaceAll):
        new_content = op.new_content
        lines_changed = len(_lines(op.new_content))
    elif isinstance(op, ReplaceLines):
        start, end = op.start_line, op.end_line
        lines = _lines(original)
        if start >= len(lines) or end >= len(lines) or start > end:
            return EditResult(
                path=path_str,
                success=False,
                error=f"Invalid line range: {start}..={end}",
                backup_path=backup_path,
            )
        merged = lines[:start] + _lines(op.new_content) + lines[end + 1 :]
        new_content = "\n".join(merged) + "\n"
        lines_changed = end - start + 1
    elif isinstance(op, UnifiedDiff):
        return EditResult(
            path=path_str,
            success=False,
            error="UnifiedDiff not yet implemented",
            backup_path=backup_path,
        )
    else:
        raise TypeError(f"unsupported edit operation: {op!r}")

    _write_text(path_str, new_content)
    return EditResult(
        path=path_str,
        success=True,
        lines_changed=lines_changed,
        backup_path=backup_path,
    )


# ---------------------------------------------------------------------------
# Symbol visibility
# ---------------------------------------------------------------------------


class SymbolVisibility(Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    ALL = "all"


class SymbolSortOrder(Enum):
    NAME = "name"
    KIND = "kind"
    POSITION = "position"


def detect_visibility(src: str | bytes, start_byte: int, end_byte: int, lang_id: str) -> str:
    """Guess the visibility of the symbol at ``src[start_byte:end_byte]`` for a language."""
    data = src.encode("utf-8") if isinstance(src, str) else src
    line_start = data.rfind(b"\n", 0, start_byte) + 1
    newline = data.find(b"\n", start_byte)
    line_end = len(data) if newline < 0 else newline
    line = data[line_start:line_end].decode("utf-8", errors="replace")
    name = data[start_byte:end_byte].decode("utf-8", errors="replace")

    if lang_id == "rust":
        if not line.lstrip().startswith("pub"):
            return "private"
        start = line.find("pub(")
        if start >= 0:
            close = line.find(")", start)
            if close >= 0:
                return "pub" + line[start + 3 : close + 1]
        return "pub"

    if lang_id == "python":
        if name.startswith("__") and not name.endswith("__"):
            return "private"
        if name.startswith("_"):
            return "protected"
        return "public"

    if lang_id in ("javascript", "typescript"):
        preceding = data[line_start:start_byte].decode("utf-8", errors="replace")
        if preceding.strip().endswith("export") or "export " in line:
            return "public"
        return "private"

    if lang_id == "go":
        if not name:
            return "unknown"
        return "public" if name[0].isupper() else "private"

    if lang_id in ("java", "kotlin"):
        trimmed = line.lstrip()
        for keyword in ("public", "protected", "private"):
            if trimmed.startswith(keyword + " "):
                return keyword
        return "package"

    if lang_id in ("c", "cpp", "c++"):
        return "internal" if line.lstrip().startswith("static ") else "public"

    return "unknown"