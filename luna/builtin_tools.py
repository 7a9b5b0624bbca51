"""Built-in agent tools: reading, editing and listing files, and running commands."""

from __future__ import annotations

from typing import Any

from luna.fs import ReplaceLines, edit_file, list_dir, read_file
from luna.terminal import run_terminal
from luna.toolkit import (
    ExecutionPolicy,
    Tool,
    ToolArgumentError,
    ToolInput,
    ToolOutput,
    ToolSchema,
    parse_bool,
    parse_path,
    parse_string,
    parse_usize,
)

__all__ = ["ReadFileTool", "EditFileTool", "ListDirTool", "RunTerminalTool"]

_UNSET = object()
_RELATIVE_FILE = "File path (relative to repo_root)"


def _prop(kind: str, description: str | None = None, default: Any = _UNSET) -> dict[str, Any]:
    spec: dict[str, Any] = {"type": kind}
    if description is not None:
        spec["description"] = description
    if default is not _UNSET:
        spec["default"] = default
    return spec


def _obj(properties: dict[str, Any], *required: str) -> dict[str, Any]:
    spec: dict[str, Any] = {"type": "object"}
    if required:
        spec["required"] = list(required)
    spec["properties"] = properties
    return spec


def _plain(**kinds: str) -> dict[str, Any]:
    return {key: _prop(kind) for key, kind in kinds.items()}


def _policy_of(tool_input: ToolInput) -> ExecutionPolicy:
    return tool_input.policy if tool_input.policy is not None else ExecutionPolicy()


def _optional_usize(args: Any, key: str) -> int | None:
    try:
        return parse_usize(args, key)
    except ToolArgumentError:
        return None


def _flag(args: Any, key: str) -> bool:
    try:
        return parse_bool(args, key)
    except ToolArgumentError:
        return False


def _blocked(message: str) -> ToolOutput:
    return ToolOutput.failure(message).with_trace("policy_blocked")


def _needs_confirmation(tool_name: str) -> ToolOutput:
    return ToolOutput.failure(
        f"{tool_name} requires explicit confirmation: set confirm=true in args"
    ).with_trace("confirmation_required")


def _option_repr(value: int | None) -> str:
    return "None" if value is None else f"Some({value})"


class ReadFileTool(Tool):
    """Read a file's contents, optionally a line range."""

    name = "read_file"

    def schema(self) -> ToolSchema:
        return ToolSchema(
            name=self.name,
            description="Read file contents, optionally with line range",
            input_schema=_obj(
                {
                    "path": _prop("string", _RELATIVE_FILE),
                    "start_line": _prop("number", "Start line (0-based, optional)"),
                    "end_line": _prop("number", "End line (0-based, optional)"),
                },
                "path",
            ),
            output_schema=_obj({"content": _prop("string", "File contents")}),
        )

    def execute(self, tool_input: ToolInput) -> ToolOutput:
        args = tool_input.args
        try:
            path = parse_path(args, "path")
        except ToolArgumentError as exc:
            return ToolOutput.failure(exc)

        start = _optional_usize(args, "start_line")
        end = _optional_usize(args, "end_line")
        line_range = None if start is None else (start, start if end is None else end)

        try:
            content = read_file(tool_input.repo_root / path, line_range)
        except (OSError, UnicodeDecodeError) as exc:
            return ToolOutput.failure(f"failed to read file: {exc}")
        size = len(content.encode("utf-8"))
        return ToolOutput.ok({"content": content}).with_trace(f"read {size} bytes")


class EditFileTool(Tool):
    """Replace a range of lines in a file, subject to the execution policy."""

    name = "edit_file"

    def schema(self) -> ToolSchema:
        return ToolSchema(
            name=self.name,
            description="Edit file contents by replacing lines",
            input_schema=_obj(
                {
                    "path": _prop("string", _RELATIVE_FILE),
                    "start_line": _prop("number", "Start line (0-based, inclusive)"),
                    "end_line": _prop("number", "End line (0-based, inclusive)"),
                    "new_content": _prop("string", "New content"),
                    "create_backup": _prop(
                        "boolean", "Create backup before editing", default=False
                    ),
                    "confirm": _prop(
                        "boolean",
                        "Explicit confirmation for potentially destructive actions",
                        default=False,
                    ),
                },
                "path",
                "start_line",
                "end_line",
                "new_content",
            ),
            output_schema=_obj(
                _plain(success="boolean", lines_changed="number", backup_path="string")
            ),
        )

    def execute(self, tool_input: ToolInput) -> ToolOutput:
        policy = _policy_of(tool_input)
        if not policy.allow_edit_file:
            return _blocked("edit file is disabled by policy")
        args = tool_input.args
        if policy.require_confirm_edit_file and not _flag(args, "confirm"):
            return _needs_confirmation(self.name)

        try:
            path = parse_path(args, "path")
            first = parse_usize(args, "start_line")
            last = parse_usize(args, "end_line")
            replacement = parse_string(args, "new_content")
        except ToolArgumentError as exc:
            return ToolOutput.failure(exc)

        op = ReplaceLines(start_line=first, end_line=last, new_content=replacement)
        try:
            result = edit_file(tool_input.repo_root / path, op, _flag(args, "create_backup"))
        except (OSError, UnicodeDecodeError) as exc:
            return ToolOutput.failure(f"edit error: {exc}")

        if not result.success:
            return ToolOutput.failure(f"edit failed: {result.error or ''}")
        payload = {
            "success": True,
            "lines_changed": result.lines_changed or 0,
            "backup_path": result.backup_path,
        }
        return ToolOutput.ok(payload).with_trace(f"edited {last - first + 1} lines")


class ListDirTool(Tool):
    """List the entries of a directory."""

    name = "list_dir"

    def schema(self) -> ToolSchema:
        entry = _obj(_plain(name="string", is_dir="boolean", is_file="boolean", size="number"))
        return ToolSchema(
            name=self.name,
            description="List directory contents",
            input_schema=_obj(
                {"path": _prop("string", "Directory path (relative to repo_root)")},
                "path",
            ),
            output_schema=_obj({"entries": {"type": "array", "items": entry}}),
        )

    def execute(self, tool_input: ToolInput) -> ToolOutput:
        try:
            path = parse_path(tool_input.args, "path")
        except ToolArgumentError as exc:
            return ToolOutput.failure(exc)

        try:
            entries = list_dir(tool_input.repo_root / path)
        except OSError as exc:
            return ToolOutput.failure(f"failed to list directory: {exc}")

        listing = [
            {"name": e.name, "is_dir": e.is_dir, "is_file": e.is_file, "size": e.size}
            for e in entries
        ]
        return ToolOutput.ok({"entries": listing}).with_trace(f"listed {len(listing)} entries")


class RunTerminalTool(Tool):
    """Run a terminal command in the repository root, subject to the execution policy."""

    name = "run_terminal"

    def schema(self) -> ToolSchema:
        return ToolSchema(
            name=self.name,
            description="Run terminal commands with safety checks",
            input_schema=_obj(
                {
                    "command": _prop("string", "Command to execute"),
                    "allow_dangerous": _prop(
                        "boolean", "Allow potentially dangerous commands", default=False
                    ),
                    "confirm": _prop(
                        "boolean", "Explicit confirmation for command execution", default=False
                    ),
                },
                "command",
            ),
            output_schema=_obj(
                _plain(
                    success="boolean",
                    stdout="string",
                    stderr="string",
                    exit_code="number",
                    error="string",
                )
            ),
        )

    def execute(self, tool_input: ToolInput) -> ToolOutput:
        policy = _policy_of(tool_input)
        if not policy.allow_run_terminal:
            return _blocked("run_terminal is disabled by policy")
        args = tool_input.args

        try:
            command = parse_string(args, "command")
        except ToolArgumentError as exc:
            return ToolOutput.failure(exc)

        allow_dangerous = _flag(args, "allow_dangerous")
        if policy.require_confirm_run_terminal and not _flag(args, "confirm"):
            return _needs_confirmation(self.name)

        try:
            result = run_terminal(command, tool_input.repo_root, allow_dangerous)
        except OSError as exc:
            return ToolOutput.failure(f"terminal error: {exc}")

        if not result.success:
            return ToolOutput.failure(f"command failed: {result.error or 'unknown'}")
        payload = {
            "success": True,
            "stdout": result.stdout,
            "stderr": result.stderr,
            "exit_code": result.exit_code,
        }
        return ToolOutput.ok(payload).with_trace(
            f"command exited with {_option_repr(result.exit_code)}"
        )