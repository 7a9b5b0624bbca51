"""Tool abstraction: execution policy, tool inputs and outputs, schemas and a registry."""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

__all__ = [
    "ToolArgumentError",
    "ExecutionPolicy",
    "ToolInput",
    "ToolOutput",
    "ToolSchema",
    "Tool",
    "ToolRegistry",
    "parse_path",
    "parse_string",
    "parse_usize",
    "parse_bool",
]


class ToolArgumentError(ValueError):
    """A tool argument is missing or has the wrong type."""


@dataclass
class ExecutionPolicy:
    """Which tool capabilities are allowed and which need explicit confirmation."""

    allow_edit_file: bool = True
    require_confirm_edit_file: bool = False
    allow_run_terminal: bool = False
    require_confirm_run_terminal: bool = True

    def to_dict(self) -> dict[str, bool]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ExecutionPolicy:
        """Build a policy from a mapping holding every field as a bool."""
        values = {}
        for f in dataclasses.fields(cls):
            if f.name not in data:
                raise ValueError(f"missing field `{f.name}`")
            value = data[f.name]
            if not isinstance(value, bool):
                raise ValueError(f"field `{f.name}` must be a bool, got {value!r}")
            values[f.name] = value
        return cls(**values)


@dataclass
class ToolInput:
    """Arguments and environment for one tool execution."""

    args: Any
    repo_root: Path = field(default_factory=lambda: Path("."))
    policy: ExecutionPolicy | None = None

    def __post_init__(self) -> None:
        self.repo_root = Path(self.repo_root)


def _jsonable(item: Any) -> Any:
    to_dict = getattr(item, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        return dataclasses.asdict(item)
    return item


@dataclass
class ToolOutput:
    """Result of a tool execution."""

    success: bool
    data: Any = None
    error: str | None = None
    trace: str = ""
    context_chunks: list[Any] = field(default_factory=list)
    hits: list[Any] = field(default_factory=list)

    @classmethod
    def ok(cls, data: Any) -> ToolOutput:
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, error: object) -> ToolOutput:
        return cls(success=False, data=None, error=str(error))

    def with_context(self, chunks: Iterable[Any]) -> ToolOutput:
        return dataclasses.replace(self, context_chunks=list(chunks))

    def with_hits(self, hits: Iterable[Any]) -> ToolOutput:
        return dataclasses.replace(self, hits=list(hits))

    def with_trace(self, trace: object) -> ToolOutput:
        return dataclasses.replace(self, trace=str(trace))

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "data": self.data,
            "error": self.error,
            "trace": self.trace,
            "context_chunks": [_jsonable(c) for c in self.context_chunks],
            "hits": [_jsonable(h) for h in self.hits],
        }


@dataclass
class ToolSchema:
    """Self-description of a tool: name, description and JSON schemas."""

    name: str
    description: str
    input_schema: Any = field(default_factory=dict)
    output_schema: Any = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
            "output_schema": self.output_schema,
        }


class Tool(ABC):
    """Base class of agent tools. Subclasses set ``name``."""

    name: str = ""

    @abstractmethod
    def schema(self) -> ToolSchema:
        """Describe the tool."""

    @abstractmethod
    def execute(self, tool_input: ToolInput) -> ToolOutput:
        """Run the tool."""

    def validate(self, tool_input: ToolInput) -> None:
        """Check the input before execution; raise on invalid input.

        The base check only makes sure a proper ``ToolInput`` was given;
        tools override this to check their arguments.
        """
        if not isinstance(tool_input, ToolInput):
            raise TypeError(f"expected a ToolInput, got {type(tool_input).__name__}")

    def can_handle(self, action: str) -> bool:
        return self.name == action


class ToolRegistry:
    """Tools by name, with discovery and execution."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool

    def register_all(self, tools: Iterable[Tool]) -> None:
        for tool in tools:
            self.register(tool)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def names(self) -> list[str]:
        return list(self._tools)

    def execute(self, name: str, tool_input: ToolInput) -> ToolOutput:
        """Validate and run the named tool; failures come back as failed outputs."""
        tool = self.get(name)
        if tool is None:
            return ToolOutput.failure(f"tool not found: {name}")
        try:
            tool.validate(tool_input)
        except Exception as exc:  # noqa: BLE001 - any validation problem is reported
            return ToolOutput.failure(f"validation failed: {exc}")
        return tool.execute(tool_input)

    def schemas(self) -> list[ToolSchema]:
        return [tool.schema() for tool in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools


def _field(args: Any, key: str) -> Any:
    if isinstance(args, Mapping):
        return args.get(key)
    return None


def parse_path(args: Any, key: str) -> Path:
    """Read a string argument as a path."""
    value = _field(args, key)
    if not isinstance(value, str):
        raise ToolArgumentError(f"missing field: {key}")
    return Path(value)


def parse_string(args: Any, key: str) -> str:
    value = _field(args, key)
    if not isinstance(value, str):
        raise ToolArgumentError(f"missing field: {key}")
    return value


def parse_usize(args: Any, key: str) -> int:
    """Read a non-negative integer argument."""
    value = _field(args, key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ToolArgumentError(f"missing or invalid field: {key}")
    return value


def parse_bool(args: Any, key: str) -> bool:
    value = _field(args, key)
    if not isinstance(value, bool):
        raise ToolArgumentError(f"missing or invalid field: {key}")
    return value