"""Server-side virtual tools and policy-based filtering of tool schemas."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from luna.toolkit import ExecutionPolicy, ToolOutput, ToolSchema

__all__ = [
    "filter_schemas_by_policy",
    "tool_output_like",
    "search_tool_schema",
    "refill_tool_schema",
]


def filter_schemas_by_policy(
    schemas: Iterable[ToolSchema], policy: ExecutionPolicy
) -> list[ToolSchema]:
    """Drop the schemas of tools that the policy does not allow."""
    gates = {
        "run_terminal": policy.allow_run_terminal,
        "edit_file": policy.allow_edit_file,
    }
    return [s for s in schemas if gates.get(s.name, True)]


def tool_output_like(
    success: bool, data: Any, trace: str, error: str | None = None
) -> dict[str, Any]:
    """Build a result shaped like a serialised tool output."""
    return ToolOutput(success=success, data=data, error=error, trace=trace).to_dict()


def _typed(kind: str, description: str | None = None) -> dict[str, Any]:
    spec: dict[str, Any] = {"type": kind}
    if description is not None:
        spec["description"] = description
    return spec


def _object(properties: dict[str, Any], required: tuple[str, ...] = ()) -> dict[str, Any]:
    spec: dict[str, Any] = {"type": "object"}
    if required:
        spec["required"] = list(required)
    spec["properties"] = properties
    return spec


def _arrays(*names: str) -> dict[str, Any]:
    return _object({name: _typed("array") for name in names})


def search_tool_schema() -> ToolSchema:
    return ToolSchema(
        name="search_code",
        description="Search code (keyword placeholder backend), returns IndexChunk hits",
        input_schema=_object(
            {
                "query": _typed("string", "Search query string"),
                "max_hits": _typed("number", "Maximum hits (optional)"),
            },
            required=("query",),
        ),
        output_schema=_arrays("hits", "trace"),
    )


def refill_tool_schema() -> ToolSchema:
    return ToolSchema(
        name="refill_hits",
        description="Refill IndexChunk hits into ContextChunks",
        input_schema=_object(
            {"hits": _typed("array", "IndexChunk array")},
            required=("hits",),
        ),
        output_schema=_arrays("context", "trace"),
    )