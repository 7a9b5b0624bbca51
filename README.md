# luna

Building blocks for a coding agent that works inside a source repository.
Pure Python, no third-party dependencies.

- `luna.fs`: read files (whole or by 0-based inclusive line range), list
  directories (directories first, then by name), replace line ranges with an
  optional `<path>.backup` copy, and guess a symbol's visibility from its
  source line (`detect_visibility`).
- `luna.terminal`: run a command (split shell-style, run without a shell) in
  a working directory, refusing commands that contain known destructive
  patterns such as `rm -rf` or `mkfs` unless explicitly allowed.
- `luna.toolkit`: the `Tool` base class, `ToolInput` / `ToolOutput` /
  `ToolSchema`, an `ExecutionPolicy`, a `ToolRegistry` that validates and
  dispatches calls by name, and argument helpers (`parse_path`,
  `parse_string`, `parse_usize`, `parse_bool`).
- `luna.builtin_tools`: `ReadFileTool`, `EditFileTool`, `ListDirTool` and
  `RunTerminalTool`.
- `luna.sessions`: `SessionState` (policy, pending tool calls, metadata) with
  `MemorySessionStore` and `FileSessionStore`.
- `luna.virtual_tools`: filtering tool schemas by policy, the schemas of the
  `search_code` and `refill_hits` tools, and `tool_output_like` for building a
  dict shaped like a serialised `ToolOutput`.
- `luna.search`: `ToolTrace`, `SearchCodeOptions`, `extract_code_identifiers`
  and `is_common_keyword`.

## Running a tool

```python
from pathlib import Path

from luna.builtin_tools import ListDirTool, ReadFileTool
from luna.toolkit import ToolInput, ToolRegistry

registry = ToolRegistry()
registry.register_all([ReadFileTool(), ListDirTool()])

out = registry.execute(
    "read_file",
    ToolInput(args={"path": "README.md", "start_line": 0, "end_line": 4}, repo_root=Path(".")),
)
if out.success:
    print(out.data["content"])
else:
    print(out.error)
```

An unknown tool name, or input that fails the tool's `validate`, produces a
failed `ToolOutput` (`"tool not found: ..."` / `"validation failed: ..."`)
rather than an exception. The built-in tools also report missing arguments
and I/O failures as failed outputs.

`ToolOutput.to_dict()` gives the JSON-ready form with the keys `success`,
`data`, `error`, `trace`, `context_chunks` and `hits`.

## Policies and confirmation

`ExecutionPolicy()` defaults to: editing allowed without confirmation,
terminal disabled (and confirmation required once enabled). A disabled tool
answers with trace `"policy_blocked"`. When confirmation is required,
`EditFileTool` and `RunTerminalTool` answer with trace
`"confirmation_required"` until the call is repeated with `"confirm": true`
in its arguments.

```python
from pathlib import Path

from luna.builtin_tools import RunTerminalTool
from luna.toolkit import ExecutionPolicy, ToolInput

policy = ExecutionPolicy(allow_run_terminal=True, require_confirm_run_terminal=True)
tool = RunTerminalTool()

first = tool.execute(ToolInput(args={"command": "echo hi"}, repo_root=Path("."), policy=policy))
print(first.trace)  # confirmation_required

second = tool.execute(
    ToolInput(args={"command": "echo hi", "confirm": True}, repo_root=Path("."), policy=policy)
)
print(second.data["stdout"])
```

`filter_schemas_by_policy` drops the `run_terminal` and `edit_file` schemas
when the policy disables them:

```python
from luna.builtin_tools import EditFileTool, RunTerminalTool
from luna.toolkit import ExecutionPolicy
from luna.virtual_tools import filter_schemas_by_policy

schemas = [EditFileTool().schema(), RunTerminalTool().schema()]
print([s.name for s in filter_schemas_by_policy(schemas, ExecutionPolicy())])  # ['edit_file']
```

## Editing files

```python
from luna.fs import ReplaceLines, edit_file

result = edit_file("notes.txt", ReplaceLines(start_line=0, end_line=1, new_content="new\n"), True)
print(result.success, result.lines_changed, result.backup_path)
```

An out-of-range line range gives `success=False` with an
`"Invalid line range: ..."` error; `UnifiedDiff` operations are not
supported and always report failure.

## Terminal guard

```python
from luna.terminal import is_dangerous_command, run_terminal

is_dangerous_command("sudo rm -rf /home")   # True
result = run_terminal("echo hello", None, False)
print(result.success, result.stdout)
```

A non-zero exit gives `success=False` and an error naming the exit code; a
program that cannot be started is reported in `error`, not raised.
Commands run without a time limit.

## Sessions

```python
from luna.sessions import FileSessionStore, SessionState

store = FileSessionStore(".luna/sessions")
store.insert("demo", SessionState())
assert store.contains("demo")
print(store.list())
```

Each session is written as pretty-printed JSON to `<session_id>.jsonl`
inside the store directory, and cached in memory. Failures are raised as
`SessionError`, whose `kind` is `not_found`, `io`, `serialization` or
`storage`.

## Query helpers

```python
from luna.search import extract_code_identifiers, is_common_keyword

extract_code_identifiers("where is context_chunks built in ContextChunk")
# ['where', 'context_chunks', 'built', 'ContextChunk']
is_common_keyword("Vec")        # True (Rust vocabulary by default)
is_common_keyword("Vec", "py")  # False (only universal keywords)
```

## What this package does not do

- It has no server and no command-line program: there is no JSON-RPC
  endpoint, request parsing or response writing, and no per-connection
  session resolution. `tool_output_like`, `search_tool_schema` and
  `refill_tool_schema` only build data for such a layer.
- It does not search code. `SearchCodeOptions` and `ToolTrace` are data
  types only; there is no repository scan, chunk indexing, hit refilling or
  go-to-definition.
- There is no LLM or agent loop.