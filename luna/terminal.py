"""Run shell-free terminal commands with a guard against obviously dangerous ones."""

from __future__ import annotations

import os
import shlex
import subprocess
from dataclasses import dataclass

__all__ = ["TerminalResult", "DANGEROUS_PATTERNS", "is_dangerous_command", "run_terminal"]

DANGEROUS_PATTERNS: tuple[str, ...] = (
    "rm -rf",
    "rm -r /",
    "format",
    "mkfs",
    "dd if=",
    "shutdown",
    "reboot",
    "init 0",
    "halt",
    "poweroff",
    ":(){:|:&};:",
    "mv /dev/null",
)


@dataclass
class TerminalResult:
    """Outcome of a terminal command."""

    command: str
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    success: bool = False
    error: str | None = None


def is_dangerous_command(command: str) -> bool:
    """Tell whether a command contains one of the known dangerous patterns."""
    lowered = command.lower()
    return any(pattern.lower() in lowered for pattern in DANGEROUS_PATTERNS)


def _split_command(command: str) -> list[str]:
    try:
        return shlex.split(command)
    except ValueError:
        return command.split()


def run_terminal(
    command: str,
    cwd: os.PathLike | str | None = None,
    allow_dangerous: bool = False,
) -> TerminalResult:
    """Run ``command`` (split shell-style, without a shell) in ``cwd``.

    Dangerous commands are refused unless ``allow_dangerous`` is true. Failures to
    start the program are reported in the result rather than raised.
    """
    command = command.strip()

    if not command:
        return TerminalResult(command=command, error="Empty command")

    if not allow_dangerous and is_dangerous_command(command):
        return TerminalResult(
            command=command,
            error=(
                "Command blocked as potentially dangerous. "
                f"Use --allow-dangerous to override: {command}"
            ),
        )

    parts = _split_command(command)
    if not parts:
        return TerminalResult(command=command, error="Failed to parse command")

    try:
        completed = subprocess.run(
            parts,
            cwd=os.fspath(cwd) if cwd is not None else None,
            capture_output=True,
            check=False,
        )
    except (OSError, ValueError) as exc:
        return TerminalResult(command=command, error=f"Failed to execute command: {exc}")

    returncode = completed.returncode
    # A negative return code means the process was killed by a signal: no exit code.
    exit_code = returncode if returncode >= 0 else None
    success = returncode == 0
    error = None
    if not success and exit_code is not None:
        error = f"Command exited with code Some({exit_code})"

    return TerminalResult(
        command=command,
        exit_code=exit_code,
        stdout=completed.stdout.decode("utf-8", errors="replace"),
        stderr=completed.stderr.decode("utf-8", errors="replace"),
        success=success,
        error=error,
    )