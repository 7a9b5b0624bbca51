import shlex
import sys

import pytest

from luna.terminal import TerminalResult, is_dangerous_command, run_terminal

PY = shlex.quote(sys.executable)


def test_dangerous_command_detection():
    assert is_dangerous_command("rm -rf /")
    assert is_dangerous_command("sudo rm -rf /home")
    assert not is_dangerous_command("cargo build")
    assert not is_dangerous_command("ls -la")


def test_dangerous_detection_is_case_insensitive():
    assert is_dangerous_command("SHUTDOWN now")


def test_run_echo():
    result = run_terminal(f"{PY} -c \"print('hello')\"")
    assert result.success
    assert "hello" in result.stdout
    assert result.exit_code == 0
    assert result.error is None


def test_empty_command():
    result = run_terminal("   ")
    assert result == TerminalResult(command="", error="Empty command")


def test_dangerous_command_blocked():
    result = run_terminal("rm -rf /tmp/nothing-here")
    assert not result.success
    assert result.exit_code is None
    assert result.error.startswith("Command blocked as potentially dangerous")


def test_nonzero_exit_code():
    result = run_terminal(f"{PY} -c \"import sys; sys.exit(3)\"")
    assert not result.success
    assert result.exit_code == 3
    assert result.error == "Command exited with code Some(3)"


def test_missing_program():
    result = run_terminal("definitely-not-a-real-program-xyz --flag")
    assert not result.success
    assert result.exit_code is None
    assert result.error.startswith("Failed to execute command:")


def test_cwd_is_used(tmp_path):
    result = run_terminal(f"{PY} -c \"import os; print(os.getcwd())\"", cwd=tmp_path)
    assert result.success
    assert result.stdout.strip() == str(tmp_path.resolve()) or result.stdout.strip() == str(tmp_path)


def test_command_is_stripped():
    result = run_terminal(f"  {PY} -c \"print(1)\"  ")
    assert result.command == f"{PY} -c \"print(1)\""


@pytest.mark.parametrize("text", ["stderr-text"])
def test_stderr_captured(text):
    result = run_terminal(f"{PY} -c \"import sys; sys.stderr.write('{text}')\"")
    assert result.stderr == text