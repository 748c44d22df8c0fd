"""Tests for external tool execution."""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path

import pytest
from mobile_uitest_runner.process_execution import (
    ToolExecutionError,
    ToolNotFoundError,
    ToolRunner,
)


def _python(code: str) -> list[str]:
    return ["-c", code]


def test_run_returns_trimmed_stdout() -> None:
    runner = ToolRunner()

    output = runner.run(sys.executable, _python("print('  hello  '); print('world')"))

    assert output == "hello  \nworld"


def test_run_streams_stdout_lines_to_debug_log(caplog: pytest.LogCaptureFixture) -> None:
    runner = ToolRunner()

    with caplog.at_level(logging.DEBUG, logger="mobile_uitest_runner.process_execution"):
        runner.run(sys.executable, _python("print('first'); print('second')"))

    messages = [record.getMessage() for record in caplog.records]
    assert "first" in messages
    assert "second" in messages


def test_run_raises_with_stderr_text_when_tool_reports_diagnostics() -> None:
    runner = ToolRunner()

    with pytest.raises(ToolExecutionError, match="restore failed"):
        runner.run(sys.executable, _python("import sys; sys.stderr.write('restore failed\\n')"))


def test_run_tolerates_stderr_when_check_is_disabled() -> None:
    runner = ToolRunner()

    output = runner.run(
        sys.executable,
        _python("import sys; sys.stderr.write('warning\\n'); print('ok')"),
        check_stderr=False,
    )

    assert output == "ok"


def test_run_raises_on_non_zero_exit_code() -> None:
    runner = ToolRunner()

    with pytest.raises(ToolExecutionError, match="non-zero exit code 3") as exc_info:
        runner.run(sys.executable, _python("raise SystemExit(3)"))

    assert exc_info.value.exit_code == 3


def test_run_feeds_stdin_text() -> None:
    runner = ToolRunner()

    output = runner.run(
        sys.executable, _python("import sys; print(sys.stdin.read().upper())"), stdin_text="no\n"
    )

    assert output == "NO"


def test_run_skips_invocation_when_cancellation_was_requested() -> None:
    runner = ToolRunner(resolve_executable=lambda _: None)
    cancel_event = threading.Event()
    cancel_event.set()

    assert runner.run("dotnet", ["build"], cancel_event=cancel_event) is None


def test_run_raises_tool_not_found_for_unknown_tool() -> None:
    runner = ToolRunner(resolve_executable=lambda _: None)

    with pytest.raises(ToolNotFoundError, match="'dotnet' was not found"):
        runner.run("dotnet", ["--info"])


def test_resolve_rejects_missing_explicit_path(tmp_path: Path) -> None:
    runner = ToolRunner()

    assert runner.is_available(sys.executable) is True
    assert runner.is_available(tmp_path / "platform-tools" / "adb") is False


def test_run_applies_environment_overrides() -> None:
    runner = ToolRunner(environment={"UITEST_PROBE": "present"})

    output = runner.run(sys.executable, _python("import os; print(os.environ['UITEST_PROBE'])"))

    assert output == "present"


def test_spawn_writes_process_output_to_log_file(tmp_path: Path) -> None:
    runner = ToolRunner()
    log_path = tmp_path / "logs" / "tool.log"

    process = runner.spawn(sys.executable, _python("print('started')"), log_path=log_path)
    process.wait(timeout=30)

    assert process.returncode == 0
    assert "started" in log_path.read_text(encoding="utf-8")
