"""Command line tool execution with captured and logged output."""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import IO

_LOGGER = logging.getLogger(__name__)
_OUTPUT_LOGGER = logging.getLogger(f"{__name__}.output")

ExecutableResolver = Callable[[str], str | None]


class ProcessExecutionError(Exception):
    """Base error for external tool invocations."""


class ToolNotFoundError(ProcessExecutionError):
    """Raised when a tool cannot be located on this machine."""


class ToolExecutionError(ProcessExecutionError):
    """Raised when a tool reports diagnostics or exits with a non-zero code."""

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class ToolRunner:
    """Runs external tools, streaming stdout to the log while capturing it.

    stdout is consumed line by line on the calling thread so long builds show
    progress at DEBUG level; stderr is drained concurrently on a worker thread
    and treated as a failure signal unless the caller opts out.
    """

    def __init__(
        self,
        *,
        environment: Mapping[str, str] | None = None,
        resolve_executable: ExecutableResolver | None = None,
    ) -> None:
        self._environment = dict(environment) if environment is not None else None
        self._resolve_executable = resolve_executable or shutil.which

    def resolve(self, tool: str | Path) -> str:
        """Return the executable path for a tool name or explicit path."""
        candidate = Path(tool)
        if candidate.is_absolute() or len(candidate.parts) > 1:
            if candidate.exists():
                return str(candidate)
            raise ToolNotFoundError(f"Tool not found: {candidate}")
        resolved = self._resolve_executable(str(tool))
        if not resolved:
            raise ToolNotFoundError(f"Tool '{tool}' was not found on PATH.")
        return resolved

    def is_available(self, tool: str | Path) -> bool:
        try:
            self.resolve(tool)
        except ToolNotFoundError:
            return False
        return True

    def run(  # pylint: disable=too-many-arguments
        self,
        tool: str | Path,
        args: Sequence[str] = (),
        *,
        cwd: Path | None = None,
        cancel_event: threading.Event | None = None,
        check_stderr: bool = True,
        stdin_text: str | None = None,
    ) -> str | None:
        """Run a tool to completion and return its trimmed stdout.

        Returns ``None`` without launching anything when ``cancel_event`` is
        already set.

        Raises:
          ToolNotFoundError: If the executable cannot be resolved.
          ToolExecutionError: If stderr is non-empty (and checked) or the exit
            code is non-zero.
        """
        if cancel_event is not None and cancel_event.is_set():
            _LOGGER.debug("Cancellation requested, skipping %s", tool)
            return None

        command = [self.resolve(tool), *args]
        tool_name = Path(command[0]).name
        _LOGGER.info("%s", shlex.join(command))
        try:
            process = subprocess.Popen(  # pylint: disable=consider-using-with
                command,
                cwd=cwd,
                env=self._merged_environment(),
                stdin=subprocess.PIPE if stdin_text is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as exc:
            raise ToolNotFoundError(f"Tool not found: {command[0]}") from exc

        with process, ThreadPoolExecutor(max_workers=1) as executor:
            stderr_future = executor.submit(_read_all, process.stderr)
            if stdin_text is not None and process.stdin is not None:
                process.stdin.write(stdin_text)
                process.stdin.close()
            stdout_lines = list(_stream_lines(process.stdout))
            stderr_text = stderr_future.result().strip()
            exit_code = process.wait()

        if stderr_text and check_stderr:
            raise ToolExecutionError(stderr_text, exit_code=exit_code)
        if stderr_text:
            _OUTPUT_LOGGER.debug("%s stderr: %s", tool_name, stderr_text)
        if exit_code != 0:
            raise ToolExecutionError(
                f"{tool_name} exited with non-zero exit code {exit_code}.",
                exit_code=exit_code,
            )
        return "\n".join(stdout_lines).strip()

    def spawn(
        self,
        tool: str | Path,
        args: Sequence[str] = (),
        *,
        cwd: Path | None = None,
        log_path: Path | None = None,
    ) -> subprocess.Popen:
        """Launch a long-running tool without waiting for it.

        Output goes to ``log_path`` when given, otherwise it is discarded.
        """
        command = [self.resolve(tool), *args]
        _LOGGER.info("%s &", shlex.join(command))
        log_handle: IO[str] | int = subprocess.DEVNULL
        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            log_handle = log_path.open("a", encoding="utf-8")  # pylint: disable=consider-using-with
        try:
            return subprocess.Popen(  # pylint: disable=consider-using-with
                command,
                cwd=cwd,
                env=self._merged_environment(),
                stdin=subprocess.DEVNULL,
                stdout=log_handle,
                stderr=subprocess.STDOUT,
                text=True,
                start_new_session=True,
            )
        except FileNotFoundError as exc:
            raise ToolNotFoundError(f"Tool not found: {command[0]}") from exc
        finally:
            if not isinstance(log_handle, int):
                log_handle.close()

    def _merged_environment(self) -> dict[str, str] | None:
        if self._environment is None:
            return None
        merged = os.environ.copy()
        merged.update(self._environment)
        return merged


def _stream_lines(stream: Iterable[str] | None) -> Iterable[str]:
    if stream is None:
        return
    for line in stream:
        text = line.rstrip("\r\n")
        _OUTPUT_LOGGER.debug("%s", text)
        yield text


def _read_all(stream: IO[str] | None) -> str:
    if stream is None:
        return ""
    return stream.read()
