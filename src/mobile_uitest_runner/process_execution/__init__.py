"""Process execution domain exports."""

from .tool_runner import (
    ProcessExecutionError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolRunner,
)

__all__ = [
    "ProcessExecutionError",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ToolRunner",
]
