"""Run execution domain exports."""

from .run_contracts import RunOutcome, RunRequest, WorkingLayout
from .uitest_pipeline_use_case import (
    ProjectPathError,
    RunExecutionError,
    execute_uitest_pipeline,
)

__all__ = [
    "RunRequest",
    "RunOutcome",
    "WorkingLayout",
    "ProjectPathError",
    "RunExecutionError",
    "execute_uitest_pipeline",
]
