"""Run execution entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mobile_uitest_runner.run_configuration import TestConfiguration

DEFAULT_BUILD_CONFIGURATION = "Release"
DEFAULT_WORKING_DIR_NAME = "UITest"


@dataclass(frozen=True)
class RunRequest:
    """Input contract for executing one pipeline run."""

    uitest_project_path: str
    app_project_path: str
    platform: str
    configuration: str | None = DEFAULT_BUILD_CONFIGURATION
    uitest_configuration_path: str | None = None


@dataclass(frozen=True)
class WorkingLayout:
    """Scratch directory tree owned by one run."""

    root: Path

    @property
    def device_bin(self) -> Path:
        return self.root / "bin" / "device"

    @property
    def uitest_bin(self) -> Path:
        return self.root / "bin" / "uitest"

    @property
    def results(self) -> Path:
        return self.root / "Results"

    @property
    def screenshots(self) -> Path:
        return self.root / "Screenshots"

    def directories(self) -> tuple[Path, ...]:
        return (self.device_bin, self.uitest_bin, self.results, self.screenshots)


@dataclass(frozen=True)
class RunOutcome:
    """Output contract for one completed run."""

    layout: WorkingLayout
    config_path: Path
    configuration: TestConfiguration
