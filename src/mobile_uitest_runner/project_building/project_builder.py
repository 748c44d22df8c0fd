"""Restore, build and test .NET projects through the ``dotnet`` CLI."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Mapping
from pathlib import Path

from mobile_uitest_runner.device_provisioning import Platform
from mobile_uitest_runner.process_execution import ToolRunner

_LOGGER = logging.getLogger(__name__)

DOTNET = "dotnet"
PROJECT_FILE_EXTENSION = ".csproj"


class ProjectBuilder:
    """Project builder over ``dotnet restore``, ``dotnet msbuild`` and ``dotnet test``.

    Failures surface as ``ToolExecutionError`` from the runner, carrying the
    captured diagnostics.
    """

    def __init__(
        self,
        runner: ToolRunner,
        *,
        working_dir: Path | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self._runner = runner
        self._working_dir = working_dir
        self._cancel_event = cancel_event

    def restore(self, project_path: Path) -> None:
        self._dotnet("restore", str(project_path), "--nologo")

    def build(
        self,
        project_path: Path,
        output_dir: str,
        properties: Mapping[str, str] | None = None,
        *,
        target: str = "Build",
    ) -> None:
        """Compile ``project_path`` into ``output_dir``.

        ``output_dir`` is passed verbatim as ``OutputPath`` so callers control
        its trailing separator.
        """
        merged = {"OutputPath": output_dir, **dict(properties or {})}
        arguments = ["msbuild", str(project_path), "-nologo", "-verbosity:minimal", f"-t:{target}"]
        arguments.extend(f"-p:{name}={value}" for name, value in merged.items())
        _LOGGER.info("Building %s into %s", project_path.name, output_dir)
        self._dotnet(*arguments)

    def restore_and_build(
        self,
        project_path: Path,
        output_dir: str,
        *,
        configuration: str | None,
        properties: Mapping[str, str] | None = None,
        target: str = "Build",
    ) -> None:
        build_properties = dict(properties or {})
        if configuration:
            build_properties["Configuration"] = configuration
        self.restore(project_path)
        self.build(project_path, output_dir, build_properties, target=target)

    def test(
        self,
        project_path: Path,
        output_dir: str,
        *,
        configuration: str | None,
        results_dir: Path,
    ) -> None:
        """Run the compiled test project without rebuilding it."""
        arguments = ["test", str(project_path), "--no-build", "--output", output_dir]
        if configuration:
            arguments.extend(["--configuration", configuration])
        arguments.extend(["--results-directory", str(results_dir), "--logger", "trx"])
        self._dotnet(*arguments)

    def _dotnet(self, *arguments: str) -> None:
        self._runner.run(
            DOTNET, arguments, cwd=self._working_dir, cancel_event=self._cancel_event
        )


def app_build_settings(platform: Platform | str) -> tuple[str, dict[str, str]]:
    """Return the MSBuild target and extra properties producing an installable app."""
    match Platform.parse(platform):
        case Platform.ANDROID:
            return "SignAndroidPackage", {}
        case Platform.IOS:
            return "Build", {"Platform": "iPhoneSimulator"}


def with_trailing_separator(path: Path) -> str:
    """Render a directory for MSBuild ``OutputPath``.

    The iOS SDK targets join ``OutputPath`` with file names by concatenation, so
    the value must end with a separator. ``dotnet test --output`` gets the same
    value for consistency.
    """
    text = str(path)
    return text if text.endswith(os.sep) else text + os.sep
