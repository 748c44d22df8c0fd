"""UI-test pipeline use-case service."""

from __future__ import annotations

import functools
import logging
import shutil
import threading
from collections.abc import Callable
from pathlib import Path

from mobile_uitest_runner.device_provisioning import (
    AndroidSdk,
    AppleSimulators,
    DeviceProvisioningError,
    Platform,
    PlatformNotSupportedError,
    provision_device,
)
from mobile_uitest_runner.driver_session import (
    AppiumServerManager,
    DriverPrerequisiteError,
    DriverSessionError,
    ensure_node_installed,
)
from mobile_uitest_runner.process_execution import ProcessExecutionError, ToolRunner
from mobile_uitest_runner.project_building import (
    PROJECT_FILE_EXTENSION,
    ProjectBuilder,
    app_build_settings,
    with_trailing_separator,
)
from mobile_uitest_runner.run_configuration import (
    CONFIG_FILE_NAME,
    ConfigurationDocumentError,
    ConfigurationSynthesisError,
    DeviceProvider,
    synthesize_test_configuration,
)
from mobile_uitest_runner.toolchain_settings import ToolchainSettings

from .run_contracts import RunOutcome, RunRequest, WorkingLayout

_LOGGER = logging.getLogger(__name__)

_PIPELINE_ERRORS = (
    ProcessExecutionError,
    ConfigurationSynthesisError,
    ConfigurationDocumentError,
    DeviceProvisioningError,
    DriverSessionError,
    PlatformNotSupportedError,
    OSError,
)


class RunExecutionError(Exception):
    """Raised when a pipeline run cannot be completed."""


class ProjectPathError(ValueError):
    """Raised when a project path is not an existing project file."""


def execute_uitest_pipeline(  # pylint: disable=too-many-arguments
    request: RunRequest,
    *,
    working_root: Path,
    toolchain: ToolchainSettings | None = None,
    runner: ToolRunner | None = None,
    project_builder_cls=None,
    driver_manager_cls=None,
    device_provider: DeviceProvider | None = None,
    echo: Callable[[str], None] | None = None,
    cancel_event: threading.Event | None = None,
) -> RunOutcome:
    """Build, provision, configure and test; always stop the driver session.

    The working layout under ``working_root`` is recreated at the start and left
    in place afterwards for inspection.
    """
    resolved_toolchain = toolchain or ToolchainSettings()
    resolved_runner = runner or ToolRunner()
    resolved_builder_cls = project_builder_cls or ProjectBuilder
    resolved_driver_manager_cls = driver_manager_cls or AppiumServerManager

    try:
        ensure_node_installed(resolved_runner)
        platform, uitest_project, app_project = _validate_request(request)
    except (DriverPrerequisiteError, ProjectPathError, PlatformNotSupportedError) as exc:
        raise RunExecutionError(str(exc)) from exc

    layout = WorkingLayout(working_root.resolve())
    configuration_name = request.configuration.strip() if request.configuration else None
    builder = resolved_builder_cls(
        resolved_runner, working_dir=layout.root, cancel_event=cancel_event
    )
    driver_manager = resolved_driver_manager_cls(resolved_runner, resolved_toolchain)
    provider = device_provider or _default_device_provider(resolved_runner, resolved_toolchain)

    try:
        _recreate_working_layout(layout)
        _build_projects(
            builder,
            platform=platform,
            app_project=app_project,
            uitest_project=uitest_project,
            layout=layout,
            configuration_name=configuration_name,
        )
        configuration = synthesize_test_configuration(
            platform,
            layout.device_bin,
            layout.uitest_bin,
            request.uitest_configuration_path,
            screenshots_dir=layout.screenshots,
            provision_device=provider,
            echo=echo,
        )
        driver_manager.install(platform)
        with driver_manager.start(layout.root):
            builder.test(
                uitest_project,
                with_trailing_separator(layout.uitest_bin),
                configuration=configuration_name,
                results_dir=layout.results,
            )
    except _PIPELINE_ERRORS as exc:
        raise RunExecutionError(str(exc)) from exc

    return RunOutcome(
        layout=layout,
        config_path=layout.uitest_bin / CONFIG_FILE_NAME,
        configuration=configuration,
    )


def _validate_request(request: RunRequest) -> tuple[Platform, Path, Path]:
    uitest_project = Path(request.uitest_project_path)
    app_project = Path(request.app_project_path)
    if uitest_project.suffix != PROJECT_FILE_EXTENSION:
        raise ProjectPathError(
            f"The path '{request.uitest_project_path}' does not specify a valid csproj"
        )
    if app_project.suffix != PROJECT_FILE_EXTENSION:
        raise ProjectPathError(
            f"The path '{request.app_project_path}' does not specify a valid csproj"
        )
    if not uitest_project.is_file():
        raise ProjectPathError(
            f"The specified UI Test project path does not exist: '{request.uitest_project_path}'"
        )
    if not app_project.is_file():
        raise ProjectPathError(
            f"The specified Platform head project path does not exist: "
            f"'{request.app_project_path}'"
        )
    platform = Platform.parse(request.platform)
    return platform, uitest_project.resolve(), app_project.resolve()


def _recreate_working_layout(layout: WorkingLayout) -> None:
    if layout.root.exists():
        shutil.rmtree(layout.root)
    for directory in layout.directories():
        directory.mkdir(parents=True)
    _LOGGER.info("Prepared working directory %s", layout.root)


def _build_projects(  # pylint: disable=too-many-arguments
    builder: ProjectBuilder,
    *,
    platform: Platform,
    app_project: Path,
    uitest_project: Path,
    layout: WorkingLayout,
    configuration_name: str | None,
) -> None:
    target, app_properties = app_build_settings(platform)
    builder.restore_and_build(
        app_project,
        with_trailing_separator(layout.device_bin),
        configuration=configuration_name,
        properties=app_properties,
        target=target,
    )
    builder.restore_and_build(
        uitest_project,
        with_trailing_separator(layout.uitest_bin),
        configuration=configuration_name,
    )


def _default_device_provider(runner: ToolRunner, toolchain: ToolchainSettings) -> DeviceProvider:
    return functools.partial(
        provision_device,
        android=AndroidSdk(runner, toolchain),
        apple=AppleSimulators(runner),
        emulator_boot_timeout_seconds=toolchain.emulator_boot_timeout_seconds,
    )
