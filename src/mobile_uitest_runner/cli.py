"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from mobile_uitest_runner.run_execution import (
    RunExecutionError,
    RunRequest,
    execute_uitest_pipeline,
)
from mobile_uitest_runner.run_execution.run_contracts import (
    DEFAULT_BUILD_CONFIGURATION,
    DEFAULT_WORKING_DIR_NAME,
)
from mobile_uitest_runner.toolchain_settings import ToolchainSettingsError, load_toolchain_settings

_LOGGER = logging.getLogger(__name__)
_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
_PACKAGE_LOGGER_NAME = "mobile_uitest_runner"


class CliError(Exception):
    """Custom CLI error."""


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="mobile-uitest-runner")
@click.option(
    "--uitest-project-path",
    "-uitest",
    "uitest_project_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the csproj of the UI-test project",
)
@click.option(
    "--app-project-path",
    "-app",
    "app_project_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the csproj of the iOS or Android head project",
)
@click.option(
    "--platform",
    "-p",
    "platform",
    required=True,
    help="Target platform: Android or iOS",
)
@click.option(
    "--configuration",
    "-c",
    "configuration",
    default=DEFAULT_BUILD_CONFIGURATION,
    show_default=True,
    help="Build configuration for the head and UI-test projects",
)
@click.option(
    "--uitest-configuration",
    "-ui-config",
    "uitest_configuration_path",
    required=False,
    type=click.Path(path_type=str),
    help="uitest.json overriding the one in the UI-test build output",
)
@click.option(
    "--working-dir",
    "working_dir",
    default=DEFAULT_WORKING_DIR_NAME,
    show_default=True,
    type=click.Path(path_type=Path, file_okay=False),
    help="Scratch directory, recreated on every run",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Log the output of every external tool.",
)
def cli(  # pylint: disable=too-many-arguments
    uitest_project_path: str,
    app_project_path: str,
    platform: str,
    configuration: str,
    uitest_configuration_path: str | None,
    working_dir: Path,
    verbose: bool,
) -> None:
    """Build the app and UI tests, provision a device and run the tests under Appium."""
    _configure_logging(verbose)
    try:
        toolchain = load_toolchain_settings()
        outcome = execute_uitest_pipeline(
            RunRequest(
                uitest_project_path=uitest_project_path,
                app_project_path=app_project_path,
                platform=platform,
                configuration=configuration,
                uitest_configuration_path=uitest_configuration_path,
            ),
            working_root=working_dir,
            toolchain=toolchain,
        )
    except (ToolchainSettingsError, RunExecutionError) as exc:
        raise CliError(str(exc)) from exc
    _LOGGER.info("Test results written to %s", outcome.layout.results)


class _ClickEchoHandler(logging.Handler):
    """Writes log records to the current stderr through click."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            click.echo(self.format(record), err=True)
        except Exception:  # pylint: disable=broad-exception-caught
            self.handleError(record)


def _configure_logging(verbose: bool) -> None:
    package_logger = logging.getLogger(_PACKAGE_LOGGER_NAME)
    for handler in list(package_logger.handlers):
        if isinstance(handler, _ClickEchoHandler):
            package_logger.removeHandler(handler)
    handler = _ClickEchoHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def _report_failure(message: str) -> None:
    click.secho(message, fg="red", err=True)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        _report_failure(str(exc))
        return 1
    except click.ClickException as exc:
        exc.show()
        return 1
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    except Exception as exc:  # pylint: disable=broad-exception-caught
        _LOGGER.debug("Unhandled failure", exc_info=True)
        _report_failure(str(exc) or exc.__class__.__name__)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
