"""Configuration synthesis: merge a base ``uitest.json`` with values computed for this run."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import click

from mobile_uitest_runner.device_provisioning import DeviceIdentity, Platform

from .configuration_document import read_test_configuration, serialize_test_configuration
from .configuration_models import CONFIG_FILE_NAME, TestConfiguration

_LOGGER = logging.getLogger(__name__)

ANDROID_PACKAGE_SUFFIX = "-Signed.apk"
IOS_BUNDLE_SUFFIX = ".app"

DeviceProvider = Callable[[Platform], DeviceIdentity]


class ConfigurationSynthesisError(Exception):
    """Base error for configuration synthesis failures."""


class ConfigurationFileNotFoundError(ConfigurationSynthesisError):
    """Raised when the override configuration path does not exist."""


class AppArtifactNotFoundError(ConfigurationSynthesisError):
    """Raised when the app build output holds no installable artifact."""


class AmbiguousAppArtifactError(ConfigurationSynthesisError):
    """Raised when the app build output holds more than one candidate artifact."""


def synthesize_test_configuration(  # pylint: disable=too-many-arguments
    platform: Platform | str,
    app_output_dir: Path,
    uitest_output_dir: Path,
    override_path: Path | str | None = None,
    *,
    screenshots_dir: Path,
    provision_device: DeviceProvider,
    echo: Callable[[str], None] | None = None,
) -> TestConfiguration:
    """Build, persist and echo the ``uitest.json`` for this run.

    The override file wins over a ``uitest.json`` already sitting in the UI-test
    build output; platform, app path and device fields are always recomputed.

    Raises:
      PlatformNotSupportedError: Before any file access, for unknown platforms.
      ConfigurationSynthesisError: If the artifact or override file is missing.
      ConfigurationDocumentError: If the base document cannot be parsed.
      DeviceProvisioningError: If no device can be provisioned.
    """
    resolved_platform = Platform.parse(platform)
    app_path = locate_app_artifact(resolved_platform, app_output_dir)
    config_path = uitest_output_dir / CONFIG_FILE_NAME
    configuration = _load_base_configuration(override_path, config_path)

    if configuration.capabilities is None:
        configuration.capabilities = {}
    if configuration.settings is None:
        configuration.settings = {}

    configuration.platform = resolved_platform.value
    configuration.app_path = str(app_path)

    if not configuration.screenshots_path:
        configuration.screenshots_path = str(screenshots_dir)

    device = provision_device(resolved_platform)
    configuration.device_name = device.name
    configuration.udid = device.udid
    configuration.os_version = device.os_version

    serialized = serialize_test_configuration(configuration)
    config_path.write_text(serialized, encoding="utf-8")
    _LOGGER.info("Wrote test configuration to %s", config_path)
    (echo or click.echo)(serialized)
    return configuration


def locate_app_artifact(platform: Platform | str, app_output_dir: Path) -> Path:
    """Return the single signed APK or ``.app`` bundle in the app build output.

    Raises:
      AppArtifactNotFoundError: If nothing matches.
      AmbiguousAppArtifactError: If several candidates match.
    """
    resolved_platform = Platform.parse(platform)
    directory = Path(app_output_dir)
    if not directory.is_dir():
        raise AppArtifactNotFoundError(f"App build output directory not found: {directory}")

    match resolved_platform:
        case Platform.ANDROID:
            suffix = ANDROID_PACKAGE_SUFFIX
            candidates = sorted(
                path
                for path in directory.iterdir()
                if path.is_file() and path.name.endswith(suffix)
            )
        case Platform.IOS:
            suffix = IOS_BUNDLE_SUFFIX
            candidates = sorted(
                path for path in directory.iterdir() if path.is_dir() and path.name.endswith(suffix)
            )

    if not candidates:
        raise AppArtifactNotFoundError(
            f"No app artifact ending with '{suffix}' found in {directory.resolve()}"
        )
    if len(candidates) > 1:
        names = ", ".join(path.name for path in candidates)
        raise AmbiguousAppArtifactError(
            f"Expected one app artifact ending with '{suffix}' in {directory.resolve()}, "
            f"found {len(candidates)}: {names}"
        )
    return candidates[0].resolve()


def _load_base_configuration(
    override_path: Path | str | None, discovered_path: Path
) -> TestConfiguration:
    if override_path:
        override = Path(override_path)
        if not override.is_file():
            raise ConfigurationFileNotFoundError(
                f"Could not locate the specified uitest configuration at: '{override}'"
            )
        _LOGGER.info("Using override test configuration %s", override)
        return read_test_configuration(override)
    if discovered_path.is_file():
        _LOGGER.info("Using test configuration found in build output %s", discovered_path)
        return read_test_configuration(discovered_path)
    return TestConfiguration()
