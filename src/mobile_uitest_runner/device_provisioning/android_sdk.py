"""Android SDK tooling: adb, emulator, avdmanager and sdkmanager."""

from __future__ import annotations

import logging
import platform as host_platform
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from mobile_uitest_runner.process_execution import ToolExecutionError, ToolRunner
from mobile_uitest_runner.toolchain_settings import ToolchainSettings

from .device_models import DeviceBootTimeoutError

_LOGGER = logging.getLogger(__name__)

DEFAULT_EMULATOR_NAME = "uitest_emulator_sdk"
DEFAULT_DEVICE_PROFILE = "pixel_xl"
WEB_DRIVER_PACKAGE = "extras;google;webdriver"
BOOT_POLL_INTERVAL_SECONDS = 5.0
_LICENSE_ANSWERS = "y\n" * 20


@dataclass(frozen=True)
class AndroidDevice:
    """A device reported by ``adb devices`` in the ``device`` state."""

    serial: str
    name: str
    sdk_version: str


class AndroidSdk:
    """Thin wrapper over the Android SDK command line tools."""

    def __init__(
        self,
        runner: ToolRunner,
        settings: ToolchainSettings,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._runner = runner
        self._settings = settings
        self._sleep = sleep
        self._clock = clock

    @property
    def api_level(self) -> int:
        return self._settings.android_api_level

    @property
    def adb(self) -> str:
        return self._settings.android_tool("platform-tools", "adb")

    @property
    def emulator(self) -> str:
        return self._settings.android_tool("emulator", "emulator")

    @property
    def sdkmanager(self) -> str:
        return self._settings.android_tool("cmdline-tools", "latest", "bin", "sdkmanager")

    @property
    def avdmanager(self) -> str:
        return self._settings.android_tool("cmdline-tools", "latest", "bin", "avdmanager")

    def system_image(self, api_level: int) -> str:
        return f"system-images;android-{api_level};google_apis_playstore;{_host_abi()}"

    def install_web_driver(self) -> None:
        self.ensure_packages_installed((WEB_DRIVER_PACKAGE,))

    def ensure_sdk_installed(self, api_level: int) -> None:
        self.ensure_packages_installed(
            (f"platforms;android-{api_level}", self.system_image(api_level))
        )

    def installed_packages(self) -> set[str]:
        output = self._runner.run(self.sdkmanager, ["--list_installed"], check_stderr=False)
        packages: set[str] = set()
        for line in (output or "").splitlines():
            if "|" not in line:
                continue
            package = line.split("|", 1)[0].strip()
            if package and not package.startswith("-") and package != "Path":
                packages.add(package)
        return packages

    def ensure_packages_installed(self, packages: Sequence[str]) -> None:
        installed = self.installed_packages()
        missing = [package for package in packages if package not in installed]
        if not missing:
            return
        _LOGGER.info("Installing Android SDK packages: %s", ", ".join(missing))
        self._runner.run(
            self.sdkmanager,
            ["--install", *missing],
            check_stderr=False,
            stdin_text=_LICENSE_ANSWERS,
        )

    def list_devices(self) -> list[AndroidDevice]:
        """Return attached devices with their SDK version, in ``adb`` order."""
        return [
            AndroidDevice(
                serial=serial,
                name=model or serial,
                sdk_version=self._getprop(serial, "ro.build.version.sdk"),
            )
            for serial, model in self._attached_devices()
        ]

    def device_is_connected(self) -> bool:
        return bool(self._attached_devices())

    def list_emulators(self) -> list[str]:
        output = self._runner.run(self.emulator, ["-list-avds"], check_stderr=False)
        return [line.strip() for line in (output or "").splitlines() if line.strip()]

    def create_emulator(self, name: str, api_level: int) -> None:
        _LOGGER.info("Creating Android virtual device %s (API %d)", name, api_level)
        self._runner.run(
            self.avdmanager,
            [
                "create",
                "avd",
                "--name",
                name,
                "--package",
                self.system_image(api_level),
                "--device",
                DEFAULT_DEVICE_PROFILE,
                "--force",
            ],
            check_stderr=False,
            stdin_text="no\n",
        )

    def start_emulator(self, name: str, *, timeout_seconds: float) -> str:
        """Launch an emulator and block until it reports a completed boot.

        Returns:
          The serial of the booted device.

        Raises:
          DeviceBootTimeoutError: If no device finishes booting in time.
        """
        self._runner.spawn(self.emulator, ["-avd", name, "-no-snapshot-save", "-no-boot-anim"])
        return self.wait_for_boot(timeout_seconds=timeout_seconds)

    def wait_for_boot(self, *, timeout_seconds: float) -> str:
        deadline = self._clock() + timeout_seconds
        while True:
            for serial, _ in self._attached_devices():
                if self._boot_completed(serial):
                    _LOGGER.info("Device %s finished booting", serial)
                    return serial
            if self._clock() >= deadline:
                raise DeviceBootTimeoutError(
                    f"Android emulator did not finish booting within {timeout_seconds:g} seconds."
                )
            self._sleep(BOOT_POLL_INTERVAL_SECONDS)

    def _attached_devices(self) -> list[tuple[str, str | None]]:
        output = self._runner.run(self.adb, ["devices", "-l"], check_stderr=False)
        return parse_adb_devices(output or "")

    def _boot_completed(self, serial: str) -> bool:
        try:
            return self._getprop(serial, "sys.boot_completed") == "1"
        except ToolExecutionError as exc:
            _LOGGER.debug("Boot status of %s unavailable yet: %s", serial, exc)
            return False

    def _getprop(self, serial: str, name: str) -> str:
        output = self._runner.run(
            self.adb, ["-s", serial, "shell", "getprop", name], check_stderr=False
        )
        return (output or "").strip()


def parse_adb_devices(output: str) -> list[tuple[str, str | None]]:
    """Parse ``adb devices -l`` output into ``(serial, model)`` pairs.

    Only entries in the ``device`` state are returned; ``offline`` and
    ``unauthorized`` devices cannot run tests.
    """
    devices: list[tuple[str, str | None]] = []
    for line in output.splitlines():
        parts = line.split()
        if len(parts) < 2 or parts[1] != "device":
            continue
        attributes = dict(part.split(":", 1) for part in parts[2:] if ":" in part)
        devices.append((parts[0], attributes.get("model")))
    return devices


def _host_abi() -> str:
    if host_platform.machine().lower() in {"arm64", "aarch64"}:
        return "arm64-v8a"
    return "x86_64"
