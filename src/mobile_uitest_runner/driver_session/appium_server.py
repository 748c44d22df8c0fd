"""Appium server installation and process lifecycle."""

from __future__ import annotations

import json
import logging
import subprocess
import time
from collections.abc import Callable
from pathlib import Path
from types import TracebackType

import requests

from mobile_uitest_runner.device_provisioning import Platform
from mobile_uitest_runner.process_execution import ToolRunner
from mobile_uitest_runner.toolchain_settings import ToolchainSettings

_LOGGER = logging.getLogger(__name__)

NODE = "node"
NPM = "npm"
APPIUM = "appium"
PIP = "pip3"
IDB_CLIENT_PACKAGE = "fb-idb"
APPIUM_LOG_FILE_NAME = "appium.log"
APPIUM_DRIVERS = {
    Platform.ANDROID: "uiautomator2",
    Platform.IOS: "xcuitest",
}
STARTUP_TIMEOUT_SECONDS = 60.0
STARTUP_POLL_INTERVAL_SECONDS = 0.5
STOP_TIMEOUT_SECONDS = 10.0

HttpGet = Callable[..., requests.Response]


class DriverPrerequisiteError(Exception):
    """Raised when the runtime hosting the automation driver is missing."""


class DriverSessionError(Exception):
    """Raised when the automation driver cannot be installed or started."""


def ensure_node_installed(runner: ToolRunner) -> None:
    if not runner.is_available(NODE):
        raise DriverPrerequisiteError(
            "Your environment does not appear to have Node installed. "
            "This is required to run Appium."
        )


class DriverSession:
    """Handle on a running Appium server.

    ``release`` stops the process the first time it is called and does
    nothing afterwards. Use it as a context manager to bracket a run.
    """

    def __init__(self, process: subprocess.Popen, url: str) -> None:
        self._process = process
        self._released = False
        self.url = url

    @property
    def is_running(self) -> bool:
        return self._process.poll() is None

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        if self._process.poll() is not None:
            return
        _LOGGER.info("Stopping Appium server (pid %s)", self._process.pid)
        self._process.terminate()
        try:
            self._process.wait(timeout=STOP_TIMEOUT_SECONDS)
        except subprocess.TimeoutExpired:
            _LOGGER.warning("Appium server did not stop in time, killing it")
            self._process.kill()
            try:
                self._process.wait(timeout=STOP_TIMEOUT_SECONDS)
            except subprocess.TimeoutExpired:
                _LOGGER.warning(
                    "Appium server (pid %s) is still running after kill", self._process.pid
                )

    def __enter__(self) -> DriverSession:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.release()


class AppiumServerManager:
    """Installs Appium and its platform driver, and starts server sessions."""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        runner: ToolRunner,
        settings: ToolchainSettings,
        *,
        http_get: HttpGet | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        startup_timeout_seconds: float = STARTUP_TIMEOUT_SECONDS,
    ) -> None:
        self._runner = runner
        self._settings = settings
        self._http_get = http_get or requests.get
        self._sleep = sleep
        self._clock = clock
        self._startup_timeout_seconds = startup_timeout_seconds

    def install(self, platform: Platform | str) -> None:
        """Install whatever is missing of Appium, the platform driver and helpers."""
        resolved_platform = Platform.parse(platform)
        if not self._runner.is_available(APPIUM):
            _LOGGER.info("Installing Appium")
            self._runner.run(NPM, ["install", "-g", APPIUM], check_stderr=False)

        driver = APPIUM_DRIVERS[resolved_platform]
        if driver not in self._installed_drivers():
            _LOGGER.info("Installing Appium driver %s", driver)
            self._runner.run(APPIUM, ["driver", "install", driver], check_stderr=False)

        if resolved_platform is Platform.IOS and not self._runner.is_available("idb"):
            _LOGGER.info("Installing the idb client")
            self._runner.run(PIP, ["install", IDB_CLIENT_PACKAGE], check_stderr=False)

    def start(self, working_dir: Path) -> DriverSession:
        """Launch Appium in ``working_dir`` and wait until it answers ``/status``.

        Raises:
          DriverSessionError: If the server exits early or never becomes ready.
        """
        log_path = working_dir / APPIUM_LOG_FILE_NAME
        process = self._runner.spawn(
            APPIUM,
            [
                "--address",
                self._settings.appium_address,
                "--port",
                str(self._settings.appium_port),
            ],
            cwd=working_dir,
            log_path=log_path,
        )
        session = DriverSession(process, self._settings.appium_url)
        deadline = self._clock() + self._startup_timeout_seconds
        while True:
            exit_code = process.poll()
            if exit_code is not None:
                session.release()
                raise DriverSessionError(
                    f"Appium exited immediately with exit code {exit_code}. See {log_path}"
                )
            if self._is_ready(session.url):
                _LOGGER.info("Appium server ready at %s", session.url)
                return session
            if self._clock() >= deadline:
                session.release()
                raise DriverSessionError(
                    f"Appium did not become ready within {self._startup_timeout_seconds:g} seconds."
                )
            self._sleep(STARTUP_POLL_INTERVAL_SECONDS)

    def _installed_drivers(self) -> set[str]:
        output = self._runner.run(
            APPIUM, ["driver", "list", "--installed", "--json"], check_stderr=False
        )
        try:
            drivers = json.loads(output or "{}")
        except json.JSONDecodeError as exc:
            raise DriverSessionError(f"Unable to read installed Appium drivers: {exc}") from exc
        return set(drivers) if isinstance(drivers, dict) else set()

    def _is_ready(self, url: str) -> bool:
        try:
            response = self._http_get(f"{url}/status", timeout=2)
        except requests.RequestException:
            return False
        return response.status_code == 200
