"""iOS simulator control through ``xcrun simctl``."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass

from mobile_uitest_runner.process_execution import ToolRunner

from .device_models import DeviceProvisioningError

_LOGGER = logging.getLogger(__name__)

XCRUN = "xcrun"
_RUNTIME_PATTERN = re.compile(r"SimRuntime\.(?P<os>[A-Za-z]+)-(?P<version>[0-9-]+)$")


@dataclass(frozen=True)
class SimulatorDevice:
    """An available simulator as listed by ``simctl``."""

    name: str
    udid: str
    os_version: str
    state: str = "Shutdown"

    @property
    def version_key(self) -> tuple[int, ...]:
        return tuple(int(part) for part in self.os_version.split(".") if part.isdigit())


class AppleSimulators:
    """Lists, selects and shuts down iOS simulators."""

    def __init__(self, runner: ToolRunner) -> None:
        self._runner = runner

    def shutdown_all(self) -> None:
        _LOGGER.info("Shutting down all running simulators")
        self._runner.run(XCRUN, ["simctl", "shutdown", "all"], check_stderr=False)

    def list_available(self) -> list[SimulatorDevice]:
        output = self._runner.run(XCRUN, ["simctl", "list", "devices", "available", "--json"])
        return parse_simctl_devices(output or "")

    def get_simulator(self) -> SimulatorDevice | None:
        """Pick the first iPhone on the newest iOS runtime.

        Falls back to any simulator on that runtime; returns ``None`` when no
        iOS simulator is available at all.
        """
        simulators = self.list_available()
        if not simulators:
            return None
        newest = max(simulator.version_key for simulator in simulators)
        candidates = [simulator for simulator in simulators if simulator.version_key == newest]
        for simulator in candidates:
            if simulator.name.startswith("iPhone"):
                return simulator
        return candidates[0]


def parse_simctl_devices(output: str) -> list[SimulatorDevice]:
    """Parse ``simctl list devices --json`` output, keeping iOS runtimes only."""
    try:
        document = json.loads(output) if output.strip() else {}
    except json.JSONDecodeError as exc:
        raise DeviceProvisioningError(f"Unable to parse simulator list: {exc}") from exc

    simulators: list[SimulatorDevice] = []
    for runtime, devices in (document.get("devices") or {}).items():
        match = _RUNTIME_PATTERN.search(runtime)
        if match is None or match.group("os") != "iOS":
            continue
        os_version = match.group("version").replace("-", ".")
        for device in devices:
            if device.get("isAvailable", True) is False:
                continue
            simulators.append(
                SimulatorDevice(
                    name=device["name"],
                    udid=device["udid"],
                    os_version=os_version,
                    state=device.get("state", "Shutdown"),
                )
            )
    return simulators
