"""Tests for the platform-dispatched device provisioning service."""

from __future__ import annotations

import pytest
from mobile_uitest_runner.device_provisioning import (
    DEFAULT_EMULATOR_NAME,
    AndroidDevice,
    DeviceIdentity,
    DeviceNotFoundError,
    Platform,
    PlatformNotSupportedError,
    SimulatorDevice,
    provision_device,
)


class _FakeAndroidSdk:
    def __init__(self, *, connected: bool, emulators: list[str] | None = None) -> None:
        self.connected = connected
        self.emulators = emulators or []
        self.api_level = 29
        self.events: list[str] = []
        self.devices = [
            AndroidDevice(serial="emulator-5554", name="sdk_gphone64", sdk_version="29")
        ]

    def install_web_driver(self) -> None:
        self.events.append("install_web_driver")

    def device_is_connected(self) -> bool:
        return self.connected

    def ensure_sdk_installed(self, api_level: int) -> None:
        self.events.append(f"ensure_sdk:{api_level}")

    def list_emulators(self) -> list[str]:
        return self.emulators

    def create_emulator(self, name: str, api_level: int) -> None:
        self.events.append(f"create:{name}")

    def start_emulator(self, name: str, *, timeout_seconds: float) -> str:
        self.events.append(f"start:{name}")
        self.connected = True
        return "emulator-5554"

    def list_devices(self) -> list[AndroidDevice]:
        return self.devices if self.connected else []


class _FakeSimulators:
    def __init__(self, simulator: SimulatorDevice | None) -> None:
        self.simulator = simulator
        self.events: list[str] = []

    def shutdown_all(self) -> None:
        self.events.append("shutdown_all")

    def get_simulator(self) -> SimulatorDevice | None:
        self.events.append("get_simulator")
        return self.simulator


def _provision(platform, android, apple) -> DeviceIdentity:
    return provision_device(platform, android=android, apple=apple, emulator_boot_timeout_seconds=5)


def test_android_uses_connected_device_without_booting_emulator() -> None:
    android = _FakeAndroidSdk(connected=True)

    identity = _provision(Platform.ANDROID, android, _FakeSimulators(None))

    assert identity == DeviceIdentity(name="sdk_gphone64", udid="emulator-5554", os_version="29")
    assert android.events == ["install_web_driver"]


def test_android_creates_and_starts_default_emulator_when_nothing_is_connected() -> None:
    android = _FakeAndroidSdk(connected=False)

    identity = _provision("Android", android, _FakeSimulators(None))

    assert identity.udid == "emulator-5554"
    assert android.events == [
        "install_web_driver",
        "ensure_sdk:29",
        f"create:{DEFAULT_EMULATOR_NAME}",
        f"start:{DEFAULT_EMULATOR_NAME}",
    ]


def test_android_reuses_existing_emulator_image() -> None:
    android = _FakeAndroidSdk(connected=False, emulators=[DEFAULT_EMULATOR_NAME])

    _provision(Platform.ANDROID, android, _FakeSimulators(None))

    assert f"create:{DEFAULT_EMULATOR_NAME}" not in android.events
    assert f"start:{DEFAULT_EMULATOR_NAME}" in android.events


def test_android_raises_device_not_found_when_no_device_appears() -> None:
    android = _FakeAndroidSdk(connected=True)
    android.devices = []

    with pytest.raises(DeviceNotFoundError):
        _provision(Platform.ANDROID, android, _FakeSimulators(None))


def test_ios_shuts_down_simulators_before_selecting_one() -> None:
    simulators = _FakeSimulators(
        SimulatorDevice(name="iPhone 15", udid="UDID-15", os_version="17.2")
    )

    identity = _provision(Platform.IOS, _FakeAndroidSdk(connected=True), simulators)

    assert identity == DeviceIdentity(name="iPhone 15", udid="UDID-15", os_version="17.2")
    assert simulators.events == ["shutdown_all", "get_simulator"]


def test_ios_raises_device_not_found_without_simulator() -> None:
    with pytest.raises(DeviceNotFoundError, match="iOS simulator"):
        _provision(Platform.IOS, _FakeAndroidSdk(connected=True), _FakeSimulators(None))


@pytest.mark.parametrize("value", ["Windows", "android", ""])
def test_unsupported_platform_is_rejected(value: str) -> None:
    android = _FakeAndroidSdk(connected=True)

    with pytest.raises(PlatformNotSupportedError):
        _provision(value, android, _FakeSimulators(None))

    assert android.events == []


@pytest.mark.parametrize(
    ("name", "udid"),
    [("", "emulator-5554"), ("Pixel", ""), ("   ", "x")],
)
def test_device_identity_rejects_empty_name_or_udid(name: str, udid: str) -> None:
    with pytest.raises(ValueError):
        DeviceIdentity(name=name, udid=udid, os_version="29")
