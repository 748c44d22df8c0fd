"""Device provisioning service producing the identity of the device under test."""

from __future__ import annotations

import logging

from .android_sdk import DEFAULT_EMULATOR_NAME, AndroidSdk
from .apple_simulators import AppleSimulators
from .device_models import DeviceIdentity, DeviceNotFoundError, Platform

_LOGGER = logging.getLogger(__name__)


def provision_device(
    platform: Platform | str,
    *,
    android: AndroidSdk,
    apple: AppleSimulators,
    emulator_boot_timeout_seconds: float,
) -> DeviceIdentity:
    """Ensure a usable device exists for the platform and return its identity.

    Raises:
      PlatformNotSupportedError: For platforms other than Android and iOS.
      DeviceNotFoundError: If no device can be selected.
    """
    match Platform.parse(platform):
        case Platform.ANDROID:
            return _provision_android(android, emulator_boot_timeout_seconds)
        case Platform.IOS:
            return _provision_ios(apple)


def _provision_android(sdk: AndroidSdk, boot_timeout_seconds: float) -> DeviceIdentity:
    sdk.install_web_driver()

    # An attached device or running emulator wins over booting a new one.
    if not sdk.device_is_connected():
        sdk.ensure_sdk_installed(sdk.api_level)
        if DEFAULT_EMULATOR_NAME not in sdk.list_emulators():
            sdk.create_emulator(DEFAULT_EMULATOR_NAME, sdk.api_level)
        sdk.start_emulator(DEFAULT_EMULATOR_NAME, timeout_seconds=boot_timeout_seconds)

    devices = sdk.list_devices()
    if not devices:
        raise DeviceNotFoundError("Unable to locate a connected Android device.")
    device = devices[0]
    _LOGGER.info("Using Android device %s (%s)", device.name, device.serial)
    return DeviceIdentity(name=device.name, udid=device.serial, os_version=device.sdk_version)


def _provision_ios(simulators: AppleSimulators) -> DeviceIdentity:
    simulators.shutdown_all()
    simulator = simulators.get_simulator()
    if simulator is None:
        raise DeviceNotFoundError("Unable to locate an iOS simulator.")
    _LOGGER.info("Using iOS simulator %s (%s)", simulator.name, simulator.udid)
    return DeviceIdentity(
        name=simulator.name, udid=simulator.udid, os_version=simulator.os_version
    )
