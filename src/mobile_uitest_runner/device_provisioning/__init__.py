"""Device provisioning domain exports."""

from .android_sdk import DEFAULT_EMULATOR_NAME, AndroidDevice, AndroidSdk
from .apple_simulators import AppleSimulators, SimulatorDevice
from .device_models import (
    DeviceBootTimeoutError,
    DeviceIdentity,
    DeviceNotFoundError,
    DeviceProvisioningError,
    Platform,
    PlatformNotSupportedError,
)
from .device_provisioner import provision_device

__all__ = [
    "DEFAULT_EMULATOR_NAME",
    "AndroidDevice",
    "AndroidSdk",
    "AppleSimulators",
    "SimulatorDevice",
    "DeviceBootTimeoutError",
    "DeviceIdentity",
    "DeviceNotFoundError",
    "DeviceProvisioningError",
    "Platform",
    "PlatformNotSupportedError",
    "provision_device",
]
