"""Device provisioning domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DeviceProvisioningError(Exception):
    """Base error for device provisioning failures."""


class DeviceNotFoundError(DeviceProvisioningError):
    """Raised when no usable device or simulator can be selected."""


class DeviceBootTimeoutError(DeviceProvisioningError):
    """Raised when a started emulator does not finish booting in time."""


class PlatformNotSupportedError(ValueError):
    """Raised for platform values other than Android and iOS."""


class Platform(str, Enum):
    """Target platforms a run can address."""

    ANDROID = "Android"
    IOS = "iOS"

    @classmethod
    def parse(cls, value: Platform | str) -> Platform:
        """Return the platform for an exact ``Android``/``iOS`` value."""
        if isinstance(value, Platform):
            return value
        for platform in cls:
            if platform.value == value:
                return platform
        raise PlatformNotSupportedError(
            f"Platform '{value}' is not supported. Use one of: "
            + ", ".join(platform.value for platform in cls)
        )


@dataclass(frozen=True)
class DeviceIdentity:
    """Name, unique id and OS version of the device a run targets."""

    name: str
    udid: str
    os_version: str

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Device name must not be empty.")
        if not self.udid.strip():
            raise ValueError("Device udid must not be empty.")
