"""Driver session domain exports."""

from .appium_server import (
    APPIUM_DRIVERS,
    AppiumServerManager,
    DriverPrerequisiteError,
    DriverSession,
    DriverSessionError,
    ensure_node_installed,
)

__all__ = [
    "APPIUM_DRIVERS",
    "AppiumServerManager",
    "DriverPrerequisiteError",
    "DriverSession",
    "DriverSessionError",
    "ensure_node_installed",
]
