"""Toolchain settings domain exports."""

from .environment_loader import ToolchainSettingsError, load_toolchain_settings
from .toolchain_models import (
    DEFAULT_ANDROID_API_LEVEL,
    DEFAULT_APPIUM_ADDRESS,
    DEFAULT_APPIUM_PORT,
    DEFAULT_EMULATOR_BOOT_TIMEOUT_SECONDS,
    ToolchainSettings,
)

__all__ = [
    "DEFAULT_ANDROID_API_LEVEL",
    "DEFAULT_APPIUM_ADDRESS",
    "DEFAULT_APPIUM_PORT",
    "DEFAULT_EMULATOR_BOOT_TIMEOUT_SECONDS",
    "ToolchainSettings",
    "ToolchainSettingsError",
    "load_toolchain_settings",
]
