"""Toolchain domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_APPIUM_ADDRESS = "127.0.0.1"
DEFAULT_APPIUM_PORT = 4723
DEFAULT_ANDROID_API_LEVEL = 29
DEFAULT_EMULATOR_BOOT_TIMEOUT_SECONDS = 300


@dataclass(frozen=True)
class ToolchainSettings:
    """Locations and tunables for the external SDK tools."""

    android_sdk_root: Path | None = None
    appium_address: str = DEFAULT_APPIUM_ADDRESS
    appium_port: int = DEFAULT_APPIUM_PORT
    android_api_level: int = DEFAULT_ANDROID_API_LEVEL
    emulator_boot_timeout_seconds: int = DEFAULT_EMULATOR_BOOT_TIMEOUT_SECONDS

    @property
    def appium_url(self) -> str:
        return f"http://{self.appium_address}:{self.appium_port}"

    def android_tool(self, *relative_parts: str) -> str:
        """Return an SDK tool path, or its bare name when no SDK root is configured."""
        if self.android_sdk_root is None:
            return relative_parts[-1]
        return str(self.android_sdk_root.joinpath(*relative_parts))
