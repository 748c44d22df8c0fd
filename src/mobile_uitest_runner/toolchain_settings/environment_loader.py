"""Toolchain settings loader reading process environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from .toolchain_models import (
    DEFAULT_ANDROID_API_LEVEL,
    DEFAULT_APPIUM_ADDRESS,
    DEFAULT_APPIUM_PORT,
    DEFAULT_EMULATOR_BOOT_TIMEOUT_SECONDS,
    ToolchainSettings,
)

SDK_ROOT_VARIABLES = ("ANDROID_SDK_ROOT", "ANDROID_HOME")


class ToolchainSettingsError(Exception):
    """Raised when toolchain environment variables are invalid."""


def load_toolchain_settings(environ: Mapping[str, str] | None = None) -> ToolchainSettings:
    """Build toolchain settings from environment variables.

    Recognized variables:
      ANDROID_SDK_ROOT / ANDROID_HOME: Android SDK location (first one set wins).
      UITEST_APPIUM_ADDRESS: Address the Appium server binds to.
      UITEST_APPIUM_PORT: Port the Appium server listens on.
      UITEST_ANDROID_API_LEVEL: API level used when an emulator must be created.
      UITEST_EMULATOR_BOOT_TIMEOUT: Seconds to wait for a started emulator.
    """
    env = os.environ if environ is None else environ
    return ToolchainSettings(
        android_sdk_root=_android_sdk_root(env),
        appium_address=_optional_string(env.get("UITEST_APPIUM_ADDRESS"))
        or DEFAULT_APPIUM_ADDRESS,
        appium_port=_positive_int(env, "UITEST_APPIUM_PORT", DEFAULT_APPIUM_PORT),
        android_api_level=_positive_int(
            env, "UITEST_ANDROID_API_LEVEL", DEFAULT_ANDROID_API_LEVEL
        ),
        emulator_boot_timeout_seconds=_positive_int(
            env, "UITEST_EMULATOR_BOOT_TIMEOUT", DEFAULT_EMULATOR_BOOT_TIMEOUT_SECONDS
        ),
    )


def _android_sdk_root(env: Mapping[str, str]) -> Path | None:
    for variable in SDK_ROOT_VARIABLES:
        value = _optional_string(env.get(variable))
        if value:
            return Path(value).expanduser()
    return None


def _optional_string(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = _optional_string(env.get(name))
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ToolchainSettingsError(f"{name} must be an integer.") from exc
    if value <= 0:
        raise ToolchainSettingsError(f"{name} must be greater than zero.")
    return value
