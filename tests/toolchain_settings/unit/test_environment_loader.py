"""Tests for toolchain settings loaded from the environment."""

from __future__ import annotations

from pathlib import Path

import pytest
from mobile_uitest_runner.toolchain_settings import (
    DEFAULT_ANDROID_API_LEVEL,
    DEFAULT_APPIUM_PORT,
    ToolchainSettingsError,
    load_toolchain_settings,
)


def test_defaults_apply_when_environment_is_empty() -> None:
    settings = load_toolchain_settings({})

    assert settings.android_sdk_root is None
    assert settings.appium_port == DEFAULT_APPIUM_PORT
    assert settings.android_api_level == DEFAULT_ANDROID_API_LEVEL
    assert settings.appium_url == "http://127.0.0.1:4723"
    assert settings.android_tool("platform-tools", "adb") == "adb"


def test_android_sdk_root_prefers_android_sdk_root_over_android_home(tmp_path: Path) -> None:
    sdk_root = tmp_path / "sdk"
    settings = load_toolchain_settings(
        {"ANDROID_SDK_ROOT": str(sdk_root), "ANDROID_HOME": str(tmp_path / "home")}
    )

    assert settings.android_sdk_root == sdk_root
    expected_adb = str(sdk_root / "platform-tools" / "adb")
    assert settings.android_tool("platform-tools", "adb") == expected_adb


def test_android_home_is_used_when_sdk_root_is_blank(tmp_path: Path) -> None:
    settings = load_toolchain_settings({"ANDROID_SDK_ROOT": "  ", "ANDROID_HOME": str(tmp_path)})

    assert settings.android_sdk_root == tmp_path


def test_numeric_overrides_are_parsed() -> None:
    settings = load_toolchain_settings(
        {
            "UITEST_APPIUM_ADDRESS": "0.0.0.0",
            "UITEST_APPIUM_PORT": "4800",
            "UITEST_ANDROID_API_LEVEL": "33",
            "UITEST_EMULATOR_BOOT_TIMEOUT": "90",
        }
    )

    assert settings.appium_url == "http://0.0.0.0:4800"
    assert settings.android_api_level == 33
    assert settings.emulator_boot_timeout_seconds == 90


@pytest.mark.parametrize("raw", ["abc", "0", "-5"])
def test_invalid_port_is_rejected(raw: str) -> None:
    with pytest.raises(ToolchainSettingsError, match="UITEST_APPIUM_PORT"):
        load_toolchain_settings({"UITEST_APPIUM_PORT": raw})
