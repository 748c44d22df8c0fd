"""Run configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

CONFIG_FILE_NAME = "uitest.json"


@dataclass
class TestConfiguration:  # pylint: disable=too-many-instance-attributes
    """Run descriptor handed to the UI-test project through ``uitest.json``.

    ``extra`` holds top-level fields this tool does not interpret; they are
    written back unchanged.
    """

    __test__ = False

    platform: str | None = None
    app_path: str | None = None
    device_name: str | None = None
    udid: str | None = None
    os_version: str | None = None
    screenshots_path: str | None = None
    capabilities: dict[str, str] | None = None
    settings: dict[str, str] | None = None
    extra: dict[str, Any] = field(default_factory=dict)
