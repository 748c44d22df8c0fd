"""Permissive reader and stable writer for ``uitest.json`` documents.

Reading accepts what hand-edited JSON tends to contain: ``//`` and ``/* */``
comments, trailing commas and field names in any letter case. Absent fields
stay ``None`` rather than raising.

Recognized fields and how the synthesizer treats them:

  platform, appPath                   overwritten on every run
  deviceName, udid, osVersion         overwritten on every run
  screenshotsPath                     defaulted when absent
  capabilities, settings              defaulted to an empty mapping when absent
  anything else                       passed through from the base document

Writing escapes the characters YAML would reject or fold, and numbers such as
``1e2`` read as floats the way JSON reads them, so a written document reads
back to the same configuration.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .configuration_models import TestConfiguration

_ATTRIBUTE_BY_JSON_NAME = {
    "platform": "platform",
    "appPath": "app_path",
    "deviceName": "device_name",
    "udid": "udid",
    "osVersion": "os_version",
    "screenshotsPath": "screenshots_path",
    "capabilities": "capabilities",
    "settings": "settings",
}
_JSON_NAME_BY_LOWERED = {name.lower(): name for name in _ATTRIBUTE_BY_JSON_NAME}
_MAPPING_FIELDS = frozenset({"capabilities", "settings"})
# Characters YAML refuses or reads as line breaks when they appear unescaped.
_YAML_UNSAFE_CHARACTERS = re.compile("[\x7f-\x9f\u2028\u2029\ud800-\udfff\ufeff\ufffe\uffff]")


class _JsonDocumentLoader(yaml.SafeLoader):  # pylint: disable=too-many-ancestors
    """Safe loader that also reads JSON exponent numbers such as ``1e2`` as floats."""


_JsonDocumentLoader.add_implicit_resolver(
    "tag:yaml.org,2002:float",
    re.compile(r"^-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?[eE][-+]?[0-9]+$"),
    list("-0123456789"),
)


class ConfigurationDocumentError(Exception):
    """Raised when a test configuration document cannot be parsed."""


def read_test_configuration(path: Path | str) -> TestConfiguration:
    """Parse the test configuration stored at ``path``."""
    source = Path(path)
    return parse_test_configuration(source.read_text(encoding="utf-8"), source=str(source))


def parse_test_configuration(text: str, *, source: str = "<string>") -> TestConfiguration:
    """Parse a test configuration document.

    Raises:
      ConfigurationDocumentError: If the text is not a mapping or a recognized
        field has an unusable value.
    """
    try:
        parsed = yaml.load(strip_json_comments(text), Loader=_JsonDocumentLoader)
    except yaml.YAMLError as exc:
        raise ConfigurationDocumentError(
            f"Failed to parse test configuration {source}: {exc}"
        ) from exc

    if parsed is None:
        parsed = {}
    if not isinstance(parsed, Mapping):
        raise ConfigurationDocumentError(f"Test configuration root must be a mapping: {source}")

    configuration = TestConfiguration()
    for key, value in parsed.items():
        json_name = _JSON_NAME_BY_LOWERED.get(str(key).lower())
        if json_name is None:
            configuration.extra[str(key)] = value
            continue
        attribute = _ATTRIBUTE_BY_JSON_NAME[json_name]
        if attribute in _MAPPING_FIELDS:
            setattr(configuration, attribute, _string_mapping(value, json_name))
        else:
            setattr(configuration, attribute, _optional_text(value, json_name))
    return configuration


def serialize_test_configuration(configuration: TestConfiguration) -> str:
    """Render the configuration as indented JSON with camel-cased field names.

    Fields holding ``None`` are omitted. Characters the reader would reject or
    fold are written as ``\\uXXXX`` escapes so the file reads back unchanged.
    """
    document: dict[str, Any] = {}
    for json_name, attribute in _ATTRIBUTE_BY_JSON_NAME.items():
        value = getattr(configuration, attribute)
        if value is not None:
            document[json_name] = value
    for key, value in configuration.extra.items():
        if value is not None and key not in document:
            document[key] = value
    text = json.dumps(document, indent=2, ensure_ascii=False)
    return _YAML_UNSAFE_CHARACTERS.sub(lambda match: f"\\u{ord(match.group()):04x}", text)


def strip_json_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments and tabs outside string literals."""
    result: list[str] = []
    index = 0
    length = len(text)
    in_string = False
    while index < length:
        char = text[index]
        if in_string:
            result.append(char)
            if char == "\\" and index + 1 < length:
                result.append(text[index + 1])
                index += 2
                continue
            if char == '"':
                in_string = False
            index += 1
            continue
        if char == '"':
            in_string = True
            result.append(char)
            index += 1
        elif text.startswith("//", index):
            newline = text.find("\n", index)
            index = length if newline == -1 else newline
        elif text.startswith("/*", index):
            end = text.find("*/", index + 2)
            if end == -1:
                raise ConfigurationDocumentError(
                    "Unterminated block comment in test configuration."
                )
            result.append(" ")
            index = end + 2
        elif char == "\t":
            result.append(" ")
            index += 1
        else:
            result.append(char)
            index += 1
    return "".join(result)


def _optional_text(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, (Mapping, list)):
        raise ConfigurationDocumentError(f"{field_name} must be a string.")
    return _scalar_text(value)


def _string_mapping(value: Any, field_name: str) -> dict[str, str] | None:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ConfigurationDocumentError(f"{field_name} must be a mapping of strings.")
    mapping: dict[str, str] = {}
    for key, item in value.items():
        if isinstance(item, (Mapping, list)):
            raise ConfigurationDocumentError(f"{field_name}.{key} must be a string.")
        mapping[str(key)] = "" if item is None else _scalar_text(item)
    return mapping


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
