"""Tests for repository toolchain baseline configuration."""

from __future__ import annotations

import tomllib
from pathlib import Path


def _pyproject() -> dict:
    pyproject_path = Path(__file__).resolve().parents[3] / "pyproject.toml"
    return tomllib.loads(pyproject_path.read_text(encoding="utf-8"))


def test_pyproject_declares_runtime_stack_and_python_311_tooling() -> None:
    pyproject = _pyproject()
    declared = {dependency.split(">=")[0] for dependency in pyproject["project"]["dependencies"]}
    dev_tools = {dependency.split(">=")[0] for dependency in pyproject["dependency-groups"]["dev"]}

    assert {"click", "PyYAML", "requests"} <= declared
    assert {"pytest", "ruff", "mypy"} <= dev_tools
    assert pyproject["project"]["scripts"]["mobile-uitest"] == "mobile_uitest_runner.cli:main"
    assert pyproject["project"]["requires-python"] == ">=3.11"
    assert pyproject["tool"]["ruff"]["target-version"] == "py311"
    assert pyproject["tool"]["mypy"]["python_version"] == "3.11"
    assert pyproject["build-system"]["build-backend"] == "hatchling.build"
