"""CLI orchestration integration tests."""

from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner
from mobile_uitest_runner import cli as cli_module
from mobile_uitest_runner.cli import cli, main
from mobile_uitest_runner.run_configuration import TestConfiguration
from mobile_uitest_runner.run_execution import RunOutcome, WorkingLayout


def _capture_pipeline(monkeypatch) -> list[tuple]:
    captured: list[tuple] = []

    def _fake_pipeline(request, *, working_root: Path, toolchain):
        captured.append((request, working_root, toolchain))
        layout = WorkingLayout(Path(working_root).resolve())
        return RunOutcome(
            layout=layout,
            config_path=layout.uitest_bin / "uitest.json",
            configuration=TestConfiguration(platform=request.platform),
        )

    monkeypatch.setattr(cli_module, "execute_uitest_pipeline", _fake_pipeline)
    return captured


def test_short_options_map_onto_run_request(monkeypatch, tmp_path: Path) -> None:
    captured = _capture_pipeline(monkeypatch)

    exit_code = main(
        [
            "-uitest",
            "tests/App.UITests.csproj",
            "-app",
            "src/App.iOS.csproj",
            "-p",
            "iOS",
            "-c",
            "Debug",
            "-ui-config",
            "ci/uitest.json",
            "--working-dir",
            str(tmp_path / "scratch"),
        ]
    )

    assert exit_code == 0
    request, working_root, _ = captured[0]
    assert request.uitest_project_path == "tests/App.UITests.csproj"
    assert request.app_project_path == "src/App.iOS.csproj"
    assert request.platform == "iOS"
    assert request.configuration == "Debug"
    assert request.uitest_configuration_path == "ci/uitest.json"
    assert working_root == tmp_path / "scratch"


def test_long_options_use_release_and_default_working_directory(monkeypatch) -> None:
    captured = _capture_pipeline(monkeypatch)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        [
            "--uitest-project-path",
            "App.UITests.csproj",
            "--app-project-path",
            "App.Android.csproj",
            "--platform",
            "Android",
        ],
    )

    assert result.exit_code == 0
    request, working_root, toolchain = captured[0]
    assert request.configuration == "Release"
    assert request.uitest_configuration_path is None
    assert working_root == Path("UITest")
    assert toolchain.appium_port > 0


def test_toolchain_is_loaded_from_environment(monkeypatch) -> None:
    captured = _capture_pipeline(monkeypatch)
    monkeypatch.setenv("UITEST_APPIUM_PORT", "4800")

    exit_code = main(["-uitest", "T.csproj", "-app", "A.csproj", "-p", "Android"])

    assert exit_code == 0
    assert captured[0][2].appium_port == 4800
