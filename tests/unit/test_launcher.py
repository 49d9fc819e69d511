"""
Unit tests for executable resolution and process launching.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from dotnet_metrics.core.exceptions import ExternalToolExecutionError, ToolNotFoundError
from dotnet_metrics.services.launcher import (
    EXPORT_PATH,
    BundledToolExtractor,
    LauncherDeps,
    ProcessLauncher,
    check_executable,
    resolve_executable,
)


class StaticExtractor:
    """Extractor returning a fixed directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self.calls = 0

    def extract(self) -> Path:
        self.calls += 1
        return self.directory


class TestResolveExecutable:
    """Tests for resolve_executable()."""

    def test_configured_directory(self, make_settings, tool_dir: Path) -> None:
        extractor = StaticExtractor(tool_dir)
        settings = make_settings(sourcemonitor_directory=tool_dir)

        executable = resolve_executable(settings, extractor)

        assert executable == (tool_dir / "SourceMonitor.exe").resolve()
        assert extractor.calls == 0

    def test_extracts_when_unset(self, make_settings, tool_dir: Path) -> None:
        extractor = StaticExtractor(tool_dir)

        executable = resolve_executable(make_settings(), extractor)

        assert executable.name == "SourceMonitor.exe"
        assert extractor.calls == 1

    def test_extracted_folder_without_executable(self, make_settings, tmp_path: Path) -> None:
        empty = tmp_path / "extracted"
        empty.mkdir()

        with pytest.raises(ToolNotFoundError):
            resolve_executable(make_settings(), StaticExtractor(empty))

    def test_custom_executable_name(self, make_settings, tool_dir: Path) -> None:
        settings = make_settings(sourcemonitor_directory=tool_dir, sourcemonitor_executable="sm.exe")

        with pytest.raises(ToolNotFoundError) as excinfo:
            resolve_executable(settings, StaticExtractor(tool_dir))

        assert "sm.exe" in str(excinfo.value)

    def test_directory_is_not_an_executable(self, tmp_path: Path) -> None:
        (tmp_path / "SourceMonitor.exe").mkdir()

        with pytest.raises(ToolNotFoundError):
            check_executable(tmp_path / "SourceMonitor.exe")


class TestBundledToolExtractor:
    """Tests for BundledToolExtractor."""

    def test_copies_bundled_folder(self, tmp_path: Path) -> None:
        target = BundledToolExtractor(tmp_path).extract()

        assert target == tmp_path / EXPORT_PATH
        assert (target / "README.txt").is_file()

    def test_bundle_without_executable(self, make_settings, tmp_path: Path) -> None:
        extractor = BundledToolExtractor(tmp_path)

        with pytest.raises(ToolNotFoundError):
            resolve_executable(make_settings(), extractor)


class TestProcessLauncher:
    """Tests for ProcessLauncher.launch()."""

    def test_success(self, tool_dir: Path, fake_run) -> None:
        launcher = ProcessLauncher(timeout_seconds=30, deps=LauncherDeps(run=fake_run))
        executable = tool_dir / "SourceMonitor.exe"

        completed = launcher.launch(executable, ["/C", "command.xml"], "Metrics")

        assert completed.returncode == 0
        assert fake_run.calls == [[str(executable.resolve()), "/C", "command.xml"]]
        assert fake_run.kwargs[0]["timeout"] == 30

    def test_non_zero_exit_is_wrapped(self, tool_dir: Path, fake_run) -> None:
        fake_run.returncode = 3
        fake_run.stderr = "license expired"
        launcher = ProcessLauncher(deps=LauncherDeps(run=fake_run))

        with pytest.raises(ExternalToolExecutionError) as excinfo:
            launcher.launch(tool_dir / "SourceMonitor.exe", ["/C", "x.xml"], "Metrics")

        error = excinfo.value
        assert error.label == "Metrics"
        assert error.exit_status == 3
        assert isinstance(error.__cause__, subprocess.CalledProcessError)
        assert error.__cause__.returncode == 3
        assert "license expired" in str(error)

    def test_attempts_bound_launches(self, tool_dir: Path, fake_run) -> None:
        fake_run.returncode = 1
        launcher = ProcessLauncher(deps=LauncherDeps(run=fake_run))

        with pytest.raises(ExternalToolExecutionError):
            launcher.launch(tool_dir / "SourceMonitor.exe", [], "Metrics", attempts=2)

        assert len(fake_run.calls) == 2

    def test_default_launches_once(self, tool_dir: Path, fake_run) -> None:
        fake_run.returncode = 1
        launcher = ProcessLauncher(deps=LauncherDeps(run=fake_run))

        with pytest.raises(ExternalToolExecutionError):
            launcher.launch(tool_dir / "SourceMonitor.exe", [], "Metrics")

        assert len(fake_run.calls) == 1

    def test_retry_stops_at_first_success(self, tool_dir: Path) -> None:
        statuses = iter([1, 0, 0])
        calls: list[list[str]] = []

        def run(command, **kwargs):
            calls.append(command)
            return subprocess.CompletedProcess(command, next(statuses), "", "")

        launcher = ProcessLauncher(deps=LauncherDeps(run=run))

        completed = launcher.launch(tool_dir / "SourceMonitor.exe", [], "Metrics", attempts=3)

        assert completed.returncode == 0
        assert len(calls) == 2

    def test_timeout_is_wrapped(self, tool_dir: Path) -> None:
        def run(command, **kwargs):
            raise subprocess.TimeoutExpired(command, kwargs["timeout"])

        launcher = ProcessLauncher(timeout_seconds=5, deps=LauncherDeps(run=run))

        with pytest.raises(ExternalToolExecutionError) as excinfo:
            launcher.launch(tool_dir / "SourceMonitor.exe", [], "Metrics")

        assert isinstance(excinfo.value.__cause__, subprocess.TimeoutExpired)

    def test_os_error_is_wrapped(self, tool_dir: Path) -> None:
        def run(command, **kwargs):
            raise OSError(8, "Exec format error")

        launcher = ProcessLauncher(deps=LauncherDeps(run=run))

        with pytest.raises(ExternalToolExecutionError) as excinfo:
            launcher.launch(tool_dir / "SourceMonitor.exe", [], "Metrics")

        assert isinstance(excinfo.value.__cause__, OSError)

    def test_missing_executable_never_launched(self, tmp_path: Path, fake_run) -> None:
        launcher = ProcessLauncher(deps=LauncherDeps(run=fake_run))

        with pytest.raises(ToolNotFoundError):
            launcher.launch(tmp_path / "SourceMonitor.exe", [], "Metrics", attempts=3)

        assert fake_run.calls == []

    def test_invalid_attempts(self, tool_dir: Path, fake_run) -> None:
        launcher = ProcessLauncher(deps=LauncherDeps(run=fake_run))

        with pytest.raises(ValueError):
            launcher.launch(tool_dir / "SourceMonitor.exe", [], "Metrics", attempts=0)

    def test_real_process_exit_status(self, tmp_path: Path) -> None:
        failing = tmp_path / "failing-tool"
        failing.write_text("#!/bin/sh\necho boom >&2\nexit 4\n")
        failing.chmod(0o755)

        with pytest.raises(ExternalToolExecutionError) as excinfo:
            ProcessLauncher(timeout_seconds=30).launch(failing, [], "Metrics")

        assert excinfo.value.exit_status == 4
        assert "boom" in str(excinfo.value)
