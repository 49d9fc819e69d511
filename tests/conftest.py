"""
Pytest configuration and fixtures.

Provides shared fixtures and configuration for all tests.
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from dotnet_metrics.core.config import Settings
from dotnet_metrics.domain.models import Project, Workspace


class FakeRun:
    """Records subprocess invocations and answers with a fixed exit status."""

    def __init__(self, returncode: int = 0, stderr: str = "") -> None:
        self.returncode = returncode
        self.stderr = stderr
        self.calls: list[list[str]] = []
        self.kwargs: list[dict[str, Any]] = []

    def __call__(self, command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.calls.append(list(command))
        self.kwargs.append(kwargs)
        return subprocess.CompletedProcess(command, self.returncode, "", self.stderr)


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """Create a solution tree with projects A, B and C."""
    root = tmp_path / "w"
    for name in ("A", "B", "C"):
        (root / name).mkdir(parents=True)
    return root


@pytest.fixture
def workspace(workspace_root: Path) -> Workspace:
    """A (app), B (test) and C (app) under the workspace root."""
    return Workspace(
        name="Sample",
        base_directory=workspace_root,
        projects=(
            Project(name="A", directory=workspace_root / "A"),
            Project(name="B", directory=workspace_root / "B", is_test=True),
            Project(name="C", directory=workspace_root / "C"),
        ),
    )


@pytest.fixture
def tool_dir(tmp_path: Path) -> Path:
    """Directory holding an executable named like SourceMonitor."""
    directory = tmp_path / "tool"
    directory.mkdir()
    executable = directory / "SourceMonitor.exe"
    executable.write_text("#!/bin/sh\nexit 0\n")
    executable.chmod(0o755)
    return directory


@pytest.fixture
def make_settings(tmp_path: Path) -> Callable[..., Settings]:
    """Build test settings writing into a temporary report directory."""

    def factory(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "environment": "testing",
            "report_directory": tmp_path / "target",
            "runtime_directory": tmp_path / "runtime",
            "checkpoint_label": "1.0.0",
        }
        values.update(overrides)
        return Settings(**values)

    return factory


@pytest.fixture
def fake_run() -> FakeRun:
    """Subprocess runner reporting success."""
    return FakeRun()
