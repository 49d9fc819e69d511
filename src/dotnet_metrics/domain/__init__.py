"""Domain models and business entities."""

from __future__ import annotations

from .models import (
    CommandScript,
    MetricsRun,
    OutputPaths,
    Project,
    RunState,
    TargetKind,
    Workspace,
)

__all__ = [
    "CommandScript",
    "MetricsRun",
    "OutputPaths",
    "Project",
    "RunState",
    "TargetKind",
    "Workspace",
]
