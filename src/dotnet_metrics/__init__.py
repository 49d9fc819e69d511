"""
Dotnet Metrics - SourceMonitor metrics for .NET solutions.

Resolves which projects of a solution to analyse, writes the SourceMonitor
command script and runs SourceMonitor to produce the metrics report.
"""

from __future__ import annotations

__version__ = "1.0.0"

from .core.config import Settings, settings
from .domain.models import (
    CommandScript,
    MetricsRun,
    OutputPaths,
    Project,
    RunState,
    TargetKind,
    Workspace,
)
from .services.runner import MetricsRunner
from .services.targets import SingleProjectTarget, SolutionTarget

__all__ = [
    "__version__",
    "Settings",
    "settings",
    "CommandScript",
    "MetricsRun",
    "MetricsRunner",
    "OutputPaths",
    "Project",
    "RunState",
    "SingleProjectTarget",
    "SolutionTarget",
    "TargetKind",
    "Workspace",
]
