"""Business services and run orchestration."""

from __future__ import annotations

from .exclusions import build_exclusions, parse_skip_list
from .launcher import BundledToolExtractor, LauncherDeps, ProcessLauncher, resolve_executable
from .outputs import compute_output_paths, delete_outputs
from .paths import relativize
from .runner import MetricsRunner
from .script import CommandScriptGenerator
from .targets import AnalysisTarget, SingleProjectTarget, SolutionTarget
from .workspace import load_project, load_workspace

__all__ = [
    "AnalysisTarget",
    "BundledToolExtractor",
    "CommandScriptGenerator",
    "LauncherDeps",
    "MetricsRunner",
    "ProcessLauncher",
    "SingleProjectTarget",
    "SolutionTarget",
    "build_exclusions",
    "compute_output_paths",
    "delete_outputs",
    "load_project",
    "load_workspace",
    "parse_skip_list",
    "relativize",
    "resolve_executable",
]
