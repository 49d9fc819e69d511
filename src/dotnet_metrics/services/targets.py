"""
Analysis targets.

A target knows what SourceMonitor should analyse and which directories to
leave out: a whole solution or a single project. The runner drives both
through the :class:`AnalysisTarget` protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ..core.config import Settings
from ..core.exceptions import ConfigurationError
from ..domain.models import CommandScript, OutputPaths, Project, TargetKind, Workspace
from .exclusions import build_exclusions, parse_skip_list


class AnalysisTarget(Protocol):
    """Something SourceMonitor can be run against."""

    @property
    def name(self) -> str: ...

    @property
    def kind(self) -> TargetKind: ...

    def resolve_exclusions(self, settings: Settings) -> tuple[str, ...]: ...

    def build_script(
        self,
        settings: Settings,
        outputs: OutputPaths,
        exclusions: tuple[str, ...],
        work_directory: Path,
    ) -> CommandScript: ...


def _script(
    settings: Settings,
    source: Path,
    outputs: OutputPaths,
    exclusions: tuple[str, ...],
    work_directory: Path,
) -> CommandScript:
    return CommandScript(
        source_path=str(source),
        work_directory=str(work_directory),
        report_path=str(outputs.report),
        project_state_path=str(outputs.project_state),
        checkpoint_label=settings.checkpoint_label,
        project_language=settings.project_language,
        source_extensions=settings.source_extensions,
        excluded_extensions=tuple(settings.excluded_extensions),
        excluded_directories=exclusions,
    )


@dataclass(frozen=True)
class SolutionTarget:
    """A whole solution, minus its test and skipped projects."""

    workspace: Workspace

    @property
    def name(self) -> str:
        return self.workspace.name

    @property
    def kind(self) -> TargetKind:
        return TargetKind.SOLUTION

    def analysis_root(self, settings: Settings) -> Path:
        """
        Configured source directory, else the workspace base directory.

        Raises:
            ConfigurationError: If neither is set or the directory is missing
        """
        root = settings.metrics_src_directory or self.workspace.base_directory
        if root is None:
            raise ConfigurationError(
                "No analysis root for solution",
                solution=self.workspace.name,
            )
        if not root.is_dir():
            raise ConfigurationError(
                "Analysis root is not a directory",
                solution=self.workspace.name,
                root=str(root),
            )
        return root.absolute()

    def resolve_exclusions(self, settings: Settings) -> tuple[str, ...]:
        return build_exclusions(
            self.workspace,
            parse_skip_list(settings.skipped_projects),
            self.analysis_root(settings),
        )

    def build_script(
        self,
        settings: Settings,
        outputs: OutputPaths,
        exclusions: tuple[str, ...],
        work_directory: Path,
    ) -> CommandScript:
        return _script(settings, self.analysis_root(settings), outputs, exclusions, work_directory)


@dataclass(frozen=True)
class SingleProjectTarget:
    """A single project analysed from its own directory."""

    project: Project

    @property
    def name(self) -> str:
        return self.project.name

    @property
    def kind(self) -> TargetKind:
        return TargetKind.PROJECT

    def resolve_exclusions(self, settings: Settings) -> tuple[str, ...]:
        return ()

    def build_script(
        self,
        settings: Settings,
        outputs: OutputPaths,
        exclusions: tuple[str, ...],
        work_directory: Path,
    ) -> CommandScript:
        return _script(settings, self.project.directory, outputs, exclusions, work_directory)
