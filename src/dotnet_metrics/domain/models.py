"""
Domain models using Pydantic V2.

Defines the core data structures of a metrics run:
- Workspace and projects (read-only inputs built by a loader)
- The command script handed to SourceMonitor
- Output locations and the per-invocation run record
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class TargetKind(str, Enum):
    """Kind of analysis target."""

    SOLUTION = "solution"
    PROJECT = "project"


class RunState(str, Enum):
    """Lifecycle of a single metrics invocation."""

    PREPARED = "prepared"
    SCRIPT_WRITTEN = "script_written"
    LAUNCHED = "launched"
    COMPLETED = "completed"
    FAILED = "failed"


class Project(BaseModel):
    """
    One analyzable sub-unit of a workspace.

    Attributes:
        name: Project name, unique within its workspace
        directory: Absolute directory holding the project
        is_test: Whether the project is classified as a test project
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Project name")
    directory: Path = Field(..., description="Absolute project directory")
    is_test: bool = Field(default=False, description="Test project classification")

    @field_validator("directory")
    @classmethod
    def validate_absolute(cls, v: Path) -> Path:
        """Project directories must be absolute."""
        if not v.is_absolute():
            raise ValueError(f"project directory must be absolute: {v}")
        return v


class Workspace(BaseModel):
    """
    A named collection of projects (a Visual Studio solution).

    Attributes:
        name: Workspace name
        base_directory: Designated analysis root, if any
        projects: Projects in declaration order
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Workspace name")
    base_directory: Path | None = Field(
        default=None,
        description="Default analysis root directory",
    )
    projects: tuple[Project, ...] = Field(
        default=(),
        description="Projects of the workspace",
    )

    @model_validator(mode="after")
    def validate_unique_names(self) -> Workspace:
        """Project names must be unique within a workspace."""
        seen: set[str] = set()
        for project in self.projects:
            if project.name in seen:
                raise ValueError(f"duplicate project name: {project.name}")
            seen.add(project.name)
        return self

    @property
    def test_projects(self) -> tuple[Project, ...]:
        """Projects classified as tests, in declaration order."""
        return tuple(project for project in self.projects if project.is_test)

    def project_named(self, name: str) -> Project | None:
        """Return the project called ``name``, if any."""
        for project in self.projects:
            if project.name == name:
                return project
        return None


class CommandScript(BaseModel):
    """
    Value object serialized into a SourceMonitor command file.

    Required fields are optional at construction time so an incomplete
    script can be detected when it is rendered.

    Attributes:
        source_path: Root directory analysed by SourceMonitor
        work_directory: Directory holding the command file and the tool log
        report_path: Exported metrics report
        project_state_path: SourceMonitor project file (``.smp``)
        checkpoint_label: Version label of the checkpoint
        excluded_extensions: Globs of excluded generated files
        excluded_directories: Directories relative to ``source_path``
    """

    model_config = ConfigDict(frozen=True)

    source_path: str | None = None
    work_directory: str | None = None
    report_path: str | None = None
    project_state_path: str | None = None
    checkpoint_label: str | None = None
    project_language: str = "C#"
    source_extensions: str = "*.cs"
    excluded_extensions: tuple[str, ...] = ()
    excluded_directories: tuple[str, ...] = ()

    @property
    def missing_fields(self) -> list[str]:
        """Names of required fields that are unset or blank."""
        required = ("source_path", "report_path", "project_state_path", "checkpoint_label")
        return [name for name in required if not (getattr(self, name) or "").strip()]

    @property
    def file_extensions(self) -> str:
        """SourceMonitor extension filter: included glob, then excluded ones."""
        return "|".join((self.source_extensions, *self.excluded_extensions))


class OutputPaths(BaseModel):
    """Deterministic locations of the report and the SourceMonitor project file."""

    model_config = ConfigDict(frozen=True)

    report: Path
    project_state: Path

    def as_tuple(self) -> tuple[Path, Path]:
        return (self.report, self.project_state)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MetricsRun(BaseModel):
    """
    Record of one metrics invocation against one target.

    Attributes:
        target_name: Solution or project name
        kind: Target kind
        label: Label used for logging the external process
        state: Current lifecycle state
        outputs: Report locations
        script_path: Generated command file
        excluded_directories: Exclusions written in the script
        error: Error message if the run failed
        started_at: Creation timestamp
        finished_at: Completion timestamp
    """

    model_config = ConfigDict(
        frozen=False,
        validate_assignment=True,
    )

    target_name: str = Field(..., min_length=1)
    kind: TargetKind
    label: str = Field(default="Metrics")
    state: RunState = Field(default=RunState.PREPARED)
    outputs: OutputPaths | None = None
    script_path: Path | None = None
    excluded_directories: tuple[str, ...] = ()
    error: str | None = None
    started_at: datetime = Field(default_factory=_utcnow)
    finished_at: datetime | None = None

    @property
    def is_complete(self) -> bool:
        """Check if the run reached a terminal state."""
        return self.state in {RunState.COMPLETED, RunState.FAILED}

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.COMPLETED

    @property
    def duration_seconds(self) -> float | None:
        """Get run duration in seconds."""
        if self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None
