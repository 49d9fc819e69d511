"""
Workspace loading.

Builds :class:`Workspace` values from Visual Studio solution files or from a
JSON workspace description, and single :class:`Project` values from project
files.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from fnmatch import fnmatchcase
from pathlib import Path, PureWindowsPath

from pydantic import ValidationError

from ..core.exceptions import WorkspaceError
from ..core.logging import get_logger
from ..domain.models import Project, Workspace

logger = get_logger(__name__)

SOLUTION_FOLDER_TYPE = "2150E333-8FDC-42A3-9474-1A3956D46DE8"
PROJECT_FILE_SUFFIXES = frozenset({".csproj", ".vbproj", ".fsproj"})

# Project("{type-guid}") = "Name", "relative\path\Name.csproj", "{project-guid}"
_PROJECT_LINE = re.compile(
    r'^Project\("\{(?P<type>[0-9A-Fa-f-]+)\}"\)\s*=\s*'
    r'"(?P<name>[^"]+)"\s*,\s*"(?P<path>[^"]+)"\s*,\s*"\{(?P<guid>[0-9A-Fa-f-]+)\}"'
)


def is_test_project(name: str, patterns: Iterable[str]) -> bool:
    """Check ``name`` against the test project globs (case-sensitive)."""
    return any(fnmatchcase(name, pattern) for pattern in patterns)


def parse_solution(path: Path, test_patterns: Iterable[str]) -> Workspace:
    """
    Parse a ``.sln`` file.

    Solution folders and entries that are not project files (web sites,
    setup projects) are ignored.

    Raises:
        WorkspaceError: If the file cannot be read or declares duplicates
    """
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise WorkspaceError("Cannot read solution", path=str(path), error=str(e)) from e

    patterns = list(test_patterns)
    base_directory = path.parent.absolute()
    projects: list[Project] = []

    for line in text.splitlines():
        match = _PROJECT_LINE.match(line.strip())
        if not match:
            continue
        if match["type"].upper() == SOLUTION_FOLDER_TYPE:
            continue
        relative = PureWindowsPath(match["path"])
        if relative.suffix.lower() not in PROJECT_FILE_SUFFIXES:
            logger.debug("solution_entry_ignored", name=match["name"], path=match["path"])
            continue
        projects.append(
            Project(
                name=match["name"],
                directory=base_directory.joinpath(*relative.parent.parts),
                is_test=is_test_project(match["name"], patterns),
            )
        )

    try:
        workspace = Workspace(
            name=path.stem,
            base_directory=base_directory,
            projects=tuple(projects),
        )
    except ValidationError as e:
        raise WorkspaceError("Invalid solution", path=str(path), error=str(e)) from e

    logger.info(
        "solution_loaded",
        solution=workspace.name,
        projects=len(workspace.projects),
        test_projects=len(workspace.test_projects),
    )
    return workspace


def load_workspace_description(path: Path) -> Workspace:
    """Validate a JSON document describing a workspace."""
    try:
        return Workspace.model_validate_json(path.read_bytes())
    except OSError as e:
        raise WorkspaceError("Cannot read workspace", path=str(path), error=str(e)) from e
    except ValidationError as e:
        raise WorkspaceError("Invalid workspace description", path=str(path), error=str(e)) from e


def load_workspace(path: Path, test_patterns: Iterable[str]) -> Workspace:
    """
    Load a workspace from a solution file or a JSON description.

    Args:
        path: ``.sln`` or ``.json`` file
        test_patterns: Globs classifying solution projects as tests

    Raises:
        WorkspaceError: If the file type is unsupported or the content invalid
    """
    suffix = path.suffix.lower()
    if suffix == ".sln":
        return parse_solution(path, test_patterns)
    if suffix == ".json":
        return load_workspace_description(path)
    raise WorkspaceError("Unsupported workspace file", path=str(path), suffix=suffix)


def load_project(path: Path, test_patterns: Iterable[str]) -> Project:
    """Build the project described by a project file."""
    if path.suffix.lower() not in PROJECT_FILE_SUFFIXES:
        raise WorkspaceError("Unsupported project file", path=str(path))
    return Project(
        name=path.stem,
        directory=path.parent.absolute(),
        is_test=is_test_project(path.stem, test_patterns),
    )
