"""
Exclusion set computation.

Combines the test projects of a workspace with the projects named in the
skip list and resolves their directories relative to the analysis root.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from ..core.exceptions import PathResolutionError
from ..core.logging import get_logger
from ..domain.models import Project, Workspace
from .paths import relativize

logger = get_logger(__name__)


def parse_skip_list(raw: str | None) -> frozenset[str]:
    """
    Parse a comma-separated list of project names.

    Names are trimmed and blank entries dropped; matching stays case-sensitive.

    Example:
        >>> sorted(parse_skip_list(" Legacy, Samples ,,"))
        ['Legacy', 'Samples']
    """
    if not raw:
        return frozenset()
    return frozenset(name.strip() for name in raw.split(",") if name.strip())


def select_excluded_projects(
    workspace: Workspace,
    skip_list: Iterable[str],
) -> list[Project]:
    """Test projects first, then skipped ones, each in workspace order."""
    skipped = frozenset(skip_list)
    selected = list(workspace.test_projects)
    names = {project.name for project in selected}

    for project in workspace.projects:
        if project.name in skipped and project.name not in names:
            selected.append(project)
            names.add(project.name)

    unknown = skipped - {project.name for project in workspace.projects}
    if unknown:
        logger.debug(
            "skipped_projects_not_found",
            workspace=workspace.name,
            names=sorted(unknown),
        )
    return selected


def build_exclusions(
    workspace: Workspace,
    skip_list: Iterable[str],
    root: Path,
) -> tuple[str, ...]:
    """
    Compute the directories SourceMonitor must skip.

    Args:
        workspace: Workspace being analysed
        skip_list: Names of projects excluded regardless of classification
        root: Analysis root the directories are made relative to

    Returns:
        Unique relative directories in first-produced order
    """
    exclusions: dict[str, None] = {}

    for project in select_excluded_projects(workspace, skip_list):
        try:
            relative = relativize(root, project.directory)
        except PathResolutionError as e:
            logger.warning(
                "exclusion_skipped",
                project=project.name,
                directory=str(project.directory),
                reason=e.message,
                **e.context,
            )
            continue
        exclusions.setdefault(relative, None)

    logger.debug("exclusions_resolved", workspace=workspace.name, count=len(exclusions))
    return tuple(exclusions)
