"""Report locations and removal of stale artifacts from previous runs."""

from __future__ import annotations

from pathlib import Path

from ..core.exceptions import OutputCleanupError
from ..core.logging import get_logger
from ..domain.models import OutputPaths

logger = get_logger(__name__)

PROJECT_STATE_SUFFIX = ".smp"


def compute_output_paths(report_directory: Path, report_file_name: str) -> OutputPaths:
    """
    Locate the report and its SourceMonitor project file.

    Example:
        >>> compute_output_paths(Path("target"), "metrics-report.xml").project_state.name
        'metrics-report.xml.smp'
    """
    return OutputPaths(
        report=report_directory / report_file_name,
        project_state=report_directory / f"{report_file_name}{PROJECT_STATE_SUFFIX}",
    )


def delete_outputs(*paths: Path, strict: bool = True) -> list[Path]:
    """
    Delete each existing file in ``paths``.

    Every deletion is attempted before failures are evaluated.

    Args:
        *paths: Files to remove
        strict: Raise when a file survives the deletion attempt

    Returns:
        Files still present afterwards (always empty when ``strict``)

    Raises:
        OutputCleanupError: If ``strict`` and a stale file could not be removed
    """
    for path in paths:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("output_delete_failed", path=str(path), error=str(e))
        else:
            logger.debug("output_deleted", path=str(path))

    leftovers = [path for path in paths if path.exists()]
    if leftovers and strict:
        raise OutputCleanupError(
            "Stale output files could not be removed",
            paths=", ".join(str(path) for path in leftovers),
        )
    if leftovers:
        logger.warning("stale_outputs_kept", paths=[str(path) for path in leftovers])
    return leftovers
