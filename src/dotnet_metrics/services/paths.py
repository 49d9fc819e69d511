"""
Relative path resolution against the analysis root.

Both paths are canonicalized (symlinks resolved, case normalized on
case-insensitive platforms) before the candidate is expressed relative to the
root, so two views of the same directory relativize identically.
"""

from __future__ import annotations

import os
from pathlib import Path, PurePath

from ..core.exceptions import PathResolutionError


def canonicalize(path: Path | str, *, must_exist: bool = False) -> Path:
    """
    Return ``path`` with symlinks and dot segments resolved, in its real case.

    Args:
        path: Path to canonicalize
        must_exist: Require the path itself to exist, otherwise only its parent

    Raises:
        PathResolutionError: If the path (or its parent chain) is unreachable
    """
    try:
        resolved = Path(path).resolve(strict=must_exist)
    except (OSError, RuntimeError) as e:
        raise PathResolutionError(
            "Cannot canonicalize path",
            path=str(path),
            error=str(e),
        ) from e

    if not must_exist and not resolved.parent.is_dir():
        raise PathResolutionError(
            "Parent directory is not reachable",
            path=str(path),
        )
    return resolved


def _folded(path: Path) -> Path:
    return Path(os.path.normcase(path))


def relativize(root: Path | str, candidate: Path | str) -> str:
    """
    Express ``candidate`` relative to ``root`` with forward slashes.

    Args:
        root: Existing analysis root directory
        candidate: Directory to relativize; only its parent must exist

    Returns:
        Relative path such as ``"Tests/Unit"``, or ``"."`` for the root itself

    Raises:
        PathResolutionError: If either path cannot be canonicalized or the
            candidate lies outside the root
    """
    canonical_root = canonicalize(root, must_exist=True)
    canonical_candidate = canonicalize(candidate)

    # Containment is checked on case-folded paths, the result keeps the real case.
    try:
        _folded(canonical_candidate).relative_to(_folded(canonical_root))
    except ValueError as e:
        raise PathResolutionError(
            "Directory is outside the analysis root",
            root=str(canonical_root),
            path=str(canonical_candidate),
        ) from e

    parts = canonical_candidate.parts[len(canonical_root.parts) :]
    return PurePath(*parts).as_posix() if parts else "."
