"""
Unit tests for exclusion set computation.
"""

from __future__ import annotations

from pathlib import Path

from dotnet_metrics.domain.models import Project, Workspace
from dotnet_metrics.services.exclusions import (
    build_exclusions,
    parse_skip_list,
    select_excluded_projects,
)


class TestParseSkipList:
    """Tests for parse_skip_list()."""

    def test_none_and_empty(self) -> None:
        assert parse_skip_list(None) == frozenset()
        assert parse_skip_list("") == frozenset()
        assert parse_skip_list(" , ,") == frozenset()

    def test_trims_names(self) -> None:
        assert parse_skip_list(" Legacy ,Samples") == {"Legacy", "Samples"}

    def test_case_sensitive(self) -> None:
        assert parse_skip_list("legacy") != parse_skip_list("Legacy")


class TestBuildExclusions:
    """Tests for build_exclusions()."""

    def test_tests_then_skipped(self, workspace: Workspace, workspace_root: Path) -> None:
        exclusions = build_exclusions(workspace, parse_skip_list("C"), workspace_root)

        assert exclusions == ("B", "C")

    def test_empty_skip_list_keeps_test_projects(
        self, workspace: Workspace, workspace_root: Path
    ) -> None:
        assert build_exclusions(workspace, frozenset(), workspace_root) == ("B",)

    def test_project_in_both_sources_once(
        self, workspace: Workspace, workspace_root: Path
    ) -> None:
        exclusions = build_exclusions(workspace, {"B", "A"}, workspace_root)

        assert exclusions == ("B", "A")

    def test_skip_list_match_is_exact(self, workspace: Workspace, workspace_root: Path) -> None:
        assert build_exclusions(workspace, {"c"}, workspace_root) == ("B",)

    def test_unknown_skipped_name_ignored(
        self, workspace: Workspace, workspace_root: Path
    ) -> None:
        assert build_exclusions(workspace, {"Ghost"}, workspace_root) == ("B",)

    def test_empty_workspace(self, workspace_root: Path) -> None:
        empty = Workspace(name="Empty", base_directory=workspace_root)

        assert build_exclusions(empty, {"A"}, workspace_root) == ()

    def test_project_outside_root_is_skipped(self, tmp_path: Path, workspace_root: Path) -> None:
        outside = tmp_path / "shared" / "Common.Tests"
        outside.mkdir(parents=True)
        workspace = Workspace(
            name="Mixed",
            base_directory=workspace_root,
            projects=(
                Project(name="Common.Tests", directory=outside, is_test=True),
                Project(name="B", directory=workspace_root / "B", is_test=True),
            ),
        )

        assert build_exclusions(workspace, frozenset(), workspace_root) == ("B",)

    def test_shared_directory_collapses(self, workspace_root: Path) -> None:
        workspace = Workspace(
            name="Shared",
            projects=(
                Project(name="Unit", directory=workspace_root / "B", is_test=True),
                Project(name="Integration", directory=workspace_root / "B", is_test=True),
            ),
        )

        assert build_exclusions(workspace, frozenset(), workspace_root) == ("B",)

    def test_result_covers_exactly_the_selected_projects(
        self, workspace: Workspace, workspace_root: Path
    ) -> None:
        skip = {"A"}
        selected = select_excluded_projects(workspace, skip)
        expected = {p.name for p in workspace.projects if p.is_test or p.name in skip}

        assert {p.name for p in selected} == expected
        assert len(build_exclusions(workspace, skip, workspace_root)) <= len(workspace.projects)
