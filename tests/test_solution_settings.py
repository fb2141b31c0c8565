"""Tests for NCrunch solution settings reconciliation."""

from __future__ import annotations

from pathlib import Path

import pytest

from flexref.exceptions import MalformedDocumentError
from flexref.reconcilers.models import ChangeAction
from flexref.reconcilers.solution_settings import SolutionSettingsReconciler
from flexref.scanner import FlexManagedPackage, SolutionGroup


def _package(package_id: str) -> FlexManagedPackage:
    return FlexManagedPackage(package_id, Path(f"/ws/src/{package_id}/{package_id}.csproj"))


def _solution(tmp_path: Path, *members: str) -> SolutionGroup:
    return SolutionGroup(path=tmp_path / "All.slnx", member_file_names=frozenset(m.casefold() for m in members))


class TestSolutionSettingsReconciler:
    def test_creates_settings_for_absent_packages(self, tmp_path: Path):
        reconciler = SolutionSettingsReconciler([_package("B"), _package("A"), _package("In")])
        change = reconciler.reconcile(_solution(tmp_path, "In.csproj"))
        assert change.action is ChangeAction.CREATED
        assert change.detail == "2 absent package(s)"
        assert change.path == tmp_path / "All.v3.ncrunchsolution"
        assert change.path.read_text() == (
            "<SolutionConfiguration>\n"
            "  <Settings>\n"
            "    <CustomBuildProperties>\n"
            "      <Value>UsePackageReference_A = true</Value>\n"
            "      <Value>UsePackageReference_B = true</Value>\n"
            "    </CustomBuildProperties>\n"
            "  </Settings>\n"
            "</SolutionConfiguration>\n"
        )

    def test_all_present_creates_empty_settings(self, tmp_path: Path):
        change = SolutionSettingsReconciler([_package("A")]).reconcile(_solution(tmp_path, "a.csproj"))
        assert change.detail == "0 absent package(s)"
        assert change.path.read_text() == "<SolutionConfiguration>\n  <Settings />\n</SolutionConfiguration>\n"

    def test_existing_settings_keep_user_values(self, tmp_path: Path):
        settings = tmp_path / "All.v3.ncrunchsolution"
        settings.write_text(
            "<SolutionConfiguration><Settings><AllowParallelTestExecution>True</AllowParallelTestExecution>"
            "<CustomBuildProperties><Value>Configuration = Debug</Value>"
            "<Value>UsePackageReference_Gone = true</Value></CustomBuildProperties>"
            "</Settings></SolutionConfiguration>"
        )
        change = SolutionSettingsReconciler([_package("A")]).reconcile(_solution(tmp_path))
        assert change.action is ChangeAction.UPDATED
        text = settings.read_text()
        assert "<AllowParallelTestExecution>True</AllowParallelTestExecution>" in text
        assert "<Value>Configuration = Debug</Value>" in text
        assert "UsePackageReference_Gone" not in text
        assert "<Value>UsePackageReference_A = true</Value>" in text

    def test_emptied_custom_properties_is_pruned(self, tmp_path: Path):
        settings = tmp_path / "All.v3.ncrunchsolution"
        settings.write_text(
            "<SolutionConfiguration><Settings><CustomBuildProperties>"
            "<Value>UsePackageReference_A = true</Value></CustomBuildProperties>"
            "</Settings></SolutionConfiguration>"
        )
        SolutionSettingsReconciler([_package("A")]).reconcile(_solution(tmp_path, "A.csproj"))
        assert settings.read_text() == "<SolutionConfiguration>\n  <Settings />\n</SolutionConfiguration>\n"

    def test_missing_settings_element_is_added(self, tmp_path: Path):
        settings = tmp_path / "All.v3.ncrunchsolution"
        settings.write_text("<SolutionConfiguration />")
        SolutionSettingsReconciler([_package("A")]).reconcile(_solution(tmp_path))
        assert "<Value>UsePackageReference_A = true</Value>" in settings.read_text()

    def test_rerun_is_stable(self, tmp_path: Path):
        reconciler = SolutionSettingsReconciler([_package("A"), _package("B")])
        solution = _solution(tmp_path, "B.csproj")
        reconciler.reconcile(solution)
        first = solution.settings_path.read_bytes()
        reconciler.reconcile(solution)
        assert solution.settings_path.read_bytes() == first

    def test_malformed_settings_raise(self, tmp_path: Path):
        (tmp_path / "All.v3.ncrunchsolution").write_text("not xml")
        with pytest.raises(MalformedDocumentError):
            SolutionSettingsReconciler([_package("A")]).reconcile(_solution(tmp_path))

    def test_comment_before_switch_value_is_kept(self, tmp_path: Path):
        settings = tmp_path / "All.v3.ncrunchsolution"
        settings.write_text(
            "<SolutionConfiguration><Settings><CustomBuildProperties>"
            "<Value>Configuration = Debug</Value><!-- set by hand -->"
            "<Value>UsePackageReference_Gone = true</Value></CustomBuildProperties>"
            "</Settings></SolutionConfiguration>"
        )
        SolutionSettingsReconciler([_package("A")]).reconcile(_solution(tmp_path))
        assert settings.read_text() == (
            "<SolutionConfiguration>\n"
            "  <Settings>\n"
            "    <CustomBuildProperties>\n"
            "      <Value>Configuration = Debug</Value>\n"
            "      <!-- set by hand -->\n"
            "      <Value>UsePackageReference_A = true</Value>\n"
            "    </CustomBuildProperties>\n"
            "  </Settings>\n"
            "</SolutionConfiguration>\n"
        )
