"""Tests for flex package resolution and consumer matching."""

from __future__ import annotations

from pathlib import Path

from structlog.testing import capture_logs

from flexref.configuration import Configuration
from flexref.core.diagnostics import Diagnostics
from flexref.resolver import find_flex_references, resolve_flex_packages
from flexref.scanner.models import DependencyEdge, EdgeKind, FlexManagedPackage, ProjectManifest


def _packable(package_id: str, file_stem: str | None = None) -> ProjectManifest:
    stem = file_stem or package_id
    return ProjectManifest(path=Path(f"/ws/src/{stem}/{stem}.csproj"), package_id=package_id, is_packable=True)


def _consumer(*edges: DependencyEdge, name: str = "App") -> ProjectManifest:
    return ProjectManifest(
        path=Path(f"/ws/src/{name}/{name}.csproj"), package_id=None, is_packable=False, edges=edges
    )


def _ids(packages: list[FlexManagedPackage]) -> list[str]:
    return [p.package_id for p in packages]


# ── resolve_flex_packages ──


class TestResolveFlexPackages:
    def test_auto_discover_takes_all_candidates_sorted(self):
        manifests = [_packable("b"), _packable("C"), _consumer(), _packable("A")]
        packages = resolve_flex_packages(Configuration(auto_discover=True), manifests, Diagnostics())
        assert _ids(packages) == ["A", "b", "C"]

    def test_exclusions_are_case_insensitive(self):
        config = Configuration(auto_discover=True, auto_discover_exclusions=("a",))
        packages = resolve_flex_packages(config, [_packable("A"), _packable("B")], Diagnostics())
        assert _ids(packages) == ["B"]

    def test_explicit_only(self):
        config = Configuration(explicit_package_names=("b",))
        packages = resolve_flex_packages(config, [_packable("A"), _packable("B")], Diagnostics())
        assert _ids(packages) == ["B"]

    def test_explicit_overlapping_auto_discovered_is_not_duplicated(self):
        config = Configuration(auto_discover=True, explicit_package_names=("A", "a"))
        packages = resolve_flex_packages(config, [_packable("A")], Diagnostics())
        assert _ids(packages) == ["A"]

    def test_explicit_includes_auto_discover_excluded(self):
        config = Configuration(
            auto_discover=True, auto_discover_exclusions=("A",), explicit_package_names=("A",)
        )
        packages = resolve_flex_packages(config, [_packable("A")], Diagnostics())
        assert _ids(packages) == ["A"]

    def test_first_project_wins_for_duplicate_ids(self):
        manifests = [_packable("A", "First"), _packable("a", "Second")]
        packages = resolve_flex_packages(Configuration(auto_discover=True), manifests, Diagnostics())
        assert len(packages) == 1
        assert packages[0].manifest_file_name == "First.csproj"

    def test_missing_explicit_package_warns_and_is_skipped(self):
        diagnostics = Diagnostics()
        config = Configuration(explicit_package_names=("Ghost", "A"))
        with capture_logs() as logs:
            packages = resolve_flex_packages(config, [_packable("A")], diagnostics)
        assert _ids(packages) == ["A"]
        assert diagnostics.warnings == ["Explicit package 'Ghost' was not found in any project."]
        assert any(e["event"] == "resolver.explicit_package_missing" for e in logs)

    def test_mismatched_file_name_warns_but_resolves(self):
        diagnostics = Diagnostics()
        packages = resolve_flex_packages(
            Configuration(auto_discover=True), [_packable("Acme.Core", "Core")], diagnostics
        )
        assert _ids(packages) == ["Acme.Core"]
        assert diagnostics.warnings == [
            "Package 'Acme.Core' is in project file 'Core.csproj' (expected 'Acme.Core.csproj')"
        ]

    def test_no_configuration_entries_resolves_nothing(self):
        assert resolve_flex_packages(Configuration(), [_packable("A")], Diagnostics()) == []


# ── find_flex_references ──


class TestFindFlexReferences:
    packages = [
        FlexManagedPackage("B", Path("/ws/src/B/B.csproj")),
        FlexManagedPackage("A", Path("/ws/src/A/A.csproj")),
        FlexManagedPackage("Acme.Core", Path("/ws/src/Core/Core.csproj")),
    ]

    def test_project_reference_by_file_name(self):
        consumer = _consumer(DependencyEdge(EdgeKind.PROJECT, "..\\b\\b.CSPROJ"))
        assert _ids(find_flex_references(consumer, self.packages)) == ["B"]

    def test_package_reference_by_id(self):
        consumer = _consumer(DependencyEdge(EdgeKind.PACKAGE, "acme.core", "1.0"))
        assert _ids(find_flex_references(consumer, self.packages)) == ["Acme.Core"]

    def test_both_forms_count_once_and_sorted(self):
        consumer = _consumer(
            DependencyEdge(EdgeKind.PACKAGE, "B"),
            DependencyEdge(EdgeKind.PROJECT, "../B/B.csproj"),
            DependencyEdge(EdgeKind.PROJECT, "../A/A.csproj"),
        )
        assert _ids(find_flex_references(consumer, self.packages)) == ["A", "B"]

    def test_never_references_itself(self):
        own = ProjectManifest(
            path=Path("/ws/src/A/A.csproj"),
            package_id="A",
            is_packable=True,
            edges=(DependencyEdge(EdgeKind.PACKAGE, "A"),),
        )
        assert find_flex_references(own, self.packages) == []

    def test_unrelated_references(self):
        consumer = _consumer(DependencyEdge(EdgeKind.PACKAGE, "Newtonsoft.Json", "13.0.1"))
        assert find_flex_references(consumer, self.packages) == []
