"""Workspace scanner: turn a directory tree into manifests and solution groups."""

from __future__ import annotations

from pathlib import Path

import structlog

from flexref.constants import DIRECTORY_BUILD_PROPS_FILE_NAME, MANIFEST_GLOB, SOLUTION_GLOB
from flexref.core.diagnostics import Diagnostics
from flexref.exceptions import ManifestParseError
from flexref.scanner.manifest import CsprojParser, read_inherited_properties
from flexref.scanner.models import ProjectManifest, SolutionGroup
from flexref.scanner.registry import discover_files
from flexref.scanner.solution import SlnxParser

log = structlog.get_logger("flexref.scanner")


class _InheritedProperties:
    """Nearest Directory.Build.props lookup, cached per directory."""

    def __init__(self, root: Path, diagnostics: Diagnostics) -> None:
        self._root = root
        self._diagnostics = diagnostics
        self._by_directory: dict[Path, dict[str, str]] = {}

    def for_project(self, manifest_path: Path) -> dict[str, str]:
        return self._lookup(manifest_path.parent)

    def _lookup(self, directory: Path) -> dict[str, str]:
        cached = self._by_directory.get(directory)
        if cached is not None:
            return cached

        props_file = directory / DIRECTORY_BUILD_PROPS_FILE_NAME
        if props_file.is_file():
            try:
                props = read_inherited_properties(props_file)
            except (ManifestParseError, OSError, UnicodeDecodeError) as exc:
                self._diagnostics.warn(
                    "scanner.props_unparseable",
                    f"Could not parse {props_file}: {exc}",
                    path=str(props_file),
                )
                props = {}
        elif directory == self._root or directory.parent == directory:
            props = {}
        else:
            props = self._lookup(directory.parent)

        self._by_directory[directory] = props
        return props


def scan_manifests(root: Path, diagnostics: Diagnostics) -> list[ProjectManifest]:
    """Parse every .csproj below ``root``; unreadable files are warned about and skipped."""
    parser = CsprojParser()
    inherited = _InheritedProperties(root, diagnostics)
    manifests: list[ProjectManifest] = []
    for file_path in discover_files(root, MANIFEST_GLOB):
        try:
            content = file_path.read_text(encoding="utf-8-sig")
            manifest = parser.parse(file_path, content, inherited.for_project(file_path))
        except (ManifestParseError, OSError, UnicodeDecodeError) as exc:
            diagnostics.warn(
                "scanner.manifest_unparseable",
                f"Could not parse {file_path}: {getattr(exc, 'reason', exc)}",
                path=str(file_path),
            )
            continue
        if manifest.unresolved_package_id is not None:
            diagnostics.warn(
                "scanner.package_id_unresolved",
                f"Package ID '{manifest.unresolved_package_id}' in {file_path.name} "
                "references an unknown property; the project is not flex-managed.",
                path=str(file_path),
            )
        log.debug(
            "scanner.manifest",
            path=str(file_path),
            package_id=manifest.package_id,
            packable=manifest.is_packable,
            edges=len(manifest.edges),
        )
        manifests.append(manifest)
    return manifests


def scan_solutions(root: Path, diagnostics: Diagnostics) -> list[SolutionGroup]:
    """Parse every .slnx below ``root``; unreadable files are warned about and skipped."""
    parser = SlnxParser()
    solutions: list[SolutionGroup] = []
    for file_path in discover_files(root, SOLUTION_GLOB):
        try:
            content = file_path.read_text(encoding="utf-8-sig")
            solution = parser.parse(file_path, content)
        except (ManifestParseError, OSError, UnicodeDecodeError) as exc:
            diagnostics.warn(
                "scanner.solution_unparseable",
                f"Could not parse {file_path}: {getattr(exc, 'reason', exc)}",
                path=str(file_path),
            )
            continue
        log.debug("scanner.solution", path=str(file_path), members=len(solution.member_file_names))
        solutions.append(solution)
    return solutions
