"""Data models for the workspace scanner and the reference resolver."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from pathlib import Path

from flexref.constants import (
    MANIFEST_EXTENSION,
    NCRUNCH_SOLUTION_EXTENSION,
    SWITCH_PROPERTY_PREFIX,
)

_SWITCH_SEPARATOR_RE = re.compile(r"[^A-Za-z0-9_]")


class EdgeKind(str, enum.Enum):
    PROJECT = "ProjectReference"
    PACKAGE = "PackageReference"


@dataclass(frozen=True)
class DependencyEdge:
    """One ``ProjectReference`` or ``PackageReference`` item of a manifest.

    ``target`` is the include path for project edges and the package id for
    package edges.
    """

    kind: EdgeKind
    target: str
    version: str | None = None

    @property
    def file_name(self) -> str:
        """File name of a project edge's include path (either separator style)."""
        return self.target.replace("\\", "/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class ProjectManifest:
    """A scanned .csproj file.  Immutable once the scanner has built it."""

    path: Path
    package_id: str | None
    is_packable: bool
    edges: tuple[DependencyEdge, ...] = ()
    unresolved_package_id: str | None = None

    @property
    def file_name(self) -> str:
        return self.path.name

    @property
    def project_edges(self) -> list[DependencyEdge]:
        return [e for e in self.edges if e.kind is EdgeKind.PROJECT]

    @property
    def package_edges(self) -> list[DependencyEdge]:
        return [e for e in self.edges if e.kind is EdgeKind.PACKAGE]

    @property
    def is_candidate(self) -> bool:
        """Packable with a package id, i.e. eligible for flex management."""
        return self.is_packable and self.package_id is not None

    @property
    def file_name_matches_package_id(self) -> bool:
        if self.package_id is None:
            return True
        return self.file_name.casefold() == expected_file_name(self.package_id).casefold()


def expected_file_name(package_id: str) -> str:
    return package_id + MANIFEST_EXTENSION


def switch_property_name(package_id: str) -> str:
    """``Foo.Bar-Baz`` -> ``UsePackageReference_Foo_Bar_Baz``."""
    return SWITCH_PROPERTY_PREFIX + _SWITCH_SEPARATOR_RE.sub("_", package_id)


def identity_sort_key(package_id: str) -> str:
    # Case-insensitive ordinal: compare upper-cased code points
    return package_id.upper()


@dataclass(frozen=True)
class FlexManagedPackage:
    """A packable project whose consumers get a switchable reference pair."""

    package_id: str
    manifest_path: Path
    switch_property: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "switch_property", switch_property_name(self.package_id))

    @classmethod
    def from_manifest(cls, manifest: ProjectManifest) -> FlexManagedPackage:
        if manifest.package_id is None:
            raise ValueError(f"{manifest.path} has no package id")
        return cls(package_id=manifest.package_id, manifest_path=manifest.path)

    @property
    def manifest_file_name(self) -> str:
        return self.manifest_path.name


def sort_packages(packages: list[FlexManagedPackage]) -> list[FlexManagedPackage]:
    return sorted(packages, key=lambda p: identity_sort_key(p.package_id))


@dataclass(frozen=True)
class SolutionGroup:
    """A parsed .slnx file: which manifest file names it contains."""

    path: Path
    member_file_names: frozenset[str]

    def contains(self, manifest_file_name: str) -> bool:
        return manifest_file_name.casefold() in self.member_file_names

    def absent_packages(self, packages: list[FlexManagedPackage]) -> list[FlexManagedPackage]:
        """Flex-managed packages whose owning project is not in this solution."""
        return sort_packages([p for p in packages if not self.contains(p.manifest_file_name)])

    @property
    def settings_path(self) -> Path:
        """The sibling NCrunch settings file, e.g. ``All.slnx`` -> ``All.v3.ncrunchsolution``."""
        return self.path.with_name(self.path.stem + NCRUNCH_SOLUTION_EXTENSION)
