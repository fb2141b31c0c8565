"""Workspace scanner: discover .csproj and .slnx files and parse them."""

from flexref.scanner.models import (
    DependencyEdge,
    EdgeKind,
    FlexManagedPackage,
    ProjectManifest,
    SolutionGroup,
)
from flexref.scanner.scanner import scan_manifests, scan_solutions

__all__ = [
    "DependencyEdge",
    "EdgeKind",
    "FlexManagedPackage",
    "ProjectManifest",
    "SolutionGroup",
    "scan_manifests",
    "scan_solutions",
]
