"""Reference resolver: decide which packages are flex-managed and who consumes them."""

from __future__ import annotations

import structlog

from flexref.configuration import Configuration
from flexref.core.diagnostics import Diagnostics
from flexref.scanner.models import (
    FlexManagedPackage,
    ProjectManifest,
    expected_file_name,
    sort_packages,
)

log = structlog.get_logger("flexref.resolver")


def resolve_flex_packages(
    configuration: Configuration,
    manifests: list[ProjectManifest],
    diagnostics: Diagnostics,
) -> list[FlexManagedPackage]:
    """Compute the flex-managed packages, sorted case-insensitively by package id.

    Auto-discovered packages come first (in scan order) and win over an
    explicit ``<Package>`` entry with the same id.  Explicit names without a
    matching packable project are warned about and skipped.
    """
    candidates = [m for m in manifests if m.is_candidate]
    resolved: dict[str, FlexManagedPackage] = {}

    if configuration.auto_discover:
        for manifest in candidates:
            package_id = manifest.package_id or ""
            if configuration.is_excluded(package_id):
                log.debug("resolver.excluded", package_id=package_id)
                continue
            resolved.setdefault(package_id.casefold(), FlexManagedPackage.from_manifest(manifest))

    for name in configuration.explicit_package_names:
        key = name.casefold()
        if key in resolved:
            continue
        match = next((m for m in candidates if (m.package_id or "").casefold() == key), None)
        if match is None:
            diagnostics.warn(
                "resolver.explicit_package_missing",
                f"Explicit package '{name}' was not found in any project.",
                package_id=name,
            )
            continue
        resolved[key] = FlexManagedPackage.from_manifest(match)

    for package in resolved.values():
        expected = expected_file_name(package.package_id)
        if package.manifest_file_name.casefold() != expected.casefold():
            diagnostics.warn(
                "resolver.package_id_mismatch",
                f"Package '{package.package_id}' is in project file "
                f"'{package.manifest_file_name}' (expected '{expected}')",
                package_id=package.package_id,
                path=str(package.manifest_path),
            )

    packages = sort_packages(list(resolved.values()))
    log.info("resolver.resolved", packages=[p.package_id for p in packages])
    return packages


def find_flex_references(
    manifest: ProjectManifest,
    packages: list[FlexManagedPackage],
) -> list[FlexManagedPackage]:
    """The flex-managed packages ``manifest`` depends on, sorted by package id.

    A dependency counts if a ProjectReference points at the package's project
    file name or a PackageReference names the package id (both compared
    case-insensitively).  A project never flex-references itself.
    """
    project_files = {e.file_name.casefold() for e in manifest.project_edges}
    package_ids = {e.target.casefold() for e in manifest.package_edges}
    own_path = str(manifest.path).casefold()

    matches = [
        package
        for package in packages
        if str(package.manifest_path).casefold() != own_path
        and (
            package.manifest_file_name.casefold() in project_files
            or package.package_id.casefold() in package_ids
        )
    ]
    return sort_packages(matches)
