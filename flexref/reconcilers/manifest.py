"""Rewrites a consuming .csproj with one conditional reference pair per flex package."""

from __future__ import annotations

import os
import xml.etree.ElementTree as ET
from pathlib import Path

import structlog

from flexref.constants import WILDCARD_VERSION
from flexref.core.xml_tree import (
    append_comment,
    append_element,
    child_elements,
    descendants,
    load_document,
    local_name,
    prune_if_empty,
    remove_generated_blocks,
    save_document,
    text_of,
)
from flexref.exceptions import MalformedDocumentError
from flexref.reconcilers.models import ChangeAction, FileChange
from flexref.resolver import find_flex_references
from flexref.scanner.models import EdgeKind, FlexManagedPackage, ProjectManifest

log = structlog.get_logger("flexref.reconcile")


def relative_reference_path(consumer: Path, target: Path) -> str:
    """Path from ``consumer``'s directory to ``target``, with backslash separators."""
    return os.path.relpath(target, consumer.parent).replace("/", "\\")


def _include_file_name(include: str) -> str:
    return include.replace("\\", "/").rsplit("/", 1)[-1]


class ManifestReconciler:
    """Regenerates the flex reference pairs of every consuming project."""

    def __init__(self, packages: list[FlexManagedPackage]) -> None:
        self._packages = packages
        self._package_ids = {p.package_id.casefold() for p in packages}
        self._manifest_file_names = {p.manifest_file_name.casefold() for p in packages}
        self._switch_tokens = [f"$({p.switch_property})" for p in packages]

    def reconcile(self, manifest: ProjectManifest) -> FileChange | None:
        """Rewrite ``manifest`` if it depends on any flex-managed package.

        Returns ``None`` (and leaves the file untouched) otherwise.
        """
        references = find_flex_references(manifest, self._packages)
        if not references:
            return None

        try:
            tree = load_document(manifest.path)
        except ET.ParseError as exc:
            raise MalformedDocumentError(manifest.path, f"missing root element ({exc})") from exc
        root = tree.getroot()

        versions = self._existing_versions(root)
        self._remove_flex_references(root)
        for package in references:
            self._append_pair(root, manifest, package, versions)

        save_document(tree, manifest.path)
        log.info(
            "reconcile.manifest_updated",
            path=str(manifest.path),
            flex_references=[p.package_id for p in references],
        )
        return FileChange(
            path=manifest.path,
            action=ChangeAction.UPDATED,
            detail=f"{len(references)} flex reference(s)",
        )

    # ── removal ──────────────────────────────────────────────────────────

    def _existing_versions(self, root: ET.Element) -> dict[str, str]:
        """Explicit PackageReference versions of flex packages, keyed by casefolded id."""
        versions: dict[str, str] = {}
        for group in descendants(root, "ItemGroup"):
            for reference in child_elements(group, EdgeKind.PACKAGE.value):
                include = reference.get("Include")
                if include is None or include.casefold() not in self._package_ids:
                    continue
                version = reference.get("Version")
                if version is None:
                    version = next(
                        (text_of(v) for v in child_elements(reference, "Version")), None
                    )
                if version:
                    versions[include.casefold()] = version
        return versions

    def _is_flex_group(self, element: ET.Element) -> bool:
        if local_name(element) != "ItemGroup":
            return False
        condition = element.get("Condition") or ""
        return any(token in condition for token in self._switch_tokens)

    def _is_flex_reference(self, element: ET.Element) -> bool:
        include = element.get("Include")
        if include is None:
            return False
        name = local_name(element)
        if name == EdgeKind.PACKAGE.value:
            return include.casefold() in self._package_ids
        if name == EdgeKind.PROJECT.value:
            return _include_file_name(include).casefold() in self._manifest_file_names
        return False

    def _remove_flex_references(self, root: ET.Element) -> None:
        # ItemGroups may also sit inside Choose/When or Target elements
        for parent in [node for node in root.iter() if isinstance(node.tag, str)]:
            remove_generated_blocks(parent, self._is_flex_group)

        for parent in [node for node in root.iter() if isinstance(node.tag, str)]:
            for group in child_elements(parent, "ItemGroup"):
                stale = [e for e in child_elements(group) if self._is_flex_reference(e)]
                if not stale:
                    continue
                for reference in stale:
                    group.remove(reference)
                prune_if_empty(parent, group)

    # ── regeneration ─────────────────────────────────────────────────────

    @staticmethod
    def _append_pair(
        root: ET.Element,
        manifest: ProjectManifest,
        package: FlexManagedPackage,
        versions: dict[str, str],
    ) -> None:
        switch = package.switch_property
        version = versions.get(package.package_id.casefold(), WILDCARD_VERSION)

        append_comment(root, f" {package.package_id} (flex reference) ")
        package_group = append_element(
            root, "ItemGroup", {"Condition": f"'$({switch})' == 'true'"}
        )
        append_element(
            package_group,
            EdgeKind.PACKAGE.value,
            {"Include": package.package_id, "Version": version},
        )
        project_group = append_element(
            root, "ItemGroup", {"Condition": f"'$({switch})' != 'true'"}
        )
        append_element(
            project_group,
            EdgeKind.PROJECT.value,
            {"Include": relative_reference_path(manifest.path, package.manifest_path)},
        )
