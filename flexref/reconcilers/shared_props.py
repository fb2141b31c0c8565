"""Maintains the FlexRef section of the root Directory.Build.props."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

import structlog

from flexref.constants import (
    DIRECTORY_BUILD_PROPS_FILE_NAME,
    PROPS_FILE_NAME,
    SOLUTION_PROJECTS_PROPERTY,
    SOLUTION_PROJECTS_SEPARATOR,
    SWITCH_PROPERTY_PREFIX,
)
from flexref.core.xml_tree import (
    append_comment,
    append_element,
    child_elements,
    load_document,
    local_name,
    new_document,
    prune_if_empty,
    remove_generated_blocks,
    save_document,
)
from flexref.exceptions import MalformedDocumentError
from flexref.reconcilers.build_logic import import_project_value
from flexref.reconcilers.models import ChangeAction, FileChange
from flexref.scanner.models import FlexManagedPackage, sort_packages

log = structlog.get_logger("flexref.reconcile")

IMPORT_COMMENT = " Import FlexRef infrastructure (reads solution content) "
PROPERTIES_COMMENT = " Per-dependency auto-detection managed by FlexRef "


def switch_default_condition(package: FlexManagedPackage) -> str:
    """Default the switch to true only when a solution is known and lacks the project."""
    sep = SOLUTION_PROJECTS_SEPARATOR
    return (
        f"'$({package.switch_property})' != 'true'"
        f" And '$({SOLUTION_PROJECTS_PROPERTY})' != ''"
        f" And !$({SOLUTION_PROJECTS_PROPERTY}.Contains('{sep}{package.manifest_file_name}{sep}'))"
    )


def _is_flexref_import(element: ET.Element) -> bool:
    return local_name(element) == "Import" and PROPS_FILE_NAME in (element.get("Project") or "")


def _is_switch_property(element: ET.Element) -> bool:
    return local_name(element).startswith(SWITCH_PROPERTY_PREFIX)


class SharedPropsReconciler:
    def __init__(self, root: Path) -> None:
        self.path = root / DIRECTORY_BUILD_PROPS_FILE_NAME

    def reconcile(self, packages: list[FlexManagedPackage]) -> FileChange:
        """Rewrite the import and the switch defaults; always writes the file."""
        existed = self.path.is_file()
        if existed:
            try:
                tree = load_document(self.path)
            except ET.ParseError as exc:
                raise MalformedDocumentError(self.path, f"missing root element ({exc})") from exc
        else:
            tree = new_document("Project")
        root = tree.getroot()

        remove_generated_blocks(root, _is_flexref_import)
        for group in child_elements(root, "PropertyGroup"):
            if remove_generated_blocks(group, _is_switch_property):
                prune_if_empty(root, group)

        append_comment(root, IMPORT_COMMENT)
        append_element(root, "Import", {"Project": import_project_value()})

        if packages:
            append_comment(root, PROPERTIES_COMMENT)
            group = append_element(root, "PropertyGroup")
            for package in sort_packages(packages):
                append_comment(group, f" {package.package_id} ")
                append_element(
                    group,
                    package.switch_property,
                    {"Condition": switch_default_condition(package)},
                    text="true",
                )

        save_document(tree, self.path)
        log.info("reconcile.shared_props_updated", path=str(self.path), switches=len(packages))
        return FileChange(
            path=self.path,
            action=ChangeAction.UPDATED if existed else ChangeAction.CREATED,
            detail=f"{len(packages)} switch(es)",
        )
