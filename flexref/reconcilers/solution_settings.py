"""Pre-sets switches in each solution's NCrunch settings file.

NCrunch builds projects outside of the solution context, so the
auto-detection in Directory.Build.props cannot see which projects are
missing.  For every package whose project is absent from the solution, the
settings file gets a ``UsePackageReference_X = true`` custom build property.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

import structlog

from flexref.constants import SWITCH_PROPERTY_PREFIX
from flexref.core.xml_tree import (
    append_element,
    child_elements,
    first_child,
    load_document,
    local_name,
    new_document,
    prune_if_empty,
    save_document,
)
from flexref.exceptions import MalformedDocumentError
from flexref.reconcilers.models import ChangeAction, FileChange
from flexref.scanner.models import FlexManagedPackage, SolutionGroup

log = structlog.get_logger("flexref.reconcile")

_ROOT_TAG = "SolutionConfiguration"
_SETTINGS_TAG = "Settings"
_CUSTOM_PROPERTIES_TAG = "CustomBuildProperties"
_VALUE_TAG = "Value"


def _is_switch_value(element: ET.Element) -> bool:
    return local_name(element) == _VALUE_TAG and (element.text or "").lstrip().startswith(
        SWITCH_PROPERTY_PREFIX
    )


def _append_switch_values(parent: ET.Element, packages: list[FlexManagedPackage]) -> None:
    for package in packages:
        append_element(parent, _VALUE_TAG, text=f"{package.switch_property} = true")


class SolutionSettingsReconciler:
    def __init__(self, packages: list[FlexManagedPackage]) -> None:
        self._packages = packages

    def reconcile(self, solution: SolutionGroup) -> FileChange:
        absent = solution.absent_packages(self._packages)
        path = solution.settings_path

        if not path.exists():
            tree = new_document(_ROOT_TAG)
            settings = append_element(tree.getroot(), _SETTINGS_TAG)
            if absent:
                _append_switch_values(append_element(settings, _CUSTOM_PROPERTIES_TAG), absent)
            action = ChangeAction.CREATED
        else:
            try:
                tree = load_document(path)
            except ET.ParseError as exc:
                raise MalformedDocumentError(path, f"missing root element ({exc})") from exc
            root = tree.getroot()
            settings = first_child(root, _SETTINGS_TAG)
            if settings is None:
                settings = append_element(root, _SETTINGS_TAG)

            custom = first_child(settings, _CUSTOM_PROPERTIES_TAG)
            if custom is not None:
                for value in [v for v in child_elements(custom) if _is_switch_value(v)]:
                    custom.remove(value)
            if absent:
                if custom is None:
                    custom = append_element(settings, _CUSTOM_PROPERTIES_TAG)
                _append_switch_values(custom, absent)
            if custom is not None:
                prune_if_empty(settings, custom)
            action = ChangeAction.UPDATED

        save_document(tree, path)
        log.info(
            "reconcile.solution_settings_written",
            path=str(path),
            solution=str(solution.path),
            absent=[p.package_id for p in absent],
        )
        return FileChange(path=path, action=action, detail=f"{len(absent)} absent package(s)")
