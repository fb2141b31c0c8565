"""FlexRef.config.xml: which packages participate in flexible referencing."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

import structlog

from flexref.constants import CONFIGURATION_FILE_NAME
from flexref.core.diagnostics import Diagnostics
from flexref.core.xml_tree import (
    append_comment,
    append_element,
    child_elements,
    first_child,
    load_document,
    new_document,
    save_document,
)
from flexref.exceptions import InvalidConfigurationError
from flexref.scanner.models import ProjectManifest, expected_file_name, identity_sort_key

log = structlog.get_logger("flexref.configuration")

_ROOT_TAG = "FlexRef"
_AUTO_DISCOVER_TAG = "AutoDiscover"
_EXCLUDE_TAG = "Exclude"
_PACKAGE_TAG = "Package"
_NAME_ATTRIBUTE = "Name"


@dataclass(frozen=True)
class Configuration:
    auto_discover: bool = False
    auto_discover_exclusions: tuple[str, ...] = ()
    explicit_package_names: tuple[str, ...] = ()

    def is_excluded(self, package_id: str) -> bool:
        folded = package_id.casefold()
        return any(name.casefold() == folded for name in self.auto_discover_exclusions)


def _names(elements: list[ET.Element]) -> tuple[str, ...]:
    return tuple(name for name in (e.get(_NAME_ATTRIBUTE) for e in elements) if name is not None)


class ConfigurationStore:
    """Reads and creates the configuration file at the workspace root."""

    def __init__(self, root: Path) -> None:
        self.path = root / CONFIGURATION_FILE_NAME

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Configuration:
        """Parse the configuration file.

        ``<AutoDiscover>`` switches auto-discovery on by its mere presence; its
        ``<Exclude Name=...>`` children list packages to leave out.  Top-level
        ``<Package Name=...>`` entries are always included.

        Raises :class:`InvalidConfigurationError` if the file is not a
        well-formed XML document.
        """
        try:
            root = load_document(self.path).getroot()
        except ET.ParseError as exc:
            raise InvalidConfigurationError(self.path, f"has no root element ({exc})") from exc

        auto_discover = first_child(root, _AUTO_DISCOVER_TAG)
        configuration = Configuration(
            auto_discover=auto_discover is not None,
            auto_discover_exclusions=(
                _names(child_elements(auto_discover, _EXCLUDE_TAG)) if auto_discover is not None else ()
            ),
            explicit_package_names=_names(child_elements(root, _PACKAGE_TAG)),
        )
        log.debug(
            "configuration.loaded",
            path=str(self.path),
            auto_discover=configuration.auto_discover,
            exclusions=list(configuration.auto_discover_exclusions),
            packages=list(configuration.explicit_package_names),
        )
        return configuration

    def create_default(
        self,
        manifests: list[ProjectManifest],
        diagnostics: Diagnostics,
    ) -> list[ProjectManifest]:
        """Write a configuration enabling auto-discovery.

        The packable projects found are listed in a comment as a ready-made
        explicit alternative.  Returns those projects, sorted by package id.
        """
        candidates = sorted(
            (m for m in manifests if m.is_candidate),
            key=lambda m: identity_sort_key(m.package_id or ""),
        )
        for manifest in candidates:
            if not manifest.file_name_matches_package_id:
                diagnostics.warn(
                    "configuration.package_id_mismatch",
                    f"Package ID '{manifest.package_id}' does not match file name "
                    f"'{manifest.file_name}'",
                    package_id=manifest.package_id,
                    expected=expected_file_name(manifest.package_id or ""),
                )

        tree = new_document(_ROOT_TAG)
        root = tree.getroot()
        append_element(root, _AUTO_DISCOVER_TAG)
        if candidates:
            package_lines = "\n".join(
                f'  <{_PACKAGE_TAG} {_NAME_ATTRIBUTE}="{m.package_id}" />' for m in candidates
            )
            append_comment(
                root,
                f" Alternatively, list packages explicitly instead of using {_AUTO_DISCOVER_TAG}:"
                f"\n{package_lines}\n  ",
            )
        save_document(tree, self.path)
        log.info("configuration.created", path=str(self.path), candidates=len(candidates))
        return candidates
