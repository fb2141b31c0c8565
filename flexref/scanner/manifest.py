"""Parser for SDK-style .csproj files."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from pathlib import Path

from flexref.core.xml_tree import child_elements, local_name, parse_text, text_of
from flexref.exceptions import ManifestParseError
from flexref.scanner.models import DependencyEdge, EdgeKind, ProjectManifest

_PROP_RE = re.compile(r"\$\(([^)]+)\)")


def _resolve_props(value: str, props: dict[str, str]) -> str:
    """Replace $(Property) references with values declared in the project."""

    def _replace(m: re.Match) -> str:
        key = m.group(1).strip()
        return props.get(key, m.group(0))  # unknown: left verbatim

    return _PROP_RE.sub(_replace, value)


def _is_true(value: str | None) -> bool:
    return value is not None and value.lower() == "true"


def _is_false(value: str | None) -> bool:
    return value is not None and value.lower() == "false"


def extract_properties(root: ET.Element) -> dict[str, str]:
    """Collect ``<PropertyGroup>`` values; the last non-empty one wins."""
    props: dict[str, str] = {}
    for group in child_elements(root, "PropertyGroup"):
        for prop in child_elements(group):
            value = text_of(prop)
            if value:
                props[local_name(prop)] = value
    return props


class CsprojParser:
    """Read package identity, packability and reference items from a .csproj."""

    def parse(
        self,
        file_path: Path,
        content: str,
        inherited: dict[str, str] | None = None,
    ) -> ProjectManifest:
        """Parse ``content`` of ``file_path``.

        ``inherited`` holds properties imported from the nearest
        ``Directory.Build.props``; only ``IsPackable`` is taken from it.

        Raises :class:`ManifestParseError` if the text is not a project file.
        """
        try:
            root = parse_text(content)
        except ET.ParseError as exc:
            raise ManifestParseError(file_path, str(exc)) from exc
        if local_name(root) != "Project":
            raise ManifestParseError(
                file_path, f"root element is <{local_name(root)}>, expected <Project>"
            )

        props = {"MSBuildProjectName": file_path.stem}
        props.update(extract_properties(root))
        props.setdefault("AssemblyName", file_path.stem)

        explicit_package_id = props.get("PackageId")
        unresolved_package_id = None
        if explicit_package_id:
            explicit_package_id = _resolve_props(explicit_package_id, props).strip() or None
        if explicit_package_id and _PROP_RE.search(explicit_package_id):
            unresolved_package_id, explicit_package_id = explicit_package_id, None

        is_packable_value = props.get("IsPackable")
        if is_packable_value is None and inherited:
            is_packable_value = inherited.get("IsPackable")
        if is_packable_value is not None:
            is_packable_value = _resolve_props(is_packable_value, props).strip()

        is_packable = unresolved_package_id is None and not _is_false(is_packable_value) and (
            explicit_package_id is not None or _is_true(is_packable_value)
        )
        package_id = explicit_package_id or (file_path.stem if is_packable else None)

        return ProjectManifest(
            path=file_path,
            package_id=package_id,
            is_packable=is_packable,
            edges=tuple(self._extract_edges(root)),
            unresolved_package_id=unresolved_package_id,
        )

    @staticmethod
    def _extract_edges(root: ET.Element) -> list[DependencyEdge]:
        edges: list[DependencyEdge] = []
        for element in root.iter():
            if not isinstance(element.tag, str):
                continue
            name = local_name(element)
            if name not in (EdgeKind.PROJECT.value, EdgeKind.PACKAGE.value):
                continue
            include = (element.get("Include") or "").strip()
            if not include:
                continue
            if name == EdgeKind.PROJECT.value:
                edges.append(DependencyEdge(kind=EdgeKind.PROJECT, target=include))
            else:
                version = element.get("Version")
                if version is None:
                    version = next(
                        (text_of(v) for v in child_elements(element, "Version")), None
                    )
                edges.append(
                    DependencyEdge(kind=EdgeKind.PACKAGE, target=include, version=version)
                )
        return edges


def read_inherited_properties(props_file: Path) -> dict[str, str]:
    """Properties declared by a Directory.Build.props file.

    Raises :class:`ManifestParseError` if the file is not well-formed XML.
    """
    try:
        root = parse_text(props_file.read_text(encoding="utf-8-sig"))
    except ET.ParseError as exc:
        raise ManifestParseError(props_file, str(exc)) from exc
    return extract_properties(root)
