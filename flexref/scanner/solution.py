"""Parser for .slnx solution files."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

from flexref.core.xml_tree import descendants, parse_text
from flexref.exceptions import ManifestParseError
from flexref.scanner.models import SolutionGroup


class SlnxParser:
    """Collect the project file names a solution declares.

    Only ``<Project Path="...">`` entries are read, at any nesting depth
    (solution folders included); of each path only the file name is kept.
    """

    def parse(self, file_path: Path, content: str) -> SolutionGroup:
        try:
            root = parse_text(content)
        except ET.ParseError as exc:
            raise ManifestParseError(file_path, str(exc)) from exc

        members: set[str] = set()
        for project in descendants(root, "Project"):
            path = project.get("Path")
            if not path:
                continue
            file_name = path.replace("\\", "/").rsplit("/", 1)[-1]
            members.add(file_name.casefold())

        return SolutionGroup(path=file_path, member_file_names=frozenset(members))
