"""Comment-preserving XML document helpers built on xml.etree.ElementTree.

Every file FlexRef rewrites goes through :func:`load_document` and
:func:`save_document`.  Loading drops whitespace-only text, saving re-indents
the whole tree with two spaces, so a document that was written once is
reproduced byte for byte by the next load/save cycle.

Generated blocks are always an element optionally preceded by a comment
sibling; :func:`remove_generated_blocks` is the single primitive all
reconcilers use to take such blocks out again.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable, Iterator

_NS_RE = re.compile(r"^\{([^}]*)\}")


# ── reading ──────────────────────────────────────────────────────────────


def parse_text(content: str) -> ET.Element:
    """Parse XML text into a root element, keeping comments inside the root."""
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    parser.feed(content)
    root = parser.close()
    _strip_insignificant_whitespace(root)
    return root


def load_document(path: Path) -> ET.ElementTree:
    """Load an XML file.  Raises :class:`ET.ParseError` on malformed input."""
    content = path.read_text(encoding="utf-8-sig")
    return ET.ElementTree(parse_text(content))


def new_document(root_name: str) -> ET.ElementTree:
    return ET.ElementTree(ET.Element(root_name))


def _strip_insignificant_whitespace(root: ET.Element) -> None:
    for node in root.iter():
        if node.text is not None and not node.text.strip() and not is_comment(node):
            node.text = None
        if node.tail is not None and not node.tail.strip():
            node.tail = None


# ── writing ──────────────────────────────────────────────────────────────


def to_text(root: ET.Element) -> str:
    """Serialize without XML declaration, indented with two spaces."""
    uri = namespace_uri(root)
    if uri:
        # Serialize the root's namespace as the default one instead of ns0:
        ET.register_namespace("", uri)
    tree = ET.ElementTree(root)
    ET.indent(tree, space="  ")
    return ET.tostring(root, encoding="unicode", short_empty_elements=True)


def save_document(tree: ET.ElementTree, path: Path) -> None:
    """Write UTF-8 (no BOM, no declaration) with a trailing newline."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_text(tree.getroot()) + "\n", encoding="utf-8")


# ── node inspection ──────────────────────────────────────────────────────


def is_comment(node: ET.Element) -> bool:
    return node.tag is ET.Comment


def namespace_uri(element: ET.Element) -> str:
    if not isinstance(element.tag, str):
        return ""
    m = _NS_RE.match(element.tag)
    return m.group(1) if m else ""


def local_name(element: ET.Element) -> str:
    """Tag without namespace; empty string for comments and PIs."""
    if not isinstance(element.tag, str):
        return ""
    return element.tag.rsplit("}", 1)[-1]


def child_elements(parent: ET.Element, name: str | None = None) -> list[ET.Element]:
    """Element children (comments excluded), optionally filtered by local name."""
    return [
        child
        for child in parent
        if not is_comment(child) and isinstance(child.tag, str)
        and (name is None or local_name(child) == name)
    ]


def first_child(parent: ET.Element, name: str) -> ET.Element | None:
    for child in child_elements(parent, name):
        return child
    return None


def descendants(root: ET.Element, name: str) -> Iterator[ET.Element]:
    for node in root.iter():
        if isinstance(node.tag, str) and local_name(node) == name:
            yield node


def has_element_children(element: ET.Element) -> bool:
    return bool(child_elements(element))


def text_of(element: ET.Element | None) -> str | None:
    if element is None:
        return None
    return element.text.strip() if element.text else None


# ── mutation ─────────────────────────────────────────────────────────────


def qualified(parent: ET.Element, name: str) -> str:
    """Qualify ``name`` with the namespace of ``parent``."""
    uri = namespace_uri(parent)
    return f"{{{uri}}}{name}" if uri else name


def append_element(
    parent: ET.Element,
    name: str,
    attrib: dict[str, str] | None = None,
    text: str | None = None,
) -> ET.Element:
    element = ET.SubElement(parent, qualified(parent, name), attrib or {})
    if text is not None:
        element.text = text
    return element


def append_comment(parent: ET.Element, text: str) -> ET.Element:
    comment = ET.Comment(text)
    parent.append(comment)
    return comment


def remove_with_preceding_comment(parent: ET.Element, child: ET.Element) -> None:
    """Remove ``child`` and the comment directly before it, if there is one."""
    siblings = list(parent)
    index = siblings.index(child)
    if index > 0 and is_comment(siblings[index - 1]):
        parent.remove(siblings[index - 1])
    parent.remove(child)


def remove_generated_blocks(
    parent: ET.Element,
    is_generated: Callable[[ET.Element], bool],
) -> int:
    """Remove every child element matching ``is_generated`` with its leading comment.

    Leading comments are determined against the sibling list as it was before
    any removal, so removing one block never exposes an unrelated comment to
    the next.  Returns the number of blocks removed.
    """
    siblings = list(parent)
    doomed: list[ET.Element] = []
    for index, node in enumerate(siblings):
        if is_comment(node) or not isinstance(node.tag, str) or not is_generated(node):
            continue
        if index > 0 and is_comment(siblings[index - 1]):
            doomed.append(siblings[index - 1])
        doomed.append(node)
    for node in doomed:
        parent.remove(node)
    return sum(1 for node in doomed if not is_comment(node))


def prune_if_empty(parent: ET.Element, child: ET.Element) -> bool:
    """Remove ``child`` (and its leading comment) when it has no element children."""
    if has_element_children(child):
        return False
    remove_with_preceding_comment(parent, child)
    return True
