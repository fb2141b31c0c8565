"""File discovery: walk the workspace and collect files matching a glob."""

from __future__ import annotations

import fnmatch
import os
from pathlib import Path

from flexref.constants import DIRECTORIES_TO_SKIP


def _skipped(directory_name: str) -> bool:
    return directory_name.lower() in DIRECTORIES_TO_SKIP


def discover_files(root: Path, pattern: str) -> list[Path]:
    """Recursively find files whose name matches ``pattern`` (case-insensitive).

    Build output, package cache, VCS and IDE directories are pruned at any
    depth.  Each directory's own files come before its subdirectories and
    both are visited in sorted order, so the result is stable across runs.
    """
    pattern = pattern.lower()
    hits: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not _skipped(d))
        for name in sorted(filenames):
            if fnmatch.fnmatchcase(name.lower(), pattern):
                hits.append(Path(dirpath) / name)
    return hits
