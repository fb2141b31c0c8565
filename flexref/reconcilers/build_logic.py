"""Copies the packaged FlexRef.props build-logic fragment into the workspace."""

from __future__ import annotations

from importlib import resources
from pathlib import Path

import structlog

from flexref.constants import BUILD_DIRECTORY_NAME, PROPS_FILE_NAME
from flexref.exceptions import BuildLogicResourceError
from flexref.reconcilers.models import ChangeAction, FileChange

log = structlog.get_logger("flexref.reconcile")


def props_file_path(root: Path) -> Path:
    return root / BUILD_DIRECTORY_NAME / PROPS_FILE_NAME


def import_project_value() -> str:
    """The ``<Import Project=...>`` value used by Directory.Build.props."""
    return f"$(MSBuildThisFileDirectory){BUILD_DIRECTORY_NAME}\\{PROPS_FILE_NAME}"


def read_template() -> bytes:
    resource = resources.files("flexref") / "data" / PROPS_FILE_NAME
    try:
        return resource.read_bytes()
    except FileNotFoundError as exc:
        raise BuildLogicResourceError(
            f"Packaged {PROPS_FILE_NAME} not found in the flexref distribution"
        ) from exc


def write_build_logic(root: Path) -> FileChange:
    """Write ``build/FlexRef.props`` verbatim from the packaged template."""
    target = props_file_path(root)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(read_template())
    log.info("reconcile.build_logic_written", path=str(target))
    return FileChange(path=target, action=ChangeAction.WROTE)
