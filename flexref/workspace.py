"""Workspace orchestrator: the ``init`` and ``sync`` operations.

Expected outcomes such as "configuration already exists" are reported as an
:class:`OperationStatus` on the returned :class:`OperationResult`.  Malformed
documents that have to be edited raise a :class:`~flexref.exceptions.FlexRefError`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from flexref.configuration import ConfigurationStore
from flexref.core.diagnostics import Diagnostics
from flexref.reconcilers import (
    ChangeAction,
    FileChange,
    ManifestReconciler,
    SharedPropsReconciler,
    SolutionSettingsReconciler,
    write_build_logic,
)
from flexref.resolver import resolve_flex_packages
from flexref.scanner import (
    FlexManagedPackage,
    ProjectManifest,
    scan_manifests,
    scan_solutions,
)

log = structlog.get_logger("flexref.workspace")

__all__ = ["FileChange", "OperationResult", "OperationStatus", "Workspace"]


class OperationStatus(str, enum.Enum):
    OK = "ok"
    ROOT_NOT_FOUND = "root_not_found"
    CONFIGURATION_EXISTS = "configuration_exists"
    CONFIGURATION_NOT_FOUND = "configuration_not_found"


@dataclass
class OperationResult:
    """Outcome of one workspace operation."""

    status: OperationStatus
    root: Path
    changes: list[FileChange] = field(default_factory=list)
    packages: list[FlexManagedPackage] | list[ProjectManifest] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is OperationStatus.OK


class Workspace:
    """A directory tree of .csproj projects and .slnx solutions."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()
        self.configuration = ConfigurationStore(self.root)

    def _result(
        self, status: OperationStatus, diagnostics: Diagnostics | None = None
    ) -> OperationResult:
        return OperationResult(
            status=status,
            root=self.root,
            warnings=list(diagnostics.warnings) if diagnostics else [],
        )

    def initialize(self) -> OperationResult:
        """Create a default configuration and the build-logic fragment.

        Fails with ``CONFIGURATION_EXISTS`` rather than overwriting an
        existing configuration.
        """
        if not self.root.is_dir():
            return self._result(OperationStatus.ROOT_NOT_FOUND)

        diagnostics = Diagnostics()
        manifests = scan_manifests(self.root, diagnostics)
        log.info("workspace.scanned", root=str(self.root), manifests=len(manifests))

        if self.configuration.exists():
            return self._result(OperationStatus.CONFIGURATION_EXISTS, diagnostics)

        candidates = self.configuration.create_default(manifests, diagnostics)
        changes = [
            FileChange(
                path=self.configuration.path,
                action=ChangeAction.CREATED,
                detail=f"{len(candidates)} packable project(s)",
            ),
            write_build_logic(self.root),
        ]
        log.info("workspace.initialized", root=str(self.root), candidates=len(candidates))
        return OperationResult(
            status=OperationStatus.OK,
            root=self.root,
            changes=changes,
            packages=candidates,
            warnings=list(diagnostics.warnings),
        )

    def synchronize(self) -> OperationResult:
        """Regenerate every FlexRef-managed section from the configuration.

        Order: build-logic fragment, Directory.Build.props, each consuming
        project, then each solution's NCrunch settings.  Running it twice in a
        row leaves every file byte-identical.
        """
        if not self.root.is_dir():
            return self._result(OperationStatus.ROOT_NOT_FOUND)
        if not self.configuration.exists():
            return self._result(OperationStatus.CONFIGURATION_NOT_FOUND)

        diagnostics = Diagnostics()
        manifests = scan_manifests(self.root, diagnostics)
        configuration = self.configuration.load()
        packages = resolve_flex_packages(configuration, manifests, diagnostics)
        log.info(
            "workspace.resolved",
            root=str(self.root),
            manifests=len(manifests),
            packages=len(packages),
        )

        changes: list[FileChange] = [write_build_logic(self.root)]
        changes.append(SharedPropsReconciler(self.root).reconcile(packages))

        manifest_reconciler = ManifestReconciler(packages)
        for manifest in manifests:
            change = manifest_reconciler.reconcile(manifest)
            if change is not None:
                changes.append(change)

        settings_reconciler = SolutionSettingsReconciler(packages)
        for solution in scan_solutions(self.root, diagnostics):
            changes.append(settings_reconciler.reconcile(solution))

        log.info("workspace.synchronized", root=str(self.root), files=len(changes))
        return OperationResult(
            status=OperationStatus.OK,
            root=self.root,
            changes=changes,
            packages=packages,
            warnings=list(diagnostics.warnings),
        )
