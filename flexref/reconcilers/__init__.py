"""File reconcilers: regenerate FlexRef-managed sections of workspace files."""

from flexref.reconcilers.build_logic import write_build_logic
from flexref.reconcilers.manifest import ManifestReconciler
from flexref.reconcilers.models import ChangeAction, FileChange
from flexref.reconcilers.shared_props import SharedPropsReconciler
from flexref.reconcilers.solution_settings import SolutionSettingsReconciler

__all__ = [
    "ChangeAction",
    "FileChange",
    "ManifestReconciler",
    "SharedPropsReconciler",
    "SolutionSettingsReconciler",
    "write_build_logic",
]
