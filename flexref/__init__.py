"""FlexRef: flexible ProjectReference / PackageReference switching for .csproj workspaces."""

__version__ = "0.1.0"

from flexref.configuration import Configuration, ConfigurationStore
from flexref.exceptions import (
    BuildLogicResourceError,
    FlexRefError,
    InvalidConfigurationError,
    MalformedDocumentError,
)
from flexref.scanner.models import (
    DependencyEdge,
    EdgeKind,
    FlexManagedPackage,
    ProjectManifest,
    SolutionGroup,
)
from flexref.workspace import FileChange, OperationResult, OperationStatus, Workspace

__all__ = [
    "BuildLogicResourceError",
    "Configuration",
    "ConfigurationStore",
    "DependencyEdge",
    "EdgeKind",
    "FileChange",
    "FlexManagedPackage",
    "FlexRefError",
    "InvalidConfigurationError",
    "MalformedDocumentError",
    "OperationResult",
    "OperationStatus",
    "ProjectManifest",
    "SolutionGroup",
    "Workspace",
]
