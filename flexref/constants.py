"""File names and MSBuild literals shared across the engine."""

from __future__ import annotations

CONFIGURATION_FILE_NAME = "FlexRef.config.xml"
PROPS_FILE_NAME = "FlexRef.props"
BUILD_DIRECTORY_NAME = "build"
DIRECTORY_BUILD_PROPS_FILE_NAME = "Directory.Build.props"

MANIFEST_EXTENSION = ".csproj"
MANIFEST_GLOB = "*.csproj"
SOLUTION_EXTENSION = ".slnx"
SOLUTION_GLOB = "*.slnx"
NCRUNCH_SOLUTION_EXTENSION = ".v3.ncrunchsolution"

SWITCH_PROPERTY_PREFIX = "UsePackageReference_"
SOLUTION_PROJECTS_PROPERTY = "_FlexRef_SolutionProjects"
SOLUTION_PROJECTS_SEPARATOR = "|"
WILDCARD_VERSION = "*-*"

# Compared case-insensitively against every directory name below the root
DIRECTORIES_TO_SKIP = frozenset({"bin", "obj", "node_modules", ".git", ".vs", ".idea"})

MSBUILD_NAMESPACE = "http://schemas.microsoft.com/developer/msbuild/2003"
