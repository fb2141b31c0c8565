"""Custom exceptions for FlexRef."""

from __future__ import annotations

from pathlib import Path


class FlexRefError(Exception):
    """Base exception for all FlexRef errors."""


class InvalidConfigurationError(FlexRefError):
    """Raised when FlexRef.config.xml cannot be read as a configuration document."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid config file: {path}: {reason}")


class MalformedDocumentError(FlexRefError):
    """Raised when an XML file that must be edited has no usable root element."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid {path.name}: {reason}")


class BuildLogicResourceError(FlexRefError):
    """Raised when the packaged FlexRef.props template cannot be found."""


class ManifestParseError(FlexRefError):
    """Raised when a .csproj or .slnx file cannot be read; scanners skip such files."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not parse {path}: {reason}")
