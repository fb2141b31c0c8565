"""Shared pytest fixtures for FlexRef tests: build small .csproj workspaces on disk."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import structlog

from flexref.constants import CONFIGURATION_FILE_NAME


class WorkspaceBuilder:
    """Writes projects, solutions and configuration files below ``root``."""

    def __init__(self, root: Path):
        self.root = root

    def write(self, relative: str, content: str) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def project(
        self,
        name: str,
        *,
        directory: str | None = None,
        packable: bool | None = True,
        package_id: str | None = None,
        project_refs: tuple[str, ...] = (),
        package_refs: dict[str, str | None] | None = None,
    ) -> Path:
        """Write ``<directory>/<name>.csproj`` (``directory`` defaults to ``src/<name>``)."""
        properties = []
        if packable is not None:
            properties.append(f"    <IsPackable>{str(packable).lower()}</IsPackable>")
        if package_id is not None:
            properties.append(f"    <PackageId>{package_id}</PackageId>")
        items = [f'    <ProjectReference Include="{ref}" />' for ref in project_refs]
        for include, version in (package_refs or {}).items():
            if version is None:
                items.append(f'    <PackageReference Include="{include}" />')
            else:
                items.append(f'    <PackageReference Include="{include}" Version="{version}" />')

        lines = ['<Project Sdk="Microsoft.NET.Sdk">', "  <PropertyGroup>"]
        lines.append("    <TargetFramework>net8.0</TargetFramework>")
        lines.extend(properties)
        lines.append("  </PropertyGroup>")
        if items:
            lines.append("  <ItemGroup>")
            lines.extend(items)
            lines.append("  </ItemGroup>")
        lines.append("</Project>")
        return self.write(f"{directory or 'src/' + name}/{name}.csproj", "\n".join(lines) + "\n")

    def solution(self, relative: str, *project_paths: str) -> Path:
        entries = "\n".join(f'  <Project Path="{p}" />' for p in project_paths)
        return self.write(relative, f"<Solution>\n{entries}\n</Solution>\n")

    def configuration(
        self,
        *,
        auto_discover: bool = True,
        exclude: tuple[str, ...] = (),
        packages: tuple[str, ...] = (),
    ) -> Path:
        lines = ["<FlexRef>"]
        if auto_discover:
            if exclude:
                lines.append("  <AutoDiscover>")
                lines.extend(f'    <Exclude Name="{name}" />' for name in exclude)
                lines.append("  </AutoDiscover>")
            else:
                lines.append("  <AutoDiscover />")
        lines.extend(f'  <Package Name="{name}" />' for name in packages)
        lines.append("</FlexRef>")
        return self.write(CONFIGURATION_FILE_NAME, "\n".join(lines) + "\n")

    def read(self, relative: str) -> str:
        return (self.root / relative).read_text(encoding="utf-8")

    def snapshot(self) -> dict[str, bytes]:
        """Every file below the root, keyed by relative path."""
        return {
            str(p.relative_to(self.root)): p.read_bytes()
            for p in sorted(self.root.rglob("*"))
            if p.is_file()
        }


@pytest.fixture
def builder(tmp_path: Path) -> WorkspaceBuilder:
    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def two_project_workspace(builder: WorkspaceBuilder) -> WorkspaceBuilder:
    """App (not packable) references packable Core; one solution holds both, one only App."""
    builder.project("Core")
    builder.project("App", packable=False, project_refs=("..\\Core\\Core.csproj",))
    builder.solution("All.slnx", "src/Core/Core.csproj", "src/App/App.csproj")
    builder.solution("AppOnly.slnx", "src/App/App.csproj")
    builder.configuration()
    return builder


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo setup_logging() so handlers never outlive a test's captured streams."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
