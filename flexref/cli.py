"""CLI entry point: flexref.

Subcommands:
    flexref init [DIRECTORY]    # Create FlexRef.config.xml and build/FlexRef.props
    flexref sync [DIRECTORY]    # Update all managed files based on configuration
"""

from __future__ import annotations

import sys

import click

from flexref.constants import BUILD_DIRECTORY_NAME, CONFIGURATION_FILE_NAME, PROPS_FILE_NAME
from flexref.core.logging import setup_logging
from flexref.exceptions import FlexRefError
from flexref.workspace import OperationResult, OperationStatus, Workspace

_USAGE = f"""\
Usage: flexref <command> [directory]

Commands:
  init   Create {CONFIGURATION_FILE_NAME} and {BUILD_DIRECTORY_NAME}/{PROPS_FILE_NAME}
  sync   Update all managed files based on configuration

If [directory] is omitted, the current directory is used."""


def _fail(*lines: str) -> None:
    for line in lines:
        click.echo(line, err=True)
    sys.exit(1)


def _report(result: OperationResult) -> None:
    for change in result.changes:
        click.echo(f"  {change.describe()}")
    for warning in result.warnings:
        click.echo(f"Warning: {warning}", err=True)


def _fail_on_status(result: OperationResult) -> None:
    if result.status is OperationStatus.ROOT_NOT_FOUND:
        _fail(f"Error: Directory not found: {result.root}")
    elif result.status is OperationStatus.CONFIGURATION_EXISTS:
        _fail(
            f"Error: {CONFIGURATION_FILE_NAME} already exists.",
            "Delete it first if you want to re-initialize.",
        )
    elif result.status is OperationStatus.CONFIGURATION_NOT_FOUND:
        _fail(
            f"Error: {CONFIGURATION_FILE_NAME} not found.",
            "Run 'flexref init' first to create the configuration.",
        )


class _FlexRefGroup(click.Group):
    """Report usage errors (unknown command, bad option or argument) with exit code 1."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = 1
            raise


@click.group(
    cls=_FlexRefGroup,
    invoke_without_command=True,
    context_settings={"token_normalize_func": str.lower},
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """FlexRef: switch between ProjectReference and PackageReference per solution."""
    setup_logging(verbose=verbose)
    if ctx.invoked_subcommand is None:
        click.echo(_USAGE)
        sys.exit(1)


@main.command()
@click.argument("directory", default=".", type=click.Path(file_okay=False))
def init(directory: str) -> None:
    """Create the configuration and the build-logic fragment."""
    workspace = Workspace(directory)
    click.echo(f"Initializing FlexRef in: {workspace.root}")
    try:
        result = workspace.initialize()
    except FlexRefError as e:
        _fail(f"Error: {e}")
        return
    _fail_on_status(result)

    if result.packages:
        click.echo(f"Found {len(result.packages)} packable project(s):")
        for manifest in result.packages:
            click.echo(f"  {manifest.package_id}")
    else:
        click.echo("No packable projects found.")
    _report(result)

    click.echo()
    click.echo("Initialization complete.")
    click.echo(f"Review {CONFIGURATION_FILE_NAME}, then run 'flexref sync' to generate the boilerplate.")


@main.command()
@click.argument("directory", default=".", type=click.Path(file_okay=False))
def sync(directory: str) -> None:
    """Update all managed files based on the configuration."""
    workspace = Workspace(directory)
    click.echo(f"Syncing FlexRef in: {workspace.root}")
    try:
        result = workspace.synchronize()
    except FlexRefError as e:
        _fail(f"Error: {e}")
        return
    _fail_on_status(result)

    click.echo(f"Flex-managed packages: {len(result.packages)}")
    for package in result.packages:
        click.echo(f"  {package.package_id} ({package.switch_property})")
    _report(result)

    click.echo()
    click.echo("Sync complete.")


if __name__ == "__main__":
    main()
