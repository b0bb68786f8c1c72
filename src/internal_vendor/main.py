# SPDX-License-Identifier: MIT
"""CLI entry point for the internal-vendor command."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
import structlog

from . import commands
from .config import WorkspaceConfig, load_config
from .errors import VendorError
from .manifest import find_project_root


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[WorkspaceConfig] = None
        self.verbose: bool = False
        self.directory: Optional[Path] = None

    @property
    def start_dir(self) -> Path:
        return self.directory if self.directory is not None else Path.cwd()

    def load_config(self) -> WorkspaceConfig:
        """Load configuration for the current project, caching the result."""
        if self.config is None:
            self.config = load_config(find_project_root(self.start_dir))
        return self.config


pass_context = click.make_pass_decorator(Context, ensure=True)


def configure_logging(verbose: bool) -> None:
    """Route structlog output to stderr, filtered by level."""
    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def echo_error(message: str) -> None:
    """Print an error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.secho(message, fg="green")


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(message)


@click.group()
@click.version_option(package_name="internal-vendor")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable debug logging.",
)
@click.option(
    "-C",
    "--directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Run as if started in this directory.",
)
@pass_context
def cli(ctx: Context, verbose: bool, directory: Optional[Path]) -> None:
    """Vendor Go packages into a project's internal folder.

    \b
    Examples:
        internal-vendor init
        internal-vendor list
        internal-vendor add github.com/kr/pretty
    """
    ctx.verbose = verbose
    ctx.directory = directory
    configure_logging(verbose)


@cli.command()
@pass_context
def init(ctx: Context) -> None:
    """Create internal/vendor.json in the current directory."""
    try:
        path = commands.cmd_init(ctx.start_dir)
    except VendorError as e:
        echo_error(str(e))
        raise SystemExit(1) from e
    echo_success(f"Created {path}")


@cli.command(name="list")
@click.option(
    "--status",
    "-s",
    "statuses",
    multiple=True,
    help="Only show packages with this status code (e.g. -s e -s u).",
)
@pass_context
def list_cmd(ctx: Context, statuses: tuple[str, ...]) -> None:
    """List packages referenced by the project.

    \b
    Status codes:
        u  unused vendored package
        i  internal (vendored) package
        e  external package
        l  local package
        s  standard library
        m  missing
        ?  unknown
    """
    try:
        items = commands.cmd_list(ctx.start_dir, ctx.load_config())
    except VendorError as e:
        echo_error(str(e))
        raise SystemExit(1) from e

    for item in items:
        if statuses and item.status.code not in statuses:
            continue
        echo_info(str(item))


@cli.command()
@click.argument("import_path")
@pass_context
def add(ctx: Context, import_path: str) -> None:
    """Copy IMPORT_PATH into internal/ and rewrite imports to use it."""
    try:
        result = commands.cmd_add(import_path, ctx.start_dir, ctx.load_config())
    except VendorError as e:
        echo_error(str(e))
        raise SystemExit(1) from e

    echo_success(f"Vendored {result.import_path} as {result.local_path}")
    for path in result.files_modified:
        echo_info(f"  Rewrote: {path}")


@cli.command()
@click.argument("import_path")
def update(import_path: str) -> None:
    """Update a vendored package (not implemented)."""
    commands.cmd_update(import_path)


@cli.command()
@click.argument("import_path")
def remove(import_path: str) -> None:
    """Remove a vendored package (not implemented)."""
    commands.cmd_remove(import_path)


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except OSError as e:
        echo_error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
