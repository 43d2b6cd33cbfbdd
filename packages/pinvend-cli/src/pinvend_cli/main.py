# SPDX-License-Identifier: MIT
"""CLI entry point for the pinvend command."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from pinvend_fetch import FetchSettings
from pinvend_version import PinvendError

from .config import ConfigError, load_settings
from .logs import configure_logging, echo_error, echo_info, echo_success, echo_warning


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.settings: Optional[FetchSettings] = None
        self.verbose: bool = False
        self.debug: bool = False
        self.strict: bool = False
        self.project_dir: Optional[Path] = None

    @property
    def work_dir(self) -> Path:
        return (self.project_dir or Path.cwd()).absolute()

    def load_settings(self) -> FetchSettings:
        """Load session settings, caching the result."""
        if self.settings is None:
            self.settings = load_settings()
        return self.settings


pass_context = click.make_pass_decorator(Context, ensure=True)


@click.group()
@click.version_option(package_name="pinvend")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose output.",
)
@click.option(
    "-d",
    "--debug",
    is_flag=True,
    help="Enable debug output and keep the .vendor directory.",
)
@click.option(
    "-s",
    "--strict",
    is_flag=True,
    help="Exit with an error when any dependency fails.",
)
@click.option(
    "-C",
    "--directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Change to directory before running command.",
)
@pass_context
def cli(ctx: Context, verbose: bool, debug: bool, strict: bool, directory: Optional[Path]) -> None:
    """Fetch, pin and vendor Go dependencies.

    Dependencies are cached under ~/.pinvend/repos and linked into a
    throwaway .vendor tree for every build.

    \b
    Examples:
        pinvend gen
        pinvend get github.com/foo/bar@tag:v1.0.0 --save
        pinvend list
        pinvend build
        pinvend run main.go
    """
    ctx.verbose = verbose
    ctx.debug = debug
    ctx.strict = strict
    ctx.project_dir = directory
    configure_logging(verbose=verbose, debug=debug)


# Import and register commands
from .commands import build, clean, config, gen, get, list_deps, run

cli.add_command(get.get)
cli.add_command(gen.gen)
cli.add_command(list_deps.list_command)
cli.add_command(build.build)
cli.add_command(build.install)
cli.add_command(run.run)
cli.add_command(run.test)
cli.add_command(config.config)
cli.add_command(clean.clean)


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except ConfigError as e:
        echo_error(str(e))
        sys.exit(1)
    except PinvendError as e:
        echo_error(str(e))
        sys.exit(1)
    except Exception as e:
        echo_error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
