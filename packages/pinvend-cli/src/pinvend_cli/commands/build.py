# SPDX-License-Identifier: MIT
"""Build and install the project against its vendor tree."""

from __future__ import annotations

import click

from pinvend_fetch import GoImportScanner
from pinvend_vendor import GO_COMMAND, direct_imports

from ..main import Context, pass_context
from ..project import Project, vendor_and_run

PASSTHROUGH = {"ignore_unknown_options": True}


@click.command(context_settings=PASSTHROUGH)
@click.option("-u", "--update", is_flag=True, help="Update branch dependencies first.")
@click.option("-r", "--remote", is_flag=True, help="Ignore packages already present in GOPATH.")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@pass_context
def build(ctx: Context, update: bool, remote: bool, args: tuple[str, ...]) -> None:
    """Build the project with its pinned dependencies.

    Extra arguments are passed to "go build".

    \b
    Examples:
        pinvend build
        pinvend build -u -- -v -o app
    """
    vendor_and_run(
        ctx,
        lambda project: [[GO_COMMAND, "build", *args]],
        update,
        remote,
        collect_binary=True,
    )


@click.command(context_settings=PASSTHROUGH)
@click.option("-u", "--update", is_flag=True, help="Update branch dependencies first.")
@click.option("-r", "--remote", is_flag=True, help="Ignore packages already present in GOPATH.")
@click.option(
    "-p",
    "--package",
    "dependencies",
    is_flag=True,
    help="Install every direct import instead of the project.",
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@pass_context
def install(
    ctx: Context, update: bool, remote: bool, dependencies: bool, args: tuple[str, ...]
) -> None:
    """Install the project, or with -p its direct imports."""

    def commands(project: Project) -> list[list[str]]:
        if not dependencies:
            return [[GO_COMMAND, "install", *args]]
        imports = direct_imports(GoImportScanner(), project.target, project.work_dir)
        return [[GO_COMMAND, "install", *args, path] for path in imports]

    vendor_and_run(ctx, commands, update, remote)
