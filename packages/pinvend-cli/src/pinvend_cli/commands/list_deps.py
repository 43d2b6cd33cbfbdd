# SPDX-License-Identifier: MIT
"""List the project's direct dependencies."""

from __future__ import annotations

import click

from pinvend_fetch import GoImportScanner
from pinvend_vendor import list_dependencies
from pinvend_version import PinvendError

from ..main import Context, echo_error, echo_info, pass_context
from ..project import load_project


@click.command("list")
@click.option(
    "-t",
    "--test",
    "include_tests",
    is_flag=True,
    help="Include imports of test files.",
)
@pass_context
def list_command(ctx: Context, include_tests: bool) -> None:
    """List the repositories the project imports, with their pins."""
    try:
        project = load_project(ctx)
        deps = project.manifest.dependencies()
    except PinvendError as e:
        echo_error(str(e))
        raise SystemExit(1)

    roots = list_dependencies(GoImportScanner(), project.target, project.work_dir, include_tests)
    echo_info(f"Dependency list ({len(roots)}):")
    for root in roots:
        pkg = deps.get(root)
        echo_info(f"-> {root}{pkg.ver_suffix() if pkg else ''}")
