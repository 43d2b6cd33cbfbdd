# SPDX-License-Identifier: MIT
"""Run and test the project against its vendor tree."""

from __future__ import annotations

import click

from pinvend_vendor import GO_COMMAND

from ..main import Context, pass_context
from ..project import vendor_and_run

PASSTHROUGH = {"ignore_unknown_options": True}


@click.command(context_settings=PASSTHROUGH)
@click.option("-u", "--update", is_flag=True, help="Update branch dependencies first.")
@click.option("-r", "--remote", is_flag=True, help="Ignore packages already present in GOPATH.")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@pass_context
def run(ctx: Context, update: bool, remote: bool, args: tuple[str, ...]) -> None:
    """Compile and run the project via "go run"."""
    vendor_and_run(ctx, lambda project: [[GO_COMMAND, "run", *args]], update, remote)


@click.command(context_settings=PASSTHROUGH)
@click.option("-u", "--update", is_flag=True, help="Update branch dependencies first.")
@click.option("-r", "--remote", is_flag=True, help="Ignore packages already present in GOPATH.")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@pass_context
def test(ctx: Context, update: bool, remote: bool, args: tuple[str, ...]) -> None:
    """Run "go test", resolving test-only imports as well."""
    vendor_and_run(
        ctx,
        lambda project: [[GO_COMMAND, "test", *args]],
        update,
        remote,
        include_tests=True,
    )
