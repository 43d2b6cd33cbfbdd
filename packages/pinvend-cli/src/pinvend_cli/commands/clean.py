# SPDX-License-Identifier: MIT
"""Remove temporary download files."""

from __future__ import annotations

import shutil

import click

from ..config import ConfigError
from ..main import Context, echo_error, echo_info, echo_success, pass_context


@click.command()
@pass_context
def clean(ctx: Context) -> None:
    """Remove leftover archives from the temp directory."""
    try:
        temp_root = ctx.load_settings().temp_root
    except ConfigError as e:
        echo_error(str(e))
        raise SystemExit(1)

    if not temp_root.exists():
        echo_info("Nothing to clean")
        return
    try:
        shutil.rmtree(temp_root)
    except OSError as e:
        echo_error(f"Cannot remove {temp_root}: {e}")
        raise SystemExit(1)
    echo_success(f"Removed {temp_root}")
