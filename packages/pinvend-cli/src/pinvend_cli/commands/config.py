# SPDX-License-Identifier: MIT
"""Manage persisted global settings."""

from __future__ import annotations

import click

from ..config import (
    CLIENT_ID_KEY,
    CLIENT_SECRET_KEY,
    GITHUB_SECTION,
    HTTP_PROXY_KEY,
    SETTINGS_SECTION,
    ConfigError,
    GlobalConfig,
)
from ..main import Context, echo_error, echo_info, echo_success, pass_context

# Option name -> (section, keys)
OPTIONS = {
    "proxy": (SETTINGS_SECTION, (HTTP_PROXY_KEY,)),
    "github": (GITHUB_SECTION, (CLIENT_ID_KEY, CLIENT_SECRET_KEY)),
}

option_argument = click.argument("option", type=click.Choice(sorted(OPTIONS)))


def _load(ctx: Context) -> GlobalConfig:
    try:
        return GlobalConfig.load(ctx.load_settings().config_file)
    except ConfigError as e:
        echo_error(str(e))
        raise SystemExit(1)


def _save(config: GlobalConfig) -> None:
    try:
        config.save()
    except ConfigError as e:
        echo_error(str(e))
        raise SystemExit(1)


@click.group()
def config() -> None:
    """Show or change the proxy and GitHub credentials.

    \b
    Examples:
        pinvend config set proxy http://127.0.0.1:8080
        pinvend config set github CLIENT_ID CLIENT_SECRET
        pinvend config get github
        pinvend config unset proxy
    """


@config.command("get")
@option_argument
@pass_context
def get_option(ctx: Context, option: str) -> None:
    """Show a setting."""
    section, keys = OPTIONS[option]
    cfg = _load(ctx)
    echo_info(f"[{section}]")
    for key in keys:
        echo_info(f"{key} = {cfg.get(section, key)}")


@config.command("set")
@option_argument
@click.argument("values", nargs=-1, required=True)
@pass_context
def set_option(ctx: Context, option: str, values: tuple[str, ...]) -> None:
    """Change a setting."""
    section, keys = OPTIONS[option]
    if len(values) != len(keys):
        echo_error(f"'{option}' takes {len(keys)} value(s): {' '.join(keys)}")
        raise SystemExit(1)

    cfg = _load(ctx)
    for key, value in zip(keys, values):
        cfg.set(section, key, value)
    _save(cfg)
    echo_success(f"Updated {option}")


@config.command("unset")
@option_argument
@pass_context
def unset_option(ctx: Context, option: str) -> None:
    """Remove a setting."""
    section, keys = OPTIONS[option]
    cfg = _load(ctx)
    for key in keys:
        cfg.unset(section, key)
    _save(cfg)
    echo_success(f"Removed {option}")
