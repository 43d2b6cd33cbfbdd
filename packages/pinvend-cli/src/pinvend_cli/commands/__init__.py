# SPDX-License-Identifier: MIT
"""CLI command implementations."""

from . import build, clean, config, gen, get, list_deps, run

__all__ = ["build", "clean", "config", "gen", "get", "list_deps", "run"]
