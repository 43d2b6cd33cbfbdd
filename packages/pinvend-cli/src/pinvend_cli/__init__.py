# SPDX-License-Identifier: MIT
"""Command line interface for pinvend.

Example:
    >>> from click.testing import CliRunner
    >>> from pinvend_cli import cli
    >>>
    >>> result = CliRunner().invoke(cli, ["-C", "path/to/project", "list"])
    >>> print(result.output)
"""

__version__ = "0.1.0"

from .config import (
    ConfigError,
    GlobalConfig,
    load_settings,
)
from .logs import (
    ClickEchoHandler,
    configure_logging,
)
from .main import (
    Context,
    cli,
    main,
)

__all__ = [
    # Entry points
    "cli",
    "main",
    "Context",
    # Config
    "GlobalConfig",
    "ConfigError",
    "load_settings",
    # Logging
    "ClickEchoHandler",
    "configure_logging",
]
