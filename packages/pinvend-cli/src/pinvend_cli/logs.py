# SPDX-License-Identifier: MIT
"""Terminal output helpers and the bridge from ``logging`` to click."""

from __future__ import annotations

import logging

import click

# Loggers of every pinvend package, wired to the terminal by the CLI.
LOGGER_NAMES = (
    "pinvend_version",
    "pinvend_manifest",
    "pinvend_fetch",
    "pinvend_vendor",
    "pinvend_cli",
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


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.secho(f"Warning: {message}", fg="yellow", err=True)


class ClickEchoHandler(logging.Handler):
    """Routes log records through the echo helpers by level."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
        except Exception:
            self.handleError(record)
            return
        if record.levelno >= logging.ERROR:
            echo_error(message)
        elif record.levelno >= logging.WARNING:
            echo_warning(message)
        else:
            echo_info(message)


def configure_logging(verbose: bool = False, debug: bool = False) -> None:
    """Attach a single ClickEchoHandler to the pinvend loggers.

    Args:
        verbose: Show INFO records
        debug: Show DEBUG records
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        for handler in [h for h in logger.handlers if isinstance(h, ClickEchoHandler)]:
            logger.removeHandler(handler)
        logger.addHandler(ClickEchoHandler())
        logger.setLevel(level)
