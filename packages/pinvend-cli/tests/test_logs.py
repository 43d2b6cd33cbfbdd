# SPDX-License-Identifier: MIT
"""Tests for terminal logging."""

from __future__ import annotations

import logging

import pytest

from pinvend_cli.logs import LOGGER_NAMES, ClickEchoHandler, configure_logging


@pytest.fixture(autouse=True)
def reset_loggers():
    yield
    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        for handler in [h for h in logger.handlers if isinstance(h, ClickEchoHandler)]:
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.mark.parametrize(
        "verbose,debug,level",
        [
            (False, False, logging.WARNING),
            (True, False, logging.INFO),
            (False, True, logging.DEBUG),
            (True, True, logging.DEBUG),
        ],
    )
    def test_levels(self, verbose: bool, debug: bool, level: int) -> None:
        configure_logging(verbose=verbose, debug=debug)

        for name in LOGGER_NAMES:
            assert logging.getLogger(name).level == level

    def test_single_handler(self) -> None:
        """Test that repeated configuration does not stack handlers."""
        configure_logging()
        configure_logging(verbose=True)

        handlers = logging.getLogger("pinvend_vendor").handlers
        assert sum(isinstance(h, ClickEchoHandler) for h in handlers) == 1


class TestClickEchoHandler:
    """Tests for routing records to the terminal."""

    def test_routes_by_level(self, capsys: pytest.CaptureFixture) -> None:
        configure_logging(verbose=True)
        logger = logging.getLogger("pinvend_fetch.protocol")

        logger.info("Downloading package: x")
        logger.warning("Fail to get revision")
        logger.error("Fail to download package")

        captured = capsys.readouterr()
        assert "Downloading package: x" in captured.out
        assert "Warning: Fail to get revision" in captured.err
        assert "Error: Fail to download package" in captured.err

    def test_quiet_by_default(self, capsys: pytest.CaptureFixture) -> None:
        configure_logging()

        logging.getLogger("pinvend_vendor.walker").info("Skipped downloaded package")

        assert "Skipped" not in capsys.readouterr().out
