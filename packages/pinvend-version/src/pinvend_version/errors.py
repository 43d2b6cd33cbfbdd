# SPDX-License-Identifier: MIT
"""Exception hierarchy shared by every pinvend package."""

from __future__ import annotations


class PinvendError(Exception):
    """Base class for all pinvend errors."""

    pass


class VersionParseError(PinvendError):
    """Raised when a pin string cannot be parsed.

    A malformed pin in a manifest is something the user has to fix, so callers
    treat this as fatal to the whole run.
    """

    def __init__(self, text: str, message: str = ""):
        self.text = text
        self.message = message or f"Cannot parse dependency version: {text!r}"
        super().__init__(self.message)


class InvalidImportPathError(PinvendError):
    """Raised when an import path is structurally malformed."""

    def __init__(self, import_path: str):
        self.import_path = import_path
        super().__init__(f"Invalid import path: {import_path}")
