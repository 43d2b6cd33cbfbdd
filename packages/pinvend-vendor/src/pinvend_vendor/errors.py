# SPDX-License-Identifier: MIT
"""Errors raised while resolving and assembling a vendor tree."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pinvend_version import PinvendError


class LinkError(PinvendError):
    """Raised when a dependency cannot be linked into the vendor tree.

    A partially linked tree cannot be built against, so this aborts the
    whole assembly.

    Attributes:
        source: Directory being linked
        dest: Link location inside the vendor tree
    """

    def __init__(self, message: str, source: Optional[Path] = None, dest: Optional[Path] = None):
        self.source = source
        self.dest = dest
        super().__init__(message)


class StrictModeError(PinvendError):
    """Raised in strict mode when any dependency failed to resolve."""

    def __init__(self, fail_count: int, summary: str):
        self.fail_count = fail_count
        super().__init__(f"{summary} (strict mode)")
