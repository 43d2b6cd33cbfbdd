# SPDX-License-Identifier: MIT
"""Errors raised while fetching remote packages."""

from __future__ import annotations

from typing import Optional

from pinvend_version import InvalidImportPathError, PinvendError

__all__ = ["FetchError", "InvalidImportPathError"]


class FetchError(PinvendError):
    """Raised when a package cannot be downloaded or extracted.

    Fetch errors are scoped to one dependency; the walker records them and
    carries on with the rest of the graph.

    Attributes:
        import_path: Package the error belongs to, if known
        status_code: HTTP status of the failing response, if any
    """

    def __init__(
        self,
        message: str,
        import_path: str = "",
        status_code: Optional[int] = None,
    ):
        self.import_path = import_path
        self.status_code = status_code
        if import_path:
            message = f"{import_path}: {message}"
        super().__init__(message)
