# SPDX-License-Identifier: MIT
"""Shared types for host specific fetch services."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from .imports import ImportOracle
from .node import Node
from .settings import FetchSettings

logger = logging.getLogger(__name__)

# A fetch returns the imports found in the downloaded tree, or None when the
# package has not changed since the recorded revision.
FetchResult = Optional[list[str]]


@dataclass
class FetchContext:
    """Collaborators shared by every fetch in one run.

    Attributes:
        settings: Session settings
        client: HTTP client for all requests
        oracle: Lists the imports of a downloaded tree
        include_tests: Whether test-only imports are reported
    """

    settings: FetchSettings
    client: httpx.Client
    oracle: ImportOracle
    include_tests: bool = False


FetchFunc = Callable[[dict[str, str], Node, FetchContext], FetchResult]


@dataclass(frozen=True)
class Service:
    """One hosting family: URL prefix, path pattern and fetch function."""

    name: str
    prefix: str
    pattern: re.Pattern
    fetch: FetchFunc

    def match(self, download_url: str) -> Optional[dict[str, str]]:
        m = self.pattern.match(download_url)
        if m is None:
            return None
        groups = {k: v or "" for k, v in m.groupdict().items()}
        groups["download_url"] = download_url
        return groups


def collect_imports(node: Node, ctx: FetchContext) -> list[str]:
    """Imports of a freshly installed node, empty when it is not walked."""
    if not node.is_get_deps:
        return []
    return ctx.oracle.imports_of(
        node.import_path, node.root_path, node.install_path, ctx.include_tests
    )


def is_unchanged(node: Node, latest: str) -> bool:
    """Return True when ``latest`` matches the node's recorded revision."""
    if latest and latest == node.revision:
        logger.info("Package hasn't changed: %s", node.import_path)
        return True
    return False
