# SPDX-License-Identifier: MIT
"""gopm.io: release API for change detection, flat zip archives."""

from __future__ import annotations

import logging
import re

from ..archive import fetch_archive, install_zip
from ..errors import FetchError
from ..httputil import get_json
from ..node import Node
from ..service import FetchContext, FetchResult, Service, collect_imports, is_unchanged

logger = logging.getLogger(__name__)

PATTERN = re.compile(
    r"^gopm\.io/(?P<owner>[a-z0-9A-Z_.\-]+)/(?P<repo>[a-z0-9A-Z_.\-]+)"
    r"(?P<dir>/[a-z0-9A-Z_.\-/]*)?$"
)

RELEASE_URL = "http://gopm.io/api/v1/{owner}/{repo}/releases/latest"
ARCHIVE_URL = "http://gopm.io/{owner}/{repo}.zip?r={sha}"


def latest_release(match: dict[str, str], ctx: FetchContext) -> str:
    try:
        release = get_json(ctx.client, RELEASE_URL.format(**match))
    except FetchError as e:
        logger.warning("Fail to get revision: %s", e)
        return ""
    if not isinstance(release, dict):
        return ""
    tag = release.get("tag", "")
    if not tag:
        logger.warning("Fail to get revision: %s", release.get("error", ""))
    return tag


def fetch(match: dict[str, str], node: Node, ctx: FetchContext) -> FetchResult:
    if not node.is_empty_val():
        sha = node.value
    else:
        sha = latest_release(match, ctx)
        if is_unchanged(node, sha):
            return None
        if sha:
            node.revision = sha

    url = ARCHIVE_URL.format(sha=sha, **match)
    with fetch_archive(ctx.client, ctx.settings, url, node.root_path) as archive:
        install_zip(archive, node.install_path, root_of=None)
    return collect_imports(node, ctx)


SERVICE = Service("gopm.io", "gopm.io/", PATTERN, fetch)
