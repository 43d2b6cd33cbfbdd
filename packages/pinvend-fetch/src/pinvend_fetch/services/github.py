# SPDX-License-Identifier: MIT
"""github.com: refs API for change detection, zip archives by sha."""

from __future__ import annotations

import logging
import re

from pinvend_version import RevisionType
from pinvend_version.pkg import MASTER

from ..archive import fetch_archive, install_zip
from ..errors import FetchError
from ..httputil import get_json
from ..node import Node
from ..service import FetchContext, FetchResult, Service, collect_imports, is_unchanged

logger = logging.getLogger(__name__)

PATTERN = re.compile(
    r"^github\.com/(?P<owner>[a-z0-9A-Z_.\-]+)/(?P<repo>[a-z0-9A-Z_.\-]+)"
    r"(?P<dir>/[a-z0-9A-Z_.\-/]*)?$"
)

REFS_URL = "https://api.github.com/repos/{owner}/{repo}/git/refs"
ARCHIVE_URL = "https://github.com/{owner}/{repo}/archive/{sha}.zip"

DEFAULT_HEADS = ("refs/heads/master", "refs/heads/main")


def latest_revision(match: dict[str, str], ctx: FetchContext) -> str:
    """Return the sha of the default branch head, or ``""`` if unknown.

    Rate limiting (403) and other API failures are not fatal: the caller
    downloads the default branch without change detection.
    """
    try:
        refs = get_json(
            ctx.client,
            REFS_URL.format(**match),
            params=ctx.settings.github_credentials(),
        )
    except FetchError as e:
        if e.status_code == 403:
            logger.debug("GitHub API rate limited for %s/%s", match["owner"], match["repo"])
        else:
            logger.warning("Fail to get revision: %s", e)
        return ""

    if not isinstance(refs, list):
        return ""
    heads = {ref.get("ref", ""): ref.get("object", {}).get("sha", "") for ref in refs}
    for head in DEFAULT_HEADS:
        if heads.get(head):
            return heads[head]
    return ""


def fetch(match: dict[str, str], node: Node, ctx: FetchContext) -> FetchResult:
    if node.rev_type == RevisionType.BRANCH:
        if not node.is_empty_val():
            sha = node.value
        else:
            etag = latest_revision(match, ctx)
            if is_unchanged(node, etag):
                return None
            if etag:
                node.revision = etag
            sha = etag or MASTER
    elif node.rev_type in (RevisionType.TAG, RevisionType.COMMIT):
        sha = node.value
    else:
        raise FetchError(f"invalid node type: {node.rev_type}", node.import_path)

    url = ARCHIVE_URL.format(sha=sha, **match)
    with fetch_archive(ctx.client, ctx.settings, url, node.root_path) as archive:
        install_zip(archive, node.install_path)
    return collect_imports(node, ctx)


SERVICE = Service("github", "github.com/", PATTERN, fetch)
