# SPDX-License-Identifier: MIT
"""git.oschina.net: revision scraped from the tree page."""

from __future__ import annotations

import re

from pinvend_version import RevisionType
from pinvend_version.pkg import MASTER

from ..archive import fetch_archive, install_zip
from ..errors import FetchError
from ..httputil import get_text
from ..node import Node
from ..service import FetchContext, FetchResult, Service, collect_imports, is_unchanged

PATTERN = re.compile(
    r"^git\.oschina\.net/(?P<owner>[a-z0-9A-Z_.\-]+)/(?P<repo>[a-z0-9A-Z_.\-]+)"
    r"(?P<dir>/[a-z0-9A-Z_.\-/]*)?$"
)
REVISION_PATTERN = re.compile(r"<span class='sha'>([a-z0-9A-Z]*)")

TREE_URL = "http://git.oschina.net/{owner}/{repo}/tree/{sha}"
ARCHIVE_URL = "http://git.oschina.net/{owner}/{repo}/repository/archive?ref={sha}"


def fetch(match: dict[str, str], node: Node, ctx: FetchContext) -> FetchResult:
    if node.rev_type == RevisionType.BRANCH:
        if not node.is_empty_val():
            sha = node.value
        else:
            sha = MASTER
            page = get_text(ctx.client, TREE_URL.format(sha=sha, **match))
            m = REVISION_PATTERN.search(page)
            if m is None:
                raise FetchError("fail to get revision", node.import_path)
            if is_unchanged(node, m.group(1)):
                return None
            node.revision = m.group(1)
    elif node.rev_type in (RevisionType.TAG, RevisionType.COMMIT):
        sha = node.value
    else:
        raise FetchError(f"invalid node type: {node.rev_type}", node.import_path)

    url = ARCHIVE_URL.format(sha=sha, **match)
    repo = match["repo"]
    with fetch_archive(ctx.client, ctx.settings, url, node.root_path) as archive:
        install_zip(archive, node.install_path, root_of=lambda _: repo)
    return collect_imports(node, ctx)


SERVICE = Service("oschina", "git.oschina.net/", PATTERN, fetch)
