# SPDX-License-Identifier: MIT
"""gitcafe.com: revision scraped from the tree page, tarball archives."""

from __future__ import annotations

import re

from pinvend_version import RevisionType
from pinvend_version.pkg import MASTER

from ..archive import fetch_archive, install_tarball, root_through
from ..errors import FetchError
from ..httputil import get_text
from ..node import Node
from ..service import FetchContext, FetchResult, Service, collect_imports, is_unchanged

PATTERN = re.compile(
    r"^gitcafe\.com/(?P<owner>[a-z0-9A-Z_.\-]+)/(?P<repo>[a-z0-9A-Z_.\-]+)"
    r"(?P<dir>/[a-z0-9A-Z_.\-/]*)?$"
)
REVISION_PATTERN = re.compile(r'<i class="icon-push"></i>([a-z0-9A-Z]*)')

TREE_URL = "http://gitcafe.com/{owner}/{repo}/tree/{sha}"
TARBALL_URL = "http://gitcafe.com/{owner}/{repo}/tarball/{sha}"


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

    url = TARBALL_URL.format(sha=sha, **match)
    with fetch_archive(ctx.client, ctx.settings, url, node.root_path, ext="tar") as archive:
        install_tarball(archive, node.install_path, root_of=root_through(match["repo"]))
    return collect_imports(node, ctx)


SERVICE = Service("gitcafe", "gitcafe.com/", PATTERN, fetch)
