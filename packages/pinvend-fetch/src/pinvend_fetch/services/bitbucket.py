# SPDX-License-Identifier: MIT
"""bitbucket.org: repository API for VCS, branches and tags."""

from __future__ import annotations

import re

from pinvend_version import DEFAULT_BRANCHES, RevisionType
from pinvend_version.pkg import MASTER

from ..archive import fetch_archive, install_zip
from ..errors import FetchError
from ..httputil import get_json
from ..node import Node
from ..service import FetchContext, FetchResult, Service, collect_imports, is_unchanged

PATTERN = re.compile(
    r"^bitbucket\.org/(?P<owner>[a-z0-9A-Z_.\-]+)/(?P<repo>[a-z0-9A-Z_.\-]+)"
    r"(?P<dir>/[a-z0-9A-Z_.\-/]*)?$"
)
ETAG_PATTERN = re.compile(r"^(hg|git)-")

REPO_URL = "https://api.bitbucket.org/1.0/repositories/{owner}/{repo}"
NODES_URL = "https://api.bitbucket.org/1.0/repositories/{owner}/{repo}/{kind}"
ARCHIVE_URL = "https://bitbucket.org/{owner}/{repo}/get/{commit}.zip"


def repo_vcs(match: dict[str, str], node: Node, ctx: FetchContext) -> str:
    m = ETAG_PATTERN.match(node.value)
    if m:
        return m.group(1)
    repo = get_json(ctx.client, REPO_URL.format(**match))
    return repo.get("scm", "") if isinstance(repo, dict) else ""


def branches_and_tags(match: dict[str, str], ctx: FetchContext) -> dict[str, str]:
    """Map every branch and tag name to its commit."""
    tags: dict[str, str] = {}
    for kind in ("branches", "tags"):
        nodes = get_json(ctx.client, NODES_URL.format(kind=kind, **match))
        if not isinstance(nodes, dict):
            continue
        for name, info in nodes.items():
            tags[name] = info.get("node", "") if isinstance(info, dict) else ""
    return tags


def fetch(match: dict[str, str], node: Node, ctx: FetchContext) -> FetchResult:
    vcs = repo_vcs(match, node, ctx)
    tags = branches_and_tags(match, ctx)

    if node.rev_type == RevisionType.BRANCH:
        if not node.is_empty_val():
            commit = tags.get(node.value, node.value)
        else:
            default = DEFAULT_BRANCHES.get(vcs, MASTER)
            commit = tags.get(default, "")
            if not commit:
                raise FetchError(f"tag or branch not found: {default}", node.import_path)
            if is_unchanged(node, commit):
                return None
    elif node.rev_type in (RevisionType.TAG, RevisionType.COMMIT):
        commit = tags.get(node.value, node.value)
    else:
        raise FetchError(f"invalid node type: {node.rev_type}", node.import_path)
    node.revision = commit

    url = ARCHIVE_URL.format(commit=commit, **match)
    with fetch_archive(ctx.client, ctx.settings, url, node.root_path) as archive:
        install_zip(archive, node.install_path)
    return collect_imports(node, ctx)


SERVICE = Service("bitbucket", "bitbucket.org/", PATTERN, fetch)
