# SPDX-License-Identifier: MIT
"""launchpad.net: Bazaar branch tarballs."""

from __future__ import annotations

import re

from ..archive import fetch_archive, install_tarball, root_through
from ..errors import FetchError
from ..httputil import get_bytes
from ..node import Node
from ..service import FetchContext, FetchResult, Service, collect_imports

PATTERN = re.compile(
    r"^launchpad\.net/(?P<repo>(?P<project>[a-z0-9A-Z_.\-]+)(?P<series>/[a-z0-9A-Z_.\-]+)?"
    r"|~[a-z0-9A-Z_.\-]+/(\+junk|[a-z0-9A-Z_.\-]+)/[a-z0-9A-Z_.\-]+)"
    r"(?P<dir>/[a-z0-9A-Z_.\-/]+)*$"
)

BRANCH_FORMAT_URL = "https://code.launchpad.net/{project}{series}/.bzr/branch-format"
TARBALL_URL = "https://bazaar.launchpad.net/+branch/{repo}/tarball"


def resolve_series(match: dict[str, str], ctx: FetchContext) -> None:
    """Decide whether ``project/series`` is a branch or a subdirectory."""
    if not (match.get("project") and match.get("series")):
        return
    try:
        get_bytes(ctx.client, BRANCH_FORMAT_URL.format(**match))
    except FetchError as e:
        if e.status_code != 404:
            raise
        match["dir"] = match["series"] + match.get("dir", "")
        match["repo"] = match["project"]


def fetch(match: dict[str, str], node: Node, ctx: FetchContext) -> FetchResult:
    resolve_series(match, ctx)

    url = TARBALL_URL.format(**match)
    if node.value:
        url += "/" + node.value

    with fetch_archive(ctx.client, ctx.settings, url, node.root_path, ext="tar.gz") as archive:
        install_tarball(archive, node.install_path, root_of=root_through(match["repo"]))
    return collect_imports(node, ctx)


SERVICE = Service("launchpad", "launchpad.net/", PATTERN, fetch)
