# SPDX-License-Identifier: MIT
"""code.google.com: page scraping for VCS and revision."""

from __future__ import annotations

import logging
import re
import shutil

from pinvend_version import DEFAULT_BRANCHES, RevisionType

from ..archive import fetch_archive, install_zip
from ..errors import FetchError
from ..httputil import get_bytes, get_text
from ..node import Node
from ..service import FetchContext, FetchResult, Service, collect_imports, is_unchanged

logger = logging.getLogger(__name__)

PATTERN = re.compile(
    r"^code\.google\.com/p/(?P<repo>[a-z0-9\-]+)(:?\.(?P<subrepo>[a-z0-9\-]+))?"
    r"(?P<dir>/[a-z0-9A-Z_.\-/]+)?$"
)
REPO_PATTERN = re.compile(r'id="checkoutcmd">(hg|git|svn)')
REVISION_PATTERN = re.compile(r"<h2>(?:[^ ]+ - )?Revision *([^:]+):")
FILE_PATTERN = re.compile(r'<li><a href="([^"/]+)"')
DIR_PATTERN = re.compile(r'<li><a href="([^".]+)"')

CHECKOUT_URL = "http://code.google.com/p/{repo}/source/checkout"
REVISION_URL = "http://{subrepo}{dot}{repo}.googlecode.com/{vcs}{dir}/?r={tag}"
ARCHIVE_URL = "http://{subrepo}{dot}{repo}.googlecode.com/archive/{tag}.zip"
SVN_ROOT_URL = "http://{subrepo}{dot}{repo}.googlecode.com/{vcs}/"


def setup_match(match: dict[str, str]) -> None:
    match["dot"] = "." if match.get("subrepo") else ""


def project_vcs(match: dict[str, str], ctx: FetchContext) -> str:
    page = get_text(ctx.client, CHECKOUT_URL.format(**match))
    m = REPO_PATTERN.search(page)
    if m is None:
        raise FetchError("could not find VCS on Google Code project page")
    return m.group(1)


def download_svn_tree(
    base_url: str, node: Node, ctx: FetchContext, revision: str
) -> None:
    """Mirror a Subversion directory listing file by file."""
    suffix = f"?r={revision}" if revision else ""
    node.install_path.mkdir(parents=True, exist_ok=True)
    pending = [""]
    while pending:
        rel = pending.pop()
        page = get_text(ctx.client, base_url + rel + suffix)
        target = node.install_path / rel
        target.mkdir(parents=True, exist_ok=True)
        for m in FILE_PATTERN.finditer(page):
            name = m.group(1).split("?", 1)[0]
            (target / name).write_bytes(
                get_bytes(ctx.client, base_url + rel + name + suffix)
            )
        for m in DIR_PATTERN.finditer(page):
            name = m.group(1).split("?", 1)[0]
            if name.endswith("/") and name != "../":
                pending.append(rel + name)


def fetch(match: dict[str, str], node: Node, ctx: FetchContext) -> FetchResult:
    setup_match(match)
    vcs = project_vcs(match, ctx)
    match["vcs"] = vcs

    if node.rev_type == RevisionType.BRANCH:
        tag = node.value or DEFAULT_BRANCHES[vcs]
    elif node.rev_type in (RevisionType.TAG, RevisionType.COMMIT):
        tag = node.value
    else:
        raise FetchError(f"invalid node type: {node.rev_type}", node.import_path)
    match["tag"] = tag

    page = get_text(ctx.client, REVISION_URL.format(**match))
    m = REVISION_PATTERN.search(page)
    if m is None:
        raise FetchError("fail to get revision", node.import_path)
    etag = m.group(1)
    if node.rev_type == RevisionType.BRANCH and is_unchanged(node, etag):
        return None
    node.revision = etag

    if vcs == "svn":
        logger.warning("SVN detected, may take very long time to finish.")
        if node.install_path.exists():
            shutil.rmtree(node.install_path)
        download_svn_tree(SVN_ROOT_URL.format(**match), node, ctx, tag)
    else:
        url = ARCHIVE_URL.format(**match)
        with fetch_archive(ctx.client, ctx.settings, url, node.root_path) as archive:
            install_zip(archive, node.install_path)
    return collect_imports(node, ctx)


SERVICE = Service("google", "code.google.com/", PATTERN, fetch)
