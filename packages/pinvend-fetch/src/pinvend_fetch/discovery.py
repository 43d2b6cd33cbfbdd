# SPDX-License-Identifier: MIT
"""Vanity import discovery through ``<meta name="go-import">`` tags."""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Optional

import httpx

from .errors import FetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetaImport:
    """A go-import declaration matched against an import path.

    Attributes:
        import_path: Path that was looked up
        project_root: Repository root declared by the page
        vcs: Version control system named by the page
        repo: Repository URL without scheme or VCS suffix
        scheme: Scheme of the repository URL
        dir: Remainder of the import path below the project root
        fetch_scheme: Scheme the page itself was fetched over
    """

    import_path: str
    project_root: str
    vcs: str
    repo: str
    scheme: str
    dir: str
    fetch_scheme: str

    @property
    def project_name(self) -> str:
        return posixpath.basename(self.project_root)

    @property
    def project_url(self) -> str:
        return f"{self.fetch_scheme}://{self.project_root}"

    @property
    def download_url(self) -> str:
        return self.repo + self.dir


class _GoImportParser(HTMLParser):
    """Collects go-import meta contents from the document head."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.contents: list[str] = []
        self.done = False

    def handle_starttag(self, tag, attrs):
        if self.done:
            return
        if tag == "body":
            self.done = True
            return
        if tag != "meta":
            return
        values = {k.lower(): (v or "") for k, v in attrs}
        if values.get("name") == "go-import":
            self.contents.append(values.get("content", ""))

    def handle_startendtag(self, tag, attrs):
        self.handle_starttag(tag, attrs)

    def handle_endtag(self, tag):
        if tag == "head":
            self.done = True


def parse_meta(fetch_scheme: str, import_path: str, html: str) -> MetaImport:
    """Find the single go-import declaration that covers ``import_path``.

    Args:
        fetch_scheme: Scheme the page was fetched over
        import_path: Path being resolved
        html: Page body

    Returns:
        The matching declaration

    Raises:
        FetchError: If no declaration or more than one matches, or the
            repository URL has no scheme
    """
    parser = _GoImportParser()
    parser.feed(html)
    parser.close()

    match: Optional[MetaImport] = None
    for content in parser.contents:
        fields = content.split()
        if len(fields) != 3:
            continue
        prefix, vcs, repo = fields
        if not (import_path == prefix or import_path.startswith(prefix + "/")):
            continue
        if match is not None:
            raise FetchError(
                f"more than one <meta> found at {fetch_scheme}://{import_path}"
            )

        if repo.endswith("." + vcs):
            repo = repo[: -len(vcs) - 1]
        scheme, sep, rest = repo.partition("://")
        if not sep:
            raise FetchError(f"bad repo URL in <meta>: {repo}")

        match = MetaImport(
            import_path=import_path,
            project_root=prefix,
            vcs=vcs,
            repo=rest,
            scheme=scheme,
            dir=import_path[len(prefix):],
            fetch_scheme=fetch_scheme,
        )

    if match is None:
        raise FetchError(f"<meta> not found for {import_path}")
    return match


def fetch_meta(client: httpx.Client, import_path: str) -> MetaImport:
    """Request ``?go-get=1`` over HTTPS, falling back to HTTP.

    Raises:
        FetchError: If neither request succeeds or the page has no usable
            declaration
    """
    uri = import_path if "/" in import_path else import_path + "/"
    uri += "?go-get=1"

    for scheme in ("https", "http"):
        url = f"{scheme}://{uri}"
        try:
            response = client.get(url)
        except httpx.TimeoutException:
            logger.warning("Request timed out: %s", url)
            continue
        except httpx.RequestError as e:
            logger.debug("Discovery request failed: %s: %s", url, e)
            continue
        if response.status_code != 200:
            logger.debug("Discovery got %d from %s", response.status_code, url)
            continue
        return parse_meta(scheme, import_path, response.text)

    host = import_path.split("/", 1)[0]
    raise FetchError(f"failed to make discovery request ({host})", import_path)


def discover(client: httpx.Client, import_path: str) -> MetaImport:
    """Resolve a vanity import path and verify its project root.

    When the declaration names a different root, that root's own page must
    agree with it.

    Raises:
        FetchError: On request failures or a project root mismatch
    """
    meta = fetch_meta(client, import_path)
    if meta.project_root != import_path:
        root_meta = fetch_meta(client, meta.project_root)
        if root_meta.project_root != meta.project_root:
            raise FetchError("project root mismatch", import_path)
    return meta
