# SPDX-License-Identifier: MIT
"""Per-session fetch settings and HTTP client construction."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx

HOME_ENV = "PINVEND_HOME"
HOME_DIRNAME = ".pinvend"

REQUEST_TIMEOUT = 20.0
DIAL_TIMEOUT = 10.0

USER_AGENT = "pinvend/0.1.0"


def default_home() -> Path:
    """Return the tool home, honouring ``PINVEND_HOME``."""
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / HOME_DIRNAME


def first_gopath(gopath: Optional[str] = None) -> Optional[Path]:
    """Return the first entry of a GOPATH style list, or None when unset."""
    if gopath is None:
        gopath = os.environ.get("GOPATH", "")
    for entry in gopath.split(os.pathsep):
        if entry:
            return Path(entry)
    return None


@dataclass
class FetchSettings:
    """Everything a resolution run needs to know about its environment.

    One instance is created per run and passed down explicitly, so several
    independent runs can share a process.

    Attributes:
        home: Tool home directory
        repo_root: Local repository cache root
        temp_root: Scratch space for archives
        gopath_src: ``src`` directory of the global source root, if any
        http_proxy: Proxy URL applied to every request
        github_client_id: GitHub OAuth application id
        github_client_secret: GitHub OAuth application secret
        request_timeout: Seconds allowed for one HTTP round-trip
        dial_timeout: Seconds allowed for establishing a connection
    """

    home: Path
    repo_root: Path
    temp_root: Path
    gopath_src: Optional[Path] = None
    http_proxy: str = ""
    github_client_id: str = ""
    github_client_secret: str = ""
    request_timeout: float = REQUEST_TIMEOUT
    dial_timeout: float = DIAL_TIMEOUT

    @classmethod
    def from_home(
        cls,
        home: Optional[Path] = None,
        gopath_src: Optional[Path] = None,
        **kwargs,
    ) -> FetchSettings:
        """Build settings using the standard layout under ``home``."""
        home = Path(home) if home is not None else default_home()
        return cls(
            home=home,
            repo_root=home / "repos",
            temp_root=home / "temp",
            gopath_src=gopath_src,
            **kwargs,
        )

    @property
    def archive_dir(self) -> Path:
        return self.temp_root / "archive"

    @property
    def data_dir(self) -> Path:
        return self.home / "data"

    @property
    def local_nodes_file(self) -> Path:
        return self.data_dir / "localnodes.list"

    @property
    def config_file(self) -> Path:
        return self.data_dir / "config.ini"

    def github_credentials(self) -> dict[str, str]:
        """Query parameters authenticating GitHub API calls."""
        if not self.github_client_id:
            return {}
        return {
            "client_id": self.github_client_id,
            "client_secret": self.github_client_secret,
        }

    def make_client(self, transport: Optional[httpx.BaseTransport] = None) -> httpx.Client:
        """Create the HTTP client used for every fetch in a run.

        Args:
            transport: Optional transport override, used by tests

        Returns:
            Configured httpx.Client
        """
        timeout = httpx.Timeout(self.request_timeout, connect=self.dial_timeout)
        kwargs = {}
        if transport is not None:
            kwargs["transport"] = transport
        elif self.http_proxy:
            kwargs["proxy"] = self.http_proxy
        return httpx.Client(
            follow_redirects=True,
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            **kwargs,
        )
