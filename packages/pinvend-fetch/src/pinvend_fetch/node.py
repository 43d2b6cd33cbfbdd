# SPDX-License-Identifier: MIT
"""Fetch nodes and the local repository cache layout.

Every pinned package lives in the cache at
``<repo_root>/<root_path>[.<value>]`` so several pins of one repository can
sit side by side.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pinvend_version import Pkg, RevisionType

from .errors import FetchError
from .settings import FetchSettings

logger = logging.getLogger(__name__)

# Marker directory -> version control system.
VCS_MARKERS = (
    (".git", "git"),
    (".hg", "hg"),
    (".svn", "svn"),
)


def vcs_name(path: Optional[Path]) -> str:
    """Return the VCS managing ``path`` (``git``, ``hg``, ``svn``) or ``""``."""
    if path is None:
        return ""
    for marker, name in VCS_MARKERS:
        if (path / marker).exists():
            return name
    return ""


def cache_path(settings: FetchSettings, pkg: Pkg) -> Path:
    """Location of ``pkg`` in the local repository cache."""
    if pkg.rev_type == RevisionType.LOCAL:
        return Path(pkg.value)
    return settings.repo_root / (pkg.root_path + pkg.val_suffix())


@dataclass
class Node:
    """A package being resolved, plus its fetch and install bookkeeping.

    Attributes:
        pkg: Package identity and pin
        download_url: Path services are matched against; differs from the
            import path after vanity import discovery
        install_path: Cache location of this root and pin
        install_gopath: Matching location in the global source root
        revision: Last observed commit or etag, used for change detection
        is_get_deps: Whether the node's own imports should be reported
        is_get_deps_only: Skip downloading, only walk the imports
    """

    pkg: Pkg
    download_url: str
    install_path: Path
    install_gopath: Optional[Path] = None
    revision: str = ""
    is_get_deps: bool = True
    is_get_deps_only: bool = False

    @classmethod
    def create(
        cls,
        pkg: Pkg,
        settings: FetchSettings,
        is_get_deps: bool = True,
    ) -> Node:
        install_gopath = None
        if settings.gopath_src is not None:
            install_gopath = settings.gopath_src / pkg.root_path
        return cls(
            pkg=pkg,
            download_url=pkg.import_path,
            install_path=cache_path(settings, pkg),
            install_gopath=install_gopath,
            is_get_deps=is_get_deps,
        )

    @property
    def import_path(self) -> str:
        return self.pkg.import_path

    @property
    def root_path(self) -> str:
        return self.pkg.root_path

    @property
    def rev_type(self) -> RevisionType:
        return self.pkg.rev_type

    @property
    def value(self) -> str:
        return self.pkg.value

    def is_fixed(self) -> bool:
        return self.pkg.is_fixed()

    def is_empty_val(self) -> bool:
        return self.pkg.is_empty_val()

    def ver_string(self) -> str:
        return self.pkg.ver_string()

    def exists(self) -> bool:
        """Return True when the package is present in the cache."""
        return self.install_path.exists()

    def exists_in_gopath(self) -> bool:
        return self.install_gopath is not None and self.install_gopath.exists()

    def has_vcs(self) -> bool:
        return bool(vcs_name(self.install_gopath))

    def copy_to_gopath(self) -> bool:
        """Copy the cached tree into the global source root.

        Checkouts under version control are left alone.

        Returns:
            True when the tree was copied

        Raises:
            FetchError: If there is no global source root or copying fails
        """
        if self.install_gopath is None:
            raise FetchError("no GOPATH available to copy into", self.import_path)
        if self.has_vcs():
            logger.warning("Package in GOPATH has version control: %s", self.root_path)
            return False

        try:
            if self.install_gopath.exists():
                shutil.rmtree(self.install_gopath)
            self.install_gopath.parent.mkdir(parents=True, exist_ok=True)
            shutil.copytree(self.install_path, self.install_gopath, symlinks=True)
        except OSError as e:
            raise FetchError(f"failed to copy to GOPATH: {e}", self.import_path) from e
        logger.info("Package copied to GOPATH: %s", self.root_path)
        return True

    def update_by_vcs(self) -> None:
        """Update the GOPATH checkout in place with its own VCS client.

        Raises:
            FetchError: If no VCS is present or the client command fails
        """
        vcs = vcs_name(self.install_gopath)
        if not vcs:
            raise FetchError("no version control found in GOPATH", self.import_path)

        if vcs == "git":
            branch = self._run_vcs(["git", "rev-parse", "--abbrev-ref", "HEAD"]).strip()
            self._run_vcs(["git", "pull", "origin", branch])
        elif vcs == "hg":
            self._run_vcs(["hg", "pull"])
            self._run_vcs(["hg", "up"])
        elif vcs == "svn":
            self._run_vcs(["svn", "update"])
        logger.info("Updated %s with %s", self.root_path, vcs)

    def _run_vcs(self, args: list[str]) -> str:
        try:
            result = subprocess.run(
                args,
                cwd=self.install_gopath,
                capture_output=True,
                text=True,
                check=True,
            )
        except FileNotFoundError as e:
            raise FetchError(f"{args[0]} is not installed", self.import_path) from e
        except subprocess.CalledProcessError as e:
            logger.error("Error occurs when '%s'", " ".join(args))
            raise FetchError(
                f"'{' '.join(args)}' failed: {e.stderr.strip()}", self.import_path
            ) from e
        return result.stdout
