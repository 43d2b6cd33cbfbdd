# SPDX-License-Identifier: MIT
"""Platform backends for making one directory resolve to another.

Three backends share the :class:`LinkBackend` interface: symbolic links,
NTFS directory junctions and a plain recursive copy for filesystems that
support neither. :func:`select_backend` probes the running system once and
returns the first backend that works.
"""

from __future__ import annotations

import functools
import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Protocol

from pinvend_fetch.imports import VENDOR_DIRNAME

logger = logging.getLogger(__name__)


class LinkBackend(Protocol):
    """Makes ``dest`` resolve through to the contents of ``source``."""

    name: str

    def link(self, source: Path, dest: Path) -> None:
        """Create ``dest``; its parent directory already exists.

        Raises:
            OSError: If the filesystem operation fails
            subprocess.CalledProcessError: If an external helper fails
        """
        ...


class SymlinkBackend:
    name = "symlink"

    def link(self, source: Path, dest: Path) -> None:
        os.symlink(source, dest, target_is_directory=True)


class JunctionBackend:
    """Directory junctions, which Windows allows without extra privileges."""

    name = "junction"

    def link(self, source: Path, dest: Path) -> None:
        subprocess.run(
            ["cmd", "/c", "mklink", "/j", str(dest), str(source)],
            check=True,
            capture_output=True,
            text=True,
        )


class CopyBackend:
    """Recursive copy that never descends into a nested vendor tree."""

    name = "copy"

    def link(self, source: Path, dest: Path) -> None:
        shutil.copytree(
            source,
            dest,
            symlinks=True,
            ignore=shutil.ignore_patterns(VENDOR_DIRNAME),
        )


def _can_symlink(probe_dir: Path) -> bool:
    source = probe_dir / "source"
    source.mkdir()
    try:
        os.symlink(source, probe_dir / "link", target_is_directory=True)
    except (OSError, NotImplementedError):
        return False
    return True


@functools.lru_cache(maxsize=None)
def select_backend() -> LinkBackend:
    """Return the preferred link backend for this system."""
    with tempfile.TemporaryDirectory(prefix="pinvend-probe-") as tmp:
        if _can_symlink(Path(tmp)):
            return SymlinkBackend()
    if os.name == "nt" and shutil.which("cmd"):
        logger.debug("Symbolic links unavailable, using directory junctions")
        return JunctionBackend()
    logger.debug("No link support, vendor tree will be copied")
    return CopyBackend()
