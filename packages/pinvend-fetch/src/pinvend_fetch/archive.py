# SPDX-License-Identifier: MIT
"""Downloading and installing point-in-time source archives.

Archives are staged in ``<temp_root>/archive`` and always removed afterwards.
Installation wipes the old install path, extracts into a temporary sibling
directory and renames the archive's root into place, so a failed extraction
never leaves a half-populated install directory behind.
"""

from __future__ import annotations

import contextlib
import logging
import shutil
import tarfile
import tempfile
import time
import zipfile
from pathlib import Path, PurePosixPath
from typing import Callable, Iterator, Optional

import httpx

from .errors import FetchError
from .httputil import download_to_file
from .settings import FetchSettings

logger = logging.getLogger(__name__)

PAX_GLOBAL_HEADER = "pax_global_header"

RootFinder = Callable[[str], str]


def first_segment(member_name: str) -> str:
    """Default archive root: the first path element of the first member."""
    if member_name.startswith("./"):
        member_name = member_name[2:]
    return member_name.split("/", 1)[0]


def temp_archive_path(settings: FetchSettings, root_path: str, ext: str = "zip") -> Path:
    """Return a unique staging path ``<archive_dir>/<root>-<nonce>.<ext>``."""
    return settings.archive_dir / f"{root_path}-{time.time_ns()}.{ext}"


@contextlib.contextmanager
def fetch_archive(
    client: httpx.Client,
    settings: FetchSettings,
    url: str,
    root_path: str,
    ext: str = "zip",
    params: Optional[dict[str, str]] = None,
) -> Iterator[Path]:
    """Download an archive to a staging file that is removed on exit.

    Yields:
        Path to the downloaded archive

    Raises:
        FetchError: If the download fails
    """
    path = temp_archive_path(settings, root_path, ext)
    logger.debug("Temp archive path: %s", path)
    try:
        download_to_file(client, url, path, params=params)
        yield path
    finally:
        path.unlink(missing_ok=True)


def _check_member(name: str) -> PurePosixPath:
    member = PurePosixPath(name)
    if member.is_absolute() or ".." in member.parts:
        raise FetchError(f"archive member escapes extraction root: {name}")
    return member


def _place(staging: Path, root: Optional[str], install_path: Path) -> None:
    source = staging / root if root else staging
    if not source.is_dir():
        raise FetchError(f"archive root {root!r} not found")
    # A concurrent run may have installed the same pin meanwhile.
    if install_path.is_symlink():
        install_path.unlink()
    elif install_path.exists():
        shutil.rmtree(install_path)
    source.rename(install_path)


def _prepare(install_path: Path) -> Path:
    if install_path.is_symlink():
        install_path.unlink()
    elif install_path.exists():
        shutil.rmtree(install_path)
    install_path.parent.mkdir(parents=True, exist_ok=True)
    return Path(tempfile.mkdtemp(prefix=f".{install_path.name}-", dir=install_path.parent))


def install_zip(
    archive: Path,
    install_path: Path,
    root_of: Optional[RootFinder] = first_segment,
) -> Path:
    """Install a zip archive at ``install_path``.

    Args:
        archive: Downloaded zip file
        install_path: Final location of the package
        root_of: Maps the first member name to the archive's root directory;
            None when the archive contents are the package itself

    Returns:
        The install path

    Raises:
        FetchError: If the archive is corrupt or unsafe
    """
    staging = _prepare(install_path)
    try:
        with zipfile.ZipFile(archive) as zf:
            names = zf.namelist()
            for name in names:
                _check_member(name)
            zf.extractall(staging)
        root = root_of(names[0]) if (root_of and names) else None
        _place(staging, root, install_path)
    except zipfile.BadZipFile as e:
        raise FetchError(f"bad zip archive: {e}") from e
    except OSError as e:
        raise FetchError(f"failed to extract archive: {e}") from e
    finally:
        shutil.rmtree(staging, ignore_errors=True)
    return install_path


def install_tarball(
    archive: Path,
    install_path: Path,
    root_of: Optional[RootFinder] = first_segment,
    compression: str = "*",
) -> Path:
    """Install a tar archive at ``install_path``.

    The ``pax_global_header`` entry some hosts prepend is skipped and does not
    count as the first member.

    Args:
        archive: Downloaded tar file
        install_path: Final location of the package
        root_of: Maps the first member name to the archive's root prefix
        compression: tarfile compression suffix, ``"*"`` to detect it

    Returns:
        The install path

    Raises:
        FetchError: If the archive is corrupt or unsafe
    """
    staging = _prepare(install_path)
    mode = f"r:{compression}" if compression else "r:"
    try:
        with tarfile.open(archive, mode) as tf:
            members = [
                m for m in tf.getmembers()
                if m.name != PAX_GLOBAL_HEADER and (m.isdir() or m.isfile())
            ]
            for member in members:
                _check_member(member.name)
            if hasattr(tarfile, "data_filter"):
                tf.extractall(staging, members=members, filter="data")
            else:
                tf.extractall(staging, members=members)
        root = root_of(members[0].name) if (root_of and members) else None
        _place(staging, root, install_path)
    except tarfile.TarError as e:
        raise FetchError(f"bad tar archive: {e}") from e
    except OSError as e:
        raise FetchError(f"failed to extract archive: {e}") from e
    finally:
        shutil.rmtree(staging, ignore_errors=True)
    return install_path


def root_through(name: str) -> RootFinder:
    """Root finder for archives whose root ends at the repository name."""

    def root_of(member_name: str) -> str:
        index = member_name.find(name)
        if index < 0:
            return first_segment(member_name)
        return member_name[: index + len(name)]

    return root_of
