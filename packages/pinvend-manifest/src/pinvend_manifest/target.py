# SPDX-License-Identifier: MIT
"""Detecting the project's import path from its location on disk."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

UNKNOWN_TARGET = "."


def _to_slash(path: str) -> str:
    return path.replace("\\", "/").rstrip("/")


def parse_target(
    manifest_target: str,
    work_dir: str,
    gopaths: Iterable[str] = (),
    repo_root: Optional[str] = None,
) -> str:
    """Work out the import path of the project in ``work_dir``.

    An explicit manifest target always wins. Otherwise the working directory
    is matched against ``<gopath>/src/`` for each GOPATH entry and then
    against the local repository root.

    Args:
        manifest_target: Value of ``[target] path``, may be empty
        work_dir: Project working directory
        gopaths: GOPATH entries in search order
        repo_root: Local repository root

    Returns:
        The import path, or ``"."`` when it cannot be guessed
    """
    if manifest_target:
        return manifest_target

    work = _to_slash(work_dir)
    for gopath in gopaths:
        if not gopath:
            continue
        src = _to_slash(str(PurePosixPath(_to_slash(gopath)) / "src")) + "/"
        if work.startswith(src):
            target = work[len(src):]
            logger.info("Guess import path: %s", target)
            return target

    if repo_root:
        prefix = _to_slash(repo_root) + "/"
        if work.startswith(prefix):
            target = work[len(prefix):]
            logger.info("Guess import path: %s", target)
            return target

    return UNKNOWN_TARGET
