# SPDX-License-Identifier: MIT
"""Assembling the disposable vendor tree handed to the toolchain.

The tree lives at ``<work_dir>/.vendor`` and has the layout of a source root:
``src/<import path>`` for the project itself and for every resolved
dependency. Its ``src`` directory is wiped at the start of every assembly.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from pinvend_fetch.imports import VENDOR_DIRNAME
from pinvend_manifest import UNKNOWN_TARGET
from pinvend_version import get_root_path

from .errors import LinkError
from .platform import LinkBackend, select_backend
from .walker import Resolution

logger = logging.getLogger(__name__)


@dataclass
class VendorTree:
    """An assembled vendor tree.

    Attributes:
        root: Vendor directory, put first on the toolchain search path
        src: Source root inside ``root``
        project_path: Where the project itself is linked
        links: ``(source, dest)`` pairs in the order they were created
    """

    root: Path
    src: Path
    project_path: Path
    links: list[tuple[Path, Path]] = field(default_factory=list)

    def remove(self) -> None:
        """Delete the whole vendor directory."""
        if self.root.exists():
            shutil.rmtree(self.root)
            logger.debug("Removed %s", self.root)


def _ancestors(root_path: str) -> list[str]:
    parts = root_path.split("/")
    return ["/".join(parts[:i]) for i in range(1, len(parts))]


def _project_root(work_dir: Path, target: str) -> tuple[str, Path]:
    """Return the repository root of ``target`` and the directory holding it.

    When ``target`` is a subpackage and ``work_dir`` sits at that subpackage
    inside its checkout, the whole checkout is linked so sibling packages of
    the same repository resolve. Otherwise ``work_dir`` itself is the root.
    """
    root_path = get_root_path(target)
    if root_path == target:
        return target, work_dir

    below = target[len(root_path) + 1:].split("/")
    if list(work_dir.parts[-len(below):]) != below:
        logger.debug("%s is not checked out under %s, linking it alone", target, root_path)
        return target, work_dir
    return root_path, work_dir.parents[len(below) - 1]


class VendorLinker:
    """Links resolved dependencies into a fresh vendor tree."""

    def __init__(self, backend: Optional[LinkBackend] = None):
        self.backend = backend or select_backend()

    def assemble(
        self,
        resolution: Resolution,
        work_dir: Union[str, Path],
        target: str,
        vendor_dir: Optional[Union[str, Path]] = None,
        gopath_src: Optional[Path] = None,
        remote_only: bool = False,
    ) -> VendorTree:
        """Build the vendor tree for one toolchain invocation.

        The project is linked at the repository root of ``target``. A
        dependency is not linked when one of its ancestor paths is resolved
        too, or when it is unpinned and is being used straight from the
        global source root.

        Args:
            resolution: Walker output
            work_dir: Project directory
            target: Import path of the project
            vendor_dir: Vendor directory, ``<work_dir>/.vendor`` by default
            gopath_src: ``src`` directory of the global source root
            remote_only: Whether packages in the global source root are ignored

        Returns:
            The assembled tree

        Raises:
            LinkError: If the project path is unknown or any link fails
        """
        if not target or target == UNKNOWN_TARGET:
            raise LinkError(
                "cannot determine the project import path, set [target] path in the manifest"
            )

        work_dir = Path(work_dir).absolute()
        root = Path(vendor_dir) if vendor_dir is not None else work_dir / VENDOR_DIRNAME
        src = root / "src"
        if src.is_symlink():
            src.unlink()
        elif src.exists():
            shutil.rmtree(src)
        src.mkdir(parents=True)

        tree = VendorTree(root=root, src=src, project_path=src / target)
        project_root, project_source = _project_root(work_dir, target)
        self._link(tree, project_source, src / project_root)

        resolved = set(resolution.packages) | {project_root}
        linked = {project_root}
        for root_path in sorted(resolution.packages):
            pkg = resolution.packages[root_path]
            source = resolution.locations[root_path]

            if any(parent in resolved for parent in _ancestors(root_path)):
                logger.debug("Skipped nested dependency: %s", root_path)
                continue
            if (
                pkg.is_empty_val()
                and not remote_only
                and gopath_src is not None
                and source == gopath_src / root_path
            ):
                logger.debug("Skipped GOPATH package: %s", root_path)
                continue
            if root_path in linked:
                continue

            self._link(tree, source, src / root_path)
            linked.add(root_path)

        logger.debug("Vendor tree has %d link(s)", len(tree.links))
        return tree

    def _link(self, tree: VendorTree, source: Path, dest: Path) -> None:
        if not source.is_dir():
            raise LinkError(f"link source does not exist: {source}", source, dest)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            self.backend.link(source, dest)
        except (OSError, subprocess.CalledProcessError) as e:
            raise LinkError(f"fail to link {source} -> {dest}: {e}", source, dest) from e
        tree.links.append((source, dest))
        logger.debug("Linked %s -> %s", source, dest)
