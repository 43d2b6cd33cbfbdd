# SPDX-License-Identifier: MIT
"""Project loading and the resolve, link and run flow shared by commands."""

from __future__ import annotations

import dataclasses
import logging
import os
import posixpath
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from pinvend_fetch import FetchSettings, GoImportScanner, LocalNodes
from pinvend_manifest import MANIFEST_FILENAME, UNKNOWN_TARGET, Manifest, parse_target
from pinvend_vendor import (
    CopyBackend,
    DependencyWalker,
    Resolution,
    VendorLinker,
    WalkOptions,
    run_toolchain,
)
from pinvend_version import PinvendError, Pkg

from .config import gopath_entries
from .logs import echo_error, echo_info

if TYPE_CHECKING:
    from .main import Context

logger = logging.getLogger(__name__)

ToolchainCommands = Callable[["Project"], list[list[str]]]


@dataclass
class Project:
    """The project in the working directory.

    Attributes:
        work_dir: Project directory
        manifest: Its manifest, empty when no file exists yet
        target: Import path of the project, ``"."`` when unknown
    """

    work_dir: Path
    manifest: Manifest
    target: str

    @property
    def manifest_path(self) -> Path:
        return self.work_dir / MANIFEST_FILENAME

    def local_gopath_src(self) -> Optional[Path]:
        """``src`` of the project's local GOPATH, if one is configured."""
        if not self.manifest.local_gopath:
            return None
        return (self.work_dir / self.manifest.local_gopath / "src").resolve()

    def with_known_target(self) -> Project:
        """Return the project with its directory name standing in for an unknown target."""
        if self.target != UNKNOWN_TARGET:
            return self
        logger.info(
            "Cannot determine the import path, using %s; set [target] path to override",
            self.work_dir.name,
        )
        return dataclasses.replace(self, target=self.work_dir.name)


def load_project(ctx: Context) -> Project:
    """Load the manifest and work out the project's import path.

    Raises:
        ManifestError: If the manifest cannot be read
        ConfigError: If the global config is invalid
    """
    settings = ctx.load_settings()
    work_dir = ctx.work_dir
    manifest = Manifest.load(work_dir / MANIFEST_FILENAME)
    target = parse_target(
        manifest.target_path,
        str(work_dir),
        gopath_entries(),
        str(settings.repo_root),
    )
    return Project(work_dir=work_dir, manifest=manifest, target=target)


def resolve_project(
    ctx: Context,
    project: Project,
    options: WalkOptions,
    settings: Optional[FetchSettings] = None,
    imports: Optional[list[str]] = None,
    pins: Optional[dict[str, Pkg]] = None,
) -> Resolution:
    """Resolve the project's dependencies and print the run summary.

    Args:
        ctx: CLI context
        project: Loaded project
        options: Walk switches
        settings: Settings override, e.g. with a local GOPATH
        imports: Start from these import paths instead of the project sources
        pins: Pins taking precedence over the manifest

    Returns:
        The resolution

    Raises:
        VersionParseError: If the manifest holds a malformed pin
        StrictModeError: In strict mode, when any dependency failed
    """
    settings = settings or ctx.load_settings()
    deps = project.manifest.dependencies()
    deps.update(pins or {})

    walker = DependencyWalker(
        settings,
        GoImportScanner(),
        local_nodes=LocalNodes.load(settings.local_nodes_file),
        options=options,
    )
    resolution = walker.resolve(project.target, project.work_dir, deps, imports)
    echo_info(resolution.summary())
    if ctx.strict:
        resolution.raise_for_strict()
    return resolution


def _collect_binary(project: Project, project_path: Path) -> None:
    """Move the binary built inside a copied tree back into the project."""
    name = posixpath.basename(project.target)
    if os.name == "nt":
        name += ".exe"
    built = project_path / name
    if not built.is_file():
        logger.debug("No build output at %s", built)
        return
    shutil.move(str(built), str(project.work_dir / name))
    logger.info("Moved %s to %s", name, project.work_dir)


def vendor_and_run(
    ctx: Context,
    commands: ToolchainCommands,
    update: bool = False,
    remote: bool = False,
    include_tests: bool = False,
    collect_binary: bool = False,
) -> None:
    """Resolve, assemble the vendor tree and run toolchain commands in it.

    The vendor tree is removed afterwards unless running with ``--debug``.
    A project without a known import path is vendored under its directory
    name.

    Args:
        ctx: CLI context
        commands: Builds the toolchain argument lists for the project
        update: Update branch dependencies
        remote: Ignore packages present in the global source root
        include_tests: Follow imports of test files
        collect_binary: Move the built binary back into the project when the
            tree is a copy

    Raises:
        SystemExit: With status 1 on resolution or link errors, or with the
            toolchain's own return code when it fails
    """
    try:
        project = load_project(ctx).with_known_target()
        settings = ctx.load_settings()
        if project.manifest.local_gopath:
            settings = dataclasses.replace(settings, gopath_src=project.local_gopath_src())
        options = WalkOptions(update=update, remote_only=remote, include_tests=include_tests)
        resolution = resolve_project(ctx, project, options, settings=settings)
        linker = VendorLinker()
        tree = linker.assemble(
            resolution,
            project.work_dir,
            project.target,
            gopath_src=settings.gopath_src,
            remote_only=remote,
        )
    except PinvendError as e:
        echo_error(str(e))
        raise SystemExit(1)

    try:
        for args in commands(project):
            run_toolchain(args, tree.root, cwd=tree.project_path)
        if collect_binary and isinstance(linker.backend, CopyBackend):
            _collect_binary(project, tree.project_path)
    except subprocess.CalledProcessError as e:
        raise SystemExit(e.returncode)
    except FileNotFoundError as e:
        echo_error(f"Toolchain not found: {e}")
        raise SystemExit(1)
    finally:
        if not ctx.debug:
            tree.remove()
