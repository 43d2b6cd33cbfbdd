# SPDX-License-Identifier: MIT
"""Transitive dependency resolution.

The walker keeps an explicit worklist of ``(import path, pins)`` items. Every
repository root is claimed at most once per run, so diamond dependencies
collapse into one fetch and import cycles terminate. Fetch failures are
collected on the resulting :class:`Resolution` instead of being raised, which
lets independent parts of the graph still resolve.
"""

from __future__ import annotations

import contextlib
import logging
import shutil
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Mapping, Optional, Union

import httpx

from pinvend_fetch import (
    FetchContext,
    FetchError,
    FetchResult,
    FetchSettings,
    ImportOracle,
    LocalNodes,
    Node,
    download,
)
from pinvend_manifest import MANIFEST_FILENAME, Manifest
from pinvend_version import (
    InvalidImportPathError,
    PinvendError,
    Pkg,
    RevisionType,
    get_root_path,
    is_standard_import,
    is_subpackage,
    is_valid_remote_path,
)

from .errors import StrictModeError

logger = logging.getLogger(__name__)

Fetcher = Callable[[Node, FetchContext], FetchResult]
Pins = Mapping[str, Pkg]
WorkItem = tuple[str, Pins]


def _to_slash(path: Union[str, Path]) -> str:
    return str(Path(path).absolute()).replace("\\", "/")


def root_pins(deps: Optional[Mapping[str, Pkg]]) -> dict[str, Pkg]:
    """Re-key manifest dependencies by repository root."""
    return {get_root_path(name): pkg for name, pkg in (deps or {}).items()}


class MembershipSet:
    """Thread safe set of ``root@type:value`` identities."""

    def __init__(self) -> None:
        self._items: set[str] = set()
        self._lock = threading.Lock()

    def add(self, key: str) -> bool:
        """Add ``key``; return True when it was not present before."""
        with self._lock:
            if key in self._items:
                return False
            self._items.add(key)
            return True

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class ClaimSet:
    """At-most-once ownership of repository roots within one run.

    The first package to claim a root owns it. Later claims for the same root
    are refused whatever their pin, so no two fetches ever target one root.
    """

    def __init__(self) -> None:
        self._owners: dict[str, Pkg] = {}
        self._lock = threading.Lock()

    def claim(self, pkg: Pkg) -> bool:
        """Try to claim ``pkg``'s root; return True for the first claimant."""
        with self._lock:
            owner = self._owners.get(pkg.root_path)
            if owner is None:
                self._owners[pkg.root_path] = pkg
                return True
        if not owner.same_dependency(pkg):
            logger.warning(
                "Conflicting pins for %s: keeping %s, ignoring %s",
                pkg.root_path,
                owner.identity(),
                pkg.identity(),
            )
        return False

    def owner(self, root_path: str) -> Optional[Pkg]:
        with self._lock:
            return self._owners.get(root_path)


@dataclass
class WalkOptions:
    """Switches for one resolution run.

    Attributes:
        update: Re-resolve the latest revision of every Branch pin
        remote_only: Never reuse packages from the global source root
        recursive: Walk the imports of resolved packages
        copy_to_gopath: Copy fetched packages into the global source root
        include_tests: Follow imports of ``_test.go`` files too
        jobs: Number of concurrent fetch workers
    """

    update: bool = False
    remote_only: bool = False
    recursive: bool = True
    copy_to_gopath: bool = False
    include_tests: bool = False
    jobs: int = 1


@dataclass
class Resolution:
    """Outcome of a resolution run.

    Attributes:
        packages: Repository root -> package used to satisfy it
        locations: Repository root -> directory holding its sources
        download_count: Packages actually downloaded
        fail_count: Dependencies that could not be resolved
        errors: One error per failed dependency
    """

    packages: dict[str, Pkg] = field(default_factory=dict)
    locations: dict[str, Path] = field(default_factory=dict)
    download_count: int = 0
    fail_count: int = 0
    errors: list[PinvendError] = field(default_factory=list)

    def summary(self) -> str:
        return f"{self.download_count} package(s) downloaded, {self.fail_count} failed"

    def raise_for_strict(self) -> None:
        """Raise StrictModeError when any dependency failed."""
        if self.fail_count:
            raise StrictModeError(self.fail_count, self.summary())


@dataclass
class _WalkState:
    target: str
    work_dir: str
    project_pins: dict[str, Pkg]
    resolution: Resolution = field(default_factory=Resolution)
    claims: ClaimSet = field(default_factory=ClaimSet)
    downloaded: MembershipSet = field(default_factory=MembershipSet)
    skipped: MembershipSet = field(default_factory=MembershipSet)
    copied: MembershipSet = field(default_factory=MembershipSet)
    invalid: MembershipSet = field(default_factory=MembershipSet)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def record(self, pkg: Pkg, location: Path) -> None:
        with self.lock:
            self.resolution.packages[pkg.root_path] = pkg.as_root()
            self.resolution.locations[pkg.root_path] = location

    def fail(self, error: PinvendError) -> None:
        with self.lock:
            self.resolution.fail_count += 1
            self.resolution.errors.append(error)

    def count_download(self) -> None:
        with self.lock:
            self.resolution.download_count += 1


class DependencyWalker:
    """Resolves the external imports of a project into local directories.

    One walker owns its settings and revision records, so independent walkers
    can run side by side in one process.
    """

    def __init__(
        self,
        settings: FetchSettings,
        oracle: ImportOracle,
        fetcher: Fetcher = download,
        local_nodes: Optional[LocalNodes] = None,
        options: Optional[WalkOptions] = None,
        client: Optional[httpx.Client] = None,
    ):
        """Initialize the walker.

        Args:
            settings: Session settings
            oracle: Lists the imports of a source tree
            fetcher: Fetches one node into the cache
            local_nodes: Revision records for unpinned packages
            options: Run switches
            client: HTTP client to reuse; one is created per run otherwise
        """
        self.settings = settings
        self.oracle = oracle
        self.fetcher = fetcher
        self.local_nodes = local_nodes if local_nodes is not None else LocalNodes()
        self.options = options or WalkOptions()
        self.client = client

    def resolve(
        self,
        target: str,
        work_dir: Union[str, Path],
        manifest_deps: Optional[Mapping[str, Pkg]] = None,
        imports: Optional[list[str]] = None,
    ) -> Resolution:
        """Resolve every external import reachable from the project.

        Args:
            target: Import path of the project
            work_dir: Project directory
            manifest_deps: Pins from the project manifest
            imports: Start from these import paths instead of scanning
                ``work_dir``

        Returns:
            The resolved packages with download and failure counts
        """
        work_dir = Path(work_dir)
        project_pins = root_pins(manifest_deps)
        if imports is None:
            imports = self.oracle.imports_of(
                target, get_root_path(target), work_dir, self.options.include_tests
            )

        state = _WalkState(target=target, work_dir=_to_slash(work_dir), project_pins=project_pins)
        with self._client_scope() as client:
            ctx = FetchContext(self.settings, client, self.oracle, self.options.include_tests)
            self._walk(state, ctx, [(path, project_pins) for path in imports])

        self.local_nodes.save()
        logger.debug("Resolved %d package(s) for %s", len(state.resolution.packages), target)
        return state.resolution

    @contextlib.contextmanager
    def _client_scope(self) -> Iterator[httpx.Client]:
        if self.client is not None:
            yield self.client
            return
        with self.settings.make_client() as client:
            yield client

    def _walk(self, state: _WalkState, ctx: FetchContext, items: list[WorkItem]) -> None:
        if self.options.jobs <= 1:
            stack = list(reversed(items))
            while stack:
                path, pins = stack.pop()
                stack.extend(reversed(self._visit(state, ctx, path, pins)))
            return

        with ThreadPoolExecutor(max_workers=self.options.jobs) as pool:
            pending: set[Future] = {
                pool.submit(self._visit, state, ctx, path, pins) for path, pins in items
            }
            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    for path, pins in future.result():
                        pending.add(pool.submit(self._visit, state, ctx, path, pins))

    def _visit(
        self, state: _WalkState, ctx: FetchContext, import_path: str, pins: Pins
    ) -> list[WorkItem]:
        if is_standard_import(import_path):
            return []
        if not is_valid_remote_path(import_path):
            if state.invalid.add(import_path):
                logger.error("Invalid import path: %s", import_path)
                state.fail(InvalidImportPathError(import_path))
            return []
        if is_subpackage(import_path, state.work_dir, state.target):
            return []

        pinned = pins.get(get_root_path(import_path))
        pkg = Pkg(import_path, pinned.rev_type, pinned.value) if pinned else Pkg.default(import_path)
        if not state.claims.claim(pkg):
            return []

        if pkg.rev_type == RevisionType.LOCAL:
            logger.info("Using local package: %s", pkg.ver_string())
            return self._finish(state, pkg, Path(pkg.value), pins)

        node = Node.create(pkg, self.settings, is_get_deps=self.options.recursive)
        try:
            location = self._reuse(state, node)
        except FetchError as e:
            logger.error("Fail to update package: %s: %s", node.ver_string(), e)
            state.fail(e)
            return []

        imports: FetchResult = None
        if location is None:
            fetched = self._fetch(state, ctx, node)
            if fetched is None:
                return []
            location, imports = fetched
        return self._finish(state, pkg, location, pins, imports)

    def _reuse(self, state: _WalkState, node: Node) -> Optional[Path]:
        """Return an existing location for ``node``, or None to fetch it."""
        opts = self.options
        identity = node.pkg.identity()

        if node.is_fixed() and node.exists():
            node.is_get_deps_only = True
            if state.skipped.add(identity):
                logger.info("Skipped downloaded package: %s", node.ver_string())
            return node.install_path

        if opts.update:
            if node.is_empty_val() and opts.copy_to_gopath and node.has_vcs():
                node.update_by_vcs()
                node.is_get_deps_only = True
                return node.install_gopath
            return None

        if node.is_empty_val() and not opts.remote_only and node.exists_in_gopath():
            node.is_get_deps_only = True
            if state.skipped.add(identity):
                logger.info("Skipped installed package: %s", node.ver_string())
            return node.install_gopath

        if node.exists():
            node.is_get_deps_only = True
            if state.skipped.add(identity):
                logger.info("Skipped downloaded package: %s", node.ver_string())
            if opts.copy_to_gopath and state.copied.add(identity):
                node.copy_to_gopath()
            return node.install_path
        return None

    def _fetch(
        self, state: _WalkState, ctx: FetchContext, node: Node
    ) -> Optional[tuple[Path, FetchResult]]:
        identity = node.pkg.identity()
        if not state.downloaded.add(identity):
            return None

        if node.exists() and node.is_empty_val():
            node.revision = self.local_nodes.revision(node.root_path)
        logger.info("Downloading package: %s", node.ver_string())
        try:
            imports = self.fetcher(node, ctx)
            if imports is not None:
                state.count_download()
            if self.options.copy_to_gopath and state.copied.add(identity):
                node.copy_to_gopath()
        except PinvendError as e:
            logger.error("Fail to download package: %s: %s", node.ver_string(), e)
            state.fail(e)
            if node.install_path.exists():
                shutil.rmtree(node.install_path, ignore_errors=True)
            return None

        if node.is_empty_val() and node.revision:
            self.local_nodes.set_revision(node.root_path, node.revision)
        return node.install_path, imports

    def _finish(
        self,
        state: _WalkState,
        pkg: Pkg,
        location: Path,
        pins: Pins,
        imports: FetchResult = None,
    ) -> list[WorkItem]:
        state.record(pkg, location)
        if not self.options.recursive:
            return []

        child_pins = self._child_pins(state, location, pins)
        if imports is None:
            imports = self.oracle.imports_of(
                pkg.import_path, pkg.root_path, location, self.options.include_tests
            )
        return [(path, child_pins) for path in imports]

    def _child_pins(self, state: _WalkState, location: Path, pins: Pins) -> Pins:
        """Pins for a package's imports: its own manifest, then the project's."""
        path = location / MANIFEST_FILENAME
        if not path.is_file():
            return pins
        try:
            own = root_pins(Manifest.load(path).dependencies())
        except PinvendError as e:
            logger.warning("Ignoring pins in %s: %s", path, e)
            return pins
        if not own:
            return pins
        return {**pins, **own, **state.project_pins}


def direct_imports(
    oracle: ImportOracle,
    target: str,
    work_dir: Union[str, Path],
    include_tests: bool = False,
) -> list[str]:
    """Return the external import paths found in the project's own sources."""
    work = _to_slash(work_dir)
    found = oracle.imports_of(target, get_root_path(target), Path(work_dir), include_tests)
    return [
        path
        for path in found
        if not is_standard_import(path)
        and is_valid_remote_path(path)
        and not is_subpackage(path, work, target)
    ]


def list_dependencies(
    oracle: ImportOracle,
    target: str,
    work_dir: Union[str, Path],
    include_tests: bool = False,
) -> list[str]:
    """Return the sorted repository roots the project imports directly."""
    paths = direct_imports(oracle, target, work_dir, include_tests)
    return sorted({get_root_path(path) for path in paths})
