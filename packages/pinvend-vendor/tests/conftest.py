# SPDX-License-Identifier: MIT
"""Shared fixtures for walker and linker tests."""

from __future__ import annotations

import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from pinvend_fetch import FetchError, FetchSettings, LocalNodes
from pinvend_vendor import DependencyWalker, WalkOptions


class FakeOracle:
    """Import oracle answering from a ``root path -> imports`` table."""

    def __init__(self, graph: dict[str, list[str]]):
        self.graph = graph

    def imports_of(self, import_path, root_path, src_dir, include_tests=False):
        return list(self.graph.get(root_path, []))


class FakeFetcher:
    """Fetcher that installs a stub tree and reports the table's imports."""

    def __init__(self, graph: dict[str, list[str]], fail=(), revision="rev1", unchanged=False):
        self.graph = graph
        self.fail = set(fail)
        self.revision = revision
        self.unchanged = unchanged
        self.calls: list[str] = []
        self.seen_revisions: dict[str, str] = {}
        self._lock = threading.Lock()

    def __call__(self, node, ctx):
        with self._lock:
            self.calls.append(node.pkg.identity())
            self.seen_revisions[node.root_path] = node.revision
        if node.root_path in self.fail:
            node.install_path.mkdir(parents=True, exist_ok=True)
            raise FetchError("archive not found", node.import_path)
        if self.unchanged and node.revision == self.revision:
            return None
        node.install_path.mkdir(parents=True, exist_ok=True)
        (node.install_path / "lib.go").write_text("package lib\n")
        if node.is_empty_val():
            node.revision = self.revision
        return list(self.graph.get(node.root_path, []))


@pytest.fixture
def settings(tmp_path: Path) -> FetchSettings:
    gopath_src = tmp_path / "gopath" / "src"
    gopath_src.mkdir(parents=True)
    return FetchSettings.from_home(tmp_path / "home", gopath_src=gopath_src)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    work_dir = tmp_path / "work" / "app"
    work_dir.mkdir(parents=True)
    (work_dir / "main.go").write_text("package main\n")
    return work_dir


@pytest.fixture
def make_walker(settings):
    """Return a factory ``(graph, **options) -> (walker, fetcher)``."""

    def factory(graph, fetcher=None, local_nodes=None, **options):
        fetcher = fetcher or FakeFetcher(graph)
        walker = DependencyWalker(
            settings,
            FakeOracle(graph),
            fetcher=fetcher,
            local_nodes=local_nodes if local_nodes is not None else LocalNodes(),
            options=WalkOptions(**options),
            client=MagicMock(),
        )
        return walker, fetcher

    return factory


@pytest.fixture
def fake_fetcher():
    return FakeFetcher


@pytest.fixture
def fake_oracle():
    return FakeOracle
