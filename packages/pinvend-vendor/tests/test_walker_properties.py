# SPDX-License-Identifier: MIT
"""Property-based tests for dependency walking.

Feature: dependency-walker
Property 1: Every reachable root is resolved and fetched exactly once
Property 2: Walking terminates on cyclic graphs
Property 3: The vendor tree never links two roots to one path

These tests generate random import graphs, cycles and diamonds included, and
check the walker against a plain breadth-first reachability computation.
"""

from __future__ import annotations

import tempfile
from collections import deque
from pathlib import Path
from unittest.mock import MagicMock

from hypothesis import HealthCheck, given, settings, strategies as st

from pinvend_fetch import FetchSettings, LocalNodes
from pinvend_vendor import CopyBackend, DependencyWalker, VendorLinker, WalkOptions

APP = "github.com/me/app"


# =============================================================================
# Strategies for generating test data
# =============================================================================

@st.composite
def import_graphs(draw):
    """Generate ``root -> imports`` tables over a small set of repositories."""
    count = draw(st.integers(min_value=1, max_value=8))
    roots = [f"github.com/owner{i}/repo{i}" for i in range(count)]
    graph = {}
    for root in roots:
        targets = draw(st.lists(st.sampled_from(roots), max_size=4))
        subpaths = [t + "/sub" if draw(st.booleans()) else t for t in targets]
        graph[root] = subpaths + draw(st.lists(st.sampled_from(["fmt", "os", "C"]), max_size=2))
    graph[APP] = draw(st.lists(st.sampled_from(roots), min_size=1, max_size=4))
    return graph


def reachable(graph: dict[str, list[str]]) -> set[str]:
    """Roots reachable from the project, computed breadth first."""
    def root_of(path: str) -> str:
        return "/".join(path.split("/")[:3])

    seen: set[str] = set()
    queue = deque(root_of(p) for p in graph[APP])
    while queue:
        root = queue.popleft()
        if root in seen:
            continue
        seen.add(root)
        queue.extend(root_of(p) for p in graph.get(root, []) if "." in p.split("/")[0])
    return seen


def run_walk(graph, fake_oracle, fake_fetcher, home: Path, jobs: int = 1):
    fetcher = fake_fetcher(graph)
    walker = DependencyWalker(
        FetchSettings.from_home(home),
        fake_oracle(graph),
        fetcher=fetcher,
        local_nodes=LocalNodes(),
        options=WalkOptions(jobs=jobs),
        client=MagicMock(),
    )
    work_dir = home / "work"
    work_dir.mkdir(parents=True, exist_ok=True)
    return walker.resolve(APP, work_dir), fetcher, work_dir


# =============================================================================
# Property 1 and 2: resolution completeness and termination
# =============================================================================

class TestResolutionProperties:
    """Property tests for DependencyWalker.resolve."""

    @given(graph=import_graphs())
    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_reachable_roots_fetched_once(self, graph, fake_oracle, fake_fetcher):
        with tempfile.TemporaryDirectory() as tmp:
            resolution, fetcher, _ = run_walk(graph, fake_oracle, fake_fetcher, Path(tmp))

        expected = reachable(graph)
        assert set(resolution.packages) == expected
        assert sorted(fetcher.calls) == sorted(f"{root}@branch:" for root in expected)
        assert resolution.download_count == len(expected)
        assert resolution.fail_count == 0

    @given(graph=import_graphs(), jobs=st.integers(min_value=2, max_value=4))
    @settings(max_examples=25, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_concurrent_walk_matches_sequential(self, graph, jobs, fake_oracle, fake_fetcher):
        with tempfile.TemporaryDirectory() as tmp:
            resolution, fetcher, _ = run_walk(graph, fake_oracle, fake_fetcher, Path(tmp), jobs=jobs)

        assert set(resolution.packages) == reachable(graph)
        assert len(fetcher.calls) == len(set(fetcher.calls))


# =============================================================================
# Property 3: no duplicate links
# =============================================================================

class TestLinkProperties:
    """Property tests for VendorLinker.assemble."""

    @given(graph=import_graphs())
    @settings(max_examples=25, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_link_destinations_unique(self, graph, fake_oracle, fake_fetcher):
        with tempfile.TemporaryDirectory() as tmp:
            resolution, _, work_dir = run_walk(graph, fake_oracle, fake_fetcher, Path(tmp))
            tree = VendorLinker(CopyBackend()).assemble(resolution, work_dir, APP)

            dests = [dest for _, dest in tree.links]
            assert len(dests) == len(set(dests))
            assert len(tree.links) == len(resolution.packages) + 1
