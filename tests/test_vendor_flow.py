# SPDX-License-Identifier: MIT
"""Integration test: End-to-end resolve, vendor and build flow.

Tests the complete flow of:
1. Resolving the sample project's dependency graph against a mock GitHub
2. Assembling the vendor tree from the resolution
3. Running the toolchain inside the tree
4. Re-resolving from the populated cache without network access
"""

import io
import os
import shutil
import subprocess
import zipfile
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
from click.testing import CliRunner

from pinvend_cli.main import cli
from pinvend_fetch import FetchSettings, GoImportScanner, LocalNodes
from pinvend_manifest import Manifest
from pinvend_vendor import CopyBackend, DependencyWalker, VendorLinker, run_toolchain
from pinvend_version import RevisionType

BAR_SOURCE = """package bar

import "github.com/baz/qux"

func Version() string { return qux.Name }
"""

BAR_PINFILE = "[deps]\ngithub.com/baz/qux = commit:c0ffee\n"

QUX_SOURCE = 'package qux\n\nconst Name = "qux"\n'

ASSERT_SOURCE = "package assert\n\nfunc Equal(t interface{}, a, b interface{}) {}\n"


def zip_bytes(files: dict[str, str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


ROUTES = {
    "https://github.com/foo/bar/archive/v1.0.0.zip": zip_bytes({
        "bar-1.0.0/bar.go": BAR_SOURCE,
        "bar-1.0.0/.pinfile": BAR_PINFILE,
    }),
    "https://github.com/baz/qux/archive/c0ffee.zip": zip_bytes({
        "qux-c0ffee/qux.go": QUX_SOURCE,
    }),
    "https://api.github.com/repos/check/assert/git/refs": None,
    "https://github.com/check/assert/archive/f00d.zip": zip_bytes({
        "assert-f00d/assert.go": ASSERT_SOURCE,
    }),
}


class MockGitHub:
    """Serves the sample project's dependencies."""

    def __init__(self) -> None:
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url).split("?", 1)[0]
        self.requests.append(url)
        if url not in ROUTES:
            return httpx.Response(404, text="not found")
        if url.endswith("/git/refs"):
            return httpx.Response(
                200, json=[{"ref": "refs/heads/master", "object": {"sha": "f00d"}}]
            )
        return httpx.Response(200, content=ROUTES[url])


class TestEndToEndVendorFlow:
    """Integration tests for the library level flow."""

    @pytest.fixture
    def sample_project_dir(self, tmp_path: Path) -> Path:
        """Copy the sample project to a scratch directory."""
        project_dir = tmp_path / "work" / "sample"
        shutil.copytree(Path(__file__).parent / "sample_app", project_dir)
        return project_dir

    @pytest.fixture
    def settings(self, tmp_path: Path) -> FetchSettings:
        gopath_src = tmp_path / "gopath" / "src"
        gopath_src.mkdir(parents=True)
        return FetchSettings.from_home(tmp_path / "home", gopath_src=gopath_src)

    @pytest.fixture
    def github(self) -> MockGitHub:
        return MockGitHub()

    def resolve(self, settings: FetchSettings, github: MockGitHub, project_dir: Path):
        manifest = Manifest.load(project_dir / ".pinfile")
        with settings.make_client(transport=httpx.MockTransport(github)) as client:
            walker = DependencyWalker(
                settings,
                GoImportScanner(),
                local_nodes=LocalNodes.load(settings.local_nodes_file),
                client=client,
            )
            return walker.resolve(manifest.target_path, project_dir, manifest.dependencies())

    def test_resolve_follows_dependency_pins(
        self, settings: FetchSettings, github: MockGitHub, sample_project_dir: Path
    ) -> None:
        """Test that transitive pins come from the dependency's own manifest."""
        resolution = self.resolve(settings, github, sample_project_dir)

        assert resolution.fail_count == 0
        assert resolution.download_count == 2
        assert sorted(resolution.packages) == ["github.com/baz/qux", "github.com/foo/bar"]

        bar = resolution.packages["github.com/foo/bar"]
        assert (bar.rev_type, bar.value) == (RevisionType.TAG, "v1.0.0")
        qux = resolution.packages["github.com/baz/qux"]
        assert (qux.rev_type, qux.value) == (RevisionType.COMMIT, "c0ffee")

        assert resolution.locations["github.com/foo/bar"] == (
            settings.repo_root / "github.com" / "foo" / "bar.v1.0.0"
        )
        assert not any("check/assert" in url for url in github.requests)

    def test_vendor_tree_and_toolchain(
        self, settings: FetchSettings, github: MockGitHub, sample_project_dir: Path
    ) -> None:
        """Test assembling the tree and running the toolchain inside it."""
        resolution = self.resolve(settings, github, sample_project_dir)

        tree = VendorLinker(CopyBackend()).assemble(
            resolution,
            sample_project_dir,
            "example.com/sample",
            gopath_src=settings.gopath_src,
        )

        src = sample_project_dir / ".vendor" / "src"
        assert (src / "example.com" / "sample" / "util" / "util.go").exists()
        assert (src / "github.com" / "foo" / "bar" / "bar.go").exists()
        assert (src / "github.com" / "baz" / "qux" / "qux.go").exists()
        assert not (src / "example.com" / "sample" / ".vendor").exists()
        assert len(tree.links) == 3

        seen = {}

        def fake_run(args, cwd=None, check=False):
            seen["gopath"] = os.environ["GOPATH"]
            seen["cwd"] = cwd
            return subprocess.CompletedProcess(args, 0)

        with patch("pinvend_vendor.toolchain.subprocess.run", side_effect=fake_run):
            run_toolchain(["go", "build"], tree.root, cwd=tree.project_path)

        assert seen["gopath"].split(os.pathsep)[0] == str(tree.root)
        assert seen["cwd"] == tree.project_path

        tree.remove()
        assert not (sample_project_dir / ".vendor").exists()
        assert (sample_project_dir / "main.go").exists()

    def test_stdlib_only_project(
        self, settings: FetchSettings, github: MockGitHub, tmp_path: Path
    ) -> None:
        """Test that a project without external imports links only itself."""
        project_dir = tmp_path / "work" / "plain"
        project_dir.mkdir(parents=True)
        (project_dir / "main.go").write_text(
            'package main\n\nimport (\n\t"fmt"\n\t"os"\n)\n\nfunc main() { fmt.Println(os.Args) }\n'
        )
        (project_dir / ".pinfile").write_text("[target]\npath = example.com/plain\n")

        resolution = self.resolve(settings, github, project_dir)
        tree = VendorLinker(CopyBackend()).assemble(resolution, project_dir, "example.com/plain")

        assert resolution.packages == {}
        assert github.requests == []
        assert tree.links == [(project_dir.absolute(), tree.src / "example.com" / "plain")]
        assert (tree.project_path / "main.go").exists()

    def test_second_resolve_is_offline(
        self, settings: FetchSettings, github: MockGitHub, sample_project_dir: Path
    ) -> None:
        """Test that fixed pins already in the cache are not fetched again."""
        self.resolve(settings, github, sample_project_dir)
        github.requests.clear()

        resolution = self.resolve(settings, github, sample_project_dir)

        assert github.requests == []
        assert resolution.download_count == 0
        assert len(resolution.packages) == 2


class TestEndToEndCliFlow:
    """Integration tests driving the pinvend command."""

    @pytest.fixture
    def sample_project_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
        project_dir = tmp_path / "work" / "sample"
        shutil.copytree(Path(__file__).parent / "sample_app", project_dir)
        (tmp_path / "gopath" / "src").mkdir(parents=True)
        monkeypatch.setenv("PINVEND_HOME", str(tmp_path / "home"))
        monkeypatch.setenv("GOPATH", str(tmp_path / "gopath"))
        return project_dir

    @pytest.fixture
    def github(self, monkeypatch: pytest.MonkeyPatch) -> MockGitHub:
        handler = MockGitHub()
        make_client = FetchSettings.make_client

        def fake_make_client(self, transport=None):
            return make_client(self, transport=httpx.MockTransport(handler))

        monkeypatch.setattr(FetchSettings, "make_client", fake_make_client)
        return handler

    def test_gen_get_test_flow(self, sample_project_dir: Path, github: MockGitHub) -> None:
        """Test gen, then get with --save, then go test against the tree."""
        runner = CliRunner()
        project = str(sample_project_dir)

        result = runner.invoke(cli, ["-C", project, "gen"])
        assert result.exit_code == 0, result.output
        manifest = Manifest.load(sample_project_dir / ".pinfile")
        assert manifest.get("deps", "github.com/foo/bar") == "tag:v1.0.0"
        assert manifest.resources() == ["conf"]

        result = runner.invoke(cli, ["-C", project, "get", "github.com/check/assert", "-s"])
        assert result.exit_code == 0, result.output
        manifest = Manifest.load(sample_project_dir / ".pinfile")
        assert manifest.has_dependency("github.com/check/assert")

        result = runner.invoke(cli, ["-C", project, "list", "-t"])
        assert "-> github.com/check/assert\n" in result.output
        assert "-> github.com/foo/bar @ tag:v1.0.0" in result.output

        calls = []

        def fake_run(args, cwd=None, check=False):
            calls.append((args, (Path(cwd).parents[1] / "github.com" / "check" / "assert").is_dir()))
            return subprocess.CompletedProcess(args, 0)

        with patch("pinvend_vendor.toolchain.subprocess.run", side_effect=fake_run):
            result = runner.invoke(cli, ["-s", "-C", project, "test", "./..."])

        assert result.exit_code == 0, result.output
        assert calls == [(["go", "test", "./..."], True)]
        assert not (sample_project_dir / ".vendor").exists()
