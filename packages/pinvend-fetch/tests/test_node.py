# SPDX-License-Identifier: MIT
"""Tests for fetch nodes and the local repository cache."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from pinvend_fetch import FetchError, LocalNodes, Node, vcs_name
from pinvend_version import Pkg, RevisionType


class TestNodeCreate:
    """Tests for Node.create path layout."""

    def test_pinned_install_path(self, settings):
        pkg = Pkg("example.com/owner/repo", RevisionType.TAG, "v1.2.0")
        node = Node.create(pkg, settings)
        assert node.install_path.name == "repo.v1.2.0"
        assert str(node.install_path).endswith("repo.v1.2.0")
        assert node.install_path.parent == settings.repo_root / "example.com" / "owner"

    def test_unpinned_install_path(self, settings):
        node = Node.create(Pkg.default("github.com/owner/repo/sub"), settings)
        assert node.install_path == settings.repo_root / "github.com/owner/repo"
        assert node.install_gopath == settings.gopath_src / "github.com/owner/repo"
        assert node.download_url == "github.com/owner/repo/sub"

    def test_local_pin_uses_directory(self, settings, tmp_path):
        pkg = Pkg("github.com/owner/repo", RevisionType.LOCAL, str(tmp_path))
        assert Node.create(pkg, settings).install_path == tmp_path

    def test_without_gopath(self, tmp_path):
        from pinvend_fetch import FetchSettings

        settings = FetchSettings.from_home(tmp_path)
        node = Node.create(Pkg.default("github.com/owner/repo"), settings)
        assert node.install_gopath is None
        assert node.exists_in_gopath() is False


class TestVcs:
    """Tests for VCS detection and in-place updates."""

    @pytest.mark.parametrize("marker,name", [(".git", "git"), (".hg", "hg"), (".svn", "svn")])
    def test_vcs_name(self, tmp_path, marker, name):
        (tmp_path / marker).mkdir()
        assert vcs_name(tmp_path) == name

    def test_no_vcs(self, tmp_path):
        assert vcs_name(tmp_path) == ""
        assert vcs_name(None) == ""

    def test_git_update(self, settings):
        node = Node.create(Pkg.default("github.com/owner/repo"), settings)
        (node.install_gopath / ".git").mkdir(parents=True)

        results = [
            MagicMock(stdout="develop\n"),
            MagicMock(stdout=""),
        ]
        with patch("pinvend_fetch.node.subprocess.run", side_effect=results) as run:
            node.update_by_vcs()

        commands = [call.args[0] for call in run.call_args_list]
        assert commands == [
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            ["git", "pull", "origin", "develop"],
        ]

    def test_hg_update(self, settings):
        node = Node.create(Pkg.default("bitbucket.org/owner/repo"), settings)
        (node.install_gopath / ".hg").mkdir(parents=True)

        with patch("pinvend_fetch.node.subprocess.run", return_value=MagicMock(stdout="")) as run:
            node.update_by_vcs()

        assert [c.args[0] for c in run.call_args_list] == [["hg", "pull"], ["hg", "up"]]

    def test_failed_update_raises(self, settings):
        node = Node.create(Pkg.default("github.com/owner/repo"), settings)
        (node.install_gopath / ".svn").mkdir(parents=True)
        error = subprocess.CalledProcessError(1, ["svn", "update"], stderr="conflict")

        with patch("pinvend_fetch.node.subprocess.run", side_effect=error):
            with pytest.raises(FetchError, match="conflict"):
                node.update_by_vcs()


class TestCopyToGopath:
    """Tests for Node.copy_to_gopath."""

    def test_copies_tree(self, settings):
        node = Node.create(Pkg.default("github.com/owner/repo"), settings)
        node.install_path.mkdir(parents=True)
        (node.install_path / "lib.go").write_text("package lib\n")
        node.install_gopath.mkdir(parents=True)
        (node.install_gopath / "stale.go").write_text("package old\n")

        assert node.copy_to_gopath() is True
        assert (node.install_gopath / "lib.go").exists()
        assert not (node.install_gopath / "stale.go").exists()

    def test_skips_vcs_checkout(self, settings):
        node = Node.create(Pkg.default("github.com/owner/repo"), settings)
        node.install_path.mkdir(parents=True)
        (node.install_path / "lib.go").write_text("package lib\n")
        (node.install_gopath / ".git").mkdir(parents=True)

        assert node.copy_to_gopath() is False
        assert not (node.install_gopath / "lib.go").exists()


class TestLocalNodes:
    """Tests for persisted revision records."""

    def test_round_trip(self, tmp_path):
        path = tmp_path / "data" / "localnodes.list"
        nodes = LocalNodes.load(path)
        assert nodes.revision("github.com/owner/repo") == ""

        nodes.set_revision("github.com/owner/repo", "abc123")
        nodes.save()

        assert LocalNodes.load(path).revision("github.com/owner/repo") == "abc123"

    def test_in_memory_save_is_noop(self):
        nodes = LocalNodes()
        nodes.set_revision("a.com/b", "1")
        nodes.save()
        assert nodes.revision("a.com/b") == "1"
