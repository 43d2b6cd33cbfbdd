# SPDX-License-Identifier: MIT
"""Tests for import path detection."""

from pinvend_manifest import UNKNOWN_TARGET, parse_target


class TestParseTarget:
    """Tests for parse_target function."""

    def test_manifest_target_wins(self):
        assert parse_target("github.com/me/app", "/anywhere", ["/go"]) == "github.com/me/app"

    def test_guess_from_gopath(self):
        target = parse_target("", "/go/src/github.com/me/app", ["/other", "/go"])
        assert target == "github.com/me/app"

    def test_guess_from_repo_root(self):
        target = parse_target(
            "", "/home/me/.pinvend/repos/github.com/me/app", [], "/home/me/.pinvend/repos"
        )
        assert target == "github.com/me/app"

    def test_windows_separators(self):
        target = parse_target("", "C:\\go\\src\\example.com\\app", ["C:\\go"])
        assert target == "example.com/app"

    def test_unknown_location(self):
        assert parse_target("", "/tmp/project", ["/go"], "/repos") == UNKNOWN_TARGET
