# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for CLI tests."""

from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import Callable, Generator

import httpx
import pytest
from click.testing import CliRunner

from pinvend_fetch import FetchSettings

BAR_SOURCE = 'package bar\n\nimport "fmt"\n\nfunc Hello() { fmt.Println("hi") }\n'


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the tool home and GOPATH at temporary directories."""
    home_dir = tmp_path / "home"
    gopath = tmp_path / "gopath"
    (gopath / "src").mkdir(parents=True)
    monkeypatch.setenv("PINVEND_HOME", str(home_dir))
    monkeypatch.setenv("GOPATH", str(gopath))
    return home_dir


@pytest.fixture
def temp_project(tmp_path: Path, home: Path) -> Generator[Path, None, None]:
    """Create a project importing one GitHub package."""
    project_dir = tmp_path / "work" / "app"
    project_dir.mkdir(parents=True)

    (project_dir / "main.go").write_text(
        """package main

import (
	"fmt"

	"github.com/foo/bar"
)

func main() {
	fmt.Println("app")
	bar.Hello()
}
"""
    )
    (project_dir / ".pinfile").write_text("[target]\npath = example.com/app\n")

    yield project_dir


@pytest.fixture
def stdlib_project(tmp_path: Path, home: Path) -> Path:
    """Create a project that only imports the standard library."""
    project_dir = tmp_path / "work" / "plain"
    project_dir.mkdir(parents=True)
    (project_dir / "main.go").write_text(
        'package main\n\nimport "fmt"\n\nfunc main() { fmt.Println("plain") }\n'
    )
    (project_dir / ".pinfile").write_text("[target]\npath = example.com/plain\n")
    return project_dir


def _zip_bytes(files: dict[str, str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


class Remote:
    """Mock transport handler serving fixed responses by URL prefix."""

    def __init__(self) -> None:
        self.routes: dict[str, httpx.Response] = {}
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        for prefix, response in self.routes.items():
            if url.startswith(prefix):
                return response
        return httpx.Response(404, text="not found")

    def github(self, owner: str, repo: str, sha: str = "abc123", files: dict[str, str] | None = None):
        """Serve a repository's refs and its archive at ``sha``."""
        files = files or {"lib.go": BAR_SOURCE}
        self.routes[f"https://api.github.com/repos/{owner}/{repo}/git/refs"] = httpx.Response(
            200, json=[{"ref": "refs/heads/master", "object": {"sha": sha}}]
        )
        self.archive(owner, repo, sha, files)

    def archive(self, owner: str, repo: str, ref: str, files: dict[str, str] | None = None):
        files = files or {"lib.go": BAR_SOURCE}
        self.routes[f"https://github.com/{owner}/{repo}/archive/{ref}.zip"] = httpx.Response(
            200,
            content=_zip_bytes({f"{repo}-{ref}/{name}": body for name, body in files.items()}),
        )


@pytest.fixture
def remote(monkeypatch: pytest.MonkeyPatch) -> Remote:
    """Route every HTTP request made by the CLI to an in-memory remote."""
    handler = Remote()
    make_client: Callable = FetchSettings.make_client

    def fake_make_client(self, transport=None):
        return make_client(self, transport=httpx.MockTransport(handler))

    monkeypatch.setattr(FetchSettings, "make_client", fake_make_client)
    return handler
