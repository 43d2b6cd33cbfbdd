# SPDX-License-Identifier: MIT
"""Shared fixtures for fetch tests."""

from __future__ import annotations

import io
import tarfile
import zipfile
from pathlib import Path
from typing import Callable

import httpx
import pytest

from pinvend_fetch import FetchContext, FetchSettings, GoImportScanner


def _zip_bytes(files: dict[str, str]) -> bytes:
    """Build an in-memory zip archive from ``{name: content}``."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        dirs = sorted({name.rsplit("/", 1)[0] + "/" for name in files if "/" in name})
        for d in dirs:
            zf.writestr(d, "")
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


def _tar_bytes(files: dict[str, str], compression: str = "gz") -> bytes:
    """Build an in-memory tar archive from ``{name: content}``."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode=f"w:{compression}") as tf:
        for name, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tf.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


class Recorder:
    """Mock transport handler that records requested URLs."""

    def __init__(self, routes: dict[str, Callable[[httpx.Request], httpx.Response] | httpx.Response]):
        self.routes = routes
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        for prefix, response in self.routes.items():
            if url.startswith(prefix):
                return response(request) if callable(response) else response
        return httpx.Response(404, text="not found")

    def requested(self, prefix: str) -> bool:
        return any(url.startswith(prefix) for url in self.requests)


@pytest.fixture
def settings(tmp_path: Path) -> FetchSettings:
    gopath = tmp_path / "gopath"
    (gopath / "src").mkdir(parents=True)
    return FetchSettings.from_home(tmp_path / "home", gopath_src=gopath / "src")


@pytest.fixture
def make_ctx(settings):
    """Return a factory building a FetchContext around a Recorder."""
    clients = []

    def factory(routes) -> tuple[FetchContext, Recorder]:
        recorder = Recorder(routes)
        client = settings.make_client(transport=httpx.MockTransport(recorder))
        clients.append(client)
        return FetchContext(settings, client, GoImportScanner()), recorder

    yield factory
    for client in clients:
        client.close()


@pytest.fixture
def make_zip():
    return _zip_bytes


@pytest.fixture
def make_tar():
    return _tar_bytes
