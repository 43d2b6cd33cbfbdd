# SPDX-License-Identifier: MIT
"""Small helpers around httpx for fetch services."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import httpx

from .errors import FetchError

logger = logging.getLogger(__name__)


def _get(
    client: httpx.Client, url: str, params: Optional[dict[str, str]] = None
) -> httpx.Response:
    try:
        response = client.get(url, params=params or None)
        response.raise_for_status()
    except httpx.TimeoutException as e:
        logger.warning("Request timed out: %s", url)
        raise FetchError(f"request timed out: {url}") from e
    except httpx.HTTPStatusError as e:
        raise FetchError(
            f"{e.response.status_code} fetching {url}",
            status_code=e.response.status_code,
        ) from e
    except httpx.RequestError as e:
        raise FetchError(f"request failed: {url}: {e}") from e
    return response


def get_bytes(
    client: httpx.Client, url: str, params: Optional[dict[str, str]] = None
) -> bytes:
    """GET ``url`` and return the body.

    Raises:
        FetchError: On timeouts, transport errors and non-2xx responses
    """
    return _get(client, url, params).content


def get_text(
    client: httpx.Client, url: str, params: Optional[dict[str, str]] = None
) -> str:
    return _get(client, url, params).text


def get_json(
    client: httpx.Client, url: str, params: Optional[dict[str, str]] = None
) -> Any:
    """GET ``url`` and decode the JSON body.

    Raises:
        FetchError: On request failures or an undecodable body
    """
    response = _get(client, url, params)
    try:
        return response.json()
    except ValueError as e:
        raise FetchError(f"invalid JSON from {url}: {e}") from e


def download_to_file(
    client: httpx.Client,
    url: str,
    dest: Path,
    params: Optional[dict[str, str]] = None,
) -> Path:
    """Stream ``url`` into ``dest``.

    Raises:
        FetchError: On request failures
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    try:
        with client.stream("GET", url, params=params or None) as response:
            response.raise_for_status()
            with open(dest, "wb") as f:
                for chunk in response.iter_bytes():
                    f.write(chunk)
    except httpx.TimeoutException as e:
        logger.warning("Request timed out: %s", url)
        raise FetchError(f"download timed out: {url}") from e
    except httpx.HTTPStatusError as e:
        raise FetchError(
            f"{e.response.status_code} downloading {url}",
            status_code=e.response.status_code,
        ) from e
    except httpx.RequestError as e:
        raise FetchError(f"download failed: {url}: {e}") from e
    return dest
