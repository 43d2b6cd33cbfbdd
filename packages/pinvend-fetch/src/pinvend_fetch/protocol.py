# SPDX-License-Identifier: MIT
"""Dispatching a node to the service that can fetch it."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .discovery import discover
from .errors import FetchError
from .node import Node
from .service import FetchContext, FetchResult, Service
from .services import SERVICES

logger = logging.getLogger(__name__)


def find_service(
    download_url: str, services: Sequence[Service] = SERVICES
) -> Optional[tuple[Service, dict[str, str]]]:
    """Return the first service whose prefix covers ``download_url``.

    Raises:
        FetchError: If a service prefix matches but its pattern does not
    """
    for service in services:
        if not download_url.startswith(service.prefix):
            continue
        match = service.match(download_url)
        if match is None:
            raise FetchError(
                "cannot match package service prefix by given path", download_url
            )
        return service, match
    return None


def download(
    node: Node, ctx: FetchContext, services: Sequence[Service] = SERVICES
) -> FetchResult:
    """Fetch ``node`` into the local repository cache.

    Paths no service claims go through go-import discovery once; the
    discovered repository must then be claimed by a service.

    Returns:
        Imports of the fetched tree, or None when it has not changed

    Raises:
        FetchError: If the package cannot be fetched
    """
    found = find_service(node.download_url, services)
    if found is None:
        if node.import_path != node.download_url:
            raise FetchError("didn't find any match service", node.import_path)

        logger.info("Cannot match any service, getting dynamic...")
        meta = discover(ctx.client, node.import_path)
        node.download_url = meta.download_url
        found = find_service(node.download_url, services)
        if found is None:
            raise FetchError("didn't find any match service", node.import_path)
    return _dispatch(found, node, ctx)


def _dispatch(found: tuple[Service, dict[str, str]], node: Node, ctx: FetchContext) -> FetchResult:
    service, match = found
    logger.debug("Fetching %s from %s", node.ver_string(), service.name)
    try:
        return service.fetch(match, node, ctx)
    except FetchError as e:
        if not e.import_path:
            raise FetchError(str(e), node.import_path, e.status_code) from e
        raise
