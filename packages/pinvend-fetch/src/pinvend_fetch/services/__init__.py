# SPDX-License-Identifier: MIT
"""Registered hosting services, in dispatch order."""

from ..service import Service
from . import bitbucket, gitcafe, github, google, gopmio, launchpad, oschina

SERVICES: tuple[Service, ...] = (
    github.SERVICE,
    google.SERVICE,
    bitbucket.SERVICE,
    oschina.SERVICE,
    gitcafe.SERVICE,
    launchpad.SERVICE,
    gopmio.SERVICE,
)

__all__ = ["SERVICES"]
