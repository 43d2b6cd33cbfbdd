# SPDX-License-Identifier: MIT
"""Persisted global settings in ``<home>/data/config.ini``."""

from __future__ import annotations

import configparser
import os
from pathlib import Path
from typing import Optional

from pinvend_fetch import FetchSettings, first_gopath
from pinvend_version import PinvendError

SETTINGS_SECTION = "settings"
GITHUB_SECTION = "github"

HTTP_PROXY_KEY = "HTTP_PROXY"
CLIENT_ID_KEY = "CLIENT_ID"
CLIENT_SECRET_KEY = "CLIENT_SECRET"


class ConfigError(PinvendError):
    """Raised when configuration loading fails."""

    pass


def _new_parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str  # type: ignore[assignment]
    return parser


class GlobalConfig:
    """Proxy and GitHub credentials shared by every project."""

    def __init__(self, path: Path):
        self.path = path
        self._parser = _new_parser()

    @classmethod
    def load(cls, path: str | Path) -> GlobalConfig:
        """Load the config file; a missing file gives empty settings.

        Raises:
            ConfigError: If the file cannot be parsed
        """
        config = cls(Path(path))
        if config.path.is_file():
            try:
                config._parser.read(config.path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigError(f"Invalid config file {config.path}: {e}") from e
        return config

    def save(self) -> None:
        """Write the settings back to disk.

        Raises:
            ConfigError: If the file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                self._parser.write(f)
        except OSError as e:
            raise ConfigError(f"Cannot write config file {self.path}: {e}") from e

    def get(self, section: str, key: str) -> str:
        return self._parser.get(section, key, fallback="")

    def set(self, section: str, key: str, value: str) -> None:
        if not self._parser.has_section(section):
            self._parser.add_section(section)
        self._parser.set(section, key, value)

    def unset(self, section: str, key: str) -> bool:
        if not self._parser.has_section(section):
            return False
        return self._parser.remove_option(section, key)

    @property
    def http_proxy(self) -> str:
        return self.get(SETTINGS_SECTION, HTTP_PROXY_KEY)

    @property
    def github_client_id(self) -> str:
        return self.get(GITHUB_SECTION, CLIENT_ID_KEY)

    @property
    def github_client_secret(self) -> str:
        return self.get(GITHUB_SECTION, CLIENT_SECRET_KEY)


def gopath_entries(gopath: Optional[str] = None) -> list[str]:
    """Return the non-empty entries of ``GOPATH``."""
    if gopath is None:
        gopath = os.environ.get("GOPATH", "")
    return [entry for entry in gopath.split(os.pathsep) if entry]


def load_settings(home: Optional[Path] = None, gopath: Optional[str] = None) -> FetchSettings:
    """Build the session settings from the environment and the config file.

    Args:
        home: Tool home, ``PINVEND_HOME`` or ``~/.pinvend`` by default
        gopath: GOPATH value, read from the environment by default

    Returns:
        FetchSettings with proxy and credentials applied

    Raises:
        ConfigError: If the config file is invalid
    """
    settings = FetchSettings.from_home(home)
    root = first_gopath(gopath)
    if root is not None:
        settings.gopath_src = root / "src"

    config = GlobalConfig.load(settings.config_file)
    settings.http_proxy = config.http_proxy
    settings.github_client_id = config.github_client_id
    settings.github_client_secret = config.github_client_secret
    return settings
