# SPDX-License-Identifier: MIT
"""Revisions recorded between runs for unpinned packages."""

from __future__ import annotations

import configparser
import logging
import threading
from pathlib import Path

logger = logging.getLogger(__name__)

VALUE_KEY = "value"


class LocalNodes:
    """Persisted ``root path -> last fetched revision`` records.

    Stored as INI with one section per root path. Thread safe, so the walker
    may record revisions from several fetch workers.
    """

    def __init__(self, path: Path | None = None):
        self.path = path
        self._parser = configparser.ConfigParser(interpolation=None)
        self._parser.optionxform = str  # type: ignore[assignment]
        self._lock = threading.Lock()

    @classmethod
    def load(cls, path: Path) -> LocalNodes:
        """Load records from ``path``; a missing file gives an empty record set."""
        nodes = cls(path)
        if path.is_file():
            try:
                nodes._parser.read(path, encoding="utf-8")
            except configparser.Error as e:
                logger.warning("Ignoring unreadable %s: %s", path, e)
                nodes._parser = configparser.ConfigParser(interpolation=None)
                nodes._parser.optionxform = str  # type: ignore[assignment]
        return nodes

    def revision(self, root_path: str) -> str:
        with self._lock:
            return self._parser.get(root_path, VALUE_KEY, fallback="")

    def set_revision(self, root_path: str, revision: str) -> None:
        with self._lock:
            if not self._parser.has_section(root_path):
                self._parser.add_section(root_path)
            self._parser.set(root_path, VALUE_KEY, revision)

    def save(self) -> None:
        """Write the records back to disk. No-op for in-memory instances."""
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock, open(self.path, "w", encoding="utf-8") as f:
            self._parser.write(f)
