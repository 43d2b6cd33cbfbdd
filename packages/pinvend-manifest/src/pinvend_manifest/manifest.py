# SPDX-License-Identifier: MIT
"""Reading and writing the project manifest (``.pinfile``).

The manifest is a small INI file::

    [target]
    path = github.com/me/app

    [deps]
    github.com/foo/bar = tag:v1.2.0
    github.com/foo/baz =

    [res]
    include = conf|templates

    [project]
    local_gopath = ./vendor
"""

from __future__ import annotations

import configparser
from pathlib import Path
from typing import Iterable, Optional

from pinvend_version import (
    PinvendError,
    Pkg,
    format_pin,
    parse_dependency_spec,
)

MANIFEST_FILENAME = ".pinfile"

TARGET_SECTION = "target"
DEPS_SECTION = "deps"
RES_SECTION = "res"
PROJECT_SECTION = "project"

RESOURCE_SEPARATOR = "|"

# Directories commonly shipped next to a binary.
COMMON_RESOURCES = ("views", "templates", "static", "public", "conf")


class ManifestError(PinvendError):
    """Raised when a manifest cannot be read or written."""

    pass


def _new_parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(
        delimiters=("=",),
        interpolation=None,
        default_section="__defaults__",
    )
    # Import paths are case sensitive.
    parser.optionxform = str  # type: ignore[assignment]
    return parser


class Manifest:
    """In-memory view of a project manifest.

    Attributes:
        path: File the manifest was loaded from and is saved to
    """

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path is not None else Path(MANIFEST_FILENAME)
        self._parser = _new_parser()

    @classmethod
    def load(cls, path: str | Path) -> Manifest:
        """Load a manifest from disk.

        A missing file yields an empty manifest bound to ``path``.

        Args:
            path: Path to the manifest file

        Returns:
            Manifest instance

        Raises:
            ManifestError: If the path is a directory or the file is not
                valid INI
        """
        manifest = cls(path)
        if manifest.path.is_dir():
            raise ManifestError(
                f"Manifest should be a file but found directory: {manifest.path}"
            )
        if not manifest.path.exists():
            return manifest

        try:
            with open(manifest.path, encoding="utf-8") as f:
                manifest._parser.read_file(f)
        except configparser.Error as e:
            raise ManifestError(f"Invalid manifest {manifest.path}: {e}") from e
        except OSError as e:
            raise ManifestError(f"Cannot read manifest {manifest.path}: {e}") from e
        return manifest

    def save(self, path: str | Path | None = None) -> Path:
        """Write the manifest to disk.

        Returns:
            Path the manifest was written to

        Raises:
            ManifestError: If the file cannot be written
        """
        target = Path(path) if path is not None else self.path
        try:
            with open(target, "w", encoding="utf-8") as f:
                self._parser.write(f)
        except OSError as e:
            raise ManifestError(f"Cannot write manifest {target}: {e}") from e
        return target

    def get(self, section: str, key: str, default: str = "") -> str:
        return self._parser.get(section, key, fallback=default)

    def set(self, section: str, key: str, value: str) -> None:
        if not self._parser.has_section(section):
            self._parser.add_section(section)
        self._parser.set(section, key, value)

    @property
    def target_path(self) -> str:
        """Import path override for the project, empty to auto-detect."""
        return self.get(TARGET_SECTION, "path").strip()

    @target_path.setter
    def target_path(self, value: str) -> None:
        self.set(TARGET_SECTION, "path", value)

    @property
    def local_gopath(self) -> str:
        return self.get(PROJECT_SECTION, "local_gopath").strip()

    @local_gopath.setter
    def local_gopath(self, value: str) -> None:
        self.set(PROJECT_SECTION, "local_gopath", value)

    def has_dependency(self, name: str) -> bool:
        return self._parser.has_option(DEPS_SECTION, name)

    def dependency(self, name: str) -> Optional[Pkg]:
        """Return the pinned package for ``name`` or None when not listed.

        Raises:
            VersionParseError: If the stored pin is malformed
        """
        if not self.has_dependency(name):
            return None
        return parse_dependency_spec(
            name, self.get(DEPS_SECTION, name), base_dir=self.base_dir
        )

    def dependencies(self) -> dict[str, Pkg]:
        """Return every listed dependency keyed by import path.

        Raises:
            VersionParseError: If any stored pin is malformed
        """
        if not self._parser.has_section(DEPS_SECTION):
            return {}
        return {
            name: parse_dependency_spec(name, value, base_dir=self.base_dir)
            for name, value in self._parser.items(DEPS_SECTION)
        }

    def set_dependency(self, name: str, pkg: Optional[Pkg] = None) -> None:
        """Record a dependency; ``None`` or an unpinned package writes ``""``."""
        value = format_pin(pkg.rev_type, pkg.value) if pkg is not None else ""
        self.set(DEPS_SECTION, name, value)

    def remove_dependency(self, name: str) -> bool:
        if not self._parser.has_section(DEPS_SECTION):
            return False
        return self._parser.remove_option(DEPS_SECTION, name)

    def resources(self) -> list[str]:
        raw = self.get(RES_SECTION, "include")
        return [item.strip() for item in raw.split(RESOURCE_SEPARATOR) if item.strip()]

    def set_resources(self, resources: Iterable[str]) -> None:
        self.set(RES_SECTION, "include", RESOURCE_SEPARATOR.join(resources))

    @property
    def base_dir(self) -> Path:
        """Directory relative local dependency paths are resolved against."""
        return self.path.parent.absolute()
