# SPDX-License-Identifier: MIT
"""Finding the external imports of a Go source tree.

The walker only needs import paths, so a lexical scan of the import section
of each ``.go`` file is enough; no Go toolchain is required.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Iterable, Protocol

from pinvend_version import is_standard_import

logger = logging.getLogger(__name__)

VENDOR_DIRNAME = ".vendor"

# Comments and string literals, in the order they must be recognised.
_TOKEN_PATTERN = re.compile(
    r'"(?:\\.|[^"\\\n])*"|`[^`]*`|//[^\n]*|/\*.*?\*/',
    re.DOTALL,
)
_DECL_END_PATTERN = re.compile(r"^(?:func|type|var|const)\b", re.MULTILINE)
_IMPORT_BLOCK_PATTERN = re.compile(r"^\s*import\s*\((.*?)\)", re.DOTALL | re.MULTILINE)
_IMPORT_LINE_PATTERN = re.compile(
    r'^\s*import\s+(?:[A-Za-z_.][A-Za-z0-9_]*\s+)?("(?:\\.|[^"\\])*"|`[^`]*`)',
    re.MULTILINE,
)
_IMPORT_SPEC_PATTERN = re.compile(
    r'(?:[A-Za-z_.][A-Za-z0-9_]*\s+)?("(?:\\.|[^"\\])*"|`[^`]*`)'
)
_BUILD_IGNORE_PATTERN = re.compile(
    r"^//\s*(?:\+build|go:build)\s+ignore\s*$", re.MULTILINE
)


class ImportOracle(Protocol):
    """Anything that can list the imports of a package on disk."""

    def imports_of(
        self,
        import_path: str,
        root_path: str,
        src_dir: Path,
        include_tests: bool = False,
    ) -> list[str]:
        """Return external import paths used under ``src_dir``.

        Standard library imports and imports of ``root_path`` itself are
        excluded.
        """
        ...


def _strip_comments(source: str) -> str:
    def replace(match: re.Match) -> str:
        token = match.group(0)
        if token.startswith("/"):
            return "\n" * token.count("\n") or " "
        return token

    return _TOKEN_PATTERN.sub(replace, source)


def _unquote(literal: str) -> str:
    return literal[1:-1]


def parse_imports(source: str) -> list[str]:
    """Return the import paths declared in one Go source file."""
    if _BUILD_IGNORE_PATTERN.search(source.split("package", 1)[0]):
        return []

    clean = _strip_comments(source)
    end = _DECL_END_PATTERN.search(clean)
    if end:
        clean = clean[: end.start()]

    found = []
    for block in _IMPORT_BLOCK_PATTERN.finditer(clean):
        found.extend(_unquote(m.group(1)) for m in _IMPORT_SPEC_PATTERN.finditer(block.group(1)))
    found.extend(_unquote(m.group(1)) for m in _IMPORT_LINE_PATTERN.finditer(clean))
    return found


def _skip_dir(name: str) -> bool:
    return name == "testdata" or name == VENDOR_DIRNAME or name[:1] in ("_", ".")


def iter_go_files(src_dir: Path, include_tests: bool = False) -> Iterable[Path]:
    for dirpath, dirnames, filenames in os.walk(src_dir):
        dirnames[:] = sorted(d for d in dirnames if not _skip_dir(d))
        for filename in sorted(filenames):
            if not filename.endswith(".go") or filename[:1] in ("_", "."):
                continue
            if filename.endswith("_test.go") and not include_tests:
                continue
            yield Path(dirpath) / filename


class GoImportScanner:
    """Import oracle backed by a lexical scan of ``.go`` files."""

    def imports_of(
        self,
        import_path: str,
        root_path: str,
        src_dir: Path,
        include_tests: bool = False,
    ) -> list[str]:
        found: set[str] = set()
        for path in iter_go_files(Path(src_dir), include_tests):
            try:
                source = path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.warning("Cannot read %s: %s", path, e)
                continue
            for name in parse_imports(source):
                if not name or is_standard_import(name):
                    continue
                if name == root_path or name.startswith(root_path + "/"):
                    continue
                found.add(name)
        logger.debug("Imports of %s: %s", import_path, sorted(found))
        return sorted(found)
