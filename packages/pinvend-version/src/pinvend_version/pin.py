# SPDX-License-Identifier: MIT
"""Parsing and formatting of pin strings.

A pin string has the form ``<type>:<value>`` where type is one of
``branch``, ``commit`` or ``tag``. Manifests may also name a local
directory, which pins the dependency to that path.
"""

from __future__ import annotations

import os
from pathlib import Path

from .errors import VersionParseError
from .pkg import Pkg, RevisionType

PIN_SEPARATOR = ":"

# Pin types that may be written as text; local pins are plain paths.
TEXT_PIN_TYPES = {
    RevisionType.BRANCH.value: RevisionType.BRANCH,
    RevisionType.COMMIT.value: RevisionType.COMMIT,
    RevisionType.TAG.value: RevisionType.TAG,
}


def parse_pin(text: str) -> tuple[RevisionType, str]:
    """Parse a ``<type>:<value>`` pin string.

    Args:
        text: Pin string such as ``tag:v1.2.0``

    Returns:
        Tuple of revision type and value

    Raises:
        VersionParseError: If the string does not have exactly two fields or
            the type is not branch, commit or tag
    """
    fields = text.split(PIN_SEPARATOR)
    if len(fields) != 2:
        raise VersionParseError(
            text, f"Cannot parse dependency version: {text!r} (expected <type>:<value>)"
        )

    rev_type = TEXT_PIN_TYPES.get(fields[0])
    if rev_type is None:
        raise VersionParseError(
            text,
            f"Unknown version type {fields[0]!r} in {text!r}, "
            "expected branch, commit or tag",
        )
    return rev_type, fields[1]


def format_pin(rev_type: RevisionType, value: str) -> str:
    """Format a pin for writing to a manifest.

    Unpinned branches are written as an empty string and local pins as the
    bare directory path.
    """
    if not value:
        return ""
    if rev_type == RevisionType.LOCAL:
        return value
    return f"{rev_type.value}{PIN_SEPARATOR}{value}"


def parse_dependency_spec(
    import_path: str, text: str, base_dir: str | Path | None = None
) -> Pkg:
    """Turn a manifest dependency entry into a package.

    Args:
        import_path: Dependency import path (the manifest key)
        text: Manifest value, empty for unpinned
        base_dir: Directory relative local paths are resolved against

    Returns:
        The pinned package

    Raises:
        VersionParseError: If the value is neither a directory nor a valid pin
    """
    text = text.strip()
    if not text:
        return Pkg.default(import_path)

    local = Path(text)
    if not local.is_absolute() and base_dir is not None:
        local = Path(base_dir) / local
    if local.is_dir():
        return Pkg(import_path, RevisionType.LOCAL, os.path.abspath(local))

    rev_type, value = parse_pin(text)
    return Pkg(import_path, rev_type, value)


def split_versioned_arg(arg: str) -> Pkg:
    """Parse a command line argument of the form ``path[@type:value]``.

    Raises:
        VersionParseError: If the part after ``@`` is not a valid pin
    """
    import_path, sep, pin = arg.partition("@")
    if not sep:
        return Pkg.default(import_path)
    rev_type, value = parse_pin(pin)
    return Pkg(import_path, rev_type, value)
