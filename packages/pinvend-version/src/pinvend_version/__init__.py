# SPDX-License-Identifier: MIT
"""Package identity, pins and import path rules for pinvend.

This package holds the value types every other pinvend package builds on:
the pinned package identity, the pin string grammar used by manifests and
the host specific rules that derive a repository root from an import path.

Example:
    >>> from pinvend_version import Pkg, RevisionType, parse_pin
    >>>
    >>> pkg = Pkg("github.com/owner/repo/sub", RevisionType.TAG, "v1.2.0")
    >>> pkg.root_path
    'github.com/owner/repo'
    >>> pkg.val_suffix()
    '.v1.2.0'
    >>>
    >>> parse_pin("branch:dev")
    (<RevisionType.BRANCH: 'branch'>, 'dev')
"""

__version__ = "0.1.0"

from .errors import (
    PinvendError,
    VersionParseError,
    InvalidImportPathError,
)
from .pkg import (
    Pkg,
    RevisionType,
    DEFAULT_BRANCHES,
)
from .pin import (
    parse_pin,
    format_pin,
    parse_dependency_spec,
    split_versioned_arg,
)
from .paths import (
    ROOT_PATH_RULES,
    get_root_path,
    is_valid_remote_path,
    is_standard_import,
    is_subpackage,
)

__all__ = [
    # Errors
    "PinvendError",
    "VersionParseError",
    "InvalidImportPathError",
    # Package identity
    "Pkg",
    "RevisionType",
    "DEFAULT_BRANCHES",
    # Pin strings
    "parse_pin",
    "format_pin",
    "parse_dependency_spec",
    "split_versioned_arg",
    # Import paths
    "ROOT_PATH_RULES",
    "get_root_path",
    "is_valid_remote_path",
    "is_standard_import",
    "is_subpackage",
]
