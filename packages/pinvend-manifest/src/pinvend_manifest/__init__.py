# SPDX-License-Identifier: MIT
"""Project manifest handling for pinvend.

The manifest names the project's import path, pins its dependencies and lists
resource directories that travel with build outputs.

Example:
    >>> from pinvend_manifest import Manifest
    >>>
    >>> manifest = Manifest.load(".pinfile")
    >>> manifest.dependency("github.com/foo/bar")
    Pkg(import_path='github.com/foo/bar', rev_type=<RevisionType.TAG: 'tag'>, value='v1.2.0')
"""

__version__ = "0.1.0"

from .manifest import (
    COMMON_RESOURCES,
    MANIFEST_FILENAME,
    Manifest,
    ManifestError,
)
from .target import (
    UNKNOWN_TARGET,
    parse_target,
)

__all__ = [
    # Manifest file
    "Manifest",
    "ManifestError",
    "MANIFEST_FILENAME",
    "COMMON_RESOURCES",
    # Target detection
    "parse_target",
    "UNKNOWN_TARGET",
]
