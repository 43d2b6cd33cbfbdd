# SPDX-License-Identifier: MIT
"""Dependency walking, vendor tree assembly and toolchain execution.

This package resolves the external imports of a project into the local
repository cache, links them into a disposable ``.vendor`` source root and
runs the toolchain with that root first on its search path.

Example:
    >>> from pinvend_fetch import FetchSettings, GoImportScanner
    >>> from pinvend_vendor import DependencyWalker, VendorLinker, run_toolchain
    >>>
    >>> # Resolve and fetch every dependency
    >>> walker = DependencyWalker(FetchSettings.from_home(), GoImportScanner())
    >>> resolution = walker.resolve("github.com/me/app", ".")
    >>> print(resolution.summary())
    >>>
    >>> # Link them next to the project and build
    >>> tree = VendorLinker().assemble(resolution, ".", "github.com/me/app")
    >>> run_toolchain(["go", "build"], tree.root, cwd=tree.project_path)
"""

__version__ = "0.1.0"

from .errors import (
    LinkError,
    StrictModeError,
)
from .linker import (
    VendorLinker,
    VendorTree,
)
from .platform import (
    CopyBackend,
    JunctionBackend,
    LinkBackend,
    SymlinkBackend,
    select_backend,
)
from .toolchain import (
    GO_COMMAND,
    GOPATH_ENV,
    run_toolchain,
    scoped_env_prefix,
)
from .walker import (
    ClaimSet,
    DependencyWalker,
    MembershipSet,
    Resolution,
    WalkOptions,
    direct_imports,
    list_dependencies,
    root_pins,
)

__all__ = [
    # Walker
    "DependencyWalker",
    "WalkOptions",
    "Resolution",
    "MembershipSet",
    "ClaimSet",
    "direct_imports",
    "list_dependencies",
    "root_pins",
    # Linker
    "VendorLinker",
    "VendorTree",
    "LinkBackend",
    "SymlinkBackend",
    "JunctionBackend",
    "CopyBackend",
    "select_backend",
    # Toolchain
    "run_toolchain",
    "scoped_env_prefix",
    "GOPATH_ENV",
    "GO_COMMAND",
    # Errors
    "LinkError",
    "StrictModeError",
]
