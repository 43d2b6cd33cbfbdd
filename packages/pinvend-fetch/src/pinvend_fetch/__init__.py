# SPDX-License-Identifier: MIT
"""Remote package fetching and the local repository cache for pinvend.

Packages are downloaded as point-in-time archives from their hosting service
and installed under ``<repo_root>/<root_path>[.<pin>]``. Paths no service
recognises are resolved through go-import discovery first.

Example:
    >>> from pinvend_fetch import FetchContext, FetchSettings, GoImportScanner, Node, download
    >>> from pinvend_version import Pkg, RevisionType
    >>>
    >>> settings = FetchSettings.from_home()
    >>> with settings.make_client() as client:
    ...     ctx = FetchContext(settings, client, GoImportScanner())
    ...     node = Node.create(Pkg("github.com/foo/bar", RevisionType.TAG, "v1.0.0"), settings)
    ...     imports = download(node, ctx)
"""

__version__ = "0.1.0"

from .archive import (
    fetch_archive,
    install_tarball,
    install_zip,
    temp_archive_path,
)
from .discovery import (
    MetaImport,
    discover,
    fetch_meta,
    parse_meta,
)
from .errors import (
    FetchError,
    InvalidImportPathError,
)
from .imports import (
    GoImportScanner,
    ImportOracle,
    parse_imports,
)
from .node import (
    Node,
    cache_path,
    vcs_name,
)
from .protocol import (
    download,
    find_service,
)
from .service import (
    FetchContext,
    FetchResult,
    Service,
)
from .services import SERVICES
from .settings import (
    FetchSettings,
    default_home,
    first_gopath,
)
from .state import LocalNodes

__all__ = [
    # Settings
    "FetchSettings",
    "default_home",
    "first_gopath",
    # Cache
    "Node",
    "cache_path",
    "vcs_name",
    "LocalNodes",
    # Protocol
    "FetchContext",
    "FetchResult",
    "Service",
    "SERVICES",
    "download",
    "find_service",
    # Discovery
    "MetaImport",
    "discover",
    "fetch_meta",
    "parse_meta",
    # Archives
    "fetch_archive",
    "install_zip",
    "install_tarball",
    "temp_archive_path",
    # Imports
    "ImportOracle",
    "GoImportScanner",
    "parse_imports",
    # Errors
    "FetchError",
    "InvalidImportPathError",
]
