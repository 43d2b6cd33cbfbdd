# SPDX-License-Identifier: MIT
"""Package identity and pin value types."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from .paths import get_root_path


class RevisionType(str, Enum):
    """Kind of revision a package is pinned to."""

    BRANCH = "branch"
    COMMIT = "commit"
    TAG = "tag"
    LOCAL = "local"

    def __str__(self) -> str:
        return self.value


# Default branch names by version control system.
TRUNK = "trunk"
MASTER = "master"
DEFAULT = "default"

DEFAULT_BRANCHES = {"git": MASTER, "hg": DEFAULT, "svn": TRUNK}


@dataclass(frozen=True, slots=True)
class Pkg:
    """A remote package identity plus its pin.

    Attributes:
        import_path: Full logical import path, possibly a subpackage
        rev_type: Kind of revision the package is pinned to
        value: Branch name, commit hash, tag name or local directory;
            empty means "track latest"
    """

    import_path: str
    rev_type: RevisionType = RevisionType.BRANCH
    value: str = ""

    @classmethod
    def default(cls, import_path: str) -> Pkg:
        """Create an unpinned package that follows the default branch."""
        return cls(import_path, RevisionType.BRANCH, "")

    @property
    def root_path(self) -> str:
        """Canonical repository root of the import path."""
        return get_root_path(self.import_path)

    def is_fixed(self) -> bool:
        """Return True for pins that never move (commit, tag and local)."""
        return self.rev_type != RevisionType.BRANCH and bool(self.value)

    def is_empty_val(self) -> bool:
        """Return True when no pin value was given."""
        return not self.value

    def val_suffix(self) -> str:
        """Suffix that keeps different pins of one root apart in the cache."""
        return f".{self.value}" if self.value else ""

    def ver_suffix(self) -> str:
        """Human readable pin suffix, e.g. ``" @ tag:v1.0.0"``."""
        return f" @ {self.rev_type}:{self.value}" if self.value else ""

    def val_string(self) -> str:
        return self.value or "<UTD>"

    def ver_string(self) -> str:
        return f"{self.import_path}@{self.rev_type}:{self.val_string()}"

    def identity(self) -> str:
        """Key used to de-duplicate work on the same root and pin."""
        return f"{self.root_path}@{self.rev_type}:{self.value}"

    def same_dependency(self, other: Pkg) -> bool:
        """Two packages are the same dependency when root and pin match."""
        return (
            self.root_path == other.root_path
            and self.rev_type == other.rev_type
            and self.value == other.value
        )

    def with_pin(self, rev_type: RevisionType, value: str) -> Pkg:
        return replace(self, rev_type=rev_type, value=value)

    def as_root(self) -> Pkg:
        """Return the same pin addressed at the repository root."""
        return replace(self, import_path=self.root_path)
