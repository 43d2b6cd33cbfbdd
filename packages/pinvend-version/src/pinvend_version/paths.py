# SPDX-License-Identifier: MIT
"""Import path rules: repository roots, validity and standard library checks."""

from __future__ import annotations

import posixpath
import re

# Number of leading path segments forming the repository root, per host.
ROOT_PATH_RULES: dict[str, int] = {
    "github.com": 3,
    "code.google.com": 3,
    "bitbucket.org": 3,
    "git.oschina.net": 3,
    "gitcafe.com": 3,
    "launchpad.net": 2,
    "labix.org": 3,
    "gopm.io": 3,
}

# Pseudo-package used by cgo.
CGO_PSEUDO_PACKAGE = "C"

VALID_HOST_PATTERN = re.compile(r"^[-a-z0-9]+(?:\.[-a-z0-9]+)+$")
VALID_PATH_ELEMENT_PATTERN = re.compile(r"^[-A-Za-z0-9~+][-A-Za-z0-9_.]*$")

# IANA top level domains accepted as the host part of a remote import path.
VALID_TLDS = frozenset({
    "ac", "ad", "ae", "aero", "af", "ag", "ai", "al", "am", "an",
    "ao", "aq", "ar", "arpa", "as", "asia", "at", "au", "aw", "ax",
    "az", "ba", "bb", "bd", "be", "bf", "bg", "bh", "bi", "biz",
    "bj", "bm", "bn", "bo", "br", "bs", "bt", "bv", "bw", "by",
    "bz", "ca", "cat", "cc", "cd", "cf", "cg", "ch", "ci", "ck",
    "cl", "cm", "cn", "co", "com", "coop", "cr", "cu", "cv", "cw",
    "cx", "cy", "cz", "de", "dj", "dk", "dm", "do", "dz", "ec",
    "edu", "ee", "eg", "er", "es", "et", "eu", "fi", "fj", "fk",
    "fm", "fo", "fr", "ga", "gb", "gd", "ge", "gf", "gg", "gh",
    "gi", "gl", "gm", "gn", "gov", "gp", "gq", "gr", "gs", "gt",
    "gu", "gw", "gy", "hk", "hm", "hn", "hr", "ht", "hu", "id",
    "ie", "il", "im", "in", "info", "int", "io", "iq", "ir", "is",
    "it", "je", "jm", "jo", "jobs", "jp", "ke", "kg", "kh", "ki",
    "km", "kn", "kp", "kr", "kw", "ky", "kz", "la", "lb", "lc",
    "li", "lk", "lr", "ls", "lt", "lu", "lv", "ly", "ma", "mc",
    "md", "me", "mg", "mh", "mil", "mk", "ml", "mm", "mn", "mo",
    "mobi", "mp", "mq", "mr", "ms", "mt", "mu", "museum", "mv", "mw",
    "mx", "my", "mz", "na", "name", "nc", "ne", "net", "nf", "ng",
    "ni", "nl", "no", "np", "nr", "nu", "nz", "om", "org", "pa",
    "pe", "pf", "pg", "ph", "pk", "pl", "pm", "pn", "post", "pr",
    "pro", "ps", "pt", "pw", "py", "qa", "re", "ro", "rs", "ru",
    "rw", "sa", "sb", "sc", "sd", "se", "sg", "sh", "si", "sj",
    "sk", "sl", "sm", "sn", "so", "sr", "st", "su", "sv", "sx",
    "sy", "sz", "tc", "td", "tel", "tf", "tg", "th", "tj", "tk",
    "tl", "tm", "tn", "to", "tp", "tr", "travel", "tt", "tv", "tw",
    "tz", "ua", "ug", "uk", "us", "uy", "uz", "va", "vc", "ve",
    "vg", "vi", "vn", "vu", "wf", "ws", "xxx", "ye", "yt", "za",
    "zm", "zw",
    # Newer generic domains.
    "app", "dev", "cloud", "page", "tech", "xyz",
})


def _join_segments(name: str, count: int) -> str:
    parts = name.split("/")
    if len(parts) > count:
        return "/".join(parts[:count])
    return name


def get_root_path(import_path: str) -> str:
    """Return the repository root of an import path.

    Known hosts use a fixed number of leading segments, anything else is
    treated as its own root.

    Args:
        import_path: Full import path, possibly pointing at a subpackage

    Returns:
        The repository root, always a path prefix of ``import_path``
    """
    for prefix, count in ROOT_PATH_RULES.items():
        if import_path.startswith(prefix):
            return _join_segments(import_path, count)
    return import_path


def is_valid_path_element(element: str) -> bool:
    return bool(VALID_PATH_ELEMENT_PATTERN.match(element)) and element != "testdata"


def is_valid_remote_path(import_path: str) -> bool:
    """Check whether an import path is structurally fetchable.

    The path needs a host with a known top level domain followed by at least
    one valid path element.
    """
    parts = import_path.split("/")
    if len(parts) <= 1:
        return False

    host = parts[0]
    tld = posixpath.splitext(host)[1].lstrip(".")
    if tld not in VALID_TLDS:
        return False
    if not VALID_HOST_PATTERN.match(host):
        return False

    return all(is_valid_path_element(part) for part in parts[1:])


def is_standard_import(import_path: str) -> bool:
    """Return True for standard library and pseudo packages.

    Standard library paths never carry a dot in their first element, which is
    what separates them from remote hosts.
    """
    if import_path == CGO_PSEUDO_PACKAGE:
        return True
    first = import_path.split("/", 1)[0]
    return "." not in first


def is_subpackage(import_path: str, work_dir: str, target: str) -> bool:
    """Return True when ``import_path`` belongs to the project itself.

    Args:
        import_path: Import path found in the project sources
        work_dir: Project working directory, slash separated
        target: Import path of the project
    """
    root_path = get_root_path(import_path)
    return work_dir.endswith(root_path) or (
        bool(target) and target.startswith(root_path)
    )
