# SPDX-License-Identifier: MIT
"""Running the external toolchain against a vendor tree."""

from __future__ import annotations

import contextlib
import logging
import os
import subprocess
from pathlib import Path
from typing import Iterator, MutableMapping, Optional, Sequence, Union

logger = logging.getLogger(__name__)

GOPATH_ENV = "GOPATH"
GO_COMMAND = "go"


@contextlib.contextmanager
def scoped_env_prefix(
    name: str,
    value: str,
    environ: Optional[MutableMapping[str, str]] = None,
) -> Iterator[str]:
    """Prepend ``value`` to a search path variable for the duration of a block.

    The previous value is restored on exit, including when the block raises.
    A variable that was unset before is removed again.

    Args:
        name: Environment variable name
        value: Entry to put in front
        environ: Mapping to modify, ``os.environ`` by default

    Yields:
        The value in effect inside the block
    """
    env = os.environ if environ is None else environ
    previous = env.get(name)
    scoped = value + os.pathsep + previous if previous else value
    env[name] = scoped
    try:
        yield scoped
    finally:
        if previous is None:
            env.pop(name, None)
        else:
            env[name] = previous


def run_toolchain(
    args: Sequence[str],
    vendor_root: Union[str, Path],
    cwd: Optional[Union[str, Path]] = None,
    env_var: str = GOPATH_ENV,
) -> subprocess.CompletedProcess:
    """Run a toolchain command with ``vendor_root`` first on its source path.

    The child inherits stdout and stderr.

    Raises:
        subprocess.CalledProcessError: If the command exits non-zero
        FileNotFoundError: If the toolchain is not installed
    """
    with scoped_env_prefix(env_var, str(vendor_root)) as search_path:
        logger.info("Running %s", " ".join(args))
        logger.debug("%s=%s", env_var, search_path)
        return subprocess.run(list(args), cwd=cwd, check=True)
