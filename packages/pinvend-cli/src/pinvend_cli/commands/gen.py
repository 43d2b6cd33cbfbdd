# SPDX-License-Identifier: MIT
"""Generate the project manifest."""

from __future__ import annotations

import click

from pinvend_fetch import GoImportScanner
from pinvend_manifest import COMMON_RESOURCES, UNKNOWN_TARGET
from pinvend_vendor import list_dependencies
from pinvend_version import PinvendError

from ..main import Context, echo_error, echo_info, echo_success, pass_context
from ..project import load_project

LOCAL_GOPATH = "./vendor"


@click.command()
@click.option(
    "-l",
    "--local",
    is_flag=True,
    help="Set up a GOPATH inside the project at ./vendor.",
)
@pass_context
def gen(ctx: Context, local: bool) -> None:
    """Generate or update the .pinfile manifest.

    Every repository the project imports is listed as an unpinned
    dependency unless already present. Existing pins are kept.

    \b
    Examples:
        pinvend gen       # Create or refresh .pinfile
        pinvend gen -l    # Also create a local GOPATH
    """
    try:
        project = load_project(ctx)
        manifest = project.manifest

        if not manifest.target_path and project.target != UNKNOWN_TARGET:
            manifest.target_path = project.target

        roots = list_dependencies(GoImportScanner(), project.target, project.work_dir)
        added = [root for root in roots if not manifest.has_dependency(root)]
        for root in added:
            manifest.set_dependency(root)

        if not manifest.resources():
            found = [name for name in COMMON_RESOURCES if (project.work_dir / name).is_dir()]
            if found:
                manifest.set_resources(found)

        if local:
            manifest.local_gopath = LOCAL_GOPATH
            for sub in ("src", "pkg", "bin"):
                (project.work_dir / LOCAL_GOPATH / sub).mkdir(parents=True, exist_ok=True)

        path = manifest.save(project.manifest_path)
    except PinvendError as e:
        echo_error(str(e))
        raise SystemExit(1)
    except OSError as e:
        echo_error(f"Cannot create local GOPATH: {e}")
        raise SystemExit(1)

    if ctx.verbose:
        for root in added:
            echo_info(f"  + {root}")
    echo_success(f"Generated {path.name} with {len(roots)} dependency(ies)")
