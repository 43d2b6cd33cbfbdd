# SPDX-License-Identifier: MIT
"""Fetch dependencies into the local repository cache."""

from __future__ import annotations

import dataclasses

import click

from pinvend_fetch import GoImportScanner
from pinvend_vendor import WalkOptions, list_dependencies
from pinvend_version import PinvendError, Pkg, split_versioned_arg

from ..main import Context, echo_error, echo_success, pass_context
from ..project import load_project, resolve_project


@click.command()
@click.argument("packages", nargs=-1)
@click.option(
    "-d",
    "--download",
    "download_only",
    is_flag=True,
    help="Download the named packages without their dependencies.",
)
@click.option(
    "-u",
    "--update",
    is_flag=True,
    help="Re-resolve the latest revision of unpinned and branch dependencies.",
)
@click.option(
    "-l",
    "--local",
    is_flag=True,
    help="Copy fetched packages into the project's local GOPATH.",
)
@click.option(
    "-g",
    "--gopath",
    is_flag=True,
    help="Copy fetched packages into the global GOPATH.",
)
@click.option(
    "-r",
    "--remote",
    is_flag=True,
    help="Ignore packages already present in GOPATH.",
)
@click.option(
    "-s",
    "--save",
    is_flag=True,
    help="Record the packages in the project manifest.",
)
@click.option(
    "-j",
    "--jobs",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Number of concurrent downloads.",
)
@pass_context
def get(
    ctx: Context,
    packages: tuple[str, ...],
    download_only: bool,
    update: bool,
    local: bool,
    gopath: bool,
    remote: bool,
    save: bool,
    jobs: int,
) -> None:
    """Fetch packages and their dependencies.

    Without arguments, fetches everything the project in the working
    directory imports. Packages may carry a pin after "@".

    \b
    Examples:
        pinvend get                                   # Project dependencies
        pinvend get github.com/foo/bar                # Latest revision
        pinvend get github.com/foo/bar@tag:v1.0.0 -s  # Pin and save
        pinvend get -u                                # Refresh branch pins
    """
    if (local and gopath) or (local and remote) or (gopath and remote):
        echo_error("Command options have conflicts: -l, -g and -r are mutually exclusive")
        raise SystemExit(1)

    try:
        requested: list[Pkg] = [split_versioned_arg(arg) for arg in packages]
        project = load_project(ctx)
        settings = ctx.load_settings()

        if local:
            gopath_src = project.local_gopath_src()
            if gopath_src is None:
                echo_error("Local GOPATH is not set, run 'pinvend gen -l' first")
                raise SystemExit(1)
            settings = dataclasses.replace(settings, gopath_src=gopath_src)
        elif gopath and settings.gopath_src is None:
            echo_error("GOPATH is not set")
            raise SystemExit(1)

        options = WalkOptions(
            update=update,
            remote_only=remote,
            recursive=not download_only,
            copy_to_gopath=local or gopath,
            jobs=jobs,
        )
        resolution = resolve_project(
            ctx,
            project,
            options,
            settings=settings,
            imports=[pkg.import_path for pkg in requested] if requested else None,
            pins={pkg.root_path: pkg.as_root() for pkg in requested if not pkg.is_empty_val()},
        )

        if save:
            if requested:
                names = {pkg.root_path: pkg for pkg in requested}
            else:
                roots = list_dependencies(GoImportScanner(), project.target, project.work_dir)
                names = {root: None for root in roots if not project.manifest.has_dependency(root)}
            saved = [root for root in names if root in resolution.packages]
            for root in saved:
                project.manifest.set_dependency(root, names[root])
            path = project.manifest.save(project.manifest_path)
            echo_success(f"Saved {len(saved)} dependency(ies) to {path.name}")
    except PinvendError as e:
        echo_error(str(e))
        raise SystemExit(1)
