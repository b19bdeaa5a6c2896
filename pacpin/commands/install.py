"""Install command implementation for pacpin.

Resolves an installation specification exactly like ``pacpin resolve``,
then downloads the chosen archives and installs them with ``pacman -U``,
one pacman call per specification line.

Everything is resolved before the first download: a package that can not
be resolved on line three stops the run before line one is installed.

Typical usage::

    # Inside a GitHub Actions job that ran msys2/setup-msys2
    $ pacpin install "gcc=14 gcc-libs=!" -m ucrt64

    # Already inside an MSYS2 shell, keep the archives around
    $ pacpin install -f msys2-packages.txt --shell bash --keep-downloads
"""

from __future__ import annotations

import sys
import click
import asyncio
from pathlib import Path
from typing import Optional, Sequence

from pacpin.exceptions import PacpinError
from pacpin.context import pass_context, PacpinContext
from pacpin.core import Environment, Installer, PacmanRunner
from pacpin.core.installer import default_shell
from pacpin.commands.resolve import (
    parse_specification,
    read_specification,
    resolve_requests,
    select_environment,
)
from pacpin.models import PackageRequest, ResolvedPackage
from pacpin.utils import (
    HTTPClient,
    get_logger,
    print_error,
    print_info,
    print_success,
    print_warning,
    resolve_download_dir,
)

logger = get_logger("commands.install")


@click.command()
@click.argument("spec", required=False, envvar="PACPIN_INSTALL")
@click.option(
    "--file",
    "-f",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read the specification from a file.",
)
@click.option(
    "--msystem",
    "-m",
    envvar="PACPIN_MSYSTEM",
    help="MSYS2 environment (mingw32, mingw64, ucrt64, clang64, clangarm64).",
)
@click.option(
    "--shell",
    help="MSYS2 shell pacman runs in (msys2.cmd wrapper or a POSIX shell).",
)
@click.option(
    "--download-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory the archives are downloaded to.",
)
@click.option(
    "--no-prerequisites",
    is_flag=True,
    help="Do not install zstd and tar before the first batch.",
)
@click.option(
    "--keep-downloads",
    is_flag=True,
    help="Keep the downloaded archives after installing.",
)
@pass_context
def install(
    ctx: PacpinContext,
    spec: Optional[str],
    file: Optional[Path],
    msystem: Optional[str],
    shell: Optional[str],
    download_dir: Optional[Path],
    no_prerequisites: bool,
    keep_downloads: bool,
) -> None:
    """Resolve a specification and install it with pacman.

    Each line of SPEC is installed with its own ``pacman -U`` call, in
    order. The first failure stops the run.

    Exits:
        0 when everything was installed, 1 on the first error.
    """
    config = ctx.config

    try:
        text = read_specification(spec, file)
        environment = select_environment(ctx, msystem)
        requests = parse_specification(text, environment)

        if not requests:
            print_warning("No packages found in the specification")
            return

        installed = asyncio.run(
            _install_async(
                ctx,
                requests,
                environment,
                shell=shell or config.msys2_shell or default_shell(),
                download_dir=resolve_download_dir(download_dir or config.download_dir),
                prerequisites=config.install_prerequisites and not no_prerequisites,
                keep_downloads=keep_downloads or config.keep_downloads,
            )
        )

    except PacpinError as e:
        print_error(f"{e}")
        sys.exit(1)

    print_success(f"Installed {installed} package(s) in {len(requests)} batch(es)")


async def _install_async(
    ctx: PacpinContext,
    requests: Sequence[Sequence[PackageRequest]],
    environment: Environment,
    *,
    shell: str,
    download_dir: Path,
    prerequisites: bool,
    keep_downloads: bool,
) -> int:
    """Resolve everything, then install batch by batch.

    Returns:
        Number of packages handed to pacman.
    """
    async with HTTPClient(timeout=ctx.config.timeout) as client:
        batches = await resolve_requests(client, requests, environment)
        _report_batches(batches)

        logger.info("Using shell %s, downloading to %s", shell, download_dir)
        installer = Installer(
            client,
            PacmanRunner(shell),
            download_dir,
            keep_downloads=keep_downloads,
        )
        await installer.install_all(batches, environment, prerequisites=prerequisites)

    return sum(len(batch) for batch in batches)


def _report_batches(batches: Sequence[Sequence[ResolvedPackage]]) -> None:
    for index, batch in enumerate(batches, start=1):
        names = " ".join(str(package) for package in batch)
        print_info(f"Batch {index}: {names}")
