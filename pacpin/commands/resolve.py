"""Resolve command implementation for pacpin.

Parses an installation specification, reads the repository listing of the
selected MSYS2 environment and shows which archive every package resolves
to, without downloading or installing anything.

The specification is parsed completely before the listing is fetched, so
a typo fails fast without touching the network.

Typical usage::

    # One batch: gcc 14.x and the gcc-libs build of the same version
    $ pacpin resolve "gcc=14 gcc-libs=!" -m ucrt64

    # Read the specification from a file, machine-readable output
    $ pacpin resolve -f msys2-packages.txt --format json
"""

from __future__ import annotations

import sys
import json
import click
import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from pacpin.exceptions import PacpinError
from pacpin.context import pass_context, PacpinContext
from pacpin.core import Environment, SpecParser, fetch_catalog, resolve_batch
from pacpin.models import PackageRequest, ResolvedNormal, ResolvedPackage
from pacpin.utils import (
    HTTPClient,
    get_logger,
    get_raw_console,
    print_error,
    print_table,
    print_warning,
    safe_read_file,
)

logger = get_logger("commands.resolve")


def read_specification(spec: Optional[str], file: Optional[Path]) -> str:
    """Return the specification text from the argument or the file.

    Raises:
        click.UsageError: Neither or both sources were given.
    """
    if spec is not None and file is not None:
        raise click.UsageError("Pass the specification as SPEC or with --file, not both.")
    if file is not None:
        return safe_read_file(file)
    if spec is None:
        raise click.UsageError(
            "Missing specification: pass SPEC, --file or set PACPIN_INSTALL."
        )
    return spec


def select_environment(ctx: PacpinContext, msystem: Optional[str]) -> Environment:
    """Return the environment from ``--msystem``, else the configuration."""
    return Environment.parse(msystem or ctx.config.msystem)


def parse_specification(text: str, environment: Environment) -> List[List[PackageRequest]]:
    """Parse the whole specification for ``environment``."""
    requests = SpecParser(environment).parse_string(text)
    logger.info(
        "Parsed %d batch(es) for %s", len(requests), environment.value
    )
    return requests


async def resolve_requests(
    client: HTTPClient,
    requests: Sequence[Sequence[PackageRequest]],
    environment: Environment,
) -> List[List[ResolvedPackage]]:
    """Fetch the listing of ``environment`` and resolve every batch."""
    catalog = await fetch_catalog(client, environment)
    return resolve_batch(requests, catalog.entries)


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
    "--format",
    "output_format",
    type=click.Choice(["table", "simple", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def resolve(
    ctx: PacpinContext,
    spec: Optional[str],
    file: Optional[Path],
    msystem: Optional[str],
    output_format: str,
) -> None:
    """Resolve a specification against the repository listing.

    Every line of SPEC is one batch of space-separated packages; see
    ``pacpin --help`` for the syntax. Nothing is downloaded or installed.

    Exits:
        0 when every package resolved, 1 on the first error.
    """
    try:
        text = read_specification(spec, file)
        environment = select_environment(ctx, msystem)
        requests = parse_specification(text, environment)

        if not requests:
            print_warning("No packages found in the specification")
            return

        batches = asyncio.run(_resolve_async(ctx, requests, environment))

    except PacpinError as e:
        print_error(f"{e}")
        sys.exit(1)

    if output_format == "table":
        _display_table(batches)
    elif output_format == "simple":
        _display_simple(batches)
    else:  # json
        _display_json(batches)


async def _resolve_async(
    ctx: PacpinContext,
    requests: Sequence[Sequence[PackageRequest]],
    environment: Environment,
) -> List[List[ResolvedPackage]]:
    async with HTTPClient(timeout=ctx.config.timeout) as client:
        return await resolve_requests(client, requests, environment)


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _display_table(batches: Sequence[Sequence[ResolvedPackage]]) -> None:
    """Render resolved batches as a Rich table, one row per package."""
    data: List[Dict[str, Any]] = []

    for index, batch in enumerate(batches, start=1):
        for package in batch:
            if isinstance(package, ResolvedNormal):
                data.append(
                    {
                        "Batch": index,
                        "Package": package.name,
                        "Version": str(package.version),
                    }
                )
            else:
                data.append({"Batch": index, "Package": package.name, "Version": "virtual"})

    column_styles: Dict[str, Dict[str, Any]] = {
        "Batch": {"justify": "right", "no_wrap": True},
        "Package": {"style": "bold cyan"},
        "Version": {"justify": "center", "no_wrap": True},
    }

    print_table(data, title="Resolved Packages", column_styles=column_styles)


def _display_simple(batches: Sequence[Sequence[ResolvedPackage]]) -> None:
    """Render one line per batch, the way it is handed to ``pacman -U``.

    Example::

        mingw-w64-x86_64-gcc-14.2.0-1-any.pkg.tar.zst mingw-w64-x86_64-gcc-libs-14.2.0-1-any.pkg.tar.zst
        mingw-w64-x86_64-base-devel
    """
    console = get_raw_console()
    for batch in batches:
        console.print(
            " ".join(package.name for package in batch),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )


def _display_json(batches: Sequence[Sequence[ResolvedPackage]]) -> None:
    """Render the batches as a JSON array of arrays."""
    data = [[package.to_json() for package in batch] for batch in batches]
    print(json.dumps(data, indent=2))
