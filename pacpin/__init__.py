"""
pacpin: version pinning for MSYS2 pacman installs

pacman only ever installs the newest build of a package. pacpin reads the
flat directory listing of an MSYS2 repository, resolves a small
specification language into exact archive files and hands those files to
``pacman -U``.

Features include:
    • Per-package version pinning by prefix (``gcc=14``, ``gcc=14.2.0-1``)
    • "Same as the rest" pins (``gcc=14 gcc-libs=!``)
    • Virtual package pass-through (``base-devel=:v``)
    • Batches installed together, one per specification line

Typical usage::

    from pacpin import Environment, SpecParser, parse_catalog, resolve_batch

    requests = SpecParser(Environment.UCRT64).parse_string("gcc=14 gcc-libs=!")
    catalog = parse_catalog(listing_html, Environment.UCRT64.repo_url)
    batches = resolve_batch(requests, catalog.entries)
"""

from __future__ import annotations

from pacpin.__version__ import __version__
from pacpin.core.environment import Environment
from pacpin.core.spec_parser import SpecParser
from pacpin.core.catalog_parser import parse_catalog
from pacpin.core.resolver import resolve_batch

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "pacpin Contributors"
__license__ = "Apache-2.0"
__description__ = "Pinned package installs for MSYS2 repositories."

__all__ = [
    "__version__",
    "Environment",
    "SpecParser",
    "parse_catalog",
    "resolve_batch",
]
