"""Repository listing parser.

MSYS2 mirrors publish each environment as a plain autoindex page: a single
``<pre>`` block with one ``<a href="...">`` per file. Every link is
classified as one of:

* a usable archive, parsed into a :class:`CatalogEntry`;
* a skipped file (signatures, repository databases, ``.old`` backups, the
  parent directory link);
* a failed name that does not look like a versioned archive.

Only a missing ``<pre>`` block is an error; bad rows never abort parsing.

The link target is percent-decoded for matching and display, while the
download URL is built from the target exactly as published.

Typical usage::

    catalog = parse_catalog(html, "https://repo.msys2.org/mingw/ucrt64/")
    for entry in catalog.entries:
        print(entry.package_name, entry.version, entry.url)
"""

from __future__ import annotations

import re
from html.parser import HTMLParser
from typing import List, Optional, Tuple
from urllib.parse import unquote

from pacpin.exceptions import MalformedCatalogDocumentError
from pacpin.models.catalog import Catalog, CatalogEntry, SkippedEntry
from pacpin.core.version_grammar import parse_artifact_name
from pacpin.utils.logger import get_logger
from pacpin.constants import (
    PARENT_DIRECTORY_LINK,
    SKIP_REASON_DATABASE,
    SKIP_REASON_DIRECTORY,
    SKIP_REASON_OLD,
    SKIP_REASON_SIGNATURE,
)

logger = get_logger("catalog")

# ``mingw64.db`` and its archived forms such as ``mingw64.db.tar.gz``
DATABASE_NAME_RE = re.compile(r"\.db(?:\.[A-Za-z0-9]+)*$")


class ListingParser(HTMLParser):
    """Collects the link targets inside the first ``<pre>`` element."""

    def __init__(self) -> None:
        super().__init__()
        self._pre_depth: int = 0
        self._found_pre: bool = False
        self._finished: bool = False
        self._links: List[str] = []

    @property
    def found_pre(self) -> bool:
        return self._found_pre

    @property
    def links(self) -> List[str]:
        return self._links

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        if self._finished:
            return

        if tag == "pre":
            self._found_pre = True
            self._pre_depth += 1
            return

        if tag != "a" or self._pre_depth == 0:
            return

        href = dict(attrs).get("href")
        if href is None:
            logger.debug("Ignoring link without href in listing")
            return
        self._links.append(href)

    def handle_endtag(self, tag: str) -> None:
        if tag != "pre" or self._pre_depth == 0:
            return
        self._pre_depth -= 1
        if self._pre_depth == 0:
            self._finished = True


def classify_skip(name: str) -> Optional[str]:
    """Return the skip reason for a decoded listing name, or ``None``.

    The checks run in a fixed order, so ``mingw64.db.sig`` is a signature
    and ``foo-1.0.0-1-any.pkg.tar.zst.sig`` is never treated as an archive.
    """
    if name.endswith(".sig"):
        return SKIP_REASON_SIGNATURE
    if DATABASE_NAME_RE.search(name):
        return SKIP_REASON_DATABASE
    if name.endswith(".old"):
        return SKIP_REASON_OLD
    if name == PARENT_DIRECTORY_LINK:
        return SKIP_REASON_DIRECTORY
    return None


def parse_catalog(html: str, base_url: str) -> Catalog:
    """Parse a repository listing page.

    Args:
        html: The listing document.
        base_url: URL the document was fetched from; link targets are
            appended to it verbatim.

    Returns:
        The parsed :class:`Catalog`.

    Raises:
        MalformedCatalogDocumentError: The document has no ``<pre>`` block.
    """
    parser = ListingParser()
    parser.feed(html)
    parser.close()

    if not parser.found_pre:
        raise MalformedCatalogDocumentError(
            "Failed in parsing the package listing: no <pre> element",
            url=base_url,
        )

    catalog = Catalog()

    for raw_name in parser.links:
        name = unquote(raw_name)

        reason = classify_skip(name)
        if reason is not None:
            catalog.skipped.append(SkippedEntry(name=name, reason=reason))
            continue

        artifact = parse_artifact_name(name)
        if artifact is None:
            catalog.failed.append(raw_name)
            continue

        catalog.entries.append(
            CatalogEntry(
                raw_name=raw_name,
                name=name,
                artifact=artifact,
                url=base_url + raw_name,
            )
        )

    for failed in catalog.failed:
        logger.debug("Failed to parse package from name: '%s'", failed)

    for skipped in catalog.skipped:
        logger.debug(
            "Skipped package name %s because of: %s", skipped.name, skipped.reason
        )

    logger.info("Found %d packages in total", len(catalog.entries))
    return catalog
