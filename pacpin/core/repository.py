"""Fetching repository listings.

The listing of an environment lives at a fixed URL derived from the
environment identifier (:attr:`Environment.repo_url`); it is downloaded
once per run and parsed into a :class:`Catalog`.
"""

from __future__ import annotations

from pacpin.core.catalog_parser import parse_catalog
from pacpin.core.environment import Environment
from pacpin.exceptions import CatalogFetchFailedError, NetworkError
from pacpin.models.catalog import Catalog
from pacpin.utils.http import HTTPClient
from pacpin.utils.logger import get_logger

logger = get_logger("repository")


async def fetch_catalog_document(client: HTTPClient, url: str) -> str:
    """Download a listing document.

    Raises:
        CatalogFetchFailedError: The request failed; ``status_code`` holds
            the upstream status when there was a response.
    """
    logger.info("Fetching package list from %s", url)
    try:
        return await client.get_text(url)
    except NetworkError as exc:
        raise CatalogFetchFailedError(
            f"Error in getting the package list: {exc.message}",
            url=url,
            status_code=exc.status_code,
        ) from exc


async def fetch_catalog(client: HTTPClient, environment: Environment) -> Catalog:
    """Download and parse the listing of ``environment``."""
    url = environment.repo_url
    document = await fetch_catalog_document(client, url)
    return parse_catalog(document, url)
