from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from pacpin.core.environment import Environment
from pacpin.core.repository import fetch_catalog, fetch_catalog_document
from pacpin.exceptions import CatalogFetchFailedError, NetworkError
from pacpin.utils.http import HTTPClient

LISTING = (
    "<html><body><pre>"
    '<a href="../">../</a>\n'
    '<a href="mingw-w64-ucrt-x86_64-gcc-14.2.0-1-any.pkg.tar.zst">gcc</a>\n'
    "</pre></body></html>"
)


@pytest.mark.unit
class TestFetchCatalogDocument:
    """Tests for fetch_catalog_document."""

    @pytest.mark.asyncio
    async def test_returns_body(self) -> None:
        """Test the decoded body is returned."""
        client = MagicMock(spec=HTTPClient)
        client.get_text = AsyncMock(return_value=LISTING)

        result = await fetch_catalog_document(client, "https://example.com/")

        assert result == LISTING
        client.get_text.assert_awaited_once_with("https://example.com/")

    @pytest.mark.asyncio
    async def test_wraps_network_error(self) -> None:
        """Test HTTP failures become CatalogFetchFailedError with the status."""
        client = MagicMock(spec=HTTPClient)
        client.get_text = AsyncMock(
            side_effect=NetworkError("HTTP 404 error", url="https://x/", status_code=404)
        )

        with pytest.raises(CatalogFetchFailedError) as exc_info:
            await fetch_catalog_document(client, "https://x/")

        assert exc_info.value.status_code == 404
        assert exc_info.value.url == "https://x/"
        assert "Error in getting the package list" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, NetworkError)


@pytest.mark.unit
class TestFetchCatalog:
    """Tests for fetch_catalog."""

    @pytest.mark.asyncio
    async def test_fetches_environment_listing(self) -> None:
        """Test the environment URL is fetched and parsed."""
        response = MagicMock(spec=httpx.Response)
        response.status_code = 200
        response.text = LISTING

        with patch.object(
            httpx.AsyncClient, "request", new_callable=AsyncMock
        ) as mock_request:
            mock_request.return_value = response

            async with HTTPClient(max_retries=0) as client:
                catalog = await fetch_catalog(client, Environment.UCRT64)

        assert mock_request.call_args[0] == ("GET", "https://repo.msys2.org/mingw/ucrt64/")
        assert [entry.package_name for entry in catalog.entries] == [
            "mingw-w64-ucrt-x86_64-gcc"
        ]
        assert catalog.entries[0].url == (
            "https://repo.msys2.org/mingw/ucrt64/"
            "mingw-w64-ucrt-x86_64-gcc-14.2.0-1-any.pkg.tar.zst"
        )
        assert catalog.skipped[0].reason == "directory file"
