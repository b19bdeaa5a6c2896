"""
HTTP client utilities for pacpin.

This module provides an asynchronous HTTP client with retry logic and
concurrency control, used to fetch repository listings and download
package archives.
"""

from __future__ import annotations

import random
import asyncio
from pathlib import Path
from typing import Any, Optional

import httpx

from pacpin.utils.logger import get_logger
from pacpin.__version__ import __version__
from pacpin.exceptions import NetworkError
from pacpin.utils.filesystem import safe_write_bytes
from pacpin.constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MAX_CONCURRENCY,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")


def _backoff_delay(retry: int) -> float:
    """Seconds to wait before retry number ``retry`` (0-based): 1, 2, 4, ..."""
    delay = (2**retry) + random.uniform(0.0, 0.3)
    logger.debug("Retrying in %.2fs", delay)
    return delay


def _status_of(exc: Optional[Exception]) -> Optional[int]:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None


class HTTPClient:
    """Asynchronous HTTP client with retries and concurrency control.

    Timeouts, connection errors and 5xx responses are retried with
    exponential backoff. A 429 response waits for ``Retry-After`` without
    using up an attempt, up to ``_max_429_retries`` times. Any other 4xx
    response fails immediately.

    Args:
        timeout: Request timeout in seconds.
        max_retries: Maximum number of retry attempts.
        verify_ssl: Whether to verify SSL certificates.
        user_agent: Custom User-Agent header value.
        max_concurrency: Maximum number of concurrent requests.

    Example:
        >>> async with HTTPClient() as client:
        ...     html = await client.get_text("https://repo.msys2.org/mingw/ucrt64/")
    """

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)
        self.max_concurrency = max_concurrency

        self._client: Optional[httpx.AsyncClient] = None
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._max_429_retries: int = 5

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> None:
        """Initialize the underlying httpx client if needed."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                http2=True,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request, retrying transient failures.

        Raises:
            NetworkError: A 4xx response, too many 429 responses, or every
                attempt failed. ``status_code`` is set when a response was
                received.
        """
        await self._ensure_client()
        assert self._client is not None

        target = url.strip()
        attempts = self.max_retries + 1
        rate_limited = 0
        failure: Optional[Exception] = None
        attempt = 0

        while attempt < attempts:
            try:
                async with self._semaphore:
                    response = await self._client.request(method, target, **kwargs)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                failure = exc
                logger.warning(
                    "%s %s failed (%d/%d): %s",
                    method,
                    target,
                    attempt + 1,
                    attempts,
                    type(exc).__name__,
                )
            else:
                if response.status_code == 429:
                    rate_limited += 1
                    await self._wait_for_rate_limit(response, rate_limited, target)
                    continue

                try:
                    if response.status_code >= 400:
                        response.raise_for_status()
                    return response
                except httpx.HTTPStatusError as exc:
                    status = exc.response.status_code
                    if status < 500:
                        raise NetworkError(
                            f"HTTP {status} error for {target}",
                            url=target,
                            status_code=status,
                        ) from exc
                    failure = exc
                    logger.warning(
                        "%s %s returned HTTP %d (%d/%d)",
                        method,
                        target,
                        status,
                        attempt + 1,
                        attempts,
                    )

            attempt += 1
            if attempt < attempts:
                await asyncio.sleep(_backoff_delay(attempt - 1))

        raise NetworkError(
            f"Request failed after {attempts} attempts: {target}",
            url=target,
            status_code=_status_of(failure),
        ) from failure

    async def _wait_for_rate_limit(
        self, response: httpx.Response, count: int, url: str
    ) -> None:
        """Sleep for ``Retry-After`` seconds, or fail past the 429 limit.

        A missing header waits one second. A value that is not a number of
        seconds, such as an HTTP date, waits the usual backoff delay.
        """
        if count > self._max_429_retries:
            raise NetworkError(
                f"Rate limit exceeded after {self._max_429_retries} retries",
                url=url,
                status_code=429,
            )
        header = response.headers.get("Retry-After", "1")
        try:
            retry_after: float = max(int(header), 0)
        except ValueError:
            logger.debug("Unusable Retry-After header: %r", header)
            retry_after = _backoff_delay(count - 1)
        logger.warning(
            "Rate limited by %s, waiting %.0fs (%d/%d)",
            url,
            retry_after,
            count,
            self._max_429_retries,
        )
        await asyncio.sleep(retry_after)

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform a GET request with retry logic."""
        return await self._request_with_retry("GET", url, **kwargs)

    async def get_text(self, url: str, **kwargs: Any) -> str:
        """Fetch a URL and return the decoded body."""
        response = await self.get(url, **kwargs)
        return response.text

    async def download(self, url: str, destination: Path) -> Path:
        """Fetch a URL and write the body to ``destination``.

        Returns:
            The written path.
        """
        response = await self.get(url)
        logger.debug("Writing %d bytes to %s", len(response.content), destination)
        return safe_write_bytes(destination, response.content)
