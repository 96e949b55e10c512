"""HTTP fetcher for the FastNetMon blackhole API."""

import logging
from typing import Optional

import httpx

from .config import ExporterConfig
from .errors import NetworkError, ReadError, UnexpectedStatus

logger = logging.getLogger(__name__)


class BlockedIPFetcher:
    """Fetches the raw blocked IP list with basic auth. No retries."""

    def __init__(self, config: ExporterConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = config.api_url
        self.timeout = config.request_timeout_seconds
        self._client = httpx.AsyncClient(
            auth=httpx.BasicAuth(config.user, config.password),
            timeout=self.timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def fetch(self) -> bytes:
        """
        Perform one GET against the API.

        Returns:
            Raw response body

        Raises:
            NetworkError: transport failure or timeout
            UnexpectedStatus: status code other than 200
            ReadError: body could not be read completely
        """
        try:
            async with self._client.stream("GET", self.url) as response:
                if response.status_code != httpx.codes.OK:
                    raise UnexpectedStatus(response.status_code, response.reason_phrase)

                try:
                    body = await response.aread()
                except httpx.HTTPError as e:
                    raise ReadError(f"error reading response body: {e}") from e

        except httpx.TimeoutException as e:
            raise NetworkError(f"timeout after {self.timeout}s requesting {self.url}: {e}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise NetworkError(f"error making request to {self.url}: {e}") from e

        logger.debug(f"Fetched {len(body)} bytes from {self.url}")
        return body

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
