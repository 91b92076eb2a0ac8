"""Base async API client with retry logic."""

import logging
from typing import Any, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from homology_pipeline.config.schema import HomologyConfig

logger = logging.getLogger(__name__)

USER_AGENT = "homology-pipeline (+https://github.com/eweitz/homology)"

RETRYABLE_ERRORS = (httpx.HTTPStatusError, httpx.ConnectError, httpx.TimeoutException)


class AsyncAPIClient:
    """
    Async HTTP client with retry logic.

    Features:
    - Automatic retry on HTTP/network errors with exponential backoff
    - One shared connection pool per client (use as an async context manager)
    - 404 responses can be passed through for callers that treat them as
      "no record"
    """

    def __init__(
        self,
        max_retries: int = 3,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        wait_min: float = 1.0,
        wait_max: float = 30.0,
    ):
        """
        Initialize API client.

        Args:
            max_retries: Maximum attempts per request (including the first)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
            wait_min: Minimum backoff between retries in seconds
            wait_max: Maximum backoff between retries in seconds
        """
        self.max_retries = max_retries
        self.timeout = timeout
        self.wait_min = wait_min
        self.wait_max = wait_max
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            follow_redirects=True,
        )

    async def __aenter__(self) -> "AsyncAPIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    def _create_retrying(self) -> AsyncRetrying:
        """Create retry controller with exponential backoff."""
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=self.wait_min, max=self.wait_max),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            reraise=True,
        )

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        allow_not_found: bool = False,
    ) -> httpx.Response:
        """
        Make GET request with retry logic.

        Args:
            url: Request URL
            params: Query parameters
            allow_not_found: Return 404 responses instead of raising

        Returns:
            Response object

        Raises:
            httpx.HTTPStatusError: On HTTP error after retries exhausted
            httpx.TimeoutException: On timeout after retries exhausted
            httpx.ConnectError: On connection error after retries exhausted
        """
        async for attempt in self._create_retrying():
            with attempt:
                response = await self._client.get(url, params=params)

                if allow_not_found and response.status_code == 404:
                    return response

                try:
                    response.raise_for_status()
                except httpx.HTTPStatusError:
                    if response.status_code == 429:
                        logger.warning(
                            f"Rate limited by API (429). "
                            f"URL: {url}. Will retry with backoff."
                        )
                    raise

        return response

    async def get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        allow_not_found: bool = False,
    ) -> Any:
        """
        Make GET request and return the decoded JSON body.

        Returns None for a 404 when allow_not_found is set.

        Raises:
            httpx.HTTPStatusError: On HTTP error
            json.JSONDecodeError: If response is not valid JSON
        """
        response = await self.get(url, params=params, allow_not_found=allow_not_found)
        if response.status_code == 404:
            return None
        return response.json()

    @classmethod
    def from_config(
        cls,
        config: HomologyConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AsyncAPIClient":
        """
        Create client from pipeline configuration.

        Args:
            config: HomologyConfig instance
            transport: Optional httpx transport override

        Returns:
            Configured AsyncAPIClient instance
        """
        return cls(
            max_retries=config.api.max_retries,
            timeout=config.api.timeout_seconds,
            transport=transport,
        )
