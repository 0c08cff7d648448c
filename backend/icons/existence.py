"""
HTTP existence check for icon URLs
"""

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class HttpExistenceChecker:
    """
    Answers "does this URL resolve to a 2xx?" with a HEAD request.

    Never raises: timeouts, connection errors, malformed URLs and non-2xx
    responses all count as "does not exist".

    Without an injected client, one client is created on first use and
    reused for every later check until aclose().
    """

    def __init__(self, timeout: float = 5.0, client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
        return self._client

    async def aclose(self):
        """Close the client this checker created (an injected client is left open)"""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def exists(self, url: str) -> bool:
        if not url:
            return False

        try:
            response = await self._get_client().head(url, follow_redirects=True)
        except httpx.TimeoutException:
            logger.debug(f"Timed out checking {url}")
            return False
        except (httpx.HTTPError, httpx.InvalidURL, OSError, ValueError) as e:
            logger.debug(f"Existence check failed for {url}: {e}")
            return False

        return 200 <= response.status_code < 300
