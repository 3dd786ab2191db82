import asyncio
from typing import Optional

import httpx

from .errors import NetworkError

SEARCH_LANGUAGE = "en-US"


class SearxngClient:
    """Thin async HTTP client for the SearXNG instance and arbitrary pages.

    Each method performs exactly one request and hands back the raw response;
    deciding what a status code means is left to the caller.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        user_agent: str = "MCP-SearXNG-Bridge/1.0",
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        # Bounds the whole request; httpx timeouts only bound each phase.
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": user_agent},
            follow_redirects=True,
            limits=httpx.Limits(max_connections=32, max_keepalive_connections=16),
        )

    async def search(self, query: str) -> httpx.Response:
        params = {"q": query, "format": "json", "language": SEARCH_LANGUAGE}
        return await self._get(f"{self.base_url}/search", params=params)

    async def fetch(self, url: str) -> httpx.Response:
        return await self._get(url)

    async def _get(self, url: str, params: Optional[dict] = None) -> httpx.Response:
        try:
            return await asyncio.wait_for(self.client.get(url, params=params), self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise NetworkError(f"request to {url} timed out") from exc
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise NetworkError(str(exc) or exc.__class__.__name__) from exc

    async def close(self) -> None:
        # Safe to call multiple times
        if not self.client.is_closed:
            await self.client.aclose()
