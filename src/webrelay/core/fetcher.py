"""HTTP fetcher implementation using httpx."""

import asyncio
import logging

import httpx

from ..config import settings
from ..models import Method
from .protocols import FetchResult, FetchStatus, Response

logger = logging.getLogger(__name__)


class HttpFetcher:
    """Async HTTP fetcher using httpx with connection reuse.

    One client is shared by every tab; it only pools connections and never
    carries cookies or other per-tab data between requests.
    """

    def __init__(
        self,
        timeout: float = settings.timeout,
        user_agent: str = settings.user_agent,
        max_connections: int = settings.max_connections,
        max_keepalive_connections: int = settings.max_keepalive_connections,
    ):
        self.timeout = httpx.Timeout(timeout)
        self.user_agent = user_agent
        self.limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
        )
        self._client: httpx.AsyncClient | None = None
        self._lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client with double-checked locking."""
        if self._client is None:
            async with self._lock:
                if self._client is None:
                    self._client = httpx.AsyncClient(
                        timeout=self.timeout,
                        limits=self.limits,
                        headers={
                            "User-Agent": self.user_agent,
                            "Accept": settings.accept,
                            "Accept-Language": settings.accept_language,
                        },
                        follow_redirects=True,
                    )
        return self._client

    async def fetch(
        self,
        url: str,
        method: Method = "GET",
        form_data: dict[str, str] | None = None,
    ) -> Response:
        """Fetch a URL and return the response."""
        client = await self._get_client()
        if method == "POST":
            resp = await client.post(url, data=form_data or {})
        else:
            resp = await client.get(url)
        return Response(
            url=str(resp.url),
            status=resp.status_code,
            content=resp.content,
            headers=dict(resp.headers),
            reason=resp.reason_phrase,
        )

    async def load(
        self,
        url: str,
        method: Method = "GET",
        form_data: dict[str, str] | None = None,
    ) -> FetchResult:
        """Fetch a URL and classify it as success, upstream or network error.

        Nothing is retried; the caller decides whether to offer a refresh.
        """
        try:
            response = await self.fetch(url, method=method, form_data=form_data)
        except httpx.TimeoutException as e:
            logger.info("Timed out fetching %s: %r", url, e)
            return FetchResult(
                status=FetchStatus.NETWORK_ERROR,
                url=url,
                error=f"timed out after {self.timeout.read or 0:g}s",
            )
        except httpx.RequestError as e:
            logger.info("Network error fetching %s: %r", url, e)
            return FetchResult(
                status=FetchStatus.NETWORK_ERROR,
                url=url,
                error=str(e) or type(e).__name__,
            )

        content_type = response.headers.get("content-type", "")
        if not 200 <= response.status < 300:
            logger.info("Upstream %s answered %s %s", response.url, response.status, response.reason)
            return FetchResult(
                status=FetchStatus.UPSTREAM_ERROR,
                url=response.url,
                http_status=response.status,
                content_type=content_type,
                body=response.content,
                reason=response.reason,
            )

        return FetchResult(
            status=FetchStatus.SUCCESS,
            url=response.url,
            http_status=response.status,
            content_type=content_type,
            body=response.content,
            reason=response.reason,
        )

    async def close(self):
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
