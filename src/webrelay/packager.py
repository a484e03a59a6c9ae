"""Package fetch results into the wire format consumed by the host page."""

import logging
from dataclasses import dataclass
from typing import Literal

from .core import Fetcher, FetchResult, FetchStatus
from .errors import FetchError, NetworkError, RewriteDegraded, UpstreamError
from .extract import Extractor
from .inject import inject_interceptor
from .models import Method, TargetURL
from .rewrite import rewrite_document

logger = logging.getLogger(__name__)

ReplyKind = Literal["ok", "upstream", "network"]


@dataclass(frozen=True)
class ProxyReply:
    """What the proxy hands back for one navigation."""

    status_code: int
    kind: ReplyKind
    url: str
    title: str
    html: str | None = None
    error: str | None = None
    degraded: bool = False

    @property
    def ok(self) -> bool:
        return self.kind == "ok"

    def payload(self) -> str | dict[str, str]:
        """JSON body: the document as a string, or an error object."""
        if self.ok:
            return self.html or ""
        return {"error": self.error or "", "kind": self.kind}


def _host(url: str) -> str:
    try:
        return TargetURL.parse(url).host
    except ValueError:
        return url


def fetch_error(result: FetchResult) -> FetchError:
    """Describe a failed FetchResult with a user-facing message."""
    host = _host(result.url)
    if result.status is FetchStatus.NETWORK_ERROR:
        return NetworkError(f"Could not reach {host}: {result.error}", url=result.url)
    reason = f" {result.reason}" if result.reason else ""
    return UpstreamError(
        f"{host} responded with {result.http_status}{reason}",
        url=result.url,
        status=result.http_status,
        reason=result.reason,
    )


def error_status(error: FetchError) -> int:
    """HTTP status for an error reply: mirror the upstream, 500 for transport."""
    if isinstance(error, UpstreamError):
        return error.status if error.status >= 400 else 502
    return 500


def render_html(result: FetchResult) -> tuple[str, bool]:
    """Rewrite and instrument an HTML result.

    Returns the final document and whether it had to be degraded to the
    unrewritten original.
    """
    text = result.text
    try:
        document = rewrite_document(text, TargetURL.parse(result.url))
        return inject_interceptor(document), False
    except (RewriteDegraded, ValueError) as e:
        logger.warning("Serving %s unrewritten: %s", result.url, e)
        return text, True


def package(result: FetchResult) -> ProxyReply:
    """Wrap a FetchResult for the host page. Never raises for a valid result."""
    if not result.ok:
        error = fetch_error(result)
        return ProxyReply(
            status_code=error_status(error),
            kind=error.kind,
            url=result.url,
            title=_host(result.url),
            error=str(error),
        )

    if not result.is_html:
        return ProxyReply(status_code=200, kind="ok", url=result.url, title=_host(result.url), html=result.text)

    html, degraded = render_html(result)
    title = Extractor(html).title() or _host(result.url)
    return ProxyReply(
        status_code=200,
        kind="ok",
        url=result.url,
        title=title,
        html=html,
        degraded=degraded,
    )


class ProxyPipeline:
    """Fetch, rewrite, inject and package one navigation."""

    def __init__(self, fetcher: Fetcher):
        self.fetcher = fetcher

    async def run(
        self,
        url: str | TargetURL,
        method: Method = "GET",
        form_data: dict[str, str] | None = None,
    ) -> ProxyReply:
        result = await self.fetcher.load(str(url), method=method, form_data=form_data)
        return package(result)
