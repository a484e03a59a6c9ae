"""Protocol definitions for fetcher components."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from ..models import Method


@dataclass
class Response:
    """HTTP response container."""

    url: str
    status: int
    content: bytes
    headers: dict[str, str]
    reason: str = ""


# <meta charset="x"> and <meta http-equiv="Content-Type" content="text/html; charset=x">
META_CHARSET = re.compile(rb"""<meta[^>]+charset\s*=\s*["']?\s*([\w.:-]+)""", re.IGNORECASE)
META_SNIFF_BYTES = 1024


class FetchStatus(str, Enum):
    SUCCESS = "success"
    UPSTREAM_ERROR = "upstream_error"
    NETWORK_ERROR = "network_error"


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one fetch attempt. Never mutated after creation."""

    status: FetchStatus
    url: str
    http_status: int = 0
    content_type: str = ""
    body: bytes = b""
    reason: str = ""
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.SUCCESS

    @property
    def is_html(self) -> bool:
        return "text/html" in self.content_type.lower()

    @property
    def charset(self) -> str:
        for param in self.content_type.split(";")[1:]:
            key, _, value = param.partition("=")
            if key.strip().lower() == "charset" and value.strip():
                return value.strip().strip("\"'")
        if self.is_html:
            match = META_CHARSET.search(self.body[:META_SNIFF_BYTES])
            if match:
                return match.group(1).decode("ascii")
        return "utf-8"

    @property
    def text(self) -> str:
        """Decode the body using the header or <meta> charset, falling back to UTF-8."""
        try:
            return self.body.decode(self.charset, errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")


class Fetcher(Protocol):
    """Protocol for URL fetchers."""

    async def load(
        self,
        url: str,
        method: Method = "GET",
        form_data: dict[str, str] | None = None,
    ) -> FetchResult:
        """Fetch a URL and classify the outcome."""
        ...
