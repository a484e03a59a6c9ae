"""Value types shared by the proxy pipeline and the navigation relay."""

from dataclasses import dataclass
from typing import Literal
from urllib.parse import urlsplit

import httpx

from .errors import InvalidInput

Method = Literal["GET", "POST"]


@dataclass(frozen=True)
class TargetURL:
    """An absolute http(s) URL. Construct with ``TargetURL.parse``."""

    url: str

    @classmethod
    def parse(cls, text: str) -> "TargetURL":
        """Validate ``text`` as an absolute http(s) URL.

        Raises:
            InvalidInput: if the text is not an absolute http(s) URL or
                cannot be parsed at all.
        """
        try:
            parsed = httpx.URL(text)
        except (httpx.InvalidURL, TypeError) as e:
            raise InvalidInput(f"Not a valid address: {text!r} ({e})") from e

        if parsed.scheme not in ("http", "https"):
            raise InvalidInput(f"Only http and https addresses are supported: {text!r}")

        host = urlsplit(text).hostname or ""
        if not parsed.host or not host or any(ch.isspace() for ch in host):
            raise InvalidInput(f"Address has no valid host: {text!r}")

        return cls(text)

    @property
    def origin(self) -> str:
        """Scheme, host and port, without path, query or fragment."""
        parts = urlsplit(self.url)
        netloc = parts.netloc.rsplit("@", 1)[-1]
        return f"{parts.scheme.lower()}://{netloc}"

    @property
    def host(self) -> str:
        return urlsplit(self.url).hostname or ""

    def __str__(self) -> str:
        return self.url


@dataclass(frozen=True)
class RewrittenDocument:
    """HTML whose relative references are anchored at ``base_url``'s origin."""

    html: str
    base_url: TargetURL


@dataclass(frozen=True)
class NavigationIntent:
    """A page transition requested from inside the sandboxed frame."""

    url: TargetURL
    method: Method = "GET"
    form_data: dict[str, str] | None = None
