"""Turn address-bar text into an absolute URL."""

import re
from urllib.parse import urlencode

from .config import SEARCH_ENGINES, settings
from .errors import InvalidInput
from .models import TargetURL

TLD_SUFFIX = re.compile(r"\.[a-z]{2,63}$", re.IGNORECASE)
IPV4 = re.compile(r"^\d{1,3}(\.\d{1,3}){3}$")


def looks_like_host(text: str) -> bool:
    """Check whether text without a scheme names a host rather than a search."""
    # "ann@example.com" is more likely a search than credentials
    if not text or "@" in text or any(ch.isspace() for ch in text):
        return False

    host = re.split(r"[/?#]", text, maxsplit=1)[0]
    host = re.sub(r":\d*$", "", host)

    if host.lower() == "localhost" or IPV4.match(host):
        return True
    return bool(TLD_SUFFIX.search(host))


def search_url(query: str, search_engine: str | None = None) -> str:
    """Build a search URL for the configured backend."""
    engine = (search_engine or settings.search_engine).lower()
    try:
        endpoint = SEARCH_ENGINES[engine]
    except KeyError:
        raise InvalidInput(f"Unknown search engine: {engine!r}") from None
    return f"{endpoint}?{urlencode({'q': query})}"


def normalize_address(text: str, search_engine: str | None = None) -> TargetURL:
    """Normalize user input into a TargetURL.

    Rules, in order:
        1. ``http://`` or ``https://`` input is taken as-is.
        2. Host-like input (``example.com``, ``localhost:8080/x``) gets ``https://``.
        3. Anything else becomes a search query.

    Raises:
        InvalidInput: if the input is empty or the result is not a valid URL.
    """
    text = text.strip()
    if not text:
        raise InvalidInput("Enter an address or a search term")

    if text.lower().startswith(("http://", "https://")):
        return TargetURL.parse(text)

    if looks_like_host(text):
        return TargetURL.parse(f"https://{text}")

    return TargetURL.parse(search_url(text, search_engine))
