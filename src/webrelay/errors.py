"""Error taxonomy for the proxy pipeline and navigation relay."""


class RelayError(Exception):
    """Base class for all web-relay errors."""


class InvalidInput(RelayError, ValueError):
    """User-entered address could not be turned into a fetchable URL."""


class FetchError(RelayError):
    """A navigation attempt failed before any content could be shown."""

    kind = "error"

    def __init__(self, message: str, url: str, status: int = 0, reason: str = ""):
        super().__init__(message)
        self.url = url
        self.status = status
        self.reason = reason


class NetworkError(FetchError):
    """DNS, TLS, connection or timeout failure. The user may retry."""

    kind = "network"


class UpstreamError(FetchError):
    """The remote server answered with a non-2xx status."""

    kind = "upstream"


class RewriteDegraded(RelayError):
    """Rewriting could not finish; the unrewritten document is served instead."""
