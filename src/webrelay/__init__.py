"""Content proxy and navigation relay for sandboxed iframes."""

__version__ = "0.1.0"
