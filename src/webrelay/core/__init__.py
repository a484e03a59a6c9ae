"""Core fetcher components."""

from .fetcher import HttpFetcher
from .protocols import FetchResult, FetchStatus, Fetcher, Response

__all__ = ["Fetcher", "FetchResult", "FetchStatus", "Response", "HttpFetcher"]
