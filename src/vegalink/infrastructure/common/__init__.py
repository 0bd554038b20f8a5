"""Common infrastructure utilities."""

from __future__ import annotations

from .http_fetch import FetchResponse, HttpFetcher

__all__ = [
    "FetchResponse",
    "HttpFetcher",
]
