"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "vegalink",
    "environment": "dev",
    "http": {
        "timeout_seconds": 15.0,
        "follow_redirects": True,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cache": {
        "dir": "./.cache/vegalink",
        "ttl_seconds": 86_400,
    },
    "addon": {
        "max_concurrent_providers": 8,
        "provider_timeout_seconds": 30.0,
        "max_concurrent_resolvers": 10,
        "resolver_timeout_seconds": 20.0,
    },
}
