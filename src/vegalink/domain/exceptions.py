"""Resolution pipeline exceptions."""

from __future__ import annotations


class VegalinkError(Exception):
    """Base class for all vegalink errors."""


class FetchError(VegalinkError):
    """Raised when a hosting page cannot be fetched."""


class FetchAbortedError(FetchError):
    """Raised when the request-wide abort signal fires during a fetch."""


class ProviderNotFoundError(VegalinkError):
    """Raised when a provider value is not known to the registry."""


class DuplicateProviderError(VegalinkError):
    """Raised when two providers register the same value."""


class ProviderLoadError(VegalinkError):
    """Raised when a provider file cannot be imported or is malformed."""


class ProviderValidationError(ProviderLoadError):
    """Raised when a YAML provider definition fails validation."""
