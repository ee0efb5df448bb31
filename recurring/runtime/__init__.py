"""Runtime components (HTTP transport and collection iteration)."""

from .rest import EXHAUSTED, HTTPClient, ResourceIterator, RESTTransport

__all__ = [
    "EXHAUSTED",
    "HTTPClient",
    "ResourceIterator",
    "RESTTransport",
]
