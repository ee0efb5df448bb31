"""REST runtime abstractions."""

from .http_client import HTTPClient, ResponseHook, RestResponse
from .iterator import (
    EXHAUSTED,
    PageCursor,
    ResourceIterator,
    build_collection_uri,
    page_records,
    page_request_uri,
    parse_next_link,
    parse_total_count,
)
from .transport import ApiResponse, RESTTransport

__all__ = [
    "HTTPClient",
    "ResponseHook",
    "RestResponse",
    "RESTTransport",
    "ApiResponse",
    "ResourceIterator",
    "PageCursor",
    "EXHAUSTED",
    "build_collection_uri",
    "page_request_uri",
    "parse_next_link",
    "parse_total_count",
    "page_records",
]
