"""Core components."""

from .errors import check_response
from .exceptions import (
    APIError,
    AuthenticationError,
    NotFoundError,
    RateLimitError,
    RecurlyError,
    RecurringError,
    UnexpectedStatusError,
    ValidationError,
    XMLDecodeError,
)

__all__ = [
    "RecurringError",
    "APIError",
    "RecurlyError",
    "NotFoundError",
    "AuthenticationError",
    "UnexpectedStatusError",
    "RateLimitError",
    "XMLDecodeError",
    "ValidationError",
    "check_response",
]
