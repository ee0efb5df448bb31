"""Shared client constants and configuration.

This module centralizes the API endpoint, version header and paging defaults
used by the transport, the iterator and the resource models so none of them
hardcode service details.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from . import __version__

# REST API root. Resource endpoints are appended to it (e.g. ".../v2/accounts").
DEFAULT_BASE_URL = "https://api.recurly.com/v2/"

# Value sent in the X-Api-Version header
API_VERSION = "2.17"

# Records requested per collection page
DEFAULT_PAGE_SIZE = 200

# Seconds before aiohttp gives up on a request
DEFAULT_TIMEOUT = 30.0

USER_AGENT = f"recurring-python/{__version__}"

# Response header carrying the total record count of a collection
RECORDS_HEADER = "X-Records"

# Environment variables read by ClientConfig.from_env()
ENV_API_KEY = "RECURLY_API_KEY"
ENV_BASE_URL = "RECURLY_BASE_URL"
ENV_TIMEOUT = "RECURLY_TIMEOUT"


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings for a Recurring client.

    Args:
        api_key: Private API key. Requests fail with AuthenticationError while unset.
        base_url: API root, must end with a slash.
        api_version: Value for the X-Api-Version header.
        timeout: Total request timeout in seconds.
        page_size: per_page value used by collection iterators.
        user_agent: User-Agent header value.
    """

    api_key: str | None = None
    base_url: str = DEFAULT_BASE_URL
    api_version: str = API_VERSION
    timeout: float = DEFAULT_TIMEOUT
    page_size: int = DEFAULT_PAGE_SIZE
    user_agent: str = field(default=USER_AGENT)

    def __post_init__(self) -> None:
        if not self.base_url.endswith("/"):
            raise ValueError("base_url must end with '/'")
        if self.page_size <= 0:
            raise ValueError("page_size must be a positive integer")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    @classmethod
    def from_env(cls, **overrides: object) -> ClientConfig:
        """Build a config from RECURLY_* environment variables.

        Keyword overrides win over the environment.
        """
        values: dict[str, object] = {}
        if os.environ.get(ENV_API_KEY):
            values["api_key"] = os.environ[ENV_API_KEY]
        if os.environ.get(ENV_BASE_URL):
            values["base_url"] = os.environ[ENV_BASE_URL]
        if os.environ.get(ENV_TIMEOUT):
            values["timeout"] = float(os.environ[ENV_TIMEOUT])
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]

    def endpoint(self, path: str) -> str:
        """Return the absolute URL for a resource path such as ``"accounts"``."""
        return f"{self.base_url}{path.lstrip('/')}"
