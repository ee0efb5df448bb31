"""Async HTTP client wrapper."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from multidict import CIMultiDict, CIMultiDictProxy

logger = logging.getLogger(__name__)

# A hook receives every aiohttp response and may return a delay (seconds)
# to apply before the next request.
ResponseHook = Callable[[aiohttp.ClientResponse], float | None | Awaitable[float | None]]


@dataclass(frozen=True)
class RestResponse:
    """Status, headers and raw body of a completed request."""

    status: int
    headers: CIMultiDictProxy[str] = field(
        default_factory=lambda: CIMultiDictProxy(CIMultiDict())
    )
    body: bytes = b""
    url: str = ""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class HTTPClient:
    """Async HTTP client wrapper.

    Unlike ``aiohttp.ClientSession.get`` it never raises on status: callers
    decide which statuses are acceptable. Transport failures
    (``aiohttp.ClientError``, ``asyncio.TimeoutError``) propagate unchanged.
    """

    def __init__(self, base_url: str | None = None, timeout: float = 30.0) -> None:
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None
        self._response_hooks: list[ResponseHook] = []
        self._throttle_until: float | None = None
        self._rate_limit: tuple[int, float] | None = None
        self._sent: deque[float] = deque()

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    def add_response_hook(self, hook: ResponseHook) -> None:
        self._response_hooks.append(hook)

    def set_throttle(self, seconds: float) -> None:
        """Hold back the next request for ``seconds``; never shortens a pending window."""
        if seconds <= 0:
            return
        until = time.time() + seconds
        if self._throttle_until is None or until > self._throttle_until:
            self._throttle_until = until

    def set_rate_limit(self, requests: int, per_seconds: float) -> None:
        """Allow at most ``requests`` requests in any ``per_seconds`` window."""
        if requests <= 0 or per_seconds <= 0:
            raise ValueError("rate limit requires positive requests and per_seconds")
        self._rate_limit = (requests, per_seconds)
        self._sent.clear()

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        data: str | bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> RestResponse:
        """Send a request and read the whole body."""
        if self.base_url and not url.startswith("http"):
            url = f"{self.base_url}{url}"

        await self._wait_for_throttle()
        await self._wait_for_rate_limit()

        async with self.session.request(
            method, url, params=params, data=data, headers=headers
        ) as response:
            body = await response.read()
            result = RestResponse(
                status=response.status,
                headers=CIMultiDictProxy(CIMultiDict(response.headers)),
                body=body,
                url=str(response.url) if getattr(response, "url", None) else url,
            )
            await self._run_hooks(response)

        if result.status == 429:
            retry_after = result.headers.get("Retry-After")
            try:
                self.set_throttle(float(retry_after) if retry_after else 1.0)
            except ValueError:
                self.set_throttle(1.0)

        return result

    async def get(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> RestResponse:
        """GET request."""
        return await self.request("GET", url, params=params, headers=headers)

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()

    async def _wait_for_throttle(self) -> None:
        if self._throttle_until is None:
            return
        delay = self._throttle_until - time.time()
        if delay > 0:
            await asyncio.sleep(delay)
        self._throttle_until = None

    async def _wait_for_rate_limit(self) -> None:
        if self._rate_limit is None:
            return
        limit, window = self._rate_limit
        # Re-check after every sleep: other waiters may have taken the free slot.
        while True:
            now = time.monotonic()
            while self._sent and now - self._sent[0] >= window:
                self._sent.popleft()
            if len(self._sent) < limit:
                break
            await asyncio.sleep(window - (now - self._sent[0]))
        self._sent.append(now)

    async def _run_hooks(self, response: aiohttp.ClientResponse) -> None:
        for hook in self._response_hooks:
            try:
                delay = hook(response)
                if inspect.isawaitable(delay):
                    delay = await delay
            except Exception as e:
                logger.warning(f"Response hook failed: {e}")
                continue
            if delay:
                self.set_throttle(float(delay))
