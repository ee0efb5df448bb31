"""REST transport: authenticated XML requests against the API."""

from __future__ import annotations

import base64
import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from time import perf_counter
from typing import Any

from multidict import CIMultiDictProxy

from ...codec import parse_xml
from ...config import ClientConfig
from ...core.exceptions import AuthenticationError, NotFoundError, XMLDecodeError
from .http_client import HTTPClient, ResponseHook, RestResponse
from .telemetry import log_request_completed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiResponse:
    """Response with its body decoded.

    ``payload`` is the decoded XML value, the raw body bytes when the request
    was sent with ``parse=False``, or None for empty bodies.
    """

    status: int
    headers: CIMultiDictProxy[str]
    payload: Any
    raw: RestResponse


class RESTTransport:
    """Sends API requests with auth/version headers and decodes XML bodies."""

    def __init__(self, config: ClientConfig, http: HTTPClient | None = None) -> None:
        self._config = config
        self._http = http or HTTPClient(timeout=config.timeout)

    @property
    def config(self) -> ClientConfig:
        return self._config

    def set_api_key(self, api_key: str | None) -> None:
        self._config = dataclasses.replace(self._config, api_key=api_key)

    def add_response_hook(self, hook: ResponseHook) -> None:
        self._http.add_response_hook(hook)

    def set_rate_limit(self, requests: int, per_seconds: float) -> None:
        self._http.set_rate_limit(requests, per_seconds)

    def base_headers(self) -> dict[str, str]:
        token = base64.b64encode(f"{self._config.api_key}:".encode()).decode("ascii")
        return {
            "Accept": "application/xml",
            "Authorization": f"Basic {token}",
            "User-Agent": self._config.user_agent,
            "X-Api-Version": self._config.api_version,
        }

    async def request(
        self,
        method: str,
        uri: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: str | None = None,
        headers: Mapping[str, str] | None = None,
        parse: bool = True,
    ) -> ApiResponse:
        """Send a request and decode the response.

        Raises:
            AuthenticationError: No API key configured, or the API answered 401.
            NotFoundError: The API answered 404.
            XMLDecodeError: The body is not well-formed XML.
        """
        if not self._config.api_key:
            raise AuthenticationError()

        merged = self.base_headers()
        if body is not None:
            merged["Content-Type"] = "application/xml; charset=utf-8"
        if headers:
            merged.update(headers)

        start = perf_counter()
        raw = await self._http.request(
            method,
            uri,
            params=_stringify(params),
            data=body.encode("utf-8") if body is not None else None,
            headers=merged,
        )
        log_request_completed(
            method=method,
            url=uri,
            status=raw.status,
            latency_ms=(perf_counter() - start) * 1000.0,
        )

        if raw.status == 404:
            raise _not_found(raw)
        if raw.status == 401:
            raise AuthenticationError()

        if not parse:
            payload: Any = raw.body
        elif raw.status == 204 or not raw.body.strip():
            payload = None
        else:
            try:
                result = parse_xml(raw.body)
            except XMLDecodeError:
                if raw.status < 400:
                    raise
                # plain-text error page; the status check reports it
                return ApiResponse(
                    status=raw.status, headers=raw.headers, payload=raw.text, raw=raw
                )
            if result.fallback:
                logger.warning(f"Undecodable response body from {method} {uri}: {result.error}")
            elif result.degraded:
                logger.warning(
                    f"Partially decoded response body from {method} {uri}: {list(result.degraded)}"
                )
            payload = result.value

        return ApiResponse(status=raw.status, headers=raw.headers, payload=payload, raw=raw)

    async def get(self, uri: str, params: Mapping[str, Any] | None = None, **kwargs: Any) -> ApiResponse:
        return await self.request("GET", uri, params=params, **kwargs)

    async def head(self, uri: str, params: Mapping[str, Any] | None = None, **kwargs: Any) -> ApiResponse:
        return await self.request("HEAD", uri, params=params, parse=False, **kwargs)

    async def post(self, uri: str, body: str | None = None, **kwargs: Any) -> ApiResponse:
        return await self.request("POST", uri, body=body, **kwargs)

    async def put(self, uri: str, body: str | None = None, **kwargs: Any) -> ApiResponse:
        return await self.request("PUT", uri, body=body, **kwargs)

    async def delete(self, uri: str, params: Mapping[str, Any] | None = None, **kwargs: Any) -> ApiResponse:
        return await self.request("DELETE", uri, params=params, **kwargs)

    async def close(self) -> None:
        await self._http.close()


def _stringify(params: Mapping[str, Any] | None) -> dict[str, str] | None:
    if not params:
        return None
    out: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        out[key] = str(value)
    return out


def _not_found(raw: RestResponse) -> NotFoundError:
    try:
        result = parse_xml(raw.body)
    except XMLDecodeError:
        return NotFoundError("not_found", 404, error_code="not_found")
    return NotFoundError.from_struct(result.value, 404)
