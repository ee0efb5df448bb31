"""Shared fixtures for resource model tests.

Models run against a real RESTTransport whose HTTPClient is mocked, so
request construction and XML decoding are exercised together.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from multidict import CIMultiDict, CIMultiDictProxy

from recurring import ClientConfig, Recurring
from recurring.runtime.rest import HTTPClient, RestResponse

BASE = "https://api.example.com/v2/"


def rest_response(status=200, body="", headers=None):
    if isinstance(body, str):
        body = body.encode("utf-8")
    return RestResponse(
        status=status,
        headers=CIMultiDictProxy(CIMultiDict(headers or {})),
        body=body,
        url=BASE,
    )


@pytest.fixture
def http():
    client = MagicMock(spec=HTTPClient)
    client.request = AsyncMock()
    client.close = AsyncMock()
    return client


@pytest.fixture
def client(http):
    return Recurring("secret", config=ClientConfig(base_url=BASE), http=http)


@pytest.fixture
def reply(http):
    """Queue responses for the next requests.

    Each response is a ``(status, body)`` or ``(status, body, headers)`` tuple.
    """

    def _reply(*responses):
        http.request.side_effect = [rest_response(*args) for args in responses]

    return _reply


@pytest.fixture
def sent(http):
    """Return (method, uri, kwargs) of a recorded request."""

    def _sent(index=-1):
        call = http.request.call_args_list[index]
        return call.args[0], call.args[1], call.kwargs

    return _sent
