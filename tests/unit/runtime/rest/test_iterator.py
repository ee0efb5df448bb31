"""Unit tests for ResourceIterator.

Tests drive the iterator against a scripted transport keyed by page cursor.
"""

from __future__ import annotations

import logging
from datetime import datetime

import pytest
from multidict import CIMultiDict, CIMultiDictProxy
from yarl import URL

from recurring.core import RateLimitError, UnexpectedStatusError
from recurring.runtime.rest import (
    EXHAUSTED,
    ApiResponse,
    ResourceIterator,
    RestResponse,
    build_collection_uri,
    page_records,
    page_request_uri,
    parse_next_link,
    parse_total_count,
)

ENDPOINT = "https://api.example.com/v2/accounts"


def page(records, *, status=200, total=None, next_cursor=None, link=None, extra_headers=None):
    headers = CIMultiDict(extra_headers or {})
    if total is not None:
        headers["X-Records"] = str(total)
    if next_cursor is not None:
        link = f'<{ENDPOINT}?cursor={next_cursor}&per_page=2>; rel="next"'
    if link is not None:
        headers["Link"] = link
    proxy = CIMultiDictProxy(headers)
    return ApiResponse(
        status=status,
        headers=proxy,
        payload=records,
        raw=RestResponse(status=status, headers=proxy),
    )


def accounts(*codes):
    return [{"account_code": code} for code in codes]


class ScriptedTransport:
    """Answers GETs by the ``cursor`` query parameter (None for the first page)."""

    def __init__(self, pages):
        self.pages = pages
        self.requests: list[str] = []

    async def get(self, uri, params=None, **kwargs):
        self.requests.append(uri)
        return self.pages[URL(uri).query.get("cursor")]


def make_iterator(transport, filter=None, endpoint=ENDPOINT):
    return ResourceIterator(
        transport,
        lambda record: record["account_code"],
        endpoint,
        filter,
        page_size=2,
        name="Account",
    )


class TestResourceIteratorPaging:
    """Test page walking and counting."""

    @pytest.mark.asyncio
    async def test_walks_pages_in_order(self):
        transport = ScriptedTransport(
            {
                None: page(accounts("a", "b"), total=5, next_cursor="c2"),
                "c2": page(accounts("c", "d"), total=5, next_cursor="c3"),
                "c3": page(accounts("e"), total=5),
            }
        )
        iterator = make_iterator(transport)

        assert await iterator.collect() == ["a", "b", "c", "d", "e"]
        assert len(transport.requests) == 3
        assert all(URL(uri).query["per_page"] == "2" for uri in transport.requests)
        assert iterator.cursor.emitted_count == 5
        assert iterator.cursor.total_count == 5

    @pytest.mark.asyncio
    async def test_exhausted_is_sticky(self):
        transport = ScriptedTransport({None: page(accounts("a"), total=1)})
        iterator = make_iterator(transport)

        assert await iterator.fetch_next() == "a"
        assert await iterator.fetch_next() is EXHAUSTED
        assert await iterator.fetch_next() is EXHAUSTED
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_async_for(self):
        transport = ScriptedTransport(
            {
                None: page(accounts("a", "b"), total=3, next_cursor="c2"),
                "c2": page(accounts("c"), total=3),
            }
        )
        seen = [code async for code in make_iterator(transport)]
        assert seen == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_page_is_fetched_lazily(self):
        transport = ScriptedTransport(
            {
                None: page(accounts("a", "b"), total=4, next_cursor="c2"),
                "c2": page(accounts("c", "d"), total=4),
            }
        )
        iterator = make_iterator(transport)

        await iterator.fetch_next()
        await iterator.fetch_next()
        assert len(transport.requests) == 1

        assert await iterator.fetch_next() == "c"
        assert len(transport.requests) == 2

    @pytest.mark.asyncio
    async def test_empty_collection(self):
        transport = ScriptedTransport({None: page([], total=0)})
        iterator = make_iterator(transport)

        assert await iterator.fetch_next() is EXHAUSTED
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_empty_page_with_next_link_keeps_going(self):
        transport = ScriptedTransport(
            {
                None: page("", next_cursor="c2"),
                "c2": page(accounts("a")),
            }
        )
        assert await make_iterator(transport).collect() == ["a"]

    @pytest.mark.asyncio
    async def test_single_record_page_payload(self):
        transport = ScriptedTransport({None: page({"account_code": "solo"}, total=1)})
        assert await make_iterator(transport).collect() == ["solo"]

    @pytest.mark.asyncio
    async def test_missing_total_runs_until_last_page(self):
        transport = ScriptedTransport(
            {
                None: page(accounts("a", "b"), next_cursor="c2"),
                "c2": page(accounts("c")),
            }
        )
        iterator = make_iterator(transport)

        assert await iterator.collect() == ["a", "b", "c"]
        assert iterator.cursor.total_count == -1


class TestResourceIteratorCountMismatch:
    """Test totals that disagree with the records actually served."""

    @pytest.mark.asyncio
    async def test_understated_total_stops_at_total(self):
        transport = ScriptedTransport(
            {None: page(accounts("a", "b", "c"), total=2, next_cursor="c2")}
        )
        iterator = make_iterator(transport)

        assert await iterator.collect() == ["a", "b"]
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_overstated_total_stops_at_last_page(self, caplog):
        transport = ScriptedTransport(
            {
                None: page(accounts("a", "b"), total=10, next_cursor="c2"),
                "c2": page(accounts("c"), total=10),
            }
        )
        iterator = make_iterator(transport)

        with caplog.at_level(logging.WARNING, logger="recurring.runtime.rest.telemetry"):
            assert await iterator.collect() == ["a", "b", "c"]

        assert any(r.getMessage() == "iteration_count_mismatch" for r in caplog.records)

    @pytest.mark.asyncio
    async def test_total_is_read_once(self):
        transport = ScriptedTransport(
            {
                None: page(accounts("a", "b"), total=3, next_cursor="c2"),
                "c2": page(accounts("c", "d"), total=4),
            }
        )
        iterator = make_iterator(transport)

        assert await iterator.collect() == ["a", "b", "c"]
        assert iterator.cursor.total_count == 3


class TestResourceIteratorLinks:
    """Test next-link handling."""

    @pytest.mark.asyncio
    async def test_relative_next_link_is_resolved(self):
        transport = ScriptedTransport(
            {
                None: page(accounts("a"), link='</v2/accounts?cursor=c2>; rel="next"'),
                "c2": page(accounts("b")),
            }
        )
        assert await make_iterator(transport).collect() == ["a", "b"]

        second = URL(transport.requests[1])
        assert second.host == "api.example.com"
        assert second.path == "/v2/accounts"
        assert second.query["per_page"] == "2"

    @pytest.mark.asyncio
    async def test_self_referencing_link_ends_iteration(self):
        transport = ScriptedTransport(
            {None: page(accounts("a"), link=f'<{ENDPOINT}?per_page=2>; rel="next"')}
        )
        assert await make_iterator(transport).collect() == ["a"]
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_filter_is_sent_with_first_page(self):
        transport = ScriptedTransport({None: page(accounts("a"), total=1)})
        iterator = make_iterator(
            transport,
            filter={"state": "active", "begin_time": datetime(2024, 1, 1), "skip": None},
        )
        await iterator.collect()

        query = URL(transport.requests[0]).query
        assert query["state"] == "active"
        assert query["begin_time"] == "2024-01-01T00:00:00"
        assert "skip" not in query


class TestResourceIteratorErrors:
    """Test failure propagation."""

    @pytest.mark.asyncio
    async def test_rate_limited_page_raises_then_exhausts(self):
        transport = ScriptedTransport(
            {
                None: page(accounts("a", "b"), total=5, next_cursor="c2"),
                "c2": page(
                    "Too Many Requests", status=429, extra_headers={"Retry-After": "30"}
                ),
            }
        )
        iterator = make_iterator(transport)

        assert await iterator.fetch_next() == "a"
        assert await iterator.fetch_next() == "b"
        with pytest.raises(RateLimitError) as exc_info:
            await iterator.fetch_next()
        assert exc_info.value.retry_after == 30

        assert iterator.cursor.failed is True
        assert await iterator.fetch_next() is EXHAUSTED
        assert len(transport.requests) == 2

    @pytest.mark.asyncio
    async def test_unexpected_status_raises(self):
        transport = ScriptedTransport({None: page(None, status=500)})
        iterator = make_iterator(transport)

        with pytest.raises(UnexpectedStatusError) as exc_info:
            await iterator.fetch_next()
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self):
        class BrokenTransport:
            async def get(self, uri, params=None, **kwargs):
                raise ConnectionError("reset")

        iterator = make_iterator(BrokenTransport())
        with pytest.raises(ConnectionError):
            await iterator.fetch_next()
        assert await iterator.fetch_next() is EXHAUSTED

    @pytest.mark.asyncio
    async def test_factory_error_ends_iteration(self):
        transport = ScriptedTransport(
            {
                None: page(accounts("a", "bad"), total=4, next_cursor="c2"),
                "c2": page(accounts("c", "d"), total=4),
            }
        )

        def factory(record):
            if record["account_code"] == "bad":
                raise ValueError("cannot build account")
            return record["account_code"]

        iterator = ResourceIterator(transport, factory, ENDPOINT, page_size=2)

        with pytest.raises(ValueError):
            await iterator.fetch_next()

        assert iterator.cursor.failed is True
        assert await iterator.fetch_next() is EXHAUSTED
        assert len(transport.requests) == 1

    def test_invalid_page_size(self):
        with pytest.raises(ValueError):
            ResourceIterator(ScriptedTransport({}), lambda r: r, ENDPOINT, page_size=0)


class TestIteratorHelpers:
    """Test module-level helpers."""

    def test_parse_next_link_picks_next_rel(self):
        header = '<https://x/a?cursor=1>; rel="prev", <https://x/a?cursor=3>; rel="next"'
        assert parse_next_link(header, "https://x/a") == "https://x/a?cursor=3"

    def test_parse_next_link_without_next(self):
        assert parse_next_link('<https://x/a?cursor=1>; rel="prev"', "https://x/a") is None
        assert parse_next_link(None, "https://x/a") is None

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("12", 12), (" 7 ", 7), ("0", 0), (None, None), ("many", None), ("-1", None)],
    )
    def test_parse_total_count(self, value, expected):
        assert parse_total_count(value) == expected

    @pytest.mark.parametrize(
        ("payload", "expected"),
        [
            (None, []),
            ("", []),
            ({}, []),
            ([{"a": 1}], [{"a": 1}]),
            ({"a": 1}, [{"a": 1}]),
            (42, []),
        ],
    )
    def test_page_records(self, payload, expected):
        assert page_records(payload) == expected

    def test_page_request_uri_replaces_per_page(self):
        uri = page_request_uri(f"{ENDPOINT}?per_page=50&state=active", 2)
        query = URL(uri).query
        assert query["per_page"] == "2"
        assert query["state"] == "active"

    def test_build_collection_uri_without_filter(self):
        assert build_collection_uri(ENDPOINT) == ENDPOINT
