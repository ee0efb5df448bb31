"""Lazy iteration over paginated collection endpoints.

Collections are served in pages of up to ``per_page`` records. Every page
response carries the total record count in ``X-Records`` and, while more
pages remain, a ``Link: <url>; rel="next"`` header. ``ResourceIterator``
hides the page boundaries and yields one resource at a time:

    iterator = ResourceIterator(transport, factory, endpoint)
    while (item := await iterator.fetch_next()) is not EXHAUSTED:
        ...

or simply ``async for item in iterator``.

Counting strategy:
    The total is read from the first page's ``X-Records`` header; no separate
    HEAD request is made. Once seen it is authoritative. Iteration stops as
    soon as that many records were yielded, or when the last page (no next
    link) has been drained, whichever comes first. A total that overstates
    the available records (records deleted mid-iteration) therefore ends at
    the last page instead of hanging.

Next links:
    The link target may be absolute or a bare path; it is resolved against
    the URL of the page it came from.

Concurrency:
    Independent iterators can run concurrently. A single iterator is meant
    for one consumer awaiting each ``fetch_next()`` before the next call;
    there is no lock around the cursor.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Final, Generic, Literal, TypeVar

from yarl import URL

from ...config import DEFAULT_PAGE_SIZE, RECORDS_HEADER
from ...core.errors import check_response
from .telemetry import log_iteration_complete, log_page_error, log_page_fetched
from .transport import RESTTransport

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Statuses accepted for a page fetch
PAGE_STATUSES: Final = frozenset({200})

_LINK_RE = re.compile(r"<([^>]*)>([^,<]*)")
_REL_NEXT_RE = re.compile(r"""rel\s*=\s*"?([^";]*)"?""")


class _Sentinel(Enum):
    EXHAUSTED = "EXHAUSTED"

    def __repr__(self) -> str:
        return self.value


# Returned by fetch_next() once the collection is exhausted
EXHAUSTED: Final = _Sentinel.EXHAUSTED


@dataclass
class PageCursor:
    """Mutable state of one iteration.

    Attributes:
        current_uri: Next page to fetch
        buffer: Resources from the latest page not yet yielded
        total_count: Declared record total, -1 until known
        emitted_count: Records yielded so far
        has_next_page: False once a page arrived without a usable next link
        pages_fetched: Number of pages fetched
        failed: Set when a page fetch raised
    """

    current_uri: str
    buffer: deque[Any] = field(default_factory=deque)
    total_count: int = -1
    emitted_count: int = 0
    has_next_page: bool = True
    pages_fetched: int = 0
    failed: bool = False

    @property
    def total_reached(self) -> bool:
        return self.total_count >= 0 and self.emitted_count >= self.total_count

    @property
    def exhausted(self) -> bool:
        if self.failed or self.total_reached:
            return True
        return not self.buffer and not self.has_next_page


class ResourceIterator(Generic[T]):
    """Single-pass async iterator over a paginated collection.

    Args:
        transport: Transport used for page requests.
        factory: Turns one decoded record into a resource object.
        endpoint: Collection URL.
        filter: Optional query parameters (e.g. ``{"state": "active"}``).
        page_size: ``per_page`` value sent with every page request.
        name: Resource kind, for logging.
    """

    def __init__(
        self,
        transport: RESTTransport,
        factory: Callable[[Any], T],
        endpoint: str,
        filter: Mapping[str, Any] | None = None,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        name: str | None = None,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be a positive integer")
        self._transport = transport
        self._factory = factory
        self._page_size = page_size
        self._name = name or "resource"
        self._cursor = PageCursor(current_uri=build_collection_uri(endpoint, filter))
        self._finished = False

    @property
    def cursor(self) -> PageCursor:
        return self._cursor

    async def fetch_next(self) -> T | Literal[_Sentinel.EXHAUSTED]:
        """Return the next resource, or EXHAUSTED when there are no more.

        May fetch one or more pages. Errors from a page fetch propagate and
        end the iteration: later calls return EXHAUSTED.

        Raises:
            UnexpectedStatusError: A page answered with a status other than 200.
            RateLimitError: A page answered 429.
            XMLDecodeError: A page body was not well-formed XML.
            aiohttp.ClientError: Transport failure.
        """
        cursor = self._cursor
        while True:
            if cursor.exhausted:
                self._finish()
                return EXHAUSTED
            if cursor.buffer:
                break
            await self._advance()

        cursor.emitted_count += 1
        return cursor.buffer.popleft()

    async def collect(self) -> list[T]:
        """Drain the iterator into a list."""
        return [item async for item in self]

    def __aiter__(self) -> ResourceIterator[T]:
        return self

    async def __anext__(self) -> T:
        item = await self.fetch_next()
        if item is EXHAUSTED:
            raise StopAsyncIteration
        return item

    async def _advance(self) -> None:
        cursor = self._cursor
        page_uri = cursor.current_uri
        request_uri = page_request_uri(page_uri, self._page_size)

        try:
            response = await self._transport.get(request_uri)
            check_response(response, PAGE_STATUSES)
        except Exception as e:
            cursor.failed = True
            log_page_error(
                resource=self._name,
                page_index=cursor.pages_fetched,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise

        if cursor.total_count < 0:
            total = parse_total_count(response.headers.get(RECORDS_HEADER))
            if total is not None:
                cursor.total_count = total

        # Move the cursor before anything is handed out.
        next_uri = parse_next_link(response.headers.get("Link"), request_uri)
        if next_uri is None or page_request_uri(next_uri, self._page_size) == request_uri:
            cursor.has_next_page = False
        else:
            cursor.current_uri = next_uri

        records = page_records(response.payload)
        log_page_fetched(
            resource=self._name,
            page_index=cursor.pages_fetched,
            records=len(records),
            emitted=cursor.emitted_count,
            total=cursor.total_count,
            has_next_page=cursor.has_next_page,
        )
        cursor.pages_fetched += 1
        try:
            resources = [self._factory(record) for record in records]
        except Exception as e:
            cursor.failed = True
            log_page_error(
                resource=self._name,
                page_index=cursor.pages_fetched - 1,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise
        cursor.buffer.extend(resources)

    def _finish(self) -> None:
        if self._finished or self._cursor.failed:
            return
        self._finished = True
        log_iteration_complete(
            resource=self._name,
            pages=self._cursor.pages_fetched,
            emitted=self._cursor.emitted_count,
            total=self._cursor.total_count,
        )


def build_collection_uri(endpoint: str, filter: Mapping[str, Any] | None = None) -> str:
    """Append filter parameters to a collection endpoint."""
    if not filter:
        return endpoint
    query = {k: _query_value(v) for k, v in filter.items() if v is not None}
    return str(URL(endpoint).update_query(query))


def page_request_uri(uri: str, page_size: int) -> str:
    """Return ``uri`` with ``per_page`` set to ``page_size``."""
    return str(URL(uri).update_query(per_page=page_size))


def parse_next_link(header: str | None, base_uri: str) -> str | None:
    """Extract the ``rel="next"`` target from a Link header.

    Relative targets are resolved against ``base_uri``.

    Example:
        >>> parse_next_link('<https://x/a?cursor=2>; rel="next"', "https://x/a")
        'https://x/a?cursor=2'
    """
    if not header:
        return None
    for match in _LINK_RE.finditer(header):
        target, params = match.group(1).strip(), match.group(2)
        rel = _REL_NEXT_RE.search(params)
        if rel and "next" in rel.group(1).split():
            if not target:
                return None
            return str(URL(base_uri).join(URL(target)))
    return None


def parse_total_count(value: str | None) -> int | None:
    """Parse the X-Records header; None when absent or not a number."""
    if value is None:
        return None
    try:
        total = int(value.strip())
    except ValueError:
        logger.warning(f"Ignoring invalid {RECORDS_HEADER} header: {value!r}")
        return None
    return total if total >= 0 else None


def page_records(payload: Any) -> list[Any]:
    """Return the records of a decoded page.

    A page normally decodes to a list. An empty body or empty object means no
    records; a lone object (a collection the server did not tag as an array)
    is one record.
    """
    if payload is None or payload == "":
        return []
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        return [payload] if payload else []
    logger.warning(f"Unexpected page payload of type {type(payload).__name__}; skipping")
    return []


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)
