"""Structured logging for requests and collection iteration.

This module provides telemetry hooks emitting structured log records for
observability. Fields travel in ``extra`` so handlers can index them.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def log_request_completed(
    *,
    method: str,
    url: str,
    status: int,
    latency_ms: float | None = None,
) -> None:
    """Log completion of a single API request.

    Args:
        method: HTTP method
        url: Requested URL
        status: Response status code
        latency_ms: Latency in milliseconds (optional)
    """
    logger.debug(
        "request_completed",
        extra={
            "method": method,
            "url": url,
            "status": status,
            "latency_ms": latency_ms,
        },
    )


def log_page_fetched(
    *,
    resource: str,
    page_index: int,
    records: int,
    emitted: int,
    total: int,
    has_next_page: bool,
) -> None:
    """Log a fetched collection page.

    Args:
        resource: Resource kind being iterated
        page_index: Zero-based index of the page
        records: Records decoded from this page
        emitted: Records yielded before this page
        total: Declared total (-1 when unknown)
        has_next_page: Whether a next link was present
    """
    logger.info(
        "page_fetched",
        extra={
            "resource": resource,
            "page_index": page_index,
            "records": records,
            "emitted": emitted,
            "total": total,
            "has_next_page": has_next_page,
        },
    )


def log_page_error(
    *,
    resource: str,
    page_index: int,
    error_type: str,
    error_message: str,
) -> None:
    """Log a page fetch that aborted iteration."""
    logger.error(
        "page_error",
        extra={
            "resource": resource,
            "page_index": page_index,
            "error_type": error_type,
            "error_message": error_message,
        },
    )


def log_iteration_complete(
    *,
    resource: str,
    pages: int,
    emitted: int,
    total: int,
) -> None:
    """Log the end of a collection iteration.

    A mismatch between ``emitted`` and ``total`` is logged as a warning; it
    happens when records are added or removed while iterating.
    """
    extra = {"resource": resource, "pages": pages, "emitted": emitted, "total": total}
    if total >= 0 and emitted != total:
        logger.warning("iteration_count_mismatch", extra=extra)
    else:
        logger.info("iteration_complete", extra=extra)
