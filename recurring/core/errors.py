"""Translation of API responses into exceptions."""

from __future__ import annotations

from collections.abc import Collection
from typing import TYPE_CHECKING

from .exceptions import RateLimitError, RecurlyError, UnexpectedStatusError

if TYPE_CHECKING:
    from ..runtime.rest.transport import ApiResponse


def check_response(response: ApiResponse, valid_statuses: Collection[int]) -> None:
    """Raise if ``response`` carries an error body or an unexpected status.

    Error bodies are checked before the status whitelist, so a 422 with
    ``<errors>`` surfaces as RecurlyError even when 422 is accepted.

    Raises:
        RecurlyError: Payload describes transaction or validation errors.
        RateLimitError: Status 429 outside ``valid_statuses``.
        UnexpectedStatusError: Any other status outside ``valid_statuses``.
    """
    payload = response.payload
    status = response.status

    if isinstance(payload, dict):
        if "transaction_error" in payload:
            raise RecurlyError.from_struct(payload, status)
        if "error" in payload:
            raise RecurlyError.from_struct(payload["error"], status)
        if status == 400:
            raise RecurlyError.from_struct(payload, status)

    if status not in valid_statuses:
        if status == 429:
            raise RateLimitError(retry_after=_retry_after(response))
        raise UnexpectedStatusError(status)


def _retry_after(response: ApiResponse) -> int:
    value = response.headers.get("Retry-After")
    try:
        return int(value) if value is not None else 60
    except ValueError:
        return 60
