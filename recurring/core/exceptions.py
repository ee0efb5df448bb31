"""Custom exception hierarchy."""

from __future__ import annotations

from typing import Any


class RecurringError(Exception):
    """Base exception for all library errors."""

    pass


class APIError(RecurringError):
    """Error reported by the remote API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code


class RecurlyError(APIError):
    """Error body returned by the API (validation, transaction or lookup errors).

    ``errors`` holds one mapping per reported error, each with at least a
    ``message`` key and usually ``field`` and ``symbol``. Transaction failures
    additionally populate the gateway detail attributes.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        *,
        errors: list[dict[str, Any]] | None = None,
        error_code: str | None = None,
        error_category: str | None = None,
        merchant_message: str | None = None,
        customer_message: str | None = None,
        gateway_error_code: str | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.errors = errors or []
        self.error_code = error_code
        self.error_category = error_category
        self.merchant_message = merchant_message
        self.customer_message = customer_message
        self.gateway_error_code = gateway_error_code

    @classmethod
    def from_struct(cls, struct: Any, status_code: int | None = None) -> RecurlyError:
        """Build an error from a decoded ``<errors>``/``<error>`` payload.

        Handles the transaction-error shape, a single ``not_found`` lookup
        error, a single field error and a collection of field errors. The
        input is left untouched.
        """
        if isinstance(struct, str):
            return cls(struct, status_code)

        if isinstance(struct, dict) and "transaction_error" in struct:
            detail = struct["transaction_error"]
            if not isinstance(detail, dict):
                detail = {}
            errors = [_normalise_entry(e) for e in _as_list(struct.get("error"))]
            return cls(
                detail.get("merchant_message") or "transaction error",
                status_code,
                errors=errors,
                error_code=detail.get("error_code"),
                error_category=detail.get("error_category"),
                merchant_message=detail.get("merchant_message"),
                customer_message=detail.get("customer_message"),
                gateway_error_code=detail.get("gateway_error_code"),
            )

        if isinstance(struct, dict) and "symbol" in struct:
            if struct["symbol"] == "not_found":
                description = struct.get("description")
                if isinstance(description, dict):
                    description = description.get("#")
                entry = {k: v for k, v in struct.items() if k != "description"}
                return cls(
                    description or "not found",
                    status_code,
                    errors=[entry],
                    error_code="not_found",
                )
            entry = _normalise_entry(struct)
            message = " ".join(str(p) for p in (entry.get("field"), entry.get("message")) if p)
            return cls(message, status_code, errors=[entry])

        if isinstance(struct, dict):
            items = [e for value in struct.values() for e in _as_list(value)]
        else:
            items = _as_list(struct)
        errors = [_normalise_entry(e) for e in items]
        if len(errors) == 1:
            message = str(errors[0].get("message") or "validation error")
        else:
            message = f"{len(errors)} validation errors"
        return cls(message, status_code, errors=errors)


class NotFoundError(RecurlyError):
    """Requested record does not exist (HTTP 404)."""

    pass


class AuthenticationError(APIError):
    """API key missing or rejected (HTTP 401)."""

    def __init__(self, message: str = "Your API key is missing or invalid") -> None:
        super().__init__(message, status_code=401)


class UnexpectedStatusError(APIError):
    """Response status outside the set accepted for the operation."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        super().__init__(message or f"unexpected status: {status_code}", status_code=status_code)


class RateLimitError(UnexpectedStatusError):
    """API rate limit exceeded."""

    def __init__(self, message: str | None = None, retry_after: int = 60) -> None:
        super().__init__(429, message or "rate limit exceeded")
        self.retry_after = retry_after


class XMLDecodeError(RecurringError):
    """Response body is not well-formed XML."""

    def __init__(self, message: str, body: str | bytes | None = None) -> None:
        super().__init__(message)
        self.body = body


class ValidationError(RecurringError):
    """Local input validation failure, raised before any request is sent."""

    pass


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _normalise_entry(entry: Any) -> dict[str, Any]:
    """Copy an error entry, moving its text content to ``message``."""
    if not isinstance(entry, dict):
        return {"message": entry}
    out = {k: v for k, v in entry.items() if k != "#"}
    if "#" in entry:
        out["message"] = entry["#"]
    return out
