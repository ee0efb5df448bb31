"""Invoice resource."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Self

from ..codec import encode_body
from ..core.errors import check_response
from ..core.exceptions import ValidationError
from .base import Resource

PDF_HEADERS = {"Accept": "application/pdf", "Accept-Language": "en-US"}


class Invoice(Resource):
    """Invoice issued to an account."""

    SINGULAR = "invoice"
    PLURAL = "invoices"
    ID_FIELD = "uuid"
    ENUMERABLE = True

    uuid: str | None = None
    state: str | None = None
    invoice_number: Any = None
    invoice_number_prefix: str | None = None
    po_number: str | None = None
    vat_number: str | None = None
    subtotal_in_cents: Any = None
    tax_in_cents: Any = None
    total_in_cents: Any = None
    balance_in_cents: Any = None
    currency: str | None = None
    collection_method: str | None = None
    net_terms: int | None = None
    line_items: Any = None
    transactions: Any = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    due_on: datetime | None = None
    closed_at: datetime | None = None

    async def fetch_pdf(self) -> bytes:
        """Download the invoice as PDF bytes."""
        href = self._require_href("fetch a pdf of")
        response = await self.client.transport.request(
            "GET", href, headers=PDF_HEADERS, parse=False
        )
        check_response(response, {200})
        return response.payload

    async def refund(
        self,
        amount_in_cents: int | None = None,
        refund_method: str = "credit_first",
    ) -> Invoice:
        """Refund the invoice; open amount refunds are issued when no amount is given.

        Returns the refund invoice created by the API.
        """
        number = self._require_number("refund")
        href = self.action_href("refund", f"{self.endpoint()}/{number}/refund")
        options: dict[str, Any] = {"refund_method": refund_method}
        if amount_in_cents is not None:
            options["amount_in_cents"] = amount_in_cents
        response = await self._send(
            "POST", href, encode_body(self.SINGULAR, options), valid_statuses={201}
        )
        return self.client.invoice().inflate(response.payload)

    async def mark_successful(self) -> Self:
        return await self._mark("mark_successful")

    async def mark_failed(self) -> Self:
        return await self._mark("mark_failed")

    async def _mark(self, name: str) -> Self:
        number = self._require_number(name.replace("_", " "))
        href = self.action_href(name, f"{self.endpoint()}/{number}/{name}")
        response = await self._send("PUT", href, valid_statuses={200})
        self.inflate(response.payload)
        return self

    def _require_number(self, action: str) -> Any:
        if self.invoice_number in (None, ""):
            raise ValidationError(f"cannot {action} an invoice without invoice_number")
        return self.invoice_number
