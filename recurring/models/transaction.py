"""Transaction resource."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Self

from ..codec import encode_body
from ..core.exceptions import ValidationError
from .base import Resource, require


class Transaction(Resource):
    """Payment transaction.

    Transactions are not enumerable through the generic ``all``; this class
    lists the site-wide collection itself.
    """

    SINGULAR = "transaction"
    PLURAL = "transactions"
    ID_FIELD = "uuid"

    uuid: str | None = None
    action: str | None = None
    status: str | None = None
    amount_in_cents: Any = None
    tax_in_cents: Any = None
    currency: str | None = None
    description: str | None = None
    payment_method: str | None = None
    reference: str | None = None
    source: str | None = None
    recurring: bool | None = None
    test: bool | None = None
    voidable: bool | None = None
    refundable: bool | None = None
    ip_address: str | None = None
    cvv_result: Any = None
    avs_result: Any = None
    details: Any = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    async def all(self, filter: Mapping[str, Any] | None = None) -> dict[Any, Resource]:
        results = await self.fetch_all(Transaction, self.endpoint(), filter)
        return {item.identifier: item for item in results}

    async def create(self, options: Mapping[str, Any]) -> Self:
        account = options.get("account")
        if not isinstance(account, Mapping) or not account.get("account_code"):
            raise ValidationError('transaction must include "account" with "account_code"')
        require(
            options,
            "amount_in_cents",
            "currency",
            message='transaction must include "{name}" parameter',
        )
        response = await self._send(
            "POST",
            self.endpoint(),
            encode_body(self.SINGULAR, options),
            valid_statuses={200, 201, 204},
        )
        self.inflate(response.payload)
        return self

    async def refund(self, amount_in_cents: int | None = None) -> Self:
        """Refund (or void) the transaction, fully unless an amount is given."""
        href = self.action_href("refund", self._require_href("refund"))
        params = {"amount_in_cents": amount_in_cents} if amount_in_cents is not None else None
        response = await self._send("DELETE", href, valid_statuses={202}, params=params)
        self.inflate(response.payload)
        return self
