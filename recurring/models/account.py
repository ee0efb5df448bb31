"""Account resource."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Self

from ..codec import encode_body
from ..core.errors import check_response
from ..core.exceptions import ValidationError
from .adjustment import Adjustment
from .base import Resource
from .billing_info import BillingInfo
from .invoice import Invoice
from .redemption import Redemption
from .subscription import Subscription
from .transaction import Transaction

# Fields sent by update()
_UPDATABLE = (
    "username",
    "email",
    "first_name",
    "last_name",
    "company_name",
    "accept_language",
)


class Account(Resource):
    """Customer account."""

    SINGULAR = "account"
    PLURAL = "accounts"
    ID_FIELD = "account_code"
    ENUMERABLE = True

    account_code: str | None = None
    accept_language: str | None = None
    company_name: str | None = None
    created_at: datetime | None = None
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    state: str | None = None
    username: str | None = None

    async def create(self, data: Mapping[str, Any]) -> Self:
        """Create the account, reopening it if a closed one has the same code.

        ``data`` may carry the code as ``id`` or ``account_code``.
        """
        data = dict(data)
        if "id" in data:
            data["account_code"] = data.pop("id")
        if not data.get("account_code"):
            raise ValidationError("you must supply an id or account_code for new accounts")

        response = await self.client.transport.post(
            self.endpoint(), encode_body(self.SINGULAR, data)
        )
        if response.status == 422 and _is_code_taken(response.payload):
            # a closed account already uses this code
            self.set_identifier(data["account_code"])
            return await self.reopen()

        check_response(response, {201})
        self.inflate(response.payload)
        return self

    async def close(self) -> bool:
        return await self.destroy()

    async def reopen(self) -> Self:
        href = self._require_href("reopen")
        response = await self._send("PUT", f"{href}/reopen", valid_statuses={200})
        self.inflate(response.payload)
        return self

    async def update(self) -> Self:
        """Send the account's editable fields (and billing_info, if set)."""
        href = self._require_href("update")
        data: dict[str, Any] = {
            name: getattr(self, name) for name in _UPDATABLE if getattr(self, name) is not None
        }
        billing_info = (self.model_extra or {}).get("billing_info")
        if isinstance(billing_info, Resource):
            billing_info = billing_info.model_dump(exclude={"href"}, exclude_none=True)
        if billing_info:
            data["billing_info"] = billing_info
        response = await self._send(
            "PUT", href, encode_body(self.SINGULAR, data), valid_statuses={200}
        )
        self.inflate(response.payload)
        return self

    async def create_adjustment(self, options: Mapping[str, Any]) -> Adjustment:
        href = self._require_href("adjust")
        response = await self._send(
            "POST",
            f"{href}/adjustments",
            encode_body(Adjustment.SINGULAR, options),
            valid_statuses={200, 201},
        )
        return self.client.adjustment().inflate(response.payload)

    async def create_invoice(self) -> Invoice:
        """Invoice all pending charges on the account."""
        href = self._require_href("invoice")
        response = await self._send("POST", f"{href}/invoices", valid_statuses={200, 201})
        return self.client.invoice().inflate(response.payload)

    async def fetch_transactions(self) -> list[Transaction]:
        results = await self.fetch_all(Transaction, self._related("transactions"))
        self._assign("transactions", results)
        return results

    async def fetch_subscriptions(self) -> list[Subscription]:
        results = await self.fetch_all(Subscription, self._related("subscriptions"))
        self._assign("subscriptions", results)
        return results

    async def fetch_invoices(self) -> list[Invoice]:
        results = await self.fetch_all(Invoice, self._related("invoices"))
        self._assign("invoices", results)
        return results

    async def fetch_billing_info(self) -> BillingInfo:
        info = self.client.billing_info()
        info.set_account_code(self._require_identifier("fetch billing info for"))
        await info.fetch()
        self._assign("billing_info", info)
        return info

    async def fetch_redeemed_coupons(self) -> Redemption:
        redemption = self.client.redemption()
        redemption.set_account_code(self._require_identifier("fetch redemptions for"))
        await redemption.fetch()
        self._assign("redemption", redemption)
        return redemption

    def _related(self, name: str) -> str:
        if name in self._resources:
            return self._resources[name]
        return f"{self._require_href(f'fetch {name} for')}/{name}"


def _is_code_taken(payload: Any) -> bool:
    error = payload.get("error") if isinstance(payload, dict) else None
    return (
        isinstance(error, dict)
        and error.get("symbol") == "taken"
        and error.get("field") == "account.account_code"
    )
