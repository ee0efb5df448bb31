"""Billing information attached to an account."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Self

from ..codec import encode_body
from .base import Resource, require

SKIP_AUTHORIZATION_HEADER = "Recurly-Skip-Authorization"


class BillingInfo(Resource):
    SINGULAR = "billing_info"
    PLURAL = "billing_info"

    first_name: str | None = None
    last_name: str | None = None
    company: str | None = None
    address1: str | None = None
    address2: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    country: str | None = None
    phone: str | None = None
    vat_number: str | None = None
    ip_address: str | None = None
    card_type: str | None = None
    first_six: str | None = None
    last_four: str | None = None
    month: int | None = None
    year: int | None = None

    def set_account_code(self, account_code: str) -> None:
        """Point ``href`` at the account's billing info unless already set."""
        if not self.href:
            self.href = self.client.config.endpoint(f"accounts/{account_code}/{self.PLURAL}")

    async def update(
        self,
        options: Mapping[str, Any],
        *,
        skip_authorization: bool = False,
    ) -> Self:
        """Replace the billing info.

        Card details are required unless a ``token_id`` is supplied.
        """
        if not options.get("token_id"):
            require(
                options,
                "first_name",
                "last_name",
                "number",
                "month",
                "year",
                message='billing info must include "{name}" parameter',
            )
        href = self._require_href("update")
        headers = {SKIP_AUTHORIZATION_HEADER: "true" if skip_authorization else "false"}
        response = await self._send(
            "PUT",
            href,
            encode_body(self.SINGULAR, options),
            valid_statuses={200, 201},
            headers=headers,
        )
        self.inflate(response.payload)
        return self
