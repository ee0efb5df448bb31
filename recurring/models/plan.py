"""Plan resource."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Self

from ..codec import encode_body
from .addon import Addon
from .base import Resource, require


class Plan(Resource):
    """Billing plan."""

    SINGULAR = "plan"
    PLURAL = "plans"
    ID_FIELD = "plan_code"
    ENUMERABLE = True

    plan_code: str | None = None
    name: str | None = None
    description: str | None = None
    accounting_code: str | None = None
    setup_fee_accounting_code: str | None = None
    unit_amount_in_cents: Any = None
    setup_fee_in_cents: Any = None
    unit_name: str | None = None
    plan_interval_length: int | None = None
    plan_interval_unit: str | None = None
    trial_interval_length: int | None = None
    trial_interval_unit: str | None = None
    total_billing_cycles: int | None = None
    display_quantity: bool | None = None
    display_donation_amounts: bool | None = None
    display_phone_number: bool | None = None
    bypass_hosted_confirmation: bool | None = None
    cancel_url: str | None = None
    success_url: str | None = None
    payment_page_tos_link: str | None = None
    created_at: datetime | None = None

    async def create(self, options: Mapping[str, Any]) -> Self:
        require(
            options,
            "plan_code",
            "name",
            "unit_amount_in_cents",
            message='plan options must include "{name}" parameter',
        )
        response = await self._send(
            "POST", self.endpoint(), encode_body(self.SINGULAR, options), valid_statuses={201}
        )
        self.inflate(response.payload)
        return self

    async def update(self, options: Mapping[str, Any]) -> Self:
        href = self._require_href("update")
        response = await self._send(
            "PUT", href, encode_body(self.SINGULAR, options), valid_statuses={200}
        )
        self.inflate(response.payload)
        return self

    async def fetch_add_ons(self) -> dict[str, Addon]:
        """Fetch the plan's add-ons keyed by add_on_code."""
        uri = self._resources.get("add_ons")
        if uri is None:
            uri = f"{self._require_href('fetch add-ons for')}/add_ons"
        results = await self.fetch_all(Addon, uri)
        add_ons = {addon.add_on_code: addon for addon in results}
        self._assign("add_ons", add_ons)
        return add_ons
