"""Subscription resource."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Self

from ..codec import encode_body
from ..core.exceptions import ValidationError
from .base import Resource, require

VALID_REFUND_TYPES = ("partial", "full", "none")


class Subscription(Resource):
    """Subscription of an account to a plan."""

    SINGULAR = "subscription"
    PLURAL = "subscriptions"
    ID_FIELD = "uuid"
    ENUMERABLE = True

    uuid: str | None = None
    state: str | None = None
    plan: Any = None
    currency: str | None = None
    quantity: int | None = None
    unit_amount_in_cents: int | None = None
    subscription_add_ons: Any = None
    activated_at: datetime | None = None
    canceled_at: datetime | None = None
    expires_at: datetime | None = None
    bank_account_authorized_at: datetime | None = None
    current_period_started_at: datetime | None = None
    current_period_ends_at: datetime | None = None
    trial_started_at: datetime | None = None
    trial_ends_at: datetime | None = None
    collection_method: str | None = None
    net_terms: int | None = None
    po_number: str | None = None
    customer_notes: str | None = None
    terms_and_conditions: str | None = None
    tax_in_cents: int | None = None
    tax_type: str | None = None
    tax_region: str | None = None
    tax_rate: float | None = None
    pending_subscription: Any = None

    @property
    def account_id(self) -> str | None:
        """Account code taken from the account link."""
        link = self._resources.get("account")
        if not link:
            return None
        return link.rstrip("/").rsplit("/", 1)[-1]

    async def create(self, options: Mapping[str, Any]) -> Self:
        require(options, "plan_code", message='subscription must include "{name}" parameter')
        account = options.get("account")
        if not account:
            raise ValidationError('subscription must include "account" information')
        if not isinstance(account, Mapping) or not account.get("account_code"):
            raise ValidationError('subscription account info must include "account_code"')
        require(options, "currency", message='subscription must include "{name}" parameter')

        response = await self._send(
            "POST",
            self.endpoint(),
            encode_body(self.SINGULAR, options),
            valid_statuses={200, 201},
        )
        self.inflate(response.payload)
        return self

    async def update(self, options: Mapping[str, Any]) -> Self:
        """Change the subscription; ``timeframe`` is ``now`` or ``renewal``."""
        require(options, "timeframe", message='subscription update must include "{name}" parameter')
        href = self._require_href("update")
        response = await self._send(
            "PUT", href, encode_body(self.SINGULAR, options), valid_statuses={200, 201}
        )
        self.inflate(response.payload)
        return self

    async def cancel(self) -> Self:
        return await self._run_action("cancel", valid_statuses={200})

    async def reactivate(self) -> Self:
        return await self._run_action("reactivate", valid_statuses={200})

    async def postpone(self, next_renewal: datetime) -> Self:
        """Move the next renewal to ``next_renewal``."""
        if not isinstance(next_renewal, datetime):
            raise ValidationError(f"{next_renewal!r} must be a valid renewal date")
        return await self._run_action(
            "postpone",
            valid_statuses={200},
            params={"next_renewal_date": next_renewal.isoformat()},
        )

    async def terminate(self, refund_type: str) -> Self:
        """Terminate now, refunding ``partial``, ``full`` or ``none``."""
        if refund_type not in VALID_REFUND_TYPES:
            raise ValidationError(f"refund type {refund_type} not valid")
        return await self._run_action(
            "terminate", valid_statuses={200, 201}, params={"refund": refund_type}
        )

    async def _run_action(
        self,
        name: str,
        *,
        valid_statuses: set[int],
        params: Mapping[str, Any] | None = None,
    ) -> Self:
        uuid = self._require_identifier(name)
        href = self.action_href(name, f"{self.endpoint()}/{uuid}/{name}")
        response = await self._send("PUT", href, valid_statuses=valid_statuses, params=params)
        self.inflate(response.payload)
        return self
