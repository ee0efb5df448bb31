"""Usage records for usage-based add-ons."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Self

from ..codec import encode_body
from ..core.exceptions import ValidationError
from .base import Resource


class AddonUsage(Resource):
    """Usage recorded against a subscription add-on."""

    SINGULAR = "usage"
    PLURAL = "usage"
    ID_FIELD = "id"

    id: Any = None
    amount: int | None = None
    merchant_tag: str | None = None
    recording_timestamp: datetime | None = None
    usage_timestamp: datetime | None = None
    usage_type: str | None = None
    unit_amount_in_cents: Any = None
    usage_percentage: Any = None
    billed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    subscription_uuid: str | None = None
    add_on_code: str | None = None

    def endpoint(self) -> str:
        if not self.subscription_uuid or not self.add_on_code:
            raise ValidationError("usage requires subscription_uuid and add_on_code")
        return self.client.config.endpoint(
            f"subscriptions/{self.subscription_uuid}/add_ons/{self.add_on_code}/{self.PLURAL}"
        )

    async def create(
        self,
        subscription_uuid: str,
        add_on_code: str,
        options: Mapping[str, Any],
    ) -> Self:
        """Record usage for the add-on ``add_on_code`` of a subscription."""
        if not subscription_uuid:
            raise ValidationError('usage must include "subscription_uuid"')
        if not add_on_code:
            raise ValidationError('usage must include "add_on_code"')
        self.subscription_uuid = subscription_uuid
        self.add_on_code = add_on_code

        response = await self._send(
            "POST",
            self.endpoint(),
            encode_body(self.SINGULAR, options),
            valid_statuses={200, 201},
        )
        self.inflate(response.payload)
        return self

    def percentage(self) -> float | None:
        value = self.usage_percentage
        if isinstance(value, Mapping):
            value = value.get("#")
        if value is None or value == "":
            return None
        return float(value)

    def unit_amount(self) -> int | None:
        """Per-unit charge in cents; percentage usage is priced off ``amount``."""
        if isinstance(self.unit_amount_in_cents, int):
            return self.unit_amount_in_cents
        percentage = self.percentage()
        if percentage is None or self.amount is None:
            return None
        return round(self.amount * percentage / 100)
