"""Coupon resource."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Self

from ..codec import encode_body
from ..core.exceptions import ValidationError
from .base import Resource, require
from .redemption import Redemption

DISCOUNT_TYPES = ("percent", "dollars")


class Coupon(Resource):
    """Discount coupon."""

    SINGULAR = "coupon"
    PLURAL = "coupons"
    ID_FIELD = "coupon_code"
    ENUMERABLE = True

    coupon_code: str | None = None
    name: str | None = None
    state: str | None = None
    description: str | None = None
    discount_type: str | None = None
    discount_percent: int | None = None
    discount_in_cents: Any = None
    redeem_by_date: datetime | None = None
    single_use: bool | None = None
    applies_for_months: int | None = None
    max_redemptions: int | None = None
    applies_to_all_plans: bool | None = None
    duration: str | None = None
    temporal_unit: str | None = None
    temporal_amount: int | None = None
    plan_codes: Any = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    async def create(self, options: Mapping[str, Any]) -> Self:
        require(options, "coupon_code", "name", message='coupon must include "{name}" parameter')
        if options.get("discount_type") not in DISCOUNT_TYPES:
            raise ValidationError('coupon "discount_type" must be "percent" or "dollars"')
        if options.get("applies_to_all_plans") is False and not options.get("plan_codes"):
            raise ValidationError('coupon must include "plan_codes" when not applied to all plans')

        response = await self._send(
            "POST", self.endpoint(), encode_body(self.SINGULAR, options), valid_statuses={201}
        )
        self.inflate(response.payload)
        return self

    async def redeem(self, options: Mapping[str, Any]) -> Redemption:
        """Redeem the coupon on an account."""
        require(
            options,
            "account_code",
            "currency",
            message='coupon redemption must include "{name}" parameter',
        )
        href = self.action_href("redeem", f"{self._require_href('redeem')}/redeem")
        response = await self._send(
            "POST",
            href,
            encode_body(Redemption.SINGULAR, options),
            valid_statuses={200, 201},
        )
        return self.client.redemption().inflate(response.payload)
