"""Plan add-on resource."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Self

from ..codec import encode_body
from ..core.exceptions import ValidationError
from .base import Resource, require


class Addon(Resource):
    """Add-on attached to a plan."""

    SINGULAR = "add_on"
    PLURAL = "add_ons"
    ID_FIELD = "add_on_code"

    add_on_code: str | None = None
    plan_code: str | None = None
    name: str | None = None
    default_quantity: int | None = None
    display_quantity_on_hosted_page: bool | None = None
    unit_amount_in_cents: Any = None
    add_on_type: str | None = None
    usage_type: str | None = None
    optional: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    async def create(self, options: Mapping[str, Any]) -> Self:
        """Create the add-on under ``plan_code`` (from the instance or options)."""
        options = dict(options)
        plan_code = options.pop("plan_code", None) or self.plan_code
        if not plan_code:
            raise ValidationError('add-on must include "plan_code" parameter')
        require(options, "add_on_code", "name", message='add-on must include "{name}" parameter')

        uri = self.client.config.endpoint(f"plans/{plan_code}/{self.PLURAL}")
        response = await self._send(
            "POST", uri, encode_body(self.SINGULAR, options), valid_statuses={200, 201}
        )
        self.plan_code = plan_code
        self.inflate(response.payload)
        return self
