"""Adjustment (charge or credit) resource."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .base import Resource


class Adjustment(Resource):
    SINGULAR = "adjustment"
    PLURAL = "adjustments"
    ID_FIELD = "uuid"
    ENUMERABLE = True

    uuid: str | None = None
    state: str | None = None
    type: str | None = None
    description: str | None = None
    accounting_code: str | None = None
    product_code: str | None = None
    origin: str | None = None
    unit_amount_in_cents: Any = None
    quantity: int | None = None
    discount_in_cents: Any = None
    tax_in_cents: Any = None
    total_in_cents: Any = None
    currency: str | None = None
    taxable: bool | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
