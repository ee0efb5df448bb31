"""Coupon redemption on an account."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .base import Resource


class Redemption(Resource):
    SINGULAR = "redemption"
    PLURAL = "redemption"
    ID_FIELD = "uuid"

    uuid: str | None = None
    state: str | None = None
    single_use: bool | None = None
    total_discounted_in_cents: Any = None
    currency: str | None = None
    coupon_code: str | None = None
    account_code: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def set_account_code(self, account_code: str) -> None:
        """Point ``href`` at the account's active redemption unless already set."""
        if not self.href:
            self.href = self.client.config.endpoint(f"accounts/{account_code}/{self.PLURAL}")
