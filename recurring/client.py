"""Recurring client facade.

Architecture:
    ``Recurring`` owns the configuration and the REST transport, and acts as
    the factory for resource objects. Every resource it creates is bound to
    it, so resource operations share one HTTP session, one API key and one
    rate limiter.

Design Decisions:
    - Transport injection allows testing with mock transports
    - Changing the API key affects every resource already created
    - Context manager pattern ensures the HTTP session is closed
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from .config import ClientConfig
from .models import (
    Account,
    Addon,
    AddonUsage,
    Adjustment,
    BillingInfo,
    Coupon,
    Invoice,
    Plan,
    Redemption,
    Resource,
    Subscription,
    Transaction,
)
from .runtime.rest import HTTPClient, ResourceIterator, ResponseHook, RESTTransport

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Resource)


class Recurring:
    """Entry point for the subscription billing API.

    Example:
        >>> async with Recurring("my-api-key") as client:
        ...     accounts = await client.account().all()
        ...     async for sub in client.iterator(Subscription, {"state": "active"}):
        ...         print(sub.uuid)
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        config: ClientConfig | None = None,
        http: HTTPClient | None = None,
        transport: RESTTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Private API key; overrides the key in ``config``.
            config: Connection settings (read from the environment if omitted).
            http: Optional HTTPClient to share a session.
            transport: Optional transport, mainly for tests.
        """
        if config is None:
            config = ClientConfig.from_env()
        if api_key is not None:
            config = dataclasses.replace(config, api_key=api_key)
        self._transport = transport or RESTTransport(config, http)
        self._closed = False

    @property
    def transport(self) -> RESTTransport:
        return self._transport

    @property
    def config(self) -> ClientConfig:
        return self._transport.config

    @property
    def api_key(self) -> str | None:
        return self.config.api_key

    def set_api_key(self, api_key: str | None) -> None:
        self._transport.set_api_key(api_key)

    def set_rate_limit(self, requests: int, per_seconds: float) -> None:
        """Allow at most ``requests`` requests per ``per_seconds`` seconds."""
        self._transport.set_rate_limit(requests, per_seconds)

    def add_response_hook(self, hook: ResponseHook) -> None:
        self._transport.add_response_hook(hook)

    def resource(self, kind: type[R], **fields: Any) -> R:
        """Create a blank resource of ``kind`` bound to this client."""
        return kind.bind(self, **fields)

    def account(self, **fields: Any) -> Account:
        return self.resource(Account, **fields)

    def addon(self, **fields: Any) -> Addon:
        return self.resource(Addon, **fields)

    def addon_usage(self, **fields: Any) -> AddonUsage:
        return self.resource(AddonUsage, **fields)

    def adjustment(self, **fields: Any) -> Adjustment:
        return self.resource(Adjustment, **fields)

    def billing_info(self, **fields: Any) -> BillingInfo:
        return self.resource(BillingInfo, **fields)

    def coupon(self, **fields: Any) -> Coupon:
        return self.resource(Coupon, **fields)

    def invoice(self, **fields: Any) -> Invoice:
        return self.resource(Invoice, **fields)

    def plan(self, **fields: Any) -> Plan:
        return self.resource(Plan, **fields)

    def redemption(self, **fields: Any) -> Redemption:
        return self.resource(Redemption, **fields)

    def subscription(self, **fields: Any) -> Subscription:
        return self.resource(Subscription, **fields)

    def transaction(self, **fields: Any) -> Transaction:
        return self.resource(Transaction, **fields)

    def iterator(
        self,
        kind: type[R],
        filter: Mapping[str, Any] | None = None,
        endpoint: str | None = None,
    ) -> ResourceIterator[R]:
        """Lazy iterator over a collection of ``kind``.

        Args:
            kind: Resource class of the records.
            filter: Optional query parameters.
            endpoint: Collection URL; defaults to the kind's own collection.
        """
        return ResourceIterator(
            self._transport,
            lambda record: kind.bind(self).inflate(record),
            endpoint or self.config.endpoint(kind.PLURAL),
            filter,
            page_size=self.config.page_size,
            name=kind.__name__,
        )

    async def close(self) -> None:
        """Close the client and its HTTP session."""
        if self._closed:
            return
        self._closed = True
        logger.debug("Closing Recurring client")
        await self._transport.close()

    async def __aenter__(self) -> Recurring:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
