"""Resource base model.

Architecture:
    Every API resource kind is a pydantic model deriving from ``Resource``.
    Documented fields are declared on the subclass; anything else the API
    returns lands in ``model_extra`` (``extra="allow"``), so new remote fields
    never break decoding.

    A resource instance is bound to the ``Recurring`` client that created it
    and talks to the API through the client's transport. Records coming from
    the API are merged onto a blank instance with ``inflate``:

    - ``{"href": url}`` objects are links to related resources. They go to
      ``resources`` (field name -> URL) instead of becoming fields.
    - ``<a name=... href=... method=.../>`` anchors are named actions. They go
      to ``actions`` (name -> anchor).
    - Everything else is assigned as decoded. Assignment is not re-validated,
      so an XML nil shows up as ``""``.

Design Decisions:
    - Identifier changes go through ``set_identifier`` which also computes
      ``href``; there is no attribute interception.
    - Collections are walked with ResourceIterator; ``all`` and
      ``fetch_all`` drain it.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping
from typing import TYPE_CHECKING, Any, ClassVar, Self, TypeVar

from pydantic import BaseModel, ConfigDict, PrivateAttr

from ..core.errors import check_response
from ..core.exceptions import RecurringError, ValidationError

if TYPE_CHECKING:
    from ..client import Recurring
    from ..runtime.rest import ApiResponse, ResourceIterator

logger = logging.getLogger(__name__)

R = TypeVar("R", bound="Resource")

# Element holding named action anchors
ACTIONS_KEY = "a"


class Resource(BaseModel):
    """Base class for API resources."""

    SINGULAR: ClassVar[str] = ""
    PLURAL: ClassVar[str] = ""
    ID_FIELD: ClassVar[str | None] = None
    ENUMERABLE: ClassVar[bool] = False

    href: str | None = None

    model_config = ConfigDict(extra="allow")

    _client: Any = PrivateAttr(default=None)
    _resources: dict[str, str] = PrivateAttr(default_factory=dict)
    _actions: dict[str, dict[str, Any]] = PrivateAttr(default_factory=dict)
    _deleted: bool = PrivateAttr(default=False)

    @classmethod
    def bind(cls, client: Recurring, **fields: Any) -> Self:
        """Create an instance bound to ``client``."""
        instance = cls(**fields)
        instance._client = client
        return instance

    @property
    def client(self) -> Recurring:
        if self._client is None:
            raise RecurringError(f"{type(self).__name__} is not bound to a client")
        return self._client

    @property
    def identifier(self) -> Any:
        """Value of the resource's natural identifier field."""
        if not self.ID_FIELD:
            return None
        return getattr(self, self.ID_FIELD, None)

    @property
    def resources(self) -> dict[str, str]:
        """Links to related resources by field name."""
        return self._resources

    @property
    def actions(self) -> dict[str, dict[str, Any]]:
        """Named action anchors (``name -> {"href": ..., "method": ...}``)."""
        return self._actions

    @property
    def deleted(self) -> bool:
        return self._deleted

    def set_identifier(self, value: Any) -> None:
        """Set the identifier field and point ``href`` at the record's URL."""
        if not self.ID_FIELD:
            raise RecurringError(f"{type(self).__name__} has no identifier field")
        self._assign(self.ID_FIELD, value)
        self.href = f"{self.endpoint()}/{value}"

    def endpoint(self) -> str:
        """Collection URL of this resource kind."""
        return self.client.config.endpoint(self.PLURAL)

    def action_href(self, name: str, default: str) -> str:
        """URL of a named action, falling back to ``default``."""
        anchor = self._actions.get(name)
        if anchor and anchor.get("href"):
            return anchor["href"]
        return default

    def inflate(self, record: Any) -> Self:
        """Merge a decoded record onto this instance."""
        if record is None or record == "":
            return self
        if not isinstance(record, Mapping):
            logger.warning(
                f"Cannot inflate {type(self).__name__} from {type(record).__name__}; ignoring"
            )
            return self

        for key, value in record.items():
            if key == ACTIONS_KEY:
                self._collect_actions(value)
            elif isinstance(value, Mapping) and len(value) == 1 and "href" in value:
                self._resources[key] = value["href"]
            else:
                self._assign(key, value)
        return self

    async def fetch(self) -> Self:
        """Load the record at ``href``.

        Raises:
            ValidationError: No href set.
            NotFoundError: The record does not exist.
        """
        self._require_href("fetch")
        response = await self.client.transport.get(self.href)
        check_response(response, {200})
        self.inflate(response.payload)
        return self

    async def destroy(self) -> bool:
        """Delete the record at ``href``."""
        self._require_href("delete")
        await self._send("DELETE", self.href, valid_statuses={204})
        self._deleted = True
        return True

    async def all(self, filter: Mapping[str, Any] | None = None) -> dict[Any, Resource]:
        """Fetch every record of this kind, keyed by identifier.

        Raises:
            RecurringError: The kind cannot be listed.
        """
        if not self.ENUMERABLE:
            raise RecurringError(f"{type(self).__name__} does not support all()")
        results = await self.fetch_all(type(self), self.endpoint(), filter)
        return {item.identifier: item for item in results}

    async def fetch_all(
        self,
        kind: type[R],
        uri: str,
        filter: Mapping[str, Any] | None = None,
    ) -> list[R]:
        """Fetch every record of ``kind`` from collection ``uri``."""
        return await self.client.iterator(kind, filter, uri).collect()

    def iterator(
        self,
        filter: Mapping[str, Any] | None = None,
        endpoint: str | None = None,
    ) -> ResourceIterator[Self]:
        """Lazy iterator over this kind's collection (or ``endpoint``)."""
        return self.client.iterator(type(self), filter, endpoint)

    async def _send(
        self,
        method: str,
        uri: str,
        body: str | None = None,
        *,
        valid_statuses: Collection[int],
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> ApiResponse:
        response = await self.client.transport.request(
            method, uri, params=params, body=body, headers=headers
        )
        check_response(response, valid_statuses)
        return response

    def _require_href(self, action: str) -> str:
        if not self.href:
            raise ValidationError(f"cannot {action} a {self.SINGULAR or 'record'} without an href")
        return self.href

    def _require_identifier(self, action: str) -> Any:
        if not self.identifier:
            raise ValidationError(
                f"cannot {action} a {self.SINGULAR or 'record'} without {self.ID_FIELD}"
            )
        return self.identifier

    def _assign(self, key: str, value: Any) -> None:
        if key in type(self).model_fields:
            setattr(self, key, value)
        else:
            # unknown remote field; also covers names shadowed by properties
            self.__pydantic_extra__[key] = value

    def _collect_actions(self, value: Any) -> None:
        anchors = value if isinstance(value, list) else [value]
        for anchor in anchors:
            if isinstance(anchor, Mapping) and anchor.get("name"):
                self._actions[anchor["name"]] = dict(anchor)


def require(options: Mapping[str, Any], *names: str, message: str) -> None:
    """Raise ValidationError naming the first missing option."""
    for name in names:
        if not options.get(name):
            raise ValidationError(message.format(name=name))
