"""Signed query strings for hosted payment pages.

A signature is ``<hmac>|<query>`` where ``query`` is the sorted,
url-encoded parameter set (with a nonce and timestamp added) and ``hmac``
the hex HMAC-SHA1 of the query keyed by the private API key.
"""

from __future__ import annotations

import hashlib
import hmac
import math
import time
import uuid
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode


class SignedQuery:
    """Builder for a signed parameter string."""

    def __init__(self, key: str) -> None:
        if not key:
            raise ValueError("a private API key is required to sign queries")
        self._key = key
        self._params: dict[str, Any] = {}
        self._serialized: str | None = None

    def set(self, key: str | Mapping[str, Any], value: Any = None) -> SignedQuery:
        """Set one parameter, or several from a mapping."""
        if isinstance(key, Mapping):
            self._params.update(key)
        else:
            self._params[key] = value
        self._serialized = None
        return self

    def serialize(self) -> str:
        if self._serialized is None:
            self._params.setdefault("nonce", str(uuid.uuid4()))
            self._params.setdefault("timestamp", math.ceil(time.time()))
            self._serialized = urlencode(sorted(_flatten(self._params)))
        return self._serialized

    def hmac(self) -> str:
        return hmac.new(
            self._key.encode("utf-8"), self.serialize().encode("utf-8"), hashlib.sha1
        ).hexdigest()

    def __str__(self) -> str:
        return f"{self.hmac()}|{self.serialize()}"


def _flatten(params: Mapping[str, Any], prefix: str = "") -> list[tuple[str, str]]:
    # nested mappings become bracketed keys: account[account_code]=...
    pairs: list[tuple[str, str]] = []
    for name, value in params.items():
        key = f"{prefix}[{name}]" if prefix else str(name)
        if isinstance(value, Mapping):
            pairs.extend(_flatten(value, key))
        elif isinstance(value, bool):
            pairs.append((key, "true" if value else "false"))
        elif value is not None:
            pairs.append((key, str(value)))
    return pairs
