"""XML request bodies."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

import xmltodict


def encode_body(root: str, data: Mapping[str, Any] | None) -> str:
    """Serialize ``data`` as an XML document with a ``root`` element.

    Nested mappings become child elements, sequences repeat their element,
    ``None`` renders as an empty element, booleans as ``true``/``false`` and
    datetimes in ISO-8601.

    Example:
        >>> encode_body("account", {"account_code": "a1"})
        '<?xml version="1.0" encoding="utf-8"?>\\n<account><account_code>a1</account_code></account>'
    """
    return xmltodict.unparse({root: _prepare(dict(data or {}))})


def _prepare(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _prepare(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_prepare(v) for v in value]
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if value is None or isinstance(value, str):
        return value
    return str(value)
