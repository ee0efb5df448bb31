"""Typed XML decoding.

The API tags scalar elements with a ``type`` attribute (``integer``,
``datetime``, ``boolean``, ``float``, ``array``) and marks missing values with
``nil="nil"``. Bodies are parsed with xmltodict using the attribute-merging
convention (attributes become plain keys, element text lives under ``"#"``,
document root dropped) and the resulting tree is walked to produce native
values:

    <n type="integer">3</n>            -> 3
    <b type="boolean">true</b>         -> True
    <d type="datetime">2011-04-19T07:00:00Z</d> -> datetime(...)
    <x nil="nil"></x>                  -> ""
    <plans type="array"><plan/>...</plans> -> [...]

Decoding is fail-soft. A subtree that cannot be decoded is returned as it
came out of the parser, and the result says so: ``decode_types`` returns
``Decoded`` (possibly listing degraded subtree paths) or ``RawFallback`` when
the whole input had to be returned raw. Only a body the XML parser itself
rejects raises, as XMLDecodeError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar
from xml.parsers.expat import ExpatError

import xmltodict

from ..core.exceptions import XMLDecodeError

logger = logging.getLogger(__name__)

# Key holding element text in the parsed tree
TEXT_KEY = "#"

ARRAY_HINT = "array"


@dataclass(frozen=True)
class Decoded:
    """Successfully decoded value.

    ``degraded`` lists dotted paths of nested subtrees that fell back to their
    raw parsed form; it is empty for a fully decoded tree.
    """

    value: Any
    degraded: tuple[str, ...] = ()

    fallback: ClassVar[bool] = False


@dataclass(frozen=True)
class RawFallback:
    """Input that could not be decoded, returned unchanged with the cause."""

    value: Any
    error: Exception

    fallback: ClassVar[bool] = True


DecodeResult = Decoded | RawFallback


def parse_xml(body: str | bytes) -> DecodeResult:
    """Parse an XML document and decode its typed content.

    Args:
        body: Raw response body.

    Returns:
        Decode result for the document root's content.

    Raises:
        XMLDecodeError: If the body is empty or not well-formed XML.
    """
    if not body or not body.strip():
        raise XMLDecodeError("empty XML document", body)
    try:
        document = xmltodict.parse(body, attr_prefix="", cdata_key=TEXT_KEY)
    except ExpatError as e:
        raise XMLDecodeError(f"malformed XML: {e}", body) from e

    root = next(iter(document.values()))
    return decode_types(root)


def decode_types(node: Any) -> DecodeResult:
    """Decode a parsed (attribute-merged) XML tree into native values."""
    degraded: list[str] = []
    try:
        value = _decode_value(node, "", degraded)
    except Exception as e:
        logger.debug("xml_decode_fallback", extra={"path": "", "error": repr(e)})
        return RawFallback(node, e)
    return Decoded(value, tuple(degraded))


def _decode_value(node: Any, path: str, degraded: list[str]) -> Any:
    if isinstance(node, dict):
        return _decode_object(node, path, degraded)
    if isinstance(node, list):
        return [_decode_member(m, f"{path}[{i}]", degraded) for i, m in enumerate(node)]
    if node is None:
        # empty element
        return ""
    return node


def _decode_object(node: dict[str, Any], path: str, degraded: list[str]) -> Any:
    result: dict[str, Any] = {}
    array_pending = False

    for key, item in node.items():
        child_path = f"{path}.{key}" if path else key

        if array_pending:
            # The field after type="array" holds the repeated element(s); it
            # replaces the whole object. Anything after it is dropped.
            if isinstance(item, list):
                return [
                    _decode_member(m, f"{child_path}[{i}]", degraded)
                    for i, m in enumerate(item)
                ]
            return [_decode_member(item, f"{child_path}[0]", degraded)]

        if isinstance(item, dict):
            result[key] = _decode_element(item, child_path, degraded)
        elif isinstance(item, list):
            result[key] = [
                _decode_member(m, f"{child_path}[{i}]", degraded) for i, m in enumerate(item)
            ]
        elif key == "type" and item == ARRAY_HINT:
            array_pending = True
        elif item is None:
            result[key] = ""
        else:
            result[key] = item

    if array_pending:
        # type="array" with no element after it: empty collection
        return []
    return result


def _decode_element(item: dict[str, Any], path: str, degraded: list[str]) -> Any:
    """Decode an element that carries attributes or children."""
    if "nil" in item:
        return ""

    text = item.get(TEXT_KEY)
    hint = item.get("type")
    if text:
        if hint == "datetime":
            return datetime.fromisoformat(text)
        if hint == "integer":
            return int(text)
        if hint == "float":
            return float(text)
        if hint == "boolean":
            return text == "true"

    return _decode_subtree(item, path, degraded)


def _decode_member(item: Any, path: str, degraded: list[str]) -> Any:
    """Decode one member of a repeated element outside array mode."""
    if isinstance(item, dict):
        return _decode_element(item, path, degraded)
    return _decode_value(item, path, degraded)


def _decode_subtree(item: Any, path: str, degraded: list[str]) -> Any:
    """Decode a nested object, falling back to its raw form on failure."""
    if not isinstance(item, dict):
        return _decode_value(item, path, degraded)

    nested: list[str] = []
    try:
        value = _decode_object(item, path, nested)
    except Exception as e:
        logger.debug("xml_decode_fallback", extra={"path": path, "error": repr(e)})
        degraded.append(path)
        return item
    degraded.extend(nested)
    return value
