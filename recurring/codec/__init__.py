"""XML encoding and typed decoding."""

from .decoder import Decoded, DecodeResult, RawFallback, decode_types, parse_xml
from .encoder import encode_body

__all__ = [
    "Decoded",
    "DecodeResult",
    "RawFallback",
    "decode_types",
    "parse_xml",
    "encode_body",
]
