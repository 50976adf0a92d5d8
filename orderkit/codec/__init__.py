"""
Codec — cyclic-safe serialization and sanitization of order snapshots.

    from orderkit import codec

    result = codec.sanitize(order.snapshot())
    text = codec.encode(result.sanitized)
    graph = codec.decode(text)
"""

from orderkit.codec._arena import CodecError, Graph, encode, decode
from orderkit.codec._sanitize import Removed, Sanitized, sanitize

__all__ = (
    "CodecError",
    "Graph",
    "encode",
    "decode",
    "Removed",
    "Sanitized",
    "sanitize",
)
