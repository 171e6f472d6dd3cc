"""
tinyresp: Redis Serialization Protocol codec

An incremental RESP frame parser, a multibulk request encoder and a typed
value model, with a small asyncio connection and console built on top.
"""

from .protocol import (
    CastError,
    ConnectionClosedError,
    IntegerOverflowError,
    ParseError,
    ProtocolError,
    RespError,
    Value,
    ValueKind,
    encode,
    encode_sequence,
    escape,
    line_to_multibulk,
    parse,
    to_bulk,
)

__version__ = "1.0.0"

__all__ = [
    "CastError",
    "ConnectionClosedError",
    "IntegerOverflowError",
    "ParseError",
    "ProtocolError",
    "RespError",
    "Value",
    "ValueKind",
    "encode",
    "encode_sequence",
    "escape",
    "line_to_multibulk",
    "parse",
    "to_bulk",
]
