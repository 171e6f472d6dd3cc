"""Protocol module for tinyresp: value model, frame parser and request encoder."""

from .encoder import encode, encode_sequence, escape, line_to_multibulk, to_bulk
from .errors import (
    CastError,
    ConnectionClosedError,
    IntegerOverflowError,
    ParseError,
    ProtocolError,
    RespError,
)
from .parser import parse
from .value import Value, ValueKind

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
