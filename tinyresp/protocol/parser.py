"""
RESP Frame Parser

This module turns the front of a byte buffer into one decoded Value.

Frame format:
    +<text>\\r\\n              Status
    -<text>\\r\\n              Error (raised as ProtocolError)
    :<decimal>\\r\\n           Integer (64-bit signed)
    $<length>\\r\\n<bytes>\\r\\n  Bulk ($-1 is Nil)
    *<count>\\r\\n             Array header (*-1 is Nil)

The parser decodes exactly one unit per call and never recurses into array
elements: after a header with ``element_count == n`` the caller invokes
parse() n more times to collect the elements.

Outcomes of a call:
    - a Value: the unit's bytes have been removed from the buffer
    - Value.invalid(): not enough bytes yet, buffer untouched
    - ParseError: the bytes cannot be a RESP frame, buffer untouched
    - ProtocolError: the peer sent an error line, which has been consumed
"""

from typing import Optional

from .constants import (
    BULK, CR, ENCODING, ENCODING_ERRORS, ERROR, INTEGER, LF, MULTI_BULK, STATUS,
)
from .errors import IntegerOverflowError, ParseError, ProtocolError
from .value import Value, check_width, parse_decimal

_TYPE_BYTES = (STATUS, ERROR, INTEGER, BULK, MULTI_BULK)


def parse(buffer: bytearray) -> Value:
    """
    Parse one unit from the front of ``buffer``.

    Args:
        buffer: Caller-owned bytearray holding the bytes received so far

    Returns:
        The decoded Value, or Value.invalid() if the buffer does not yet
        hold a complete frame.

    Raises:
        ParseError: On an unknown type byte or a malformed header
        IntegerOverflowError: On an integer, length or count outside 64-bit range
        ProtocolError: On an error line from the peer

    Examples:
        >>> buf = bytearray(b":123\\r\\n+OK\\r\\n")
        >>> parse(buf).integer
        123
        >>> bytes(buf)
        b'+OK\\r\\n'
    """
    if not buffer:
        return Value.invalid()

    type_byte = buffer[0]
    if type_byte not in _TYPE_BYTES:
        raise ParseError(f"Unknown type byte {bytes([type_byte])!r}")

    line_end = _find_line_end(buffer)
    if line_end is None:
        return Value.invalid()

    line = bytes(buffer[1:line_end])
    offset = line_end + 2

    if type_byte == STATUS:
        value = Value.status(_decode(line))

    elif type_byte == ERROR:
        del buffer[:offset]
        raise ProtocolError(_decode(line))

    elif type_byte == INTEGER:
        value = Value.from_int(_parse_integer(line))

    elif type_byte == BULK:
        length = _parse_number(line, "bulk length")
        if length == -1:
            value = Value.nil()
        elif length < -1:
            raise ParseError(f"Invalid bulk length {length}")
        else:
            end = offset + length
            if end + 2 > len(buffer):
                return Value.invalid()
            if buffer[end] != CR or buffer[end + 1] != LF:
                raise ParseError("Bulk payload is not terminated by CRLF")
            value = Value.bulk(_decode(bytes(buffer[offset:end])))
            offset = end + 2

    else:
        count = _parse_number(line, "element count")
        if count == -1:
            value = Value.nil()
        elif count < -1:
            raise ParseError(f"Invalid element count {count}")
        else:
            value = Value.header(count)

    del buffer[:offset]
    return value


def _find_line_end(buffer: bytearray) -> Optional[int]:
    """
    Locate the CR that ends the header line.

    Returns None while the line (including its LF) is still incomplete.
    """
    cr = buffer.find(CR, 1)
    if cr == -1 or cr + 1 >= len(buffer):
        return None
    if buffer[cr + 1] != LF:
        raise ParseError("Header line is not terminated by CRLF")
    return cr


def _parse_number(line: bytes, what: str) -> int:
    """Checked decimal conversion for header numbers."""
    number = parse_decimal(line.decode("ascii", "replace"))
    if number is None:
        raise ParseError(f"Invalid {what}: {line!r}")
    return number


def _parse_integer(line: bytes) -> int:
    try:
        return check_width(_parse_number(line, "integer"), 64)
    except IntegerOverflowError:
        raise IntegerOverflowError(line.decode("ascii"), 64) from None


def _decode(payload: bytes) -> str:
    return payload.decode(ENCODING, ENCODING_ERRORS)
