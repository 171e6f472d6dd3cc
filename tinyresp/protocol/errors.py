"""
Error Taxonomy

Every exception raised by the codec and the connection derives from
RespError, so callers can catch the whole family at once or pick out the
kind they care about:

    ParseError            malformed frame; the stream is desynchronized
    ProtocolError         the server answered with a "-" error line
    CastError             a conversion is not defined for the value's kind
    IntegerOverflowError  the kind was right but the number does not fit
    ConnectionClosedError the transport gave up (peer closed, retries spent)
"""


class RespError(Exception):
    """Base class for all tinyresp errors."""


class ParseError(RespError):
    """Raised when a frame header or terminator cannot be interpreted."""


class ProtocolError(RespError):
    """
    Raised when the peer sends an error line ("-ERR ...").

    Attributes:
        message: The server's error text, verbatim
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CastError(RespError, TypeError):
    """Raised when a Value cannot be converted to the requested type."""


class IntegerOverflowError(RespError, OverflowError):
    """
    Raised when a numeric value does not fit in the requested width.

    Attributes:
        value: The offending number (int) or its decimal text
        width: Target width in bits
    """

    def __init__(self, value, width: int):
        super().__init__(f"Cannot convert {value} to a {width}-bit signed integer")
        self.value = value
        self.width = width


class ConnectionClosedError(RespError, ConnectionError):
    """Raised when the connection is lost and cannot be re-established."""
