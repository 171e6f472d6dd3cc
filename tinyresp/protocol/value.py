"""
RESP Value Model

This module defines the single decoded unit returned by the frame parser.

A Value is a tagged variant: its ``kind`` says which payload is meaningful
(``text`` for status/error/bulk lines, ``integer`` for integer replies,
``element_count``/``elements`` for arrays). Reading the payload of the
wrong kind goes through the named conversions below, which raise
CastError instead of returning garbage.
"""

import re
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Iterator, Optional, Sequence, Tuple

from .constants import ENCODING, ENCODING_ERRORS, INTEGER_WIDTHS
from .errors import CastError, IntegerOverflowError

_DECIMAL = re.compile(r"([-+]?)([0-9]+)")

# 2**63 has 19 digits; anything longer cannot fit in any supported width
_MAX_DIGITS = 19


class ValueKind(Enum):
    """Enumeration of decoded unit kinds."""
    INVALID = auto()    # Not a decoded unit; more bytes are needed
    STATUS = auto()
    ERROR = auto()
    INTEGER = auto()
    BULK = auto()
    MULTI_BULK = auto()
    NIL = auto()


def check_width(number: int, width: int) -> int:
    """
    Range-check ``number`` against a signed integer width.

    Raises:
        ValueError: If ``width`` is not one of 8, 16, 32 or 64
        IntegerOverflowError: If ``number`` does not fit
    """
    if width not in INTEGER_WIDTHS:
        raise ValueError(f"Unsupported integer width: {width}")

    limit = 1 << (width - 1)
    if not -limit <= number < limit:
        raise IntegerOverflowError(number, width)
    return number


def parse_decimal(text: str) -> Optional[int]:
    """
    Parse strict decimal text, returning None when it is not a number.

    Raises:
        IntegerOverflowError: If the number has more digits than a 64-bit
            integer can hold
    """
    match = _DECIMAL.fullmatch(text)
    if not match:
        return None

    sign, digits = match.groups()
    digits = digits.lstrip("0") or "0"
    if len(digits) > _MAX_DIGITS:
        raise IntegerOverflowError(text, 64)
    return int(sign + digits)


@dataclass(frozen=True)
class Value:
    """
    Represents one decoded RESP unit.

    Attributes:
        kind: Which wire type this unit is
        text: Payload of STATUS, ERROR and BULK units
        integer: Payload of INTEGER units
        element_count: Declared element count of a MULTI_BULK header
        elements: Nested values, filled in by the connection when it
            assembles an array; the parser always leaves this empty
    """
    kind: ValueKind
    text: Optional[str] = None
    integer: Optional[int] = None
    element_count: Optional[int] = None
    elements: Tuple["Value", ...] = ()

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def invalid(cls) -> "Value":
        """Create the 'not enough data yet' sentinel."""
        return cls(kind=ValueKind.INVALID)

    @classmethod
    def status(cls, text: str) -> "Value":
        """Create a status line value (+OK)."""
        return cls(kind=ValueKind.STATUS, text=text)

    @classmethod
    def error(cls, text: str) -> "Value":
        """Create an error line value (-ERR ...)."""
        return cls(kind=ValueKind.ERROR, text=text)

    @classmethod
    def from_int(cls, number: int) -> "Value":
        """Create an integer value."""
        return cls(kind=ValueKind.INTEGER, integer=number)

    @classmethod
    def bulk(cls, text: str) -> "Value":
        """Create a bulk string value."""
        return cls(kind=ValueKind.BULK, text=text)

    @classmethod
    def nil(cls) -> "Value":
        """Create a nil value ($-1 / *-1)."""
        return cls(kind=ValueKind.NIL)

    @classmethod
    def header(cls, count: int) -> "Value":
        """Create a bare array header as produced by the parser."""
        return cls(kind=ValueKind.MULTI_BULK, element_count=count)

    @classmethod
    def array(cls, elements: Sequence["Value"]) -> "Value":
        """Create an assembled array holding its elements."""
        elements = tuple(elements)
        return cls(kind=ValueKind.MULTI_BULK, element_count=len(elements), elements=elements)

    def with_elements(self, elements: Sequence["Value"]) -> "Value":
        """Return a copy of this header with its elements attached."""
        if not self.is_array():
            raise CastError(f"Cannot attach elements to {self.kind.name}")
        return replace(self, elements=tuple(elements))

    # ------------------------------------------------------------------
    # Tag tests
    # ------------------------------------------------------------------

    def is_string(self) -> bool:
        return self.kind == ValueKind.BULK

    def is_integer(self) -> bool:
        return self.kind == ValueKind.INTEGER

    def is_array(self) -> bool:
        return self.kind == ValueKind.MULTI_BULK

    def is_error(self) -> bool:
        return self.kind == ValueKind.ERROR

    def is_nil(self) -> bool:
        return self.kind == ValueKind.NIL

    def is_status(self) -> bool:
        return self.kind == ValueKind.STATUS

    def is_valid(self) -> bool:
        return self.kind != ValueKind.INVALID

    @property
    def raw(self) -> bytes:
        """The text payload as the bytes that arrived on the wire."""
        if self.text is None:
            return b""
        return self.text.encode(ENCODING, ENCODING_ERRORS)

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def to_bool(self) -> bool:
        """
        Check the truthiness of a reply.

        Integers are true when positive, status lines when they read "OK",
        bulk strings when non-empty and arrays when they hold elements.
        Every other kind is false.
        """
        if self.kind == ValueKind.INTEGER:
            return self.integer > 0
        if self.kind == ValueKind.STATUS:
            return self.text == "OK"
        if self.kind == ValueKind.BULK:
            return len(self.text) > 0
        if self.kind == ValueKind.MULTI_BULK:
            return len(self.elements) > 0
        return False

    def to_integer(self, width: int = 32) -> int:
        """
        Convert an INTEGER or numeric BULK value to a signed integer.

        Args:
            width: Target width in bits (8, 16, 32 or 64)

        Returns:
            The number, guaranteed to fit in ``width`` bits.

        Raises:
            CastError: If the kind has no integer meaning, or the bulk
                text is not a decimal number
            IntegerOverflowError: If the number does not fit in ``width``
        """
        if self.kind == ValueKind.INTEGER:
            return check_width(self.integer, width)

        if self.kind == ValueKind.BULK:
            try:
                number = parse_decimal(self.text)
            except IntegerOverflowError:
                raise IntegerOverflowError(self.text, width) from None
            if number is None:
                raise CastError(f"Cannot convert {self.text!r} to a {width}-bit integer")
            return check_width(number, width)

        raise CastError(f"Cannot cast {self.kind.name} to a {width}-bit integer")

    def to_text(self) -> str:
        """Return the value as plain text."""
        if self.kind == ValueKind.INTEGER:
            return str(self.integer)
        if self.kind in (ValueKind.STATUS, ValueKind.ERROR, ValueKind.BULK):
            return self.text
        if self.kind == ValueKind.MULTI_BULK:
            return str([element.to_text() for element in self.elements])
        return ""

    def to_diagnostic_text(self) -> str:
        """Return the value as text annotated with its kind, for display."""
        if self.kind == ValueKind.NIL:
            return "(Nil)"
        if self.kind == ValueKind.ERROR:
            return f"(Err) {self.text}"
        if self.kind == ValueKind.INTEGER:
            return f"(Integer) {self.integer}"
        if self.kind == ValueKind.STATUS:
            return f"(Status) {self.text}"
        if self.kind == ValueKind.BULK:
            return self.text
        if self.kind == ValueKind.MULTI_BULK:
            return str([element.to_diagnostic_text() for element in self.elements])
        return "(Invalid)"

    def __str__(self) -> str:
        return self.to_text()

    # ------------------------------------------------------------------
    # Iteration
    # ------------------------------------------------------------------

    def items(self) -> Iterator[Tuple[int, "Value"]]:
        """Yield (index, element) pairs; non-arrays yield nothing."""
        if not self.is_array():
            return
        yield from enumerate(self.elements)

    def __iter__(self) -> Iterator[Tuple[int, "Value"]]:
        return self.items()
