"""Wire-format constants shared by the parser and the encoder."""

CRLF = b"\r\n"
CR = 0x0D
LF = 0x0A

# Leading type bytes
STATUS = ord("+")
ERROR = ord("-")
INTEGER = ord(":")
BULK = ord("$")
MULTI_BULK = ord("*")

ENCODING = "utf-8"
# Keeps non UTF-8 payload bytes round-trippable through Value.text
ENCODING_ERRORS = "surrogateescape"

# Signed integer widths accepted by Value.to_integer()
INTEGER_WIDTHS = (8, 16, 32, 64)
