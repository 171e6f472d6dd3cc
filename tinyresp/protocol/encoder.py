"""
RESP Request Encoder

This module turns commands into the wire format the server expects: every
request is a multibulk (array) of bulk strings.

    >>> encode("GET", "*")
    b'*2\\r\\n$3\\r\\nGET\\r\\n$1\\r\\n*\\r\\n'

encode("SADD", "myset", 1), encode("SADD", ["myset", 1]) and
encode("SADD myset 1") all produce the same bytes. Arguments are joined
into one command line and then tokenized, so an argument containing a
space must be wrapped in double quotes to stay a single token.
"""

from typing import Any, List, Sequence

from .constants import CRLF, ENCODING, ENCODING_ERRORS


def encode(command: str, *args: Any) -> bytes:
    """
    Encode a command and its arguments as a multibulk request.

    A single list or tuple argument is treated as the argument sequence,
    see encode_sequence().

    Examples:
        >>> encode("TTL", "myset") == encode("TTL myset")
        True
        >>> encode("SREM", ["myset", "$3"]) == encode("SREM myset $3")
        True
    """
    if len(args) == 1 and isinstance(args[0], (list, tuple)):
        return encode_sequence(command, args[0])
    return line_to_multibulk(_join(command, args))


def encode_sequence(command: str, args: Sequence[Any]) -> bytes:
    """
    Encode a command whose arguments come from a sequence.

    A plain string is one argument, never a sequence of characters.
    """
    if isinstance(args, (str, bytes)):
        args = (args,)
    return line_to_multibulk(_join(command, args))


def line_to_multibulk(line: str) -> bytes:
    """
    Tokenize a command line and frame it as a multibulk request.

    Args:
        line: Command line such as 'EVAL "return 1" 0'

    Returns:
        Wire bytes: ``*<count>\\r\\n`` followed by one bulk frame per token.
    """
    tokens = tokenize(line)
    frames = [b"*" + str(len(tokens)).encode() + CRLF]
    frames.extend(to_bulk(token) for token in tokens)
    return b"".join(frames)


def tokenize(line: str) -> List[str]:
    """
    Split a command line on unquoted spaces.

    A double quote opens a token that runs up to the next double quote,
    spaces included; the quotes themselves are dropped. There is no escape
    for a quote inside a quoted token. Runs of spaces separate tokens
    without producing empty ones, but "" yields an empty token.
    """
    line = line.strip()
    tokens: List[str] = []
    current: List[str] = []
    pending = False  # current token exists even if empty ("")
    i = 0

    while i < len(line):
        char = line[i]
        i += 1

        if char == '"':
            pending = True
            end = line.find('"', i)
            if end == -1:
                end = len(line)
            current.append(line[i:end])
            i = end + 1
        elif char == " ":
            if pending or current:
                tokens.append("".join(current))
                current = []
                pending = False
        else:
            current.append(char)

    if pending or current:
        tokens.append("".join(current))

    return tokens


def to_bulk(text: str) -> bytes:
    """Frame one token as a bulk string; the length counts encoded bytes."""
    payload = text.encode(ENCODING, ENCODING_ERRORS)
    return b"$" + str(len(payload)).encode() + CRLF + payload + CRLF


def escape(text: str) -> str:
    r"""Make CRLF pairs visible for logging: '\r\n' becomes '\\r\\n'."""
    return text.replace("\r\n", "\\r\\n")


def _join(command: str, args: Sequence[Any]) -> str:
    parts = [command]
    parts.extend(_to_text(arg) for arg in args)
    return " ".join(parts)


def _to_text(arg: Any) -> str:
    """Natural text form of a request argument."""
    if isinstance(arg, bool):
        return "true" if arg else "false"
    if isinstance(arg, (bytes, bytearray)):
        return bytes(arg).decode(ENCODING, ENCODING_ERRORS)
    return str(arg)
