"""
Tests for the RESP request encoder

These tests verify:
- encode() / encode_sequence(): command + arguments to multibulk bytes
- line_to_multibulk(): tokenizing with double-quote grouping
- to_bulk() and escape() helpers

Run with: python -m pytest tests/test_encoder.py -v
"""

import pytest

from tinyresp.protocol.encoder import (
    encode,
    encode_sequence,
    escape,
    line_to_multibulk,
    to_bulk,
    tokenize,
)
from tinyresp.protocol.parser import parse

LUA = "return redis.call('set','foo','bar')"


class TestToBulk:
    """Test single bulk frames."""

    def test_to_bulk(self):
        assert to_bulk("$2") == b"$2\r\n$2\r\n"

    def test_to_bulk_empty(self):
        assert to_bulk("") == b"$0\r\n\r\n"

    def test_to_bulk_counts_bytes(self):
        assert to_bulk("héllo") == b"$6\r\nh\xc3\xa9llo\r\n"


class TestLineToMultibulk:
    """Test tokenizing and framing a command line."""

    def test_simple_line(self):
        assert line_to_multibulk("GET *") == b"*2\r\n$3\r\nGET\r\n$1\r\n*\r\n"

    def test_quoted_token_keeps_spaces(self):
        expected = (
            b"*3\r\n$4\r\nEVAL\r\n"
            + f"${len(LUA)}\r\n{LUA}\r\n".encode()
            + b"$1\r\n0\r\n"
        )
        assert line_to_multibulk(f'EVAL "{LUA}" 0') == expected

    def test_two_quoted_tokens_trailing_space(self):
        frame = f"${len(LUA)}\r\n{LUA}\r\n".encode()
        assert line_to_multibulk(f'"{LUA}" "{LUA}" ') == b"*2\r\n" + frame + frame

    def test_surrounding_whitespace_trimmed(self):
        assert line_to_multibulk("  PING  ") == b"*1\r\n$4\r\nPING\r\n"

    def test_empty_line(self):
        assert line_to_multibulk("") == b"*0\r\n"


class TestTokenize:
    """Test the tokenizer directly."""

    def test_eval_tokens(self):
        assert tokenize('EVAL "return 1" 0') == ["EVAL", "return 1", "0"]

    def test_repeated_spaces(self):
        assert tokenize("SET  key   value") == ["SET", "key", "value"]

    def test_empty_quoted_token(self):
        assert tokenize('SET key ""') == ["SET", "key", ""]

    def test_quote_inside_token(self):
        assert tokenize('SET k a"b c"d') == ["SET", "k", "ab cd"]

    def test_unterminated_quote_runs_to_end(self):
        assert tokenize('ECHO "hello world') == ["ECHO", "hello world"]


class TestEncode:
    """Test the encode() entry points."""

    def test_variadic_matches_line(self):
        """Test encode with arguments equals encoding the joined line."""
        assert encode("SADD", "myset", 1) == encode("SADD myset 1")

    def test_sequence_matches_line(self):
        assert encode("SREM", ["myset", "$3", "$4"]) == encode("SREM myset $3 $4")
        assert encode("SREM", "myset", "$3", "$4") == encode("SREM myset $3 $4")

    def test_single_argument_forms(self):
        assert encode("TTL", "myset") == encode("TTL myset")
        assert encode("TTL", ["myset"]) == encode("TTL myset")
        assert encode("GET", "*") == encode("GET *") == encode("GET", ["*"])

    def test_sequence_string_is_one_argument(self):
        """Test a plain string is not exploded per character."""
        assert encode_sequence("GET", "mykey") == encode("GET mykey")

    def test_tuple_sequence(self):
        assert encode("DEL", ("a", "b")) == encode("DEL a b")

    @pytest.mark.parametrize("arg, text", [
        (1, "1"),
        (1.2, "1.2"),
        (True, "true"),
        (False, "false"),
        (b"Batman", "Batman"),
        ("Batman", "Batman"),
    ])
    def test_argument_text(self, arg, text: str):
        assert encode("SADD", "myset", arg) == encode(f"SADD myset {text}")

    def test_object_uses_str(self):
        class Point:
            def __str__(self):
                return "1,2"

        assert encode("SADD", "points", Point()) == encode("SADD points 1,2")

    def test_output_parses_back(self):
        """Test the request is a header followed by bulk strings."""
        buffer = bytearray(encode("SET", "key", "héllo"))
        header = parse(buffer)
        assert header.element_count == 3
        assert [parse(buffer).text for _ in range(3)] == ["SET", "key", "héllo"]
        assert len(buffer) == 0


class TestEscape:
    """Test CRLF escaping for display."""

    def test_escape(self):
        assert escape("+OK\r\n") == "+OK\\r\\n"

    def test_escape_lone_cr_untouched(self):
        assert escape("a\rb") == "a\rb"
