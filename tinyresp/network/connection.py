"""
Async Connection Module

This module implements the transport that sits on top of the codec: it owns
the socket, accumulates received bytes in a per-connection buffer, loops
the frame parser until a full reply is available and assembles array
replies from the flat sequence of units the parser returns.

Key behaviours:
- One request/reply exchange at a time per connection (asyncio.Lock)
- Nested arrays are assembled recursively from their headers
- Error lines inside an array become Error elements; at the top level
  they propagate as ProtocolError
- I/O failures trigger a reconnect and a resend, up to ``retries`` times
- A malformed frame closes the connection, since the stream can no longer
  be trusted
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from typing import Any, Optional

from ..config.settings import settings
from ..protocol.constants import ENCODING
from ..protocol.encoder import encode, escape
from ..protocol.errors import (
    ConnectionClosedError,
    IntegerOverflowError,
    ParseError,
    ProtocolError,
)
from ..protocol.parser import parse
from ..protocol.value import Value

logger = logging.getLogger(__name__)


class RedisConnection:
    """
    Asynchronous client connection speaking RESP.

    Usage:
        async with RedisConnection(port=6379) as conn:
            reply = await conn.send("SET", "key", "value")
            assert reply.to_bool()

            reply = await conn.send('EVAL "return 1" 0')
            print(reply.to_diagnostic_text())

    Attributes:
        host: Server address
        port: Server port
        timeout: Seconds to wait for reply bytes before giving up
        retries: Extra attempts after an I/O failure
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            timeout: float = None,
            retries: int = None,
    ):
        """
        Initialize the connection (no socket is opened yet).

        Args:
            host: Server address (default from settings)
            port: Server port (default from settings)
            timeout: Read timeout in seconds (default from settings)
            retries: Reconnect attempts on I/O failure (default from settings)
        """
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.timeout = timeout if timeout is not None else settings.READ_TIMEOUT
        self.retries = retries if retries is not None else settings.RETRIES

        self.reader: Optional[StreamReader] = None
        self.writer: Optional[StreamWriter] = None

        # Bytes received but not yet parsed
        self._buffer = bytearray()
        self._lock = asyncio.Lock()

        self._total_requests = 0
        self._reconnects = 0

    async def connect(self) -> None:
        """Open the socket if it is not already open."""
        if self.is_connected():
            return

        self.reader, self.writer = await asyncio.wait_for(
            asyncio.open_connection(self.host, self.port),
            timeout=settings.CONNECT_TIMEOUT,
        )
        self._buffer.clear()
        logger.debug(f"Connected to {self.host}:{self.port}")

    async def close(self) -> None:
        """Close the socket and drop any unparsed bytes."""
        writer = self.writer
        self.reader = None
        self.writer = None
        self._buffer.clear()

        if writer is None:
            return

        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            # Peer already went away
            pass
        logger.debug(f"Disconnected from {self.host}:{self.port}")

    def is_connected(self) -> bool:
        """Check if the socket is open."""
        return self.writer is not None and not self.writer.is_closing()

    async def send(self, command: str, *args: Any) -> Value:
        """
        Send a command and wait for its complete reply.

        ``send("SADD", "myset", 1)`` and ``send("SADD myset 1")`` are
        equivalent; the second form is how the console forwards typed lines.

        Args:
            command: Command name, or a whole command line
            *args: Command arguments

        Returns:
            The decoded reply, with array elements assembled.

        Raises:
            ProtocolError: If the server answered with an error line
            ParseError: If the reply is malformed (connection is closed)
            ConnectionClosedError: If the server cannot be reached after
                all retries
        """
        request = encode(command, *args)

        async with self._lock:
            self._total_requests += 1
            return await self._exchange(request)

    async def _exchange(self, request: bytes) -> Value:
        """Write one request and read its reply, reconnecting on I/O failure."""
        attempt = 0
        while True:
            try:
                await self.connect()
                logger.debug(f"-> {escape(request.decode(ENCODING, 'replace'))}")
                self.writer.write(request)
                await self.writer.drain()
                return await self.read_reply()

            except (ParseError, IntegerOverflowError):
                logger.error(f"Malformed reply from {self.host}:{self.port}, closing connection")
                await self.close()
                raise

            except (OSError, asyncio.TimeoutError) as exc:
                # ConnectionClosedError is an OSError too
                await self.close()
                if attempt >= self.retries:
                    raise ConnectionClosedError(
                        f"Lost connection to {self.host}:{self.port}: {exc or type(exc).__name__}"
                    ) from exc

                attempt += 1
                self._reconnects += 1
                logger.warning(
                    f"I/O failure talking to {self.host}:{self.port} ({exc!r}), "
                    f"reconnecting (attempt {attempt}/{self.retries})"
                )

    async def read_reply(self) -> Value:
        """
        Read one complete reply from the connection.

        For an array header this reads ``element_count`` further replies,
        recursing into nested arrays, and returns the assembled array.

        Raises:
            ProtocolError: If the reply is an error line
            ConnectionClosedError: If the peer closed mid-reply
        """
        value = await self._read_unit()

        if value.is_array() and value.element_count:
            elements = []
            for _ in range(value.element_count):
                try:
                    elements.append(await self.read_reply())
                except ProtocolError as exc:
                    # Keep draining the array; the error becomes an element
                    elements.append(Value.error(exc.message))
            value = value.with_elements(elements)

        return value

    async def _read_unit(self) -> Value:
        """Parse one unit, reading more bytes until the parser has enough."""
        if self.reader is None:
            raise ConnectionClosedError("Not connected")

        while True:
            value = parse(self._buffer)
            if value.is_valid():
                return value

            data = await asyncio.wait_for(
                self.reader.read(settings.READ_BUFFER_SIZE),
                timeout=self.timeout,
            )
            if not data:
                raise ConnectionClosedError(f"Connection closed by {self.host}:{self.port}")
            self._buffer.extend(data)

    def get_stats(self) -> dict:
        """
        Get connection statistics.

        Returns:
            Dictionary with the target address, connection state,
            request and reconnect counts.
        """
        return {
            "host": self.host,
            "port": self.port,
            "connected": self.is_connected(),
            "total_requests": self._total_requests,
            "reconnects": self._reconnects,
            "buffered_bytes": len(self._buffer),
        }

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
