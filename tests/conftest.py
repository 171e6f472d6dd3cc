"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
from contextlib import closing
from typing import AsyncGenerator, Dict, List, Union

import pytest
import pytest_asyncio

from tinyresp.network.connection import RedisConnection
from tinyresp.protocol.parser import parse


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# ============================================================================
# Scripted RESP Server
# ============================================================================

Reply = Union[bytes, List[bytes]]


class ScriptedServer:
    """
    Minimal RESP server answering from a script.

    Each incoming request is decoded with the codec's own parser; the
    reply for its (upper-cased) command name is looked up in ``replies``.
    A list reply is written chunk by chunk with a short pause in between,
    so the client sees partial reads.

    Attributes:
        replies: Command name -> reply bytes (or list of chunks)
        received: Every request received, as a list of tokens
        drop_connections: Number of upcoming requests to answer by
            closing the socket instead of replying
    """

    def __init__(self, port: int):
        self.port = port
        self.replies: Dict[str, Reply] = {}
        self.received: List[List[str]] = []
        self.drop_connections = 0
        self.connections = 0
        self._server = None

    async def start(self) -> None:
        self._server = await asyncio.start_server(self._handle, '127.0.0.1', self.port)

    async def stop(self) -> None:
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None

    async def _handle(self, reader, writer) -> None:
        self.connections += 1
        buffer = bytearray()
        try:
            while True:
                tokens = await self._read_request(reader, buffer)
                if tokens is None:
                    break
                self.received.append(tokens)

                if self.drop_connections > 0:
                    self.drop_connections -= 1
                    break

                reply = self.replies.get(tokens[0].upper() if tokens else "", b"+OK\r\n")
                chunks = reply if isinstance(reply, list) else [reply]
                for chunk in chunks:
                    writer.write(chunk)
                    await writer.drain()
                    if len(chunks) > 1:
                        await asyncio.sleep(0.01)
        except ConnectionResetError:
            pass
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass

    async def _read_request(self, reader, buffer: bytearray):
        header = await self._read_unit(reader, buffer)
        if header is None:
            return None
        tokens = []
        for _ in range(header.element_count):
            element = await self._read_unit(reader, buffer)
            if element is None:
                return None
            tokens.append(element.text)
        return tokens

    async def _read_unit(self, reader, buffer: bytearray):
        while True:
            value = parse(buffer)
            if value.is_valid():
                return value
            data = await reader.read(4096)
            if not data:
                return None
            buffer.extend(data)


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


@pytest.fixture
def free_port() -> int:
    """Get a port nothing is listening on."""
    return find_free_port()


@pytest_asyncio.fixture
async def server(server_port: int) -> AsyncGenerator[ScriptedServer, None]:
    """Start a scripted RESP server for the duration of a test."""
    srv = ScriptedServer(server_port)
    await srv.start()

    yield srv

    await srv.stop()


@pytest_asyncio.fixture
async def connection(server: ScriptedServer) -> AsyncGenerator[RedisConnection, None]:
    """Create a connection to the scripted server."""
    conn = RedisConnection(host='127.0.0.1', port=server.port, timeout=2.0, retries=1)
    await conn.connect()

    yield conn

    await conn.close()


# ============================================================================
# Codec Fixtures
# ============================================================================

@pytest.fixture
def sample_stream() -> bytearray:
    """A buffer holding an array header, two bulks, an integer and a status."""
    return bytearray(b"*4\r\n$3\r\nGET\r\n$1\r\n*\r\n:123\r\n+A Status Message\r\n")


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that talk to a socket"
    )
