#!/usr/bin/env python3
"""
Interactive Console for tinyresp

Reads a command line, sends it to the server and prints the decoded reply
with its type annotation.

Usage:
    tinyresp                             # Connect to 127.0.0.1:6379
    tinyresp --host 10.0.0.5 --port 6380
    python -m tinyresp.console --debug   # Log wire traffic

Console conventions:
    exit                      - Leave the console
    (empty line)              - Ignored
    SET key "a value"         - Double quotes keep spaces inside one argument

Environment Variables:
    TINYRESP_HOST             - Server address
    TINYRESP_PORT             - Server port
    TINYRESP_READ_BUFFER_SIZE - Bytes requested per socket read
    TINYRESP_DEBUG            - Enable debug logging (true/false)
"""

import argparse
import asyncio
import logging
import sys
from typing import Callable

from .config.settings import settings
from .network.connection import RedisConnection
from .protocol.errors import ProtocolError, RespError

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default

logger = logging.getLogger(__name__)


class Console:
    """
    Line-oriented front end over a RedisConnection.

    Attributes:
        connection: The connection commands are sent through
        output: Callable receiving each line of output
    """

    def __init__(self, connection: RedisConnection, output: Callable[[str], None] = print):
        self.connection = connection
        self.output = output

    async def handle_line(self, line: str) -> bool:
        """
        Process one typed line.

        Args:
            line: Raw input line (trailing newline allowed)

        Returns:
            False when the console should stop, True otherwise.
        """
        command = line.rstrip("\r\n")

        if command == "exit":
            return False

        if not command.strip():
            return True

        try:
            reply = await self.connection.send(command)
            self.output(reply.to_diagnostic_text())
        except ProtocolError as exc:
            self.output(f"(error) {exc.message}")
        except RespError as exc:
            # Malformed replies close the connection; the next line reconnects
            self.output(f"(error) {exc}")

        return True

    def run(
            self,
            loop: asyncio.AbstractEventLoop,
            prompt: str = None,
            read_line: Callable[[str], str] = input,
    ) -> None:
        """
        Read lines until 'exit' or end of input.

        Lines are read synchronously on the calling thread, so Ctrl-C
        interrupts a pending prompt at once; each line is then handled on
        ``loop``.

        Args:
            loop: Event loop the connection belongs to
            prompt: Prompt text (default from settings)
            read_line: Function used to read one line
        """
        prompt = prompt if prompt is not None else settings.PROMPT

        while True:
            try:
                line = read_line(prompt)
            except EOFError:
                self.output("")
                break

            if not loop.run_until_complete(self.handle_line(line)):
                break


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="tinyresp: interactive RESP console",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Server host",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Server port",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.READ_TIMEOUT,
        help="Seconds to wait for a reply",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr),
        ]
    )


def run_console(host: str = None, port: int = None, timeout: float = None) -> None:
    """
    Open a connection and run the console until the user leaves.

    Usage:
        run_console(port=6379)
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    connection = RedisConnection(host=host, port=port, timeout=timeout)
    try:
        try:
            loop.run_until_complete(connection.connect())
        except (OSError, asyncio.TimeoutError) as exc:
            print(f"Could not connect to {connection.host}:{connection.port}: {exc}")
            raise SystemExit(1) from exc

        try:
            Console(connection).run(loop)
        finally:
            loop.run_until_complete(connection.close())
    finally:
        loop.close()


def main(argv=None) -> None:
    """Main entry point for the console."""
    args = parse_args(argv)
    setup_logging(debug=args.debug)

    logger.debug(f"Connecting to {args.host}:{args.port}")

    try:
        run_console(host=args.host, port=args.port, timeout=args.timeout)
    except KeyboardInterrupt:
        print("\nInterrupted.")


if __name__ == "__main__":
    main()
