"""
Standard-stream transport.

Reads newline-delimited JSON-RPC messages from stdin and writes one response
line per request to stdout. stdout carries protocol traffic only; logs go to
stderr.

Shutdown: SIGINT/SIGTERM stop the read loop. A dispatch already in progress
runs to completion (bounded by the test-runner timeout) and its response is
written before the loop exits.
"""

import asyncio
import json
import logging
import os
import signal
import stat
import sys
from typing import IO, Any, TextIO

from ai_testing_mcp.protocol import ProtocolHandler, is_notification, parse_error_response

logger = logging.getLogger(__name__)

# Longest accepted message line (bytes)
MAX_LINE_BYTES = 16 * 1024 * 1024


def supports_pipe_transport(stream: IO[Any]) -> bool:
    """Return True if the event loop can attach a read pipe to the stream.

    Pipes, sockets and terminals qualify. Regular files (``serve < file``)
    do not.
    """
    mode = os.fstat(stream.fileno()).st_mode
    return stat.S_ISFIFO(mode) or stat.S_ISSOCK(mode) or stat.S_ISCHR(mode)


async def feed_from_stream(reader: asyncio.StreamReader, stream: IO[bytes]) -> None:
    """Copy a blocking binary stream into a StreamReader line by line.

    Each readline runs in the default executor. EOF is fed once the stream
    is exhausted.

    Args:
        reader: Reader consumed by StdioTransport.serve.
        stream: Binary stream, e.g. ``sys.stdin.buffer``.
    """
    loop = asyncio.get_running_loop()
    while True:
        line = await loop.run_in_executor(None, stream.readline)
        if not line:
            break
        reader.feed_data(line)
    reader.feed_eof()


class StdioTransport:
    """Line-oriented JSON-RPC loop over a StreamReader.

    Attributes:
        handler: Shared JSON-RPC method router
        output: Stream responses are written to (stdout by default)
        logger: Logger instance
    """

    def __init__(
        self,
        handler: ProtocolHandler,
        output: TextIO | None = None,
        logger_instance: logging.Logger | None = None,
    ) -> None:
        self.handler = handler
        self.output = output or sys.stdout
        self.logger = logger_instance or logger
        self._stop = asyncio.Event()

    def stop(self) -> None:
        """Request an orderly shutdown; safe to call from a signal handler."""
        self.logger.info("Shutdown requested")
        self._stop.set()

    def _write(self, response: dict[str, Any]) -> None:
        self.output.write(json.dumps(response) + "\n")
        self.output.flush()

    async def _process_line(self, line: bytes) -> None:
        try:
            message = json.loads(line)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            self.logger.error(f"Invalid JSON: {e}")
            self._write(parse_error_response(str(e)))
            return

        response = await self.handler.handle_message(message)
        if is_notification(message):
            self.logger.debug(f"Handled notification {message.get('method')}")
            return
        self._write(response)

    async def serve(self, reader: asyncio.StreamReader) -> int:
        """Process messages until EOF or a stop request.

        Args:
            reader: Source of newline-delimited messages.

        Returns:
            Process exit code (always 0).

        Example:
            >>> reader = asyncio.StreamReader()
            >>> reader.feed_data(b'{"jsonrpc": "2.0", "id": 1, "method": "ping"}\\n')
            >>> reader.feed_eof()
            >>> await StdioTransport(handler).serve(reader)
            0
        """
        while not self._stop.is_set():
            read = asyncio.ensure_future(reader.readline())
            stopped = asyncio.ensure_future(self._stop.wait())
            done, _ = await asyncio.wait({read, stopped}, return_when=asyncio.FIRST_COMPLETED)
            stopped.cancel()
            if read not in done:
                read.cancel()
                break

            try:
                line = read.result()
            except ValueError as e:
                # line longer than the reader limit; the reader has discarded it
                self.logger.error(f"Message too large: {e}")
                self._write(parse_error_response("message too large"))
                continue

            if not line:
                self.logger.info("EOF detected, shutting down")
                break
            line = line.strip()
            if not line:
                continue
            await self._process_line(line)

        self.logger.info("Stdio transport stopped")
        return 0

    async def run(self) -> int:
        """Serve stdin until EOF or SIGINT/SIGTERM.

        stdin is read through a pipe transport when it is a pipe, socket or
        terminal, and from a worker thread otherwise (redirected files).

        Returns:
            Process exit code.
        """
        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader(limit=MAX_LINE_BYTES)
        feeder: asyncio.Task[None] | None = None
        if supports_pipe_transport(sys.stdin):
            await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
        else:
            self.logger.debug("stdin is not a pipe, reading it in a worker thread")
            feeder = asyncio.create_task(feed_from_stream(reader, sys.stdin.buffer))

        signals = (signal.SIGINT, signal.SIGTERM)
        for sig in signals:
            loop.add_signal_handler(sig, self.stop)
        self.logger.info("Starting AI Testing MCP server on stdio...")
        try:
            return await self.serve(reader)
        finally:
            for sig in signals:
                loop.remove_signal_handler(sig)
            if feeder is not None:
                feeder.cancel()
