"""
Stdio transport implementation for codectx-mcp.

This module provides the stdio transport for local MCP clients,
handling newline-delimited JSON-RPC messages over stdin/stdout.
"""

import asyncio
import json
import logging
import signal
import sys
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from codectx_mcp.server import CodeContextMCPServer

logger = logging.getLogger(__name__)


def parse_message(line: bytes) -> dict[str, Any] | None:
    """
    Parse one newline-delimited JSON-RPC message.

    Args:
        line: Raw line without its trailing newline

    Returns:
        The message dict, or None for blank or malformed lines
    """
    if not line.strip():
        return None

    try:
        message = json.loads(line.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error(f"Failed to parse JSON message: {e}")
        return None

    if not isinstance(message, dict):
        logger.error("Ignoring non-object JSON-RPC message")
        return None
    return message


class StdioTransport:
    """
    Stdio transport for MCP server.

    Reads JSON-RPC messages from stdin and writes responses to stdout.
    Each request is handled in its own task so a slow semantic search does
    not block pings.
    """

    def __init__(self, server: "CodeContextMCPServer") -> None:
        """
        Initialize the stdio transport.

        Args:
            server: The MCP server instance to handle messages
        """
        self.server = server
        self._running = False
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._tasks: set[asyncio.Task] = set()
        self._write_lock = asyncio.Lock()

    async def start(self) -> None:
        """Start the transport, reading from stdin and writing to stdout."""
        self._running = True
        loop = asyncio.get_running_loop()

        self._reader = asyncio.StreamReader()
        protocol = asyncio.StreamReaderProtocol(self._reader)
        await loop.connect_read_pipe(lambda: protocol, sys.stdin)

        transport, _ = await loop.connect_write_pipe(
            asyncio.streams.FlowControlMixin, sys.stdout
        )
        self._writer = asyncio.StreamWriter(transport, protocol, self._reader, loop)

        logger.info("Stdio transport started")

        try:
            await self._read_loop()
        finally:
            self._running = False
            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)

    async def stop(self) -> None:
        """Stop the transport."""
        self._running = False
        if self._writer is not None:
            self._writer.close()
            try:
                await self._writer.wait_closed()
            except (BrokenPipeError, ConnectionResetError):
                pass
            self._writer = None

    async def _read_loop(self) -> None:
        """Main read loop for processing incoming messages."""
        assert self._reader is not None

        while self._running:
            try:
                line = await self._reader.readline()
            except asyncio.CancelledError:
                logger.info("Transport cancelled")
                raise

            if not line:
                logger.info("EOF received, shutting down")
                break

            message = parse_message(line.rstrip(b"\r\n"))
            if message is None:
                continue

            task = asyncio.create_task(self._handle_message(message))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _handle_message(self, message: dict[str, Any]) -> None:
        """
        Handle a single JSON-RPC message.

        Args:
            message: The parsed JSON-RPC message
        """
        try:
            response = await self.server.handle_message(message)
        except Exception as e:
            logger.error(f"Error handling message: {e}")
            if "id" not in message:
                return
            response = {
                "jsonrpc": "2.0",
                "id": message["id"],
                "error": {
                    "code": -32603,
                    "message": f"Internal error: {e}",
                },
            }

        if response is not None:
            await self._send_response(response)

    async def _send_response(self, response: dict[str, Any]) -> None:
        """
        Send a JSON-RPC response.

        Args:
            response: The response to send
        """
        if self._writer is None:
            logger.error("Cannot send response: writer not initialized")
            return

        data = (json.dumps(response) + "\n").encode("utf-8")
        async with self._write_lock:
            self._writer.write(data)
            await self._writer.drain()

        logger.debug(f"Sent response: {response.get('id', 'notification')}")


async def run_stdio_server(server: "CodeContextMCPServer") -> None:
    """
    Run the MCP server with stdio transport.

    Args:
        server: The MCP server instance to run
    """
    transport = StdioTransport(server)
    loop = asyncio.get_running_loop()
    main_task = asyncio.current_task()

    def signal_handler() -> None:
        logger.info("Received shutdown signal")
        if main_task is not None:
            main_task.cancel()

    try:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, signal_handler)
    except NotImplementedError:
        # add_signal_handler is unavailable on Windows event loops
        pass

    try:
        await transport.start()
    except asyncio.CancelledError:
        logger.info("Stdio server cancelled")
    finally:
        await transport.stop()
