"""
Administrative tools for codectx-mcp.

These tools provide connectivity checks and diagnostics:
- hello: Fixed greeting for connection tests
- admin_ping: Health check with optional engine diagnostics
"""

import logging
import platform
import sys
import time
from typing import Any
from uuid import UUID

from codectx.main import CodeContextService

from codectx_mcp.schemas.inputs import AdminPingInput, NoArgsInput
from codectx_mcp.schemas.outputs import AdminPingOutput, HelloOutput

logger = logging.getLogger(__name__)

HELLO_MESSAGE = "hello, claude."

# Server start time for uptime calculation
_server_start_time: float | None = None


def set_server_start_time() -> None:
    """Set the server start time (called when server starts)."""
    global _server_start_time
    _server_start_time = time.time()


def get_uptime() -> float:
    """Get server uptime in seconds."""
    if _server_start_time is None:
        return 0.0
    return time.time() - _server_start_time


class AdminTools:
    """Connectivity and diagnostics tools."""

    def __init__(self, service: CodeContextService) -> None:
        self.service = service

    async def hello(self, input_data: NoArgsInput, request_id: UUID) -> HelloOutput:
        """Return a fixed greeting."""
        return HelloOutput(request_id=request_id, message=HELLO_MESSAGE)

    async def admin_ping(
        self,
        input_data: AdminPingInput,
        request_id: UUID,
    ) -> AdminPingOutput:
        """
        Health check and diagnostics.

        Args:
            input_data: Validated input parameters
            request_id: Unique request identifier

        Returns:
            AdminPingOutput with server status
        """
        logger.info(f"admin_ping: echo={input_data.echo}, diagnostics={input_data.include_diagnostics}")

        from codectx_mcp import __version__

        diagnostics: dict[str, Any] | None = None
        if input_data.include_diagnostics:
            diagnostics = {
                "python_version": sys.version.split()[0],
                "platform": platform.platform(),
                **self.service.get_stats(),
            }

        return AdminPingOutput(
            request_id=request_id,
            echo=input_data.echo,
            server_version=__version__,
            uptime_seconds=get_uptime(),
            diagnostics=diagnostics,
        )
