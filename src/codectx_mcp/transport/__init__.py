"""
Transport layer implementations for codectx-mcp.

This module provides transport implementations for the MCP server,
primarily stdio for local MCP clients.
"""

from codectx_mcp.transport.stdio import StdioTransport, run_stdio_server

__all__ = ["StdioTransport", "run_stdio_server"]
