"""
codectx-mcp: MCP Server for codectx

This module provides the MCP (Model Context Protocol) server implementation
for codectx. It exposes workspace browsing, text search, semantic search and
ignore-pattern tools under the `codectx` namespace, accessible as:
    codectx__<tool_name>

Example:
    codectx__semantic_search
    codectx__list_projects
    codectx__add_ignore_patterns
"""

__version__ = "0.1.0"

from codectx_mcp.server import create_server, main

__all__ = [
    "create_server",
    "main",
    "__version__",
]
