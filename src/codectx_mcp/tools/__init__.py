"""
MCP Tools for codectx-mcp server.

This module provides all tool implementations organized by domain:
- admin: Connectivity and diagnostics (hello, admin_ping)
- files: Workspace browsing (projects, solutions, source files, open_file)
- search: Text and semantic search
- ignore: Ignore pattern management
"""

from codectx_mcp.tools.admin import AdminTools
from codectx_mcp.tools.files import FileTools
from codectx_mcp.tools.ignore import IgnoreTools
from codectx_mcp.tools.search import SearchTools

__all__ = [
    "AdminTools",
    "FileTools",
    "IgnoreTools",
    "SearchTools",
]
