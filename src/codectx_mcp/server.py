"""
MCP Server main entry point for codectx-mcp.

This module implements the MCP (Model Context Protocol) server that exposes
codectx tools to an AI client. The server handles tool registration,
request routing, and response formatting.

Server Configuration:
- Default transport: local stdio
- Server name: codectx
- Tools exposed as: codectx__<tool_name>
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Coroutine
from uuid import UUID, uuid4

import structlog
from pydantic import BaseModel

from codectx.config import Config, load_config
from codectx.errors import OperationCancelledError, PathAccessError
from codectx.main import CodeContextService

from codectx_mcp.schemas.inputs import (
    AdminPingInput,
    DirectoryInput,
    IgnorePatternsInput,
    NoArgsInput,
    OpenFileInput,
    ProjectPathInput,
    SearchCodeInput,
    SemanticSearchInput,
)
from codectx_mcp.schemas.outputs import ErrorEnvelope, ErrorInfo
from codectx_mcp.schemas.validation import get_json_schema, validate_input
from codectx_mcp.tools.admin import AdminTools, set_server_start_time
from codectx_mcp.tools.files import FileTools
from codectx_mcp.tools.ignore import IgnoreTools
from codectx_mcp.tools.search import SearchTools

logger = logging.getLogger(__name__)

# Server configuration
SERVER_NAME = "codectx"
SERVER_VERSION = "0.1.0"
PROTOCOL_VERSION = "2024-11-05"


# Type alias for tool handlers
ToolHandler = Callable[[Any, UUID], Coroutine[Any, Any, BaseModel]]


class ToolDefinition:
    """Definition of an MCP tool."""

    def __init__(
        self,
        name: str,
        description: str,
        input_schema: type[BaseModel],
        handler: ToolHandler,
    ) -> None:
        """
        Initialize a tool definition.

        Args:
            name: Tool name (without namespace prefix)
            description: Human-readable tool description
            input_schema: Pydantic model for input validation
            handler: Async function to handle tool calls
        """
        self.name = name
        self.description = description
        self.input_schema = input_schema
        self.handler = handler

    @property
    def full_name(self) -> str:
        """Get the full namespaced tool name."""
        return f"{SERVER_NAME}__{self.name}"

    def get_json_schema(self) -> dict[str, Any]:
        """Get JSON Schema for the tool's input."""
        return get_json_schema(self.input_schema)


class CodeContextMCPServer:
    """
    codectx MCP Server implementation.

    Handles MCP protocol messages, tool registration, and request routing.
    All tools share one CodeContextService, so the semantic index built by
    the first search is reused for the lifetime of the server.
    """

    def __init__(
        self,
        config: Config | None = None,
        service: CodeContextService | None = None,
    ) -> None:
        """
        Initialize the MCP server.

        Args:
            config: Configuration; loaded from the working directory if omitted
            service: Pre-built service (mainly for tests)
        """
        self.service = service or CodeContextService(config or load_config())
        self._tools: dict[str, ToolDefinition] = {}
        self._initialized = False

        self._admin_tools = AdminTools(self.service)
        self._file_tools = FileTools(self.service)
        self._search_tools = SearchTools(self.service)
        self._ignore_tools = IgnoreTools(self.service)

        self._register_tools()
        set_server_start_time()

    def _register_tools(self) -> None:
        """Register all available tools."""
        # Admin tools
        self._register_tool(
            ToolDefinition(
                name="hello",
                description="Connectivity check. Returns a fixed greeting.",
                input_schema=NoArgsInput,
                handler=self._admin_tools.hello,
            )
        )

        self._register_tool(
            ToolDefinition(
                name="admin_ping",
                description=(
                    "Health check. Optionally returns diagnostics including whether "
                    "semantic search is available and how many snippets are indexed."
                ),
                input_schema=AdminPingInput,
                handler=self._admin_tools.admin_ping,
            )
        )

        # File tools
        self._register_tool(
            ToolDefinition(
                name="list_projects",
                description="List all .csproj files under the base directory.",
                input_schema=NoArgsInput,
                handler=self._file_tools.list_projects,
            )
        )

        self._register_tool(
            ToolDefinition(
                name="list_projects_in_dir",
                description="List all .csproj files under a specific directory.",
                input_schema=DirectoryInput,
                handler=self._file_tools.list_projects_in_dir,
            )
        )

        self._register_tool(
            ToolDefinition(
                name="list_solutions",
                description="List all .sln files under the base directory.",
                input_schema=NoArgsInput,
                handler=self._file_tools.list_solutions,
            )
        )

        self._register_tool(
            ToolDefinition(
                name="list_files",
                description="List .NET source files directly inside a project directory.",
                input_schema=ProjectPathInput,
                handler=self._file_tools.list_files,
            )
        )

        self._register_tool(
            ToolDefinition(
                name="list_source_files",
                description="List .NET source files anywhere under a project directory.",
                input_schema=ProjectPathInput,
                handler=self._file_tools.list_source_files,
            )
        )

        self._register_tool(
            ToolDefinition(
                name="open_file",
                description=(
                    "Read a file inside the base directory. Large files are truncated. "
                    "Files matching ignore patterns cannot be opened."
                ),
                input_schema=OpenFileInput,
                handler=self._file_tools.open_file,
            )
        )

        self._register_tool(
            ToolDefinition(
                name="set_base_directory",
                description=(
                    "Set the directory all file access is restricted to. "
                    "The semantic index is rebuilt on the next search."
                ),
                input_schema=DirectoryInput,
                handler=self._file_tools.set_base_directory,
            )
        )

        self._register_tool(
            ToolDefinition(
                name="get_base_directory",
                description="Get the current base directory.",
                input_schema=NoArgsInput,
                handler=self._file_tools.get_base_directory,
            )
        )

        # Search tools
        self._register_tool(
            ToolDefinition(
                name="search_code",
                description="Case-insensitive text search across .NET source files.",
                input_schema=SearchCodeInput,
                handler=self._search_tools.search_code,
            )
        )

        self._register_tool(
            ToolDefinition(
                name="semantic_search",
                description=(
                    "Search code by meaning using embeddings. Describe what the code does "
                    "in natural language. Results include file, line span, a similarity "
                    "score (0-100) and the enclosing scope."
                ),
                input_schema=SemanticSearchInput,
                handler=self._search_tools.semantic_search,
            )
        )

        # Ignore pattern tools
        self._register_tool(
            ToolDefinition(
                name="add_ignore_patterns",
                description="Add glob patterns for files to exclude from listings and search.",
                input_schema=IgnorePatternsInput,
                handler=self._ignore_tools.add_ignore_patterns,
            )
        )

        self._register_tool(
            ToolDefinition(
                name="remove_ignore_patterns",
                description="Remove user ignore patterns. Default patterns cannot be removed.",
                input_schema=IgnorePatternsInput,
                handler=self._ignore_tools.remove_ignore_patterns,
            )
        )

        self._register_tool(
            ToolDefinition(
                name="clear_ignore_patterns",
                description="Remove all user ignore patterns.",
                input_schema=NoArgsInput,
                handler=self._ignore_tools.clear_ignore_patterns,
            )
        )

        self._register_tool(
            ToolDefinition(
                name="get_ignore_patterns",
                description="List default and user ignore patterns.",
                input_schema=NoArgsInput,
                handler=self._ignore_tools.get_ignore_patterns,
            )
        )

        self._register_tool(
            ToolDefinition(
                name="get_state_file_location",
                description="Get the path of the file storing user ignore patterns.",
                input_schema=NoArgsInput,
                handler=self._ignore_tools.get_state_file_location,
            )
        )

    def _register_tool(self, tool: ToolDefinition) -> None:
        """Register a tool with the server."""
        self._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.full_name}")

    def get_tool_list(self) -> list[dict[str, Any]]:
        """Get the list of available tools in MCP format."""
        return [
            {
                "name": tool.full_name,
                "description": tool.description,
                "inputSchema": tool.get_json_schema(),
            }
            for tool in self._tools.values()
        ]

    async def shutdown(self) -> None:
        """Release service resources."""
        await self.service.shutdown()

    async def handle_message(self, message: dict[str, Any]) -> dict[str, Any] | None:
        """
        Handle an incoming MCP message.

        Args:
            message: The JSON-RPC message

        Returns:
            Response message or None for notifications
        """
        method = message.get("method")
        msg_id = message.get("id")
        params = message.get("params") or {}

        logger.debug(f"Handling message: method={method}, id={msg_id}")

        try:
            if method == "initialize":
                return self._handle_initialize(msg_id, params)

            elif method in ("initialized", "notifications/initialized"):
                # Notification, no response needed
                self._initialized = True
                return None

            elif method == "tools/list":
                return self._handle_tools_list(msg_id)

            elif method == "tools/call":
                return await self._handle_tool_call(msg_id, params)

            elif method == "ping":
                return self._make_response(msg_id, {})

            elif method == "shutdown":
                await self.shutdown()
                return self._make_response(msg_id, {})

            else:
                return self._make_error_response(
                    msg_id,
                    -32601,
                    f"Method not found: {method}",
                )

        except Exception as e:
            logger.exception(f"Error handling message: {e}")
            return self._make_error_response(
                msg_id,
                -32603,
                f"Internal error: {e}",
            )

    def _handle_initialize(
        self,
        msg_id: Any,
        params: dict[str, Any],
    ) -> dict[str, Any]:
        """Handle initialize request."""
        client_info = params.get("clientInfo", {})
        logger.info(
            f"Initialize from client: {client_info.get('name', 'unknown')} "
            f"v{client_info.get('version', '?')}"
        )

        return self._make_response(
            msg_id,
            {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {
                    "tools": {"listChanged": False},
                },
                "serverInfo": {
                    "name": SERVER_NAME,
                    "version": SERVER_VERSION,
                },
            },
        )

    def _handle_tools_list(self, msg_id: Any) -> dict[str, Any]:
        """Handle tools/list request."""
        return self._make_response(
            msg_id,
            {"tools": self.get_tool_list()},
        )

    async def _handle_tool_call(
        self,
        msg_id: Any,
        params: dict[str, Any],
    ) -> dict[str, Any]:
        """Handle tools/call request."""
        tool_name = params.get("name", "")
        arguments = params.get("arguments") or {}

        # Strip server prefix if present
        if tool_name.startswith(f"{SERVER_NAME}__"):
            tool_name = tool_name[len(SERVER_NAME) + 2:]

        if tool_name not in self._tools:
            return self._make_error_response(
                msg_id,
                -32602,
                f"Unknown tool: {tool_name}",
            )

        tool = self._tools[tool_name]
        request_id = uuid4()

        try:
            validated_input = validate_input(tool.input_schema, arguments)
            result = await tool.handler(validated_input, request_id)
            result_dict = result.model_dump(mode="json")

            return self._make_tool_result(
                msg_id,
                json.dumps(result_dict, indent=2, default=str),
                is_error=False,
            )

        except ValueError as e:
            return self._make_tool_error(msg_id, request_id, "VALIDATION_ERROR", str(e), False)

        except PathAccessError as e:
            return self._make_tool_error(msg_id, request_id, "PATH_ERROR", str(e), False)

        except OperationCancelledError as e:
            return self._make_tool_error(msg_id, request_id, "CANCELLED", str(e), True)

        except Exception as e:
            logger.exception(f"Error in tool {tool_name}: {e}")
            return self._make_tool_error(msg_id, request_id, "INTERNAL_ERROR", str(e), True)

    def _make_tool_result(self, msg_id: Any, text: str, is_error: bool) -> dict[str, Any]:
        """Wrap tool output text in an MCP content block."""
        return self._make_response(
            msg_id,
            {
                "content": [{"type": "text", "text": text}],
                "isError": is_error,
            },
        )

    def _make_tool_error(
        self,
        msg_id: Any,
        request_id: UUID,
        code: str,
        message: str,
        retryable: bool,
    ) -> dict[str, Any]:
        """Create a tool result carrying an ErrorEnvelope."""
        error_response = ErrorEnvelope(
            request_id=request_id,
            error=ErrorInfo(code=code, message=message, retryable=retryable),
        )
        return self._make_tool_result(
            msg_id,
            json.dumps(error_response.model_dump(mode="json"), indent=2),
            is_error=True,
        )

    def _make_response(
        self,
        msg_id: Any,
        result: dict[str, Any],
    ) -> dict[str, Any]:
        """Create a JSON-RPC response."""
        return {
            "jsonrpc": "2.0",
            "id": msg_id,
            "result": result,
        }

    def _make_error_response(
        self,
        msg_id: Any,
        code: int,
        message: str,
    ) -> dict[str, Any]:
        """Create a JSON-RPC error response."""
        return {
            "jsonrpc": "2.0",
            "id": msg_id,
            "error": {
                "code": code,
                "message": message,
            },
        }


def create_server(
    base_dir: str | None = None,
    config: Config | None = None,
) -> CodeContextMCPServer:
    """
    Create an MCP server instance.

    Args:
        base_dir: Optional base directory (defaults to the working directory)
        config: Optional configuration; discovered from base_dir if omitted

    Returns:
        Configured CodeContextMCPServer instance
    """
    if config is None:
        config = load_config(base_dir=Path(base_dir) if base_dir else None)
    return CodeContextMCPServer(config=config)


async def run_server(server: CodeContextMCPServer) -> None:
    """
    Run the MCP server with stdio transport.

    Args:
        server: The server instance to run
    """
    from codectx_mcp.transport.stdio import run_stdio_server

    try:
        await run_stdio_server(server)
    finally:
        await server.shutdown()


def configure_structlog(level: int) -> None:
    """Route codectx's structlog events through stdlib logging handlers."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def main() -> None:
    """Main entry point for the codectx-mcp server."""
    import argparse

    parser = argparse.ArgumentParser(
        description="codectx-mcp - MCP tools for semantic search over .NET code"
    )
    parser.add_argument(
        "--base-dir",
        type=str,
        default=None,
        help="Base directory (defaults to the working directory)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Log file path (logs to stderr if not specified)",
    )

    args = parser.parse_args()

    # Configure logging
    log_handlers: list[logging.Handler] = []

    if args.log_file:
        file_handler = logging.FileHandler(args.log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        log_handlers.append(file_handler)
    else:
        # stdout carries JSON-RPC, so logs go to stderr
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        log_handlers.append(stderr_handler)

    log_level = getattr(logging, args.log_level)
    logging.basicConfig(level=log_level, handlers=log_handlers)
    configure_structlog(log_level)

    logger.info(f"Starting codectx-mcp server v{SERVER_VERSION}")
    logger.info(f"Protocol version: {PROTOCOL_VERSION}")

    if args.base_dir:
        logger.info(f"Base directory: {args.base_dir}")

    server = create_server(args.base_dir)

    try:
        asyncio.run(run_server(server))
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception as e:
        logger.exception(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
