"""ABOUTME: Base class for the MCP server with logging setup and tool-call wiring.

Uses the low-level Server from the official MCP SDK so that argument validation
stays with the tool router and an unknown tool name surfaces as a protocol error
instead of a tool result.
"""

import logging
import sys
from typing import Any, Dict, List, Optional, Protocol

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from mcp.types import CallToolResult, TextContent

from .error_handling import UnknownToolError


def setup_logging(logger_name: str, level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the MCP server.

    Logs go to stderr; stdout carries the stdio protocol. The httpx request
    logger is quietened because it prints full query strings.

    Args:
        logger_name: Name of the logger (typically __name__)
        level: Logging level (default: logging.INFO)

    Returns:
        Configured logger instance
    """
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return logging.getLogger(logger_name)


def create_success_result(
    content: str,
    metadata: Optional[Dict[str, Any]] = None
) -> CallToolResult:
    """Create standardized success result.

    Args:
        content: The response text to return
        metadata: Optional metadata dictionary

    Returns:
        CallToolResult with standardized success format

    Examples:
        >>> result = create_success_result("City: Beijing")
        >>> result = create_success_result("Location: 101010100", {"days": "now"})
    """
    text_content = TextContent(type="text", text=content)
    if metadata:
        return CallToolResult(content=[text_content], metadata=metadata)
    return CallToolResult(content=[text_content])


class ToolHandler(Protocol):
    """What the server needs from a tool router."""

    def list_tools(self) -> List[types.Tool]: ...

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> CallToolResult: ...


class MCPServerBase:
    """Base class for the MCP server.

    Provides:
    - Low-level MCP server initialization
    - Consistent logging setup
    - list_tools / call_tool handlers that delegate to a tool router
    """

    def __init__(self, server_name: str, version: Optional[str] = None, level: int = logging.INFO):
        """Initialize MCP server base.

        Args:
            server_name: Name advertised to clients (e.g., "qweather")
            version: Server version advertised to clients (optional)
            level: Logging level
        """
        self.server_name = server_name
        self.server = Server(server_name, version=version)
        self.logger = setup_logging(__name__, level)
        self.router: Optional[ToolHandler] = None

    def get_logger(self) -> logging.Logger:
        return self.logger

    def get_server(self) -> Server:
        return self.server

    def register_router(self, router: ToolHandler) -> None:
        """Route list-tools and call-tool requests to the given router."""
        self.router = router

        @self.server.list_tools()
        async def _list_tools() -> List[types.Tool]:
            return router.list_tools()

        # Registered directly rather than through Server.call_tool(): that
        # decorator validates input against the schema and turns every
        # exception into a tool result.
        self.server.request_handlers[types.CallToolRequest] = self.handle_call_tool

    async def handle_call_tool(self, request: types.CallToolRequest) -> types.ServerResult:
        """Dispatch one call-tool request; unknown tools become protocol errors."""
        name = request.params.name
        arguments = request.params.arguments
        self.log_tool_start(name, arguments=arguments)

        try:
            result = await self.router.call_tool(name, arguments)
        except UnknownToolError as e:
            self.log_tool_error(name, e.kind.value, e.message)
            raise McpError(types.ErrorData(code=types.METHOD_NOT_FOUND, message=e.message))

        self.log_tool_complete(name, is_error=bool(result.isError))
        return types.ServerResult(result)

    async def run_stdio(self) -> None:
        """Serve requests over stdio until the client disconnects."""
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )

    def log_tool_start(self, tool_name: str, **params) -> None:
        """Log tool invocation with parameters.

        Args:
            tool_name: Name of the tool being invoked
            **params: Keyword arguments to log (will be formatted)

        Examples:
            >>> server.log_tool_start("get-weather", arguments={"location": "beijing"})
        """
        if params:
            param_str = ", ".join(f"{k}={v}" for k, v in params.items())
            self.logger.info(f"{tool_name} started: {param_str}")
        else:
            self.logger.info(f"{tool_name} started")

    def log_tool_complete(self, tool_name: str, **metrics) -> None:
        """Log tool completion with execution metrics.

        Args:
            tool_name: Name of the tool that completed
            **metrics: Execution metrics to log
        """
        if metrics:
            metric_str = ", ".join(f"{k}={v}" for k, v in metrics.items())
            self.logger.info(f"{tool_name} completed: {metric_str}")
        else:
            self.logger.info(f"{tool_name} completed")

    def log_tool_error(
        self,
        tool_name: str,
        error_code: str,
        error_message: str,
        **context
    ) -> None:
        """Log tool error with context.

        Args:
            tool_name: Name of the tool that failed
            error_code: Machine-readable error code
            error_message: Human-readable error message
            **context: Additional error context
        """
        context_str = ", ".join(f"{k}={v}" for k, v in context.items()) if context else ""
        if context_str:
            self.logger.error(f"{tool_name} error [{error_code}]: {error_message} ({context_str})")
        else:
            self.logger.error(f"{tool_name} error [{error_code}]: {error_message}")
