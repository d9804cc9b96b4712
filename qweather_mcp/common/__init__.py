"""ABOUTME: Common MCP server utilities and shared infrastructure."""

from .mcp_base import MCPServerBase, create_success_result, setup_logging
from .error_handling import (
    # Error kinds and exceptions
    ErrorKind,
    QWeatherError,
    UnknownToolError,
    # Error creation functions
    create_error_result,
    create_configuration_error,
    create_validation_error,
)

__all__ = [
    "MCPServerBase",
    "create_success_result",
    "setup_logging",
    # Error kinds and exceptions
    "ErrorKind",
    "QWeatherError",
    "UnknownToolError",
    # Error creation functions
    "create_error_result",
    "create_configuration_error",
    "create_validation_error",
]
