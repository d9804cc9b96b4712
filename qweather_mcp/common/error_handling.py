"""ABOUTME: Shared error handling for the QWeather MCP tools.

Provides the closed set of error kinds, the exception types that carry them
between layers, provider status code descriptions, and helpers that turn a
failure into a standardized CallToolResult.
"""

from enum import Enum
from typing import Optional, Dict, Any
from mcp.types import TextContent, CallToolResult


# =============================================================================
# Error Kinds
# =============================================================================

class ErrorKind(str, Enum):
    """Every failure the tool flows can produce."""
    CONFIGURATION = "configuration_error"
    VALIDATION = "validation_error"
    TRANSPORT = "transport_error"
    PROVIDER = "provider_error"
    DATA_SHAPE = "data_shape_error"
    UNKNOWN_TOOL = "unknown_tool"
    # Unanticipated exception caught at the router boundary
    INTERNAL = "internal_error"


# Placeholder used in text when no provider/HTTP code is available
CODE_NOT_AVAILABLE: str = "N/A"

# Code used for network failures that never produced an HTTP response
CODE_FETCH_ERROR: str = "FETCH_ERROR"

# Provider-internal success code
PROVIDER_SUCCESS_CODE: str = "200"

# Documented QWeather status codes (other than 200)
PROVIDER_STATUS_MESSAGES: Dict[str, str] = {
    "204": "The request succeeded but no data is available for this region",
    "400": "Request error, possibly a missing or invalid parameter",
    "401": "Authentication failed, check the API key",
    "402": "Request quota exceeded or account balance exhausted",
    "403": "Access denied, check the key permissions",
    "404": "The requested data or location does not exist",
    "429": "Too many requests, the rate limit was exceeded",
    "500": "Provider internal error or timeout",
}


# =============================================================================
# Exceptions
# =============================================================================

class QWeatherError(Exception):
    """Classified failure raised by the client and caught at the router boundary.

    Attributes:
        kind: Which branch of the error taxonomy this is
        code: Provider or HTTP status code as text, or "N/A"
        message: Human-readable message, safe to show to callers
        status_code: HTTP status if a response was received
        body: Raw response body, for server-side logging only
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        code: str = CODE_NOT_AVAILABLE,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.code = code
        self.status_code = status_code
        self.body = body

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value}, code={self.code!r}, message={self.message!r})"


class UnknownToolError(QWeatherError):
    """Raised for a tool name the router does not serve.

    This is the only failure that propagates past the router as a hard fault.
    """

    def __init__(self, tool_name: str):
        super().__init__(ErrorKind.UNKNOWN_TOOL, f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


def describe_provider_code(code: str) -> Optional[str]:
    """Return the documented meaning of a provider status code, if known."""
    return PROVIDER_STATUS_MESSAGES.get(code)


# =============================================================================
# Result Creation
# =============================================================================

def create_error_result(
    error_message: str,
    kind: ErrorKind,
    error_code: str = CODE_NOT_AVAILABLE,
    additional_metadata: Optional[Dict[str, Any]] = None
) -> CallToolResult:
    """Create a standardized error CallToolResult.

    The text is returned to the caller as-is; it must never contain credentials.

    Args:
        error_message: Human-readable error text
        kind: Error kind (see ErrorKind)
        error_code: Provider/HTTP code, or "N/A"
        additional_metadata: Additional context (optional)

    Returns:
        CallToolResult carrying a single text block with isError set

    Example:
        result = create_error_result(
            error_message="Configuration error: QWeather API key is not configured.",
            kind=ErrorKind.CONFIGURATION,
        )
    """
    metadata = {
        "error_type": kind.value,
        "error_code": error_code,
    }

    if additional_metadata:
        metadata.update(additional_metadata)

    return CallToolResult(
        content=[TextContent(type="text", text=error_message)],
        isError=True,
        metadata=metadata
    )


def create_configuration_error(problem: str) -> CallToolResult:
    """Create a configuration error naming what is missing.

    Args:
        problem: Description of the problem (e.g. "QWeather API key is not configured")

    Returns:
        CallToolResult with configuration error
    """
    return create_error_result(
        error_message=f"Configuration error: {problem}.",
        kind=ErrorKind.CONFIGURATION,
    )


def create_validation_error(tool_name: str, problems: str) -> CallToolResult:
    """Create a validation error for malformed tool arguments.

    Args:
        tool_name: Tool whose arguments failed validation
        problems: Flattened "path: reason" list

    Returns:
        CallToolResult with validation error
    """
    return create_error_result(
        error_message=f"Invalid arguments for {tool_name}: {problems}",
        kind=ErrorKind.VALIDATION,
        additional_metadata={"tool": tool_name}
    )
