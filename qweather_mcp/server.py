"""ABOUTME: QWeather MCP server assembly.

Builds the component graph from one immutable settings object:
settings -> client -> resolver -> router -> MCP server.
"""

import logging
from typing import Optional

import httpx

from . import __version__
from .client import QWeatherClient
from .common.mcp_base import MCPServerBase
from .config import QWeatherSettings
from .location import LocationResolver
from .router import ToolRouter

SERVER_NAME = "qweather"


def build_router(
    settings: QWeatherSettings,
    http_client: Optional[httpx.AsyncClient] = None,
) -> ToolRouter:
    """Wire the client, resolver and router for the given settings."""
    client = QWeatherClient(settings, http_client=http_client)
    resolver = LocationResolver(client, transliterate=settings.transliterate)
    return ToolRouter(client, resolver)


def create_server(
    settings: Optional[QWeatherSettings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> MCPServerBase:
    """Create the MCP server with both tools registered.

    Args:
        settings: Configuration (read from the environment if omitted)
        http_client: Shared HTTP client (optional)

    Returns:
        MCPServerBase ready to run
    """
    settings = settings or QWeatherSettings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    server = MCPServerBase(SERVER_NAME, version=__version__, level=level)
    settings.warn_if_incomplete()
    server.register_router(build_router(settings, http_client=http_client))
    return server
