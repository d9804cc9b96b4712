"""
QWeather MCP Server

MCP server exposing QWeather location lookup and weather forecast tools.
"""

__version__ = "0.1.0"

from .config import QWeatherSettings
from .client import QWeatherClient
from .location import LocationResolver
from .router import ToolRouter
from .server import build_router, create_server

__all__ = [
    "QWeatherSettings",
    "QWeatherClient",
    "LocationResolver",
    "ToolRouter",
    "build_router",
    "create_server",
]
