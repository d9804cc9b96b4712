"""ABOUTME: Process entry point - reads flags and environment, then serves over stdio.

Command-line flags override QWEATHER_* environment variables. Missing settings
only produce warnings; each tool call then returns a configuration error.
"""

import argparse
import asyncio
import logging
import sys
from typing import Any, Dict, List, Optional

from .config import QWeatherSettings
from .server import create_server

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="qweather-mcp",
        description="MCP server for QWeather location lookup and forecasts (stdio transport).",
    )
    parser.add_argument("--api-key", "--apiKey", dest="api_key", help="QWeather API key")
    parser.add_argument("--api-url", "--apiUrl", dest="api_url", help="QWeather API base URL")
    parser.add_argument("--geo-api-url", dest="geo_api_url", help="Geocoding base URL (defaults to --api-url)")
    parser.add_argument("--geo-lookup-path", dest="geo_lookup_path", help="City lookup path, e.g. /geo/v2/city/lookup")
    parser.add_argument("--auth-mode", dest="auth_mode", choices=["query", "header"], help="How the API key is sent")
    parser.add_argument("--no-transliterate", dest="transliterate", action="store_false", default=None,
                        help="Do not convert Chinese names to pinyin")
    parser.add_argument("--log-level", dest="log_level", help="Logging level (default INFO)")
    return parser.parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> QWeatherSettings:
    """Build settings, letting explicitly given flags override the environment."""
    overrides: Dict[str, Any] = {k: v for k, v in vars(args).items() if v is not None}
    return QWeatherSettings(**overrides)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    settings = settings_from_args(args)
    server = create_server(settings)

    logger.info("Starting QWeather MCP server (stdio)...")
    try:
        asyncio.run(server.run_stdio())
    except KeyboardInterrupt:
        logger.info("QWeather MCP server stopped")
    except Exception as e:
        logger.error(f"QWeather MCP server crashed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
