"""ABOUTME: Tool router - validates arguments and runs the two QWeather tool flows.

Flow per call: validate -> (resolve) -> dispatch -> format. Every failure inside a
flow becomes a text result; only an unknown tool name raises (UnknownToolError).
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from mcp import types
from mcp.types import CallToolResult
from pydantic import ValidationError

from .client import QWeatherClient
from .common.error_handling import (
    ErrorKind,
    QWeatherError,
    UnknownToolError,
    create_configuration_error,
    create_error_result,
    create_validation_error,
)
from .common.mcp_base import create_success_result
from .common.validation import flatten_validation_error
from .formatting import (
    format_forecast,
    format_forecast_failure,
    format_location,
    format_location_failure,
    has_records,
)
from .location import LocationResolver, ResolutionFailure
from .models import FORECAST_SELECTOR_VALUES, Forecast, LocationIdArguments, WeatherArguments

logger = logging.getLogger(__name__)

# ============================================================================
# TOOL DESCRIPTORS
# ============================================================================

WEATHER_TOOL = "get-weather"
LOCATION_TOOL = "get_location_id"

# Alternate spellings accepted on call (not listed)
TOOL_ALIASES: Dict[str, str] = {
    "get_weather": WEATHER_TOOL,
}

TOOLS: List[types.Tool] = [
    types.Tool(
        name=WEATHER_TOOL,
        description=(
            "Get the weather forecast for a location. Native-script (Chinese) city names "
            "are converted to pinyin and resolved to a LocationID before querying."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "location": {
                    "type": "string",
                    "description": (
                        "LocationID or 'longitude,latitude' pair with at most two decimals "
                        "(e.g. 101010100 or 116.41,39.92). City names in pinyin or English "
                        "(e.g. beijing) are also accepted; Chinese names (e.g. 北京) are "
                        "converted to pinyin and looked up first."
                    ),
                },
                "days": {
                    "type": "string",
                    "enum": FORECAST_SELECTOR_VALUES,
                    "description": (
                        "Forecast type. now: current conditions, 24h/72h/168h: hourly "
                        "forecast, 3d/7d/10d/15d/30d: daily forecast"
                    ),
                    "default": "now",
                },
            },
            "required": ["location"],
        },
    ),
    types.Tool(
        name=LOCATION_TOOL,
        description=(
            "Look up the LocationID and geographic details for a city name (Chinese, "
            "pinyin or English), a 'longitude,latitude' pair, a LocationID or an Adcode."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "city_name": {
                    "type": "string",
                    "description": (
                        "Place name (e.g. '北京' or 'beijing'), 'longitude,latitude' pair "
                        "(e.g. 116.41,39.92), LocationID, or Adcode (China only)."
                    ),
                },
            },
            "required": ["city_name"],
        },
    ),
]


def _refer_metadata(forecast: Forecast) -> Dict[str, Any]:
    if forecast.refer is None:
        return {}
    return {"sources": forecast.refer.sources, "license": forecast.refer.license}


class ToolRouter:
    """Entry point for tool calls: name + arguments -> CallToolResult."""

    def __init__(self, client: QWeatherClient, resolver: LocationResolver):
        self.client = client
        self.resolver = resolver
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Awaitable[CallToolResult]]] = {
            WEATHER_TOOL: self.get_weather,
            LOCATION_TOOL: self.get_location_id,
        }

    def list_tools(self) -> List[types.Tool]:
        return list(TOOLS)

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> CallToolResult:
        """Run a tool and always return a result, unless the tool is unknown.

        Raises:
            UnknownToolError: If the name is not a served tool or alias
        """
        canonical = TOOL_ALIASES.get(name, name)
        handler = self._handlers.get(canonical)
        if handler is None:
            logger.error(f"Unknown tool requested: {name}")
            raise UnknownToolError(name)

        try:
            return await handler(arguments if arguments is not None else {})
        except Exception as e:
            logger.error(f"Unexpected error in tool '{name}': {e}", exc_info=True)
            return create_error_result(
                f'Internal error while running tool "{name}": {e}',
                kind=ErrorKind.INTERNAL,
            )

    # ========================================================================
    # get_location_id
    # ========================================================================

    async def get_location_id(self, arguments: Dict[str, Any]) -> CallToolResult:
        """Resolve a location token as given; failure is reported without any fallback."""
        try:
            args = LocationIdArguments.model_validate(arguments)
        except ValidationError as e:
            problems = flatten_validation_error(e)
            logger.warning(f"{LOCATION_TOOL} validation failed: {problems}")
            return create_validation_error(LOCATION_TOOL, problems)

        # Sent as given; the lookup endpoint accepts native script
        resolution = await self.resolver.resolve_token(args.city_name, transliterate=False)

        if isinstance(resolution, ResolutionFailure):
            if resolution.kind is ErrorKind.CONFIGURATION:
                return create_configuration_error(resolution.cause)
            return create_error_result(
                format_location_failure(resolution),
                kind=resolution.kind,
                error_code=resolution.code,
                additional_metadata={"location_query": args.city_name},
            )

        return create_success_result(
            format_location(resolution),
            {"location_id": resolution.id, "location_query": args.city_name},
        )

    # ========================================================================
    # get-weather
    # ========================================================================

    async def get_weather(self, arguments: Dict[str, Any]) -> CallToolResult:
        """Fetch and render a forecast.

        Native-script input is romanized and geocoded first. If geocoding fails the
        romanized token itself is sent to the forecast endpoint, which does its own
        name matching.
        """
        try:
            args = WeatherArguments.model_validate(arguments)
        except ValidationError as e:
            problems = flatten_validation_error(e)
            logger.warning(f"{WEATHER_TOOL} validation failed: {problems}")
            return create_validation_error(WEATHER_TOOL, problems)

        query = self.resolver.prepare(args.location)
        effective_location = query.lookup_token

        if query.transliterated:
            resolution = await self.resolver.resolve(query)
            if isinstance(resolution, ResolutionFailure):
                if resolution.kind is ErrorKind.CONFIGURATION:
                    return create_configuration_error(resolution.cause)
                logger.warning(
                    f"Could not resolve '{query.original}' via '{query.lookup_token}' "
                    f"({resolution.cause}); querying weather with '{query.lookup_token}' directly"
                )
            else:
                effective_location = resolution.id

        logger.info(
            f"Weather query: location='{effective_location}' (display '{query.display}'), "
            f"days={args.days.value}"
        )

        try:
            forecast = await self.client.fetch_forecast(effective_location, args.days)
        except QWeatherError as e:
            if e.kind is ErrorKind.CONFIGURATION:
                return create_configuration_error(e.message)
            return create_error_result(
                format_forecast_failure(query, e),
                kind=e.kind,
                error_code=e.code,
                additional_metadata={"location": query.display, "days": args.days.value},
            )

        text = format_forecast(query.display, forecast)
        metadata = {"location": query.display, "days": args.days.value, **_refer_metadata(forecast)}

        if not has_records(forecast):
            logger.warning(f"{args.days.value} payload for '{effective_location}' had no records")
            return create_error_result(
                text,
                kind=ErrorKind.DATA_SHAPE,
                error_code=forecast.code,
                additional_metadata=metadata,
            )

        return create_success_result(text, metadata)
