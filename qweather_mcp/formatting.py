"""ABOUTME: Text rendering for location lookups and forecasts.

Every outcome renders to exactly one deterministic text block. Records are
rendered in the order the provider delivered them.
"""

from typing import Optional

from .common.error_handling import CODE_NOT_AVAILABLE, QWeatherError
from .location import LocationQuery, ResolutionFailure
from .models import (
    DailyRecord,
    Forecast,
    HourlyForecast,
    HourlyRecord,
    Location,
    NowForecast,
    NowRecord,
)

DIVIDER = "------------------------"
MISSING = "N/A"


def _v(value: Optional[str]) -> str:
    return value if value not in (None, "") else MISSING


def has_records(forecast: Forecast) -> bool:
    """True if the payload variant carries the records its selector promises."""
    if isinstance(forecast, NowForecast):
        return forecast.now is not None
    if isinstance(forecast, HourlyForecast):
        return bool(forecast.hourly)
    return bool(forecast.daily)


# ============================================================================
# LOCATION LOOKUP
# ============================================================================

def format_location(location: Location) -> str:
    region = ", ".join(_v(level) for level in (location.adm2, location.adm1, location.country))
    return "\n".join([
        f"City: {location.name}",
        f"Region: {region}",
        f"Location ID: {location.id}",
        f"Latitude: {location.lat}",
        f"Longitude: {location.lon}",
    ])


def format_location_failure(failure: ResolutionFailure) -> str:
    return (
        f'Unable to find location information for "{failure.query.display}" '
        f"(API code/status: {failure.code}). {failure.cause.rstrip('.')}."
    )


# ============================================================================
# FORECASTS
# ============================================================================

def format_now(display: str, now: NowRecord) -> str:
    """Location header plus ten labeled lines in fixed order."""
    return "\n".join([
        f"Location: {display}",
        f"Observation time: {_v(now.obs_time)}",
        f"Condition: {_v(now.text)}",
        f"Temperature: {_v(now.temp)}°C",
        f"Feels like: {_v(now.feels_like)}°C",
        f"Wind direction: {_v(now.wind_dir)}",
        f"Wind scale: {_v(now.wind_scale)}",
        f"Humidity: {_v(now.humidity)}%",
        f"Precipitation: {_v(now.precip)}mm",
        f"Pressure: {_v(now.pressure)}hPa",
        f"Visibility: {_v(now.vis)}km",
    ])


def format_hour(hour: HourlyRecord) -> str:
    return "\n".join([
        f"Time: {_v(hour.fx_time)}",
        f"  Condition: {_v(hour.text)}, Temperature: {_v(hour.temp)}°C",
        f"  Humidity: {_v(hour.humidity)}%, Precipitation probability: {_v(hour.pop)}%",
        f"  Wind: {_v(hour.wind_dir)} scale {_v(hour.wind_scale)}",
        DIVIDER,
    ])


def format_day(day: DailyRecord) -> str:
    return "\n".join([
        f"Date: {_v(day.fx_date)} (Sunrise: {_v(day.sunrise)}, Sunset: {_v(day.sunset)})",
        f"  Day: {_v(day.text_day)}, Night: {_v(day.text_night)}",
        f"  High: {_v(day.temp_max)}°C, Low: {_v(day.temp_min)}°C",
        f"  Humidity: {_v(day.humidity)}%, Precipitation: {_v(day.precip)}mm",
        f"  Day wind: {_v(day.wind_dir_day)} scale {_v(day.wind_scale_day)}",
        f"  Night wind: {_v(day.wind_dir_night)} scale {_v(day.wind_scale_night)}",
        f"  UV index: {_v(day.uv_index)}",
        DIVIDER,
    ])


def format_unavailable(display: str, forecast: Forecast) -> str:
    """Message for a success code whose expected records are absent or empty."""
    if isinstance(forecast, NowForecast):
        return (
            f"Current weather data for {display} is incomplete or malformed. "
            f"(Code: {forecast.code})"
        )
    return (
        f"The {forecast.selector.value} forecast for {display} is unavailable: the data is "
        f"incomplete or this region has no such data. (Code: {forecast.code})"
    )


def format_forecast(display: str, forecast: Forecast) -> str:
    """Render a successful forecast payload, or the unavailable message."""
    if not has_records(forecast):
        return format_unavailable(display, forecast)

    if isinstance(forecast, NowForecast):
        return format_now(display, forecast.now)

    if isinstance(forecast, HourlyForecast):
        blocks = "\n".join(format_hour(hour) for hour in forecast.hourly)
        return f"Location: {display}\n{forecast.selector.value} hourly forecast:\n{blocks}"

    blocks = "\n".join(format_day(day) for day in forecast.daily)
    return f"Location: {display}\n{forecast.selector.value} daily forecast:\n{blocks}"


def format_forecast_failure(query: LocationQuery, error: Optional[QWeatherError]) -> str:
    """One line naming the location, the code, the message, and any romanization note."""
    code = error.code if error is not None else CODE_NOT_AVAILABLE
    message = error.message if error is not None else "No data was returned; check the location or API configuration."
    note = ""
    if query.transliterated:
        note = f' (tried converting "{query.original}" to "{query.lookup_token}" for the query)'
    return f"Unable to fetch weather for {query.display} (API code/status: {code}). {message}{note}"
