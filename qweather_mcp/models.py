"""ABOUTME: Pydantic models for tool arguments and QWeather payloads.

Tool argument models validate caller input. Provider record models mirror the
QWeather JSON (camelCase aliases). The forecast payload is an explicit sum type
chosen by the selector that was requested, never by probing the response body.
"""

from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common.validation import validate_token_field


# ============================================================================
# FORECAST SELECTOR
# ============================================================================

class ForecastKind(str, Enum):
    """Shape of the payload a selector produces."""
    INSTANT = "instant"
    HOURLY = "hourly"
    DAILY = "daily"


class ForecastSelector(str, Enum):
    """Valid values for the `days` argument."""
    NOW = "now"
    HOURS_24 = "24h"
    HOURS_72 = "72h"
    HOURS_168 = "168h"
    DAYS_3 = "3d"
    DAYS_7 = "7d"
    DAYS_10 = "10d"
    DAYS_15 = "15d"
    DAYS_30 = "30d"

    @property
    def kind(self) -> ForecastKind:
        if self is ForecastSelector.NOW:
            return ForecastKind.INSTANT
        if self.value.endswith("h"):
            return ForecastKind.HOURLY
        return ForecastKind.DAILY

    @property
    def path(self) -> str:
        """Forecast endpoint path for this selector."""
        return f"/v7/weather/{self.value}"


FORECAST_SELECTOR_VALUES: List[str] = [selector.value for selector in ForecastSelector]


# ============================================================================
# TOOL ARGUMENTS
# ============================================================================

class LocationIdArguments(BaseModel):
    """Input schema for get_location_id tool."""

    city_name: str = Field(
        ...,
        description="City name (native script, pinyin or English), 'lon,lat', LocationID or Adcode"
    )

    @field_validator("city_name")
    @classmethod
    def validate_city_name(cls, v: str) -> str:
        return validate_token_field(v, field_name="city_name")


class WeatherArguments(BaseModel):
    """Input schema for get-weather tool."""

    location: str = Field(
        ...,
        description="LocationID, 'lon,lat' pair, or city name (e.g. '101010100', '116.41,39.92', 'beijing')"
    )
    days: ForecastSelector = Field(
        default=ForecastSelector.NOW,
        description="now: current conditions, 24h/72h/168h: hourly, 3d/7d/10d/15d/30d: daily"
    )

    @field_validator("location")
    @classmethod
    def validate_location(cls, v: str) -> str:
        return validate_token_field(v, field_name="location")


# ============================================================================
# PROVIDER RECORDS
# ============================================================================

class ProviderModel(BaseModel):
    """Base for QWeather records: camelCase aliases, unknown fields ignored."""

    model_config = ConfigDict(
        populate_by_name=True, extra="ignore", frozen=True, coerce_numbers_to_str=True
    )


class Location(ProviderModel):
    """One geocoding candidate from the city lookup endpoint."""

    name: str
    id: str
    lat: str
    lon: str
    adm1: Optional[str] = None
    adm2: Optional[str] = None
    country: Optional[str] = None
    tz: Optional[str] = None
    utc_offset: Optional[str] = Field(default=None, alias="utcOffset")
    type: Optional[str] = None
    rank: Optional[str] = None
    fx_link: Optional[str] = Field(default=None, alias="fxLink")


class NowRecord(ProviderModel):
    obs_time: Optional[str] = Field(default=None, alias="obsTime")
    temp: Optional[str] = None
    feels_like: Optional[str] = Field(default=None, alias="feelsLike")
    text: Optional[str] = None
    wind_dir: Optional[str] = Field(default=None, alias="windDir")
    wind_scale: Optional[str] = Field(default=None, alias="windScale")
    humidity: Optional[str] = None
    precip: Optional[str] = None
    pressure: Optional[str] = None
    vis: Optional[str] = None
    cloud: Optional[str] = None
    dew: Optional[str] = None


class HourlyRecord(ProviderModel):
    fx_time: Optional[str] = Field(default=None, alias="fxTime")
    temp: Optional[str] = None
    text: Optional[str] = None
    wind_dir: Optional[str] = Field(default=None, alias="windDir")
    wind_scale: Optional[str] = Field(default=None, alias="windScale")
    humidity: Optional[str] = None
    pop: Optional[str] = None
    precip: Optional[str] = None
    pressure: Optional[str] = None
    cloud: Optional[str] = None
    dew: Optional[str] = None


class DailyRecord(ProviderModel):
    fx_date: Optional[str] = Field(default=None, alias="fxDate")
    sunrise: Optional[str] = None
    sunset: Optional[str] = None
    temp_max: Optional[str] = Field(default=None, alias="tempMax")
    temp_min: Optional[str] = Field(default=None, alias="tempMin")
    text_day: Optional[str] = Field(default=None, alias="textDay")
    text_night: Optional[str] = Field(default=None, alias="textNight")
    wind_dir_day: Optional[str] = Field(default=None, alias="windDirDay")
    wind_scale_day: Optional[str] = Field(default=None, alias="windScaleDay")
    wind_dir_night: Optional[str] = Field(default=None, alias="windDirNight")
    wind_scale_night: Optional[str] = Field(default=None, alias="windScaleNight")
    humidity: Optional[str] = None
    precip: Optional[str] = None
    pressure: Optional[str] = None
    vis: Optional[str] = None
    uv_index: Optional[str] = Field(default=None, alias="uvIndex")


class Refer(ProviderModel):
    """Attribution metadata attached to provider responses."""

    sources: List[str] = Field(default_factory=list)
    license: List[str] = Field(default_factory=list)


# ============================================================================
# FORECAST SUM TYPE
# ============================================================================

class NowForecast(ProviderModel):
    kind: Literal[ForecastKind.INSTANT] = ForecastKind.INSTANT
    selector: ForecastSelector = ForecastSelector.NOW
    code: str
    now: Optional[NowRecord] = None
    refer: Optional[Refer] = None


class HourlyForecast(ProviderModel):
    kind: Literal[ForecastKind.HOURLY] = ForecastKind.HOURLY
    selector: ForecastSelector
    code: str
    hourly: List[HourlyRecord] = Field(default_factory=list)
    refer: Optional[Refer] = None


class DailyForecast(ProviderModel):
    kind: Literal[ForecastKind.DAILY] = ForecastKind.DAILY
    selector: ForecastSelector
    code: str
    daily: List[DailyRecord] = Field(default_factory=list)
    refer: Optional[Refer] = None


Forecast = Union[NowForecast, HourlyForecast, DailyForecast]

FORECAST_MODELS = {
    ForecastKind.INSTANT: NowForecast,
    ForecastKind.HOURLY: HourlyForecast,
    ForecastKind.DAILY: DailyForecast,
}
