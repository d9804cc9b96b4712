"""ABOUTME: QWeather server configuration loaded once at startup.

Values come from QWEATHER_* environment variables, an optional .env file, or
explicit keyword arguments (used by the launcher for command-line flags). The
settings object is frozen and handed to each component at construction time.
"""

import logging
from typing import List, Literal, Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Geocoding lookup path; some deployments serve it under /geo/v2/city/lookup
DEFAULT_GEO_LOOKUP_PATH = "/v2/city/lookup"

# Header used when auth_mode == "header"
API_KEY_HEADER = "X-QW-Api-Key"

# Query parameter used when auth_mode == "query"
API_KEY_PARAM = "key"


class QWeatherSettings(BaseSettings):
    """QWeather API configuration from environment."""

    model_config = SettingsConfigDict(
        env_prefix="QWEATHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    api_key: Optional[SecretStr] = None
    api_url: Optional[str] = None
    geo_api_url: Optional[str] = None
    geo_lookup_path: str = DEFAULT_GEO_LOOKUP_PATH
    auth_mode: Literal["query", "header"] = "query"
    transliterate: bool = True
    log_level: str = "INFO"

    @property
    def weather_base_url(self) -> str:
        """Forecast API base URL without a trailing slash, or "" if unset."""
        return (self.api_url or "").rstrip("/")

    @property
    def geo_base_url(self) -> str:
        """Geocoding API base URL; falls back to the forecast base URL."""
        return (self.geo_api_url or self.api_url or "").rstrip("/")

    @property
    def api_key_value(self) -> str:
        """Plain API key, or "" if unset. Never log the return value."""
        return self.api_key.get_secret_value() if self.api_key else ""

    def missing_settings(self) -> List[str]:
        """Names of required settings that are absent."""
        missing = []
        if not self.api_key_value:
            missing.append("QWeather API key")
        if not self.weather_base_url:
            missing.append("QWeather API base URL")
        return missing

    def warn_if_incomplete(self) -> None:
        """Log a startup warning for each missing setting; never raises."""
        for name in self.missing_settings():
            logger.warning(
                f"{name} is not set. Tool calls will return a configuration error "
                f"until it is provided (QWEATHER_* environment or command-line flag)."
            )
