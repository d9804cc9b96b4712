"""ABOUTME: QWeather API client - geocoding lookup and forecast dispatch.

Every request carries the API key (query parameter or header, per settings),
is attempted exactly once, and is classified into success or a QWeatherError
of a specific ErrorKind. Configuration problems are detected before any
network I/O.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError

from .common.error_handling import (
    CODE_FETCH_ERROR,
    CODE_NOT_AVAILABLE,
    PROVIDER_SUCCESS_CODE,
    ErrorKind,
    QWeatherError,
    describe_provider_code,
)
from .common.http_utils import http_get, is_success, redact_url
from .config import API_KEY_HEADER, API_KEY_PARAM, QWeatherSettings
from .models import FORECAST_MODELS, Forecast, ForecastKind, ForecastSelector, Location

logger = logging.getLogger(__name__)

# Payload field that holds the records for each forecast kind
PAYLOAD_FIELDS: Dict[ForecastKind, str] = {
    ForecastKind.INSTANT: "now",
    ForecastKind.HOURLY: "hourly",
    ForecastKind.DAILY: "daily",
}

# Longest slice of a response body quoted in a user-visible message
BODY_EXCERPT_LENGTH = 200


def excerpt(text: str, limit: int = BODY_EXCERPT_LENGTH) -> str:
    """Collapse whitespace to single spaces and truncate, for one-line messages."""
    collapsed = " ".join(str(text).split())
    if len(collapsed) > limit:
        return f"{collapsed[:limit]}..."
    return collapsed


def parse_provider_error(body: str, status_code: int) -> Optional[QWeatherError]:
    """Recognize a structured QWeather error body on a non-2xx response.

    Two shapes are known:
        {"error": {"status": 401, "title": "...", "detail": "..."}}
        {"code": "401", "message": "..."}

    Returns:
        A PROVIDER error carrying the provider's code and message, or None if
        the body is not one of the known shapes.
    """
    try:
        data = json.loads(body)
    except ValueError:
        return None

    if not isinstance(data, dict):
        return None

    error = data.get("error")
    if isinstance(error, dict) and (error.get("detail") or error.get("title")):
        code = str(error.get("status") or status_code)
        title = error.get("title") or "Unknown Error"
        detail = error.get("detail") or "No detail provided."
        return QWeatherError(
            ErrorKind.PROVIDER,
            f"QWeather API error: {excerpt(title)}. Detail: {excerpt(detail)}",
            code=code,
            status_code=status_code,
            body=body,
        )

    if data.get("code"):
        code = str(data["code"])
        message = data.get("message") or body
        return QWeatherError(
            ErrorKind.PROVIDER,
            f"QWeather API error (code {code}): {excerpt(message)}",
            code=code,
            status_code=status_code,
            body=body,
        )

    return None


class QWeatherClient:
    """Async client for the QWeather geocoding and forecast endpoints."""

    def __init__(self, settings: QWeatherSettings, http_client: Optional[httpx.AsyncClient] = None):
        """
        Args:
            settings: Immutable server configuration
            http_client: Shared client (optional); one is created per request otherwise
        """
        self.settings = settings
        self.http_client = http_client

    def _check_configured(self, base_url: str) -> None:
        if not self.settings.api_key_value:
            raise QWeatherError(ErrorKind.CONFIGURATION, "QWeather API key is not configured")
        if not base_url:
            raise QWeatherError(ErrorKind.CONFIGURATION, "QWeather API base URL is not configured")

    def _auth(self, params: Dict[str, str]) -> Tuple[Dict[str, str], Dict[str, str]]:
        """Attach the API key to query params or headers."""
        if self.settings.auth_mode == "header":
            return dict(params), {API_KEY_HEADER: self.settings.api_key_value}
        return {**params, API_KEY_PARAM: self.settings.api_key_value}, {}

    async def request(self, base_url: str, path: str, params: Dict[str, str]) -> Dict[str, Any]:
        """Issue one GET against the provider and return the decoded success body.

        Raises:
            QWeatherError: CONFIGURATION before any I/O, TRANSPORT for network
                failures and unrecognized non-2xx responses, PROVIDER for known
                error bodies or a non-200 provider code, DATA_SHAPE for a body
                that is not a JSON object.
        """
        self._check_configured(base_url)

        url = f"{base_url}{path}"
        query, headers = self._auth(params)
        loggable_url = redact_url(url, params)
        logger.info(f"QWeather request: GET {loggable_url}")

        try:
            response = await http_get(url, headers=headers, params=query, client=self.http_client)
        except httpx.HTTPError as e:
            logger.error(f"QWeather request failed: GET {loggable_url}: {type(e).__name__}: {e}")
            raise QWeatherError(
                ErrorKind.TRANSPORT,
                f"Request failed: {type(e).__name__}: {e}",
                code=CODE_FETCH_ERROR,
            )

        if not is_success(response.status_code):
            body = response.text
            logger.error(f"HTTP error {response.status_code} for GET {loggable_url}: {body}")
            provider_error = parse_provider_error(body, response.status_code)
            if provider_error is not None:
                raise provider_error
            raise QWeatherError(
                ErrorKind.TRANSPORT,
                f"HTTP error! status: {response.status_code}, body: {excerpt(body)}",
                code=str(response.status_code),
                status_code=response.status_code,
                body=body,
            )

        try:
            data = response.json()
        except ValueError:
            logger.error(f"Non-JSON response for GET {loggable_url}: {response.text}")
            raise QWeatherError(
                ErrorKind.DATA_SHAPE,
                "Provider returned a response that is not valid JSON",
                code=str(response.status_code),
                status_code=response.status_code,
                body=response.text,
            )

        if not isinstance(data, dict):
            logger.error(f"Unexpected response shape for GET {loggable_url}: {response.text}")
            raise QWeatherError(
                ErrorKind.DATA_SHAPE,
                "Provider returned an unexpected response shape",
                code=str(response.status_code),
                status_code=response.status_code,
                body=response.text,
            )

        code = str(data.get("code", PROVIDER_SUCCESS_CODE))
        if code != PROVIDER_SUCCESS_CODE:
            logger.error(f"QWeather business error code {code} for GET {loggable_url}: {response.text}")
            message = f"QWeather API business error. Code: {code}"
            description = describe_provider_code(code)
            if description:
                message = f"{message} ({description})"
            raise QWeatherError(
                ErrorKind.PROVIDER,
                message,
                code=code,
                status_code=response.status_code,
                body=response.text,
            )

        return data

    async def lookup_city(self, token: str) -> List[Location]:
        """Geocode a location token; candidates are returned in provider order.

        Raises:
            QWeatherError: See request(); DATA_SHAPE if a candidate is malformed.
        """
        data = await self.request(
            self.settings.geo_base_url,
            self.settings.geo_lookup_path,
            {"location": token},
        )
        try:
            return [Location.model_validate(item) for item in data.get("location") or []]
        except ValidationError as e:
            logger.error(f"Malformed city lookup candidate for '{token}': {e}")
            raise QWeatherError(
                ErrorKind.DATA_SHAPE,
                "City lookup returned a malformed location record",
                code=str(data.get("code", CODE_NOT_AVAILABLE)),
            )

    async def fetch_forecast(self, location: str, selector: ForecastSelector) -> Forecast:
        """Fetch the forecast variant named by the selector.

        The location is passed through verbatim. The returned model is chosen
        from the selector; an absent payload field yields an empty variant that
        the formatter reports as unavailable.

        Raises:
            QWeatherError: See request(); DATA_SHAPE if records have the wrong shape.
        """
        data = await self.request(
            self.settings.weather_base_url,
            selector.path,
            {"location": location},
        )

        field = PAYLOAD_FIELDS[selector.kind]
        model = FORECAST_MODELS[selector.kind]
        payload = {
            "selector": selector,
            "code": str(data.get("code", PROVIDER_SUCCESS_CODE)),
            "refer": data.get("refer"),
        }
        if data.get(field) is not None:
            payload[field] = data[field]

        try:
            return model.model_validate(payload)
        except ValidationError as e:
            logger.error(f"Malformed {selector.value} payload for '{location}': {e}")
            raise QWeatherError(
                ErrorKind.DATA_SHAPE,
                f"Forecast data for {selector.value} has an unexpected shape",
                code=payload["code"],
            )
