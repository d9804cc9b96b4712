"""ABOUTME: Pytest configuration and shared fixtures for the QWeather MCP tests.

Provides an in-process fake of the QWeather API (served through
httpx.MockTransport so every request is recorded), settings, and sample
provider payloads.
"""

from typing import Any, Dict, List, Optional

import httpx
import pytest

from qweather_mcp.client import QWeatherClient
from qweather_mcp.config import QWeatherSettings
from qweather_mcp.server import build_router

API_URL = "https://api.example.com"
API_KEY = "test-secret-key"


class FakeQWeatherAPI:
    """Routes GET paths to canned responses and records every request."""

    def __init__(self):
        self.routes: Dict[str, List[Dict[str, Any]]] = {}
        self.requests: List[httpx.Request] = []
        self.error: Optional[Exception] = None

    def add(self, path: str, payload: Any = None, status: int = 200, text: Optional[str] = None) -> None:
        """Queue a response for a path; the last one queued repeats."""
        body = {"text": text} if text is not None else {"json": payload}
        self.routes.setdefault(path, []).append({"status_code": status, **body})

    def fail_with(self, error: Exception) -> None:
        """Make every request raise the given httpx error."""
        self.error = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        queued = self.routes.get(request.url.path)
        if not queued:
            return httpx.Response(404, text="no route")
        spec = queued.pop(0) if len(queued) > 1 else queued[0]
        return httpx.Response(**spec)

    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]

    def locations(self) -> List[str]:
        return [request.url.params.get("location") for request in self.requests]


@pytest.fixture
def fake_api():
    """Fixture providing a fresh fake QWeather API."""
    return FakeQWeatherAPI()


@pytest.fixture
def http_client(fake_api):
    """Fixture providing an httpx.AsyncClient wired to the fake API."""
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler))


@pytest.fixture
def settings(monkeypatch):
    """Fixture providing complete settings (query-parameter authentication)."""
    for name in ("QWEATHER_API_KEY", "QWEATHER_API_URL", "QWEATHER_GEO_API_URL", "QWEATHER_AUTH_MODE"):
        monkeypatch.delenv(name, raising=False)
    return QWeatherSettings(api_key=API_KEY, api_url=API_URL, _env_file=None)


@pytest.fixture
def client(settings, http_client):
    return QWeatherClient(settings, http_client=http_client)


@pytest.fixture
def router(settings, http_client):
    return build_router(settings, http_client=http_client)


@pytest.fixture
def now_payload():
    """Fixture providing a /v7/weather/now success response."""
    return {
        "code": "200",
        "updateTime": "2024-01-01T08:05+08:00",
        "now": {
            "obsTime": "2024-01-01T08:00+08:00",
            "temp": "5",
            "feelsLike": "2",
            "text": "Cloudy",
            "windDir": "N",
            "windScale": "3",
            "humidity": "40",
            "precip": "0.0",
            "pressure": "1020",
            "vis": "10",
        },
        "refer": {"sources": ["QWeather"], "license": ["QWeather Developers License"]},
    }


@pytest.fixture
def hourly_payload():
    """Fixture providing a /v7/weather/24h success response with three hours."""
    return {
        "code": "200",
        "hourly": [
            {"fxTime": f"2024-01-01T{hour:02d}:00+08:00", "temp": str(hour), "text": "Sunny",
             "windDir": "NE", "windScale": "1-2", "humidity": "30", "pop": "0"}
            for hour in (9, 10, 11)
        ],
    }


def make_daily_payload(count: int) -> Dict[str, Any]:
    return {
        "code": "200",
        "daily": [
            {
                "fxDate": f"2024-01-{day:02d}",
                "sunrise": "07:36",
                "sunset": "17:03",
                "tempMax": str(day + 5),
                "tempMin": str(day - 5),
                "textDay": "Sunny",
                "textNight": "Clear",
                "windDirDay": "N",
                "windScaleDay": "1-3",
                "windDirNight": "NW",
                "windScaleNight": "1-3",
                "humidity": "35",
                "precip": "0.0",
                "pressure": "1025",
                "vis": "25",
                "uvIndex": "2",
            }
            for day in range(1, count + 1)
        ],
    }


@pytest.fixture
def daily_payload():
    """Fixture providing a /v7/weather/3d success response."""
    return make_daily_payload(3)


@pytest.fixture
def lookup_payload():
    """Fixture providing a city lookup response with two candidates."""
    return {
        "code": "200",
        "location": [
            {"name": "Beijing", "id": "101010100", "lat": "39.90499", "lon": "116.40529",
             "adm2": "Beijing", "adm1": "Beijing", "country": "China", "tz": "Asia/Shanghai",
             "utcOffset": "+08:00", "isDst": "0", "type": "city", "rank": "10",
             "fxLink": "https://www.qweather.com/weather/beijing-101010100.html"},
            {"name": "Chaoyang", "id": "101010300", "lat": "39.92149", "lon": "116.48641",
             "adm2": "Beijing", "adm1": "Beijing", "country": "China"},
        ],
    }


def result_text(result) -> str:
    """Text of the single content block of a CallToolResult."""
    assert len(result.content) == 1
    assert result.content[0].type == "text"
    return result.content[0].text
