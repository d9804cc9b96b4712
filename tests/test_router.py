"""ABOUTME: Tests for the tool router - end-to-end tool flows against the fake API."""

from unittest.mock import AsyncMock

import httpx
import pytest

from conftest import API_URL, make_daily_payload, result_text
from qweather_mcp.common.error_handling import UnknownToolError
from qweather_mcp.config import QWeatherSettings
from qweather_mcp.server import build_router

LOOKUP_PATH = "/v2/city/lookup"


class TestToolListing:
    """Tests for tool descriptors."""

    def test_two_tools(self, router):
        tools = {tool.name: tool for tool in router.list_tools()}

        assert set(tools) == {"get-weather", "get_location_id"}
        assert tools["get-weather"].inputSchema["required"] == ["location"]
        assert tools["get-weather"].inputSchema["properties"]["days"]["default"] == "now"
        assert len(tools["get-weather"].inputSchema["properties"]["days"]["enum"]) == 9
        assert tools["get_location_id"].inputSchema["required"] == ["city_name"]


class TestRouting:
    """Tests for name dispatch and the hard-fault boundary."""

    @pytest.mark.asyncio
    async def test_unknown_tool_raises(self, router, fake_api):
        with pytest.raises(UnknownToolError) as exc_info:
            await router.call_tool("frobnicate", {})

        assert exc_info.value.tool_name == "frobnicate"
        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_underscore_alias(self, router, fake_api, now_payload):
        fake_api.add("/v7/weather/now", now_payload)

        result = await router.call_tool("get_weather", {"location": "101010100"})

        assert not result.isError
        assert result_text(result).startswith("Location: 101010100")

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_text(self, router):
        router.client.fetch_forecast = AsyncMock(side_effect=RuntimeError("boom"))

        result = await router.call_tool("get-weather", {"location": "101010100"})

        assert result.isError
        assert 'Internal error while running tool "get-weather": boom' == result_text(result)


class TestValidation:
    """Tests for argument validation results."""

    @pytest.mark.asyncio
    async def test_invalid_days(self, router, fake_api):
        result = await router.call_tool("get-weather", {"location": "beijing", "days": "5d"})

        assert result.isError
        text = result_text(result)
        assert text.startswith("Invalid arguments for get-weather: days:")
        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_all_failing_fields_listed(self, router):
        result = await router.call_tool("get-weather", {"days": 7})

        text = result_text(result)
        assert "location: Field required" in text
        assert "days:" in text

    @pytest.mark.asyncio
    async def test_missing_arguments(self, router):
        result = await router.call_tool("get_location_id", None)

        assert result_text(result) == "Invalid arguments for get_location_id: city_name: Field required"

    @pytest.mark.asyncio
    async def test_blank_city_name(self, router):
        result = await router.call_tool("get_location_id", {"city_name": "   "})

        assert "city_name cannot be empty" in result_text(result)


class TestWeatherTool:
    """Tests for the get-weather flow."""

    @pytest.mark.asyncio
    async def test_instant_success(self, router, fake_api, now_payload):
        fake_api.add("/v7/weather/now", now_payload)

        result = await router.call_tool("get-weather", {"location": "101010100", "days": "now"})

        assert not result.isError
        lines = result_text(result).split("\n")
        assert len(lines) == 11
        assert lines[0] == "Location: 101010100"
        assert lines[1] == "Observation time: 2024-01-01T08:00+08:00"
        assert [line.split(":")[0] for line in lines[2:]] == [
            "Condition", "Temperature", "Feels like", "Wind direction", "Wind scale",
            "Humidity", "Precipitation", "Pressure", "Visibility",
        ]
        assert fake_api.paths() == ["/v7/weather/now"]
        assert result.metadata["sources"] == ["QWeather"]

    @pytest.mark.asyncio
    async def test_latin_name_skips_geocoding(self, router, fake_api, hourly_payload):
        fake_api.add("/v7/weather/24h", hourly_payload)

        result = await router.call_tool("get-weather", {"location": "beijing", "days": "24h"})

        assert not result.isError
        assert fake_api.paths() == ["/v7/weather/24h"]
        assert fake_api.locations() == ["beijing"]

    @pytest.mark.asyncio
    async def test_native_name_uses_resolved_id(self, router, fake_api, lookup_payload):
        fake_api.add(LOOKUP_PATH, lookup_payload)
        fake_api.add("/v7/weather/7d", make_daily_payload(7))

        result = await router.call_tool("get-weather", {"location": "北京", "days": "7d"})

        text = result_text(result)
        assert text.startswith("Location: 北京 (beijing)\n7d daily forecast:")
        assert text.count("------------------------") == 7
        assert fake_api.paths() == [LOOKUP_PATH, "/v7/weather/7d"]
        assert fake_api.locations() == ["beijing", "101010100"]

    @pytest.mark.asyncio
    async def test_zero_candidates_falls_back_to_romanized(self, router, fake_api, now_payload):
        fake_api.add(LOOKUP_PATH, {"code": "200", "location": []})
        fake_api.add("/v7/weather/now", now_payload)

        result = await router.call_tool("get-weather", {"location": "北京"})

        assert not result.isError
        assert fake_api.locations() == ["beijing", "beijing"]
        assert result_text(result).startswith("Location: 北京 (beijing)")

    @pytest.mark.asyncio
    async def test_fallback_failure_names_both_forms(self, router, fake_api):
        fake_api.add(LOOKUP_PATH, {"code": "404"})
        fake_api.add("/v7/weather/now", {"code": "404"})

        result = await router.call_tool("get-weather", {"location": "北京"})

        assert result.isError
        text = result_text(result)
        assert "\n" not in text
        assert "(API code/status: 404)" in text
        assert 'tried converting "北京" to "beijing"' in text

    @pytest.mark.asyncio
    async def test_business_code_in_http_200(self, router, fake_api):
        fake_api.add("/v7/weather/now", {"code": "400"})

        result = await router.call_tool("get-weather", {"location": "101010100"})

        assert result.isError
        assert result.metadata["error_type"] == "provider_error"
        assert result.metadata["error_code"] == "400"
        assert "(API code/status: 400)" in result_text(result)

    @pytest.mark.asyncio
    async def test_empty_series_is_reported(self, router, fake_api):
        fake_api.add("/v7/weather/3d", {"code": "200", "daily": []})

        result = await router.call_tool("get-weather", {"location": "101010100", "days": "3d"})

        assert result.isError
        assert result.metadata["error_type"] == "data_shape_error"
        assert "3d forecast for 101010100 is unavailable" in result_text(result)

    @pytest.mark.asyncio
    async def test_transport_error(self, router, fake_api):
        fake_api.fail_with(httpx.ConnectError("connection refused"))

        result = await router.call_tool("get-weather", {"location": "101010100"})

        assert result.isError
        assert "(API code/status: FETCH_ERROR)" in result_text(result)

    @pytest.mark.asyncio
    async def test_html_error_page_is_one_line(self, router, fake_api):
        fake_api.add("/v7/weather/now", status=502, text="<html>\n<body>Bad Gateway</body>\n</html>")

        result = await router.call_tool("get-weather", {"location": "101010100"})

        assert result.isError
        text = result_text(result)
        assert "\n" not in text
        assert text.startswith("Unable to fetch weather for 101010100 (API code/status: 502).")

    @pytest.mark.asyncio
    async def test_padded_location_is_sent_stripped(self, router, fake_api, now_payload):
        fake_api.add("/v7/weather/now", now_payload)

        result = await router.call_tool("get-weather", {"location": "  101010100 "})

        assert fake_api.locations() == ["101010100"]
        assert result_text(result).startswith("Location: 101010100\n")

    @pytest.mark.asyncio
    async def test_identical_responses_render_identically(self, router, fake_api, now_payload):
        fake_api.add("/v7/weather/now", now_payload)

        first = await router.call_tool("get-weather", {"location": "101010100"})
        second = await router.call_tool("get-weather", {"location": "101010100"})

        assert result_text(first) == result_text(second)


class TestLocationTool:
    """Tests for the get_location_id flow."""

    @pytest.mark.asyncio
    async def test_success(self, router, fake_api, lookup_payload):
        fake_api.add(LOOKUP_PATH, lookup_payload)

        result = await router.call_tool("get_location_id", {"city_name": "北京"})

        assert not result.isError
        assert result_text(result).split("\n")[0] == "City: Beijing"
        assert result.metadata["location_id"] == "101010100"
        assert fake_api.locations() == ["北京"]

    @pytest.mark.asyncio
    async def test_native_names_are_not_romanized(self, router, fake_api, lookup_payload):
        """Homophones such as 陕西 and 山西 must reach the provider as distinct queries."""
        fake_api.add(LOOKUP_PATH, lookup_payload)

        await router.call_tool("get_location_id", {"city_name": "陕西"})
        await router.call_tool("get_location_id", {"city_name": "山西"})

        assert fake_api.locations() == ["陕西", "山西"]

    @pytest.mark.asyncio
    async def test_ids_are_geocoded_too(self, router, fake_api, lookup_payload):
        fake_api.add(LOOKUP_PATH, lookup_payload)

        await router.call_tool("get_location_id", {"city_name": "116.41,39.92"})

        assert fake_api.locations() == ["116.41,39.92"]

    @pytest.mark.asyncio
    async def test_zero_candidates_is_not_found(self, router, fake_api):
        fake_api.add(LOOKUP_PATH, {"code": "200", "location": []})

        result = await router.call_tool("get_location_id", {"city_name": "atlantis"})

        assert result.isError
        text = result_text(result)
        assert "\n" not in text
        assert text.startswith('Unable to find location information for "atlantis"')
        assert len(fake_api.requests) == 1

    @pytest.mark.asyncio
    async def test_html_error_page_is_one_line(self, router, fake_api):
        fake_api.add(LOOKUP_PATH, status=502, text="<html>\n<body>Bad Gateway</body>\n</html>")

        result = await router.call_tool("get_location_id", {"city_name": "beijing"})

        assert result.isError
        text = result_text(result)
        assert "\n" not in text
        assert "Bad Gateway" in text

    @pytest.mark.asyncio
    async def test_lookup_error_code(self, router, fake_api):
        fake_api.add(LOOKUP_PATH, {"code": "401", "message": "invalid key"}, status=401)

        result = await router.call_tool("get_location_id", {"city_name": "beijing"})

        assert result.isError
        assert result.metadata["error_code"] == "401"
        assert "invalid key" in result_text(result)


class TestConfigurationErrors:
    """Tests for missing configuration at call time."""

    @pytest.fixture
    def unconfigured_router(self, monkeypatch, http_client):
        monkeypatch.delenv("QWEATHER_API_KEY", raising=False)
        return build_router(QWeatherSettings(api_url=API_URL, _env_file=None), http_client=http_client)

    @pytest.mark.asyncio
    async def test_weather_without_key(self, unconfigured_router, fake_api):
        result = await unconfigured_router.call_tool("get-weather", {"location": "101010100"})

        assert result.isError
        assert result_text(result) == "Configuration error: QWeather API key is not configured."
        assert len(fake_api.requests) == 0

    @pytest.mark.asyncio
    async def test_native_weather_without_key(self, unconfigured_router, fake_api):
        result = await unconfigured_router.call_tool("get-weather", {"location": "北京"})

        assert result.metadata["error_type"] == "configuration_error"
        assert len(fake_api.requests) == 0

    @pytest.mark.asyncio
    async def test_location_without_key(self, unconfigured_router, fake_api):
        result = await unconfigured_router.call_tool("get_location_id", {"city_name": "beijing"})

        assert result_text(result).startswith("Configuration error:")
        assert len(fake_api.requests) == 0
