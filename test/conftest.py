import httpx
import pytest

from weather_mcp.config.settings import Settings
from weather_mcp.core.server_manager import ServerManager
from weather_mcp.tools.weather import WeatherService

NWS_BASE = "https://api.weather.gov"
FORECAST_URL = f"{NWS_BASE}/gridpoints/MTR/85,105/forecast"
EMPTY_FORECAST_URL = f"{NWS_BASE}/gridpoints/BOI/1,1/forecast"

ALERT = {
    "properties": {
        "event": "Wind Advisory",
        "areaDesc": "San Francisco Bay Shoreline",
        "severity": "Moderate",
        "description": "West winds 25 to 35 mph.",
        "instruction": None,
    }
}


def make_period(number: int) -> dict:
    return {
        "name": f"Period {number}",
        "temperature": 60 + number,
        "temperatureUnit": "F",
        "windSpeed": "10 mph",
        "windDirection": "W",
        "detailedForecast": f"Forecast number {number}.",
    }


def nws_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/alerts/active/area/CA":
        return httpx.Response(200, json={"features": [ALERT, ALERT]})
    if path == "/alerts/active/area/NY":
        return httpx.Response(200, json={"features": []})
    if path == "/alerts/active/area/WA":
        return httpx.Response(200, json={"title": "no features key"})
    if path == "/alerts/active/area/OR":
        return httpx.Response(200, content=b"<html>not json</html>")
    if path == "/alerts/active/area/ID":
        return httpx.Response(200, json={"features": ["not an alert"]})
    if path == "/alerts/active/area/NV":
        raise httpx.ConnectError("connection refused", request=request)
    if path.startswith("/points/37.77"):
        return httpx.Response(200, json={"properties": {"forecast": FORECAST_URL}})
    if path.startswith("/points/43.6"):
        return httpx.Response(200, json={"properties": {"forecast": EMPTY_FORECAST_URL}})
    if path.startswith("/points/40.0"):
        return httpx.Response(200, json={"properties": {}})
    if request.url == httpx.URL(EMPTY_FORECAST_URL):
        return httpx.Response(200, json={"properties": {"periods": []}})
    if request.url == httpx.URL(FORECAST_URL):
        periods = [make_period(n) for n in range(1, 9)]
        return httpx.Response(200, json={"properties": {"periods": periods}})
    return httpx.Response(500, json={"detail": "upstream failure"})


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def test_settings():
    return Settings(PORT=3999, NWS_API_BASE=NWS_BASE, LOG_LEVEL="DEBUG")


@pytest.fixture
def weather_service():
    return WeatherService(base_url=NWS_BASE, transport=httpx.MockTransport(nws_handler))


@pytest.fixture
def manager(test_settings, weather_service):
    manager = ServerManager(settings=test_settings, weather_service=weather_service)
    manager.server_implementation()
    return manager
