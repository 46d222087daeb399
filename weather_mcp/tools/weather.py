import logging
from typing import Any, Dict, Optional

import httpx

from weather_mcp.config.settings import settings
from weather_mcp.core.errors import WeatherDataUnavailable

logger = logging.getLogger(__name__)

FORECAST_PERIODS = 5


def format_alert(feature: dict) -> str:
    props = feature.get("properties") or {}
    return (
        f"Event: {props.get('event', 'Unknown')}\n"
        f"Area: {props.get('areaDesc', 'Unknown')}\n"
        f"Severity: {props.get('severity', 'Unknown')}\n"
        f"Description: {props.get('description') or 'No description available'}\n"
        f"Instructions: {props.get('instruction') or 'No specific instructions provided'}"
    )


def format_period(period: dict) -> str:
    return (
        f"{period['name']}:\n"
        f"Temperature: {period['temperature']}°{period['temperatureUnit']}\n"
        f"Wind: {period['windSpeed']} {period['windDirection']}\n"
        f"Forecast: {period['detailedForecast']}"
    )


class WeatherService:
    """Client for the National Weather Service API.

    Every failure (network error, HTTP error status, unexpected payload) is
    raised as WeatherDataUnavailable so the protocol layer reports it to the
    caller as a tool error.
    """

    def __init__(self,
                 base_url: str = None,
                 user_agent: str = None,
                 timeout: float = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):

        self.base_url: str = (base_url or settings.NWS_API_BASE).rstrip("/")
        self.user_agent: str = user_agent or settings.USER_AGENT
        self.timeout: float = timeout or settings.REQUEST_TIMEOUT
        self._transport = transport

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/geo+json",
        }

    async def fetch(self, url: str) -> Dict[str, Any]:
        """GET a JSON document from the weather service."""
        async with httpx.AsyncClient(headers=self.headers,
                                     timeout=self.timeout,
                                     transport=self._transport) as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as e:
                logger.warning("Weather API error for %s: %s", url, e.response.status_code)
                raise WeatherDataUnavailable(
                    f"Weather API error: {e.response.status_code}") from e
            except httpx.HTTPError as e:
                logger.warning("Weather API unreachable for %s: %s", url, e)
                raise WeatherDataUnavailable(f"Weather API unreachable: {e}") from e
            except ValueError as e:
                raise WeatherDataUnavailable("Weather API returned a malformed response") from e

        if not isinstance(data, dict):
            raise WeatherDataUnavailable("Weather API returned a malformed response")
        return data

    async def get_alerts(self, state: str) -> str:
        """
        Get active weather alerts for a US state.

        Args:
            state: Two-letter US state code (e.g. CA, NY).
        """
        code = state.strip().upper()
        if len(code) != 2 or not code.isalpha():
            raise WeatherDataUnavailable(f"Invalid state code: {state!r}")

        data = await self.fetch(f"{self.base_url}/alerts/active/area/{code}")
        features = data.get("features")
        if not isinstance(features, list):
            raise WeatherDataUnavailable("Unable to fetch alerts for this state.")

        if not features:
            return "No active alerts for this state."

        if not all(isinstance(feature, dict) for feature in features):
            raise WeatherDataUnavailable("Weather API returned malformed alerts.")

        return "\n---\n".join(format_alert(feature) for feature in features)

    async def get_forecast(self, latitude: float, longitude: float) -> str:
        """
        Get the weather forecast for a location.

        Args:
            latitude: Latitude of the location.
            longitude: Longitude of the location.
        """
        if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
            raise WeatherDataUnavailable(
                f"Coordinates out of range: {latitude}, {longitude}")

        points = await self.fetch(f"{self.base_url}/points/{latitude},{longitude}")
        try:
            forecast_url = points["properties"]["forecast"]
        except (KeyError, TypeError) as e:
            raise WeatherDataUnavailable(
                "Unable to fetch forecast data for this location.") from e

        forecast = await self.fetch(forecast_url)
        try:
            periods = forecast["properties"]["periods"][:FORECAST_PERIODS]
            if not periods:
                return "No forecast periods available."
            return "\n---\n".join(format_period(period) for period in periods)
        except (KeyError, TypeError) as e:
            raise WeatherDataUnavailable("Unable to fetch detailed forecast.") from e
