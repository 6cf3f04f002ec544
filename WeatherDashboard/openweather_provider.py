"""OpenWeather Current Weather API provider implementation."""
import logging
import requests
from typing import Any, Dict, List, Optional, Sequence
from weather_provider import WeatherProviderBase, FetchError
from weather_data import WeatherSnapshot
from city_suggestions import POPULAR_CITIES, suggest_cities


class OpenWeatherProvider(WeatherProviderBase):
    """
    Weather provider using OpenWeather Current Weather API.

    Uses the free Current Weather API: https://openweathermap.org/current
    Each call is a single GET; nothing is cached or retried here.
    """

    BASE_URL = "https://api.openweathermap.org/data/2.5"

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        units: str = "metric",
        timeout: Optional[float] = 10,
        cities: Sequence[str] = POPULAR_CITIES
    ):
        """
        Initialize OpenWeather provider.

        Args:
            api_key: OpenWeather API key
            base_url: API root, without the trailing "/weather"
            units: Temperature units ("metric", "imperial", or "standard")
            timeout: HTTP request timeout in seconds (None waits indefinitely)
            cities: City names offered as search suggestions
        """
        self.api_key = api_key
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.units = units
        self.timeout = timeout
        self.cities = tuple(cities)

    @property
    def weather_url(self) -> str:
        return f"{self.base_url}/weather"

    def fetch_by_coordinates(self, lat: float, lon: float) -> WeatherSnapshot:
        """
        Fetch current weather for a latitude/longitude pair.

        Raises:
            FetchError: If the API request fails
        """
        return self._get_current({"lat": lat, "lon": lon})

    def fetch_by_city(self, name: str) -> WeatherSnapshot:
        """
        Fetch current weather for a city name (e.g. "Paris" or "Paris,FR").

        The name travels as the ``q`` query parameter and is URL-escaped
        by requests.

        Raises:
            FetchError: If the API request fails
        """
        return self._get_current({"q": name})

    def suggest_cities(self, query: str) -> List[str]:
        return suggest_cities(query, self.cities)

    def _get_current(self, location: Dict[str, Any]) -> WeatherSnapshot:
        params = dict(location)
        params["appid"] = self.api_key
        params["units"] = self.units

        try:
            logging.info(f"Making OpenWeather API request: {self.weather_url}")
            logging.debug(f"Request location: {location}, units={self.units}")

            response = requests.get(self.weather_url, params=params, timeout=self.timeout)

            logging.info(f"API response status: {response.status_code}")

            if not response.ok:
                logging.error(f"API request failed with status {response.status_code}")
                self._handle_error_response(response)

            data = response.json()
            logging.debug(f"API response (truncated): {str(data)[:500]}...")
            return self._parse_snapshot(data)

        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during API request: {e}")
            raise FetchError(f"Network error: {str(e)}")
        except (KeyError, IndexError, ValueError, TypeError, AttributeError) as e:
            logging.error(f"Failed to parse API response: {e}", exc_info=True)
            raise FetchError(f"Failed to parse response: {str(e)}")

    @staticmethod
    def _parse_snapshot(data: Dict[str, Any]) -> WeatherSnapshot:
        """Map a Current Weather payload onto WeatherSnapshot."""
        if not isinstance(data, dict):
            raise FetchError(f"Unexpected response type: {type(data).__name__}")

        weather_array = data.get("weather", [])
        if not weather_array or not isinstance(weather_array, list):
            logging.error("Response missing 'weather' array")
            raise FetchError("Response missing 'weather' array")
        weather = weather_array[0]
        if not isinstance(weather, dict):
            raise FetchError("Malformed 'weather' entry")
        logging.debug(f"Weather condition: {weather.get('main')} - {weather.get('description')}")

        main_data = data.get("main", {})
        if not main_data:
            raise FetchError("Response missing 'main' block")

        sys_data = data.get("sys") or {}
        wind_data = data.get("wind") or {}
        for name, block in (("main", main_data), ("sys", sys_data), ("wind", wind_data)):
            if not isinstance(block, dict):
                raise FetchError(f"Malformed '{name}' block")

        snapshot = WeatherSnapshot(
            location_name=data.get("name", ""),
            country=sys_data.get("country", ""),
            condition_main=weather.get("main", "Unknown"),
            condition_icon=weather.get("icon", ""),
            condition_description=weather.get("description", ""),
            temp=float(main_data["temp"]),
            temp_min=float(main_data.get("temp_min", main_data["temp"])),
            temp_max=float(main_data.get("temp_max", main_data["temp"])),
            feels_like=float(main_data.get("feels_like", main_data["temp"])),
            humidity=float(main_data.get("humidity", 0.0)),
            pressure=float(main_data.get("pressure", 0.0)),
            wind_speed=float(wind_data.get("speed", 0.0)),
            visibility=int(data.get("visibility", 0)),
            sunrise=int(sys_data.get("sunrise", 0)),
            sunset=int(sys_data.get("sunset", 0)),
        )

        logging.info(f"Parsed weather for {snapshot.location_label}: {snapshot.temp}°C, {snapshot.condition_main}")
        return snapshot

    def _handle_error_response(self, response: requests.Response) -> None:
        """Parse and raise error from OpenWeather error response."""
        try:
            error_data = response.json()
        except ValueError:
            # Not JSON, use HTTP status
            logging.error(f"Non-JSON error response: HTTP {response.status_code}, body: {response.text[:500]}")
            raise FetchError(f"HTTP {response.status_code}: {response.text[:200]}")

        cod = error_data.get("cod", response.status_code)
        message = error_data.get("message", "Unknown error")
        logging.error(f"OpenWeather API error response: {error_data}")
        raise FetchError(f"OpenWeather API error {cod}: {message}")
