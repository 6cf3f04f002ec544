"""Weather provider abstraction - allows swapping different weather APIs."""
from abc import ABC, abstractmethod
from typing import List

from weather_data import WeatherSnapshot


class WeatherProviderBase(ABC):
    """Abstract base class for weather data providers."""

    @abstractmethod
    def fetch_by_coordinates(self, lat: float, lon: float) -> WeatherSnapshot:
        """
        Fetch current weather for a position.

        Args:
            lat: Latitude (-90 to 90)
            lon: Longitude (-180 to 180)

        Returns:
            WeatherSnapshot: Current weather at that position

        Raises:
            FetchError: If the provider fails to fetch data
        """
        pass

    @abstractmethod
    def fetch_by_city(self, name: str) -> WeatherSnapshot:
        """
        Fetch current weather for a city name.

        Raises:
            FetchError: If the provider fails to fetch data
        """
        pass

    @abstractmethod
    def suggest_cities(self, query: str) -> List[str]:
        """Return city names matching a partially typed query. Never fails."""
        pass


class FetchError(Exception):
    """Exception raised when a weather provider fails (network, HTTP or payload)."""
    pass
