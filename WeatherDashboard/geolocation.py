"""Geolocation abstraction - one-shot "where am I" queries."""
import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple


class GeolocationError(Exception):
    """The current position could not be determined."""
    pass


class GeolocationUnavailable(GeolocationError):
    """No positioning capability is configured."""
    pass


class GeolocationDenied(GeolocationError):
    """The user refused to share their position."""
    pass


class GeolocationProviderBase(ABC):
    """Abstract base class for position sources."""

    @abstractmethod
    def current_position(self) -> Tuple[float, float]:
        """
        Get the current position once (no tracking).

        Returns:
            Tuple of (latitude, longitude)

        Raises:
            GeolocationUnavailable: If positioning is not supported
            GeolocationDenied: If the user refused
        """
        pass


class StaticGeolocation(GeolocationProviderBase):
    """Position taken from configuration (e.g. WEATHER_LAT/WEATHER_LON)."""

    def __init__(self, lat: Optional[float] = None, lon: Optional[float] = None):
        if (lat is None) != (lon is None):
            raise ValueError("lat and lon must be given together")
        self.lat = lat
        self.lon = lon

    def current_position(self) -> Tuple[float, float]:
        if self.lat is None or self.lon is None:
            raise GeolocationUnavailable("No coordinates configured")
        logging.debug(f"Using configured position lat={self.lat} lon={self.lon}")
        return self.lat, self.lon


class DeniedGeolocation(GeolocationProviderBase):
    """Behaves like a user who dismissed the location prompt."""

    def current_position(self) -> Tuple[float, float]:
        raise GeolocationDenied("User denied geolocation")
