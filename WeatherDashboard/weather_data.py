"""Weather domain model - pure data structures independent of any API."""
from dataclasses import dataclass


@dataclass(frozen=True)
class WeatherSnapshot:
    """A single weather observation, immutable once fetched."""
    location_name: str
    country: str
    condition_main: str  # e.g., "Clouds", "Rain", "Clear"
    condition_icon: str  # e.g., "04d" - trailing "d"/"n" marks day/night
    condition_description: str  # e.g., "broken clouds", "light rain"
    temp: float
    temp_min: float
    temp_max: float
    feels_like: float
    humidity: float  # percent
    pressure: float  # hPa
    wind_speed: float  # m/s
    visibility: int  # meters
    sunrise: int  # UNIX timestamp (UTC)
    sunset: int  # UNIX timestamp (UTC)

    @property
    def location_label(self) -> str:
        """Location as shown on the card, e.g. "London, GB"."""
        if self.country:
            return f"{self.location_name}, {self.country}"
        return self.location_name

    @property
    def is_day(self) -> bool:
        return "d" in self.condition_icon
