"""Canned chat replies used when the language model is unreachable - pure functions."""
import math
from typing import Optional
from weather_data import WeatherSnapshot

GREETING = (
    "Hello! 👋 I'm your weather assistant. I can help you with weather information "
    "and provide weather-related advice. What would you like to know? ☀️"
)

GENERIC_PROMPT = (
    "I'm here to help with weather information! 🌈 Ask me about the current weather, "
    "temperature, or any weather-related questions you might have."
)

WEATHER_ADVICE = {
    "rain": "Don't forget your umbrella! ☔",
    "snow": "Bundle up and watch your step on icy surfaces! ❄️",
    "clear": "Perfect weather for outdoor activities! ☀️",
    "clouds": "Great weather for a walk, no harsh sun! ☁️",
    "thunderstorm": "Stay indoors and stay safe! ⛈️",
}

DEFAULT_WEATHER_ADVICE = "Have a great day! 🌤️"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +inf (-2.5 -> -2, 2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def weather_advice(condition: str) -> str:
    """
    Get a one-line tip for an OpenWeather condition group.

    Args:
        condition: Condition group, e.g. "Rain" or "Clouds" (case-insensitive)

    Returns:
        Tip text; unknown conditions get a generic tip
    """
    return WEATHER_ADVICE.get(condition.lower(), DEFAULT_WEATHER_ADVICE)


def temperature_advice(temp_c: float) -> str:
    """
    Get a tip for a temperature in Celsius.

    Bands are closed-open: [-inf, 0), [0, 10), [10, 20), [20, 30), [30, inf).
    """
    if temp_c < 0:
        return "It's freezing! Layer up and stay warm! 🥶"
    elif temp_c < 10:
        return "It's quite cold, wear a jacket! 🧥"
    elif temp_c < 20:
        return "Cool weather, perfect for a light sweater! 😊"
    elif temp_c < 30:
        return "Pleasant temperature, perfect for most activities! 👌"
    else:
        return "It's quite warm, stay hydrated and find some shade! 🌡️"


def fallback_response(message: str, snapshot: Optional[WeatherSnapshot]) -> str:
    """
    Build a keyword-matched reply from the last known weather.

    Never performs I/O and never raises; always returns non-empty text.

    Args:
        message: The user's chat message
        snapshot: Latest weather snapshot, if any

    Returns:
        Reply text
    """
    lower_message = message.lower()

    if "weather" in lower_message and snapshot is not None:
        temp = round_half_up(snapshot.temp)
        return (
            f"The current weather in {snapshot.location_label} is {temp}°C "
            f"with {snapshot.condition_description}. "
            f"{weather_advice(snapshot.condition_main)} 🌤️"
        )

    if "hello" in lower_message or "hi" in lower_message:
        return GREETING

    if "temperature" in lower_message and snapshot is not None:
        temp = round_half_up(snapshot.temp)
        feels_like = round_half_up(snapshot.feels_like)
        # Banded on the raw reading, so -0.4 shows as 0°C yet counts as freezing
        return (
            f"It's currently {temp}°C, but it feels like {feels_like}°C. "
            f"{temperature_advice(snapshot.temp)} 🌡️"
        )

    return GENERIC_PROMPT
