"""Layout and rendering logic for the dashboard - pure functions for testability."""
from datetime import datetime, tzinfo
from typing import List, Optional, Sequence

from chat_fallback import round_half_up
from dashboard import ChatPanel, Dashboard, Error, Ready, ViewState
from weather_data import WeatherSnapshot

LOADING_TEXT = "Loading weather data..."
RETRY_HINT = "Type /retry to try again"


def get_condition_emoji(condition: str, is_day: bool) -> str:
    """
    Get the emoji shown on the weather card.

    Clear and cloudy skies have day and night variants.

    Args:
        condition: Condition group, e.g. "Clear"
        is_day: Whether the sun is up at the location

    Returns:
        Emoji string
    """
    main = condition.lower()

    if main == "clear":
        return "☀️" if is_day else "🌙"
    if main == "clouds":
        return "⛅" if is_day else "☁️"

    condition_map = {
        "rain": "🌧️",
        "drizzle": "🌦️",
        "thunderstorm": "⛈️",
        "snow": "❄️",
        "mist": "🌫️",
        "fog": "🌫️",
        "haze": "🌤️",
    }
    return condition_map.get(main, "🌤️")


def format_clock(timestamp: float, tz: Optional[tzinfo] = None) -> str:
    """Format a UNIX timestamp as "07:05 AM" (local time unless tz is given)."""
    return datetime.fromtimestamp(timestamp, tz).strftime("%I:%M %p")


def format_visibility(meters: float) -> str:
    return f"{meters / 1000:.1f} km"


def render_weather_card(snapshot: WeatherSnapshot, tz: Optional[tzinfo] = None) -> List[str]:
    """
    Render the weather card as text lines.

    Args:
        snapshot: Weather to display
        tz: Time zone for sunrise/sunset (local time if None)

    Returns:
        Lines of text, top to bottom
    """
    emoji = get_condition_emoji(snapshot.condition_main, snapshot.is_day)
    description = snapshot.condition_description
    description = description[:1].upper() + description[1:]

    return [
        f"📍 {snapshot.location_label}",
        f"{emoji}  {round_half_up(snapshot.temp)}°",
        description,
        f"Feels like {round_half_up(snapshot.feels_like)}°",
        f"Low {round_half_up(snapshot.temp_min)}°   High {round_half_up(snapshot.temp_max)}°",
        f"Visibility {format_visibility(snapshot.visibility)}   Wind {snapshot.wind_speed:g} m/s",
        f"Humidity {snapshot.humidity:g}%   Pressure {snapshot.pressure:g} hPa",
        f"Sunrise {format_clock(snapshot.sunrise, tz)}   Sunset {format_clock(snapshot.sunset, tz)}",
    ]


def render_view(view: ViewState, tz: Optional[tzinfo] = None) -> List[str]:
    if isinstance(view, Ready):
        return render_weather_card(view.snapshot, tz)
    if isinstance(view, Error):
        return [f"⚠️ {view.message}", RETRY_HINT]
    return [LOADING_TEXT]


def render_suggestions(query: str, suggestions: Sequence[str]) -> List[str]:
    if not suggestions:
        return [f"No suggestions for '{query}'"]
    return [f"Suggestions for '{query}':"] + [f"  • {city}" for city in suggestions]


def render_chat(panel: ChatPanel) -> List[str]:
    """Render the chat transcript; nothing while the panel is closed."""
    if not panel.is_open:
        return []

    lines = ["── Weather Assistant ──"]
    for message in panel.transcript:
        who = "You" if message.is_user else "Assistant"
        stamp = message.created_at.strftime("%I:%M %p")
        lines.append(f"[{stamp}] {who}: {message.text}")
    if panel.pending:
        lines.append("Assistant is typing…")
    return lines


def render_dashboard(dashboard: Dashboard, tz: Optional[tzinfo] = None) -> List[str]:
    """Render the whole screen: header, weather view and chat panel."""
    lines = ["Weather App", "Real-time weather with AI assistant", ""]
    lines.extend(render_view(dashboard.view, tz))

    chat_lines = render_chat(dashboard.chat)
    if chat_lines:
        lines.append("")
        lines.extend(chat_lines)
    return lines
