"""Terminal weather dashboard with an AI chat assistant."""
import argparse
import asyncio
import logging
import os
import sys
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from dotenv import load_dotenv

from chat_service import ChatService
from console_view import ConsoleView, DashboardView
from dashboard import DEFAULT_CITY, Dashboard, DashboardContext
from gemini_provider import GeminiChatProvider
from geolocation import DeniedGeolocation, GeolocationProviderBase, StaticGeolocation
from layout import render_dashboard, render_suggestions
from openweather_provider import OpenWeatherProvider

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_LOG_FILE = os.path.join(BASE_DIR, "weather-dashboard.log")

HELP_LINES = [
    "Commands:",
    "  /search <city>   show the weather for a city",
    "  /suggest <text>  list matching city names",
    "  /retry           try again after an error",
    "  /locate          reload the weather for your position",
    "  /chat            open the weather assistant",
    "  /close           close the weather assistant",
    "  /help            show this help",
    "  /quit            exit",
    "Plain text is sent to the assistant while it is open, otherwise searched as a city.",
]


@dataclass
class AppConfig:
    weather_api_key: str
    gemini_api_key: Optional[str]
    weather_base_url: Optional[str]
    gemini_api_url: Optional[str]
    lat: Optional[float]
    lon: Optional[float]
    default_city: str
    units: str


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("Terminal weather dashboard")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE)
    parser.add_argument("--units", choices=["metric", "imperial", "standard"], default=None)
    parser.add_argument("--timeout", type=float, default=10.0, help="Weather HTTP timeout in seconds")
    parser.add_argument("--chat-timeout", type=float, default=30.0, help="Chat HTTP timeout in seconds")
    parser.add_argument("--default-city", default=None, help="City shown when the position is unknown")
    parser.add_argument("--deny-location", action="store_true", help="Behave as if location access was refused")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: str, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.FileHandler(log_file)]
    if verbose:
        # stdout belongs to the dashboard itself
        handlers.append(logging.StreamHandler(sys.stderr))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers
    )


def load_config(args: argparse.Namespace) -> AppConfig:
    load_dotenv()
    api_key = os.getenv("OPENWEATHER_API_KEY")
    lat = os.getenv("WEATHER_LAT")
    lon = os.getenv("WEATHER_LON")

    if not api_key:
        raise SystemExit("Missing OPENWEATHER_API_KEY in environment")
    if bool(lat) != bool(lon):
        raise SystemExit("WEATHER_LAT and WEATHER_LON must be set together")

    try:
        lat_val = float(lat) if lat else None
        lon_val = float(lon) if lon else None
    except ValueError as exc:
        raise SystemExit(f"Invalid coordinates: {exc}") from exc

    gemini_key = os.getenv("GEMINI_API_KEY") or None
    if not gemini_key:
        logging.warning("GEMINI_API_KEY not set; the assistant will use canned replies")

    config = AppConfig(
        weather_api_key=api_key,
        gemini_api_key=gemini_key,
        weather_base_url=os.getenv("OPENWEATHER_BASE_URL") or None,
        gemini_api_url=os.getenv("GEMINI_API_URL") or None,
        lat=lat_val,
        lon=lon_val,
        default_city=args.default_city or os.getenv("WEATHER_DEFAULT_CITY") or DEFAULT_CITY,
        units=args.units or os.getenv("WEATHER_UNITS", "metric"),
    )
    logging.info(
        "Configuration loaded: lat=%s lon=%s default_city=%s units=%s",
        config.lat,
        config.lon,
        config.default_city,
        config.units,
    )
    return config


def build_context(config: AppConfig, args: argparse.Namespace) -> DashboardContext:
    weather = OpenWeatherProvider(
        api_key=config.weather_api_key,
        base_url=config.weather_base_url,
        units=config.units,
        timeout=args.timeout,
    )
    chat = ChatService(
        GeminiChatProvider(
            api_key=config.gemini_api_key,
            api_url=config.gemini_api_url,
            timeout=args.chat_timeout,
        )
    )
    geolocation: GeolocationProviderBase
    if args.deny_location:
        geolocation = DeniedGeolocation()
    else:
        geolocation = StaticGeolocation(config.lat, config.lon)

    logging.info("Dashboard context ready (default city %s)", config.default_city)
    return DashboardContext(
        weather=weather,
        chat=chat,
        geolocation=geolocation,
        default_city=config.default_city,
    )


def parse_command(line: str, chat_open: bool) -> Tuple[str, str]:
    """
    Split an input line into (command, argument).

    "/search Paris" -> ("search", "Paris"). Plain text becomes "say" while
    the chat is open and "search" otherwise.
    """
    text = line.strip()
    if text.startswith("/"):
        name, _, arg = text.partition(" ")
        return name[1:].lower(), arg.strip()
    return ("say" if chat_open else "search"), text


async def handle_command(dashboard: Dashboard, view: DashboardView, command: str, arg: str) -> bool:
    """Run one command; returns False when the user asked to quit."""
    if command == "quit":
        return False
    if command == "search":
        await dashboard.search(arg)
    elif command == "say":
        await dashboard.send_chat(arg)
    elif command == "suggest":
        view.show(render_suggestions(arg, dashboard.suggest_cities(arg)))
    elif command == "retry":
        await dashboard.retry()
    elif command == "locate":
        await dashboard.locate()
    elif command == "chat":
        dashboard.open_chat()
    elif command == "close":
        dashboard.close_chat()
    else:
        view.show(HELP_LINES)
    return True


async def run(dashboard: Dashboard, view: DashboardView, read_line: Callable[[str], str] = input) -> None:
    dashboard.subscribe(lambda d: view.show(render_dashboard(d)))
    await dashboard.mount()

    while True:
        try:
            line = await asyncio.to_thread(read_line, "> ")
        except EOFError:
            break
        command, arg = parse_command(line, dashboard.chat.is_open)
        try:
            if not await handle_command(dashboard, view, command, arg):
                break
        except Exception as exc:
            logging.exception("Unexpected error: %s", exc)


def main(argv=None) -> None:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    config = load_config(args)

    dashboard = Dashboard(build_context(config, args))
    view = ConsoleView()
    view.clear()

    try:
        asyncio.run(run(dashboard, view))
    except KeyboardInterrupt:
        logging.info("Interrupted")
    finally:
        logging.info("Dashboard stopped")


if __name__ == "__main__":
    main()
