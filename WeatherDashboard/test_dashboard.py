"""Tests for the dashboard state machine."""
import asyncio
import threading
from datetime import datetime

import pytest

from chat_data import Author, ChatFailure, ChatSuccess
from chat_service import ChatService
from city_suggestions import suggest_cities
from dashboard import (
    CHAT_GREETING,
    CHAT_UNAVAILABLE,
    FETCH_FAILED,
    Dashboard,
    DashboardContext,
    Error,
    Loading,
    Ready,
)
from geolocation import DeniedGeolocation, GeolocationProviderBase, StaticGeolocation
from layout import render_dashboard
from test_chat_service import MockChatProvider
from test_weather_data import make_snapshot
from weather_provider import FetchError, WeatherProviderBase

LONDON = make_snapshot(location_name="London", country="GB", temp=11.4)
PARIS = make_snapshot(location_name="Paris", country="FR", temp=18.2, condition_main="Clear",
                      condition_description="clear sky", condition_icon="01d")
BERLIN = make_snapshot(location_name="Berlin", country="DE", temp=9.0)
HERE = make_snapshot(location_name="Westminster", country="GB", temp=12.6)


class FakeWeatherProvider(WeatherProviderBase):
    """Fake weather provider: canned snapshots, optional failures and gates."""

    def __init__(self, cities=None, at_position=HERE, failing=(), position_fails=False):
        self.cities = dict(cities or {})
        self.at_position = at_position
        self.failing = set(failing)
        self.position_fails = position_fails
        self.gates = {}
        self.calls = []

    def fetch_by_coordinates(self, lat, lon):
        self.calls.append(("coords", lat, lon))
        if self.position_fails:
            raise FetchError("Network error: unreachable")
        return self.at_position

    def fetch_by_city(self, name):
        self.calls.append(("city", name))
        gate = self.gates.get(name)
        if gate is not None:
            assert gate.wait(timeout=5)
        if name in self.failing or name not in self.cities:
            raise FetchError("OpenWeather API error 404: city not found")
        return self.cities[name]

    def suggest_cities(self, query):
        return suggest_cities(query)


class CountingGeolocation(GeolocationProviderBase):
    def __init__(self, inner):
        self.inner = inner
        self.calls = 0

    def current_position(self):
        self.calls += 1
        return self.inner.current_position()


class RaisingChatService:
    def converse(self, message, snapshot):
        raise RuntimeError("boom")


def make_dashboard(weather=None, geolocation=None, chat_result=None, chat=None):
    weather = weather or FakeWeatherProvider(cities={"London": LONDON, "Paris": PARIS, "Berlin": BERLIN})
    context = DashboardContext(
        weather=weather,
        chat=chat or ChatService(MockChatProvider(chat_result or ChatFailure("unreachable"))),
        geolocation=geolocation or StaticGeolocation(51.5, -0.1),
    )
    dashboard = Dashboard(context, clock=lambda: datetime(2024, 11, 15, 9, 30))
    states = []
    dashboard.subscribe(lambda d: states.append(d.view))
    return dashboard, weather, states


def test_initial_state_is_loading():
    dashboard, _, _ = make_dashboard()

    assert dashboard.view == Loading()
    assert dashboard.snapshot is None
    assert dashboard.chat.is_open is False
    assert [m.text for m in dashboard.chat.transcript] == [CHAT_GREETING]


def test_mount_with_position():
    dashboard, weather, states = make_dashboard()

    asyncio.run(dashboard.mount())

    assert weather.calls == [("coords", 51.5, -0.1)]
    assert states == [Loading(), Ready(HERE)]
    assert "📍 Westminster, GB" in render_dashboard(dashboard)


def test_mount_geolocation_denied_uses_default_city():
    dashboard, weather, states = make_dashboard(geolocation=DeniedGeolocation())

    asyncio.run(dashboard.mount())

    assert weather.calls == [("city", "London")]
    assert dashboard.view == Ready(LONDON)


def test_mount_geolocation_unavailable_uses_default_city():
    dashboard, weather, _ = make_dashboard(geolocation=StaticGeolocation())

    asyncio.run(dashboard.mount())

    assert weather.calls == [("city", "London")]
    assert dashboard.view == Ready(LONDON)


def test_mount_uses_configured_default_city():
    weather = FakeWeatherProvider(cities={"Paris": PARIS})
    context = DashboardContext(
        weather=weather,
        chat=ChatService(MockChatProvider(ChatFailure("unreachable"))),
        geolocation=DeniedGeolocation(),
        default_city="Paris",
    )
    dashboard = Dashboard(context)

    asyncio.run(dashboard.mount())

    assert weather.calls == [("city", "Paris")]
    assert dashboard.view == Ready(PARIS)


def test_mount_fetch_failure():
    weather = FakeWeatherProvider(position_fails=True)
    dashboard, _, states = make_dashboard(weather=weather)

    asyncio.run(dashboard.mount())

    assert states == [Loading(), Error(FETCH_FAILED)]


def test_mount_default_city_failure():
    weather = FakeWeatherProvider(cities={})
    dashboard, _, _ = make_dashboard(weather=weather, geolocation=DeniedGeolocation())

    asyncio.run(dashboard.mount())

    assert dashboard.view == Error("Failed to fetch weather data")


class BrokenWeatherProvider(FakeWeatherProvider):
    """Raises something other than FetchError until repaired."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.broken = True

    def fetch_by_coordinates(self, lat, lon):
        if self.broken:
            self.calls.append(("coords", lat, lon))
            raise AttributeError("'list' object has no attribute 'get'")
        return super().fetch_by_coordinates(lat, lon)

    def fetch_by_city(self, name):
        if self.broken:
            self.calls.append(("city", name))
            raise AttributeError("'str' object has no attribute 'get'")
        return super().fetch_by_city(name)


def test_unexpected_fetch_error_shows_error_view():
    weather = BrokenWeatherProvider(cities={"Paris": PARIS})
    dashboard, _, states = make_dashboard(weather=weather)

    async def scenario():
        await dashboard.mount()
        assert dashboard.view == Error(FETCH_FAILED)
        await dashboard.search("Paris")
        assert dashboard.view == Error("Failed to fetch weather for Paris")
        weather.broken = False
        await dashboard.retry()

    asyncio.run(scenario())

    assert states == [
        Loading(), Error(FETCH_FAILED),
        Loading(), Error("Failed to fetch weather for Paris"),
        Loading(), Ready(HERE),
    ]


def test_search_success_from_ready():
    dashboard, weather, states = make_dashboard()

    async def scenario():
        await dashboard.mount()
        await dashboard.search("Paris")

    asyncio.run(scenario())

    # The previous snapshot is not shown while Paris loads
    assert states == [Loading(), Ready(HERE), Loading(), Ready(PARIS)]
    assert weather.calls[-1] == ("city", "Paris")


def test_search_failure_names_city():
    weather = FakeWeatherProvider(cities={"London": LONDON}, failing={"Paris"})
    dashboard, _, states = make_dashboard(weather=weather)

    async def scenario():
        await dashboard.mount()
        await dashboard.search("Paris")

    asyncio.run(scenario())

    assert states[-2:] == [Loading(), Error("Failed to fetch weather for Paris")]
    assert dashboard.snapshot is None


def test_search_trims_input():
    dashboard, weather, _ = make_dashboard()

    asyncio.run(dashboard.search("  Berlin \n"))

    assert weather.calls == [("city", "Berlin")]
    assert dashboard.view == Ready(BERLIN)


@pytest.mark.parametrize("text", ["", "   ", "\t"])
def test_blank_search_is_ignored(text):
    dashboard, weather, states = make_dashboard()

    asyncio.run(dashboard.search(text))

    assert weather.calls == []
    assert states == []


def test_retry_from_error_asks_position_again():
    weather = FakeWeatherProvider(position_fails=True)
    geolocation = CountingGeolocation(StaticGeolocation(51.5, -0.1))
    dashboard, _, _ = make_dashboard(weather=weather, geolocation=geolocation)

    async def scenario():
        await dashboard.mount()
        assert isinstance(dashboard.view, Error)
        weather.position_fails = False
        await dashboard.retry()

    asyncio.run(scenario())

    assert geolocation.calls == 2
    assert dashboard.view == Ready(HERE)


def test_retry_ignored_unless_error():
    dashboard, weather, _ = make_dashboard()

    async def scenario():
        await dashboard.retry()  # still Loading
        await dashboard.mount()
        await dashboard.retry()  # Ready

    asyncio.run(scenario())

    assert weather.calls == [("coords", 51.5, -0.1)]


def test_locate_from_ready():
    geolocation = CountingGeolocation(StaticGeolocation(51.5, -0.1))
    dashboard, weather, _ = make_dashboard(geolocation=geolocation)

    async def scenario():
        await dashboard.search("Paris")
        await dashboard.locate()

    asyncio.run(scenario())

    assert geolocation.calls == 1
    assert weather.calls == [("city", "Paris"), ("coords", 51.5, -0.1)]
    assert dashboard.view == Ready(HERE)


def test_locate_ignored_unless_ready():
    weather = FakeWeatherProvider(cities={}, failing={"Paris"})
    dashboard, _, _ = make_dashboard(weather=weather)

    async def scenario():
        await dashboard.search("Paris")
        await dashboard.locate()

    asyncio.run(scenario())

    assert weather.calls == [("city", "Paris")]
    assert dashboard.view == Error("Failed to fetch weather for Paris")


def test_stale_search_result_is_discarded():
    """A slow earlier search cannot overwrite a newer result."""
    dashboard, weather, states = make_dashboard()
    release_paris = threading.Event()
    weather.gates["Paris"] = release_paris

    async def scenario():
        slow = asyncio.create_task(dashboard.search("Paris"))
        await asyncio.sleep(0)
        await dashboard.search("Berlin")
        release_paris.set()
        await slow

    asyncio.run(scenario())

    assert ("city", "Paris") in weather.calls
    assert dashboard.view == Ready(BERLIN)
    assert Ready(PARIS) not in states


def test_suggest_cities_delegates_to_weather_client():
    dashboard, _, _ = make_dashboard()

    assert "London" in dashboard.suggest_cities("lon")


def test_chat_panel_open_close_keeps_transcript():
    dashboard, _, _ = make_dashboard()

    dashboard.open_chat()
    assert dashboard.chat.is_open is True
    dashboard.close_chat()
    assert dashboard.chat.is_open is False
    assert len(dashboard.chat.transcript) == 1


def test_chat_fallback_uses_snapshot():
    """Provider unreachable: the reply comes from the weather on screen."""
    dashboard, _, _ = make_dashboard(chat_result=ChatFailure("Network error"))

    async def scenario():
        await dashboard.search("Paris")
        dashboard.open_chat()
        return await dashboard.send_chat("What's the weather?")

    reply = asyncio.run(scenario())

    assert reply.author is Author.ASSISTANT
    assert "18°C" in reply.text
    assert "outdoor activities" in reply.text
    assert [m.author for m in dashboard.chat.transcript] == [
        Author.ASSISTANT, Author.USER, Author.ASSISTANT
    ]
    assert dashboard.chat.transcript[1].text == "What's the weather?"


def test_chat_model_reply():
    dashboard, _, _ = make_dashboard(chat_result=ChatSuccess("Sunny all day ☀️"))
    dashboard.open_chat()

    reply = asyncio.run(dashboard.send_chat("Any rain later?"))

    assert reply.text == "Sunny all day ☀️"


def test_chat_pending_flag_lifecycle():
    dashboard, _, _ = make_dashboard()
    seen = []
    dashboard.subscribe(lambda d: seen.append(d.chat.pending))
    dashboard.open_chat()

    asyncio.run(dashboard.send_chat("hello"))

    assert seen == [False, True, False]
    assert dashboard.chat.pending is False


def test_chat_service_exception_is_reported_in_transcript():
    dashboard, _, _ = make_dashboard(chat=RaisingChatService())
    dashboard.open_chat()

    reply = asyncio.run(dashboard.send_chat("hello"))

    assert reply.text == CHAT_UNAVAILABLE
    assert dashboard.chat.pending is False


def test_chat_without_snapshot_in_error_state():
    weather = FakeWeatherProvider(cities={}, position_fails=True)
    dashboard, _, _ = make_dashboard(weather=weather)

    async def scenario():
        await dashboard.mount()
        dashboard.open_chat()
        return await dashboard.send_chat("temperature?")

    reply = asyncio.run(scenario())

    assert "Ask me about the current weather" in reply.text


def test_chat_ignored_when_closed_blank_or_pending():
    dashboard, _, _ = make_dashboard()

    assert asyncio.run(dashboard.send_chat("hello")) is None

    dashboard.open_chat()
    assert asyncio.run(dashboard.send_chat("   ")) is None

    dashboard.chat.pending = True
    assert asyncio.run(dashboard.send_chat("hello")) is None

    assert len(dashboard.chat.transcript) == 1


def test_message_ids_increase():
    dashboard, _, _ = make_dashboard()
    dashboard.open_chat()

    asyncio.run(dashboard.send_chat("hello"))
    asyncio.run(dashboard.send_chat("hi again"))

    ids = [m.message_id for m in dashboard.chat.transcript]
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)
    assert all(m.created_at == datetime(2024, 11, 15, 9, 30) for m in dashboard.chat.transcript)
