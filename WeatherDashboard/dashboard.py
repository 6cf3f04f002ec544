"""Dashboard state machine - sequences geolocation, weather fetches and chat."""
import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, List, Optional, Tuple, Union

from chat_data import Author, ChatMessage
from chat_service import ChatService
from geolocation import GeolocationError, GeolocationProviderBase, GeolocationUnavailable
from weather_data import WeatherSnapshot
from weather_provider import FetchError, WeatherProviderBase

DEFAULT_CITY = "London"
FETCH_FAILED = "Failed to fetch weather data"
CHAT_GREETING = "Hello! I'm your AI weather assistant. Ask me anything about the weather, or let's just chat! 🌤️"
CHAT_UNAVAILABLE = "I'm having trouble connecting right now. Please try again in a moment! 🤖"


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Error:
    message: str


@dataclass(frozen=True)
class Ready:
    snapshot: WeatherSnapshot


ViewState = Union[Loading, Error, Ready]


@dataclass
class ChatPanel:
    """Chat panel state; the transcript is append-only."""
    is_open: bool = False
    pending: bool = False
    transcript: List[ChatMessage] = field(default_factory=list)


@dataclass
class DashboardContext:
    """Collaborators the dashboard talks to, injected so tests can swap in fakes."""
    weather: WeatherProviderBase
    chat: ChatService
    geolocation: GeolocationProviderBase
    default_city: str = DEFAULT_CITY


class Dashboard:
    """
    Owns the view state (Loading / Error / Ready) and the chat panel.

    Every weather transition takes a new request id; a completed fetch only
    updates the view when its id is still the latest one issued, so a slow
    response can never overwrite a newer result. In-flight work is not
    cancelled, its result is just dropped.
    """

    def __init__(self, context: DashboardContext, clock: Callable[[], datetime] = datetime.now):
        self.context = context
        self.clock = clock
        self.view: ViewState = Loading()
        self.chat = ChatPanel()

        self._request_ids = itertools.count(1)
        self._latest_request = 0
        self._message_ids = itertools.count(1)
        self._listeners: List[Callable[["Dashboard"], None]] = []

        self._append_message(CHAT_GREETING, Author.ASSISTANT)

    @property
    def snapshot(self) -> Optional[WeatherSnapshot]:
        """Snapshot currently on screen, if any."""
        if isinstance(self.view, Ready):
            return self.view.snapshot
        return None

    def subscribe(self, listener: Callable[["Dashboard"], None]) -> None:
        """Call ``listener(dashboard)`` after every state change."""
        self._listeners.append(listener)

    def suggest_cities(self, query: str) -> List[str]:
        return self.context.weather.suggest_cities(query)

    # Weather transitions

    async def mount(self) -> None:
        """Locate the user and show their weather, falling back to the default city."""
        request_id = self._begin_request()
        default_city = self.context.default_city

        fetch = self.context.weather.fetch_by_city
        args: Tuple[Any, ...] = (default_city,)
        try:
            lat, lon = await asyncio.to_thread(self.context.geolocation.current_position)
        except GeolocationUnavailable as err:
            logging.info("Geolocation unavailable (%s), using %s", err, default_city)
        except GeolocationError as err:
            logging.warning("Geolocation denied or failed (%s), using %s", err, default_city)
        else:
            logging.info("Position acquired: lat=%s lon=%s", lat, lon)
            fetch = self.context.weather.fetch_by_coordinates
            args = (lat, lon)

        await self._load(request_id, fetch, args, FETCH_FAILED)

    async def search(self, city: str) -> None:
        """Show the weather for a city typed or picked by the user."""
        city = city.strip()
        if not city:
            logging.debug("Ignoring empty search")
            return

        request_id = self._begin_request()
        logging.info("Searching weather for %s (request %s)", city, request_id)
        await self._load(
            request_id,
            self.context.weather.fetch_by_city,
            (city,),
            f"Failed to fetch weather for {city}",
        )

    async def retry(self) -> None:
        """The "try again" button on the error screen."""
        if not isinstance(self.view, Error):
            logging.warning("Retry ignored: dashboard is not showing an error")
            return
        await self.mount()

    async def locate(self) -> None:
        """A click on the location label of the weather card."""
        if not isinstance(self.view, Ready):
            logging.warning("Locate ignored: no weather card on screen")
            return
        await self.mount()

    def _begin_request(self) -> int:
        self._latest_request = next(self._request_ids)
        self._set_view(Loading())
        return self._latest_request

    async def _load(
        self,
        request_id: int,
        fetch: Callable[..., WeatherSnapshot],
        args: Tuple[Any, ...],
        error_message: str
    ) -> None:
        try:
            snapshot = await asyncio.to_thread(fetch, *args)
        except FetchError as err:
            logging.error("Weather fetch failed (request %s): %s", request_id, err)
            self._apply(request_id, Error(error_message))
        except Exception:
            logging.exception("Unexpected error during weather fetch (request %s)", request_id)
            self._apply(request_id, Error(error_message))
        else:
            self._apply(request_id, Ready(snapshot))

    def _apply(self, request_id: int, view: ViewState) -> None:
        if request_id != self._latest_request:
            logging.debug(
                "Discarding stale result of request %s (latest is %s)",
                request_id,
                self._latest_request,
            )
            return
        self._set_view(view)

    def _set_view(self, view: ViewState) -> None:
        self.view = view
        self._notify()

    # Chat panel

    def open_chat(self) -> None:
        self.chat.is_open = True
        self._notify()

    def close_chat(self) -> None:
        self.chat.is_open = False
        self._notify()

    async def send_chat(self, text: str) -> Optional[ChatMessage]:
        """
        Send a chat message and append the assistant's reply.

        Ignored when the panel is closed, the text is blank or another
        message is still waiting for its reply.

        Returns:
            The assistant message appended, or None if the message was ignored
        """
        if not self.chat.is_open:
            logging.warning("Chat message ignored: panel is closed")
            return None
        if not text.strip() or self.chat.pending:
            return None

        self._append_message(text, Author.USER)
        self.chat.pending = True
        self._notify()

        try:
            reply = await asyncio.to_thread(self.context.chat.converse, text, self.snapshot)
        except Exception:
            logging.exception("Chat service failed")
            reply = CHAT_UNAVAILABLE
        finally:
            self.chat.pending = False

        message = self._append_message(reply, Author.ASSISTANT)
        self._notify()
        return message

    def _append_message(self, text: str, author: Author) -> ChatMessage:
        message = ChatMessage(
            message_id=next(self._message_ids),
            text=text,
            author=author,
            created_at=self.clock(),
        )
        self.chat.transcript.append(message)
        return message

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self)
