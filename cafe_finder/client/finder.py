"""
The search pipeline behind the "Find Cafes Near Me" button.

One call to ``CafeFinder.find_cafes`` walks the state machine

    IDLE -> LOCATING -> SEARCHING -> DISPLAYING_RESULTS | DISPLAYING_EMPTY
                    \\-> FAILED   \\-> FAILED

and always lands back in IDLE with the button re-enabled, whatever happened
in between. The terminal state reached is returned to the caller.
"""
import logging
from typing import List, Optional

from cafe_finder.client.cafe_list import CafeCard, CafeList
from cafe_finder.client.geolocation import (
    GeolocationOptions,
    LocationError,
    LocationErrorCode,
    Locator,
    Position,
)
from cafe_finder.client.map_view import Bounds, MapView, Marker
from cafe_finder.client.page import build_page
from cafe_finder.client.proxy import ProxyClient, ProxyConnectionError
from cafe_finder.client.state import SearchButton, SearchState, StatusKind, StatusLine
from cafe_finder.client.templates import (
    render_card,
    render_empty_state,
    render_popup,
    render_user_popup,
)
from cafe_finder.core.config import settings
from cafe_finder.models import Cafe

logger = logging.getLogger(__name__)

LOCATING_MESSAGE = "getting your location... 📍"
SEARCHING_MESSAGE = "finding cozy cafes nearby... ☕✨"
EMPTY_MESSAGE = "no cafes found nearby 😿 try a bigger radius!"

LOCATION_MESSAGES = {
    LocationErrorCode.PERMISSION_DENIED: "location access denied 🔒 please allow location and try again!",
    LocationErrorCode.POSITION_UNAVAILABLE: "couldn't figure out where you are 🧭 please try again in a moment!",
    LocationErrorCode.TIMEOUT: "finding your location took too long ⏳ please try again!",
    LocationErrorCode.UNSUPPORTED: "geolocation isn't supported here 🙈 try passing your coordinates instead!",
}


def found_message(count: int) -> str:
    return f"found {count} cute cafes near you! 🎉"


def connection_message() -> str:
    port = settings.PORT
    return f"couldn't connect to server 💔 make sure backend is running on port {port}!"


class CafeFinder:
    def __init__(
        self,
        locator: Optional[Locator] = None,
        proxy: Optional[ProxyClient] = None,
        map_view: Optional[MapView] = None,
        cafe_list: Optional[CafeList] = None,
        radius: Optional[int] = None,
        geo_options: Optional[GeolocationOptions] = None,
    ):
        self.locator = locator
        self.proxy = proxy or ProxyClient()
        self.map_view = map_view or MapView()
        self.cafe_list = cafe_list or CafeList()
        self.radius = radius or settings.DEFAULT_RADIUS_M
        self.geo_options = geo_options or GeolocationOptions.from_settings()

        self.button = SearchButton()
        self.status: Optional[StatusLine] = None
        self.state = SearchState.IDLE
        self.history: List[SearchState] = [SearchState.IDLE]
        self.cafes: List[Cafe] = []

    def _enter(self, state: SearchState):
        logger.debug(f"{self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def show_status(self, message: str, kind: StatusKind):
        self.status = StatusLine(message=message, kind=kind)

    def _fail(self, message: str) -> SearchState:
        self.show_status(message, StatusKind.ERROR)
        self._enter(SearchState.FAILED)
        return SearchState.FAILED

    async def find_cafes(self) -> SearchState:
        self.button.set_busy()
        try:
            return await self._search()
        finally:
            self.button.reset()
            self._enter(SearchState.IDLE)

    async def _locate(self) -> Position:
        if self.locator is None:
            raise LocationError(
                LocationErrorCode.UNSUPPORTED,
                "Geolocation is not supported on this device",
            )
        return await self.locator.locate(self.geo_options)

    async def _search(self) -> SearchState:
        self._enter(SearchState.LOCATING)
        self.show_status(LOCATING_MESSAGE, StatusKind.LOADING)

        try:
            position = await self._locate()

            self._enter(SearchState.SEARCHING)
            self.show_status(SEARCHING_MESSAGE, StatusKind.LOADING)
            self.map_view.set_user_location(
                position.lat, position.lng, render_user_popup()
            )

            data = await self.proxy.fetch_cafes(position.lat, position.lng, self.radius)

            if not data.cafes:
                self._show_empty()
                self._enter(SearchState.DISPLAYING_EMPTY)
                return SearchState.DISPLAYING_EMPTY

            self.show_status(found_message(len(data.cafes)), StatusKind.SUCCESS)
            self.display_cafes(data.cafes, position.lat, position.lng)
            self._enter(SearchState.DISPLAYING_RESULTS)
            return SearchState.DISPLAYING_RESULTS

        except LocationError as e:
            logger.warning(f"Location error ({e.code.name}): {e}")
            return self._fail(LOCATION_MESSAGES[e.code])
        except ProxyConnectionError as e:
            logger.error(f"Error: {e}")
            return self._fail(connection_message())
        except Exception as e:
            logger.exception("Error:")
            return self._fail(f"oops: {e} 😅")

    def _show_empty(self):
        self.show_status(EMPTY_MESSAGE, StatusKind.ERROR)
        self.cafes = []
        self.map_view.clear_markers()
        self.cafe_list.show_empty(render_empty_state())

    def display_cafes(self, cafes: List[Cafe], user_lat: float, user_lng: float):
        self.map_view.clear_markers()
        self.cafe_list.clear()
        self.cafes = list(cafes)
        self.cafe_list.count_text = str(len(cafes))

        bounds = Bounds(user_lat, user_lng)

        for index, cafe in enumerate(cafes):
            if not cafe.has_coordinates:
                continue

            bounds.extend(cafe.lat, cafe.lng)
            marker = self.map_view.add_marker(
                Marker(lat=cafe.lat, lng=cafe.lng, popup_html=render_popup(cafe))
            )
            self.cafe_list.add_card(
                CafeCard(
                    position=index,
                    cafe=cafe,
                    html=render_card(cafe),
                    marker=marker,
                    animation_delay_s=index * settings.CARD_STAGGER_S,
                )
            )

        padding = (settings.FIT_PADDING_PX, settings.FIT_PADDING_PX)
        self.map_view.fit_bounds(bounds, padding=padding, max_zoom=settings.FIT_MAX_ZOOM)

    def select_card(self, k: int) -> CafeCard:
        """Card click: fly to the cafe, open its popup, highlight the card."""
        card = self.cafe_list.cards[k]
        self.map_view.fly_to(
            card.cafe.lat,
            card.cafe.lng,
            settings.FLY_TO_ZOOM,
            settings.FLY_TO_DURATION_S,
        )
        self.map_view.open_popup(card.marker)
        self.cafe_list.activate(card)
        return card

    def select_marker(self, k: int) -> CafeCard:
        """Marker click: highlight the matching card and scroll it into view."""
        card = self.cafe_list.cards[k]
        self.map_view.open_popup(card.marker)
        self.cafe_list.activate(card)
        card.scrolled_into_view = True
        return card

    def render_page(self) -> str:
        """The map and the card list as one standalone HTML page."""
        page = build_page(self.map_view, self.cafe_list, self.status)
        return page.get_root().render()

    def save_page(self, path: str):
        build_page(self.map_view, self.cafe_list, self.status).save(path)
        logger.info(f"Map page written to {path}")
