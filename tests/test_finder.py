import asyncio
import pytest
from unittest.mock import patch
from cafe_finder.client.finder import CafeFinder, LOCATION_MESSAGES
from cafe_finder.client.geolocation import (
    FixedLocator,
    GeolocationOptions,
    GoogleLocator,
    LocationError,
    LocationErrorCode,
    Locator,
)
from cafe_finder.client.proxy import ProxyConnectionError, ProxyResponseError
from cafe_finder.client.state import DEFAULT_BUTTON_LABEL, SearchState, StatusKind
from cafe_finder.models import Cafe, CafeSearchResponse

USER = (29.65, -82.32)


def _cafe(name, lat, lng):
    return Cafe(name=name, address=f"{name} St", lat=lat, lng=lng, category="cafe")


THREE_CAFES = [
    _cafe("Curia on the Drag", 29.6521, -82.3251),
    _cafe("Opus Coffee", 29.6489, -82.3432),
    _cafe("Karma Cream", 29.6537, -82.3374),
]


class StubProxy:
    def __init__(self, cafes=None, error=None):
        self.cafes = cafes or []
        self.error = error
        self.calls = []
        self.button_disabled_during_call = None
        self.finder = None

    async def fetch_cafes(self, lat, lng, radius):
        self.calls.append((lat, lng, radius))
        if self.finder is not None:
            self.button_disabled_during_call = self.finder.button.disabled
        if self.error is not None:
            raise self.error
        return CafeSearchResponse(cafes=self.cafes, count=len(self.cafes))


class FailingLocator(Locator):
    def __init__(self, code):
        super().__init__()
        self.code = code

    async def _acquire(self, options):
        raise LocationError(self.code, "nope")


class SlowLocator(Locator):
    async def _acquire(self, options):
        await asyncio.sleep(1)


def _finder(proxy, locator=None, **kwargs):
    finder = CafeFinder(
        locator=locator if locator is not None else FixedLocator(*USER),
        proxy=proxy,
        **kwargs,
    )
    proxy.finder = finder
    return finder


def _assert_back_to_idle(finder):
    assert finder.state == SearchState.IDLE
    assert finder.history[-1] == SearchState.IDLE
    assert finder.button.disabled is False
    assert finder.button.label == DEFAULT_BUTTON_LABEL


@pytest.mark.asyncio
async def test_three_cafes_are_displayed():
    proxy = StubProxy(cafes=THREE_CAFES)
    finder = _finder(proxy)

    outcome = await finder.find_cafes()

    assert outcome == SearchState.DISPLAYING_RESULTS
    assert finder.history == [
        SearchState.IDLE,
        SearchState.LOCATING,
        SearchState.SEARCHING,
        SearchState.DISPLAYING_RESULTS,
        SearchState.IDLE,
    ]
    assert finder.status.message.startswith("found 3 cute cafes near you!")
    assert finder.status.kind == StatusKind.SUCCESS
    assert len(finder.map_view.markers) == 3
    assert len(finder.cafe_list.cards) == 3
    assert finder.cafe_list.count_text == "3"
    assert proxy.calls == [(29.65, -82.32, 1500)]
    assert proxy.button_disabled_during_call is True
    _assert_back_to_idle(finder)

    fitted = finder.map_view.fitted
    assert fitted.padding == (50, 50)
    assert fitted.max_zoom == 16
    assert fitted.bounds.contains(*USER)
    for cafe in THREE_CAFES:
        assert fitted.bounds.contains(cafe.lat, cafe.lng)


@pytest.mark.asyncio
async def test_user_marker_replaced_and_popup_open():
    finder = _finder(StubProxy(cafes=THREE_CAFES))
    await finder.find_cafes()
    first_user_marker = finder.map_view.user_marker
    await finder.find_cafes()

    user_marker = finder.map_view.user_marker
    assert user_marker is not first_user_marker
    assert (user_marker.lat, user_marker.lng) == USER
    assert user_marker.popup_open
    assert "you are here" in user_marker.popup_html


@pytest.mark.asyncio
async def test_markers_do_not_accumulate_across_searches():
    proxy = StubProxy(cafes=THREE_CAFES)
    finder = _finder(proxy)
    await finder.find_cafes()

    proxy.cafes = THREE_CAFES[:1]
    await finder.find_cafes()

    assert len(finder.map_view.markers) == 1
    assert len(finder.cafe_list.cards) == 1


@pytest.mark.asyncio
async def test_cafes_without_coordinates_are_skipped_but_counted():
    cafes = THREE_CAFES[:2] + [_cafe("Nowhere Cafe", 29.65, None)]
    finder = _finder(StubProxy(cafes=cafes))

    await finder.find_cafes()

    assert len(finder.map_view.markers) == 2
    assert len(finder.cafe_list.cards) == 2
    assert finder.cafe_list.count_text == "3"
    assert finder.status.message.startswith("found 3 cute cafes")


@pytest.mark.asyncio
async def test_card_animation_is_staggered_by_position():
    finder = _finder(StubProxy(cafes=THREE_CAFES))
    await finder.find_cafes()

    delays = [card.animation_delay_s for card in finder.cafe_list.cards]
    assert delays == pytest.approx([0.0, 0.03, 0.06])


@pytest.mark.asyncio
async def test_empty_result_shows_empty_state():
    proxy = StubProxy(cafes=THREE_CAFES)
    finder = _finder(proxy)
    await finder.find_cafes()

    proxy.cafes = []
    outcome = await finder.find_cafes()

    assert outcome == SearchState.DISPLAYING_EMPTY
    assert "try a bigger radius" in finder.status.message
    assert finder.map_view.markers == []
    assert finder.cafe_list.cards == []
    assert "empty-state" in finder.cafe_list.empty_state_html
    assert finder.cafe_list.count_text == ""
    _assert_back_to_idle(finder)


@pytest.mark.asyncio
async def test_location_denied_never_calls_proxy():
    proxy = StubProxy(cafes=THREE_CAFES)
    finder = _finder(proxy, FailingLocator(LocationErrorCode.PERMISSION_DENIED))

    outcome = await finder.find_cafes()

    assert outcome == SearchState.FAILED
    assert finder.status.message.startswith("location access denied")
    assert proxy.calls == []
    assert finder.history == [
        SearchState.IDLE,
        SearchState.LOCATING,
        SearchState.FAILED,
        SearchState.IDLE,
    ]
    _assert_back_to_idle(finder)


@pytest.mark.asyncio
async def test_each_location_failure_has_its_own_message():
    messages = set()
    for code in LocationErrorCode:
        finder = _finder(StubProxy(), FailingLocator(code))
        await finder.find_cafes()
        assert finder.status.message == LOCATION_MESSAGES[code]
        messages.add(finder.status.message)

    assert len(messages) == len(LocationErrorCode)


@pytest.mark.asyncio
async def test_no_locator_means_unsupported():
    proxy = StubProxy()
    finder = CafeFinder(locator=None, proxy=proxy)

    outcome = await finder.find_cafes()

    assert outcome == SearchState.FAILED
    assert finder.status.message == LOCATION_MESSAGES[LocationErrorCode.UNSUPPORTED]
    assert proxy.calls == []


@pytest.mark.asyncio
async def test_location_timeout():
    finder = _finder(
        StubProxy(),
        SlowLocator(),
        geo_options=GeolocationOptions(timeout_ms=10, maximum_age_ms=0),
    )

    await finder.find_cafes()

    assert finder.status.message == LOCATION_MESSAGES[LocationErrorCode.TIMEOUT]


@pytest.mark.asyncio
async def test_upstream_403_shows_generic_failure():
    finder = _finder(StubProxy(error=ProxyResponseError(403)))

    outcome = await finder.find_cafes()

    assert outcome == SearchState.FAILED
    assert finder.status.message == "oops: Server error: 403 😅"
    assert finder.status.kind == StatusKind.ERROR
    _assert_back_to_idle(finder)


@pytest.mark.asyncio
async def test_unreachable_proxy_shows_connection_message():
    finder = _finder(StubProxy(error=ProxyConnectionError("refused")))

    await finder.find_cafes()

    assert finder.status.message.startswith("couldn't connect to server")
    assert "3001" in finder.status.message
    _assert_back_to_idle(finder)


@pytest.mark.asyncio
async def test_select_card_activates_one_and_flies_there():
    finder = _finder(StubProxy(cafes=THREE_CAFES))
    await finder.find_cafes()

    finder.select_card(1)
    assert [c.active for c in finder.cafe_list.cards] == [False, True, False]
    assert finder.map_view.center == (29.6489, -82.3432)
    assert finder.map_view.zoom == 17
    flight = finder.map_view.last_flight
    assert (flight.lat, flight.lng) == (29.6489, -82.3432)
    assert flight.zoom == 17
    assert flight.duration_s == pytest.approx(0.8)
    assert finder.cafe_list.cards[1].marker.popup_open

    finder.select_card(2)
    assert [c.active for c in finder.cafe_list.cards] == [False, False, True]
    assert not finder.cafe_list.cards[1].marker.popup_open
    assert finder.map_view.center == (29.6537, -82.3374)


@pytest.mark.asyncio
async def test_select_marker_highlights_and_scrolls_card():
    finder = _finder(StubProxy(cafes=THREE_CAFES))
    await finder.find_cafes()

    card = finder.select_marker(0)
    assert card.scrolled_into_view
    assert finder.cafe_list.active_cards == [card]

    finder.select_marker(2)
    assert finder.cafe_list.active_cards == [finder.cafe_list.cards[2]]


@pytest.mark.asyncio
async def test_unsafe_names_are_escaped():
    evil = _cafe("<script>alert('x')</script>", 29.651, -82.321)
    finder = _finder(StubProxy(cafes=[evil]))
    await finder.find_cafes()

    popup = finder.map_view.markers[0].popup_html
    card = finder.cafe_list.cards[0].html
    for html in (popup, card):
        assert "<script>" not in html
        assert "&lt;script&gt;" in html


@pytest.mark.asyncio
async def test_geolocation_reply_without_location_fails_cleanly(fake_session):
    proxy = StubProxy(cafes=THREE_CAFES)
    finder = _finder(proxy, GoogleLocator(api_key="k"))
    session = fake_session(200, json_body={"error": "weird"})

    with patch("cafe_finder.client.geolocation.aiohttp.ClientSession", return_value=session):
        outcome = await finder.find_cafes()

    assert outcome == SearchState.FAILED
    assert finder.status.message == LOCATION_MESSAGES[LocationErrorCode.POSITION_UNAVAILABLE]
    assert proxy.calls == []
    _assert_back_to_idle(finder)


@pytest.mark.asyncio
async def test_page_has_cards_linked_to_markers():
    finder = _finder(StubProxy(cafes=THREE_CAFES))
    await finder.find_cafes()

    html = finder.render_page()

    assert html.count('class="cafe-card') == 3
    assert "cafe-info" in html
    assert "Opus Coffee" in html
    assert "flyTo" in html
    assert 'id="cafe-count">3<' in html
    for card in finder.cafe_list.cards:
        assert card.marker.js_name in html


@pytest.mark.asyncio
async def test_page_shows_empty_state_without_results():
    finder = _finder(StubProxy(cafes=[]))
    await finder.find_cafes()

    html = finder.render_page()

    assert "empty-state" in html
    assert "try a bigger radius" in html
    assert 'class="cafe-card' not in html


@pytest.mark.asyncio
async def test_page_escapes_cafe_names():
    evil = _cafe("<script>alert('x')</script>", 29.651, -82.321)
    finder = _finder(StubProxy(cafes=[evil]))
    await finder.find_cafes()

    html = finder.render_page()

    assert "<script>alert" not in html
    assert "&lt;script&gt;alert" in html


@pytest.mark.asyncio
async def test_save_page_writes_html(tmp_path):
    finder = _finder(StubProxy(cafes=THREE_CAFES))
    await finder.find_cafes()

    out = tmp_path / "cafes.html"
    finder.save_page(str(out))

    assert "cafe-list" in out.read_text(encoding="utf-8")
