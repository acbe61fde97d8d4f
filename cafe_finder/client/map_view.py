"""
In-memory map state for the client, rendered to a Leaflet page with folium.

The view keeps its own marker list so a new search can tear down the old
markers before adding new ones; folium maps are append-only, so a fresh
``folium.Map`` is built from this state on every render.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import folium
from folium.utilities import escape_backticks

from cafe_finder.core.config import settings

TILES_URL = "https://{s}.basemaps.cartocdn.com/rastertiles/voyager/{z}/{x}/{y}{r}.png"
TILES_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a>'
    ' · <a href="https://carto.com/">CARTO</a>'
)

CAFE_ICON_HTML = '<div class="marker-pin"><span>☕</span></div>'
USER_ICON_HTML = '<div class="user-pin"><span>💖</span></div>'


@dataclass
class Marker:
    lat: float
    lng: float
    popup_html: str
    kind: str = "cafe"
    popup_open: bool = False
    # Leaflet variable name, set when the map is rendered
    js_name: Optional[str] = None


class Bounds:
    def __init__(self, lat: float, lng: float):
        self.south = self.north = lat
        self.west = self.east = lng

    def extend(self, lat: float, lng: float):
        self.south = min(self.south, lat)
        self.north = max(self.north, lat)
        self.west = min(self.west, lng)
        self.east = max(self.east, lng)
        return self

    def contains(self, lat: float, lng: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lng <= self.east

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.south + self.north) / 2, (self.west + self.east) / 2)

    def to_list(self) -> List[List[float]]:
        return [[self.south, self.west], [self.north, self.east]]


@dataclass
class FitBounds:
    bounds: Bounds
    padding: Tuple[int, int]
    max_zoom: int


@dataclass
class Flight:
    lat: float
    lng: float
    zoom: int
    duration_s: float


@dataclass
class MapView:
    center: Tuple[float, float] = field(
        default_factory=lambda: (settings.MAP_CENTER_LAT, settings.MAP_CENTER_LNG)
    )
    zoom: int = field(default_factory=lambda: settings.MAP_START_ZOOM)
    markers: List[Marker] = field(default_factory=list)
    user_marker: Optional[Marker] = None
    fitted: Optional[FitBounds] = None
    last_flight: Optional[Flight] = None

    def add_marker(self, marker: Marker) -> Marker:
        self.markers.append(marker)
        return marker

    def clear_markers(self):
        self.markers = []

    def open_popup(self, marker: Marker):
        # Leaflet keeps a single popup open at a time
        for m in self._all_markers():
            m.popup_open = m is marker

    def set_user_location(self, lat: float, lng: float, popup_html: str) -> Marker:
        self.user_marker = Marker(lat=lat, lng=lng, popup_html=popup_html, kind="user")
        self.open_popup(self.user_marker)
        return self.user_marker

    def fly_to(self, lat: float, lng: float, zoom: int, duration_s: float):
        self.last_flight = Flight(lat=lat, lng=lng, zoom=zoom, duration_s=duration_s)
        self.center = (lat, lng)
        self.zoom = zoom

    def fit_bounds(self, bounds: Bounds, padding: Tuple[int, int], max_zoom: int):
        # The fitted zoom depends on the viewport, so Leaflet computes it at
        # render time; `zoom` keeps the last explicit zoom.
        self.fitted = FitBounds(bounds=bounds, padding=padding, max_zoom=max_zoom)
        self.center = bounds.center

    def _all_markers(self) -> List[Marker]:
        if self.user_marker is None:
            return list(self.markers)
        return [self.user_marker] + self.markers

    def to_folium(self, width="100%", height="100%") -> folium.Map:
        m = folium.Map(
            location=list(self.center),
            zoom_start=self.zoom,
            tiles=None,
            width=width,
            height=height,
        )
        folium.TileLayer(
            tiles=TILES_URL,
            attr=TILES_ATTRIBUTION,
            max_zoom=19,
            subdomains="abcd",
            name="CARTO Voyager",
        ).add_to(m)

        for marker in self._all_markers():
            if marker.kind == "user":
                icon = folium.DivIcon(
                    html=USER_ICON_HTML,
                    class_name="cafe-marker",
                    icon_size=(44, 44),
                    icon_anchor=(22, 44),
                    popup_anchor=(0, -46),
                )
            else:
                icon = folium.DivIcon(
                    html=CAFE_ICON_HTML,
                    class_name="cafe-marker",
                    icon_size=(40, 40),
                    icon_anchor=(20, 40),
                    popup_anchor=(0, -42),
                )
            rendered = folium.Marker(
                location=[marker.lat, marker.lng],
                # popup_html is already escaped by the templates
                popup=folium.Popup(
                    folium.Html(escape_backticks(marker.popup_html), script=True),
                    show=marker.popup_open,
                ),
                icon=icon,
            ).add_to(m)
            marker.js_name = rendered.get_name()

        if self.fitted is not None:
            m.fit_bounds(
                self.fitted.bounds.to_list(),
                padding=self.fitted.padding,
                max_zoom=self.fitted.max_zoom,
            )
        return m
