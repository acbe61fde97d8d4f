"""
The full results page: folium map on the left, card list on the right.

Cards and markers are paired by position, so clicking a card flies the map
to its cafe and opens the popup, and clicking a marker highlights its card.
"""
from typing import List, Optional

import folium
from jinja2 import Template

from cafe_finder.client.cafe_list import CafeList
from cafe_finder.client.map_view import MapView
from cafe_finder.client.state import StatusLine
from cafe_finder.client.templates import render_page_style, render_panel
from cafe_finder.core.config import settings


class CardMarkerLink(folium.MacroElement):
    _template = Template(
        """
{% macro script(this, kwargs) %}
(function() {
    var map = {{ this._parent.get_name() }};
    var markers = [{{ this.marker_names | join(", ") }}];
    var cards = document.querySelectorAll("#cafe-list .cafe-card");

    function activate(card) {
        cards.forEach(function(c) { c.classList.remove("active"); });
        card.classList.add("active");
    }

    cards.forEach(function(card, i) {
        var marker = markers[i];
        card.addEventListener("click", function() {
            map.flyTo(marker.getLatLng(), {{ this.zoom }}, {duration: {{ this.duration_s }}});
            marker.openPopup();
            activate(card);
        });
        marker.on("click", function() {
            activate(card);
            card.scrollIntoView({behavior: "smooth", block: "nearest"});
        });
    });
})();
{% endmacro %}
"""
    )

    def __init__(self, marker_names: List[str], zoom: int, duration_s: float):
        super().__init__()
        self._name = "CardMarkerLink"
        self.marker_names = marker_names
        self.zoom = zoom
        self.duration_s = duration_s


def build_page(
    map_view: MapView, cafe_list: CafeList, status: Optional[StatusLine] = None
) -> folium.Map:
    m = map_view.to_folium(width="65%")
    root = m.get_root()
    root.header.add_child(folium.Element(render_page_style()))
    root.html.add_child(folium.Element(render_panel(cafe_list, status)))

    if cafe_list.cards:
        CardMarkerLink(
            [card.marker.js_name for card in cafe_list.cards],
            zoom=settings.FLY_TO_ZOOM,
            duration_s=settings.FLY_TO_DURATION_S,
        ).add_to(m)
    return m
