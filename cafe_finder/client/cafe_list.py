from dataclasses import dataclass
from typing import List, Optional

from cafe_finder.client.map_view import Marker
from cafe_finder.models import Cafe


@dataclass
class CafeCard:
    position: int
    cafe: Cafe
    html: str
    marker: Marker
    animation_delay_s: float = 0.0
    active: bool = False
    scrolled_into_view: bool = False


class CafeList:
    """The scrollable list next to the map, one card per mapped cafe."""

    def __init__(self):
        self.cards: List[CafeCard] = []
        self.empty_state_html: Optional[str] = None
        self.count_text = ""

    def clear(self):
        self.cards = []
        self.empty_state_html = None

    def show_empty(self, html: str):
        self.cards = []
        self.empty_state_html = html
        self.count_text = ""

    def add_card(self, card: CafeCard) -> CafeCard:
        self.cards.append(card)
        return card

    def activate(self, card: CafeCard):
        for c in self.cards:
            c.active = c is card

    @property
    def active_cards(self) -> List[CafeCard]:
        return [c for c in self.cards if c.active]
