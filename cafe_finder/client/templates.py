import random

from jinja2 import DictLoader, Environment

from cafe_finder.models import Cafe

CUP_EMOJIS = ["☕", "🧋", "🍵", "🫖", "🧁"]

TEMPLATES = {
    "popup.html": """
<div class="cafe-popup">
  <h3>{{ cafe.name }}</h3>
  <p>{{ cafe.category }}</p>
  {% if cafe.rating %}
  <p class="popup-rating">⭐ {{ cafe.rating }}/10</p>
  {% endif %}
  {% if cafe.open_status == "open" %}
  <p style="color: #2E8B57;">✅ open now!</p>
  {% elif cafe.open_status == "closed" %}
  <p style="color: #C44569;">💤 closed</p>
  {% endif %}
  {% if cafe.distance_m is not none %}
  <p class="popup-distance">{{ cafe.distance_m }} m away</p>
  {% endif %}
  <p style="font-size: 0.73rem; margin-top: 0.25rem; opacity: 0.7;">{{ cafe.address }}</p>
</div>
""",
    "card.html": """
{% if cafe.photo_url %}
<img class="cafe-photo" src="{{ cafe.photo_url }}" alt="{{ cafe.name }}" loading="lazy" />
{% else %}
<div class="cafe-photo-placeholder">{{ cup }}</div>
{% endif %}
<div class="cafe-info">
  <div class="cafe-name">{{ cafe.name }}</div>
  <div class="cafe-category">{{ cafe.category }}</div>
  <div class="cafe-address">{{ cafe.address }}</div>
  <div class="cafe-meta">
    {% if cafe.rating %}
    <span class="cafe-rating">⭐ {{ cafe.rating }}/10</span>
    {% endif %}
    {% if cafe.open_status == "open" %}
    <span class="cafe-status open">open ♡</span>
    {% elif cafe.open_status == "closed" %}
    <span class="cafe-status closed">closed</span>
    {% endif %}
    {% if cafe.distance_m is not none %}
    <span class="cafe-distance">{{ cafe.distance_m }} m</span>
    {% endif %}
  </div>
</div>
""",
    "user_popup.html": '<div class="cafe-popup"><h3>💖 you are here!</h3></div>',
    "empty_state.html": """
<div class="empty-state">
  <div class="empty-anim">
    <span class="empty-cup">😿</span>
  </div>
  <p>no cafes found here...<br/>try increasing the radius!</p>
</div>
""",
    "panel.html": """
<div id="cafe-panel" class="cafe-panel">
  {% if status %}
  <div id="status" class="status {{ status.kind.value }}">{{ status.message }}</div>
  {% endif %}
  <h2>cafes nearby <span id="cafe-count">{{ cafe_list.count_text }}</span></h2>
  <div id="cafe-list">
    {% if cafe_list.empty_state_html %}
    {{ cafe_list.empty_state_html | safe }}
    {% endif %}
    {% for card in cafe_list.cards %}
    <div class="cafe-card{% if card.active %} active{% endif %}" data-index="{{ loop.index0 }}" style="animation-delay: {{ card.animation_delay_s }}s">
      {{ card.html | safe }}
    </div>
    {% endfor %}
  </div>
</div>
""",
    "page_style.html": """
<style>
  .folium-map { float: left; }
  .cafe-panel { position: absolute; top: 0; right: 0; width: 35%; height: 100%;
                overflow-y: auto; box-sizing: border-box; padding: 1rem;
                font-family: sans-serif; background: #FFF8F0; }
  .status.error { color: #C44569; }
  .status.success { color: #2E8B57; }
  .cafe-card { display: flex; gap: 0.75rem; padding: 0.75rem; margin-bottom: 0.5rem;
               border-radius: 12px; background: #fff; cursor: pointer;
               opacity: 0; animation: card-in 0.3s ease forwards; }
  .cafe-card.active { outline: 2px solid #C44569; }
  .cafe-photo, .cafe-photo-placeholder { width: 56px; height: 56px; font-size: 2rem;
                                         object-fit: cover; text-align: center; }
  .cafe-name { font-weight: bold; }
  .cafe-address, .cafe-category { font-size: 0.8rem; opacity: 0.75; }
  .empty-state { text-align: center; padding: 2rem 0; }
  @keyframes card-in { from { opacity: 0; transform: translateY(6px); } to { opacity: 1; } }
</style>
""",
}

env = Environment(
    loader=DictLoader(TEMPLATES),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_popup(cafe: Cafe) -> str:
    return env.get_template("popup.html").render(cafe=cafe)


def render_card(cafe: Cafe) -> str:
    return env.get_template("card.html").render(cafe=cafe, cup=random.choice(CUP_EMOJIS))


def render_user_popup() -> str:
    return env.get_template("user_popup.html").render()


def render_empty_state() -> str:
    return env.get_template("empty_state.html").render()


def render_panel(cafe_list, status=None) -> str:
    return env.get_template("panel.html").render(cafe_list=cafe_list, status=status)


def render_page_style() -> str:
    return env.get_template("page_style.html").render()
