import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Logging
    LOG_DIR = os.getenv("LOG_DIR", "")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    APP_LOG_FILENAME = os.getenv("APP_LOG_FILENAME", "cafe_finder.log")

    # Geoapify (upstream places provider)
    GEOAPIFY_API_KEY = os.getenv("GEOAPIFY_API_KEY", "")
    GEOAPIFY_BASE_URL = os.getenv(
        "GEOAPIFY_BASE_URL", "https://api.geoapify.com/v2/places"
    )
    CAFE_CATEGORIES = os.getenv(
        "CAFE_CATEGORIES",
        "catering.cafe,catering.cafe.coffee_shop,catering.cafe.coffee",
    )
    RESULT_LIMIT = int(os.getenv("RESULT_LIMIT", "15"))
    UPSTREAM_TIMEOUT_S = float(os.getenv("UPSTREAM_TIMEOUT_S", "10.0"))

    # Proxy Application
    SERVICE_HOST = os.getenv("SERVICE_HOST", "127.0.0.1")
    PORT = int(os.getenv("PORT", "3001"))
    DEFAULT_RADIUS_M = int(os.getenv("DEFAULT_RADIUS_M", "1500"))

    # Map Client
    PROXY_BASE_URL = os.getenv("PROXY_BASE_URL", f"http://localhost:{PORT}")
    PROXY_TIMEOUT_S = float(os.getenv("PROXY_TIMEOUT_S", "15.0"))
    GOOGLE_GEOLOCATION_KEY = os.getenv("GOOGLE_GEOLOCATION_KEY", "")
    GEO_TIMEOUT_MS = int(os.getenv("GEO_TIMEOUT_MS", "10000"))
    GEO_MAX_AGE_MS = int(os.getenv("GEO_MAX_AGE_MS", "300000"))

    # Map Rendering
    MAP_CENTER_LAT = float(os.getenv("MAP_CENTER_LAT", "29.6516"))
    MAP_CENTER_LNG = float(os.getenv("MAP_CENTER_LNG", "-82.3248"))
    MAP_START_ZOOM = int(os.getenv("MAP_START_ZOOM", "13"))
    FLY_TO_ZOOM = int(os.getenv("FLY_TO_ZOOM", "17"))
    FLY_TO_DURATION_S = float(os.getenv("FLY_TO_DURATION_S", "0.8"))
    FIT_MAX_ZOOM = int(os.getenv("FIT_MAX_ZOOM", "16"))
    FIT_PADDING_PX = int(os.getenv("FIT_PADDING_PX", "50"))
    CARD_STAGGER_S = float(os.getenv("CARD_STAGGER_S", "0.03"))


settings = Settings()
