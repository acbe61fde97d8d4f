import aiohttp
import logging
from cafe_finder.core.config import settings

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Geoapify answered with a non-success status."""

    def __init__(self, status: int, body: str):
        super().__init__(f"Geoapify API error: {status}")
        self.status = status
        self.body = body


class GeoapifyClient:
    def __init__(self, api_key: str = None, base_url: str = None):
        self._api_key = api_key
        self.base_url = base_url or settings.GEOAPIFY_BASE_URL

    @property
    def api_key(self) -> str:
        if self._api_key is not None:
            return self._api_key
        return settings.GEOAPIFY_API_KEY

    def build_params(self, lat: float, lng: float, radius: int) -> dict:
        # Geoapify circle filters are lon,lat,radius_m
        return {
            "categories": settings.CAFE_CATEGORIES,
            "filter": f"circle:{lng},{lat},{radius}",
            "limit": settings.RESULT_LIMIT,
            "apiKey": self.api_key,
        }

    async def search_cafes(self, lat: float, lng: float, radius: int) -> dict:
        params = self.build_params(lat, lng, radius)
        timeout = aiohttp.ClientTimeout(total=settings.UPSTREAM_TIMEOUT_S)

        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(self.base_url, params=params) as resp:
                if not 200 <= resp.status < 300:
                    error_text = await resp.text()
                    logger.error(f"Geoapify API error: {resp.status} {error_text}")
                    raise UpstreamError(resp.status, error_text)
                return await resp.json()


geoapify_client = GeoapifyClient()
