import asyncio
import aiohttp
import logging
from cafe_finder.core.config import settings
from cafe_finder.models import CafeSearchResponse

logger = logging.getLogger(__name__)


class ProxyConnectionError(Exception):
    """The cafe proxy could not be reached at all."""


class ProxyResponseError(Exception):
    def __init__(self, status: int):
        super().__init__(f"Server error: {status}")
        self.status = status


class ProxyClient:
    def __init__(self, base_url: str = None):
        self.base_url = (base_url or settings.PROXY_BASE_URL).rstrip("/")

    async def fetch_cafes(
        self, lat: float, lng: float, radius: int
    ) -> CafeSearchResponse:
        url = f"{self.base_url}/api/cafes"
        params = {"lat": lat, "lng": lng, "radius": radius}
        timeout = aiohttp.ClientTimeout(total=settings.PROXY_TIMEOUT_S)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, params=params) as resp:
                    if not 200 <= resp.status < 300:
                        error_text = await resp.text()
                        logger.error(f"Proxy error: {resp.status} - {error_text}")
                        raise ProxyResponseError(resp.status)
                    data = await resp.json()
        except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
            raise ProxyConnectionError(f"Failed to fetch {url}: {e}") from e

        return CafeSearchResponse(**data)
