"""
Position sources for the map client.

Locators follow the browser geolocation contract: a bounded wait for a fix,
an optional cached fix reused while it is younger than ``maximum_age_ms``,
and failures reported as a ``LocationError`` carrying one of the standard
error codes.
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

import aiohttp

from cafe_finder.core.config import settings

logger = logging.getLogger(__name__)

GOOGLE_GEOLOCATE_URL = "https://www.googleapis.com/geolocation/v1/geolocate"


class LocationErrorCode(IntEnum):
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3
    UNSUPPORTED = 4


class LocationError(Exception):
    def __init__(self, code: LocationErrorCode, message: str):
        super().__init__(message)
        self.code = code


@dataclass
class GeolocationOptions:
    high_accuracy: bool = True
    timeout_ms: int = 10000
    maximum_age_ms: int = 300000

    @classmethod
    def from_settings(cls) -> "GeolocationOptions":
        return cls(
            high_accuracy=True,
            timeout_ms=settings.GEO_TIMEOUT_MS,
            maximum_age_ms=settings.GEO_MAX_AGE_MS,
        )


@dataclass
class Position:
    lat: float
    lng: float
    accuracy_m: Optional[float] = None
    timestamp: float = field(default_factory=time.time)

    def age_ms(self, now: float = None) -> float:
        now = time.time() if now is None else now
        return (now - self.timestamp) * 1000


class Locator:
    """Base class: handles the cached fix and the timeout, subclasses acquire."""

    def __init__(self):
        self._last: Optional[Position] = None

    async def _acquire(self, options: GeolocationOptions) -> Position:
        raise NotImplementedError

    async def locate(self, options: GeolocationOptions = None) -> Position:
        options = options or GeolocationOptions.from_settings()

        if self._last is not None and self._last.age_ms() <= options.maximum_age_ms:
            logger.debug("Reusing cached position")
            return self._last

        try:
            position = await asyncio.wait_for(
                self._acquire(options), timeout=options.timeout_ms / 1000
            )
        except asyncio.TimeoutError:
            raise LocationError(
                LocationErrorCode.TIMEOUT, "Timed out while acquiring location"
            )

        self._last = position
        return position


class FixedLocator(Locator):
    """Position supplied by the user (CLI flags, a saved home location...)."""

    def __init__(self, lat: float, lng: float):
        super().__init__()
        self.lat = lat
        self.lng = lng

    async def _acquire(self, options: GeolocationOptions) -> Position:
        return Position(lat=self.lat, lng=self.lng, accuracy_m=0.0)


class GoogleLocator(Locator):
    """Network position from the Google Geolocation API (Wi-Fi / IP based)."""

    def __init__(self, api_key: str = None, url: str = GOOGLE_GEOLOCATE_URL):
        super().__init__()
        self.api_key = api_key if api_key is not None else settings.GOOGLE_GEOLOCATION_KEY
        self.url = url

    async def _acquire(self, options: GeolocationOptions) -> Position:
        if not self.api_key:
            raise LocationError(
                LocationErrorCode.UNSUPPORTED,
                "Geolocation is not supported: GOOGLE_GEOLOCATION_KEY is not set",
            )

        payload = {"considerIp": True}
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.url, params={"key": self.api_key}, json=payload
                ) as resp:
                    if resp.status in (401, 403):
                        error_text = await resp.text()
                        logger.error(f"Geolocation denied: {resp.status} - {error_text}")
                        raise LocationError(
                            LocationErrorCode.PERMISSION_DENIED,
                            "Location access denied",
                        )
                    if resp.status != 200:
                        error_text = await resp.text()
                        logger.error(f"Geolocation error: {resp.status} - {error_text}")
                        raise LocationError(
                            LocationErrorCode.POSITION_UNAVAILABLE,
                            f"Location unavailable ({resp.status})",
                        )
                    data = await resp.json()
        except (aiohttp.ClientError, ValueError) as e:
            raise LocationError(
                LocationErrorCode.POSITION_UNAVAILABLE, f"Location unavailable: {e}"
            )

        loc = data.get("location") if isinstance(data, dict) else None
        try:
            return Position(
                lat=float(loc["lat"]),
                lng=float(loc["lng"]),
                accuracy_m=data.get("accuracy"),
            )
        except (TypeError, KeyError, ValueError):
            logger.error(f"Geolocation response has no usable location: {data}")
            raise LocationError(
                LocationErrorCode.POSITION_UNAVAILABLE,
                "Location unavailable: no position in response",
            )
