from enum import Enum
from pydantic import BaseModel
from typing import List, Optional


class OpenStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    UNKNOWN = "unknown"


class CafeQuery(BaseModel):
    lat: float
    lng: float
    radius: int = 1500


class Cafe(BaseModel):
    name: str
    address: str
    lat: Optional[float] = None
    lng: Optional[float] = None
    rating: Optional[float] = None
    category: str
    open_status: OpenStatus = OpenStatus.UNKNOWN
    photo_url: Optional[str] = None
    distance_m: Optional[int] = None

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None


class CafeSearchResponse(BaseModel):
    cafes: List[Cafe]
    count: int


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
