import logging
import math
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cafe_finder.core.config import settings
from cafe_finder.core.logging_setup import setup_logging
from cafe_finder.models import CafeQuery, CafeSearchResponse, ErrorResponse
from cafe_finder.places.geoapify import UpstreamError, geoapify_client
from cafe_finder.places.normalize import normalize_features

logger = logging.getLogger(__name__)

app = FastAPI(title="Cafe Finder API", version="1.0")

# The map page is usually opened from another origin (or file://)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class QueryError(ValueError):
    """The caller sent an unusable query string."""


ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _error(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _masked_key(key: str) -> str:
    return f'"{key[:8]}..."'


@app.on_event("startup")
async def startup_event():
    setup_logging()
    if settings.GEOAPIFY_API_KEY:
        logger.info(f"API Key loaded: {_masked_key(settings.GEOAPIFY_API_KEY)}")
    else:
        logger.warning("API Key loaded: UNDEFINED! Check your .env file")


@app.exception_handler(QueryError)
async def query_error_handler(request: Request, exc: QueryError):
    return _error(400, str(exc))


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    return _error(exc.status, "Failed to fetch from Geoapify", details=exc.body)


def parse_query(
    lat: Optional[str], lng: Optional[str], radius: Optional[str]
) -> CafeQuery:
    if not lat or not lng:
        raise QueryError("lat and lng query parameters are required")

    try:
        lat_f = float(lat)
        lng_f = float(lng)
    except ValueError:
        raise QueryError("lat and lng must be numbers")
    if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
        raise QueryError("lat and lng must be numbers")

    if not radius:
        return CafeQuery(lat=lat_f, lng=lng_f, radius=settings.DEFAULT_RADIUS_M)

    try:
        radius_m = int(radius)
    except ValueError:
        raise QueryError("radius must be a positive integer (meters)")
    if radius_m <= 0:
        raise QueryError("radius must be a positive integer (meters)")

    return CafeQuery(lat=lat_f, lng=lng_f, radius=radius_m)


@app.get("/")
async def health():
    return {"status": "Cafe Finder API is running ☕"}


@app.get("/api/cafes", response_model=CafeSearchResponse, responses=ERROR_RESPONSES)
async def search_cafes(
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    radius: Optional[str] = None,
):
    query = parse_query(lat, lng, radius)

    try:
        collection = await geoapify_client.search_cafes(
            query.lat, query.lng, query.radius
        )
        cafes = normalize_features(collection, origin=(query.lat, query.lng))
    except UpstreamError:
        raise
    except Exception:
        logger.exception("Server error")
        return _error(500, "Internal server error")

    logger.info(f"Found {len(cafes)} cafes near {query.lat}, {query.lng}")
    return CafeSearchResponse(cafes=cafes, count=len(cafes))


if __name__ == "__main__":
    uvicorn.run(app, host=settings.SERVICE_HOST, port=settings.PORT)
