import argparse
import asyncio
import os
import sys

# Add the project root directory to the python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from cafe_finder.client.finder import CafeFinder
from cafe_finder.client.geolocation import FixedLocator, GoogleLocator
from cafe_finder.client.proxy import ProxyClient
from cafe_finder.client.state import SearchState
from cafe_finder.core.config import settings
from cafe_finder.core.logging_setup import setup_logging


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Find cafes near you and map them.")
    parser.add_argument("--lat", type=float, help="your latitude")
    parser.add_argument("--lng", type=float, help="your longitude")
    parser.add_argument(
        "--radius", type=int, default=settings.DEFAULT_RADIUS_M, help="meters"
    )
    parser.add_argument("--proxy", default=settings.PROXY_BASE_URL)
    parser.add_argument("--out", default="cafes.html", help="map page to write")
    args = parser.parse_args(argv)
    if (args.lat is None) != (args.lng is None):
        parser.error("--lat and --lng go together")
    return args


async def main(argv=None):
    args = parse_args(argv)
    setup_logging()

    if args.lat is not None:
        locator = FixedLocator(args.lat, args.lng)
    elif settings.GOOGLE_GEOLOCATION_KEY:
        locator = GoogleLocator()
    else:
        locator = None

    finder = CafeFinder(
        locator=locator, proxy=ProxyClient(args.proxy), radius=args.radius
    )
    outcome = await finder.find_cafes()

    print(finder.status.message, flush=True)

    if outcome == SearchState.DISPLAYING_RESULTS:
        print(f"\n{finder.cafe_list.count_text} cafes", flush=True)
        for i, card in enumerate(finder.cafe_list.cards):
            cafe = card.cafe
            dist = f"{cafe.distance_m} m" if cafe.distance_m is not None else "?"
            print(f"[{i+1}] {cafe.name} | {cafe.category} | {dist}", flush=True)
            print(f"    {cafe.address}", flush=True)

    if outcome in (SearchState.DISPLAYING_RESULTS, SearchState.DISPLAYING_EMPTY):
        finder.save_page(args.out)
        print(f"\nMap: {os.path.abspath(args.out)}", flush=True)

    return 0 if outcome != SearchState.FAILED else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
