# Command-line front-end: search, resolve and look up places, or find places along a route.

import argparse
import json
import sys
from dataclasses import dataclass
from typing import TextIO

import requests
from dotenv import load_dotenv

from places_adapters import DEFAULT_TIMEOUT_SEC, GooglePlacesAdapter
from places_errors import MissingAPIKeyError, PlacesError, ValidationError
from places_render import (
    Color,
    color_enabled,
    render_autocomplete,
    render_details,
    render_nearby,
    render_photo,
    render_resolve,
    render_route,
    render_search,
)
from places_structures import (
    AutocompleteRequest,
    DetailsRequest,
    Filters,
    LocationBias,
    LocationResolveRequest,
    NearbySearchRequest,
    PhotoMediaRequest,
    RouteRequest,
    SearchRequest,
)
from places_validation import TRAVEL_MODES
from route_search import search_along_route

VERSION = "0.1.0"


@dataclass
class App:
    """Wires CLI output to API access."""
    adapter: GooglePlacesAdapter
    out: TextIO
    err: TextIO
    json: bool
    color: Color

    def write(self, text: str) -> None:
        print(text, file=self.out)

    def write_json(self, value) -> None:
        print(json.dumps(value, indent=2, ensure_ascii=False), file=self.out)


def location_bias_from_args(args: argparse.Namespace, field: str = "location_bias",
                            required: bool = False) -> LocationBias | None:
    """Builds a circle from --lat/--lng/--radius-m; all three or none must be given."""
    values = (args.lat, args.lng, args.radius_m)
    if not required and all(value is None for value in values):
        return None
    if any(value is None for value in values):
        raise ValidationError(field, "lat, lng, radius required")
    return LocationBias(lat=args.lat, lng=args.lng, radius_m=args.radius_m)


# --- Commands ---

def run_search(args: argparse.Namespace, app: App) -> None:
    filters = Filters(
        keyword=args.keyword or "",
        types=args.type or [],
        open_now=args.open_now,
        min_rating=args.min_rating,
        price_levels=args.price_level or [],
    )
    has_filters = (filters.keyword or filters.types or filters.open_now is not None
                   or filters.min_rating is not None or filters.price_levels)
    request = SearchRequest(
        query=args.query,
        filters=filters if has_filters else None,
        location_bias=location_bias_from_args(args),
        limit=args.limit,
        page_token=args.page_token or "",
        language=args.language or "",
        region=args.region or "",
    )

    response = app.adapter.search(request)
    if app.json:
        app.write_json([place.to_dict() for place in response.results])
        if response.next_page_token:
            print("next_page_token:", response.next_page_token, file=app.err)
        return
    app.write(render_search(app.color, response))


def run_autocomplete(args: argparse.Namespace, app: App) -> None:
    request = AutocompleteRequest(
        input=args.input,
        session_token=args.session_token or "",
        limit=args.limit,
        language=args.language or "",
        region=args.region or "",
        location_bias=location_bias_from_args(args),
    )

    response = app.adapter.autocomplete(request)
    if app.json:
        app.write_json([suggestion.to_dict() for suggestion in response.suggestions])
        return
    app.write(render_autocomplete(app.color, response))


def run_nearby(args: argparse.Namespace, app: App) -> None:
    request = NearbySearchRequest(
        location_restriction=location_bias_from_args(args, field="location_restriction", required=True),
        limit=args.limit,
        included_types=args.type or [],
        excluded_types=args.exclude_type or [],
        language=args.language or "",
        region=args.region or "",
    )

    response = app.adapter.nearby_search(request)
    if app.json:
        app.write_json([place.to_dict() for place in response.results])
        if response.next_page_token:
            print("next_page_token:", response.next_page_token, file=app.err)
        return
    app.write(render_nearby(app.color, response))


def run_route(args: argparse.Namespace, app: App) -> None:
    request = RouteRequest(
        query=args.query,
        origin=args.origin or "",
        destination=args.destination or "",
        mode=args.mode,
        radius_m=args.radius_m,
        max_waypoints=args.max_waypoints,
        limit=args.limit,
        language=args.language or "",
        region=args.region or "",
    )

    response = search_along_route(request, app.adapter)
    if app.json:
        app.write_json(response.to_dict())
        return
    app.write(render_route(app.color, response))


def run_details(args: argparse.Namespace, app: App) -> None:
    place = app.adapter.details(DetailsRequest(
        place_id=args.place_id,
        language=args.language or "",
        region=args.region or "",
        include_reviews=args.reviews,
        include_photos=args.photos,
    ))
    if app.json:
        app.write_json(place.to_dict())
        return
    app.write(render_details(app.color, place))


def run_photo(args: argparse.Namespace, app: App) -> None:
    photo = app.adapter.photo_media(PhotoMediaRequest(
        name=args.photo_name,
        max_width_px=args.max_width,
        max_height_px=args.max_height,
    ))
    if app.json:
        app.write_json(photo.to_dict())
        return
    app.write(render_photo(app.color, photo))


def run_resolve(args: argparse.Namespace, app: App) -> None:
    response = app.adapter.resolve(LocationResolveRequest(
        location_text=args.location,
        limit=args.limit,
        language=args.language or "",
        region=args.region or "",
    ))
    if app.json:
        app.write_json([place.to_dict() for place in response.results])
        return
    app.write(render_resolve(app.color, response))


# --- Parser ---

def _add_locale(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--language', help="BCP-47 language code (e.g. en, en-US).")
    parser.add_argument('--region', help="CLDR region code (e.g. US, DE).")


def _add_circle(parser: argparse.ArgumentParser, purpose: str) -> None:
    parser.add_argument('--lat', type=float, help=f"Latitude for {purpose}.")
    parser.add_argument('--lng', type=float, help=f"Longitude for {purpose}.")
    parser.add_argument('--radius-m', type=float, help=f"Radius in meters for {purpose}.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="placescope",
        description="Search and resolve places via the Google Places API (New).")
    parser.add_argument('--api-key', help="Google Places API key (default: $GOOGLE_PLACES_API_KEY).")
    parser.add_argument('--base-url', help="Places API base URL (default: $GOOGLE_PLACES_BASE_URL).")
    parser.add_argument('--routes-base-url', help="Routes API base URL (default: $GOOGLE_ROUTES_BASE_URL).")
    parser.add_argument('--timeout', type=float, default=DEFAULT_TIMEOUT_SEC, help="HTTP timeout in seconds.")
    parser.add_argument('--json', action='store_true', help="Output JSON.")
    parser.add_argument('--no-color', action='store_true', help="Disable color output.")
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="Enable verbose mode to see the exact API calls being made.")
    parser.add_argument('--version', action='version', version=VERSION)

    commands = parser.add_subparsers(dest='command', required=True)

    search = commands.add_parser('search', help="Search places by text query.")
    search.add_argument('query', help="Search text.")
    search.add_argument('--limit', type=int, default=10, help="Max results (1-20).")
    search.add_argument('--page-token', help="Page token for pagination.")
    _add_locale(search)
    search.add_argument('--keyword', help="Keyword to append to the query.")
    search.add_argument('--type', action='append', help="Place type filter (includedType). Repeatable.")
    search.add_argument('--open-now', action='store_const', const=True, default=None,
                        help="Return only currently open places.")
    search.add_argument('--min-rating', type=float, help="Minimum rating (0-5).")
    search.add_argument('--price-level', type=int, action='append', help="Price levels 0-4. Repeatable.")
    _add_circle(search, "location bias")
    search.set_defaults(handler=run_search)

    autocomplete = commands.add_parser('autocomplete', help="Autocomplete places and queries.")
    autocomplete.add_argument('input', help="Autocomplete input text.")
    autocomplete.add_argument('--limit', type=int, default=5, help="Max suggestions (1-20).")
    autocomplete.add_argument('--session-token', help="Session token for billing consistency.")
    _add_locale(autocomplete)
    _add_circle(autocomplete, "location bias")
    autocomplete.set_defaults(handler=run_autocomplete)

    nearby = commands.add_parser('nearby', help="Search nearby places by location.")
    nearby.add_argument('--limit', type=int, default=10, help="Max results (1-20).")
    nearby.add_argument('--type', action='append', help="Included place types. Repeatable.")
    nearby.add_argument('--exclude-type', action='append', help="Excluded place types. Repeatable.")
    _add_locale(nearby)
    _add_circle(nearby, "location restriction")
    nearby.set_defaults(handler=run_nearby)

    route = commands.add_parser('route', help="Search places along a route.")
    route.add_argument('query', help="Search text.")
    route.add_argument('--from', dest='origin', help="Origin location (address or place name).")
    route.add_argument('--to', dest='destination', help="Destination location (address or place name).")
    route.add_argument('--mode', default="DRIVE", help=f"Travel mode: {', '.join(TRAVEL_MODES)}.")
    route.add_argument('--radius-m', type=float, default=1000.0, help="Search radius in meters.")
    route.add_argument('--max-waypoints', type=int, default=5, help="Max sampled waypoints along the route.")
    route.add_argument('--limit', type=int, default=5, help="Max results per waypoint (1-20).")
    _add_locale(route)
    route.set_defaults(handler=run_route)

    details = commands.add_parser('details', help="Fetch place details by place ID.")
    details.add_argument('place_id', help="Place ID.")
    _add_locale(details)
    details.add_argument('--reviews', action='store_true', help="Include reviews in the response.")
    details.add_argument('--photos', action='store_true', help="Include photos in the response.")
    details.set_defaults(handler=run_details)

    photo = commands.add_parser('photo', help="Fetch a photo URL by photo name.")
    photo.add_argument('photo_name', help="Photo resource name (places/.../photos/...).")
    photo.add_argument('--max-width', type=int, default=0, help="Max width in pixels.")
    photo.add_argument('--max-height', type=int, default=0, help="Max height in pixels.")
    photo.set_defaults(handler=run_photo)

    resolve = commands.add_parser('resolve', help="Resolve a location string to candidate places.")
    resolve.add_argument('location', help="Location text to resolve.")
    resolve.add_argument('--limit', type=int, default=5, help="Max results (1-10).")
    _add_locale(resolve)
    resolve.set_defaults(handler=run_resolve)

    return parser


def main(argv: list[str] | None = None, stdout: TextIO | None = None,
         stderr: TextIO | None = None, adapter: GooglePlacesAdapter | None = None) -> int:
    """Runs the CLI and returns a process exit code (2 for bad input, 1 for API failures)."""
    load_dotenv()
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    args = build_parser().parse_args(argv)
    if adapter is None:
        adapter = GooglePlacesAdapter(
            api_key=args.api_key,
            base_url=args.base_url,
            routes_base_url=args.routes_base_url,
            timeout=args.timeout,
            verbose=args.verbose,
        )

    # JSON output never carries ANSI escapes.
    app = App(
        adapter=adapter,
        out=stdout,
        err=stderr,
        json=args.json,
        color=Color(color_enabled(args.no_color or args.json)),
    )

    try:
        args.handler(args, app)
    except (ValidationError, MissingAPIKeyError) as e:
        print(e, file=stderr)
        return 2
    except (PlacesError, requests.exceptions.RequestException) as e:
        print(e, file=stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
