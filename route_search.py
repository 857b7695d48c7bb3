# Searches for places along the route between two locations.

from places_adapters import PlacesAdapter
from places_errors import NoWaypointsError, RouteNotFoundError
from places_structures import (
    LocationBias,
    RouteRequest,
    RouteResponse,
    RouteWaypoint,
    SearchRequest,
)
from places_validation import apply_route_defaults, validate_route_request
from route_geometry import decode_polyline, sample_waypoints


def search_along_route(request: RouteRequest, api_adapter: PlacesAdapter) -> RouteResponse:
    """
    Fetches a route, samples waypoints along it and runs one text search around
    each waypoint using the provided API adapter.

    Searches run one after another in waypoint order. The first failing call
    aborts the whole search; results gathered so far are discarded.
    """
    request = apply_route_defaults(request)
    validate_route_request(request)

    encoded = api_adapter.fetch_encoded_path(
        request.origin, request.destination, request.mode,
        language=request.language, region=request.region)
    if encoded is None:
        raise RouteNotFoundError("no routes returned")
    if not encoded.strip():
        raise RouteNotFoundError("empty route polyline")

    points = decode_polyline(encoded.strip())
    waypoints = sample_waypoints(points, request.max_waypoints)
    if not waypoints:
        raise NoWaypointsError()

    results = []
    for waypoint in waypoints:
        response = api_adapter.search(SearchRequest(
            query=request.query,
            limit=request.limit,
            language=request.language,
            region=request.region,
            location_bias=LocationBias(lat=waypoint.lat, lng=waypoint.lng, radius_m=request.radius_m),
        ))
        results.append(RouteWaypoint(location=waypoint, results=response.results))

    return RouteResponse(waypoints=results)
