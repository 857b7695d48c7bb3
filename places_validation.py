# Applies request defaults and checks request fields before anything is sent to the API.

from dataclasses import replace

from places_errors import ValidationError
from places_structures import (
    AutocompleteRequest,
    LocationBias,
    LocationResolveRequest,
    NearbySearchRequest,
    PhotoMediaRequest,
    RouteRequest,
    SearchRequest,
)

DEFAULT_SEARCH_LIMIT = 10
MAX_SEARCH_LIMIT = 20
DEFAULT_NEARBY_LIMIT = 10
MAX_NEARBY_LIMIT = 20
DEFAULT_AUTOCOMPLETE_LIMIT = 5
MAX_AUTOCOMPLETE_LIMIT = 20
DEFAULT_RESOLVE_LIMIT = 5
MAX_RESOLVE_LIMIT = 10
MAX_PHOTO_PX = 4800

DEFAULT_ROUTE_LIMIT = 5
DEFAULT_ROUTE_RADIUS_M = 1000.0
DEFAULT_ROUTE_WAYPOINTS = 5
MAX_ROUTE_WAYPOINTS = 20

TRAVEL_MODE_DRIVE = "DRIVE"
TRAVEL_MODES = ("DRIVE", "WALK", "BICYCLE", "TWO_WHEELER", "TRANSIT")


def _check_limit(limit: int, maximum: int) -> None:
    if limit < 1 or limit > maximum:
        raise ValidationError("limit", f"must be 1-{maximum}")


def validate_location_bias(bias: LocationBias | None, prefix: str = "location_bias") -> None:
    if bias is None:
        return
    if bias.radius_m <= 0:
        raise ValidationError(f"{prefix}.radius_m", "must be > 0")
    if bias.lat < -90 or bias.lat > 90:
        raise ValidationError(f"{prefix}.lat", "must be -90..90")
    if bias.lng < -180 or bias.lng > 180:
        raise ValidationError(f"{prefix}.lng", "must be -180..180")


# --- Text search ---

def apply_search_defaults(request: SearchRequest) -> SearchRequest:
    if not request.limit:
        return replace(request, limit=DEFAULT_SEARCH_LIMIT)
    return request


def validate_search_request(request: SearchRequest) -> None:
    if not (request.query or "").strip():
        raise ValidationError("query", "required")
    _check_limit(request.limit, MAX_SEARCH_LIMIT)

    filters = request.filters
    if filters is not None:
        if filters.min_rating is not None and not 0 <= filters.min_rating <= 5:
            raise ValidationError("filters.min_rating", "must be 0-5")
        for level in filters.price_levels:
            if level < 0 or level > 4:
                raise ValidationError("filters.price_levels", "must be 0-4")

    validate_location_bias(request.location_bias)


# --- Nearby search ---

def apply_nearby_defaults(request: NearbySearchRequest) -> NearbySearchRequest:
    if not request.limit:
        return replace(request, limit=DEFAULT_NEARBY_LIMIT)
    return request


def validate_nearby_request(request: NearbySearchRequest) -> None:
    if request.location_restriction is None:
        raise ValidationError("location_restriction", "required")
    validate_location_bias(request.location_restriction, prefix="location_restriction")
    _check_limit(request.limit, MAX_NEARBY_LIMIT)


# --- Autocomplete ---

def apply_autocomplete_defaults(request: AutocompleteRequest) -> AutocompleteRequest:
    if not request.limit:
        return replace(request, limit=DEFAULT_AUTOCOMPLETE_LIMIT)
    return request


def validate_autocomplete_request(request: AutocompleteRequest) -> None:
    if not (request.input or "").strip():
        raise ValidationError("input", "required")
    _check_limit(request.limit, MAX_AUTOCOMPLETE_LIMIT)
    validate_location_bias(request.location_bias)


# --- Resolve ---

def apply_resolve_defaults(request: LocationResolveRequest) -> LocationResolveRequest:
    if not request.limit:
        return replace(request, limit=DEFAULT_RESOLVE_LIMIT)
    return request


def validate_resolve_request(request: LocationResolveRequest) -> None:
    if not (request.location_text or "").strip():
        raise ValidationError("location_text", "required")
    _check_limit(request.limit, MAX_RESOLVE_LIMIT)


# --- Details and photos ---

def validate_place_id(place_id: str) -> str:
    place_id = (place_id or "").strip()
    if not place_id:
        raise ValidationError("place_id", "required")
    return place_id


def validate_photo_request(request: PhotoMediaRequest) -> None:
    if not (request.name or "").strip():
        raise ValidationError("name", "required")
    for field_name, value in (("max_width_px", request.max_width_px),
                              ("max_height_px", request.max_height_px)):
        if value < 0 or value > MAX_PHOTO_PX:
            raise ValidationError(field_name, f"must be 0-{MAX_PHOTO_PX}")
    # The media endpoint rejects requests without a size bound.
    if not request.max_width_px and not request.max_height_px:
        raise ValidationError("max_width_px", "max_width_px or max_height_px required")


# --- Route ---

def apply_route_defaults(request: RouteRequest) -> RouteRequest:
    """Trims text fields, upper-cases the travel mode and fills unset numbers."""
    mode = (request.mode or "").strip().upper()
    return replace(
        request,
        query=(request.query or "").strip(),
        origin=(request.origin or "").strip(),
        destination=(request.destination or "").strip(),
        mode=mode or TRAVEL_MODE_DRIVE,
        limit=request.limit or DEFAULT_ROUTE_LIMIT,
        radius_m=request.radius_m or DEFAULT_ROUTE_RADIUS_M,
        max_waypoints=request.max_waypoints or DEFAULT_ROUTE_WAYPOINTS,
    )


def validate_route_request(request: RouteRequest) -> None:
    if not request.query:
        raise ValidationError("query", "required")
    if not request.origin:
        raise ValidationError("from", "required")
    if not request.destination:
        raise ValidationError("to", "required")
    _check_limit(request.limit, MAX_SEARCH_LIMIT)
    if request.radius_m <= 0:
        raise ValidationError("radius_m", "must be > 0")
    if request.max_waypoints < 1 or request.max_waypoints > MAX_ROUTE_WAYPOINTS:
        raise ValidationError("max_waypoints", f"must be 1-{MAX_ROUTE_WAYPOINTS}")
    if request.mode not in TRAVEL_MODES:
        raise ValidationError("mode", "must be DRIVE, WALK, BICYCLE, TWO_WHEELER, or TRANSIT")
