# Defines the standardized, internal data structures for the application.

from dataclasses import dataclass, field


def _drop_empty(values: dict, keep: tuple = ()) -> dict:
    """Removes unset fields so JSON output only carries what the API returned."""
    return {
        key: value for key, value in values.items()
        if key in keep or value not in (None, "", [], {})
    }


@dataclass(frozen=True)
class LatLng:
    """A standardized representation of geographic coordinates, in degrees."""
    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {'lat': self.lat, 'lng': self.lng}


@dataclass(frozen=True)
class LocationBias:
    """A circular area used to bias or restrict a search."""
    lat: float
    lng: float
    radius_m: float

    def to_dict(self) -> dict:
        return {'lat': self.lat, 'lng': self.lng, 'radius_m': self.radius_m}


@dataclass
class Filters:
    """Optional search refinements."""
    keyword: str = ""
    types: list[str] = field(default_factory=list)
    open_now: bool | None = None
    min_rating: float | None = None
    price_levels: list[int] = field(default_factory=list)


# --- Requests ---

@dataclass
class SearchRequest:
    query: str
    filters: Filters | None = None
    location_bias: LocationBias | None = None
    limit: int = 0
    page_token: str = ""
    language: str = ""
    region: str = ""


@dataclass
class NearbySearchRequest:
    location_restriction: LocationBias | None = None
    limit: int = 0
    included_types: list[str] = field(default_factory=list)
    excluded_types: list[str] = field(default_factory=list)
    language: str = ""
    region: str = ""


@dataclass
class AutocompleteRequest:
    input: str
    session_token: str = ""
    limit: int = 0
    language: str = ""
    region: str = ""
    location_bias: LocationBias | None = None


@dataclass
class DetailsRequest:
    place_id: str
    language: str = ""
    region: str = ""
    include_reviews: bool = False
    include_photos: bool = False


@dataclass
class PhotoMediaRequest:
    name: str
    max_width_px: int = 0
    max_height_px: int = 0


@dataclass
class LocationResolveRequest:
    location_text: str
    limit: int = 0
    language: str = ""
    region: str = ""


@dataclass
class RouteRequest:
    """A query to search for places along the route between two locations."""
    query: str
    origin: str
    destination: str
    mode: str = ""
    radius_m: float = 0
    max_waypoints: int = 0
    limit: int = 0
    language: str = ""
    region: str = ""


# --- Results ---

@dataclass
class PlaceSummary:
    """A compact view of a place, as returned by text and nearby search."""
    place_id: str
    name: str = ""
    address: str = ""
    location: LatLng | None = None
    rating: float | None = None
    price_level: int | None = None
    types: list[str] = field(default_factory=list)
    open_now: bool | None = None

    def to_dict(self) -> dict:
        return _drop_empty({
            'place_id': self.place_id,
            'name': self.name,
            'address': self.address,
            'location': self.location.to_dict() if self.location else None,
            'rating': self.rating,
            'price_level': self.price_level,
            'types': list(self.types),
            'open_now': self.open_now,
        }, keep=('place_id',))


@dataclass
class SearchResponse:
    results: list[PlaceSummary] = field(default_factory=list)
    next_page_token: str = ""


@dataclass
class LocalizedText:
    text: str = ""
    language_code: str = ""

    def to_dict(self) -> dict:
        return _drop_empty({'text': self.text, 'language_code': self.language_code})


@dataclass
class AuthorAttribution:
    display_name: str = ""
    uri: str = ""
    photo_uri: str = ""

    def to_dict(self) -> dict:
        return _drop_empty({
            'display_name': self.display_name,
            'uri': self.uri,
            'photo_uri': self.photo_uri,
        })


@dataclass
class ReviewVisitDate:
    year: int = 0
    month: int = 0
    day: int = 0

    def to_dict(self) -> dict:
        return {key: value for key, value in
                (('year', self.year), ('month', self.month), ('day', self.day)) if value}


@dataclass
class Review:
    name: str = ""
    relative_publish_time_description: str = ""
    text: LocalizedText | None = None
    original_text: LocalizedText | None = None
    rating: float | None = None
    author: AuthorAttribution | None = None
    publish_time: str = ""
    flag_content_uri: str = ""
    google_maps_uri: str = ""
    visit_date: ReviewVisitDate | None = None

    def to_dict(self) -> dict:
        return _drop_empty({
            'name': self.name,
            'relative_publish_time_description': self.relative_publish_time_description,
            'text': self.text.to_dict() if self.text else None,
            'original_text': self.original_text.to_dict() if self.original_text else None,
            'rating': self.rating,
            'author': self.author.to_dict() if self.author else None,
            'publish_time': self.publish_time,
            'flag_content_uri': self.flag_content_uri,
            'google_maps_uri': self.google_maps_uri,
            'visit_date': self.visit_date.to_dict() if self.visit_date else None,
        })


@dataclass
class Photo:
    name: str
    width_px: int = 0
    height_px: int = 0
    authors: list[AuthorAttribution] = field(default_factory=list)

    def to_dict(self) -> dict:
        return _drop_empty({
            'name': self.name,
            'width_px': self.width_px or None,
            'height_px': self.height_px or None,
            'authors': [author.to_dict() for author in self.authors],
        }, keep=('name',))


@dataclass
class PlaceDetails:
    """A detailed view of a single place."""
    place_id: str
    name: str = ""
    address: str = ""
    location: LatLng | None = None
    rating: float | None = None
    price_level: int | None = None
    types: list[str] = field(default_factory=list)
    phone: str = ""
    website: str = ""
    hours: list[str] = field(default_factory=list)
    open_now: bool | None = None
    reviews: list[Review] = field(default_factory=list)
    photos: list[Photo] = field(default_factory=list)

    def to_dict(self) -> dict:
        return _drop_empty({
            'place_id': self.place_id,
            'name': self.name,
            'address': self.address,
            'location': self.location.to_dict() if self.location else None,
            'rating': self.rating,
            'price_level': self.price_level,
            'types': list(self.types),
            'phone': self.phone,
            'website': self.website,
            'hours': list(self.hours),
            'open_now': self.open_now,
            'reviews': [review.to_dict() for review in self.reviews],
            'photos': [photo.to_dict() for photo in self.photos],
        }, keep=('place_id',))


@dataclass
class PhotoMedia:
    name: str
    photo_uri: str = ""

    def to_dict(self) -> dict:
        return _drop_empty({'name': self.name, 'photo_uri': self.photo_uri}, keep=('name',))


@dataclass
class AutocompleteSuggestion:
    """A place or query prediction; `kind` is either 'place' or 'query'."""
    kind: str
    place_id: str = ""
    place: str = ""
    text: str = ""
    main_text: str = ""
    secondary_text: str = ""
    types: list[str] = field(default_factory=list)
    distance_meters: int | None = None

    def to_dict(self) -> dict:
        return _drop_empty({
            'kind': self.kind,
            'place_id': self.place_id,
            'place': self.place,
            'text': self.text,
            'main_text': self.main_text,
            'secondary_text': self.secondary_text,
            'types': list(self.types),
            'distance_meters': self.distance_meters,
        }, keep=('kind',))


@dataclass
class AutocompleteResponse:
    suggestions: list[AutocompleteSuggestion] = field(default_factory=list)


@dataclass
class ResolvedLocation:
    """A place candidate for a free-form location string."""
    place_id: str
    name: str = ""
    address: str = ""
    location: LatLng | None = None
    types: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return _drop_empty({
            'place_id': self.place_id,
            'name': self.name,
            'address': self.address,
            'location': self.location.to_dict() if self.location else None,
            'types': list(self.types),
        }, keep=('place_id',))


@dataclass
class LocationResolveResponse:
    results: list[ResolvedLocation] = field(default_factory=list)


@dataclass
class RouteWaypoint:
    """Ties a sampled route location to the places found around it."""
    location: LatLng
    results: list[PlaceSummary] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'location': self.location.to_dict(),
            'results': [place.to_dict() for place in self.results],
        }


@dataclass
class RouteResponse:
    waypoints: list[RouteWaypoint] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {'waypoints': [waypoint.to_dict() for waypoint in self.waypoints]}
