# Contains the adapter classes for communicating with the Google Places and Routes APIs.

import json
import os
import sys
from abc import ABC, abstractmethod
from types import MappingProxyType

import requests
from dotenv import load_dotenv

from places_errors import APIError, MissingAPIKeyError, PlacesError
from places_structures import (
    AuthorAttribution,
    AutocompleteRequest,
    AutocompleteResponse,
    AutocompleteSuggestion,
    DetailsRequest,
    LatLng,
    LocalizedText,
    LocationBias,
    LocationResolveRequest,
    LocationResolveResponse,
    NearbySearchRequest,
    Photo,
    PhotoMedia,
    PhotoMediaRequest,
    PlaceDetails,
    PlaceSummary,
    ResolvedLocation,
    Review,
    ReviewVisitDate,
    SearchRequest,
    SearchResponse,
)
from places_validation import (
    apply_autocomplete_defaults,
    apply_nearby_defaults,
    apply_resolve_defaults,
    apply_search_defaults,
    validate_autocomplete_request,
    validate_nearby_request,
    validate_photo_request,
    validate_place_id,
    validate_resolve_request,
    validate_search_request,
)

# --- API Configuration ---
# Keys and endpoints are read from environment variables (or a .env file).
load_dotenv()
DEFAULT_BASE_URL = "https://places.googleapis.com/v1"
DEFAULT_ROUTES_BASE_URL = "https://routes.googleapis.com"
DEFAULT_TIMEOUT_SEC = 10.0
MAX_RESPONSE_BYTES = 1 << 20

SEARCH_FIELD_MASK = (
    "places.id,places.displayName,places.formattedAddress,places.location,places.rating,"
    "places.priceLevel,places.types,places.currentOpeningHours,nextPageToken"
)
NEARBY_FIELD_MASK = (
    "places.id,places.displayName,places.formattedAddress,places.location,places.rating,"
    "places.userRatingCount,places.priceLevel,places.types,places.currentOpeningHours"
)
RESOLVE_FIELD_MASK = "places.id,places.displayName,places.formattedAddress,places.location,places.types"
AUTOCOMPLETE_FIELD_MASK = (
    "suggestions.placePrediction.placeId,suggestions.placePrediction.place,"
    "suggestions.placePrediction.text,suggestions.placePrediction.structuredFormat,"
    "suggestions.placePrediction.types,suggestions.placePrediction.distanceMeters,"
    "suggestions.queryPrediction.text,suggestions.queryPrediction.structuredFormat"
)
DETAILS_FIELD_MASK = (
    "id,displayName,formattedAddress,location,rating,priceLevel,types,"
    "regularOpeningHours,currentOpeningHours,nationalPhoneNumber,websiteUri"
)
DETAILS_REVIEWS_FIELD = "reviews"
DETAILS_PHOTOS_FIELD = "photos"
ROUTES_FIELD_MASK = "routes.polyline.encodedPolyline"

PRICE_LEVEL_TO_ENUM = MappingProxyType({
    0: "PRICE_LEVEL_FREE",
    1: "PRICE_LEVEL_INEXPENSIVE",
    2: "PRICE_LEVEL_MODERATE",
    3: "PRICE_LEVEL_EXPENSIVE",
    4: "PRICE_LEVEL_VERY_EXPENSIVE",
})
ENUM_TO_PRICE_LEVEL = MappingProxyType({name: level for level, name in PRICE_LEVEL_TO_ENUM.items()})


class PlacesAdapter(ABC):
    """
    Abstract Base Class (blueprint) for the capabilities route search relies on.
    It ensures every adapter we create has the same public methods.
    """
    @abstractmethod
    def search(self, request: SearchRequest) -> SearchResponse:
        """Runs a text search and returns our standard SearchResponse object."""
        pass

    @abstractmethod
    def fetch_encoded_path(self, origin: str, destination: str, mode: str,
                           language: str = "", region: str = "") -> str | None:
        """Returns the encoded polyline of the first route found, or None when there is no route."""
        pass


# --- Wire payload mapping ---

def _text(payload: dict | None) -> str:
    if not payload:
        return ""
    return payload.get('text', "")


def map_lat_lng(payload: dict | None) -> LatLng | None:
    if not payload:
        return None
    return LatLng(lat=payload.get('latitude', 0.0), lng=payload.get('longitude', 0.0))


def map_price_level(value: str | None) -> int | None:
    if not value:
        return None
    return ENUM_TO_PRICE_LEVEL.get(value)


def _open_now(place: dict) -> bool | None:
    hours = place.get('currentOpeningHours')
    if not hours:
        return None
    return hours.get('openNow')


def map_place_summary(place: dict) -> PlaceSummary:
    return PlaceSummary(
        place_id=place.get('id', ""),
        name=_text(place.get('displayName')),
        address=place.get('formattedAddress', ""),
        location=map_lat_lng(place.get('location')),
        rating=place.get('rating'),
        price_level=map_price_level(place.get('priceLevel')),
        types=list(place.get('types') or []),
        open_now=_open_now(place),
    )


def map_resolved_location(place: dict) -> ResolvedLocation:
    return ResolvedLocation(
        place_id=place.get('id', ""),
        name=_text(place.get('displayName')),
        address=place.get('formattedAddress', ""),
        location=map_lat_lng(place.get('location')),
        types=list(place.get('types') or []),
    )


def map_localized_text(payload: dict | None) -> LocalizedText | None:
    if not payload:
        return None
    text = payload.get('text', "")
    language_code = payload.get('languageCode', "")
    # Avoid emitting empty text blocks downstream.
    if not text.strip() and not language_code.strip():
        return None
    return LocalizedText(text=text, language_code=language_code)


def map_author(payload: dict | None) -> AuthorAttribution | None:
    if not payload:
        return None
    author = AuthorAttribution(
        display_name=payload.get('displayName', ""),
        uri=payload.get('uri', ""),
        photo_uri=payload.get('photoUri', ""),
    )
    if not (author.display_name.strip() or author.uri.strip() or author.photo_uri.strip()):
        return None
    return author


def map_visit_date(payload: dict | None) -> ReviewVisitDate | None:
    if not payload:
        return None
    date = ReviewVisitDate(
        year=payload.get('year', 0),
        month=payload.get('month', 0),
        day=payload.get('day', 0),
    )
    # Zeroed dates mean the API did not know the visit date.
    if not (date.year or date.month or date.day):
        return None
    return date


def map_review(payload: dict) -> Review:
    return Review(
        name=payload.get('name', ""),
        relative_publish_time_description=payload.get('relativePublishTimeDescription', ""),
        text=map_localized_text(payload.get('text')),
        original_text=map_localized_text(payload.get('originalText')),
        rating=payload.get('rating'),
        author=map_author(payload.get('authorAttribution')),
        publish_time=payload.get('publishTime', ""),
        flag_content_uri=payload.get('flagContentUri', ""),
        google_maps_uri=payload.get('googleMapsUri', ""),
        visit_date=map_visit_date(payload.get('visitDate')),
    )


def map_photo(payload: dict) -> Photo:
    authors = [map_author(author) for author in payload.get('authorAttributions') or []]
    return Photo(
        name=payload.get('name', ""),
        width_px=payload.get('widthPx', 0),
        height_px=payload.get('heightPx', 0),
        authors=[author for author in authors if author is not None],
    )


def map_place_details(place: dict) -> PlaceDetails:
    regular_hours = place.get('regularOpeningHours') or {}
    return PlaceDetails(
        place_id=place.get('id', ""),
        name=_text(place.get('displayName')),
        address=place.get('formattedAddress', ""),
        location=map_lat_lng(place.get('location')),
        rating=place.get('rating'),
        price_level=map_price_level(place.get('priceLevel')),
        types=list(place.get('types') or []),
        phone=place.get('nationalPhoneNumber', ""),
        website=place.get('websiteUri', ""),
        hours=list(regular_hours.get('weekdayDescriptions') or []),
        open_now=_open_now(place),
        reviews=[map_review(review) for review in place.get('reviews') or []],
        photos=[map_photo(photo) for photo in place.get('photos') or []],
    )


def map_autocomplete_suggestion(payload: dict) -> AutocompleteSuggestion | None:
    """Maps a place or query prediction; returns None for anything else."""
    prediction = payload.get('placePrediction')
    if prediction:
        structured = prediction.get('structuredFormat') or {}
        return AutocompleteSuggestion(
            kind="place",
            place_id=prediction.get('placeId', ""),
            place=prediction.get('place', ""),
            text=_text(prediction.get('text')),
            main_text=_text(structured.get('mainText')),
            secondary_text=_text(structured.get('secondaryText')),
            types=list(prediction.get('types') or []),
            distance_meters=prediction.get('distanceMeters'),
        )
    prediction = payload.get('queryPrediction')
    if prediction:
        structured = prediction.get('structuredFormat') or {}
        return AutocompleteSuggestion(
            kind="query",
            text=_text(prediction.get('text')),
            main_text=_text(structured.get('mainText')),
            secondary_text=_text(structured.get('secondaryText')),
        )
    return None


def circle_payload(bias: LocationBias) -> dict:
    return {
        'circle': {
            'center': {'latitude': bias.lat, 'longitude': bias.lng},
            'radius': bias.radius_m,
        }
    }


def build_search_body(request: SearchRequest) -> dict:
    text_query = request.query
    filters = request.filters
    if filters is not None and filters.keyword.strip():
        # The API takes a single text query, so keywords are appended to it.
        text_query = f"{text_query} {filters.keyword}".strip()

    body = {'textQuery': text_query, 'pageSize': request.limit}
    _set_locale(body, request.language, request.region)
    if request.page_token:
        body['pageToken'] = request.page_token
    if request.location_bias is not None:
        body['locationBias'] = circle_payload(request.location_bias)

    if filters is not None:
        if filters.types:
            # Only one includedType is accepted; use the first.
            body['includedType'] = filters.types[0]
        if filters.open_now is not None:
            body['openNow'] = filters.open_now
        if filters.min_rating is not None:
            body['minRating'] = filters.min_rating
        levels = [PRICE_LEVEL_TO_ENUM[level] for level in filters.price_levels if level in PRICE_LEVEL_TO_ENUM]
        if levels:
            body['priceLevels'] = levels
    return body


def _set_locale(body: dict, language: str, region: str) -> None:
    if (language or "").strip():
        body['languageCode'] = language.strip()
    if (region or "").strip():
        body['regionCode'] = region.strip()


class GooglePlacesAdapter(PlacesAdapter):
    """The adapter for the Google Places API (New) and the Routes API."""
    SEARCH_TEXT_PATH = "/places:searchText"
    SEARCH_NEARBY_PATH = "/places:searchNearby"
    AUTOCOMPLETE_PATH = "/places:autocomplete"
    DETAILS_PATH = "/places/{place_id}"
    PHOTO_MEDIA_PATH = "/{name}/media"
    ROUTES_PATH = "/directions/v2:computeRoutes"

    def __init__(self, api_key: str | None = None, base_url: str | None = None,
                 routes_base_url: str | None = None, timeout: float = DEFAULT_TIMEOUT_SEC,
                 session: requests.Session | None = None, verbose: bool = False):
        if api_key is None:
            api_key = os.getenv("GOOGLE_PLACES_API_KEY", "")
        self.api_key = api_key
        self.base_url = (base_url or os.getenv("GOOGLE_PLACES_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        self.routes_base_url = (routes_base_url or os.getenv("GOOGLE_ROUTES_BASE_URL")
                                or DEFAULT_ROUTES_BASE_URL).rstrip("/")
        self.timeout = timeout or DEFAULT_TIMEOUT_SEC
        self.session = session if session is not None else requests.Session()
        self.verbose = verbose

    def _log(self, message: str) -> None:
        if self.verbose:
            print(f"   > [Places] {message}", file=sys.stderr)

    def _request(self, method: str, url: str, field_mask: str | None,
                 body: dict | None = None, params: dict | None = None) -> bytes:
        if not (self.api_key or "").strip():
            raise MissingAPIKeyError()

        headers = {
            'Content-Type': 'application/json',
            'X-Goog-Api-Key': self.api_key,
        }
        if field_mask:
            # The API only returns the fields named in the mask.
            headers['X-Goog-FieldMask'] = field_mask
        if params:
            params = {key: value for key, value in params.items() if str(value).strip()}

        self._log(f"{method} {url}")
        response = self.session.request(
            method, url, headers=headers, json=body, params=params or None, timeout=self.timeout)
        payload = (response.content or b"")[:MAX_RESPONSE_BYTES]
        self._log(f"HTTP {response.status_code}, {len(payload)} bytes")

        if response.status_code >= 400:
            raise APIError(response.status_code, payload.decode("utf-8", errors="replace").strip())
        if not payload:
            raise PlacesError("empty response")
        return payload

    def _request_json(self, what: str, method: str, url: str, field_mask: str | None,
                      body: dict | None = None, params: dict | None = None) -> dict:
        payload = self._request(method, url, field_mask, body=body, params=params)
        try:
            data = json.loads(payload)
        except ValueError as e:
            raise PlacesError(f"decode {what} response: {e}") from e
        if not isinstance(data, dict):
            raise PlacesError(f"decode {what} response: expected a JSON object")
        return data

    def search(self, request: SearchRequest) -> SearchResponse:
        request = apply_search_defaults(request)
        validate_search_request(request)

        data = self._request_json(
            "search", "POST", self.base_url + self.SEARCH_TEXT_PATH, SEARCH_FIELD_MASK,
            body=build_search_body(request))
        return SearchResponse(
            results=[map_place_summary(place) for place in data.get('places') or []],
            next_page_token=data.get('nextPageToken', ""),
        )

    def nearby_search(self, request: NearbySearchRequest) -> SearchResponse:
        request = apply_nearby_defaults(request)
        validate_nearby_request(request)

        body = {
            'locationRestriction': circle_payload(request.location_restriction),
            'maxResultCount': request.limit,
        }
        _set_locale(body, request.language, request.region)
        if request.included_types:
            body['includedTypes'] = list(request.included_types)
        if request.excluded_types:
            body['excludedTypes'] = list(request.excluded_types)

        data = self._request_json(
            "nearby", "POST", self.base_url + self.SEARCH_NEARBY_PATH, NEARBY_FIELD_MASK, body=body)
        return SearchResponse(
            results=[map_place_summary(place) for place in data.get('places') or []],
            next_page_token=data.get('nextPageToken', ""),
        )

    def autocomplete(self, request: AutocompleteRequest) -> AutocompleteResponse:
        request = apply_autocomplete_defaults(request)
        validate_autocomplete_request(request)

        body = {'input': request.input.strip()}
        if (request.session_token or "").strip():
            body['sessionToken'] = request.session_token.strip()
        _set_locale(body, request.language, request.region)
        if request.location_bias is not None:
            body['locationBias'] = circle_payload(request.location_bias)

        data = self._request_json(
            "autocomplete", "POST", self.base_url + self.AUTOCOMPLETE_PATH, AUTOCOMPLETE_FIELD_MASK,
            body=body)
        suggestions = []
        for payload in data.get('suggestions') or []:
            suggestion = map_autocomplete_suggestion(payload)
            if suggestion is not None:
                suggestions.append(suggestion)
        return AutocompleteResponse(suggestions=suggestions[:request.limit])

    def details(self, request: DetailsRequest) -> PlaceDetails:
        place_id = validate_place_id(request.place_id)

        field_mask = DETAILS_FIELD_MASK
        # Reviews and photos are heavy; they are opt-in.
        if request.include_reviews:
            field_mask += "," + DETAILS_REVIEWS_FIELD
        if request.include_photos:
            field_mask += "," + DETAILS_PHOTOS_FIELD

        url = self.base_url + self.DETAILS_PATH.format(place_id=place_id)
        data = self._request_json(
            "place details", "GET", url, field_mask,
            params={'languageCode': request.language or "", 'regionCode': request.region or ""})
        return map_place_details(data)

    def photo_media(self, request: PhotoMediaRequest) -> PhotoMedia:
        validate_photo_request(request)

        name = request.name.strip().strip("/")
        params = {'skipHttpRedirect': 'true'}
        if request.max_width_px:
            params['maxWidthPx'] = request.max_width_px
        if request.max_height_px:
            params['maxHeightPx'] = request.max_height_px

        url = self.base_url + self.PHOTO_MEDIA_PATH.format(name=name)
        data = self._request_json("photo", "GET", url, None, params=params)
        return PhotoMedia(name=data.get('name', name), photo_uri=data.get('photoUri', ""))

    def resolve(self, request: LocationResolveRequest) -> LocationResolveResponse:
        request = apply_resolve_defaults(request)
        validate_resolve_request(request)

        body = {'textQuery': request.location_text.strip(), 'pageSize': request.limit}
        _set_locale(body, request.language, request.region)

        data = self._request_json(
            "resolve", "POST", self.base_url + self.SEARCH_TEXT_PATH, RESOLVE_FIELD_MASK, body=body)
        return LocationResolveResponse(
            results=[map_resolved_location(place) for place in data.get('places') or []])

    def fetch_encoded_path(self, origin: str, destination: str, mode: str,
                           language: str = "", region: str = "") -> str | None:
        body = {
            'origin': {'address': origin},
            'destination': {'address': destination},
            'travelMode': mode,
            'polylineQuality': 'OVERVIEW',
            'polylineEncoding': 'ENCODED_POLYLINE',
        }
        _set_locale(body, language, region)

        self._log(f"Computing {mode} route from '{origin}' to '{destination}'...")
        data = self._request_json(
            "route", "POST", self.routes_base_url + self.ROUTES_PATH, ROUTES_FIELD_MASK, body=body)
        routes = data.get('routes') or []
        if not routes:
            return None
        # Only the first route is used.
        polyline = routes[0].get('polyline') or {}
        return polyline.get('encodedPolyline', "")
