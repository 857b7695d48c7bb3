import pytest
import requests

from places_adapters import (
    AUTOCOMPLETE_FIELD_MASK,
    DETAILS_FIELD_MASK,
    NEARBY_FIELD_MASK,
    RESOLVE_FIELD_MASK,
    ROUTES_FIELD_MASK,
    SEARCH_FIELD_MASK,
    build_search_body,
)
from places_errors import APIError, MissingAPIKeyError, PlacesError, ValidationError
from places_structures import (
    AutocompleteRequest,
    DetailsRequest,
    Filters,
    LatLng,
    LocationBias,
    LocationResolveRequest,
    NearbySearchRequest,
    PhotoMediaRequest,
    RouteRequest,
    SearchRequest,
)
from route_search import search_along_route

from conftest import SAMPLE_POLYLINE, FakeResponse

CAFE = {
    "id": "abc",
    "displayName": {"text": "Cafe"},
    "formattedAddress": "123 Street",
    "location": {"latitude": 47.6, "longitude": -122.3},
    "rating": 4.5,
    "priceLevel": "PRICE_LEVEL_MODERATE",
    "types": ["cafe", "food"],
    "currentOpeningHours": {"openNow": True},
}


def test_search_success(make_adapter):
    adapter, session = make_adapter(
        lambda call: FakeResponse(200, {"places": [CAFE], "nextPageToken": "next"}))

    response = adapter.search(SearchRequest(
        query="coffee",
        filters=Filters(keyword="espresso", types=["cafe", "bakery"], open_now=True,
                        min_rating=4, price_levels=[1, 2]),
        location_bias=LocationBias(lat=47.6, lng=-122.3, radius_m=500),
        page_token="token",
        language="en",
        region="US",
    ))

    # 1. The request carries the key, the field mask and the mapped body
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://places.test/v1/places:searchText"
    assert call["headers"]["X-Goog-Api-Key"] == "test-key"
    assert call["headers"]["X-Goog-FieldMask"] == SEARCH_FIELD_MASK
    assert call["timeout"] == 10.0
    body = call["json"]
    assert body["textQuery"] == "coffee espresso"
    assert body["pageSize"] == 10
    assert body["pageToken"] == "token"
    assert body["languageCode"] == "en"
    assert body["regionCode"] == "US"
    assert body["includedType"] == "cafe"
    assert body["openNow"] is True
    assert body["minRating"] == 4
    assert body["priceLevels"] == ["PRICE_LEVEL_INEXPENSIVE", "PRICE_LEVEL_MODERATE"]
    assert body["locationBias"] == {
        "circle": {"center": {"latitude": 47.6, "longitude": -122.3}, "radius": 500}}

    # 2. The response is mapped into summaries
    assert response.next_page_token == "next"
    place = response.results[0]
    assert place.place_id == "abc"
    assert place.name == "Cafe"
    assert place.location == LatLng(47.6, -122.3)
    assert place.price_level == 2
    assert place.open_now is True


def test_search_body_without_filters():
    body = build_search_body(SearchRequest(query="tacos", limit=3))
    assert body == {"textQuery": "tacos", "pageSize": 3}


def test_http_error_becomes_api_error(make_adapter):
    adapter, _ = make_adapter(lambda call: FakeResponse(400, " bad request \n"))

    with pytest.raises(APIError) as excinfo:
        adapter.search(SearchRequest(query="coffee"))

    assert excinfo.value.status_code == 400
    assert excinfo.value.body == "bad request"


def test_invalid_json(make_adapter):
    adapter, _ = make_adapter(lambda call: FakeResponse(200, "not-json"))

    with pytest.raises(PlacesError, match="decode search response"):
        adapter.search(SearchRequest(query="coffee"))


def test_empty_response(make_adapter):
    adapter, _ = make_adapter(lambda call: FakeResponse(200, b""))

    with pytest.raises(PlacesError, match="empty response"):
        adapter.search(SearchRequest(query="coffee"))


def test_transport_errors_propagate(make_adapter):
    error = requests.exceptions.ConnectTimeout("timed out")

    def handler(call):
        raise error

    adapter, _ = make_adapter(handler)
    with pytest.raises(requests.exceptions.ConnectTimeout) as excinfo:
        adapter.search(SearchRequest(query="coffee"))
    assert excinfo.value is error


def test_missing_api_key(make_adapter):
    adapter, session = make_adapter(lambda call: FakeResponse(200, {}), api_key=" ")

    with pytest.raises(MissingAPIKeyError):
        adapter.search(SearchRequest(query="coffee"))
    # Validation still comes first.
    with pytest.raises(ValidationError):
        adapter.search(SearchRequest(query=""))
    assert session.calls == []


def test_nearby_search(make_adapter):
    adapter, session = make_adapter(lambda call: FakeResponse(200, {"places": [CAFE]}))

    response = adapter.nearby_search(NearbySearchRequest(
        location_restriction=LocationBias(lat=1, lng=2, radius_m=300),
        included_types=["cafe"],
        excluded_types=["bar"],
        region="US",
    ))

    call = session.calls[0]
    assert call["url"] == "https://places.test/v1/places:searchNearby"
    assert call["headers"]["X-Goog-FieldMask"] == NEARBY_FIELD_MASK
    assert call["json"] == {
        "locationRestriction": {"circle": {"center": {"latitude": 1, "longitude": 2}, "radius": 300}},
        "maxResultCount": 10,
        "regionCode": "US",
        "includedTypes": ["cafe"],
        "excludedTypes": ["bar"],
    }
    assert response.results[0].place_id == "abc"


def test_autocomplete(make_adapter):
    payload = {"suggestions": [
        {"placePrediction": {
            "placeId": "abc",
            "place": "places/abc",
            "text": {"text": "Cafe, Seattle"},
            "structuredFormat": {"mainText": {"text": "Cafe"}, "secondaryText": {"text": "Seattle"}},
            "types": ["cafe"],
            "distanceMeters": 120,
        }},
        {"queryPrediction": {"text": {"text": "cafe near me"}}},
        {"somethingElse": {}},
    ]}
    adapter, session = make_adapter(lambda call: FakeResponse(200, payload))

    response = adapter.autocomplete(AutocompleteRequest(
        input=" caf ", session_token="session", language="en",
        location_bias=LocationBias(lat=1, lng=2, radius_m=100)))

    body = session.calls[0]["json"]
    assert session.calls[0]["headers"]["X-Goog-FieldMask"] == AUTOCOMPLETE_FIELD_MASK
    assert body["input"] == "caf"
    assert body["sessionToken"] == "session"
    assert body["languageCode"] == "en"
    assert "circle" in body["locationBias"]

    assert [s.kind for s in response.suggestions] == ["place", "query"]
    place = response.suggestions[0]
    assert (place.place_id, place.main_text, place.secondary_text) == ("abc", "Cafe", "Seattle")
    assert place.distance_meters == 120
    assert response.suggestions[1].text == "cafe near me"


def test_autocomplete_limit_trims(make_adapter):
    payload = {"suggestions": [{"queryPrediction": {"text": {"text": f"q{i}"}}} for i in range(4)]}
    adapter, _ = make_adapter(lambda call: FakeResponse(200, payload))

    response = adapter.autocomplete(AutocompleteRequest(input="q", limit=1))
    assert len(response.suggestions) == 1


def test_details_with_reviews_and_photos(make_adapter):
    payload = dict(CAFE)
    payload.update({
        "nationalPhoneNumber": "+1 555",
        "websiteUri": "https://example.com",
        "regularOpeningHours": {"weekdayDescriptions": ["Mon: 9-5"]},
        "reviews": [{
            "rating": 5,
            "text": {"text": "Great", "languageCode": "en"},
            "originalText": {"text": "", "languageCode": ""},
            "authorAttribution": {"displayName": "Alice"},
            "visitDate": {"year": 2024, "month": 5},
        }, {
            "authorAttribution": {"displayName": " "},
            "visitDate": {"year": 0, "month": 0, "day": 0},
        }],
        "photos": [{"name": "places/abc/photos/p1", "widthPx": 800, "heightPx": 600,
                    "authorAttributions": [{"displayName": "Bob"}, {}]}],
    })
    adapter, session = make_adapter(lambda call: FakeResponse(200, payload))

    place = adapter.details(DetailsRequest(place_id=" abc ", language="en", include_reviews=True,
                                           include_photos=True))

    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://places.test/v1/places/abc"
    assert call["params"] == {"languageCode": "en"}
    assert call["headers"]["X-Goog-FieldMask"] == DETAILS_FIELD_MASK + ",reviews,photos"
    assert call["json"] is None

    assert place.phone == "+1 555"
    assert place.hours == ["Mon: 9-5"]
    first, second = place.reviews
    assert first.author.display_name == "Alice"
    assert first.text.text == "Great"
    assert first.original_text is None
    assert first.visit_date.year == 2024
    assert second.author is None
    assert second.visit_date is None
    assert place.photos[0].width_px == 800
    assert [a.display_name for a in place.photos[0].authors] == ["Bob"]


def test_details_default_field_mask(make_adapter):
    adapter, session = make_adapter(lambda call: FakeResponse(200, {"id": "abc"}))

    place = adapter.details(DetailsRequest(place_id="abc"))

    assert session.calls[0]["headers"]["X-Goog-FieldMask"] == DETAILS_FIELD_MASK
    assert session.calls[0]["params"] is None
    assert place.place_id == "abc"
    assert place.reviews == []


def test_details_requires_place_id(make_adapter):
    adapter, session = make_adapter(lambda call: FakeResponse(200, {}))
    with pytest.raises(ValidationError) as excinfo:
        adapter.details(DetailsRequest(place_id="  "))
    assert excinfo.value.field == "place_id"
    assert session.calls == []


def test_photo_media(make_adapter):
    adapter, session = make_adapter(
        lambda call: FakeResponse(200, {"name": "places/abc/photos/p1/media", "photoUri": "https://img"}))

    photo = adapter.photo_media(PhotoMediaRequest(name="places/abc/photos/p1", max_width_px=400))

    call = session.calls[0]
    assert call["url"] == "https://places.test/v1/places/abc/photos/p1/media"
    assert call["params"] == {"skipHttpRedirect": "true", "maxWidthPx": 400}
    assert "X-Goog-FieldMask" not in call["headers"]
    assert photo.photo_uri == "https://img"


def test_resolve(make_adapter):
    adapter, session = make_adapter(lambda call: FakeResponse(200, {"places": [CAFE]}))

    response = adapter.resolve(LocationResolveRequest(location_text="Seattle", language="en", region="US"))

    call = session.calls[0]
    assert call["headers"]["X-Goog-FieldMask"] == RESOLVE_FIELD_MASK
    assert call["json"] == {"textQuery": "Seattle", "pageSize": 5, "languageCode": "en", "regionCode": "US"}
    assert response.results[0].name == "Cafe"
    assert response.results[0].types == ["cafe", "food"]


def test_fetch_encoded_path(make_adapter):
    adapter, session = make_adapter(
        lambda call: FakeResponse(200, {"routes": [{"polyline": {"encodedPolyline": SAMPLE_POLYLINE}},
                                                   {"polyline": {"encodedPolyline": "ignored"}}]}))

    encoded = adapter.fetch_encoded_path("Seattle", "Portland", "DRIVE", language="en")

    call = session.calls[0]
    assert call["url"] == "https://routes.test/directions/v2:computeRoutes"
    assert call["headers"]["X-Goog-FieldMask"] == ROUTES_FIELD_MASK
    assert call["json"] == {
        "origin": {"address": "Seattle"},
        "destination": {"address": "Portland"},
        "travelMode": "DRIVE",
        "polylineQuality": "OVERVIEW",
        "polylineEncoding": "ENCODED_POLYLINE",
        "languageCode": "en",
    }
    assert encoded == SAMPLE_POLYLINE


def test_fetch_encoded_path_without_routes(make_adapter):
    adapter, _ = make_adapter(lambda call: FakeResponse(200, {"routes": []}))
    assert adapter.fetch_encoded_path("A", "B", "DRIVE") is None

    adapter, _ = make_adapter(lambda call: FakeResponse(200, {}))
    assert adapter.fetch_encoded_path("A", "B", "DRIVE") is None


def test_route_end_to_end(make_adapter):
    def handler(call):
        if call["url"].endswith("/directions/v2:computeRoutes"):
            return FakeResponse(200, {"routes": [{"polyline": {"encodedPolyline": SAMPLE_POLYLINE}}]})
        if call["url"].endswith("/places:searchText"):
            return FakeResponse(200, {"places": [{"id": "abc", "displayName": {"text": "Cafe"}}]})
        raise AssertionError(f"unexpected url {call['url']}")

    adapter, session = make_adapter(handler)

    response = search_along_route(RouteRequest(query="coffee", origin="Seattle", destination="Portland"),
                                  adapter)

    assert len(response.waypoints) == 3
    assert len(session.calls) == 4
    assert session.calls[1]["json"]["locationBias"]["circle"]["radius"] == 1000
    assert response.waypoints[0].results[0].name == "Cafe"


def test_route_search_error_end_to_end(make_adapter):
    def handler(call):
        if call["url"].endswith("/directions/v2:computeRoutes"):
            return FakeResponse(200, {"routes": [{"polyline": {"encodedPolyline": SAMPLE_POLYLINE}}]})
        return FakeResponse(500, "boom")

    adapter, session = make_adapter(handler)

    with pytest.raises(APIError):
        search_along_route(RouteRequest(query="coffee", origin="A", destination="B"), adapter)
    assert len(session.calls) == 2
