import json

import pytest

from places_adapters import GooglePlacesAdapter, PlacesAdapter
from places_structures import PlaceSummary, SearchResponse

SAMPLE_POLYLINE = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"


class FakeResponse:
    def __init__(self, status_code: int = 200, content=b""):
        if isinstance(content, (dict, list)):
            content = json.dumps(content)
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.status_code = status_code
        self.content = content


class FakeSession:
    """Stands in for requests.Session; answers every call through a handler."""

    def __init__(self, handler):
        self.handler = handler
        self.calls = []

    def request(self, method, url, headers=None, json=None, params=None, timeout=None):
        call = {
            'method': method,
            'url': url,
            'headers': headers or {},
            'json': json,
            'params': params,
            'timeout': timeout,
        }
        self.calls.append(call)
        return self.handler(call)


class FakeRouteAdapter(PlacesAdapter):
    """Scripted adapter that records every call made by route search."""

    def __init__(self, encoded=SAMPLE_POLYLINE, fail_on_search=None, error=None):
        self.encoded = encoded
        self.fail_on_search = fail_on_search
        self.error = error or RuntimeError("search failed")
        self.fetch_calls = []
        self.search_calls = []

    def fetch_encoded_path(self, origin, destination, mode, language="", region=""):
        self.fetch_calls.append((origin, destination, mode, language, region))
        return self.encoded

    def search(self, request):
        self.search_calls.append(request)
        if self.fail_on_search == len(self.search_calls):
            raise self.error
        bias = request.location_bias
        return SearchResponse(results=[
            PlaceSummary(place_id=f"place-{len(self.search_calls)}", name=f"Cafe near {bias.lat:.2f}"),
        ])


@pytest.fixture
def make_adapter():
    """Builds a GooglePlacesAdapter whose HTTP calls are answered by `handler`."""
    def _make(handler, api_key="test-key"):
        session = FakeSession(handler)
        adapter = GooglePlacesAdapter(
            api_key=api_key,
            base_url="https://places.test/v1",
            routes_base_url="https://routes.test",
            session=session,
        )
        return adapter, session
    return _make
