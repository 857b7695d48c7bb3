# Exceptions raised by the places client and the route search.


class PlacesError(Exception):
    """Base class for every error raised by this package."""
    pass


class ValidationError(PlacesError, ValueError):
    """A request field failed validation before any network call was made."""

    def __init__(self, field: str, message: str):
        super().__init__(f"invalid {field}: {message}")
        self.field = field
        self.message = message


class MissingAPIKeyError(PlacesError, ValueError):
    def __init__(self):
        super().__init__(
            "missing API key: set GOOGLE_PLACES_API_KEY or pass --api-key")


class APIError(PlacesError):
    """The API answered with an HTTP error status."""

    def __init__(self, status_code: int, body: str = ""):
        message = f"API error ({status_code})"
        if body:
            message = f"{message}: {body}"
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class PolylineDecodeError(PlacesError):
    pass


class EmptyPolylineError(PolylineDecodeError):
    def __init__(self):
        super().__init__("empty polyline")


class MalformedPolylineError(PolylineDecodeError):
    def __init__(self, position: int):
        super().__init__(f"invalid polyline: input ends mid-value at offset {position}")
        self.position = position


class RouteNotFoundError(PlacesError):
    pass


class NoWaypointsError(PlacesError):
    def __init__(self):
        super().__init__("no route waypoints")
