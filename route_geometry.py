# Geometry helpers for searching along a route: distances, polylines and waypoint sampling.

import math
from bisect import bisect_left

from places_errors import EmptyPolylineError, MalformedPolylineError
from places_structures import LatLng

EARTH_RADIUS_METERS = 6371000.0
POLYLINE_PRECISION = 1e5
SAME_POINT_EPSILON = 1e-6


# --- Distances ---

def distance_meters(a: LatLng, b: LatLng) -> float:
    """Great-circle distance between two coordinates, using the haversine formula."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = math.radians(b.lat - a.lat)
    dlng = math.radians(b.lng - a.lng)

    sin_dlat = math.sin(dlat / 2)
    sin_dlng = math.sin(dlng / 2)
    value = sin_dlat * sin_dlat + math.cos(lat1) * math.cos(lat2) * sin_dlng * sin_dlng
    # Rounding can push value a hair past 1.0 for antipodal points.
    return 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(min(value, 1.0)))


def cumulative_distances(points: list[LatLng]) -> list[float]:
    """Running arc length from the first point to each point along the path."""
    distances = [0.0] * len(points)
    for i in range(1, len(points)):
        distances[i] = distances[i - 1] + distance_meters(points[i - 1], points[i])
    return distances


def total_distance(points: list[LatLng]) -> float:
    if len(points) < 2:
        return 0.0
    return cumulative_distances(points)[-1]


# --- Polyline codec ---

def _read_varint(encoded: str, index: int) -> tuple[int, int]:
    """Reads one zig-zag varint starting at index; returns (signed delta, next index)."""
    result = 0
    shift = 0
    while True:
        if index >= len(encoded):
            raise MalformedPolylineError(index)
        b = ord(encoded[index]) - 63
        index += 1
        result |= (b & 0x1f) << shift
        shift += 5
        if b < 0x20:
            break
    return (result >> 1) ^ -(result & 1), index


def decode_polyline(encoded: str) -> list[LatLng]:
    """
    Decodes an encoded polyline into coordinates.
    Each pair is a delta from the previous point, in units of 1e-5 degrees.
    """
    if not encoded or not encoded.strip():
        raise EmptyPolylineError()

    points = []
    index = 0
    lat = 0
    lng = 0
    while index < len(encoded):
        dlat, index = _read_varint(encoded, index)
        dlng, index = _read_varint(encoded, index)
        lat += dlat
        lng += dlng
        points.append(LatLng(lat=lat / POLYLINE_PRECISION, lng=lng / POLYLINE_PRECISION))
    return points


def _write_varint(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1f)) + 63))
        value >>= 5
    chunks.append(chr(value + 63))
    return "".join(chunks)


def encode_polyline(points: list[LatLng]) -> str:
    """Encodes coordinates as a polyline; the inverse of decode_polyline."""
    chunks = []
    prev_lat = 0
    prev_lng = 0
    for point in points:
        lat = round(point.lat * POLYLINE_PRECISION)
        lng = round(point.lng * POLYLINE_PRECISION)
        chunks.append(_write_varint(lat - prev_lat))
        chunks.append(_write_varint(lng - prev_lng))
        prev_lat, prev_lng = lat, lng
    return "".join(chunks)


# --- Waypoint sampling ---

def same_point(a: LatLng, b: LatLng) -> bool:
    return abs(a.lat - b.lat) < SAME_POINT_EPSILON and abs(a.lng - b.lng) < SAME_POINT_EPSILON


def _append_unique(sampled: list[LatLng], point: LatLng) -> None:
    # Only adjacent duplicates are collapsed.
    if not sampled or not same_point(sampled[-1], point):
        sampled.append(point)


def unique_waypoints(points: list[LatLng]) -> list[LatLng]:
    result = []
    for point in points:
        _append_unique(result, point)
    return result


def point_at_cumulative(points: list[LatLng], cumulative: list[float], target: float) -> LatLng:
    """
    Finds the point at a given arc length along the path, interpolating
    linearly inside the segment that brackets it.
    """
    if target <= 0:
        return points[0]
    if target >= cumulative[-1]:
        return points[-1]

    # First index whose cumulative distance is >= target.
    index = bisect_left(cumulative, target)
    if index == 0:
        return points[0]
    prev = points[index - 1]
    nxt = points[index]
    segment = cumulative[index] - cumulative[index - 1]
    if segment <= 0:
        return nxt
    fraction = (target - cumulative[index - 1]) / segment
    return LatLng(
        lat=prev.lat + (nxt.lat - prev.lat) * fraction,
        lng=prev.lng + (nxt.lng - prev.lng) * fraction,
    )


def point_at_distance(points: list[LatLng], target: float) -> LatLng:
    return point_at_cumulative(points, cumulative_distances(points), target)


def sample_waypoints(points: list[LatLng], max_waypoints: int) -> list[LatLng]:
    """
    Picks up to max_waypoints points spread evenly by arc length along the path.

    When at least as many waypoints are requested as the path has points, the
    path itself is returned (minus adjacent duplicates) instead of being
    re-sampled.
    """
    if not points or max_waypoints <= 0:
        return []
    if len(points) == 1:
        return [points[0]]
    if max_waypoints == 1:
        return [point_at_distance(points, total_distance(points) / 2)]
    if max_waypoints >= len(points):
        return unique_waypoints(points)

    cumulative = cumulative_distances(points)
    total = cumulative[-1]
    if total == 0:
        return [points[0]]
    spacing = total / (max_waypoints - 1)

    sampled = []
    for i in range(max_waypoints):
        target = spacing * i
        _append_unique(sampled, point_at_cumulative(points, cumulative, target))
    return sampled
