# Formats API results as readable text for the terminal.

import os

from places_structures import (
    AutocompleteResponse,
    LatLng,
    LocationResolveResponse,
    PhotoMedia,
    PlaceDetails,
    PlaceSummary,
    Review,
    RouteResponse,
    SearchResponse,
)

MAX_REVIEWS = 3
REVIEW_PREVIEW_CHARS = 200


def color_enabled(no_color: bool) -> bool:
    """Color is off when asked for, when NO_COLOR is set, or on a dumb terminal."""
    if no_color:
        return False
    if os.getenv("NO_COLOR"):
        return False
    return os.getenv("TERM", "") != "dumb"


class Color:
    """Wraps text in ANSI escape codes when enabled."""
    RESET = "\033[0m"

    def __init__(self, enabled: bool):
        self.enabled = enabled

    def _wrap(self, code: str, text: str) -> str:
        if not self.enabled:
            return text
        return f"\033[{code}m{text}{self.RESET}"

    def bold(self, text: str) -> str:
        return self._wrap("1", text)

    def dim(self, text: str) -> str:
        return self._wrap("2", text)

    def cyan(self, text: str) -> str:
        return self._wrap("36", text)

    def green(self, text: str) -> str:
        return self._wrap("32", text)

    def yellow(self, text: str) -> str:
        return self._wrap("33", text)


def format_title(color: Color, name: str, address: str) -> str:
    display = (name or "").strip() or "(no name)"
    if not address:
        return color.cyan(display)
    return f"{color.cyan(display)} - {address}"


def unique_strings(values: list[str]) -> list[str]:
    return sorted({value.strip() for value in values if value and value.strip()})


def truncate_text(value: str, max_len: int) -> str:
    if max_len <= 0 or len(value) <= max_len:
        return value
    return value[:max_len].strip() + "..."


def _line(lines: list[str], color: Color, label: str, value: str) -> None:
    if not (value or "").strip():
        return
    lines.append(f"{color.dim(label + ':')} {value}")


def _location(lines: list[str], color: Color, location: LatLng | None) -> None:
    if location is None:
        return
    _line(lines, color, "Location", f"{location.lat:.6f}, {location.lng:.6f}")


def _rating(lines: list[str], color: Color, rating: float | None, price_level: int | None) -> None:
    parts = []
    if rating is not None:
        parts.append(f"{rating:.1f}")
    if price_level is not None:
        parts.append(f"${price_level}")
    _line(lines, color, "Rating", " · ".join(parts))


def _types(lines: list[str], color: Color, types: list[str]) -> None:
    _line(lines, color, "Types", ", ".join(unique_strings(types)))


def _open_now(lines: list[str], color: Color, open_now: bool | None) -> None:
    if open_now is None:
        return
    _line(lines, color, "Open now", "yes" if open_now else "no")


def _place_summary(lines: list[str], color: Color, place: PlaceSummary) -> None:
    _line(lines, color, "ID", place.place_id)
    _location(lines, color, place.location)
    _rating(lines, color, place.rating, place.price_level)
    _types(lines, color, place.types)
    _open_now(lines, color, place.open_now)


def review_line(review: Review) -> str:
    parts = []
    if review.rating is not None:
        parts.append(f"{review.rating:.1f} stars")
    if review.author is not None and review.author.display_name.strip():
        parts.append(f"by {review.author.display_name}")
    if review.relative_publish_time_description.strip():
        parts.append(f"({review.relative_publish_time_description})")

    text = review.text.text if review.text is not None else ""
    # Fall back to the original text when there is no translation.
    if not text.strip() and review.original_text is not None:
        text = review.original_text.text
    text = truncate_text(text.strip(), REVIEW_PREVIEW_CHARS)
    if text:
        parts.append(text)
    return " ".join(parts)


def _reviews(lines: list[str], color: Color, reviews: list[Review]) -> None:
    if not reviews:
        return
    lines.append(color.dim("Reviews:"))
    for review in reviews[:MAX_REVIEWS]:
        line = review_line(review)
        if line:
            lines.append(f"  - {line}")
    if len(reviews) > MAX_REVIEWS:
        lines.append(color.dim(f"  ... {len(reviews) - MAX_REVIEWS} more"))


def _numbered_places(color: Color, places: list[PlaceSummary]) -> list[str]:
    lines = []
    for i, place in enumerate(places, start=1):
        lines.append(f"{i}. {format_title(color, place.name, place.address)}")
        _place_summary(lines, color, place)
        if i < len(places):
            lines.append("")
    return lines


def render_search(color: Color, response: SearchResponse, header: str = "Results") -> str:
    if not response.results:
        return "No results."
    lines = [color.bold(f"{header} ({len(response.results)})")]
    lines.extend(_numbered_places(color, response.results))
    if response.next_page_token.strip():
        lines.append("")
        lines.append(f"{color.dim('Next page token:')} {response.next_page_token}")
    return "\n".join(lines)


def render_nearby(color: Color, response: SearchResponse) -> str:
    return render_search(color, response, header="Nearby")


def render_autocomplete(color: Color, response: AutocompleteResponse) -> str:
    if not response.suggestions:
        return "No results."
    lines = [color.bold(f"Suggestions ({len(response.suggestions)})")]
    for i, suggestion in enumerate(response.suggestions, start=1):
        title = suggestion.main_text or suggestion.text
        lines.append(f"{i}. {format_title(color, title, suggestion.secondary_text)}")
        _line(lines, color, "Kind", suggestion.kind)
        _line(lines, color, "ID", suggestion.place_id)
        _types(lines, color, suggestion.types)
        if suggestion.distance_meters is not None:
            _line(lines, color, "Distance", f"{suggestion.distance_meters} m")
        if i < len(response.suggestions):
            lines.append("")
    return "\n".join(lines)


def render_details(color: Color, place: PlaceDetails) -> str:
    lines = [color.bold(format_title(color, place.name, place.address))]
    _line(lines, color, "ID", place.place_id)
    _location(lines, color, place.location)
    _rating(lines, color, place.rating, place.price_level)
    _types(lines, color, place.types)
    _open_now(lines, color, place.open_now)
    _line(lines, color, "Phone", place.phone)
    _line(lines, color, "Website", place.website)
    _reviews(lines, color, place.reviews)
    if place.photos:
        lines.append(color.dim("Photos:"))
        for photo in place.photos:
            size = f" ({photo.width_px}x{photo.height_px})" if photo.width_px and photo.height_px else ""
            lines.append(f"  - {photo.name}{size}")
    if place.hours:
        lines.append(color.dim("Hours:"))
        lines.extend(f"  - {entry}" for entry in place.hours)
    return "\n".join(lines)


def render_photo(color: Color, photo: PhotoMedia) -> str:
    lines = []
    _line(lines, color, "Photo", photo.name)
    _line(lines, color, "URL", photo.photo_uri)
    return "\n".join(lines)


def render_resolve(color: Color, response: LocationResolveResponse) -> str:
    if not response.results:
        return "No results."
    lines = [color.bold(f"Resolved ({len(response.results)})")]
    for i, place in enumerate(response.results, start=1):
        lines.append(f"{i}. {format_title(color, place.name, place.address)}")
        _line(lines, color, "ID", place.place_id)
        _location(lines, color, place.location)
        _types(lines, color, place.types)
        if i < len(response.results):
            lines.append("")
    return "\n".join(lines)


def render_route(color: Color, response: RouteResponse) -> str:
    if not response.waypoints:
        return "No results."
    lines = [color.bold(f"Waypoints ({len(response.waypoints)})")]
    for i, waypoint in enumerate(response.waypoints, start=1):
        location = waypoint.location
        lines.append("")
        lines.append(color.bold(f"Waypoint {i}: {location.lat:.6f}, {location.lng:.6f}"))
        if not waypoint.results:
            lines.append("No results.")
            continue
        lines.extend(_numbered_places(color, waypoint.results))
    return "\n".join(lines)
