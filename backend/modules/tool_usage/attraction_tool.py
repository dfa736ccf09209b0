"""
modules/tool_usage/attraction_tool.py
--------------------------------------
Place-search capability: nearby points of interest around a centre.

Real API:  POST https://places.googleapis.com/v1/places:searchNearby
Auth:      X-Goog-Api-Key header  (config.GOOGLE_MAPS_API_KEY)
Body:
    {
      "includedTypes":  ["museum"],                # omitted for a generic search
      "maxResultCount": 20,
      "locationRestriction": {"circle": {"center": {...}, "radius": 2000.0}},
      "rankPreference": "POPULARITY"
    }

Stub mode: set USE_STUB_PLACES=true (the default) to serve a small hardcoded
           Paris/Delhi dataset for offline runs.  The stub honours the same
           radius and category semantics as the real API.

Both implementations return PlaceSearchResult; entries that fail
validate_place() are dropped at the boundary and counted in `rejected`.
"""

from __future__ import annotations
import logging
from typing import Any, Optional

import requests

import config
from modules.tool_usage.distance_tool import bounding_box, distance_meters
from modules.validation import filter_valid, validate_place
from schemas.itinerary import Coordinate, Place
from schemas.provider_results import MalformedPayloadError, PlaceSearchResult, ProviderError

logger = logging.getLogger(__name__)

_NEARBY_URL = "https://places.googleapis.com/v1/places:searchNearby"

# Only request what Place actually uses
_FIELD_MASK = (
    "places.id,"
    "places.displayName,"
    "places.location,"
    "places.rating,"
    "places.userRatingCount,"
    "places.types,"
    "places.formattedAddress,"
    "places.editorialSummary"
)

# Nearby Search hard limits
_MAX_RESULT_COUNT = 20
_MAX_RADIUS_M = 50_000.0


def _flatten_google_place(place: dict) -> dict[str, Any]:
    loc = place.get("location") or {}
    return {
        "id":           place.get("id"),
        "name":         (place.get("displayName") or {}).get("text", "").strip(),
        "latitude":     loc.get("latitude"),
        "longitude":    loc.get("longitude"),
        "rating":       place.get("rating"),
        "review_count": place.get("userRatingCount"),
        "types":        place.get("types") or [],
        "address":      place.get("formattedAddress", ""),
        "description":  (place.get("editorialSummary") or {}).get("text", ""),
    }


def _place_from_flat(flat: dict[str, Any]) -> Place:
    rating = flat.get("rating")
    return Place(
        id=str(flat["id"]),
        name=flat["name"],
        coordinate=Coordinate(float(flat["latitude"]), float(flat["longitude"])),
        rating=float(rating) if rating is not None else None,
        review_count=flat.get("review_count"),
        categories=frozenset(flat.get("types") or ()),
        address=flat.get("address", ""),
        description=flat.get("description", ""),
    )


def parse_nearby_response(data: dict) -> PlaceSearchResult:
    """
    Convert a searchNearby JSON body into a PlaceSearchResult.

    An empty body ({}) is a legitimate "no places" answer.  A `places` value
    that is not a list is a malformed payload.
    """
    raw = data.get("places", [])
    if not isinstance(raw, list):
        raise MalformedPayloadError(f"'places' must be a list (got {type(raw).__name__})")
    flats = [_flatten_google_place(entry if isinstance(entry, dict) else {}) for entry in raw]
    valid = filter_valid(flats, validate_place)
    return PlaceSearchResult(
        places=tuple(_place_from_flat(flat) for flat in valid),
        rejected=len(flats) - len(valid),
    )


# ─────────────────────────────────────────────────────────────────────────────
# GooglePlacesClient
# ─────────────────────────────────────────────────────────────────────────────

class GooglePlacesClient:
    """Google Places API (New) Nearby Search."""

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        max_results: int | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else config.GOOGLE_MAPS_API_KEY
        self.timeout = timeout if timeout is not None else config.PLACES_REQUEST_TIMEOUT
        self.max_results = min(max_results or config.PLACES_MAX_RESULTS, _MAX_RESULT_COUNT)
        self._http = session or requests.Session()

    def query(
        self,
        center: Coordinate,
        category: Optional[str],
        radius_m: float,
    ) -> PlaceSearchResult:
        """Raises ProviderError / MalformedPayloadError; PlaceSearchProvider downgrades them."""
        if not self.api_key:
            raise ProviderError("GOOGLE_MAPS_API_KEY is not set")
        body: dict[str, Any] = {
            "maxResultCount": self.max_results,
            "locationRestriction": {
                "circle": {
                    "center": center.to_dict(),
                    "radius": float(min(radius_m, _MAX_RADIUS_M)),
                }
            },
            "rankPreference": "POPULARITY",
        }
        if category:
            body["includedTypes"] = [category]
        headers = {
            "Content-Type":     "application/json",
            "X-Goog-Api-Key":   self.api_key,
            "X-Goog-FieldMask": _FIELD_MASK,
        }
        try:
            resp = self._http.post(_NEARBY_URL, json=body, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.HTTPError as exc:
            body_text = exc.response.text[:300] if exc.response is not None else ""
            raise ProviderError(f"Google Places API HTTP error: {exc} {body_text}") from exc
        except requests.RequestException as exc:
            raise ProviderError(f"Google Places API network error: {exc}") from exc
        except ValueError as exc:
            raise MalformedPayloadError(f"Google Places API returned non-JSON body: {exc}") from exc

        result = parse_nearby_response(data)
        logger.debug(
            "Places nearby %s cat=%s r=%.0f m: %d places (%d rejected)",
            center, category or "*", radius_m, len(result.places), result.rejected,
        )
        return result


# ─────────────────────────────────────────────────────────────────────────────
# Stub dataset (USE_STUB_PLACES=true)
# ─────────────────────────────────────────────────────────────────────────────

def _s(city, idx, name, lat, lng, rating, reviews, types, desc=""):
    """Convenience builder for stub Place rows."""
    return Place(
        id=f"stub-{city}-{idx}",
        name=name,
        coordinate=Coordinate(lat, lng),
        rating=rating,
        review_count=reviews,
        categories=frozenset(types),
        description=desc,
    )


def _paris_stub_data() -> list[Place]:
    return [
        _s("paris", 1, "Louvre Museum", 48.8606, 2.3376, 4.7, 250_000,
           ("museum", "tourist_attraction"),
           "The world's most-visited museum, housed in a former royal palace."),
        _s("paris", 2, "Musée d'Orsay", 48.8600, 2.3266, 4.8, 90_000,
           ("museum", "art_gallery", "tourist_attraction"),
           "Impressionist collection inside a Beaux-Arts railway station."),
        _s("paris", 3, "Notre-Dame de Paris", 48.8530, 2.3499, 4.7, 100_000,
           ("church", "historical_landmark", "tourist_attraction")),
        _s("paris", 4, "Sainte-Chapelle", 48.8554, 2.3450, 4.7, 40_000,
           ("church", "historical_landmark")),
        _s("paris", 5, "Jardin du Luxembourg", 48.8462, 2.3372, 4.7, 60_000,
           ("park", "tourist_attraction")),
        _s("paris", 6, "Panthéon", 48.8462, 2.3464, 4.6, 35_000,
           ("historical_landmark", "tourist_attraction")),
        _s("paris", 7, "Centre Pompidou", 48.8607, 2.3522, 4.4, 60_000,
           ("museum", "art_gallery")),
        _s("paris", 8, "Jardin des Tuileries", 48.8635, 2.3275, 4.6, 70_000,
           ("park",)),
        _s("paris", 9, "Place des Vosges", 48.8556, 2.3655, 4.7, 30_000,
           ("park", "historical_landmark")),
        _s("paris", 10, "Jardin des Plantes", 48.8440, 2.3596, 4.5, 30_000,
           ("park", "botanical_garden")),
        _s("paris", 11, "Café de Flore", 48.8541, 2.3326, 4.0, 9_000,
           ("cafe", "restaurant")),
        _s("paris", 12, "Galeries Lafayette Haussmann", 48.8738, 2.3320, 4.4, 80_000,
           ("shopping_mall", "department_store")),
        _s("paris", 13, "Eiffel Tower", 48.8584, 2.2945, 4.7, 350_000,
           ("tourist_attraction", "historical_landmark")),
        _s("paris", 14, "Arc de Triomphe", 48.8738, 2.2950, 4.7, 200_000,
           ("historical_landmark", "tourist_attraction")),
        _s("paris", 15, "Gare du Nord Station", 48.8809, 2.3553, 3.9, 50_000,
           ("train_station", "tourist_attraction")),
        _s("paris", 16, "Le Petit Comptoir", 48.8575, 2.3480, 3.1, 140,
           ("restaurant",)),
    ]


def _delhi_stub_data() -> list[Place]:
    return [
        _s("delhi", 1, "Red Fort", 28.6562, 77.2410, 4.5, 150_000,
           ("historical_landmark", "tourist_attraction"),
           "Seventeenth-century Mughal fortress of red sandstone."),
        _s("delhi", 2, "Jama Masjid", 28.6507, 77.2334, 4.5, 90_000,
           ("mosque", "tourist_attraction")),
        _s("delhi", 3, "India Gate", 28.6129, 77.2295, 4.6, 300_000,
           ("historical_landmark", "tourist_attraction")),
        _s("delhi", 4, "Humayun's Tomb", 28.5933, 77.2507, 4.6, 70_000,
           ("historical_landmark", "tourist_attraction")),
        _s("delhi", 5, "National Museum", 28.6118, 77.2195, 4.4, 15_000,
           ("museum",)),
        _s("delhi", 6, "Lodhi Garden", 28.5931, 77.2197, 4.6, 50_000,
           ("park", "tourist_attraction")),
        _s("delhi", 7, "Gurudwara Bangla Sahib", 28.6264, 77.2091, 4.8, 90_000,
           ("tourist_attraction",)),
        _s("delhi", 8, "Khan Market", 28.6003, 77.2270, 4.3, 40_000,
           ("shopping_mall",)),
        _s("delhi", 9, "Karim's", 28.6497, 77.2337, 4.2, 20_000,
           ("restaurant",)),
        _s("delhi", 10, "Lotus Temple", 28.5535, 77.2588, 4.5, 100_000,
           ("tourist_attraction",)),
        _s("delhi", 11, "Qutub Minar", 28.5245, 77.1855, 4.5, 130_000,
           ("historical_landmark", "tourist_attraction")),
        _s("delhi", 12, "Parliament Street Police Station", 28.6255, 77.2137, 3.8, 400,
           ("police",)),
    ]


_STUB_CITY_DATA = {
    "paris": _paris_stub_data,
    "delhi": _delhi_stub_data,
}

# Default start points for the CLI when no coordinate is given
_CITY_CENTERS: dict[str, tuple[float, float]] = {
    "paris":     (48.8566, 2.3522),
    "delhi":     (28.6139, 77.2090),
    "new delhi": (28.6139, 77.2090),
}


def city_center(city: str) -> Optional[Coordinate]:
    key = city.strip().lower()
    if key not in _CITY_CENTERS:
        return None
    return Coordinate(*_CITY_CENTERS[key])


class StubPlaceSearch:
    """Offline place search over the hardcoded dataset."""

    def __init__(self, places: list[Place] | None = None, max_results: int | None = None) -> None:
        if places is None:
            places = [p for loader in _STUB_CITY_DATA.values() for p in loader()]
        self._places = places
        self.max_results = max_results or config.PLACES_MAX_RESULTS

    def query(
        self,
        center: Coordinate,
        category: Optional[str],
        radius_m: float,
    ) -> PlaceSearchResult:
        west, south, east, north = bounding_box(center, radius_m)
        hits: list[Place] = []
        for p in self._places:
            c = p.coordinate
            if not (south <= c.latitude <= north and west <= c.longitude <= east):
                continue
            if distance_meters(center, c) > radius_m:
                continue
            if category and category not in p.categories:
                continue
            hits.append(p)
            if len(hits) >= self.max_results:
                break
        logger.debug("Stub places cat=%s r=%.0f m: %d places", category or "*", radius_m, len(hits))
        return PlaceSearchResult(places=tuple(hits))
