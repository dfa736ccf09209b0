"""
modules/tool_usage/routing_tool.py
-------------------------------------
Routing capability backed by Google Routes API.

Endpoint:
    POST https://routes.googleapis.com/directions/v2:computeRoutes
    Headers:
        X-Goog-Api-Key: {GOOGLE_MAPS_API_KEY}
        X-Goog-FieldMask: routes.distanceMeters,routes.duration,routes.legs.steps...
        Content-Type: application/json
    Body:
        {
          "origin":      {"location": {"latLng": {"latitude": ..., "longitude": ...}}},
          "destination": {"location": {"latLng": {"latitude": ..., "longitude": ...}}},
          "travelMode": "WALK" | "DRIVE" | "TRANSIT"
        }

Response fields:
    routes[0].duration        → "Ns"   travel time
    routes[0].distanceMeters  → int    (omitted by the API when 0)
    routes[0].legs[0].steps[] → navigationInstruction / distanceMeters / staticDuration

An empty body ({}) means no route exists between the two points.
"""

from __future__ import annotations
import logging
from typing import Any

import requests

import config
from schemas.itinerary import Coordinate, TransportMode
from schemas.provider_results import MalformedPayloadError, ProviderError, RoutingResult

logger = logging.getLogger(__name__)

_ROUTES_URL = "https://routes.googleapis.com/directions/v2:computeRoutes"

_FIELD_MASK = (
    "routes.distanceMeters,"
    "routes.duration,"
    "routes.legs.steps.distanceMeters,"
    "routes.legs.steps.staticDuration,"
    "routes.legs.steps.navigationInstruction.instructions,"
    "routes.legs.steps.travelMode"
)

_GOOGLE_TRAVEL_MODE: dict[TransportMode, str] = {
    TransportMode.walking: "WALK",
    TransportMode.driving: "DRIVE",
    TransportMode.transit: "TRANSIT",
}


# ─────────────────────────────────────────────────────────────────────────────
# Helper: parse Google "Ns" duration string → float seconds
# ─────────────────────────────────────────────────────────────────────────────

def _parse_duration_s(value: str) -> float:
    """
    Parse Google Routes duration string to seconds.
    Format: "123s" or "123.456s"
    """
    if not isinstance(value, str) or not value.strip().endswith("s"):
        raise MalformedPayloadError(f"Unparseable duration {value!r}")
    try:
        return float(value.strip()[:-1])
    except ValueError:
        raise MalformedPayloadError(f"Unparseable duration {value!r}") from None


def _parse_step(step: dict) -> dict[str, Any]:
    return {
        "instructions":    step.get("navigationInstruction", {}).get("instructions", ""),
        "distance_meters": float(step.get("distanceMeters", 0)),
        "duration_seconds": _parse_duration_s(step.get("staticDuration", "0s")),
        "travel_mode":     step.get("travelMode", ""),
    }


def parse_routes_response(data: dict) -> RoutingResult:
    """
    Convert a computeRoutes JSON body into a RoutingResult.

    Raises ProviderError when there is no route, MalformedPayloadError when
    the first route lacks a duration.
    """
    routes = data.get("routes") or []
    if not routes:
        raise ProviderError("Google Routes returned no route")
    route = routes[0]
    if "duration" not in route:
        raise MalformedPayloadError("Google Routes route is missing 'duration'")
    steps: list[dict[str, Any]] = []
    for leg in route.get("legs", []):
        steps.extend(_parse_step(s) for s in leg.get("steps", []))
    return RoutingResult(
        distance_meters=float(route.get("distanceMeters", 0)),
        duration_seconds=_parse_duration_s(route["duration"]),
        steps=tuple(steps),
    )


# ─────────────────────────────────────────────────────────────────────────────
# GoogleRoutesClient
# ─────────────────────────────────────────────────────────────────────────────

class GoogleRoutesClient:
    """Routing capability: one computeRoutes call per origin→destination pair."""

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else config.GOOGLE_MAPS_API_KEY
        self.timeout = timeout if timeout is not None else config.ROUTING_REQUEST_TIMEOUT
        self._http = session or requests.Session()

    def travel_time(
        self,
        origin: Coordinate,
        destination: Coordinate,
        mode: TransportMode,
    ) -> RoutingResult:
        """Raises ProviderError / MalformedPayloadError; callers decide on fallback."""
        if not self.api_key:
            raise ProviderError("GOOGLE_MAPS_API_KEY is not set")
        body = {
            "origin":      {"location": {"latLng": origin.to_dict()}},
            "destination": {"location": {"latLng": destination.to_dict()}},
            "travelMode":  _GOOGLE_TRAVEL_MODE[mode],
        }
        headers = {
            "Content-Type":     "application/json",
            "X-Goog-Api-Key":   self.api_key,
            "X-Goog-FieldMask": _FIELD_MASK,
        }
        try:
            resp = self._http.post(_ROUTES_URL, json=body, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.HTTPError as exc:
            body_text = exc.response.text[:300] if exc.response is not None else ""
            raise ProviderError(f"Google Routes API HTTP error: {exc} {body_text}") from exc
        except requests.RequestException as exc:
            raise ProviderError(f"Google Routes API network error: {exc}") from exc
        except ValueError as exc:
            raise MalformedPayloadError(f"Google Routes API returned non-JSON body: {exc}") from exc

        result = parse_routes_response(data)
        logger.debug(
            "Routed %s -> %s (%s): %.0f m, %.0f s",
            origin, destination, mode.value, result.distance_meters, result.duration_seconds,
        )
        return result
