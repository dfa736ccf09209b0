from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from modules.tool_usage.attraction_tool import (
    GooglePlacesClient,
    StubPlaceSearch,
    parse_nearby_response,
)
from modules.tool_usage.routing_tool import GoogleRoutesClient, parse_routes_response
from schemas.itinerary import Coordinate, TransportMode
from schemas.provider_results import MalformedPayloadError, ProviderError

PARIS = Coordinate(48.8566, 2.3522)
LOUVRE = Coordinate(48.8606, 2.3376)

ROUTE_PAYLOAD = {
    "routes": [{
        "distanceMeters": 1234,
        "duration": "905s",
        "legs": [{"steps": [
            {"distanceMeters": 600, "staticDuration": "420s",
             "navigationInstruction": {"instructions": "Head west"}, "travelMode": "WALK"},
            {"distanceMeters": 634, "staticDuration": "485s", "travelMode": "WALK"},
        ]}],
    }]
}

NEARBY_PAYLOAD = {
    "places": [
        {
            "id": "ChIJ1",
            "displayName": {"text": "Louvre Museum"},
            "location": {"latitude": 48.8606, "longitude": 2.3376},
            "rating": 4.7,
            "userRatingCount": 250000,
            "types": ["museum", "tourist_attraction"],
            "formattedAddress": "Rue de Rivoli, Paris",
            "editorialSummary": {"text": "Art museum"},
        },
        {"id": "ChIJ2", "displayName": {"text": "No Location"}},
        {"id": "ChIJ3", "displayName": {"text": "Unrated"},
         "location": {"latitude": 48.85, "longitude": 2.35}},
    ]
}


def _session(payload=None, status_error: Exception | None = None) -> MagicMock:
    resp = MagicMock()
    resp.json.return_value = payload
    if status_error is not None:
        resp.raise_for_status.side_effect = status_error
    session = MagicMock()
    session.post.return_value = resp
    return session


# ── Routing ───────────────────────────────────────────────────────────────────

def test_parse_route():
    r = parse_routes_response(ROUTE_PAYLOAD)
    assert r.distance_meters == 1234
    assert r.duration_seconds == 905
    assert [s["instructions"] for s in r.steps] == ["Head west", ""]


def test_parse_route_zero_distance_is_omitted_by_api():
    assert parse_routes_response({"routes": [{"duration": "0s"}]}).distance_meters == 0


def test_parse_route_errors():
    with pytest.raises(ProviderError):
        parse_routes_response({})
    with pytest.raises(MalformedPayloadError):
        parse_routes_response({"routes": [{"distanceMeters": 5}]})
    with pytest.raises(MalformedPayloadError):
        parse_routes_response({"routes": [{"duration": "soon"}]})


def test_routes_client_request_shape():
    session = _session(ROUTE_PAYLOAD)
    client = GoogleRoutesClient(api_key="k", timeout=3, session=session)
    client.travel_time(PARIS, LOUVRE, TransportMode.walking)

    _, kwargs = session.post.call_args
    assert kwargs["json"]["travelMode"] == "WALK"
    assert kwargs["json"]["origin"]["location"]["latLng"] == PARIS.to_dict()
    assert kwargs["headers"]["X-Goog-Api-Key"] == "k"
    assert "routes.duration" in kwargs["headers"]["X-Goog-FieldMask"]
    assert kwargs["timeout"] == 3


def test_routes_client_wraps_http_errors():
    err = requests.HTTPError("403", response=MagicMock(text="denied"))
    client = GoogleRoutesClient(api_key="k", session=_session(status_error=err))
    with pytest.raises(ProviderError):
        client.travel_time(PARIS, LOUVRE, TransportMode.driving)


def test_routes_client_wraps_timeouts():
    session = MagicMock()
    session.post.side_effect = requests.Timeout("slow")
    with pytest.raises(ProviderError):
        GoogleRoutesClient(api_key="k", session=session).travel_time(PARIS, LOUVRE, TransportMode.walking)


def test_routes_client_without_key():
    with pytest.raises(ProviderError):
        GoogleRoutesClient(api_key="", session=MagicMock()).travel_time(
            PARIS, LOUVRE, TransportMode.walking
        )


# ── Places ────────────────────────────────────────────────────────────────────

def test_parse_nearby_drops_malformed_entries():
    result = parse_nearby_response(NEARBY_PAYLOAD)
    assert [p.id for p in result.places] == ["ChIJ1", "ChIJ3"]
    assert result.rejected == 1
    louvre = result.places[0]
    assert louvre.review_count == 250000
    assert louvre.categories == {"museum", "tourist_attraction"}
    assert result.places[1].rating is None


def test_parse_nearby_empty_and_malformed():
    assert parse_nearby_response({}).places == ()
    with pytest.raises(MalformedPayloadError):
        parse_nearby_response({"places": "nope"})


def test_places_client_category_and_generic_requests():
    session = _session(NEARBY_PAYLOAD)
    client = GooglePlacesClient(api_key="k", session=session, max_results=50)

    client.query(PARIS, "museum", 2000)
    body = session.post.call_args.kwargs["json"]
    assert body["includedTypes"] == ["museum"]
    assert body["maxResultCount"] == 20
    assert body["locationRestriction"]["circle"]["radius"] == 2000.0

    client.query(PARIS, None, 2000)
    assert "includedTypes" not in session.post.call_args.kwargs["json"]


def test_stub_search_respects_radius_and_category():
    stub = StubPlaceSearch()
    near = stub.query(PARIS, "museum", 2000).places
    assert near and all("museum" in p.categories for p in near)
    assert "Eiffel Tower" not in {p.name for p in stub.query(PARIS, None, 2000).places}
    assert "Eiffel Tower" in {p.name for p in stub.query(PARIS, None, 5000).places}
    assert stub.query(PARIS, None, 15000).places[0].id.startswith("stub-paris")
