"""
api/routes/directions.py
-------------------------
POST /v1/directions

Travel time and distance between two coordinates for one transport mode,
through the same cached TravelTimeProvider the planner uses.  Always answers;
`is_estimated: true` marks a geometric estimate or a derived transit time.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from api.routes.adventure import CoordinateBody
from modules.planning.adventure_planner import AdventurePlanner, get_planner
from modules.tool_usage.distance_tool import format_duration
from schemas.itinerary import Coordinate, TransportMode

router = APIRouter()


class DirectionsRequestBody(BaseModel):
    origin: CoordinateBody
    destination: CoordinateBody
    transport_mode: str = Field("walking", description="walking | transit | driving")


@router.post("/directions", summary="Travel time between two points")
def directions(
    req: DirectionsRequestBody,
    planner: AdventurePlanner = Depends(get_planner),
) -> dict:
    try:
        mode = TransportMode.parse(req.transport_mode)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    result = planner.builder.travel_times.get_travel_time(
        Coordinate(req.origin.latitude, req.origin.longitude),
        Coordinate(req.destination.latitude, req.destination.longitude),
        mode,
    )
    body = result.to_dict()
    body["transport_mode"] = mode.value
    body["duration_text"] = format_duration(result.travel_minutes)
    return body
