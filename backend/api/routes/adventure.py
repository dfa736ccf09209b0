"""
api/routes/adventure.py
------------------------
POST /v1/adventure/plan

Runs the planning pipeline for one start point and time budget and returns
the itinerary JSON.  An infeasible itinerary is still a 200 response; it
carries `is_feasible: false` and a `hint`.

Status codes:
    200  itinerary (feasible or not)
    422  invalid input (pydantic, or ERROR_INVALID_INPUT from the validator)
    500  unexpected planner failure
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from modules.planning.adventure_planner import AdventurePlanner, get_planner, infeasibility_hint
from modules.tool_usage.distance_tool import format_duration
from schemas.itinerary import Itinerary

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Request schemas ────────────────────────────────────────────────────────────

class CoordinateBody(BaseModel):
    latitude:  float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class PlanRequestBody(BaseModel):
    start: CoordinateBody
    city: str = Field("", description="Used for logging and synthetic stop names")
    duration_hours: float = Field(..., gt=0, description="Total outing length, travel included")
    transport_mode: str = Field("walking", description="walking | transit | driving")
    preferences: list[str] = Field(
        default_factory=list,
        description="food | culture | nature | shopping | history | entertainment",
    )


# ── Serialiser ─────────────────────────────────────────────────────────────────

def _ser_itinerary(it: Itinerary) -> dict:
    body = it.to_dict()
    for leg in body["legs"]:
        leg["duration_text"] = format_duration(leg["travel_minutes"])
    body["hint"] = infeasibility_hint(it)
    return body


# ── Endpoint ───────────────────────────────────────────────────────────────────

@router.post("/plan", summary="Plan a micro-adventure")
def plan_adventure(
    req: PlanRequestBody,
    planner: AdventurePlanner = Depends(get_planner),
) -> dict:
    try:
        itinerary = planner.plan(
            start=req.start.model_dump(),
            city=req.city,
            duration_hours=req.duration_hours,
            transport_mode=req.transport_mode,
            preferences=req.preferences,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Planner failed")
        raise HTTPException(status_code=500, detail=f"Planner error: {exc}") from exc

    return _ser_itinerary(itinerary)
