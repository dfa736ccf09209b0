"""
modules/planning/fallback_locations.py
----------------------------------------
Synthetic stops used when the place search returns nothing at all.

Stop i of `count` sits on a ray from the start:
    bearing_i = i × 360 / count            (degrees, 0 = north)
    radius_i  = spacing(mode) × (i + 1)    (degrees)
    Δlat      = radius_i × cos(bearing_i)
    Δlng      = radius_i × sin(bearing_i)

The offsets are raw degrees (planar), not geodesic; at the spacings used here
(a few hundred metres to ~5 km) the distortion is irrelevant.  Output is
deterministic for a given input.
"""

from __future__ import annotations

import math

import config
from modules.planning.itinerary_builder import target_stop_count
from modules.tool_usage.distance_tool import offset_coordinate
from schemas.itinerary import Coordinate, Place, TransportMode

# (name, description); "{city}" is substituted
_TEMPLATES: tuple[tuple[str, str], ...] = (
    ("{city} Old Town Walk",
     "Wander the older streets of {city} and look out for local architecture."),
    ("{city} Neighbourhood Café",
     "Stop for a drink somewhere locals in {city} actually go."),
    ("{city} Viewpoint",
     "Find a spot with a view over {city}."),
    ("{city} Local Market",
     "Browse whatever is on sale at a nearby {city} market or row of shops."),
    ("{city} Green Space",
     "Take a break in the closest park or square in {city}."),
    ("{city} Hidden Corner",
     "Explore a side street in {city} you would not normally walk down."),
)


def fallback_spacing_deg(mode: TransportMode | str) -> float:
    mode = TransportMode.parse(mode)
    return config.MODE_PROFILES[mode.value]["fallback_spacing_deg"]


class FallbackLocationGenerator:
    def generate(
        self,
        start: Coordinate,
        city: str,
        duration_hours: float,
        transport_mode: TransportMode | str,
    ) -> list[Place]:
        count = target_stop_count(duration_hours)
        spacing = fallback_spacing_deg(transport_mode)
        label = city.strip() or "City"

        places: list[Place] = []
        for i in range(count):
            angle = math.radians(i * 360.0 / count)
            radius = spacing * (i + 1)
            name, desc = _TEMPLATES[i % len(_TEMPLATES)]
            places.append(
                Place(
                    id=f"synthetic-{i}",
                    name=name.format(city=label),
                    coordinate=offset_coordinate(
                        start, radius * math.cos(angle), radius * math.sin(angle)
                    ),
                    description=desc.format(city=label),
                    is_synthetic=True,
                )
            )
        return places
