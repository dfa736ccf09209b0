"""
modules/validation/ingestion_validator.py
------------------------------------------
Data-quality guards applied at the two edges of the planner:

  Place payload (from the place-search capability, already flattened):
    ✓ Non-empty id and name
    ✓ Non-null, numeric coordinates
    ✓ Latitude in [-90, 90], longitude in [-180, 180]
    ✓ Coordinates are not both exactly 0.0 (likely missing)
    ✓ Rating in [0, 5] if present
    ✓ review_count >= 0 if present

  Plan request (from the API / CLI):
    ✓ start coordinate present and in range
    ✓ duration_hours in (0, MAX_DURATION_HOURS]
    ✓ transport_mode is a known mode (aliases accepted)
    ✓ preferences is a list of strings

Usage:
    from modules.validation import validate_place, validate_plan_request

    result = validate_place(flat_payload)
    if not result.valid:
        logger.warning(result.errors)

    request = validate_plan_request(start, 2.0, "walking", ["food"])
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, TypeVar

import config
from schemas.itinerary import Coordinate, TransportMode

T = TypeVar("T")

logger = logging.getLogger(__name__)


# ── Result dataclass ───────────────────────────────────────────────────────────

@dataclass
class ValidationResult:
    """
    Outcome of a single validation run.

    Attributes:
        valid:  True iff there are zero errors.
        errors: Human-readable list of failure reasons.
        record: The input record dict (for logging purposes).
    """
    valid: bool
    errors: list[str] = field(default_factory=list)
    record: dict = field(default_factory=dict, repr=False)

    def __bool__(self) -> bool:
        return self.valid


@dataclass
class PlanRequest:
    """Normalised, validated planning input."""
    start: Coordinate
    duration_hours: float
    transport_mode: TransportMode
    city: str = ""
    preferences: list[str] = field(default_factory=list)


def _as_float(value: Any) -> float | None:
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


# ── Place validation ───────────────────────────────────────────────────────────

def validate_place(record: dict[str, Any]) -> ValidationResult:
    """
    Validate a flattened place payload before it becomes a Place.

    Expected keys: id, name, latitude, longitude, rating?, review_count?
    """
    errors: list[str] = []

    # ── Identity ───────────────────────────────────────────────────────────
    if not str(record.get("id") or "").strip():
        errors.append("id must not be empty or NULL")
    if not str(record.get("name") or "").strip():
        errors.append("name must not be empty or NULL")

    # ── Coordinates ────────────────────────────────────────────────────────
    raw_lat = record.get("latitude")
    raw_lng = record.get("longitude")
    if raw_lat is None or raw_lng is None:
        errors.append(
            f"latitude/longitude must not be NULL "
            f"(got lat={raw_lat!r}, lng={raw_lng!r})"
        )
    else:
        lat, lng = _as_float(raw_lat), _as_float(raw_lng)
        if lat is None or lng is None:
            errors.append(
                f"latitude/longitude must be numeric "
                f"(got lat={raw_lat!r}, lng={raw_lng!r})"
            )
        else:
            if not (-90.0 <= lat <= 90.0):
                errors.append(f"latitude={lat} is outside valid range [-90, 90]")
            if not (-180.0 <= lng <= 180.0):
                errors.append(f"longitude={lng} is outside valid range [-180, 180]")
            if lat == 0.0 and lng == 0.0:
                errors.append(
                    "latitude=0.0 and longitude=0.0: likely a missing/default value"
                )

    # ── Rating / reviews ───────────────────────────────────────────────────
    rating = record.get("rating")
    if rating is not None:
        r = _as_float(rating)
        if r is None:
            errors.append(f"rating={rating!r} must be numeric")
        elif not (0.0 <= r <= 5.0):
            errors.append(f"rating={r} is outside valid range [0, 5]")

    reviews = record.get("review_count")
    if reviews is not None:
        if isinstance(reviews, bool) or not isinstance(reviews, int) or reviews < 0:
            errors.append(f"review_count={reviews!r} must be a non-negative integer")

    return ValidationResult(valid=len(errors) == 0, errors=errors, record=record)


# ── Plan request validation ────────────────────────────────────────────────────

def _coerce_start(start: Any, errors: list[str]) -> Coordinate | None:
    if isinstance(start, Coordinate):
        return start
    if isinstance(start, Mapping):
        lat = start.get("latitude", start.get("lat"))
        lng = start.get("longitude", start.get("lng"))
    elif isinstance(start, (tuple, list)) and len(start) == 2:
        lat, lng = start
    else:
        errors.append(f"start={start!r} must be a coordinate")
        return None
    lat_f, lng_f = _as_float(lat), _as_float(lng)
    if lat_f is None or lng_f is None:
        errors.append(f"start coordinate must be numeric (got lat={lat!r}, lng={lng!r})")
        return None
    try:
        return Coordinate(lat_f, lng_f)
    except ValueError as exc:
        errors.append(str(exc))
        return None


def validate_plan_request(
    start: Any,
    duration_hours: Any,
    transport_mode: Any,
    preferences: Any = None,
    city: str = "",
) -> PlanRequest:
    """
    Normalise a planning request or raise ValueError(ERROR_INVALID_INPUT).

    All problems are collected and reported together.
    """
    errors: list[str] = []

    coordinate = _coerce_start(start, errors)

    duration = _as_float(duration_hours)
    if duration is None or isinstance(duration_hours, bool):
        errors.append(f"duration_hours={duration_hours!r} must be numeric")
        duration = None
    elif not (0.0 < duration <= config.MAX_DURATION_HOURS):
        errors.append(
            f"duration_hours={duration} must be in (0, {config.MAX_DURATION_HOURS:g}]"
        )

    mode: TransportMode | None = None
    try:
        mode = TransportMode.parse(transport_mode)
    except ValueError as exc:
        errors.append(str(exc).replace("ERROR_INVALID_INPUT: ", ""))

    prefs: list[str] = []
    if preferences is not None:
        if isinstance(preferences, str) or not isinstance(preferences, (list, tuple)):
            errors.append(f"preferences={preferences!r} must be a list of strings")
        elif not all(isinstance(p, str) for p in preferences):
            errors.append("preferences must contain only strings")
        else:
            prefs = [p.strip().lower() for p in preferences if p.strip()]

    if errors:
        raise ValueError("ERROR_INVALID_INPUT: " + "; ".join(errors))

    return PlanRequest(
        start=coordinate,
        duration_hours=duration,
        transport_mode=mode,
        city=(city or "").strip(),
        preferences=prefs,
    )


# ── Batch filter helper ────────────────────────────────────────────────────────

def filter_valid(
    items: list[T],
    validator: Callable[[dict], ValidationResult],
    to_dict: Callable[[T], dict] | None = None,
    log: bool = True,
) -> list[T]:
    """
    Apply a validator to every item in a list, return only the valid ones.

    Args:
        items:     List of items (dicts, or anything to_dict can flatten).
        validator: e.g. validate_place.
        to_dict:   Optional callable to convert each item to a dict.
        log:       If True, log a warning for every rejected record.
    """
    valid_items: list[T] = []
    rejected = 0

    for item in items:
        record_dict = to_dict(item) if to_dict is not None else item
        result = validator(record_dict)
        if result.valid:
            valid_items.append(item)
        else:
            rejected += 1
            if log:
                logger.warning(
                    "Rejected %r: %s", record_dict.get("name", "?"), "; ".join(result.errors)
                )

    if log and rejected:
        logger.info("%d/%d records rejected; %d passed.", rejected, len(items), len(valid_items))

    return valid_items
