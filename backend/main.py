"""
main.py
--------
Command-line entry point for the micro-adventure planner.

Run:
  python main.py --city paris --hours 2 --mode walking
  python main.py --lat 28.6139 --lng 77.2090 --city delhi --hours 4 \
                 --mode transit --pref history --pref food --json

Notes:
  - With the default config (USE_STUB_PLACES=true, USE_STUB_ROUTING=true)
    no network calls are made: stub places plus geometric travel estimates.
  - Set GOOGLE_MAPS_API_KEY and flip the stub flags for live data.
"""

from __future__ import annotations
import argparse
import json
import logging
import sys

import config
from modules.planning.adventure_planner import build_default_planner, infeasibility_hint
from modules.tool_usage.attraction_tool import city_center
from modules.tool_usage.distance_tool import format_duration
from schemas.itinerary import Itinerary


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Plan a short, time-boxed adventure.")
    parser.add_argument("--city", default="", help="City name (also picks a default start)")
    parser.add_argument("--lat", type=float, help="Start latitude")
    parser.add_argument("--lng", type=float, help="Start longitude")
    parser.add_argument("--hours", type=float, required=True, help="Total duration in hours")
    parser.add_argument("--mode", default="walking", help="walking | transit | driving")
    parser.add_argument(
        "--pref", action="append", default=[],
        help="Preference (food, culture, nature, shopping, history, entertainment); repeatable",
    )
    parser.add_argument("--json", action="store_true", help="Print JSON only")
    return parser.parse_args(argv)


def _print_itinerary(itinerary: Itinerary) -> None:
    """Print a human-readable stop-by-stop schedule."""
    width = 52
    print()
    print("═" * width)
    title = itinerary.city or "your area"
    print(f"  YOUR ADVENTURE  —  {title}  ({format_duration(int(itinerary.total_budget_minutes))}, "
          f"{itinerary.transport_mode.value})")
    print("═" * width)

    if itinerary.used_fallback_locations:
        print("  (no places found nearby; showing suggested spots)")

    for i, stop in enumerate(itinerary.stops):
        name_col = stop.name[:30].ljust(30)
        print(f"    {i}. {name_col}  {stop.time_to_spend_minutes:>3} min")
        if i < len(itinerary.legs):
            leg = itinerary.legs[i]
            est = " (est.)" if leg.is_estimated else ""
            print(f"         ↓ {format_duration(leg.travel_minutes)}{est}")

    print()
    print("═" * width)
    print(f"  Travel time : {format_duration(itinerary.total_travel_minutes)}")
    print(f"  Feasible    : {'yes' if itinerary.is_feasible else 'no'}")
    hint = infeasibility_hint(itinerary)
    if hint:
        print(f"  Hint        : {hint}")
    print("═" * width)
    print()


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=config.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.lat is not None and args.lng is not None:
        start = {"latitude": args.lat, "longitude": args.lng}
    else:
        center = city_center(args.city)
        if center is None:
            print(f"No default start for city {args.city!r}; pass --lat and --lng.", file=sys.stderr)
            return 2
        start = center

    planner = build_default_planner()
    try:
        itinerary = planner.plan(start, args.city, args.hours, args.mode, args.pref)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    if not args.json:
        _print_itinerary(itinerary)
        print("ITINERARY (JSON):")
    body = itinerary.to_dict()
    body["hint"] = infeasibility_hint(itinerary)
    print(json.dumps(body, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
