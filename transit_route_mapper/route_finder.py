"""Find the stops between two GTFS stops and draw them on an HTML map.

Asks for an origin and a final stop (by stop_id or part of the stop name),
finds the first trip that serves both, and writes the stops in between to a
Leaflet map. Distance and riding time are estimated at a flat average speed.

Typical usage:
    Adjust the CONFIGURATION section, or pass flags:

        route-finder --data-dir path/to/gtfs --origin 105 --destination "Gordon"

    Without --origin/--destination the tool prompts for them.

Outputs:
    - route_map.html (or --output)
    - Optional JSON payload (--json)
    - A log file when --log-file is set

Exit codes:
    0 success, 1 stop or route not found, 2 GTFS data could not be loaded.
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Optional

from transit_route_mapper.data_sources import locate_gtfs_folder
from transit_route_mapper.dataset import TransitDataset
from transit_route_mapper.errors import (
    InvalidDirectionError,
    MalformedTableError,
    RouteNotFoundError,
    StopNotFoundError,
)
from transit_route_mapper.map_payload import MapPayload, build_payload
from transit_route_mapper.map_renderer import render_route_map
from transit_route_mapper.travel_estimate import DEFAULT_AVERAGE_SPEED_KMH, estimate_travel
from transit_route_mapper.utils.logging_helper import setup_logging

# =============================================================================
# CONFIGURATION
# =============================================================================

# Folder holding stops and stop_times (.txt or .csv). None searches the working
# directory, its parents and the program directory (also under csv_files/).
DATA_DIR: Optional[Path] = None

# Where the HTML map is written.
OUTPUT_HTML: Path = Path("route_map.html")

# Optional JSON copy of the map payload. None to skip.
OUTPUT_JSON: Optional[Path] = None

# Average speed used for the riding time estimate.
AVERAGE_SPEED_KMH: float = DEFAULT_AVERAGE_SPEED_KMH

# If True, draw a straight origin -> destination line when no single trip
# serves both stops. The failure is still logged.
DIRECT_LINE_FALLBACK: bool = False

LOG_LEVEL = logging.INFO

# =============================================================================
# FUNCTIONS
# =============================================================================

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_DATA_ERROR = 2

logger = logging.getLogger("transit_route_mapper.route_finder")


def prompt_for_stop(label: str, input_func: Callable[[str], str] = input) -> Optional[str]:
    """Ask for a stop name or id; None on empty input or end of input."""
    try:
        answer = input_func(f"Enter {label} stop name or stop_id: ")
    except EOFError:
        return None
    answer = answer.strip()
    return answer or None


def load_dataset(data_dir: Optional[Path] = None) -> TransitDataset:
    """Locate stops/stop_times and build the indexes once."""
    if data_dir is not None:
        paths = locate_gtfs_folder(search_dirs=[data_dir], max_levels=0, include_program_dir=False)
    else:
        paths = locate_gtfs_folder()
    return TransitDataset.from_paths(paths)


def run_route_finder(
    origin_query: str,
    dest_query: str,
    dataset: TransitDataset,
    output_html: Optional[Path] = OUTPUT_HTML,
    output_json: Optional[Path] = OUTPUT_JSON,
    speed_kmh: float = AVERAGE_SPEED_KMH,
    direct_fallback: bool = DIRECT_LINE_FALLBACK,
) -> MapPayload:
    """Resolve both stops, extract the route and write the outputs.

    Raises:
        StopNotFoundError: A query matched no stop.
        RouteNotFoundError: No trip serves both stops and fallback is off.
        InvalidDirectionError: The serving trip runs the other way and
            fallback is off.
    """
    try:
        result = dataset.find_route(origin_query, dest_query)
    except (RouteNotFoundError, InvalidDirectionError) as exc:
        if not direct_fallback:
            raise
        logger.warning("%s Drawing a direct line instead.", exc)
        stops = [dataset.resolve_stop(origin_query), dataset.resolve_stop(dest_query)]
        payload = build_payload(stops)
    else:
        payload = result.payload
        stops = list(result.stops)
        logger.info("Route: %s", " -> ".join(result.stop_ids))

    estimate = estimate_travel(stops, speed_kmh=speed_kmh)
    logger.info(
        "Estimated distance %.2f km over %d hops, about %.0f min at %.0f km/h.",
        estimate.distance_km,
        estimate.hops,
        estimate.minutes,
        estimate.speed_kmh,
    )

    if output_html is not None:
        render_route_map(payload, output_html)

    if output_json is not None:
        output_json.parent.mkdir(parents=True, exist_ok=True)
        with output_json.open("w", encoding="utf-8") as f:
            json.dump(payload.to_dict(), f, indent=2)
        logger.info("Wrote: %s", output_json)

    return payload


# =============================================================================
# CLI (notebook-safe: unknown args are ignored)
# =============================================================================


def parse_args(argv: Sequence[str] | None = None) -> tuple[argparse.Namespace, list[str]]:
    """Parse CLI args and return (args, unknown_args)."""
    parser = argparse.ArgumentParser(
        description="Map the stops between two GTFS stops on a single trip."
    )
    parser.add_argument("--origin", help="Origin stop_id or part of its name")
    parser.add_argument("--destination", help="Final stop_id or part of its name")
    parser.add_argument("--data-dir", type=Path, default=DATA_DIR, help="GTFS folder")
    parser.add_argument("--output", type=Path, default=OUTPUT_HTML, help="HTML map path")
    parser.add_argument("--json", type=Path, default=OUTPUT_JSON, help="Payload JSON path")
    parser.add_argument(
        "--speed-kmh",
        type=float,
        default=AVERAGE_SPEED_KMH,
        help="Average speed for the travel time estimate",
    )
    parser.add_argument(
        "--direct-fallback",
        action=argparse.BooleanOptionalAction,
        default=DIRECT_LINE_FALLBACK,
        help="Draw a direct line when no single trip serves both stops",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Also log to this file")
    args, unknown = parser.parse_known_args(list(argv) if argv is not None else None)
    if not math.isfinite(args.speed_kmh) or args.speed_kmh <= 0:
        parser.error(f"--speed-kmh must be a positive number, got {args.speed_kmh}")
    return args, unknown


def main(argv: Sequence[str] | None = None, input_func: Callable[[str], str] = input) -> int:
    """CLI entry point."""
    args, _unknown = parse_args(argv)
    setup_logging(LOG_LEVEL, args.log_file)

    origin_query = args.origin or prompt_for_stop("origin", input_func)
    if not origin_query:
        logger.info("No origin provided. Exiting.")
        return EXIT_OK
    dest_query = args.destination or prompt_for_stop("final", input_func)
    if not dest_query:
        logger.info("No final stop provided. Exiting.")
        return EXIT_OK

    try:
        dataset = load_dataset(args.data_dir)
    except (OSError, MalformedTableError) as exc:
        logger.error("Could not load GTFS data: %s", exc)
        return EXIT_DATA_ERROR

    try:
        run_route_finder(
            origin_query,
            dest_query,
            dataset,
            output_html=args.output,
            output_json=args.json,
            speed_kmh=args.speed_kmh,
            direct_fallback=args.direct_fallback,
        )
    except (StopNotFoundError, RouteNotFoundError, InvalidDirectionError) as exc:
        logger.error("%s", exc)
        return EXIT_NOT_FOUND
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
