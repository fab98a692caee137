"""Find and map the stops between two GTFS stops on a single trip."""

from transit_route_mapper.dataset import RouteResult, TransitDataset
from transit_route_mapper.errors import (
    EmptyRouteError,
    InvalidDirectionError,
    MalformedTableError,
    RouteMapperError,
    RouteNotFoundError,
    StopNotFoundError,
)
from transit_route_mapper.gtfs_tables import Table, load_gtfs_tables, parse_table
from transit_route_mapper.map_payload import MapPayload, MapPoint, build_payload
from transit_route_mapper.route_extractor import (
    FirstCoveringTrip,
    TripSelectionStrategy,
    extract_route,
    extract_trip_route,
)
from transit_route_mapper.stop_index import Stop, StopIndex, build_stop_index
from transit_route_mapper.trip_index import StopTimeEntry, TripIndex, build_trip_index

__version__ = "0.1.0"

__all__ = [
    "EmptyRouteError",
    "FirstCoveringTrip",
    "InvalidDirectionError",
    "MalformedTableError",
    "MapPayload",
    "MapPoint",
    "RouteMapperError",
    "RouteNotFoundError",
    "RouteResult",
    "Stop",
    "StopIndex",
    "StopNotFoundError",
    "StopTimeEntry",
    "Table",
    "TransitDataset",
    "TripIndex",
    "TripSelectionStrategy",
    "build_payload",
    "build_stop_index",
    "build_trip_index",
    "extract_route",
    "extract_trip_route",
    "load_gtfs_tables",
    "parse_table",
]
