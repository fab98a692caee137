"""A loaded feed: both indexes built once, then queried per stop pair."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from transit_route_mapper.gtfs_tables import Table, TableSource, load_gtfs_tables, parse_table
from transit_route_mapper.map_payload import MapPayload, build_payload, resolve_route_stops
from transit_route_mapper.route_extractor import TripSelectionStrategy, extract_trip_route
from transit_route_mapper.stop_index import Stop, StopIndex, build_stop_index
from transit_route_mapper.trip_index import TripIndex, build_trip_index

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteResult:
    """Everything a caller needs to show one origin/destination query."""

    origin: Stop
    destination: Stop
    trip_id: str
    stops: tuple[Stop, ...]
    payload: MapPayload

    @property
    def stop_ids(self) -> list[str]:
        return [stop.stop_id for stop in self.stops]


class TransitDataset:
    """Read-only stop and trip indexes for one GTFS feed."""

    def __init__(
        self,
        stop_index: StopIndex,
        trip_index: TripIndex,
        strategy: Optional[TripSelectionStrategy] = None,
    ) -> None:
        self.stop_index = stop_index
        self.trip_index = trip_index
        self.strategy = strategy

    @classmethod
    def from_tables(
        cls, stops: Table, stop_times: Table, strategy: Optional[TripSelectionStrategy] = None
    ) -> "TransitDataset":
        return cls(build_stop_index(stops), build_trip_index(stop_times), strategy)

    @classmethod
    def from_sources(
        cls,
        stops: TableSource,
        stop_times: TableSource,
        strategy: Optional[TripSelectionStrategy] = None,
    ) -> "TransitDataset":
        """Build from two readable sources (paths or open streams)."""
        return cls.from_tables(
            parse_table(stops, name="stops"), parse_table(stop_times, name="stop_times"), strategy
        )

    @classmethod
    def from_paths(
        cls,
        paths: Mapping[str, Union[str, "os.PathLike[str]"]],
        strategy: Optional[TripSelectionStrategy] = None,
    ) -> "TransitDataset":
        """Build from a ``{"stops": path, "stop_times": path}`` mapping."""
        return cls.from_tables(
            parse_table(paths["stops"], name=Path(paths["stops"]).name),
            parse_table(paths["stop_times"], name=Path(paths["stop_times"]).name),
            strategy,
        )

    @classmethod
    def from_folder(
        cls, folder: Union[str, "os.PathLike[str]"], strategy: Optional[TripSelectionStrategy] = None
    ) -> "TransitDataset":
        """Build from a GTFS folder holding ``stops.txt`` and ``stop_times.txt``."""
        tables = load_gtfs_tables(folder)
        return cls.from_tables(tables["stops"], tables["stop_times"], strategy)

    def resolve_stop(self, query: str) -> Stop:
        return self.stop_index.resolve(query)

    def find_route(self, origin_query: str, dest_query: str) -> RouteResult:
        """Resolve both queries and extract the route between them.

        Raises:
            StopNotFoundError: Either query matched no stop, or the trip uses a
                stop missing from the stops table.
            RouteNotFoundError: No trip visits both stops.
            InvalidDirectionError: The selected trip runs the other way.
        """
        origin = self.resolve_stop(origin_query)
        destination = self.resolve_stop(dest_query)
        logger.info("Origin: %s (%s)", origin.stop_name, origin.stop_id)
        logger.info("Destination: %s (%s)", destination.stop_name, destination.stop_id)

        route = extract_trip_route(
            self.trip_index, origin.stop_id, destination.stop_id, self.strategy
        )
        stops = resolve_route_stops(self.stop_index, route.stop_ids)
        logger.info("Trip %s: %d stops from origin to destination.", route.trip_id, len(stops))
        return RouteResult(
            origin=origin,
            destination=destination,
            trip_id=route.trip_id,
            stops=tuple(stops),
            payload=build_payload(stops),
        )
