"""Stop lookup by identifier or by name.

The index is built once from *stops.txt* and is read-only afterwards.

Lookups:
    - By identifier: exact, case-sensitive, O(1) through a dict.
    - By name: case-insensitive substring, linear scan in file order. The
      first stop whose name contains the query wins, even if a later stop
      would be a closer match.
    - :meth:`StopIndex.resolve` tries the identifier first and falls back to
      the name scan, so a query that is both an identifier and part of some
      other stop's name resolves to the identifier.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Optional

from transit_route_mapper.errors import StopNotFoundError
from transit_route_mapper.gtfs_tables import Table

logger = logging.getLogger(__name__)

REQUIRED_STOP_COLUMNS: tuple[str, ...] = ("stop_id", "stop_name")

# Missing or unparseable coordinates. Treat as "unknown".
UNKNOWN_COORDINATE = 0.0


@dataclass(frozen=True)
class Stop:
    """A stop record from *stops.txt*."""

    stop_id: str
    stop_name: str
    stop_desc: Optional[str]
    stop_lat: float
    stop_lon: float

    @property
    def has_coordinates(self) -> bool:
        return not (self.stop_lat == UNKNOWN_COORDINATE and self.stop_lon == UNKNOWN_COORDINATE)


class StopIndex:
    """Owns the canonical :class:`Stop` records of a feed."""

    def __init__(self, stops: list[Stop]) -> None:
        self._by_id: dict[str, Stop] = {}
        self._by_name: list[tuple[str, Stop]] = []
        for stop in stops:
            if stop.stop_id in self._by_id:
                continue
            self._by_id[stop.stop_id] = stop
            self._by_name.append((stop.stop_name.lower(), stop))

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, stop_id: object) -> bool:
        return stop_id in self._by_id

    def __iter__(self) -> Iterator[Stop]:
        return (stop for _, stop in self._by_name)

    def get(self, stop_id: str) -> Optional[Stop]:
        return self._by_id.get(stop_id)

    def find_by_id(self, stop_id: str) -> Optional[Stop]:
        """Return the stop whose identifier equals *stop_id* exactly."""
        return self._by_id.get(stop_id)

    def find_by_name_substring(self, query: str) -> Optional[Stop]:
        """Return the first stop, in file order, whose name contains *query*.

        Matching ignores case. A blank query matches nothing.
        """
        needle = query.lower()
        if not needle:
            return None
        for name_lower, stop in self._by_name:
            if needle in name_lower:
                return stop
        return None

    def resolve(self, query: str) -> Stop:
        """Resolve a user query to a stop, identifier first, then name.

        Raises:
            StopNotFoundError: Neither strategy matched. Carries *query*.
        """
        stop = self.find_by_id(query)
        if stop is None:
            stop = self.find_by_name_substring(query)
        if stop is None:
            raise StopNotFoundError(query)
        logger.debug("Resolved '%s' to stop %s (%s).", query, stop.stop_id, stop.stop_name)
        return stop


def parse_coordinate(value: str) -> Optional[float]:
    """Convert a coordinate string to float, or None if it is blank or invalid.

    ``nan`` and ``inf`` parse as floats but are not coordinates, so they count
    as invalid too.
    """
    try:
        coord = float(value)
    except (TypeError, ValueError):
        return None
    return coord if math.isfinite(coord) else None


def build_stop_index(table: Table) -> StopIndex:
    """Build a :class:`StopIndex` from a parsed *stops* table.

    Args:
        table: Table with at least ``stop_id`` and ``stop_name``. ``stop_desc``,
            ``stop_lat`` and ``stop_lon`` are optional.

    Returns:
        The populated index.

    Raises:
        MalformedTableError: A required column is missing.
    """
    table.require_columns(*REQUIRED_STOP_COLUMNS)
    df = table.frame

    ids = df["stop_id"]
    dup_mask = ids.duplicated(keep="first")
    dup_count = int(dup_mask.sum())
    if dup_count > 0:
        logger.warning(
            "%s: found %d duplicate stop_id values; keeping first occurrence. Sample: %s",
            table.name,
            dup_count,
            ids[dup_mask].head(20).tolist(),
        )

    has_desc = table.has_column("stop_desc")
    stops: list[Stop] = []
    bad_xy = 0
    for record in table.records():
        lat = parse_coordinate(record.get("stop_lat", ""))
        lon = parse_coordinate(record.get("stop_lon", ""))
        if (lat is None and record.get("stop_lat")) or (lon is None and record.get("stop_lon")):
            bad_xy += 1
        stops.append(
            Stop(
                stop_id=record["stop_id"],
                stop_name=record["stop_name"],
                stop_desc=(record["stop_desc"] or None) if has_desc else None,
                stop_lat=UNKNOWN_COORDINATE if lat is None else lat,
                stop_lon=UNKNOWN_COORDINATE if lon is None else lon,
            )
        )

    if bad_xy > 0:
        logger.warning("%s: %d rows have invalid stop_lat/stop_lon.", table.name, bad_xy)

    index = StopIndex(stops)
    logger.info("Indexed %d stops from %s.", len(index), table.name)
    return index
