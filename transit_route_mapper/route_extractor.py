"""Extract the stops between an origin and a destination on a single trip.

Trip selection is a named policy. :class:`FirstCoveringTrip` returns the first
trip, in index order, whose stops include both endpoints. It does not look for
the shortest or fastest trip and it does not look at direction. A different
policy can be passed to :func:`extract_trip_route` as a
:class:`TripSelectionStrategy`.

Known limitation:
    Duplicate ``stop_sequence`` values inside a trip are kept in source row
    order by the stable sort. They are not repaired or reported.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from transit_route_mapper.errors import InvalidDirectionError, RouteNotFoundError
from transit_route_mapper.trip_index import StopTimeEntry, TripIndex

logger = logging.getLogger(__name__)


# =============================================================================
# Trip selection
# =============================================================================


class TripSelectionStrategy(ABC):
    """Chooses which trip serves an origin/destination pair."""

    @abstractmethod
    def select(
        self, trip_index: TripIndex, origin_id: str, dest_id: str
    ) -> tuple[str, list[StopTimeEntry]]:
        """Return ``(trip_id, entries)`` or raise :class:`RouteNotFoundError`."""


class FirstCoveringTrip(TripSelectionStrategy):
    """Pick the first trip, in index order, that visits both stops."""

    def select(
        self, trip_index: TripIndex, origin_id: str, dest_id: str
    ) -> tuple[str, list[StopTimeEntry]]:
        for trip_id in trip_index:
            if trip_index.serves(trip_id, origin_id, dest_id):
                return trip_id, trip_index[trip_id]
        raise RouteNotFoundError(origin_id, dest_id)


DEFAULT_STRATEGY: TripSelectionStrategy = FirstCoveringTrip()


# =============================================================================
# Extraction
# =============================================================================


@dataclass(frozen=True)
class ExtractedRoute:
    """Ordered stop-time entries from origin to destination, inclusive."""

    trip_id: str
    entries: tuple[StopTimeEntry, ...]

    @property
    def stop_ids(self) -> list[str]:
        return [entry.stop_id for entry in self.entries]


def order_trip(entries: list[StopTimeEntry]) -> list[StopTimeEntry]:
    """Sort entries by ``stop_sequence``; ties keep their input order."""
    return sorted(entries, key=lambda entry: entry.stop_sequence)


def extract_trip_route(
    trip_index: TripIndex,
    origin_id: str,
    dest_id: str,
    strategy: Optional[TripSelectionStrategy] = None,
) -> ExtractedRoute:
    """Slice the selected trip from *origin_id* to *dest_id*.

    Args:
        trip_index: Index built by :func:`build_trip_index`.
        origin_id: Identifier of the boarding stop.
        dest_id: Identifier of the alighting stop.
        strategy: Trip selection policy. Defaults to :class:`FirstCoveringTrip`.

    Returns:
        The selected trip and the inclusive run of its entries.

    Raises:
        RouteNotFoundError: No trip visits both stops.
        InvalidDirectionError: The selected trip reaches *dest_id* only before
            *origin_id*.
    """
    strategy = strategy or DEFAULT_STRATEGY
    trip_id, entries = strategy.select(trip_index, origin_id, dest_id)
    ordered = order_trip(entries)
    stop_ids = [entry.stop_id for entry in ordered]

    start = stop_ids.index(origin_id)
    try:
        end = stop_ids.index(dest_id, start)
    except ValueError:
        raise InvalidDirectionError(origin_id, dest_id, trip_id) from None

    logger.debug(
        "Trip %s serves %s -> %s (positions %d..%d of %d).",
        trip_id,
        origin_id,
        dest_id,
        start,
        end,
        len(ordered),
    )
    return ExtractedRoute(trip_id=trip_id, entries=tuple(ordered[start : end + 1]))


def extract_route(
    trip_index: TripIndex,
    origin_id: str,
    dest_id: str,
    strategy: Optional[TripSelectionStrategy] = None,
) -> list[str]:
    """Return the stop identifiers from *origin_id* to *dest_id*, inclusive."""
    return extract_trip_route(trip_index, origin_id, dest_id, strategy).stop_ids
