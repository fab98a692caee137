"""Per-trip stop sequences from *stop_times.txt*.

Each trip maps to its :class:`StopTimeEntry` rows in source order. Nothing is
sorted here; ordering by ``stop_sequence`` happens at extraction time.
Trips keep the order in which they first appear in the file.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from itertools import repeat

import numpy as np
import pandas as pd

from transit_route_mapper.gtfs_tables import Table

logger = logging.getLogger(__name__)

REQUIRED_STOP_TIME_COLUMNS: tuple[str, ...] = ("trip_id", "stop_id", "stop_sequence")

# Floats at or above 2**63 do not fit in int64.
INT64_LIMIT = float(2**63)


@dataclass(frozen=True)
class StopTimeEntry:
    """One visit of a trip to a stop."""

    trip_id: str
    stop_id: str
    stop_sequence: int
    arrival_time: str = ""
    departure_time: str = ""


class TripIndex(Mapping[str, list[StopTimeEntry]]):
    """Read-only mapping of trip_id to its stop-time entries."""

    def __init__(self, trips: dict[str, list[StopTimeEntry]]) -> None:
        self._trips = trips
        self._stop_sets: dict[str, frozenset[str]] = {
            trip_id: frozenset(entry.stop_id for entry in entries)
            for trip_id, entries in trips.items()
        }

    def __getitem__(self, trip_id: str) -> list[StopTimeEntry]:
        # Copy so callers cannot reorder the shared list.
        return list(self._trips[trip_id])

    def __iter__(self) -> Iterator[str]:
        return iter(self._trips)

    def __len__(self) -> int:
        return len(self._trips)

    def stop_ids(self, trip_id: str) -> frozenset[str]:
        """Set of stop identifiers visited by *trip_id*."""
        return self._stop_sets[trip_id]

    def serves(self, trip_id: str, *stop_ids: str) -> bool:
        stop_set = self._stop_sets[trip_id]
        return all(stop_id in stop_set for stop_id in stop_ids)


def parse_stop_sequence(series: pd.Series) -> pd.Series:
    """Convert ``stop_sequence`` strings to nullable integers.

    Blank, non-numeric, fractional, negative, infinite and out of int64 range
    values become ``<NA>``.
    """
    numeric = pd.to_numeric(series.str.strip(), errors="coerce").astype("float64")
    valid = (
        np.isfinite(numeric)
        & (numeric >= 0)
        & (numeric < INT64_LIMIT)
        & (numeric == numeric.round())
    )
    return numeric.where(valid).astype("Int64")


def build_trip_index(table: Table) -> TripIndex:
    """Group a parsed *stop_times* table by trip.

    Rows whose ``stop_sequence`` is missing or not a non-negative integer are
    dropped one by one; the rest of the trip is kept.

    Args:
        table: Table with ``trip_id``, ``stop_id`` and ``stop_sequence``.
            ``arrival_time`` and ``departure_time`` are passed through.

    Returns:
        The populated :class:`TripIndex`.

    Raises:
        MalformedTableError: A required column is missing.
    """
    table.require_columns(*REQUIRED_STOP_TIME_COLUMNS)
    df = table.frame

    sequence = parse_stop_sequence(df["stop_sequence"])
    bad_mask = sequence.isna()
    bad_count = int(bad_mask.sum())
    if bad_count > 0:
        logger.warning(
            "%s: skipped %d rows with missing or invalid stop_sequence. Sample trips: %s",
            table.name,
            bad_count,
            df.loc[bad_mask, "trip_id"].head(20).tolist(),
        )

    kept = df.loc[~bad_mask]
    kept_sequence = sequence[~bad_mask]
    blanks = repeat("")
    arrivals = kept["arrival_time"] if table.has_column("arrival_time") else blanks
    departures = kept["departure_time"] if table.has_column("departure_time") else blanks

    trips: dict[str, list[StopTimeEntry]] = {}
    for trip_id, stop_id, seq, arrival, departure in zip(
        kept["trip_id"], kept["stop_id"], kept_sequence, arrivals, departures
    ):
        trips.setdefault(trip_id, []).append(
            StopTimeEntry(
                trip_id=trip_id,
                stop_id=stop_id,
                stop_sequence=int(seq),
                arrival_time=arrival,
                departure_time=departure,
            )
        )

    index = TripIndex(trips)
    logger.info("Indexed %d trips (%d stop times) from %s.", len(index), len(kept), table.name)
    return index
