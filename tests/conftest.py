from __future__ import annotations

from pathlib import Path

import pytest

from transit_route_mapper.gtfs_tables import load_gtfs_tables, parse_table_text
from transit_route_mapper.stop_index import StopIndex, build_stop_index
from transit_route_mapper.trip_index import TripIndex, build_trip_index

FIXTURE_GTFS_DIR = Path(__file__).parent / "fixtures" / "gtfs"


def make_trip_index(rows: str) -> TripIndex:
    """Build a trip index from ``trip_id,stop_id,stop_sequence`` lines."""
    return build_trip_index(
        parse_table_text("trip_id,stop_id,stop_sequence\n" + rows, name="stop_times.txt")
    )


@pytest.fixture
def fixture_dir() -> Path:
    return FIXTURE_GTFS_DIR


@pytest.fixture
def sample_stop_index() -> StopIndex:
    return build_stop_index(load_gtfs_tables(FIXTURE_GTFS_DIR)["stops"])


@pytest.fixture
def sample_trip_index() -> TripIndex:
    return build_trip_index(load_gtfs_tables(FIXTURE_GTFS_DIR)["stop_times"])
