from __future__ import annotations

import io

import pytest

from transit_route_mapper.dataset import TransitDataset
from transit_route_mapper.errors import (
    InvalidDirectionError,
    RouteNotFoundError,
    StopNotFoundError,
)


@pytest.fixture
def dataset(fixture_dir) -> TransitDataset:
    return TransitDataset.from_folder(fixture_dir)


def test_guelph_scenario(dataset) -> None:
    """Origin 105 to destination 120 on trip T1."""
    result = dataset.find_route("105", "120")

    assert result.trip_id == "T1"
    assert result.stop_ids == ["105", "110", "120"]
    assert result.origin.stop_id == "105"
    assert result.destination.stop_id == "120"
    assert [p.stop_id for p in result.payload.points] == ["105", "110", "120"]
    assert result.payload.roles == ["origin", "intermediate", "destination"]
    assert result.payload.center == pytest.approx((43.54, -80.23))


def test_queries_by_name(dataset) -> None:
    result = dataset.find_route("guelph central", "University")
    assert result.stop_ids == ["105", "110", "120"]


def test_errors_propagate(dataset) -> None:
    with pytest.raises(StopNotFoundError):
        dataset.find_route("Nowhere", "120")
    with pytest.raises(InvalidDirectionError):
        dataset.find_route("120", "105")
    with pytest.raises(RouteNotFoundError):
        dataset.find_route("Westmount", "105")


def test_from_sources_with_streams() -> None:
    stops = io.StringIO("stop_id,stop_name,stop_lat,stop_lon\nA,Alpha,1,1\nB,Beta,3,3\n")
    stop_times = io.StringIO("trip_id,stop_id,stop_sequence\nT,B,2\nT,A,1\n")

    dataset = TransitDataset.from_sources(stops, stop_times)
    result = dataset.find_route("alpha", "beta")

    assert result.stop_ids == ["A", "B"]
    assert result.payload.center == (2.0, 2.0)


def test_trip_through_unknown_stop_raises() -> None:
    stops = io.StringIO("stop_id,stop_name\nA,Alpha\nC,Gamma\n")
    stop_times = io.StringIO("trip_id,stop_id,stop_sequence\nT,A,1\nT,Z,2\nT,C,3\n")

    dataset = TransitDataset.from_sources(stops, stop_times)
    with pytest.raises(StopNotFoundError) as excinfo:
        dataset.find_route("A", "C")
    assert excinfo.value.query == "Z"
