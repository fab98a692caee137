from __future__ import annotations

import pytest

from conftest import make_trip_index
from transit_route_mapper.errors import InvalidDirectionError, RouteNotFoundError
from transit_route_mapper.route_extractor import (
    FirstCoveringTrip,
    TripSelectionStrategy,
    extract_route,
    extract_trip_route,
)


@pytest.fixture
def abcd_index():
    # Rows deliberately out of sequence order.
    return make_trip_index("T1,C,3\nT1,A,1\nT1,D,4\nT1,B,2\n")


def test_extracts_inclusive_slice_in_sequence_order(abcd_index) -> None:
    assert extract_route(abcd_index, "B", "D") == ["B", "C", "D"]
    assert extract_route(abcd_index, "A", "D") == ["A", "B", "C", "D"]


def test_reverse_direction_raises(abcd_index) -> None:
    with pytest.raises(InvalidDirectionError) as excinfo:
        extract_route(abcd_index, "D", "B")
    assert excinfo.value.trip_id == "T1"
    assert (excinfo.value.origin_id, excinfo.value.dest_id) == ("D", "B")


def test_extraction_is_deterministic(abcd_index) -> None:
    results = [extract_route(abcd_index, "A", "C") for _ in range(5)]
    assert all(result == ["A", "B", "C"] for result in results)


def test_extraction_does_not_reorder_the_index(abcd_index) -> None:
    extract_route(abcd_index, "A", "D")
    assert [e.stop_id for e in abcd_index["T1"]] == ["C", "A", "D", "B"]


def test_no_covering_trip_raises() -> None:
    index = make_trip_index("T1,A,1\nT1,B,2\nT2,C,1\nT2,D,2\n")
    with pytest.raises(RouteNotFoundError) as excinfo:
        extract_route(index, "A", "D")
    assert (excinfo.value.origin_id, excinfo.value.dest_id) == ("A", "D")


def test_unknown_stop_raises_route_not_found(abcd_index) -> None:
    with pytest.raises(RouteNotFoundError):
        extract_route(abcd_index, "A", "Z")


def test_first_covering_trip_wins_over_shorter_one() -> None:
    """T1 is longer, but it comes first, so it is the one used."""
    index = make_trip_index("T1,A,1\nT1,X,2\nT1,Y,3\nT1,C,4\nT2,A,1\nT2,C,2\n")
    route = extract_trip_route(index, "A", "C")
    assert route.trip_id == "T1"
    assert route.stop_ids == ["A", "X", "Y", "C"]

    swapped = make_trip_index("T2,A,1\nT2,C,2\nT1,A,1\nT1,X,2\nT1,Y,3\nT1,C,4\n")
    assert extract_trip_route(swapped, "A", "C").stop_ids == ["A", "C"]


def test_first_covering_trip_is_chosen_regardless_of_direction() -> None:
    """Selection ignores direction: a later forward trip is not consulted."""
    index = make_trip_index("OUT,B,1\nOUT,A,2\nIN,A,1\nIN,B,2\n")
    with pytest.raises(InvalidDirectionError) as excinfo:
        extract_route(index, "A", "B")
    assert excinfo.value.trip_id == "OUT"


def test_same_origin_and_destination() -> None:
    index = make_trip_index("T1,A,1\nT1,B,2\n")
    assert extract_route(index, "B", "B") == ["B"]


def test_duplicate_sequence_numbers_keep_row_order() -> None:
    forward = make_trip_index("T1,A,1\nT1,B,2\nT1,C,2\nT1,D,3\n")
    assert extract_route(forward, "A", "D") == ["A", "B", "C", "D"]

    swapped = make_trip_index("T1,A,1\nT1,C,2\nT1,B,2\nT1,D,3\n")
    assert extract_route(swapped, "A", "D") == ["A", "C", "B", "D"]


def test_loop_trip_uses_first_destination_after_origin() -> None:
    index = make_trip_index("L,A,1\nL,B,2\nL,C,3\nL,A,4\nL,D,5\n")
    assert extract_route(index, "B", "A") == ["B", "C", "A"]
    assert extract_route(index, "A", "C") == ["A", "B", "C"]


def test_extracted_entries_carry_sequence_numbers(abcd_index) -> None:
    route = extract_trip_route(abcd_index, "B", "D")
    assert [e.stop_sequence for e in route.entries] == [2, 3, 4]


def test_custom_strategy_is_used() -> None:
    class LastCoveringTrip(TripSelectionStrategy):
        def select(self, trip_index, origin_id, dest_id):
            chosen = None
            for trip_id in trip_index:
                if trip_index.serves(trip_id, origin_id, dest_id):
                    chosen = trip_id
            if chosen is None:
                raise RouteNotFoundError(origin_id, dest_id)
            return chosen, trip_index[chosen]

    index = make_trip_index("T1,A,1\nT1,C,2\nT2,A,1\nT2,B,2\nT2,C,3\n")
    assert extract_route(index, "A", "C", strategy=FirstCoveringTrip()) == ["A", "C"]
    assert extract_route(index, "A", "C", strategy=LastCoveringTrip()) == ["A", "B", "C"]


def test_sample_feed_routes(sample_trip_index) -> None:
    assert extract_route(sample_trip_index, "105", "120") == ["105", "110", "120"]
    assert extract_route(sample_trip_index, "105", "130") == ["105", "130"]
    assert extract_route(sample_trip_index, "130", "200") == ["130", "200"]
    with pytest.raises(InvalidDirectionError):
        extract_route(sample_trip_index, "120", "105")
    with pytest.raises(RouteNotFoundError):
        extract_route(sample_trip_index, "200", "105")
