"""Renderer-agnostic description of an extracted route.

A payload is an ordered list of points with a role each, plus the mean of
their coordinates as the map center. Building it is pure: the same stops
always give the same payload, down to the last bit of the floats.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from transit_route_mapper.errors import EmptyRouteError, StopNotFoundError
from transit_route_mapper.stop_index import Stop, StopIndex

ROLE_ORIGIN = "origin"
ROLE_INTERMEDIATE = "intermediate"
ROLE_DESTINATION = "destination"


@dataclass(frozen=True)
class MapPoint:
    role: str
    stop_id: str
    name: str
    lat: float
    lon: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "id": self.stop_id,
            "name": self.name,
            "lat": self.lat,
            "lon": self.lon,
        }


@dataclass(frozen=True)
class MapPayload:
    points: tuple[MapPoint, ...]
    center: tuple[float, float]

    @property
    def roles(self) -> list[str]:
        return [point.role for point in self.points]

    @property
    def coordinates(self) -> list[tuple[float, float]]:
        return [(point.lat, point.lon) for point in self.points]

    def to_dict(self) -> dict[str, Any]:
        return {
            "points": [point.to_dict() for point in self.points],
            "center": {"lat": self.center[0], "lon": self.center[1]},
        }


def assign_role(position: int, count: int) -> str:
    """Role of the stop at *position* in a route of *count* stops.

    A single-stop route has only an origin; the destination role is never
    given to the first stop.
    """
    if position == 0:
        return ROLE_ORIGIN
    if position == count - 1:
        return ROLE_DESTINATION
    return ROLE_INTERMEDIATE


def build_payload(stops: Sequence[Stop]) -> MapPayload:
    """Build the map payload for an ordered list of stops.

    Raises:
        EmptyRouteError: *stops* is empty.
    """
    if not stops:
        raise EmptyRouteError("Cannot build a map payload for a route with no stops.")

    count = len(stops)
    points = tuple(
        MapPoint(
            role=assign_role(position, count),
            stop_id=stop.stop_id,
            name=stop.stop_name,
            lat=stop.stop_lat,
            lon=stop.stop_lon,
        )
        for position, stop in enumerate(stops)
    )
    center_lat = sum(point.lat for point in points) / count
    center_lon = sum(point.lon for point in points) / count
    return MapPayload(points=points, center=(center_lat, center_lon))


def resolve_route_stops(stop_index: StopIndex, stop_ids: Iterable[str]) -> list[Stop]:
    """Look up each extracted identifier in the stop index.

    Raises:
        StopNotFoundError: A stop_times row refers to a stop missing from *stops*.
    """
    stops: list[Stop] = []
    for stop_id in stop_ids:
        stop = stop_index.find_by_id(stop_id)
        if stop is None:
            raise StopNotFoundError(
                stop_id, f"Stop '{stop_id}' is used by stop_times but missing from stops."
            )
        stops.append(stop)
    return stops
