"""Rough distance and travel time along an extracted route.

Distance is the sum of great-circle hops between consecutive stops, not the
street path, so it underestimates what the vehicle actually drives. Time is
that distance at a flat average speed. Hops that touch a stop with unknown
coordinates are left out of both figures and counted in
:attr:`TravelEstimate.skipped_hops`.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from transit_route_mapper.stop_index import Stop

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
DEFAULT_AVERAGE_SPEED_KMH = 20.0


@dataclass(frozen=True)
class TravelEstimate:
    distance_km: float
    minutes: float
    hops: int
    speed_kmh: float
    skipped_hops: int = 0


def haversine_km(
    lat1: np.ndarray, lon1: np.ndarray, lat2: np.ndarray, lon2: np.ndarray
) -> np.ndarray:
    """Great-circle distance (kilometres) between arrays of lat/lon in degrees."""
    lat1r = np.deg2rad(lat1)
    lon1r = np.deg2rad(lon1)
    lat2r = np.deg2rad(lat2)
    lon2r = np.deg2rad(lon2)

    dlat = lat2r - lat1r
    dlon = lon2r - lon1r

    a = np.sin(dlat / 2.0) ** 2 + np.cos(lat1r) * np.cos(lat2r) * np.sin(dlon / 2.0) ** 2
    c = 2.0 * np.arcsin(np.sqrt(a))
    return EARTH_RADIUS_KM * c


def estimate_travel(
    stops: Sequence[Stop], speed_kmh: float = DEFAULT_AVERAGE_SPEED_KMH
) -> TravelEstimate:
    """Estimate distance and riding time over consecutive stops.

    Args:
        stops: Stops in travel order.
        speed_kmh: Assumed average speed.

    Returns:
        A :class:`TravelEstimate`; zero distance for fewer than two stops.

    Raises:
        ValueError: *speed_kmh* is not positive.
    """
    if speed_kmh <= 0:
        raise ValueError(f"Average speed must be positive, got {speed_kmh}.")

    if len(stops) < 2:
        return TravelEstimate(distance_km=0.0, minutes=0.0, hops=0, speed_kmh=speed_kmh)

    lats = np.array([stop.stop_lat for stop in stops], dtype=float)
    lons = np.array([stop.stop_lon for stop in stops], dtype=float)
    known = np.array([stop.has_coordinates for stop in stops], dtype=bool)
    hop_km = haversine_km(lats[:-1], lons[:-1], lats[1:], lons[1:])
    usable = known[:-1] & known[1:]

    skipped = int((~usable).sum())
    if skipped > 0:
        logger.warning(
            "Left %d hop(s) out of the estimate; stops without coordinates: %s",
            skipped,
            [stop.stop_id for stop in stops if not stop.has_coordinates],
        )

    distance_km = float(hop_km[usable].sum())
    return TravelEstimate(
        distance_km=distance_km,
        minutes=distance_km / speed_kmh * 60.0,
        hops=int(usable.sum()),
        speed_kmh=speed_kmh,
        skipped_hops=skipped,
    )
