"""Write a map payload to a standalone Leaflet HTML page with folium."""

from __future__ import annotations

import html
import logging
import os
from pathlib import Path
from typing import Union

import folium

from transit_route_mapper.map_payload import (
    ROLE_DESTINATION,
    ROLE_ORIGIN,
    MapPayload,
    MapPoint,
)

logger = logging.getLogger(__name__)

DEFAULT_ZOOM = 14
ROUTE_COLOR = "#2563eb"
ROLE_COLORS = {ROLE_ORIGIN: "green", ROLE_DESTINATION: "red"}


def _popup_html(point: MapPoint) -> str:
    return (
        f"<b>{html.escape(point.name)}</b><br>"
        f"ID: {html.escape(point.stop_id)}<br>{point.role.title()}"
    )


def build_route_map(
    payload: MapPayload,
    zoom_start: int = DEFAULT_ZOOM,
    draw_line: bool = True,
    tiles: str = "OpenStreetMap",
) -> folium.Map:
    """Create the folium map for *payload* without writing it."""
    fmap = folium.Map(location=list(payload.center), zoom_start=zoom_start, tiles=tiles)

    if draw_line and len(payload.points) > 1:
        folium.PolyLine(
            locations=[list(coord) for coord in payload.coordinates],
            color=ROUTE_COLOR,
            weight=5,
            opacity=0.8,
        ).add_to(fmap)

    for point in payload.points:
        popup = folium.Popup(_popup_html(point), max_width=250)
        color = ROLE_COLORS.get(point.role)
        if color is None:
            folium.CircleMarker(
                location=[point.lat, point.lon],
                radius=5,
                color=ROUTE_COLOR,
                fill=True,
                fill_opacity=0.9,
                tooltip=html.escape(point.name),
                popup=popup,
            ).add_to(fmap)
        else:
            folium.Marker(
                location=[point.lat, point.lon],
                tooltip=html.escape(point.name),
                popup=popup,
                icon=folium.Icon(color=color),
            ).add_to(fmap)

    if len(payload.points) > 1:
        fmap.fit_bounds([list(coord) for coord in payload.coordinates])
    return fmap


def render_route_map(
    payload: MapPayload,
    output_path: Union[str, "os.PathLike[str]"],
    zoom_start: int = DEFAULT_ZOOM,
    draw_line: bool = True,
) -> Path:
    """Save *payload* as an HTML map and return the written path."""
    out = Path(output_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    build_route_map(payload, zoom_start=zoom_start, draw_line=draw_line).save(str(out))
    logger.info("Wrote map: %s", out)
    return out
