"""Typed failures raised by the route mapping tools.

Every component reports problems to its caller through one of these classes.
Nothing in the package converts them into default values; the command line
entry point decides how to present them.
"""

from __future__ import annotations

from typing import Optional


class RouteMapperError(Exception):
    """Base class for all route mapper failures."""


class MalformedTableError(RouteMapperError, ValueError):
    """A GTFS table is empty, unreadable, or missing a required column."""


class StopNotFoundError(RouteMapperError, LookupError):
    """A stop query matched neither an identifier nor a stop name."""

    def __init__(self, query: str, message: Optional[str] = None) -> None:
        self.query = query
        super().__init__(message or f"No matching stop found for '{query}'.")


class RouteNotFoundError(RouteMapperError, LookupError):
    """No single trip serves both the origin and the destination."""

    def __init__(self, origin_id: str, dest_id: str) -> None:
        self.origin_id = origin_id
        self.dest_id = dest_id
        super().__init__(f"No trip serves both stop '{origin_id}' and stop '{dest_id}'.")


class InvalidDirectionError(RouteMapperError, ValueError):
    """The destination comes before the origin in the selected trip."""

    def __init__(self, origin_id: str, dest_id: str, trip_id: str) -> None:
        self.origin_id = origin_id
        self.dest_id = dest_id
        self.trip_id = trip_id
        super().__init__(
            f"Trip '{trip_id}' visits stop '{dest_id}' before stop '{origin_id}'."
        )


class EmptyRouteError(RouteMapperError, ValueError):
    """A map payload was requested for a route with no stops."""
