"""
Per-leg route settings handed to the mapping collaborator.
"""

from typing import Optional

from pickup_backend.domain.models import Route


def trip_departure_time(route: Route, trip_number: int) -> Optional[str]:
    """
    Leg 1 leaves at departure_time. Later legs leave at return_departure_time when
    set; None means "right after the previous leg arrives back", which only the
    caller can compute.
    """
    if trip_number <= 1:
        return route.departure_time
    return route.return_departure_time


def directions_avoid(route: Route) -> Optional[str]:
    """Value for the directions `avoid` query parameter, e.g. "highways,tolls"."""
    avoid = []
    if route.avoid_highways:
        avoid.append("highways")
    if route.avoid_tolls:
        avoid.append("tolls")
    return ",".join(avoid) if avoid else None
