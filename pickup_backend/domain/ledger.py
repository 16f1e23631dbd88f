"""
Pickup assignment ledger. One instance per (venue, business date) snapshot.

Invariants kept after every operation:
- within a (route, trip_number) leg, order_index is 0..n-1 with no gaps;
- an attendee is a passenger of at most one route of the snapshot
  (possibly on several legs of that route: outbound + returns).

Operations never raise for domain failures; they return a Result.
"""

import uuid
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from pickup_backend.domain.errors import ErrorKind, Result
from pickup_backend.domain.models import (
    DEFAULT_ROUTE_CAPACITY,
    Attendee,
    Passenger,
    PassengerEntry,
    Route,
    RouteRef,
)

_UNSET = object()


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"


class PickupAssignmentLedger:
    def __init__(
        self,
        venue_id: str,
        business_date: date,
        routes: Iterable[Route] = (),
    ) -> None:
        self.venue_id = venue_id
        self.business_date = business_date
        # dict keeps creation order; suggestion pairing relies on it
        self._routes: Dict[str, Route] = {}
        for route in routes:
            self._routes[route.route_id] = route

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def routes(self) -> List[Route]:
        return list(self._routes.values())

    def get_route(self, route_id: str) -> Optional[Route]:
        return self._routes.get(route_id)

    def leg(self, route_id: str, trip_number: int) -> List[Passenger]:
        route = self._routes.get(route_id)
        if route is None:
            return []
        return _leg(route, trip_number)

    def legs(self, route_id: str) -> Dict[int, List[Passenger]]:
        """All legs of a route, empty ones included, keyed by trip_number."""
        route = self._routes.get(route_id)
        if route is None:
            return {}
        return {trip: _leg(route, trip) for trip in range(1, route.trip_count + 1)}

    def passengers_of(self, route_id: str) -> List[Passenger]:
        route = self._routes.get(route_id)
        if route is None:
            return []
        return sorted(route.passengers, key=lambda p: (p.trip_number, p.order_index))

    def find_existing_assignment(
        self,
        profile_id: str,
        exclude_route_id: Optional[str] = None,
    ) -> Optional[RouteRef]:
        for route in self._routes.values():
            if route.route_id == exclude_route_id:
                continue
            trips = sorted({p.trip_number for p in route.passengers if p.profile_id == profile_id})
            if trips:
                return RouteRef(
                    route_id=route.route_id,
                    driver_profile_id=route.driver_profile_id,
                    trip_numbers=tuple(trips),
                )
        return None

    def capacity_warnings(self, route_id: str) -> List[int]:
        """Trip numbers whose passenger count exceeds the route capacity. Advisory only."""
        route = self._routes.get(route_id)
        if route is None:
            return []
        return [
            trip
            for trip in range(1, route.trip_count + 1)
            if len(_leg(route, trip)) > route.capacity
        ]

    def available_attendees(
        self,
        attendees: Sequence[Attendee],
        route_id: str,
        trip_number: int,
    ) -> List[Attendee]:
        """Eligible attendees not yet on this leg (the "add to route" picker)."""
        on_leg = {p.profile_id for p in self.leg(route_id, trip_number)}
        return [a for a in attendees if a.is_eligible and a.profile_id not in on_leg]

    def unassigned_attendees(self, attendees: Sequence[Attendee]) -> List[Attendee]:
        assigned = {p.profile_id for r in self._routes.values() for p in r.passengers}
        return [a for a in attendees if a.is_eligible and a.profile_id not in assigned]

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    def create_route(
        self,
        route_id: Optional[str] = None,
        driver_profile_id: Optional[str] = None,
        round_trips: int = 0,
        capacity: int = DEFAULT_ROUTE_CAPACITY,
        departure_time: Optional[str] = None,
        return_departure_time: Optional[str] = None,
        avoid_highways: bool = False,
        avoid_tolls: bool = False,
    ) -> Result:
        invalid = _check_route_settings(round_trips, capacity)
        if invalid is not None:
            return invalid
        if route_id is None:
            route_id = uuid.uuid4().hex
        elif route_id in self._routes:
            return Result.failure(
                ErrorKind.INVALID_ROUTE_SETTINGS, f"Route {route_id} already exists"
            )
        self._routes[route_id] = Route(
            route_id=route_id,
            venue_id=self.venue_id,
            business_date=self.business_date,
            driver_profile_id=driver_profile_id,
            round_trips=round_trips,
            capacity=capacity,
            departure_time=departure_time,
            return_departure_time=return_departure_time,
            avoid_highways=avoid_highways,
            avoid_tolls=avoid_tolls,
        )
        return Result.success(route_id=route_id)

    def update_route(
        self,
        route_id: str,
        driver_profile_id=_UNSET,
        round_trips: Optional[int] = None,
        capacity: Optional[int] = None,
        departure_time=_UNSET,
        return_departure_time=_UNSET,
        avoid_highways: Optional[bool] = None,
        avoid_tolls: Optional[bool] = None,
    ) -> Result:
        """
        Staff edit of route settings. Nullable fields use a sentinel so that
        None clears them. Shrinking round_trips drops passengers of the legs
        that no longer exist.
        """
        route = self._routes.get(route_id)
        if route is None:
            return _route_not_found(route_id)
        invalid = _check_route_settings(
            route.round_trips if round_trips is None else round_trips,
            route.capacity if capacity is None else capacity,
        )
        if invalid is not None:
            return invalid

        if driver_profile_id is not _UNSET:
            route.driver_profile_id = driver_profile_id
        if capacity is not None:
            route.capacity = capacity
        if departure_time is not _UNSET:
            route.departure_time = departure_time
        if return_departure_time is not _UNSET:
            route.return_departure_time = return_departure_time
        if avoid_highways is not None:
            route.avoid_highways = avoid_highways
        if avoid_tolls is not None:
            route.avoid_tolls = avoid_tolls
        if round_trips is not None:
            route.round_trips = round_trips
            route.passengers = [p for p in route.passengers if route.has_trip(p.trip_number)]
        return Result.success(route_id=route_id)

    def delete_route(self, route_id: str) -> Result:
        """Removes the route and every passenger on any of its legs."""
        if self._routes.pop(route_id, None) is None:
            return _route_not_found(route_id)
        return Result.success(route_id=route_id)

    # ------------------------------------------------------------------
    # Passengers
    # ------------------------------------------------------------------

    def add_passenger(self, route_id: str, profile_id: str, trip_number: int) -> Result:
        route = self._routes.get(route_id)
        if route is None:
            return _route_not_found(route_id)
        if not route.has_trip(trip_number):
            return _trip_out_of_range(route, trip_number)
        leg = _leg(route, trip_number)
        if any(p.profile_id == profile_id for p in leg):
            return Result.success(route_id=route_id)

        existing = self.find_existing_assignment(profile_id, exclude_route_id=route_id)
        if existing is not None:
            return Result.failure(
                ErrorKind.ALREADY_ASSIGNED_ELSEWHERE,
                f"{profile_id} is already assigned to route {existing.route_id}",
                conflicting_route_id=existing.route_id,
            )

        route.passengers.append(
            Passenger(
                route_id=route_id,
                profile_id=profile_id,
                trip_number=trip_number,
                order_index=len(leg),
            )
        )
        return Result.success(route_id=route_id)

    def remove_passenger(self, route_id: str, profile_id: str) -> Result:
        """Detaches the attendee from every leg of the route."""
        route = self._routes.get(route_id)
        if route is None:
            return _route_not_found(route_id)
        _detach(route, profile_id)
        return Result.success(route_id=route_id)

    def move_attendee(self, profile_id: str, to_route_id: str, to_trip_number: int) -> Result:
        """
        Confirmed move: evict the attendee from any other route of the date,
        then append to the target leg. Target is validated before anything changes.
        """
        target = self._routes.get(to_route_id)
        if target is None:
            return _route_not_found(to_route_id)
        if not target.has_trip(to_trip_number):
            return _trip_out_of_range(target, to_trip_number)

        for route in self._routes.values():
            if route.route_id != to_route_id:
                _detach(route, profile_id)
        return self.add_passenger(to_route_id, profile_id, to_trip_number)

    def move_passenger(
        self,
        from_route_id: str,
        to_route_id: str,
        profile_id: str,
        to_trip_number: int,
    ) -> Result:
        """Second step of the conflict contract once staff confirmed the move."""
        source = self._routes.get(from_route_id)
        if source is None:
            return _route_not_found(from_route_id)
        if not any(p.profile_id == profile_id for p in source.passengers):
            return _passenger_not_found(from_route_id, profile_id)
        return self.move_attendee(profile_id, to_route_id, to_trip_number)

    def insert_passenger_at(
        self,
        route_id: str,
        profile_id: str,
        trip_number: int,
        index: int,
        from_trip_number: Optional[int] = None,
    ) -> Result:
        """
        Drag-and-drop: take the attendee out of `from_trip_number` (if given) and
        of the target leg, then insert at `index` of the target leg. Index is clamped.
        """
        route = self._routes.get(route_id)
        if route is None:
            return _route_not_found(route_id)
        if not route.has_trip(trip_number):
            return _trip_out_of_range(route, trip_number)
        existing = self.find_existing_assignment(profile_id, exclude_route_id=route_id)
        if existing is not None:
            return Result.failure(
                ErrorKind.ALREADY_ASSIGNED_ELSEWHERE,
                f"{profile_id} is already assigned to route {existing.route_id}",
                conflicting_route_id=existing.route_id,
            )

        touched = {trip_number}
        if from_trip_number is not None:
            touched.add(from_trip_number)
        route.passengers = [
            p
            for p in route.passengers
            if not (p.profile_id == profile_id and p.trip_number in touched)
        ]
        for trip in touched:
            _reindex(route, trip)

        leg = _leg(route, trip_number)
        index = max(0, min(index, len(leg)))
        leg.insert(
            index,
            Passenger(route_id=route_id, profile_id=profile_id, trip_number=trip_number, order_index=index),
        )
        for i, p in enumerate(leg):
            p.order_index = i
        route.passengers = [p for p in route.passengers if p.trip_number != trip_number] + leg
        return Result.success(route_id=route_id)

    def replace_passengers(self, route_id: str, entries: Sequence[PassengerEntry]) -> Result:
        """
        Route form save: the route ends up with exactly `entries`, ordered per leg
        as listed. Listed attendees are evicted from every other route.
        """
        route = self._routes.get(route_id)
        if route is None:
            return _route_not_found(route_id)
        for entry in entries:
            if not route.has_trip(entry.trip_number):
                return _trip_out_of_range(route, entry.trip_number)

        listed = {e.profile_id for e in entries}
        for other in self._routes.values():
            if other.route_id == route_id:
                continue
            for profile_id in listed:
                _detach(other, profile_id)

        passengers: List[Passenger] = []
        next_index: Dict[int, int] = {}
        seen = set()
        for entry in entries:
            key = (entry.profile_id, entry.trip_number)
            if key in seen:
                continue
            seen.add(key)
            order_index = next_index.get(entry.trip_number, 0)
            next_index[entry.trip_number] = order_index + 1
            passengers.append(
                Passenger(
                    route_id=route_id,
                    profile_id=entry.profile_id,
                    trip_number=entry.trip_number,
                    order_index=order_index,
                )
            )
        route.passengers = passengers
        return Result.success(route_id=route_id)

    def clear_passengers(self, route_id: str) -> Result:
        route = self._routes.get(route_id)
        if route is None:
            return _route_not_found(route_id)
        route.passengers = []
        return Result.success(route_id=route_id)

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def reorder(self, route_id: str, trip_number: int, new_order: Sequence[str]) -> Result:
        route = self._routes.get(route_id)
        if route is None:
            return _route_not_found(route_id)
        if not route.has_trip(trip_number):
            return _trip_out_of_range(route, trip_number)

        leg = _leg(route, trip_number)
        by_profile = {p.profile_id: p for p in leg}
        if len(new_order) != len(set(new_order)) or set(new_order) != set(by_profile):
            missing = sorted(set(by_profile) - set(new_order))
            extra = sorted(set(new_order) - set(by_profile))
            return Result.failure(
                ErrorKind.INVALID_PERMUTATION,
                f"New order must be a permutation of the leg (missing={missing}, extra={extra})",
            )

        for i, profile_id in enumerate(new_order):
            by_profile[profile_id].order_index = i
        return Result.success(route_id=route_id)

    def move_one_step(
        self,
        route_id: str,
        trip_number: int,
        profile_id: str,
        direction: Direction,
    ) -> Result:
        try:
            direction = Direction(direction)
        except ValueError:
            return Result.failure(
                ErrorKind.INVALID_DIRECTION, f"direction must be 'up' or 'down', got {direction!r}"
            )
        route = self._routes.get(route_id)
        if route is None:
            return _route_not_found(route_id)
        if not route.has_trip(trip_number):
            return _trip_out_of_range(route, trip_number)

        leg = _leg(route, trip_number)
        position = next((i for i, p in enumerate(leg) if p.profile_id == profile_id), None)
        if position is None:
            return _passenger_not_found(route_id, profile_id)

        neighbour = position - 1 if direction == Direction.UP else position + 1
        if neighbour < 0 or neighbour >= len(leg):
            return Result.success(route_id=route_id)
        leg[position].order_index, leg[neighbour].order_index = neighbour, position
        return Result.success(route_id=route_id)


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------


def _leg(route: Route, trip_number: int) -> List[Passenger]:
    return sorted(
        (p for p in route.passengers if p.trip_number == trip_number),
        key=lambda p: p.order_index,
    )


def _reindex(route: Route, trip_number: int) -> None:
    for i, p in enumerate(_leg(route, trip_number)):
        p.order_index = i


def _detach(route: Route, profile_id: str) -> None:
    affected = {p.trip_number for p in route.passengers if p.profile_id == profile_id}
    if not affected:
        return
    route.passengers = [p for p in route.passengers if p.profile_id != profile_id]
    for trip in affected:
        _reindex(route, trip)


def _check_route_settings(round_trips: int, capacity: int) -> Optional[Result]:
    if round_trips < 0:
        return Result.failure(
            ErrorKind.INVALID_ROUTE_SETTINGS, f"round_trips must be >= 0, got {round_trips}"
        )
    if capacity < 1:
        return Result.failure(
            ErrorKind.INVALID_ROUTE_SETTINGS, f"capacity must be >= 1, got {capacity}"
        )
    return None


def _route_not_found(route_id: str) -> Result:
    return Result.failure(ErrorKind.ROUTE_NOT_FOUND, f"Route {route_id} not found")


def _passenger_not_found(route_id: str, profile_id: str) -> Result:
    return Result.failure(
        ErrorKind.PASSENGER_NOT_FOUND, f"{profile_id} is not a passenger of route {route_id}"
    )


def _trip_out_of_range(route: Route, trip_number: int) -> Result:
    return Result.failure(
        ErrorKind.TRIP_NUMBER_OUT_OF_RANGE,
        f"trip_number must be between 1 and {route.trip_count}, got {trip_number}",
    )
